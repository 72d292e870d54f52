"""Main FastAPI application entry point."""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from gemini_proxy import __version__
from gemini_proxy.config import settings
from gemini_proxy.middleware import add_cors_middleware, add_exception_handler
from gemini_proxy.routers import chat_router
from gemini_proxy.services.session import close_session


# Configure loguru
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.log_level,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting Gemini chat proxy v{__version__}")
    logger.info(f"Server running on {settings.host}:{settings.port}")
    logger.info(f"Default model: {settings.default_model}")
    logger.info(f"Proxy: {settings.proxy or 'None'}")
    if not settings.gemini_api_key:
        logger.critical("GEMINI_API_KEY is not set, chat requests will fail")
    if not settings.proxy_secret_key:
        logger.warning("PROXY_SECRET_KEY is not set, all chat requests will be rejected")

    yield

    logger.info("Shutting down...")
    await close_session()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Gemini Chat Proxy",
    description="Streams Gemini generations for normalized multi-modal chat requests",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


add_cors_middleware(app)
add_exception_handler(app)

# Include routers
app.include_router(chat_router, tags=["Chat"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint for health check."""
    return {
        "service": "Gemini Chat Proxy",
        "version": __version__,
        "status": "healthy",
    }


def run():
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "gemini_proxy.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    run()
