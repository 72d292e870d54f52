import hmac

from fastapi import Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from gemini_proxy.config import Settings, get_settings
from gemini_proxy.errors import ConfigurationError, ProxyError, UnauthorizedError


def verify_proxy_secret(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject the request unless it carries ``Bearer <PROXY_SECRET_KEY>``."""
    secret = settings.proxy_secret_key
    if not secret or authorization is None:
        raise UnauthorizedError("Unauthorized")

    expected = f"Bearer {secret}"
    if not hmac.compare_digest(authorization.encode("utf-8"), expected.encode("utf-8")):
        raise UnauthorizedError("Unauthorized")


def proxy_error_handler(request: Request, exc: ProxyError):
    if isinstance(exc, ConfigurationError):
        logger.critical(f"Configuration error: {exc.message}")
    elif exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")

    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


def global_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
        )

    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    message = getattr(exc, "message", None) or str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message},
    )


def add_exception_handler(app: FastAPI):
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, global_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)


def add_cors_middleware(app: FastAPI):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
