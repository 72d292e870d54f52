"""Streaming proxy from a normalized chat request to the Gemini API."""

__version__ = "1.0.0"
