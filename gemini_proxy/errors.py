"""Exceptions mapped to HTTP error responses."""


class ProxyError(Exception):
    """Base error carrying the HTTP status returned to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(ProxyError):
    status_code = 401


class InvalidRequestError(ProxyError):
    """Malformed, empty or unsupported request content."""

    status_code = 400


class ConfigurationError(ProxyError):
    """Server-side configuration is missing."""

    status_code = 500


class UpstreamError(ProxyError):
    """Attachment fetch, upload or generation failed."""

    status_code = 500
