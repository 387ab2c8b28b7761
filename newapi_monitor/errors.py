"""Error taxonomy for gateway queries.

Every failure surfaces as a GatewayError subclass. ``str(error)`` is the
single error string handed back to callers; nothing here is retried.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway query errors."""
    pass


class ValidationError(GatewayError, ValueError):
    """Raised when an input cannot be encoded into the outbound request."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class TransportError(GatewayError):
    """Raised when the request never produced a response."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Request failed: {detail}")


class HttpStatusError(GatewayError):
    """Raised when the gateway answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: Optional[str], body: str):
        self.status_code = status_code
        self.reason = reason or ""
        self.body = body

        status = f"{status_code} {self.reason}".rstrip()
        super().__init__(f"HTTP {status}: {body}")


class BodyReadError(GatewayError):
    """Raised when the response body could not be read to completion."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Read body failed: {detail}")


class ConfigError(GatewayError):
    """Raised for malformed monitor configuration files."""
    pass
