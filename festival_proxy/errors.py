"""
Error types surfaced by the edge proxy.

Every request-level failure is a ``ProxyServiceError`` subclass that knows
its HTTP status and the JSON envelope returned to the caller. Registry
problems are raised at startup and never reach a client.
"""

from typing import Any, Dict


def exception_message(exc: BaseException) -> str:
    """Return the caller-facing message for an exception.

    Timeouts and some transport errors carry no message; the exception
    class name is used for those.
    """
    return str(exc) or exc.__class__.__name__


class ProxyServiceError(Exception):
    """Base class for failures rendered as JSON error envelopes."""

    status_code: int = 500
    error: str = "Internal server error"

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON body returned to the caller."""
        return {"error": self.error}


class UpstreamUnavailableError(ProxyServiceError):
    """The upstream could not be reached during transparent pass-through."""

    status_code = 502
    error = "Proxy error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message}


class FestivalNotFoundError(ProxyServiceError):
    """The upstream has no directory listing for the requested festival."""

    status_code = 404
    error = "Festival not found"

    def __init__(self, festival_id: str):
        super().__init__(f"Festival not found: {festival_id}")
        self.festival_id = festival_id

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error, "festival_id": self.festival_id}


class BeverageDiscoveryError(ProxyServiceError):
    """Fetching or parsing a festival directory listing raised."""

    status_code = 500
    error = "Failed to fetch beverage types"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.error, "message": self.message}


class RegistryError(Exception):
    """The festival registry could not be loaded or failed validation."""
