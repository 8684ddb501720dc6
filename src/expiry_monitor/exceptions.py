"""
Exception classes for the expiry monitor.

All exceptions inherit from MonitorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class MonitorError(Exception):
    """Base exception for all expiry monitor errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(MonitorError):
    """Raised when user input is rejected before any request is made."""

    pass


class NetworkError(MonitorError):
    """Raised when the bulk fetch fails (transport error or non-success status)."""

    pass


class ProtocolError(MonitorError):
    """Raised when the service returns a payload that is not a domain record."""

    pass


class CreateError(MonitorError):
    """Raised when the service rejects a create request."""

    pass


class DeleteError(MonitorError):
    """Raised when a delete request fails."""

    pass


class RefreshError(MonitorError):
    """Raised when a single-record refresh fails."""

    pass


class NotificationError(MonitorError):
    """Raised when the notification test trigger fails."""

    pass

