"""Exception hierarchy for the IELTS practice client.

Every error carries a ``message`` that is safe to show to the user as-is.
"""

from typing import Optional


class IeltsPrepError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str = "An unexpected error occurred. Please try again later."):
        self.message = message
        super().__init__(message)


class PermissionDenied(IeltsPrepError):
    """Raised when the microphone cannot be opened."""

    def __init__(self, message: str = "Microphone access denied. Please allow access to your microphone."):
        super().__init__(message)


class NetworkFailure(IeltsPrepError):
    """Raised when a single HTTP call to the backend fails."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        self.status = status
        self.url = url
        super().__init__(message)


class ValidationFailure(IeltsPrepError):
    """Raised when a required field is empty."""


class AuthenticationFailed(IeltsPrepError):
    """Raised when the backend rejects a login."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InvalidTransition(IeltsPrepError):
    """Raised when a response session is asked to do something its state forbids."""

    def __init__(self, action: str, status: str):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} while {status}")
