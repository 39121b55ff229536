"""
Error taxonomy for the authentication and session core.

Services raise these exceptions; FastAPI exception handlers registered in
main.py turn them into JSON error responses with a stable message, a stable
error code and an HTTP status.
"""

from typing import Any, Optional


class ConnectError(Exception):
    """
    Base exception for all Connect errors.

    Subclasses fix the HTTP status and default error code for one kind of
    failure. Messages are safe to show to end users.
    """

    status_code: int = 500
    default_code: str = "INTERNAL"
    default_message: str = "Something went wrong. Please try again."

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the API error envelope."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "status": self.status_code,
                "details": self.details,
            }
        }


class BadRequestError(ConnectError):
    """A required field is missing or malformed."""

    status_code = 400
    default_code = "BAD_REQUEST"
    default_message = "Bad Request"


class UnauthenticatedError(ConnectError):
    """Bad credentials, or an expired, invalid or revoked token."""

    status_code = 401
    default_code = "UNAUTHENTICATED"
    default_message = "You're not authenticated. Please signup or signin."


class NotFoundError(ConnectError):
    """No matching entity."""

    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "The requested resource was not found."


class ConflictError(ConnectError):
    """Duplicate username or email."""

    status_code = 409
    default_code = "CONFLICT"
    default_message = "This resource already exists."


class UnverifiedError(ConnectError):
    """Signup attempted without a matching verified email record."""

    status_code = 400
    default_code = "EMAIL_NOT_VERIFIED"
    default_message = "Email hasn't been verified yet. Please verify first."


class CodeMismatchError(ConnectError):
    """Wrong verification code; the client may retry."""

    status_code = 400
    default_code = "CODE_MISMATCH"
    default_message = "That code isn't valid. Please try again."

    def __init__(self, attempts_remaining: int):
        super().__init__(details={"attempts_remaining": attempts_remaining})
        self.attempts_remaining = attempts_remaining


class AttemptsExhaustedError(ConnectError):
    """No attempts left on the verification record; the client must request a new code."""

    status_code = 400
    default_code = "ATTEMPTS_EXHAUSTED"
    default_message = "No attempts left for this code. Please request a new code."


class InternalError(ConnectError):
    """Store, cache or signing failure."""

    status_code = 500
    default_code = "INTERNAL"
