"""Domain error taxonomy.

Every error a caller can act on carries a stable ``kind`` and a
human-readable ``message``. The exception handlers in ``main.py`` turn these
into ``{"error": kind, "message": message}`` JSON bodies; anything that is
not an ``AppError`` is reported as a generic ``InternalFault``.
"""
from typing import Any, Optional


class AppError(Exception):
    status_code = 500
    kind = "InternalFault"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message, **self.extra}


class ValidationError(AppError):
    status_code = 400
    kind = "ValidationError"
    default_message = "Validation failed"


class DuplicateEmail(AppError):
    status_code = 400
    kind = "DuplicateEmail"
    default_message = "User already exists with this email"


class NotFound(AppError):
    status_code = 404
    kind = "NotFound"
    default_message = "Not found"


class InvalidCredentials(AppError):
    status_code = 401
    kind = "InvalidCredentials"
    default_message = "Invalid credentials"


class NotVerified(AppError):
    status_code = 401
    kind = "NotVerified"
    default_message = "Please verify your email first"


class InvalidCode(AppError):
    status_code = 400
    kind = "InvalidCode"
    default_message = "Invalid or expired OTP"


class Unauthenticated(AppError):
    status_code = 401
    kind = "Unauthenticated"
    default_message = "Authentication required"


class InvalidToken(AppError):
    """Raised by the token service; surfaced to clients as Unauthenticated."""

    status_code = 401
    kind = "Unauthenticated"
    default_message = "Invalid or expired token"


class ResendTooSoon(AppError):
    status_code = 429
    kind = "ResendTooSoon"
    default_message = "Please wait before requesting another code"


class NotifyFailed(AppError):
    status_code = 500
    kind = "NotifyFailed"
    default_message = "Failed to send verification email"


class OAuthFailed(AppError):
    status_code = 502
    kind = "OAuthFailed"
    default_message = "Identity provider rejected the sign-in"


class OAuthNotConfigured(AppError):
    status_code = 503
    kind = "OAuthNotConfigured"
    default_message = "OAuth sign-in is not configured"


class InternalFault(AppError):
    pass
