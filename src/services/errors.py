"""Domain exceptions raised by the services and mapped to HTTP responses."""

from typing import Dict, Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP status.

    Attributes:
        status_code: HTTP status the error is reported with
        error: Short machine-readable error code
        message: User-facing message
        errors: Optional field -> message mapping
    """

    status_code = 500
    error = "internal_error"
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when user-supplied fields fail validation."""

    status_code = 400
    error = "validation_error"
    default_message = "Invalid input"

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message, errors)


class InvalidCredentials(AppError):
    """Raised when login fails.

    The reason ("unknown_email", "password_mismatch" or "password_too_long")
    is kept for logging only and is never part of the response.
    """

    status_code = 401
    error = "invalid_credentials"
    default_message = "Invalid email or password"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__()


class AuthenticationRequired(AppError):
    status_code = 401
    error = "authentication_required"
    default_message = "Authentication required"


class PermissionDenied(AppError):
    status_code = 403
    error = "permission_denied"
    default_message = "Permission denied"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"
    default_message = "User not found"


class ConflictError(AppError):
    status_code = 409
    error = "conflict"
    default_message = "Email is already registered"


class StorageError(AppError):
    """Raised when the user file cannot be read, parsed or written."""

    status_code = 500
    error = "internal_error"
    default_message = "Internal server error"
