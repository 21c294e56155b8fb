from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Login failed. Never tells whether the account exists, is unverified, or the password is wrong."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class InvalidOtpError(AuthenticationError):
    """OTP is missing, expired, or already consumed."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired OTP")


class InvalidTokenError(AuthenticationError):
    """Session token signature or payload is invalid."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Token has expired")


class TokenNotYetValidError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Token not active")


class AccessDeniedError(UserError):
    """Raised when a user tries to access a resource they do not have permission for."""


class ValidationError(UserError):
    """Raised when user input fails validation.

    `errors` optionally maps request locations (e.g. "[body.email]") to messages.
    """

    def __init__(self, message: str = "Validation Error", errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors


class DuplicateKeyError(ValidationError):
    """Raised when a username or email collides with an existing user."""

    def __init__(self, field: str) -> None:
        super().__init__("Validation Error", {f"[body.{field}]": f"{field.capitalize()} must be unique"})
        self.field = field


class SamePasswordError(ValidationError):
    def __init__(self) -> None:
        super().__init__("New password must be different from the current password")


class TransientError(Exception):
    """Storage connection or timeout failure. Not a user error and not retried within a request."""


class ConfigurationError(Exception):
    """Process misconfiguration that must prevent serving traffic."""


class EmailDeliveryError(Exception):
    """Email provider rejected or failed to accept a message."""
