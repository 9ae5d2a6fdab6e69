"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every class carries a stable ``code`` so clients can branch on the
category without parsing messages.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found (or has expired)."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict | None = None,
        code: str = "VAL_VALIDATION_ERROR",
    ) -> None:
        self.details = details or {}
        super().__init__(message, code=code)


class OffensiveContentError(ValidationError):
    """Raised when the title or content is rejected by the content policy."""

    def __init__(
        self,
        message: str = "Inappropriate language detected in title or content",
    ) -> None:
        super().__init__(message, code="VAL_OFFENSIVE_CONTENT")


class AuthenticationError(ApplicationError):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "AUTH_UNAUTHORIZED",
    ) -> None:
        super().__init__(message, code=code)


class SecretRequiredError(AuthenticationError):
    """Raised when a protected note is accessed without a password."""

    def __init__(self, message: str = "Password required") -> None:
        super().__init__(message, code="AUTH_SECRET_REQUIRED")


class AuthorizationError(ApplicationError):
    """Raised when authorization fails."""

    def __init__(
        self,
        message: str = "Permission denied",
        code: str = "AUTHZ_FORBIDDEN",
    ) -> None:
        super().__init__(message, code=code)


class UnauthorizedError(AuthorizationError):
    """Raised when the supplied password does not match the note's digest."""

    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message, code="AUTH_INVALID_SECRET")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class RateLimitError(ApplicationError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after_seconds: int = 0,
    ) -> None:
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, code="RATE_LIMITED")


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")


class ResourceExhaustedError(ApplicationError):
    """Raised when a bounded allocation loop runs out of attempts."""

    def __init__(self, message: str = "Resource exhausted") -> None:
        super().__init__(message, code="SYS_RESOURCE_EXHAUSTED")
