"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
INVALID_TOKEN = "INVALID_TOKEN"
INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    pass


class DuplicateResourceError(DomainError):
    """Raised when attempting to create or update a resource that would violate a uniqueness constraint."""

    pass


class DuplicateEmailError(DuplicateResourceError):
    """Raised when registering an email that already belongs to a user."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. invalid dates, missing required fields)."""

    pass


class InvalidOrExpiredTokenError(DomainValidationError):
    """Raised when a password reset token is unknown, already used or expired.

    The three cases share one message on purpose so callers cannot tell
    which tokens exist.
    """

    def __init__(self, message: str = "Invalid or expired reset token"):
        super().__init__(message)


class UnauthorizedError(DomainError):
    """Raised when the caller is not authenticated."""

    pass


class InvalidCredentialsError(UnauthorizedError):
    """Raised on a failed login, without saying whether the email exists."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class MissingTokenError(UnauthorizedError):
    """Raised when no bearer token accompanies a protected request."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(message)


class ForbiddenError(DomainError):
    """Raised when an authenticated caller is not allowed to proceed."""

    pass


class InvalidTokenError(ForbiddenError):
    """Raised when a presented access token fails verification."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InsufficientRoleError(ForbiddenError):
    """Raised when the caller lacks the role a route requires."""

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class InternalError(DomainError):
    """Raised for failures whose details must not reach the client."""

    pass


class AuthorizationCheckError(InternalError):
    """Raised when the role lookup itself fails. Access is denied."""

    def __init__(self, message: str = "Authorization check failed"):
        super().__init__(message)


class TokenDecodeError(Exception):
    """Base class for access token verification failures."""

    pass


class InvalidSignatureError(TokenDecodeError):
    pass


class ExpiredTokenError(TokenDecodeError):
    pass


class MalformedTokenError(TokenDecodeError):
    pass
