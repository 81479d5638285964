"""Domain error taxonomy.

Every error carries the HTTP status it maps to and a machine-stable
``code`` that clients can branch on.  The API layer turns these into
``{"detail": ..., "code": ...}`` responses (see ``app.main``).
"""

from fastapi import status


class BankingError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"

    def __init__(self, detail: str, *, code: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if code is not None:
            self.code = code


class ValidationError(BankingError):
    """Malformed or semantically invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class InvalidCredentialsError(BankingError):
    """Login failed. Deliberately identical for unknown email and bad password."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class UnauthenticatedError(BankingError):
    """Missing, malformed, expired or revoked token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)


class ForbiddenError(BankingError):
    """Valid token, but the role is not on the operation's allow-list."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(detail)


class NotFoundError(BankingError):
    """Unknown resource id."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class InvalidTransitionError(BankingError):
    """Payment is not in the state the requested transition starts from."""

    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"


class RateLimitedError(BankingError):
    """Caller exceeded the quota for an operation."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"

    def __init__(
        self,
        detail: str = "Too many requests. Please try again later.",
        *,
        retry_after: int | None = None,
    ):
        super().__init__(detail)
        self.retry_after = retry_after
