"""FastAPI dependencies for authentication and RBAC."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from app.auth.permissions import authorize
from app.auth.security import decode_token
from app.auth.token_revocation import is_token_revoked
from app.core.errors import UnauthenticatedError
from app.models.user import UserRole
from app.schemas.auth import Principal

# auto_error=False so a missing header surfaces as our own UNAUTHENTICATED error.
# The tokenUrl is used only for Swagger UI's "Authorize" dialog.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/login", auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal:
    """Decode JWT, check deny-list, and return the principal from token claims."""
    if not token:
        raise UnauthenticatedError("Not authenticated")

    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise UnauthenticatedError() from exc

    user_id: str | None = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise UnauthenticatedError()

    # Check Redis-backed deny-list for logged-out tokens
    jti: str | None = payload.get("jti")
    if jti:
        redis = getattr(request.app.state, "redis", None)
        if redis and await is_token_revoked(redis, jti):
            raise UnauthenticatedError("Token has been revoked")

    exp = payload.get("exp")
    try:
        return Principal(
            id=user_id,
            role=payload.get("role", ""),
            username=payload.get("username", ""),
            email=payload.get("email", ""),
            jti=jti,
            expires_at=datetime.fromtimestamp(exp, tz=UTC) if exp else None,
        )
    except PydanticValidationError as exc:
        # Role claim outside the closed role set
        raise UnauthenticatedError() from exc


# Convenience type alias
CurrentUser = Annotated[Principal, Depends(get_current_user)]


def require_role(*allowed_roles: str | UserRole):
    """Dependency factory that enforces role-based access.

    Usage:
        @router.get("/admin/payments", dependencies=[Depends(require_role("Admin"))])
    """
    allowed = frozenset(UserRole(r) if isinstance(r, str) else r for r in allowed_roles)

    async def _check_role(current_user: CurrentUser) -> Principal:
        return authorize(current_user, allowed)

    return _check_role
