"""Authentication API endpoints.

Login and registration are the two unauthenticated writes in the service,
so each carries its own per-client quota on top of the global limit.  The
quota is charged in a dependency, which FastAPI resolves before the route
body runs: a throttled request never reaches the credential store.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from app.auth.dependencies import CurrentUser
from app.auth.token_revocation import revoke_token
from app.dependencies import RedisClient
from app.providers import AuthSvc
from app.rate_limit import limiter, rate_limited
from app.schemas.auth import (
    LoginRequest,
    MeResponse,
    PasswordChangeRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(rate_limited("login"))],
)
async def login(credentials: LoginRequest, service: AuthSvc) -> TokenResponse:
    """Exchange email + password for a signed, role-bearing access token."""
    return await service.login(credentials.email, credentials.password)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("register"))],
)
async def register(data: RegisterRequest, service: AuthSvc) -> RegisterResponse:
    """Create a customer account. The role is always ``User``."""
    user = await service.register(data)
    return RegisterResponse(id=user.id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: CurrentUser, redis: RedisClient) -> Response:
    """Revoke the presented token for the rest of its lifetime."""
    if current_user.jti and current_user.expires_at:
        await revoke_token(redis, current_user.jti, current_user.expires_at)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=MeResponse)
@limiter.limit("30/minute")
async def get_current_user_info(request: Request, current_user: CurrentUser) -> MeResponse:
    """Return the authenticated user's identity from JWT claims."""
    return MeResponse.model_validate(current_user)


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChangeRequest, current_user: CurrentUser, service: AuthSvc
) -> Response:
    """Change the caller's password. Existing tokens stay valid until expiry."""
    await service.change_password(current_user, data.current_password, data.new_password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
