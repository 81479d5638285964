"""Admin account management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import CurrentUser, require_role
from app.models.user import UserRole
from app.providers import AuthSvc
from app.schemas.auth import RoleUpdateRequest, UserCreateRequest, UserResponse
from app.utils.audit import audit_logged

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audit_logged("create_user"))],
)
async def create_user(
    data: UserCreateRequest, current_user: CurrentUser, service: AuthSvc
) -> UserResponse:
    """Create an account with any role (e.g. an ``Employee`` or another ``Admin``)."""
    return await service.create_user(current_user, data)


@router.patch(
    "/{user_id}/role",
    response_model=UserResponse,
    dependencies=[Depends(audit_logged("change_role"))],
)
async def change_role(
    user_id: UUID,
    data: RoleUpdateRequest,
    current_user: CurrentUser,
    service: AuthSvc,
) -> UserResponse:
    """Change an account's role. Takes effect on the user's next login."""
    return await service.change_role(current_user, str(user_id), data.role)
