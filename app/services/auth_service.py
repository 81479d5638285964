"""Service layer for authentication and account management."""

import logging

from app.auth.permissions import MANAGE_USERS, authorize
from app.auth.security import (
    burn_password_check,
    create_access_token,
    hash_password,
    verify_password,
)
from app.config import get_settings
from app.core.errors import InvalidCredentialsError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.repositories.protocols import UserRepositoryProtocol
from app.repositories.user_repository import DuplicateUserError
from app.schemas.auth import (
    Principal,
    RegisterRequest,
    TokenResponse,
    UserCreateRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Credential checks, token issuance and account lifecycle."""

    def __init__(self, repo: UserRepositoryProtocol):
        self._repo = repo

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user owning *email* if *password* matches.

        Unknown email, wrong password and disabled accounts all raise the
        same ``InvalidCredentialsError`` after the same amount of bcrypt work.
        """
        user = await self._repo.get_by_email(email)
        if user is None:
            burn_password_check(password)
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash) or not user.is_active:
            logger.warning("Login failed for user %s", user.id)
            raise InvalidCredentialsError()

        return user

    async def login(self, email: str, password: str) -> TokenResponse:
        """Authenticate and issue a role-bearing access token."""
        user = await self.authenticate(email, password)
        token = create_access_token(
            user_id=user.id,
            role=user.role,
            username=user.username,
            email=user.email,
        )
        logger.info("User %s logged in (role=%s)", user.id, user.role)
        return TokenResponse(
            token=token,
            role=UserRole(user.role),
            expires_in=get_settings().jwt_access_token_expire_minutes * 60,
        )

    async def register(self, data: RegisterRequest) -> User:
        """Self-service registration. Always creates a ``User``-role account."""
        return await self._create(data, UserRole.USER)

    async def create_user(self, actor: Principal, data: UserCreateRequest) -> UserResponse:
        """Admin-initiated account creation with an explicit role."""
        authorize(actor, MANAGE_USERS)
        user = await self._create(data, data.role)
        logger.info("User %s (%s) created by %s", user.id, user.role, actor.id)
        return UserResponse.model_validate(user)

    async def change_role(self, actor: Principal, user_id: str, role: UserRole) -> UserResponse:
        """Change another user's role.

        Raises:
            NotFoundError: If *user_id* does not exist.
        """
        authorize(actor, MANAGE_USERS)
        user = await self._repo.update_role(user_id, role)
        if user is None:
            raise NotFoundError(f"User with ID '{user_id}' not found")
        logger.info("User %s role changed to %s by %s", user_id, role, actor.id)
        return UserResponse.model_validate(user)

    async def change_password(
        self, principal: Principal, current_password: str, new_password: str
    ) -> None:
        """Replace the caller's password after re-checking the current one."""
        user = await self._repo.get_by_id(principal.id)
        if user is None or not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        if current_password == new_password:
            raise ValidationError("New password must differ from the current password")

        await self._repo.update_password_hash(user.id, hash_password(new_password))
        logger.info("Password changed for user %s", user.id)

    async def _create(self, data: RegisterRequest, role: UserRole) -> User:
        try:
            user = await self._repo.create(
                email=data.email,
                username=data.username,
                name=data.name,
                id_number=data.id_number,
                account_number=data.account_number,
                password_hash=hash_password(data.password),
                role=role,
            )
        except DuplicateUserError as exc:
            code = "USERNAME_TAKEN" if exc.field == "username" else "EMAIL_TAKEN"
            raise ValidationError(str(exc), code=code) from exc
        return user
