"""Pydantic schemas for authentication and account management."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, EmailStr, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.constants import (
    ACCOUNT_NUMBER_PATTERN,
    FULL_NAME_PATTERN,
    ID_NUMBER_PATTERN,
    PASSWORD_PATTERN,
    USERNAME_PATTERN,
)
from app.models.user import UserRole

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


class LoginRequest(BaseModel):
    """Credentials for ``POST /login``. ``credential`` is accepted as an alias."""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        validation_alias=AliasChoices("password", "credential"),
    )


class TokenResponse(BaseModel):
    """Response schema for a successful login."""

    token: str
    role: UserRole
    token_type: str = "bearer"
    expires_in: int


class RegisterRequest(BaseModel):
    """Self-service customer registration."""

    name: str = Field(..., pattern=FULL_NAME_PATTERN)
    username: str = Field(..., pattern=USERNAME_PATTERN)
    email: str = Field(..., max_length=255)
    id_number: str = Field(
        ..., pattern=ID_NUMBER_PATTERN, validation_alias=AliasChoices("id_number", "idNumber")
    )
    account_number: str = Field(
        ...,
        pattern=ACCOUNT_NUMBER_PATTERN,
        validation_alias=AliasChoices("account_number", "accountNumber"),
    )
    password: str = Field(..., pattern=PASSWORD_PATTERN)

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        """Reject malformed addresses but keep the address exactly as submitted.

        Login matches the stored email case-sensitively, so the normalized
        form produced by ``EmailStr`` (lowercased domain) is never stored.
        """
        try:
            _EMAIL_ADAPTER.validate_python(v)
        except PydanticValidationError as exc:
            raise ValueError(exc.errors()[0]["msg"]) from None
        return v


class UserCreateRequest(RegisterRequest):
    """Admin-initiated account creation; the role is chosen explicitly."""

    role: UserRole = UserRole.USER


class RegisterResponse(BaseModel):
    """Identifier of the newly created account."""

    id: str


class RoleUpdateRequest(BaseModel):
    """Admin role change."""

    role: UserRole


class PasswordChangeRequest(BaseModel):
    """Authenticated password change."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., pattern=PASSWORD_PATTERN)


class Principal(BaseModel):
    """Authenticated identity resolved from JWT claims. No DB query needed."""

    id: str
    role: UserRole
    username: str = ""
    email: str = ""
    jti: str | None = None
    expires_at: datetime | None = None


class UserResponse(BaseModel):
    """Public user information."""

    id: str
    email: str
    username: str
    name: str
    account_number: str
    role: UserRole
    is_active: bool = True

    model_config = {"from_attributes": True}


class MeResponse(BaseModel):
    """Token introspection for ``GET /me``."""

    id: str
    username: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}
