"""Pydantic schemas package."""
from app.schemas.auth import (
    LoginRequest,
    PasswordChangeRequest,
    Principal,
    RegisterRequest,
    RegisterResponse,
    RoleUpdateRequest,
    TokenResponse,
    UserCreateRequest,
    UserResponse,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentCreatedResponse,
    PaymentResponse,
)

__all__ = [
    # Auth schemas
    "LoginRequest",
    "TokenResponse",
    "RegisterRequest",
    "RegisterResponse",
    "UserCreateRequest",
    "RoleUpdateRequest",
    "PasswordChangeRequest",
    "Principal",
    "UserResponse",
    # Payment schemas
    "PaymentCreate",
    "PaymentCreatedResponse",
    "PaymentResponse",
]
