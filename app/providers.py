"""FastAPI dependency providers for repositories and services.

Kept apart from ``dependencies.py`` so route modules can import these
aliases without pulling in engine construction.  Tests swap any layer
through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from app.dependencies import DBSession
from app.repositories.payment_repository import PaymentRepository
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService
from app.services.payment_service import PaymentService

# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------


def get_user_repository(db: DBSession) -> UserRepository:
    return UserRepository(db)


def get_payment_repository(db: DBSession) -> PaymentRepository:
    return PaymentRepository(db)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
PaymentRepo = Annotated[PaymentRepository, Depends(get_payment_repository)]

# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------


def get_auth_service(repo: UserRepo) -> AuthService:
    return AuthService(repo)


def get_payment_service(repo: PaymentRepo) -> PaymentService:
    return PaymentService(repo)


AuthSvc = Annotated[AuthService, Depends(get_auth_service)]
PaymentSvc = Annotated[PaymentService, Depends(get_payment_service)]
