"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1 import admin_payments, admin_users, auth, payments

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, tags=["Auth"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(admin_payments.router, prefix="/admin/payments", tags=["Admin"])
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["Admin"])
