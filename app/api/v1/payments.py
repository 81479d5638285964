"""Customer-facing payment endpoints."""

from fastapi import APIRouter, status

from app.auth.dependencies import CurrentUser
from app.providers import PaymentSvc
from app.schemas.payment import PaymentCreate, PaymentCreatedResponse, PaymentResponse

router = APIRouter()


@router.post(
    "",
    response_model=PaymentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_payment(
    data: PaymentCreate,
    current_user: CurrentUser,
    service: PaymentSvc,
) -> PaymentCreatedResponse:
    """
    Submit an international payment.

    The payment is created in the **Pending** state and owned by the caller.
    """
    payment = await service.submit(current_user, data)
    return PaymentCreatedResponse(id=payment.id, status=payment.status)


@router.get("", response_model=list[PaymentResponse])
async def list_my_payments(
    current_user: CurrentUser, service: PaymentSvc
) -> list[PaymentResponse]:
    """List the caller's own payments, newest first."""
    return await service.list_own_payments(current_user)
