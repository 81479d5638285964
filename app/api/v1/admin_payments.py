"""Admin payment review endpoints.

Only ``Admin`` may list, verify or process payments.  The role check runs
twice: once here as a route dependency so the request is rejected before
the body is parsed, and again inside ``PaymentService`` so the rule holds
for any caller of the service.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi_filter import FilterDepends

from app.auth.dependencies import CurrentUser, require_role
from app.filters.payment import PaymentFilter
from app.models.user import UserRole
from app.providers import PaymentSvc
from app.schemas.payment import PaymentResponse
from app.utils.audit import audit_logged

router = APIRouter(dependencies=[Depends(require_role(UserRole.ADMIN))])


@router.get("", response_model=list[PaymentResponse])
async def list_payments(
    current_user: CurrentUser,
    service: PaymentSvc,
    filters: PaymentFilter = FilterDepends(PaymentFilter),
) -> list[PaymentResponse]:
    """
    List all payments.

    - **status**: Pending, Verified or Processed
    - **currency**: ISO 4217 code
    - **owner_user_id**: Payments submitted by one customer
    - **created_at__gte / created_at__lte**: Creation date range
    - **order_by**: Sort fields (e.g. ``-created_at``, ``amount``)
    """
    return await service.list_payments(current_user, filters)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID, current_user: CurrentUser, service: PaymentSvc
) -> PaymentResponse:
    """Get a single payment by id."""
    return await service.get_payment(current_user, str(payment_id))


@router.patch(
    "/{payment_id}/verify",
    response_model=PaymentResponse,
    dependencies=[Depends(audit_logged("verify_payment"))],
)
async def verify_payment(
    payment_id: UUID, current_user: CurrentUser, service: PaymentSvc
) -> PaymentResponse:
    """Move a payment from **Pending** to **Verified**."""
    return await service.verify(current_user, str(payment_id))


@router.patch(
    "/{payment_id}/process",
    response_model=PaymentResponse,
    dependencies=[Depends(audit_logged("process_payment"))],
)
async def process_payment(
    payment_id: UUID, current_user: CurrentUser, service: PaymentSvc
) -> PaymentResponse:
    """Move a payment from **Verified** to **Processed**. Processed is terminal."""
    return await service.process(current_user, str(payment_id))
