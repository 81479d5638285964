"""Service layer for payment submission and the admin review workflow."""

import logging

from app.auth.permissions import (
    PROCESS_PAYMENT,
    SUBMIT_PAYMENT,
    VERIFY_PAYMENT,
    VIEW_ALL_PAYMENTS,
    VIEW_OWN_PAYMENTS,
    authorize,
)
from app.core.errors import InvalidTransitionError, NotFoundError
from app.core.payment_state import PaymentStateMachine
from app.filters.payment import PaymentFilter
from app.models.payment import PaymentStatus
from app.models.user import UserRole
from app.repositories.protocols import PaymentRepositoryProtocol
from app.schemas.auth import Principal
from app.schemas.payment import PaymentCreate, PaymentResponse

logger = logging.getLogger(__name__)


class PaymentService:
    """Business logic for payments.

    Every status change goes through ``_transition``, which relies on the
    repository's conditional update so that two concurrent callers cannot
    both advance the same payment.
    """

    def __init__(self, repo: PaymentRepositoryProtocol):
        self._repo = repo

    @staticmethod
    def _build_response(payment) -> PaymentResponse:
        return PaymentResponse.model_validate(payment)

    async def submit(self, principal: Principal, data: PaymentCreate) -> PaymentResponse:
        """Create a ``Pending`` payment owned by *principal*."""
        authorize(principal, SUBMIT_PAYMENT)
        payment = await self._repo.create(principal.id, data)
        PaymentStateMachine.get_state(PaymentStatus.PENDING).on_enter(payment)
        return self._build_response(payment)

    async def list_own_payments(self, principal: Principal) -> list[PaymentResponse]:
        authorize(principal, VIEW_OWN_PAYMENTS)
        payments = await self._repo.list_for_owner(principal.id)
        return [self._build_response(p) for p in payments]

    async def list_payments(
        self, actor: Principal, filters: PaymentFilter
    ) -> list[PaymentResponse]:
        authorize(actor, VIEW_ALL_PAYMENTS)
        payments = await self._repo.get_all(filters)
        return [self._build_response(p) for p in payments]

    async def get_payment(self, actor: Principal, payment_id: str) -> PaymentResponse:
        """Fetch a single payment.

        Raises:
            NotFoundError: If *payment_id* does not exist.
        """
        authorize(actor, VIEW_ALL_PAYMENTS)
        payment = await self._repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment with ID '{payment_id}' not found")
        return self._build_response(payment)

    async def verify(self, actor: Principal, payment_id: str) -> PaymentResponse:
        """Advance a payment from ``Pending`` to ``Verified``."""
        return await self._transition(actor, payment_id, PaymentStatus.VERIFIED, VERIFY_PAYMENT)

    async def process(self, actor: Principal, payment_id: str) -> PaymentResponse:
        """Advance a payment from ``Verified`` to ``Processed``."""
        return await self._transition(
            actor, payment_id, PaymentStatus.PROCESSED, PROCESS_PAYMENT
        )

    async def _transition(
        self,
        actor: Principal,
        payment_id: str,
        target: PaymentStatus,
        allowed: frozenset[UserRole],
    ) -> PaymentResponse:
        """Apply one forward transition.

        Raises:
            ForbiddenError: If *actor*'s role may not perform the transition.
            NotFoundError: If *payment_id* does not exist.
            InvalidTransitionError: If the payment is not in the required prior state.
        """
        authorize(actor, allowed)
        source = PaymentStateMachine.predecessor(target)

        payment = await self._repo.transition_status(
            payment_id, from_status=source, to_status=target, actor_id=actor.id
        )
        if payment is None:
            current = await self._repo.get_by_id(payment_id)
            if current is None:
                raise NotFoundError(f"Payment with ID '{payment_id}' not found")
            logger.warning(
                "Rejected %s -> %s on payment %s (current status %s) by %s",
                source.value,
                target.value,
                payment_id,
                current.status,
                actor.id,
            )
            PaymentStateMachine.get_state(current.status).validate_transition(payment_id, target)
            # The payment was in `source` yet did not match: it moved under us
            raise InvalidTransitionError(
                f"Payment {payment_id} changed status concurrently; retry the request"
            )

        PaymentStateMachine.get_state(target).on_enter(payment)
        return self._build_response(payment)
