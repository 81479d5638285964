"""State pattern for payment lifecycle management.

Payments move strictly forward through ``Pending -> Verified -> Processed``.
Each ``PaymentState`` subclass declares the single status it may advance
to and an ``on_enter`` hook for side-effects (logging) that fire once a
payment has entered that state.

Usage::

    PaymentStateMachine.get_state(PaymentStatus.PENDING).validate_transition(
        payment_id, PaymentStatus.VERIFIED
    )   # raises InvalidTransitionError if the edge does not exist
    PaymentStateMachine.get_state(PaymentStatus.VERIFIED).on_enter(payment)

The state machine only knows the graph.  Whether a particular payment is
*currently* in the source state is decided by the repository's atomic
conditional update, never by a separate read.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from app.core.errors import InvalidTransitionError
from app.models.payment import Payment, PaymentStatus

logger = logging.getLogger(__name__)


class PaymentState(ABC):
    """Base class for payment states."""

    @abstractmethod
    def allowed_transitions(self) -> set[PaymentStatus]:
        """Return the set of statuses this state can transition to."""
        ...

    def can_transition_to(self, target: PaymentStatus) -> bool:
        """Check whether transitioning to *target* is permitted."""
        return target in self.allowed_transitions()

    def validate_transition(self, payment_id: str, target: PaymentStatus) -> None:
        """Raise ``InvalidTransitionError`` if the transition is not allowed."""
        allowed = self.allowed_transitions()
        if target not in allowed:
            allowed_str = (
                ", ".join(s.value for s in allowed) if allowed else "none (terminal state)"
            )
            raise InvalidTransitionError(
                f"Cannot transition payment {payment_id} from "
                f"'{self.status_name}' to '{target.value}'. "
                f"Allowed transitions: {{{allowed_str}}}"
            )

    @abstractmethod
    def on_enter(self, payment: Payment) -> None:
        """Side-effects to execute when a payment enters this state."""
        ...

    @property
    @abstractmethod
    def status_name(self) -> str:
        """The string name of this state (matches ``PaymentStatus.value``)."""
        ...


class PendingState(PaymentState):
    """Initial state: submitted by the customer, awaiting verification."""

    @property
    def status_name(self) -> str:
        return PaymentStatus.PENDING.value

    def allowed_transitions(self) -> set[PaymentStatus]:
        return {PaymentStatus.VERIFIED}

    def on_enter(self, payment: Payment) -> None:
        logger.info(
            "Payment %s submitted by %s: %s %s to %s via %s",
            payment.id,
            payment.owner_user_id,
            payment.amount,
            payment.currency,
            payment.beneficiary_account_number,
            payment.swift_code,
        )


class VerifiedState(PaymentState):
    """Checked by an administrator, ready to be released."""

    @property
    def status_name(self) -> str:
        return PaymentStatus.VERIFIED.value

    def allowed_transitions(self) -> set[PaymentStatus]:
        return {PaymentStatus.PROCESSED}

    def on_enter(self, payment: Payment) -> None:
        logger.info("Payment %s verified by %s", payment.id, payment.verified_by)


class ProcessedState(PaymentState):
    """Terminal state: funds released. No further mutation."""

    @property
    def status_name(self) -> str:
        return PaymentStatus.PROCESSED.value

    def allowed_transitions(self) -> set[PaymentStatus]:
        return set()  # Terminal

    def on_enter(self, payment: Payment) -> None:
        logger.info("Payment %s processed by %s", payment.id, payment.processed_by)


class PaymentStateMachine:
    """Registry that maps ``PaymentStatus`` values to their ``PaymentState``."""

    _states: dict[str, PaymentState] = {
        PaymentStatus.PENDING.value: PendingState(),
        PaymentStatus.VERIFIED.value: VerifiedState(),
        PaymentStatus.PROCESSED.value: ProcessedState(),
    }

    @classmethod
    def get_state(cls, status: str | PaymentStatus) -> PaymentState:
        """Return the ``PaymentState`` for the given status value.

        Raises:
            ValueError: If *status* is not a recognised payment status.
        """
        key = status.value if isinstance(status, PaymentStatus) else status
        state = cls._states.get(key)
        if state is None:
            raise ValueError(f"Unknown payment status: '{key}'")
        return state

    @classmethod
    def predecessor(cls, target: PaymentStatus) -> PaymentStatus:
        """Return the only status that may transition into *target*.

        Raises:
            ValueError: If nothing transitions into *target* (the initial state).
        """
        for key, state in cls._states.items():
            if state.can_transition_to(target):
                return PaymentStatus(key)
        raise ValueError(f"No status transitions into '{target.value}'")
