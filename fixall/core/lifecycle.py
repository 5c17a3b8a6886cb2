# fixall/core/lifecycle.py
"""
Booking lifecycle rules.

    pending -> in-progress -> completed
    pending / in-progress -> cancelled

completed and cancelled are terminal for start / cancel / complete.
A receipt may be (re)sent on an in-progress or completed job and always
leaves the booking completed with payment reopened. Reviews and payments
do not change the status, they only have guards.

Nothing in here touches HTTP or the database; the persistence side lives in
fixall.services.bookings.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional


class BookingStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class BookingAction(str, Enum):
    START = "start"
    CANCEL = "cancel"
    COMPLETE = "complete"
    SEND_RECEIPT = "send_receipt"
    REVIEW = "review"
    PAY = "pay"


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class TransitionError(Exception):
    """Raised when an action is not allowed for the booking's current state."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Transition:
    sources: FrozenSet[BookingStatus]
    # None means the action leaves the status untouched
    target: Optional[BookingStatus]


TRANSITIONS: Dict[BookingAction, Transition] = {
    BookingAction.START: Transition(
        frozenset({BookingStatus.PENDING}), BookingStatus.IN_PROGRESS
    ),
    BookingAction.CANCEL: Transition(
        frozenset({BookingStatus.PENDING, BookingStatus.IN_PROGRESS}), BookingStatus.CANCELLED
    ),
    BookingAction.COMPLETE: Transition(
        frozenset({BookingStatus.IN_PROGRESS}), BookingStatus.COMPLETED
    ),
    BookingAction.SEND_RECEIPT: Transition(
        frozenset({BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED}), BookingStatus.COMPLETED
    ),
    BookingAction.REVIEW: Transition(frozenset({BookingStatus.COMPLETED}), None),
    BookingAction.PAY: Transition(frozenset({BookingStatus.COMPLETED}), None),
}

_REJECTIONS: Dict[BookingAction, Dict[BookingStatus, str]] = {
    BookingAction.START: {
        BookingStatus.IN_PROGRESS: "Job already started",
        BookingStatus.COMPLETED: "Job already completed",
        BookingStatus.CANCELLED: "Cannot start a cancelled job",
    },
    BookingAction.CANCEL: {
        BookingStatus.COMPLETED: "Cannot cancel a completed booking",
        BookingStatus.CANCELLED: "Booking already cancelled",
    },
    BookingAction.COMPLETE: {
        BookingStatus.PENDING: "Job must be started before it can be completed",
        BookingStatus.COMPLETED: "Job already completed",
        BookingStatus.CANCELLED: "Cannot complete cancelled job",
    },
}

_DEFAULT_REJECTIONS: Dict[BookingAction, str] = {
    BookingAction.SEND_RECEIPT: "Job must be in-progress or completed to send receipt",
    BookingAction.REVIEW: "Can only review completed bookings",
    BookingAction.PAY: "Can only pay for completed bookings",
}


def _coerce_status(status) -> BookingStatus:
    try:
        return BookingStatus(status)
    except ValueError:
        raise TransitionError(f"Unknown booking status: {status}")


def allowed_sources(action: BookingAction) -> FrozenSet[BookingStatus]:
    return TRANSITIONS[action].sources


def is_terminal(status) -> bool:
    return _coerce_status(status) in TERMINAL_STATUSES


def ensure_allowed(current, action: BookingAction) -> BookingStatus:
    """Raise TransitionError unless ``action`` may run from ``current``."""
    status = _coerce_status(current)
    if status in TRANSITIONS[action].sources:
        return status
    message = _REJECTIONS.get(action, {}).get(status) or _DEFAULT_REJECTIONS.get(
        action, f"Cannot {action.value.replace('_', ' ')} a booking that is {status.value}"
    )
    raise TransitionError(message)


def next_status(current, action: BookingAction) -> BookingStatus:
    """Status the booking ends up in after ``action``."""
    status = ensure_allowed(current, action)
    target = TRANSITIONS[action].target
    return target if target is not None else status


def check_review(status, has_review: bool) -> None:
    ensure_allowed(status, BookingAction.REVIEW)
    if has_review:
        raise TransitionError("Already reviewed")


def check_rating(rating) -> int:
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise TransitionError("Rating must be between 1 and 5")
    return rating


def check_payment(status, payment) -> None:
    # payment state is checked first so a double submit reads as "already paid"
    if PaymentStatus(payment) == PaymentStatus.COMPLETED:
        raise TransitionError("Payment already completed")
    ensure_allowed(status, BookingAction.PAY)
    if PaymentStatus(payment) != PaymentStatus.PENDING:
        raise TransitionError(f"Payment cannot be processed while it is {payment}")


def receipt_total(labor_cost: float, material_cost: float = 0, additional_charges: float = 0) -> float:
    return round((labor_cost or 0) + (material_cost or 0) + (additional_charges or 0), 2)


def can_act(actor_id, owner_id) -> bool:
    return actor_id is not None and owner_id is not None and str(actor_id) == str(owner_id)
