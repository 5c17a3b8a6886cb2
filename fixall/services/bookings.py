# fixall/services/bookings.py
"""
Persistence side of the booking lifecycle.

Each transition is written with one conditional UPDATE that matches on the
booking id *and* the statuses the action is allowed from. If another request
moved the booking in the meantime the UPDATE matches nothing and the action is
rejected instead of overwriting the other writer.
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.orm import Session

from fixall.core.lifecycle import (
    BookingAction,
    PaymentStatus,
    TransitionError,
    allowed_sources,
    can_act,
    check_payment,
    check_rating,
    check_review,
    ensure_allowed,
    next_status,
    receipt_total,
)
from fixall.db.models.booking import Booking, BookingMessage
from fixall.db.models.review import TechnicianReview
from fixall.db.models.user import User

logger = logging.getLogger(__name__)


# -------------------------
# Loading with ownership checks
# -------------------------
def get_booking_or_404(db: Session, booking_id: int, not_found: str = "Booking not found") -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail=not_found)
    return booking


def get_customer_booking(db: Session, booking_id: int, customer: User) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    if not can_act(customer.id, booking.customer_id):
        raise HTTPException(status_code=403, detail="Not authorized for this booking")
    return booking


def get_technician_booking(db: Session, booking_id: int, technician: User) -> Booking:
    booking = get_booking_or_404(db, booking_id, not_found="Job not found")
    if not can_act(technician.id, booking.tech_id):
        raise HTTPException(status_code=403, detail="Not authorized for this booking")
    return booking


# -------------------------
# Conditional update helper
# -------------------------
def _conditional_update(
    db: Session,
    booking: Booking,
    action: BookingAction,
    guard: Callable[[Booking], None],
    values: dict,
    extra_conditions: Iterable = (),
) -> None:
    guard(booking)

    sources = [s.value for s in allowed_sources(action)]
    stmt = (
        update(Booking)
        .where(Booking.id == booking.id, Booking.status.in_(sources), *extra_conditions)
        .values(updated_at=datetime.utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount != 1:
        # lost the race: report what the booking looks like now
        db.rollback()
        db.refresh(booking)
        guard(booking)
        raise TransitionError("Booking was modified by another request, please retry")


def _status_guard(action: BookingAction) -> Callable[[Booking], None]:
    return lambda b: ensure_allowed(b.status, action)


# -------------------------
# Transitions
# -------------------------
def start_job(db: Session, booking: Booking) -> Booking:
    target = next_status(booking.status, BookingAction.START)
    _conditional_update(
        db,
        booking,
        BookingAction.START,
        _status_guard(BookingAction.START),
        {"status": target.value, "started_at": datetime.utcnow()},
    )
    db.commit()
    db.refresh(booking)
    logger.info(f"Job {booking.id} started by technician {booking.tech_id}")
    return booking


def cancel_booking(db: Session, booking: Booking) -> Booking:
    target = next_status(booking.status, BookingAction.CANCEL)
    _conditional_update(
        db,
        booking,
        BookingAction.CANCEL,
        _status_guard(BookingAction.CANCEL),
        {"status": target.value},
    )
    db.commit()
    db.refresh(booking)
    logger.info(f"Booking {booking.id} cancelled by customer {booking.customer_id}")
    return booking


def complete_job(db: Session, booking: Booking, price: float = 0, notes: Optional[str] = "") -> Booking:
    target = next_status(booking.status, BookingAction.COMPLETE)
    _conditional_update(
        db,
        booking,
        BookingAction.COMPLETE,
        _status_guard(BookingAction.COMPLETE),
        {
            "status": target.value,
            "payment": PaymentStatus.COMPLETED.value,
            "price": price or 0,
            "notes": notes or "",
            "completed_date": datetime.utcnow(),
        },
    )
    db.commit()
    db.refresh(booking)
    logger.info(f"Job {booking.id} completed with price {booking.price}")
    return booking


def send_receipt(
    db: Session,
    booking: Booking,
    labor_cost: float,
    material_cost: float = 0,
    additional_charges: float = 0,
    time_spent: Optional[str] = "",
    notes: Optional[str] = "",
) -> Booking:
    target = next_status(booking.status, BookingAction.SEND_RECEIPT)
    total = receipt_total(labor_cost, material_cost, additional_charges)
    now = datetime.utcnow()
    _conditional_update(
        db,
        booking,
        BookingAction.SEND_RECEIPT,
        _status_guard(BookingAction.SEND_RECEIPT),
        {
            "receipt_labor_cost": labor_cost,
            "receipt_material_cost": material_cost or 0,
            "receipt_additional_charges": additional_charges or 0,
            "receipt_total_amount": total,
            "receipt_time_spent": time_spent or "",
            "receipt_notes": notes or "",
            "receipt_sent_at": now,
            "status": target.value,
            "price": total,
            # the customer has to pay the receipt, even on an already completed job
            "payment": PaymentStatus.PENDING.value,
            "completed_date": now,
        },
    )
    db.commit()
    db.refresh(booking)
    logger.info(f"Receipt sent for job {booking.id} - amount {total}")
    return booking


def pay_booking(db: Session, booking: Booking) -> Booking:
    _conditional_update(
        db,
        booking,
        BookingAction.PAY,
        lambda b: check_payment(b.status, b.payment),
        {"payment": PaymentStatus.COMPLETED.value},
        extra_conditions=[Booking.payment == PaymentStatus.PENDING.value],
    )
    db.commit()
    db.refresh(booking)
    logger.info(f"Payment completed for booking {booking.id}")
    return booking


def review_booking(db: Session, booking: Booking, author: User, rating: int, comment: Optional[str] = "") -> Booking:
    """Attach the review to the booking and mirror it onto the technician, in one transaction."""
    rating = check_rating(rating)
    now = datetime.utcnow()
    _conditional_update(
        db,
        booking,
        BookingAction.REVIEW,
        lambda b: check_review(b.status, b.review_rating is not None),
        {"review_rating": rating, "review_comment": comment or "", "review_created_at": now},
        extra_conditions=[Booking.review_rating.is_(None)],
    )
    try:
        db.add(
            TechnicianReview(
                technician_id=booking.tech_id,
                author_id=author.id,
                booking_id=booking.id,
                rating=rating,
                comment=comment or "",
                created_at=now,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(booking)
    logger.info(f"Review ({rating}) submitted for booking {booking.id}, technician {booking.tech_id}")
    return booking


# -------------------------
# Chat
# -------------------------
def add_message(db: Session, booking: Booking, sender: str, sender_name: str, text: Optional[str]) -> Booking:
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message cannot be empty")

    db.add(BookingMessage(booking_id=booking.id, sender=sender, sender_name=sender_name, message=text))
    booking.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(booking)
    logger.info(f"Message sent by {sender} in booking {booking.id}")
    return booking