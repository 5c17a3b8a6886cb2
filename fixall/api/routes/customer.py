import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from fixall.core.security import require_customer
from fixall.db.base import get_db
from fixall.db.models.booking import Booking, BookingImage
from fixall.db.models.user import User
from fixall.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingResponse,
    ClearHistoryResponse,
    MessageCreate,
    MessageResponse,
    MessagesResponse,
    ReviewCreate,
)
from fixall.schemas.user import TechnicianProfileResponse, UserResponse
from fixall.services import bookings as booking_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["customer"])


# -------------------------
# Technicians
# -------------------------
@router.get("/technicians", response_model=List[UserResponse])
def list_technicians(
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    category: Optional[str] = Query(None, description="Skill the technician must have"),
    available: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    q = db.query(User).filter(User.role == "technician", User.approved == True)  # noqa: E712
    if search:
        q = q.filter(User.name.ilike(f"%{search}%"))
    if available:
        q = q.filter(User.available == True)  # noqa: E712

    technicians = q.order_by(User.created_at.desc(), User.id.desc()).all()

    # skills are a JSON list, filter them here rather than per-dialect JSON operators
    if category:
        wanted = category.strip().lower()
        technicians = [t for t in technicians if wanted in [s.lower() for s in (t.skills or [])]]

    return technicians


@router.get("/technician/{tech_id}", response_model=TechnicianProfileResponse)
def get_technician(
    tech_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    tech = db.get(User, tech_id)
    if not tech or tech.role != "technician" or not tech.approved:
        raise HTTPException(status_code=404, detail="Technician not found")
    return tech


# -------------------------
# Bookings
# -------------------------
@router.post("/book", response_model=BookingActionResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    tech = db.get(User, payload.tech_id)
    if not tech or tech.role != "technician" or not tech.approved:
        raise HTTPException(status_code=400, detail="Invalid or unapproved technician")

    booking = Booking(
        customer_id=current_user.id,
        tech_id=tech.id,
        description=payload.description,
        address=payload.address or "",
    )
    if payload.scheduled_date:
        booking.scheduled_date = payload.scheduled_date
    booking.images = [BookingImage(data=img.data, content_type=img.content_type) for img in payload.images]

    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info(
        f"New booking {booking.id}: customer {current_user.id} -> technician {tech.id}, "
        f"{len(payload.images)} image(s)"
    )
    return BookingActionResponse(message="Booking created successfully", booking=BookingResponse.model_validate(booking))


@router.get("/bookings", response_model=List[BookingResponse])
def my_bookings(
    filter: Optional[str] = Query(None, description="Status to filter on, or 'all'"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    q = db.query(Booking).filter(Booking.customer_id == current_user.id)
    if filter and filter != "all":
        q = q.filter(Booking.status == filter)

    bookings = q.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    logger.info(f"Fetched {len(bookings)} bookings for customer {current_user.id}")
    return bookings


@router.delete("/bookings/clear", response_model=ClearHistoryResponse)
def clear_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    # row by row so images and messages go with their booking
    bookings = db.query(Booking).filter(Booking.customer_id == current_user.id).all()
    for b in bookings:
        db.delete(b)
    db.commit()

    logger.info(f"Cleared {len(bookings)} bookings for customer {current_user.id}")
    return ClearHistoryResponse(message="All booking history cleared successfully", deleted_count=len(bookings))


@router.get("/booking/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    return booking_service.get_customer_booking(db, booking_id, current_user)


@router.put("/cancel/{booking_id}", response_model=BookingActionResponse)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    booking = booking_service.get_customer_booking(db, booking_id, current_user)
    booking = booking_service.cancel_booking(db, booking)
    return BookingActionResponse(message="Booking cancelled successfully", booking=BookingResponse.model_validate(booking))


@router.post("/review/{booking_id}", response_model=BookingActionResponse)
def review_booking(
    booking_id: int,
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    booking = booking_service.get_customer_booking(db, booking_id, current_user)
    booking = booking_service.review_booking(db, booking, current_user, payload.rating, payload.comment)
    return BookingActionResponse(message="Review submitted successfully", booking=BookingResponse.model_validate(booking))


@router.post("/booking/{booking_id}/pay", response_model=BookingActionResponse)
def pay_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    booking = booking_service.get_customer_booking(db, booking_id, current_user)
    booking = booking_service.pay_booking(db, booking)
    return BookingActionResponse(message="Payment successful", booking=BookingResponse.model_validate(booking))


# -------------------------
# Chat
# -------------------------
@router.get("/booking/{booking_id}/messages", response_model=List[MessageResponse])
def get_messages(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    booking = booking_service.get_customer_booking(db, booking_id, current_user)
    return booking.messages


@router.post("/booking/{booking_id}/message", response_model=MessagesResponse)
def send_message(
    booking_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_customer),
):
    booking = booking_service.get_customer_booking(db, booking_id, current_user)
    booking = booking_service.add_message(db, booking, "customer", current_user.name, payload.message)
    return MessagesResponse(
        message="Message sent successfully",
        messages=[MessageResponse.model_validate(m) for m in booking.messages],
    )
