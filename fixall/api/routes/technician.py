import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fixall.core.security import require_technician
from fixall.db.base import get_db
from fixall.db.models.booking import Booking
from fixall.db.models.user import User
from fixall.schemas.booking import (
    BookingActionResponse,
    BookingResponse,
    CompleteJobRequest,
    MessageCreate,
    MessageResponse,
    MessagesResponse,
    ReceiptCreate,
    ReceiptResponse,
    ReceiptSentResponse,
)
from fixall.schemas.technician import (
    AvailabilityResponse,
    AvailabilityUpdate,
    EarningsResponse,
    JobReviewItem,
    MonthlyEarnings,
    ReviewStats,
    TechnicianReviewsResponse,
)
from fixall.schemas.user import UserMini, UserResponse
from fixall.services import bookings as booking_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["technician"])


@router.get("/status", response_model=UserResponse)
def approval_status(current_user: User = Depends(require_technician)):
    return current_user


# -------------------------
# Jobs
# -------------------------
@router.get("/jobs", response_model=List[BookingResponse])
def list_jobs(
    status: Optional[str] = Query(None, description="Status to filter on, or 'all'"),
    search: Optional[str] = Query(None, description="Case-insensitive description search"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    q = db.query(Booking).filter(Booking.tech_id == current_user.id)
    if status and status != "all":
        q = q.filter(Booking.status == status)
    if search:
        q = q.filter(Booking.description.ilike(f"%{search}%"))

    jobs = q.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    logger.info(f"Found {len(jobs)} jobs for technician {current_user.id}")
    return jobs


@router.get("/job/{booking_id}", response_model=BookingResponse)
def get_job(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    return booking_service.get_technician_booking(db, booking_id, current_user)


@router.put("/start/{booking_id}", response_model=BookingActionResponse)
def start_job(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    booking = booking_service.get_technician_booking(db, booking_id, current_user)
    booking = booking_service.start_job(db, booking)
    return BookingActionResponse(message="Job started successfully", booking=BookingResponse.model_validate(booking))


@router.put("/complete/{booking_id}", response_model=BookingActionResponse)
def complete_job(
    booking_id: int,
    payload: Optional[CompleteJobRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    payload = payload or CompleteJobRequest()
    booking = booking_service.get_technician_booking(db, booking_id, current_user)
    booking = booking_service.complete_job(db, booking, price=payload.price, notes=payload.notes)
    return BookingActionResponse(message="Job completed successfully", booking=BookingResponse.model_validate(booking))


@router.post("/job/{booking_id}/receipt", response_model=ReceiptSentResponse)
def send_receipt(
    booking_id: int,
    payload: ReceiptCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    booking = booking_service.get_technician_booking(db, booking_id, current_user)
    booking = booking_service.send_receipt(
        db,
        booking,
        labor_cost=payload.labor_cost,
        material_cost=payload.material_cost,
        additional_charges=payload.additional_charges,
        time_spent=payload.time_spent,
        notes=payload.notes,
    )
    return ReceiptSentResponse(
        message="Receipt sent to customer successfully",
        booking=BookingResponse.model_validate(booking),
        receipt=ReceiptResponse.model_validate(booking.receipt),
    )


# -------------------------
# Chat
# -------------------------
@router.get("/job/{booking_id}/messages", response_model=List[MessageResponse])
def get_messages(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    booking = booking_service.get_technician_booking(db, booking_id, current_user)
    return booking.messages


@router.post("/job/{booking_id}/message", response_model=MessagesResponse)
def send_message(
    booking_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    booking = booking_service.get_technician_booking(db, booking_id, current_user)
    booking = booking_service.add_message(db, booking, "technician", current_user.name, payload.message)
    return MessagesResponse(
        message="Message sent successfully",
        messages=[MessageResponse.model_validate(m) for m in booking.messages],
    )


# -------------------------
# Earnings, availability, reviews
# -------------------------
@router.get("/earnings", response_model=EarningsResponse)
def earnings(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    jobs = (
        db.query(Booking)
        .filter(Booking.tech_id == current_user.id, Booking.status == "completed", Booking.price > 0)
        .order_by(Booking.completed_date.desc(), Booking.id.desc())
        .all()
    )

    total = sum(j.price or 0 for j in jobs)

    now = datetime.utcnow()
    month_start = datetime(now.year, now.month, 1)
    this_month = sum(j.price or 0 for j in jobs if j.completed_date and j.completed_date >= month_start)

    average = round(total / len(jobs), 2) if jobs else 0.0

    # jobs are newest first, so dict order is newest month first
    monthly = {}
    for job in jobs:
        if not job.completed_date:
            continue
        key = (job.completed_date.year, job.completed_date.month)
        if key not in monthly:
            monthly[key] = {"name": job.completed_date.strftime("%b %Y"), "total": 0.0, "count": 0}
        monthly[key]["total"] += job.price or 0
        monthly[key]["count"] += 1

    return EarningsResponse(
        total=float(total),
        this_month=float(this_month),
        average=average,
        job_count=len(jobs),
        monthly_breakdown=[MonthlyEarnings(**m) for m in list(monthly.values())[:6]],
        recent_jobs=[BookingResponse.model_validate(j) for j in jobs[:10]],
    )


@router.put("/availability", response_model=AvailabilityResponse)
def update_availability(
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    current_user.available = payload.available
    db.commit()
    db.refresh(current_user)
    logger.info(
        f"Availability updated for user {current_user.id}: "
        f"{'Available' if payload.available else 'Unavailable'}"
    )
    return AvailabilityResponse(message="Availability updated successfully", user=UserResponse.model_validate(current_user))


@router.get("/reviews", response_model=TechnicianReviewsResponse)
def my_reviews(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_technician),
):
    jobs = (
        db.query(Booking)
        .filter(
            Booking.tech_id == current_user.id,
            Booking.status == "completed",
            Booking.review_rating.isnot(None),
        )
        .order_by(Booking.completed_date.desc(), Booking.id.desc())
        .all()
    )

    reviews = [
        JobReviewItem(
            rating=job.review_rating,
            comment=job.review_comment,
            created_at=job.review_created_at,
            customer=UserMini.model_validate(job.customer) if job.customer else None,
            job_id=job.id,
            job_description=job.description,
            completed_date=job.completed_date,
        )
        for job in jobs
    ]

    total = len(reviews)
    average = round(sum(r.rating for r in reviews) / total, 1) if total else 0.0
    five_stars = len([r for r in reviews if r.rating == 5])

    return TechnicianReviewsResponse(reviews=reviews, stats=ReviewStats(total=total, average=average, five_stars=five_stars))
