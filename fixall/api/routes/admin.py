# fixall/api/routes/admin.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from fixall.core.security import require_admin
from fixall.db.base import get_db
from fixall.db.models.booking import Booking
from fixall.db.models.user import User
from fixall.schemas.admin import (
    AdminStatsResponse,
    ApproveResponse,
    BookingStats,
    RevenueStats,
    UserStats,
)
from fixall.schemas.booking import BookingResponse, StatusMessage
from fixall.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


# --------------------------------------------------
# 1. Technician approval
# --------------------------------------------------
@router.get("/pending-technicians", response_model=List[UserResponse])
def pending_technicians(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return (
        db.query(User)
        .filter(User.role == "technician", User.approved == False)  # noqa: E712
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )


@router.put("/approve/{user_id}", response_model=ApproveResponse)
def approve_technician(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role != "technician":
        raise HTTPException(status_code=400, detail="Not a technician")

    user.approved = True
    db.commit()
    db.refresh(user)
    logger.info(f"Technician approved: {user.email}")
    return ApproveResponse(message="Technician approved successfully", user=UserResponse.model_validate(user))


# --------------------------------------------------
# 2. Users
# --------------------------------------------------
@router.get("/users", response_model=List[UserResponse])
def list_users(
    role: Optional[str] = Query(None, description="customer/technician/admin"),
    search: Optional[str] = Query(None, description="Matches name or email"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    return q.order_by(User.created_at.desc(), User.id.desc()).all()


@router.delete("/user/{user_id}", response_model=StatusMessage)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role == "admin":
        raise HTTPException(status_code=403, detail="Cannot delete admin users")

    email = user.email
    db.delete(user)
    db.commit()
    logger.info(f"User deleted: {email}")
    return {"message": "User deleted successfully"}


# --------------------------------------------------
# 3. Bookings
# --------------------------------------------------
@router.get("/bookings", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Matches the booking description"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status)
    if search:
        q = q.filter(Booking.description.ilike(f"%{search}%"))
    return q.order_by(Booking.created_at.desc(), Booking.id.desc()).all()


# --------------------------------------------------
# 4. Platform statistics
# --------------------------------------------------
@router.get("/stats", response_model=AdminStatsResponse)
def stats(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    def count_users(*criteria) -> int:
        return int(db.query(func.count(User.id)).filter(*criteria).scalar() or 0)

    def count_bookings(*criteria) -> int:
        return int(db.query(func.count(Booking.id)).filter(*criteria).scalar() or 0)

    completed = count_bookings(Booking.status == "completed")

    total_revenue = db.query(func.coalesce(func.sum(Booking.price), 0)).filter(
        Booking.status == "completed", Booking.price > 0
    ).scalar() or 0.0

    now = datetime.utcnow()
    today_start = datetime(now.year, now.month, now.day)

    return AdminStatsResponse(
        users=UserStats(
            total=count_users(),
            customers=count_users(User.role == "customer"),
            technicians=count_users(User.role == "technician"),
            approved_technicians=count_users(User.role == "technician", User.approved == True),  # noqa: E712
            pending_technicians=count_users(User.role == "technician", User.approved == False),  # noqa: E712
        ),
        bookings=BookingStats(
            total=count_bookings(),
            pending=count_bookings(Booking.status == "pending"),
            in_progress=count_bookings(Booking.status == "in-progress"),
            completed=completed,
            cancelled=count_bookings(Booking.status == "cancelled"),
            today=count_bookings(Booking.created_at >= today_start),
        ),
        revenue=RevenueStats(
            total=float(total_revenue),
            average=round(float(total_revenue) / completed, 2) if completed > 0 else 0.0,
        ),
    )
