# fixall/schemas/admin.py
from pydantic import BaseModel

from fixall.schemas.user import UserResponse


class UserStats(BaseModel):
    total: int
    customers: int
    technicians: int
    approved_technicians: int
    pending_technicians: int


class BookingStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    cancelled: int
    today: int


class RevenueStats(BaseModel):
    total: float
    average: float


class AdminStatsResponse(BaseModel):
    users: UserStats
    bookings: BookingStats
    revenue: RevenueStats


class ApproveResponse(BaseModel):
    message: str
    user: UserResponse
