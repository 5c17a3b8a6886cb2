from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from fixall.schemas.booking import BookingResponse
from fixall.schemas.user import UserMini, UserResponse


class AvailabilityUpdate(BaseModel):
    available: bool


class AvailabilityResponse(BaseModel):
    message: str
    user: UserResponse


class MonthlyEarnings(BaseModel):
    name: str   # e.g. "Mar 2026"
    total: float
    count: int


class EarningsResponse(BaseModel):
    total: float
    this_month: float
    average: float
    job_count: int
    monthly_breakdown: List[MonthlyEarnings]
    recent_jobs: List[BookingResponse]


class JobReviewItem(BaseModel):
    rating: int
    comment: Optional[str]
    created_at: Optional[datetime]
    customer: Optional[UserMini]
    job_id: int
    job_description: str
    completed_date: Optional[datetime]


class ReviewStats(BaseModel):
    total: int
    average: float
    five_stars: int


class TechnicianReviewsResponse(BaseModel):
    reviews: List[JobReviewItem]
    stats: ReviewStats
