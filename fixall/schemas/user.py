from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class UserMini(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class TechnicianMini(UserMini):
    skills: List[str] = []

    class Config:
        from_attributes = True


class ReviewResponse(BaseModel):
    id: int
    rating: int
    comment: Optional[str] = None
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    approved: bool
    available: bool
    phone: Optional[str] = None
    address: Optional[str] = None
    experience: int = 0
    bio: Optional[str] = None
    skills: List[str] = []
    average_rating: float = 0.0
    review_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TechnicianProfileResponse(UserResponse):
    reviews: List[ReviewResponse] = []

    class Config:
        from_attributes = True
