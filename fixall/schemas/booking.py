from pydantic import BaseModel, Field, conint, field_validator
from datetime import datetime
from typing import List, Optional

from fixall.schemas.user import UserMini, TechnicianMini


# --- CREATE ---
class BookingImageCreate(BaseModel):
    data: str = Field(..., min_length=1, description="base64 encoded image")
    content_type: str = "image/jpeg"


class BookingCreate(BaseModel):
    tech_id: int
    description: str
    scheduled_date: Optional[datetime] = None
    address: Optional[str] = ""
    images: List[BookingImageCreate] = []

    @field_validator("description")
    @classmethod
    def description_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v


# --- ACTIONS ---
class CompleteJobRequest(BaseModel):
    price: float = Field(default=0, ge=0)
    notes: Optional[str] = ""


class ReceiptCreate(BaseModel):
    labor_cost: float = Field(..., gt=0)
    material_cost: float = Field(default=0, ge=0)
    additional_charges: float = Field(default=0, ge=0)
    time_spent: Optional[str] = ""
    notes: Optional[str] = ""


class ReviewCreate(BaseModel):
    rating: conint(ge=1, le=5) = Field(..., description="Rating 1-5")
    comment: Optional[str] = ""


class MessageCreate(BaseModel):
    message: str = ""


# --- RESPONSE ---
class BookingImageResponse(BaseModel):
    data: str
    content_type: str
    uploaded_at: Optional[datetime]

    class Config:
        from_attributes = True


class ReceiptResponse(BaseModel):
    labor_cost: Optional[float]
    material_cost: Optional[float]
    additional_charges: Optional[float]
    total_amount: Optional[float]
    time_spent: Optional[str]
    notes: Optional[str]
    sent_at: Optional[datetime]


class BookingReviewResponse(BaseModel):
    rating: int
    comment: Optional[str]
    created_at: Optional[datetime]


class MessageResponse(BaseModel):
    sender: str
    sender_name: Optional[str]
    message: str
    timestamp: datetime

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    customer_id: int
    tech_id: int
    customer: Optional[UserMini] = None
    tech: Optional[TechnicianMini] = None
    description: str
    status: str
    payment: str
    price: float
    address: Optional[str]
    notes: Optional[str]
    images: List[BookingImageResponse] = []
    scheduled_date: Optional[datetime]
    started_at: Optional[datetime]
    completed_date: Optional[datetime]
    receipt: Optional[ReceiptResponse] = None
    review: Optional[BookingReviewResponse] = None
    messages: List[MessageResponse] = []
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class BookingActionResponse(BaseModel):
    message: str
    booking: BookingResponse


class ReceiptSentResponse(BookingActionResponse):
    receipt: ReceiptResponse


class MessagesResponse(BaseModel):
    message: str
    messages: List[MessageResponse]


class StatusMessage(BaseModel):
    message: str


class ClearHistoryResponse(BaseModel):
    message: str
    deleted_count: int
