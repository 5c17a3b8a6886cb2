from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from fixall.db.base import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    tech_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    description = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    payment = Column(String, nullable=False, default="pending")
    price = Column(Float, nullable=False, default=0)

    address = Column(String, nullable=True, default="")
    notes = Column(String, nullable=True, default="")

    scheduled_date = Column(DateTime, default=datetime.utcnow)
    started_at = Column(DateTime, nullable=True)
    completed_date = Column(DateTime, nullable=True)

    # receipt, set by the technician
    receipt_labor_cost = Column(Float, nullable=True)
    receipt_material_cost = Column(Float, nullable=True)
    receipt_additional_charges = Column(Float, nullable=True)
    receipt_total_amount = Column(Float, nullable=True)
    receipt_time_spent = Column(String, nullable=True)
    receipt_notes = Column(String, nullable=True)
    receipt_sent_at = Column(DateTime, nullable=True)

    # review, set once by the customer
    review_rating = Column(Integer, nullable=True)
    review_comment = Column(String, nullable=True)
    review_created_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    customer = relationship("User", foreign_keys=[customer_id], back_populates="customer_bookings")
    tech = relationship("User", foreign_keys=[tech_id], back_populates="tech_bookings")
    images = relationship(
        "BookingImage", cascade="all, delete-orphan", order_by="BookingImage.id", lazy="selectin"
    )
    messages = relationship(
        "BookingMessage", cascade="all, delete-orphan", order_by="BookingMessage.id", lazy="selectin"
    )

    @property
    def receipt(self):
        if self.receipt_sent_at is None:
            return None
        return {
            "labor_cost": self.receipt_labor_cost,
            "material_cost": self.receipt_material_cost,
            "additional_charges": self.receipt_additional_charges,
            "total_amount": self.receipt_total_amount,
            "time_spent": self.receipt_time_spent,
            "notes": self.receipt_notes,
            "sent_at": self.receipt_sent_at,
        }

    @property
    def review(self):
        if self.review_rating is None:
            return None
        return {
            "rating": self.review_rating,
            "comment": self.review_comment,
            "created_at": self.review_created_at,
        }


class BookingImage(Base):
    __tablename__ = "booking_images"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    data = Column(Text, nullable=False)   # base64 payload
    content_type = Column(String, nullable=False, default="image/jpeg")
    uploaded_at = Column(DateTime, default=datetime.utcnow)


class BookingMessage(Base):
    __tablename__ = "booking_messages"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    sender = Column(String, nullable=False)   # customer | technician
    sender_name = Column(String, nullable=True)
    message = Column(String, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)
