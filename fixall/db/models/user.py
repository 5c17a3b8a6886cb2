# fixall/db/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from fixall.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer", server_default="customer")

    # technicians start unapproved, everyone else is approved on signup
    approved = Column(Boolean, nullable=False, default=True)
    available = Column(Boolean, nullable=False, default=True)

    phone = Column(String, nullable=True, default="")
    address = Column(String, nullable=True)
    experience = Column(Integer, nullable=False, default=0)
    bio = Column(String, nullable=True)
    skills = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # reviews received (technicians only)
    reviews = relationship(
        "TechnicianReview",
        foreign_keys="TechnicianReview.technician_id",
        back_populates="technician",
        cascade="all, delete-orphan",
        order_by="TechnicianReview.created_at.desc()",
        lazy="selectin",
    )
    authored_reviews = relationship(
        "TechnicianReview",
        foreign_keys="TechnicianReview.author_id",
        back_populates="author",
    )

    customer_bookings = relationship(
        "Booking",
        foreign_keys="Booking.customer_id",
        back_populates="customer",
        cascade="all, delete-orphan",
    )
    tech_bookings = relationship(
        "Booking",
        foreign_keys="Booking.tech_id",
        back_populates="tech",
        cascade="all, delete-orphan",
    )

    @property
    def review_count(self) -> int:
        return len(self.reviews or [])

    @property
    def average_rating(self) -> float:
        if not self.reviews:
            return 0.0
        return round(sum(r.rating for r in self.reviews) / len(self.reviews), 1)
