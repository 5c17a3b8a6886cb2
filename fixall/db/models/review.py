# fixall/db/models/review.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from fixall.db.base import Base


class TechnicianReview(Base):
    """Copy of a booking review kept on the technician's profile."""

    __tablename__ = "technician_reviews"

    id = Column(Integer, primary_key=True, index=True)
    technician_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)

    rating = Column(Integer, nullable=False)   # 1..5
    comment = Column(String, nullable=True, default="")

    created_at = Column(DateTime, default=datetime.utcnow)

    technician = relationship("User", foreign_keys=[technician_id], back_populates="reviews")
    author = relationship("User", foreign_keys=[author_id], back_populates="authored_reviews")

    @property
    def author_name(self):
        return self.author.name if self.author else None
