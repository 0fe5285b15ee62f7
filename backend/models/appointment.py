"""Appointment model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.database import Base, utc_now


class AppointmentStatus:
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"

    ALL = (SCHEDULED, CANCELLED)


class Appointment(Base):
    """Represents a scheduled appointment."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=AppointmentStatus.SCHEDULED)
    created_at = Column(DateTime, default=utc_now)

    user = relationship("User", back_populates="appointments")
