"""Appointment repository - database operations for appointments."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.models.appointment import Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def exists_by_id(self, appointment_id: int) -> bool:
        return self.db.query(Appointment.id).filter(Appointment.id == appointment_id).first() is not None

    def find_all(self) -> list[Appointment]:
        return self.db.query(Appointment).order_by(Appointment.start_time.asc()).all()

    def find_by_user(self, user_id: int) -> list[Appointment]:
        return self.db.query(Appointment).filter(Appointment.user_id == user_id).all()

    def find_by_status_and_user(self, user_id: int, status: str) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.user_id == user_id,
            Appointment.status == status,
        ).all()

    def find_between(self, start_time: datetime, end_time: datetime) -> list[Appointment]:
        """Appointments fully contained in [start_time, end_time]."""
        return self.db.query(Appointment).filter(
            Appointment.start_time >= start_time,
            Appointment.end_time <= end_time,
        ).order_by(Appointment.start_time.asc()).all()

    def find_overlapping(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[int] = None,
    ) -> list[Appointment]:
        """Non-cancelled appointments whose interval intersects [start_time, end_time)."""
        query = self.db.query(Appointment).filter(
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.start_time < end_time,
            Appointment.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.order_by(Appointment.start_time.asc()).all()

    def find_by_day(self, day_start: datetime, day_end: datetime) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.start_time >= day_start,
            Appointment.start_time < day_end,
        ).order_by(Appointment.start_time.asc()).all()

    def count_by_status(self, status: str) -> int:
        return self.db.query(func.count(Appointment.id)).filter(Appointment.status == status).scalar() or 0

    def find_upcoming(self, now: datetime) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.start_time >= now,
            Appointment.status == AppointmentStatus.SCHEDULED,
        ).order_by(Appointment.start_time.asc()).all()

    def save(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def delete_by_id(self, appointment_id: int) -> None:
        appointment = self.get(appointment_id)
        if appointment is None:
            return
        self.db.delete(appointment)
        self.db.commit()
