from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from backend.models.appointment import Appointment, AppointmentStatus
from backend.repositories.appointment_repository import AppointmentRepository
from backend.services.overlap import intervals_overlap

OPEN_TIME = time(8, 0)
CLOSE_TIME = time(18, 0)
SLOT_DURATION_MINUTES = 60
AVAILABLE_TITLE = 'Available'
AVAILABLE_STATUS = 'AVAILABLE'


@dataclass(frozen=True)
class TimeSlot:
    start_time: datetime
    end_time: datetime
    available: bool
    title: str
    status: str


def start_of_day(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time.min)


def iterate_slot_bounds(day: date | datetime) -> list[tuple[datetime, datetime]]:
    day_start = start_of_day(day)
    current = datetime.combine(day_start.date(), OPEN_TIME)
    close = datetime.combine(day_start.date(), CLOSE_TIME)
    step = timedelta(minutes=SLOT_DURATION_MINUTES)

    bounds: list[tuple[datetime, datetime]] = []
    while current + step <= close:
        bounds.append((current, current + step))
        current += step
    return bounds


def find_conflict(
    slot_start: datetime,
    slot_end: datetime,
    appointments: list[Appointment],
) -> Optional[Appointment]:
    for appointment in appointments:
        if appointment.status == AppointmentStatus.CANCELLED:
            continue
        if intervals_overlap(appointment.start_time, appointment.end_time, slot_start, slot_end):
            return appointment
    return None


class SlotGenerator:
    """Builds the hourly availability grid for a single day."""

    def __init__(self, repository: AppointmentRepository):
        self.repository = repository

    def generate_slots(self, day: date | datetime) -> list[TimeSlot]:
        day_start = start_of_day(day)
        booked = self.repository.find_overlapping(day_start, day_start + timedelta(days=1))

        slots: list[TimeSlot] = []
        for slot_start, slot_end in iterate_slot_bounds(day_start):
            conflict = find_conflict(slot_start, slot_end, booked)
            if conflict is None:
                slots.append(TimeSlot(slot_start, slot_end, True, AVAILABLE_TITLE, AVAILABLE_STATUS))
            else:
                slots.append(TimeSlot(slot_start, slot_end, False, conflict.title, conflict.status))
        return slots
