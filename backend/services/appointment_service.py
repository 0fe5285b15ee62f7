"""Appointment lifecycle: create, read, update, cancel and delete bookings.

The service owns no database handle of its own. The repositories, the
overlap validator and the slot generator are passed in, so routes build one
service per request from the request's session and tests can build one from
an in-memory session.
"""

import logging
from contextlib import ExitStack, contextmanager
from datetime import date, datetime, timezone
from threading import Lock
from typing import Iterator, Optional

from backend.database import utc_now
from backend.models.appointment import Appointment, AppointmentStatus
from backend.repositories.appointment_repository import AppointmentRepository
from backend.repositories.user_repository import UserRepository
from backend.services.errors import InvalidInputError, NotFoundError
from backend.services.overlap import OverlapValidator, validate_interval
from backend.services.slots import SlotGenerator, TimeSlot

logger = logging.getLogger(__name__)

BOOKING_LOCK_STRIPES = 64
_booking_locks = tuple(Lock() for _ in range(BOOKING_LOCK_STRIPES))


def _stripes_for_interval(start_time: datetime, end_time: datetime) -> list[int]:
    first_day = start_time.date().toordinal()
    last_day = end_time.date().toordinal()
    if last_day - first_day + 1 >= BOOKING_LOCK_STRIPES:
        return list(range(BOOKING_LOCK_STRIPES))
    return sorted({day % BOOKING_LOCK_STRIPES for day in range(first_day, last_day + 1)})


@contextmanager
def booking_lock(start_time: datetime, end_time: datetime) -> Iterator[None]:
    """Serialize check-and-write for every calendar day the interval touches.

    Days share a fixed pool of locks, so the pool never grows. Stripes are
    taken in ascending order to keep concurrent bookings deadlock free.
    """
    with ExitStack() as stack:
        for stripe in _stripes_for_interval(start_time, end_time):
            stack.enter_context(_booking_locks[stripe])
        yield


def normalize_timestamp(value: datetime) -> datetime:
    """Convert to naive UTC (if aware) and truncate to minute precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


def normalize_interval(start_time: datetime, end_time: datetime) -> tuple[datetime, datetime]:
    if start_time is None or end_time is None:
        raise InvalidInputError('Start time and end time are required.')
    start_time = normalize_timestamp(start_time)
    end_time = normalize_timestamp(end_time)
    validate_interval(start_time, end_time)
    return start_time, end_time


def _clean_title(title: str) -> str:
    normalized = (title or '').strip()
    if not normalized:
        raise InvalidInputError('Title is required.')
    return normalized


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    normalized = description.strip()
    return normalized or None


class AppointmentService:
    def __init__(
        self,
        appointments: AppointmentRepository,
        users: UserRepository,
        validator: OverlapValidator,
        slot_generator: SlotGenerator,
    ):
        self.appointments = appointments
        self.users = users
        self.validator = validator
        self.slot_generator = slot_generator

    def create(
        self,
        user_id: int,
        title: str,
        description: Optional[str],
        start_time: datetime,
        end_time: datetime,
    ) -> Appointment:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError('User not found')

        title = _clean_title(title)
        start_time, end_time = normalize_interval(start_time, end_time)

        with booking_lock(start_time, end_time):
            self.validator.validate_no_overlap(start_time, end_time)

            appointment = Appointment(
                user_id=user.id,
                title=title,
                description=_clean_description(description),
                start_time=start_time,
                end_time=end_time,
                status=AppointmentStatus.SCHEDULED,
            )
            saved = self.appointments.save(appointment)

        logger.info('Appointment %s created for user %s (%s - %s)', saved.id, user.id, start_time, end_time)
        return saved

    def get(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError('Appointment not found')
        return appointment

    def list_for_user(self, user_id: int, status: Optional[str] = None) -> list[Appointment]:
        if status is None:
            return self.appointments.find_by_user(user_id)

        normalized = status.strip().upper()
        if normalized not in AppointmentStatus.ALL:
            raise InvalidInputError('Invalid appointment status.')
        return self.appointments.find_by_status_and_user(user_id, normalized)

    def list_all(self) -> list[Appointment]:
        return self.appointments.find_all()

    def update(
        self,
        appointment_id: int,
        title: str,
        description: Optional[str],
        start_time: datetime,
        end_time: datetime,
    ) -> Appointment:
        appointment = self.get(appointment_id)

        title = _clean_title(title)
        start_time, end_time = normalize_interval(start_time, end_time)

        with booking_lock(start_time, end_time):
            # Cancelled appointments take no part in overlap checks.
            if appointment.status == AppointmentStatus.SCHEDULED:
                self.validator.validate_no_overlap(start_time, end_time, exclude_id=appointment.id)

            appointment.title = title
            appointment.description = _clean_description(description)
            appointment.start_time = start_time
            appointment.end_time = end_time
            updated = self.appointments.save(appointment)

        logger.info('Appointment %s updated (%s - %s)', updated.id, start_time, end_time)
        return updated

    def cancel(self, appointment_id: int) -> Appointment:
        appointment = self.get(appointment_id)
        appointment.status = AppointmentStatus.CANCELLED
        cancelled = self.appointments.save(appointment)
        logger.info('Appointment %s cancelled', cancelled.id)
        return cancelled

    def delete(self, appointment_id: int) -> None:
        if not self.appointments.exists_by_id(appointment_id):
            raise NotFoundError('Appointment not found')
        self.appointments.delete_by_id(appointment_id)
        logger.info('Appointment %s deleted', appointment_id)

    def time_slots(self, day: date | datetime) -> list[TimeSlot]:
        return self.slot_generator.generate_slots(day)

    def stats(self, now: Optional[datetime] = None) -> dict:
        now = now or utc_now()
        return {
            'scheduled': self.appointments.count_by_status(AppointmentStatus.SCHEDULED),
            'cancelled': self.appointments.count_by_status(AppointmentStatus.CANCELLED),
            'upcoming': self.appointments.find_upcoming(now),
        }


def build_appointment_service(db) -> AppointmentService:
    appointments = AppointmentRepository(db)
    return AppointmentService(
        appointments=appointments,
        users=UserRepository(db),
        validator=OverlapValidator(appointments),
        slot_generator=SlotGenerator(appointments),
    )
