import logging
from datetime import datetime
from typing import Optional

from backend.repositories.appointment_repository import AppointmentRepository
from backend.services.errors import ConflictError, InvalidInputError

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = 'Time slot overlaps with an existing appointment'


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def validate_interval(start_time: datetime, end_time: datetime) -> None:
    if start_time is None or end_time is None:
        raise InvalidInputError('Start time and end time are required.')
    if start_time >= end_time:
        raise InvalidInputError('Start time must be before end time.')


class OverlapValidator:
    """Rejects intervals that intersect a non-cancelled appointment."""

    def __init__(self, repository: AppointmentRepository):
        self.repository = repository

    def validate_no_overlap(
        self,
        start_time: datetime,
        end_time: datetime,
        exclude_id: Optional[int] = None,
    ) -> None:
        validate_interval(start_time, end_time)

        overlaps = self.repository.find_overlapping(start_time, end_time, exclude_id=exclude_id)
        if overlaps:
            logger.warning(
                'Rejected interval %s - %s: overlaps appointment %s',
                start_time,
                end_time,
                overlaps[0].id,
            )
            raise ConflictError(OVERLAP_MESSAGE)
