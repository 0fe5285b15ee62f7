from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.database import get_db
from backend.models.appointment import Appointment
from backend.models.user import User, UserRole
from backend.routes.common import database_unavailable
from backend.services.appointment_service import build_appointment_service

router = APIRouter(tags=['appointments'])

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


class AppointmentRequest(BaseModel):
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        if len(normalized) > MAX_TITLE_LENGTH:
            raise ValueError(f'Title must be {MAX_TITLE_LENGTH} characters or fewer.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')

        return normalized


class AppointmentResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    status: str
    user_name: str | None = None
    user_email: str | None = None
    created_at: datetime | None = None


class TimeSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool
    title: str
    status: str

    class Config:
        from_attributes = True


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    user = appointment.user
    return AppointmentResponse(
        id=appointment.id,
        title=appointment.title,
        description=appointment.description,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        status=appointment.status,
        user_name=user.full_name if user else None,
        user_email=user.email if user else None,
        created_at=appointment.created_at,
    )


def ensure_can_access(appointment: Appointment, current_user: User) -> None:
    if current_user.role == UserRole.ADMIN:
        return
    if appointment.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only the user who booked this appointment can access it.',
        )


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: AppointmentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        appointment = build_appointment_service(db).create(
            user_id=current_user.id,
            title=data.title,
            description=data.description,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        return to_appointment_response(appointment)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc


@router.get('', response_model=list[AppointmentResponse])
def list_my_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        appointments = build_appointment_service(db).list_for_user(current_user.id, status=status_filter)
        return [to_appointment_response(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/slots/{day}', response_model=list[TimeSlotResponse])
def list_time_slots(
    day: date,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    del current_user

    try:
        return build_appointment_service(db).time_slots(day)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        appointment = build_appointment_service(db).get(appointment_id)
        ensure_can_access(appointment, current_user)
        return to_appointment_response(appointment)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: AppointmentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        service = build_appointment_service(db)
        ensure_can_access(service.get(appointment_id), current_user)
        appointment = service.update(
            appointment_id,
            title=data.title,
            description=data.description,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        return to_appointment_response(appointment)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc


@router.delete('/{appointment_id}', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        service = build_appointment_service(db)
        ensure_can_access(service.get(appointment_id), current_user)
        return to_appointment_response(service.cancel(appointment_id))
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc
