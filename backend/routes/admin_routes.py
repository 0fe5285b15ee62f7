from datetime import datetime

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import require_admin
from backend.database import get_db
from backend.models.user import User
from backend.repositories.user_repository import UserRepository
from backend.routes.appointment_routes import AppointmentRequest, AppointmentResponse, to_appointment_response
from backend.routes.common import database_unavailable
from backend.services.appointment_service import build_appointment_service
from backend.services.user_service import UserService

router = APIRouter(tags=['admin'], dependencies=[Depends(require_admin)])


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AppointmentStatsResponse(BaseModel):
    scheduled: int
    cancelled: int
    upcoming: list[AppointmentResponse]


@router.get('/appointments', response_model=list[AppointmentResponse])
def list_all_appointments(db: Session = Depends(get_db)):
    try:
        appointments = build_appointment_service(db).list_all()
        return [to_appointment_response(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/appointments/{appointment_id}', response_model=AppointmentResponse)
def admin_update_appointment(appointment_id: int, data: AppointmentRequest, db: Session = Depends(get_db)):
    try:
        appointment = build_appointment_service(db).update(
            appointment_id,
            title=data.title,
            description=data.description,
            start_time=data.start_time,
            end_time=data.end_time,
        )
        return to_appointment_response(appointment)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc


@router.delete('/appointments/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def admin_delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    try:
        build_appointment_service(db).delete(appointment_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get('/users', response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    try:
        return UserService(UserRepository(db)).list_users()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/stats', response_model=AppointmentStatsResponse)
def appointment_stats(db: Session = Depends(get_db)):
    try:
        stats = build_appointment_service(db).stats()
        return AppointmentStatsResponse(
            scheduled=stats['scheduled'],
            cancelled=stats['cancelled'],
            upcoming=[to_appointment_response(appointment) for appointment in stats['upcoming']],
        )
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc
