from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import get_current_user
from backend.database import get_db
from backend.models.user import User
from backend.repositories.user_repository import UserRepository
from backend.routes.common import database_unavailable
from backend.services.user_service import UserService

router = APIRouter(tags=['auth'])

MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized or normalized.startswith('@') or normalized.endswith('@'):
            raise ValueError('A valid email is required.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


class AuthResponse(BaseModel):
    token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    email: str
    first_name: str
    last_name: str
    role: str


def build_auth_response(user: User, include_token: bool = True) -> AuthResponse:
    response = AuthResponse(
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )
    if include_token:
        response.token = jwt_handler.create_access_token(subject=user.email, user_id=user.id, role=user.role)
        response.token_type = 'Bearer'
        response.expires_in = jwt_handler.expires_in_seconds()
    return response


@router.post('/register', response_model=AuthResponse)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = UserService(UserRepository(db)).register(
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc

    return build_auth_response(user)


@router.post('/login', response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = UserService(UserRepository(db)).authenticate(data.email, data.password)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc, db) from exc

    return build_auth_response(user)


@router.get('/profile', response_model=AuthResponse, response_model_exclude_none=True)
def profile(current_user: User = Depends(get_current_user)):
    return build_auth_response(current_user, include_token=False)
