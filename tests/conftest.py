import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('SEED_ADMIN', 'false')

from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment, AppointmentStatus  # noqa: E402
from backend.models.user import User, UserRole  # noqa: E402
from backend.services.appointment_service import build_appointment_service  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def make_user(db, email: str = 'john@example.com', role: str = UserRole.USER) -> User:
    user = User(
        email=email,
        hashed_password='not-a-real-hash',
        first_name='John',
        last_name='Doe',
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_appointment(
    db,
    user: User,
    start_time: datetime,
    end_time: datetime,
    title: str = 'Checkup',
    status: str = AppointmentStatus.SCHEDULED,
) -> Appointment:
    appointment = Appointment(
        user_id=user.id,
        title=title,
        start_time=start_time,
        end_time=end_time,
        status=status,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


@pytest.fixture
def user(db_session) -> User:
    return make_user(db_session)


@pytest.fixture
def other_user(db_session) -> User:
    return make_user(db_session, email='jane@example.com')


@pytest.fixture
def admin_user(db_session) -> User:
    return make_user(db_session, email='admin@appointment.com', role=UserRole.ADMIN)


@pytest.fixture
def appointment_service(db_session):
    return build_appointment_service(db_session)


@pytest.fixture
def appointment_factory(db_session):
    def factory(owner: User, start_time: datetime, end_time: datetime, **kwargs) -> Appointment:
        return make_appointment(db_session, owner, start_time, end_time, **kwargs)

    return factory
