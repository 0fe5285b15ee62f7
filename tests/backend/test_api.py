import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.auth import jwt_handler
from backend.database import Base, get_db
from backend.main import app
from backend.models.user import User, UserRole


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _register(client: TestClient, email: str) -> dict:
    response = client.post(
        '/api/auth/register',
        json={'email': email, 'password': 'password123', 'first_name': 'Test', 'last_name': 'User'},
    )
    assert response.status_code == 200
    return {'Authorization': f"Bearer {response.json()['token']}"}


def _admin_headers(session_factory) -> dict:
    db = session_factory()
    try:
        admin = User(
            email='admin@appointment.com',
            hashed_password='',
            first_name='Admin',
            last_name='User',
            role=UserRole.ADMIN,
        )
        db.add(admin)
        db.commit()
    finally:
        db.close()
    token = jwt_handler.create_access_token(subject='admin@appointment.com', role=UserRole.ADMIN)
    return {'Authorization': f'Bearer {token}'}


def _book(client: TestClient, headers: dict, start: str, end: str):
    return client.post(
        '/api/appointments',
        json={'title': 'Checkup', 'start_time': start, 'end_time': end},
        headers=headers,
    )


def test_health_endpoint(client) -> None:
    assert client.get('/').json() == {'status': 'Appointment Booking API Running'}


def test_overlapping_booking_returns_conflict(client) -> None:
    first = _register(client, 'first@example.com')
    second = _register(client, 'second@example.com')

    created = _book(client, first, '2024-01-01T09:00:00', '2024-01-01T10:00:00')
    conflict = _book(client, second, '2024-01-01T09:30:00', '2024-01-01T10:30:00')

    assert created.status_code == 201
    assert created.json()['status'] == 'SCHEDULED'
    assert conflict.status_code == 409
    assert conflict.json() == {'detail': 'Time slot overlaps with an existing appointment'}


def test_reversed_interval_returns_bad_request(client) -> None:
    headers = _register(client, 'first@example.com')

    response = _book(client, headers, '2024-01-01T10:00:00', '2024-01-01T09:00:00')

    assert response.status_code == 400
    assert response.json() == {'detail': 'Start time must be before end time.'}


def test_duplicate_registration_returns_conflict(client) -> None:
    _register(client, 'first@example.com')

    response = client.post(
        '/api/auth/register',
        json={'email': 'first@example.com', 'password': 'password123', 'first_name': 'A', 'last_name': 'B'},
    )

    assert response.status_code == 409


def test_login_with_bad_password_returns_unauthorized(client) -> None:
    _register(client, 'first@example.com')

    response = client.post('/api/auth/login', json={'email': 'first@example.com', 'password': 'nope-nope'})

    assert response.status_code == 401
    assert response.json() == {'detail': 'Invalid email or password'}


def test_invalid_token_is_rejected(client) -> None:
    response = client.get('/api/appointments', headers={'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401


def test_slots_endpoint_lists_ten_hourly_slots(client) -> None:
    headers = _register(client, 'first@example.com')
    _book(client, headers, '2024-01-01T09:00:00', '2024-01-01T10:00:00')

    response = client.get('/api/appointments/slots/2024-01-01', headers=headers)

    slots = response.json()
    assert response.status_code == 200
    assert len(slots) == 10
    assert [slot['available'] for slot in slots].count(False) == 1
    assert slots[1]['title'] == 'Checkup'


def test_cancel_then_admin_delete_flow(client, session_factory) -> None:
    headers = _register(client, 'first@example.com')
    admin_headers = _admin_headers(session_factory)
    appointment_id = _book(client, headers, '2024-01-01T09:00:00', '2024-01-01T10:00:00').json()['id']

    cancelled = client.delete(f'/api/appointments/{appointment_id}', headers=headers)
    deleted = client.delete(f'/api/admin/appointments/{appointment_id}', headers=admin_headers)
    missing = client.get(f'/api/appointments/{appointment_id}', headers=headers)

    assert cancelled.json()['status'] == 'CANCELLED'
    assert deleted.status_code == 204
    assert missing.status_code == 404


def test_admin_routes_require_admin_role(client) -> None:
    headers = _register(client, 'first@example.com')

    response = client.get('/api/admin/appointments', headers=headers)

    assert response.status_code == 403
    assert response.json() == {'detail': 'Admin access required'}


def test_admin_can_list_users(client, session_factory) -> None:
    _register(client, 'first@example.com')
    admin_headers = _admin_headers(session_factory)

    response = client.get('/api/admin/users', headers=admin_headers)

    assert response.status_code == 200
    assert {user['email'] for user in response.json()} == {'first@example.com', 'admin@appointment.com'}
