import pytest

from backend.auth.passwords import verify_password
from backend.models.user import UserRole
from backend.repositories.user_repository import UserRepository
from backend.services.errors import AuthenticationError, ConflictError
from backend.services.user_service import UserService


@pytest.fixture
def user_service(db_session) -> UserService:
    return UserService(UserRepository(db_session))


def test_register_hashes_password_and_normalizes_email(user_service) -> None:
    user = user_service.register(' John@Example.com ', 'password123', ' John ', 'Doe')

    assert user.email == 'john@example.com'
    assert user.first_name == 'John'
    assert user.role == UserRole.USER
    assert user.hashed_password != 'password123'
    assert verify_password('password123', user.hashed_password)


def test_register_rejects_duplicate_email(user_service) -> None:
    user_service.register('john@example.com', 'password123', 'John', 'Doe')

    with pytest.raises(ConflictError) as exception_info:
        user_service.register('JOHN@example.com', 'other-password', 'Johnny', 'Doe')

    assert exception_info.value.message == 'Email is already registered'


def test_authenticate_returns_user_for_valid_credentials(user_service) -> None:
    registered = user_service.register('john@example.com', 'password123', 'John', 'Doe')

    assert user_service.authenticate('john@example.com', 'password123').id == registered.id


@pytest.mark.parametrize(
    ('email', 'password'),
    [
        ('john@example.com', 'wrong-password'),
        ('unknown@example.com', 'password123'),
    ],
)
def test_authenticate_rejects_bad_credentials(user_service, email: str, password: str) -> None:
    user_service.register('john@example.com', 'password123', 'John', 'Doe')

    with pytest.raises(AuthenticationError) as exception_info:
        user_service.authenticate(email, password)

    assert exception_info.value.message == 'Invalid email or password'


def test_ensure_admin_creates_admin_once(user_service) -> None:
    created = user_service.ensure_admin('admin@appointment.com', 'admin123')
    again = user_service.ensure_admin('admin@appointment.com', 'admin123')

    assert created.role == UserRole.ADMIN
    assert again is None
    assert len(user_service.list_users()) == 1


def test_verify_password_rejects_unrecognized_hash() -> None:
    assert verify_password('password123', 'not-a-real-hash') is False
