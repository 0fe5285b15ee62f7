import logging
from typing import Optional

from backend.auth.passwords import hash_password, verify_password
from backend.models.user import User, UserRole
from backend.repositories.user_repository import UserRepository
from backend.services.errors import AuthenticationError, ConflictError

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    def register(self, email: str, password: str, first_name: str, last_name: str) -> User:
        normalized_email = email.strip().lower()
        if self.users.exists_by_email(normalized_email):
            raise ConflictError('Email is already registered')

        user = User(
            email=normalized_email,
            hashed_password=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=UserRole.USER,
        )
        saved = self.users.save(user)
        logger.info('Registered user %s', saved.id)
        return saved

    def authenticate(self, email: str, password: str) -> User:
        user = self.users.find_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning('Failed login for %s', email.strip().lower())
            raise AuthenticationError('Invalid email or password')
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.users.find_by_email(email)

    def list_users(self) -> list[User]:
        return self.users.find_all()

    def ensure_admin(self, email: str, password: str) -> Optional[User]:
        if self.users.exists_by_email(email):
            return None

        admin = User(
            email=email.strip().lower(),
            hashed_password=hash_password(password),
            first_name='Admin',
            last_name='User',
            role=UserRole.ADMIN,
        )
        saved = self.users.save(admin)
        logger.info('Admin user created: %s', saved.email)
        return saved
