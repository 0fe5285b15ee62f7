"""User repository - database operations for users."""

from typing import Optional

from sqlalchemy.orm import Session

from backend.models.user import User


class UserRepository:
    """Repository for user database operations"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def find_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id.asc()).all()

    def save(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
