from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config

def create_access_token(
    subject: str,
    user_id: int | None = None,
    role: str | None = None,
    expires_minutes: int | None = None,
) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
    payload = {"sub": subject, "exp": expire, "iat": datetime.now(timezone.utc)}
    if user_id is not None:
        payload["user_id"] = user_id
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def expires_in_seconds() -> int:
    return config.JWT_EXPIRES_MINUTES * 60
