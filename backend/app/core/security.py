import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


ALGORITHM = "HS256"
ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def create_token(
    user_id: str | Any, expires_delta: timedelta, token_type: str = ACCESS_TOKEN
) -> str:
    """
    Create a signed JWT for a user.

    Args:
        user_id: User ID, stored as the token subject
        expires_delta: Time until token expires
        token_type: "access" or "refresh"
    """
    # exp stays in UTC regardless of the configured display timezone
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {
        "exp": expire,
        "sub": str(user_id),
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(user_id: str | Any, expires_delta: timedelta) -> str:
    return create_token(user_id, expires_delta, ACCESS_TOKEN)


def create_refresh_token(user_id: str | Any, expires_delta: timedelta) -> str:
    return create_token(user_id, expires_delta, REFRESH_TOKEN)


def verify_token(token: str, token_type: str = ACCESS_TOKEN) -> str | None:
    """Return the subject of a valid token of the expected type, else None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    user_id: str | None = payload.get("sub")
    if user_id is None or payload.get("type", ACCESS_TOKEN) != token_type:
        return None
    return user_id


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
