import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, ExpiredSignatureError, JWTError
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ValidationError
from ..users import service as user_service
from ..users.models import User
from ..users.schema import UserCreate
from .schema import Identity

logger = logging.getLogger(__name__)


class ExpiredToken(Exception):
    """The token signature is fine but its `exp` claim is in the past."""


class MalformedToken(Exception):
    """Bad signature, bad structure or missing claims."""


def create_access_token(user_id: int, name: str, *, issued_at: Optional[datetime] = None) -> str:
    """
    Sign a token carrying `userId` and `name`.
    Expiry is ACCESS_TOKEN_EXPIRE_MINUTES (24h) after `issued_at`.
    """
    issued_at = issued_at or datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": str(user_id),
        "userId": user_id,
        "name": name,
        "type": "access",
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise ExpiredToken() from e
    except JWTError as e:
        raise MalformedToken(str(e)) from e

    user_id = payload.get("userId")
    name = payload.get("name")
    if payload.get("type") != "access" or not isinstance(user_id, int) or not isinstance(name, str):
        raise MalformedToken("missing identity claims")
    return Identity(user_id=user_id, name=name)


def parse_registration(body: dict) -> UserCreate:
    values = {field: body.get(field) for field in ("name", "email", "password")}
    if not all(values.values()):
        raise ValidationError("All fields are required")
    try:
        return UserCreate.model_validate(values)
    except SchemaValidationError as e:
        error = e.errors()[0]
        field = error["loc"][0] if error.get("loc") else "input"
        if field == "email":
            raise ValidationError("Invalid email address")
        raise ValidationError(f"Invalid {field}: {error['msg']}")


async def authenticate_user(
    db: AsyncSession, email: str, password: str
) -> Optional[User]:
    """Returns the user on a matching email/password pair, otherwise None."""
    user = await user_service.get_user_by_email(email, db)
    if not user or not await user_service.verify_password(password, user.hashed_password):
        return None
    return user
