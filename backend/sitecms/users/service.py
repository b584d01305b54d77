import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import EmailAlreadyRegistered, RegistrationLimitReached, Unauthenticated
from .models import User as UserModel
from .schema import UserCreate

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


async def next_free_slot(db: AsyncSession) -> Optional[int]:
    """Lowest registration slot not held by a user, or None once the cap is reached."""
    result = await db.execute(
        select(UserModel.registration_slot).where(UserModel.registration_slot.is_not(None))
    )
    taken = set(result.scalars().all())
    for slot in range(1, settings.MAX_USERS + 1):
        if slot not in taken:
            return slot
    return None


async def ensure_registration_open(db: AsyncSession) -> int:
    slot = await next_free_slot(db)
    if slot is None:
        raise RegistrationLimitReached(settings.MAX_USERS)
    return slot


async def create_user(user_data: UserCreate, db: AsyncSession, slot: Optional[int] = None) -> UserModel:
    """
    Persist a new user in a free registration slot.
    Two concurrent registrations racing for the same slot collide on the
    unique index; the loser gets RegistrationLimitReached.
    """
    if slot is None:
        slot = await ensure_registration_open(db)

    if await get_user_by_email(user_data.email, db):
        raise EmailAlreadyRegistered()

    db_user = UserModel(
        name=user_data.name,
        email=user_data.email,
        hashed_password=pwd_context.hash(user_data.password),
        registration_slot=slot,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if await get_user_by_email(user_data.email, db):
            raise EmailAlreadyRegistered()
        raise RegistrationLimitReached(settings.MAX_USERS)
    await db.refresh(db_user)
    logger.info(f"Registered user id={db_user.id} in slot {slot}")
    return db_user


async def delete_all_users(db: AsyncSession) -> int:
    """Out-of-band admin operation: wipe every user and free all registration slots."""
    result = await db.execute(delete(UserModel))
    await db.commit()
    return result.rowcount


async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()

async def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


async def get_identity_user(identity, db: AsyncSession) -> UserModel:
    """The user behind a token; tokens can outlive their user (e.g. after clear-users)."""
    user = await get_user_by_id(identity.user_id, db)
    if user is None:
        raise Unauthenticated("User not found please login again")
    return user
