import logging
from typing import Optional, Sequence, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.policy import ensure_owner, ensure_owner_if_strict
from ..auth.schema import Identity
from ..config import settings
from ..errors import Forbidden, NotFound
from ..pagination import paginate, search_filter
from ..users import service as user_service
from ..utils import parse_id, require_fields
from .models import Tip
from .schemas import TipIn

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Title and Description Required"


async def get_tip(db: AsyncSession, tip_id: Union[int, str]) -> Optional[Tip]:
    pk = parse_id(tip_id)
    if pk is None:
        return None
    result = await db.execute(select(Tip).where(Tip.id == pk))
    return result.scalar_one_or_none()


async def list_tips(
    db: AsyncSession,
    *,
    page: int = 1,
    search: Optional[str] = None,
) -> Tuple[Sequence[Tip], int]:
    stmt = select(Tip).order_by(Tip.created_at.desc(), Tip.id.desc())
    condition = search_filter(search, Tip.title, Tip.description)
    if condition is not None:
        stmt = stmt.where(condition)
    return await paginate(db, stmt, page=page, per_page=settings.PAGE_SIZE)


async def create_tip(db: AsyncSession, identity: Identity, data: TipIn) -> Tip:
    await user_service.get_identity_user(identity, db)
    require_fields(data.title, data.description, detail=MISSING_FIELDS)

    tip = Tip(
        title=data.title.strip(),
        description=data.description.strip(),
        user_id=identity.user_id,
    )
    db.add(tip)
    await db.commit()
    await db.refresh(tip)
    logger.info(f"Tip {tip.id} created by user {identity.user_id}")
    return tip


async def update_tip(db: AsyncSession, identity: Identity, tip_id: Union[int, str], data: TipIn) -> Tip:
    tip = await get_tip(db, tip_id)
    if tip is None:
        raise Forbidden("tip")
    ensure_owner(tip.user_id, identity, "tip")
    require_fields(data.title, data.description, detail=MISSING_FIELDS)

    tip.title = data.title.strip()
    tip.description = data.description.strip()
    await db.commit()
    await db.refresh(tip)
    logger.info(f"Tip {tip.id} updated by user {identity.user_id}")
    return tip


async def delete_tip(db: AsyncSession, identity: Identity, tip_id: Union[int, str]) -> None:
    tip = await get_tip(db, tip_id)
    if tip is None:
        raise NotFound("Tip not found")
    ensure_owner_if_strict(tip.user_id, identity, "tip")
    await db.delete(tip)
    await db.commit()
    logger.info(f"Tip {tip_id} deleted by user {identity.user_id}")
