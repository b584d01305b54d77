import logging
from typing import Optional, Sequence, Tuple, Union

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.policy import ensure_owner, ensure_owner_if_strict
from ..auth.schema import Identity
from ..config import settings
from ..errors import Forbidden, NotFound
from ..media.uploader import discard_image, store_image, validate_image
from ..pagination import paginate, search_filter
from ..users import service as user_service
from ..utils import parse_id, require_fields
from .models import Topic

logger = logging.getLogger(__name__)


async def get_topic(db: AsyncSession, topic_id: Union[int, str]) -> Optional[Topic]:
    pk = parse_id(topic_id)
    if pk is None:
        return None
    stmt = (
        select(Topic)
        .where(Topic.id == pk)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_topic_or_404(db: AsyncSession, topic_id: Union[int, str]) -> Topic:
    topic = await get_topic(db, topic_id)
    if topic is None:
        raise NotFound("Topic not found")
    return topic


async def list_topics(
    db: AsyncSession,
    *,
    page: int = 1,
    search: Optional[str] = None,
) -> Tuple[Sequence[Topic], int]:
    stmt = select(Topic).order_by(Topic.created_at.desc(), Topic.id.desc())
    condition = search_filter(search, Topic.name, Topic.description)
    if condition is not None:
        stmt = stmt.where(condition)
    return await paginate(db, stmt, page=page, per_page=settings.PAGE_SIZE)


async def create_topic(
    db: AsyncSession,
    uploader,
    identity: Identity,
    *,
    name: Optional[str],
    description: Optional[str],
    image: Optional[UploadFile],
) -> Topic:
    await user_service.get_identity_user(identity, db)
    require_fields(name, description)
    validate_image(image, required=True)

    uploaded = await store_image(uploader, image)
    topic = Topic(
        name=name.strip(),
        description=description.strip(),
        image=uploaded.url,
        image_public_id=uploaded.public_id,
        user_id=identity.user_id,
    )
    db.add(topic)
    await db.commit()
    logger.info(f"Topic {topic.id} created by user {identity.user_id}")
    return await get_topic_or_404(db, topic.id)


async def update_topic(
    db: AsyncSession,
    uploader,
    identity: Identity,
    topic_id: Union[int, str],
    *,
    name: Optional[str],
    description: Optional[str],
    image: Optional[UploadFile],
) -> Topic:
    topic = await get_topic(db, topic_id)
    if topic is None:
        raise Forbidden("topic")
    ensure_owner(topic.user_id, identity, "topic")
    require_fields(name, description)
    validate_image(image, required=False)

    replaced_public_id = None
    if image is not None and image.filename:
        uploaded = await store_image(uploader, image)
        replaced_public_id = topic.image_public_id
        topic.image = uploaded.url
        topic.image_public_id = uploaded.public_id

    topic.name = name.strip()
    topic.description = description.strip()
    await db.commit()
    logger.info(f"Topic {topic.id} updated by user {identity.user_id}")

    await discard_image(uploader, replaced_public_id)
    return await get_topic_or_404(db, topic.id)


async def delete_topic(db: AsyncSession, identity: Identity, topic_id: Union[int, str]) -> None:
    topic = await get_topic_or_404(db, topic_id)
    ensure_owner_if_strict(topic.user_id, identity, "topic")
    await db.delete(topic)
    await db.commit()
    logger.info(f"Topic {topic_id} deleted by user {identity.user_id}")
