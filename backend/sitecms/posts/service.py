import logging
import re
from typing import Optional, Sequence, Tuple, Union

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.policy import ensure_owner_if_strict
from ..auth.schema import Identity
from ..config import settings
from ..errors import NotFound
from ..media.uploader import discard_image, store_image, validate_image
from ..pagination import paginate, search_filter
from ..topics import service as topic_service
from ..utils import parse_id, require_fields
from .models import Post

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_NOT_SLUG = re.compile(r"[^a-z0-9-]")


def slugify(title: str) -> str:
    """'Hello World!' -> 'hello-world'. Lowercase, whitespace to hyphens, drop everything else."""
    return _NOT_SLUG.sub("", _WHITESPACE.sub("-", title.strip().lower()))


async def get_post(db: AsyncSession, post_id: Union[int, str]) -> Optional[Post]:
    pk = parse_id(post_id)
    if pk is None:
        return None
    stmt = (
        select(Post)
        .where(Post.id == pk)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_post_or_404(db: AsyncSession, post_id: Union[int, str]) -> Post:
    post = await get_post(db, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


async def list_posts(
    db: AsyncSession,
    *,
    page: int = 1,
    search: Optional[str] = None,
) -> Tuple[Sequence[Post], int]:
    stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
    condition = search_filter(search, Post.title, Post.content)
    if condition is not None:
        stmt = stmt.where(condition)
    return await paginate(db, stmt, page=page, per_page=settings.PAGE_SIZE)


async def create_post(
    db: AsyncSession,
    uploader,
    identity: Identity,
    *,
    title: Optional[str],
    content: Optional[str],
    topic_id: Optional[int],
    image: Optional[UploadFile],
) -> Post:
    slug = slugify(title or "")
    require_fields(title, slug, content, topic_id)
    validate_image(image, required=True)
    await topic_service.get_topic_or_404(db, topic_id)

    uploaded = await store_image(uploader, image)
    post = Post(
        title=title.strip(),
        slug=slug,
        content=content,
        image=uploaded.url,
        image_public_id=uploaded.public_id,
        topic_id=topic_id,
    )
    db.add(post)
    await db.commit()
    logger.info(f"Post {post.id} ({post.slug}) created by user {identity.user_id}")
    return await get_post_or_404(db, post.id)


async def update_post(
    db: AsyncSession,
    uploader,
    identity: Identity,
    post_id: Union[int, str],
    *,
    title: Optional[str],
    content: Optional[str],
    topic_id: Optional[int],
    image: Optional[UploadFile],
) -> Post:
    post = await get_post_or_404(db, post_id)
    # any signed-in user may edit a post unless STRICT_OWNERSHIP is on
    ensure_owner_if_strict(post.topic.user_id if post.topic else None, identity, "post")
    slug = slugify(title or "")
    require_fields(title, slug, content, topic_id)
    validate_image(image, required=False)
    if topic_id != post.topic_id:
        await topic_service.get_topic_or_404(db, topic_id)

    replaced_public_id = None
    if image is not None and image.filename:
        uploaded = await store_image(uploader, image)
        replaced_public_id = post.image_public_id
        post.image = uploaded.url
        post.image_public_id = uploaded.public_id

    post.title = title.strip()
    post.slug = slug
    post.content = content
    post.topic_id = topic_id
    await db.commit()
    logger.info(f"Post {post.id} updated by user {identity.user_id}")

    await discard_image(uploader, replaced_public_id)
    return await get_post_or_404(db, post.id)


async def delete_post(db: AsyncSession, identity: Identity, post_id: Union[int, str]) -> None:
    post = await get_post_or_404(db, post_id)
    ensure_owner_if_strict(post.topic.user_id if post.topic else None, identity, "post")
    await db.delete(post)
    await db.commit()
    logger.info(f"Post {post_id} deleted by user {identity.user_id}")
