from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ..auth.dependencies import CurrentIdentity
from ..auth.schema import Identity
from ..config import settings
from ..database import SessionDep
from ..media.uploader import CloudinaryUploader, get_uploader
from ..models import Message, Page
from ..pagination import normalise_search, parse_page
from . import service
from .schemas import PostOut

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.get("", response_model=Page[PostOut])
async def list_posts(db: SessionDep, page: Optional[str] = None, search: Optional[str] = None):
    page_no = parse_page(page)
    items, total = await service.list_posts(db, page=page_no, search=normalise_search(search))
    return Page[PostOut].build(items, total=total, page=page_no, per_page=settings.PAGE_SIZE)


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    db: SessionDep,
    identity: Identity = CurrentIdentity,
    uploader: CloudinaryUploader = Depends(get_uploader),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    topic_id: Optional[int] = Form(None, alias="topicId"),
    image: Optional[UploadFile] = File(None),
):
    # a client-sent slug is ignored; it is always derived from the title
    return await service.create_post(
        db, uploader, identity, title=title, content=content, topic_id=topic_id, image=image
    )


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: str, db: SessionDep):
    return await service.get_post_or_404(db, post_id)


@router.put("/{post_id}", response_model=PostOut)
async def update_post(
    post_id: str,
    db: SessionDep,
    identity: Identity = CurrentIdentity,
    uploader: CloudinaryUploader = Depends(get_uploader),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    topic_id: Optional[int] = Form(None, alias="topicId"),
    image: Optional[UploadFile] = File(None),
):
    return await service.update_post(
        db, uploader, identity, post_id, title=title, content=content, topic_id=topic_id, image=image
    )


@router.delete("/{post_id}", response_model=Message)
async def delete_post(post_id: str, db: SessionDep, identity: Identity = CurrentIdentity):
    await service.delete_post(db, identity, post_id)
    return {"message": "Post deleted successfully"}
