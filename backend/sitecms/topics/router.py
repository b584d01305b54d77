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
from .schemas import TopicOut

router = APIRouter(prefix="/api/v1/topics", tags=["topics"])


@router.get("", response_model=Page[TopicOut])
async def list_topics(db: SessionDep, page: Optional[str] = None, search: Optional[str] = None):
    page_no = parse_page(page)
    items, total = await service.list_topics(db, page=page_no, search=normalise_search(search))
    return Page[TopicOut].build(items, total=total, page=page_no, per_page=settings.PAGE_SIZE)


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
async def create_topic(
    db: SessionDep,
    identity: Identity = CurrentIdentity,
    uploader: CloudinaryUploader = Depends(get_uploader),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    return await service.create_topic(
        db, uploader, identity, name=name, description=description, image=image
    )


@router.get("/{topic_id}", response_model=TopicOut)
async def get_topic(topic_id: str, db: SessionDep):
    return await service.get_topic_or_404(db, topic_id)


@router.put("/{topic_id}", response_model=TopicOut)
async def update_topic(
    topic_id: str,
    db: SessionDep,
    identity: Identity = CurrentIdentity,
    uploader: CloudinaryUploader = Depends(get_uploader),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    return await service.update_topic(
        db, uploader, identity, topic_id, name=name, description=description, image=image
    )


@router.delete("/{topic_id}", response_model=Message)
async def delete_topic(topic_id: str, db: SessionDep, identity: Identity = CurrentIdentity):
    await service.delete_topic(db, identity, topic_id)
    return {"message": "Topic deleted successfully"}
