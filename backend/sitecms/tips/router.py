from typing import Optional

from fastapi import APIRouter, status

from ..auth.dependencies import CurrentIdentity
from ..auth.schema import Identity
from ..config import settings
from ..database import SessionDep
from ..errors import NotFound
from ..models import Message, Page
from ..pagination import normalise_search, parse_page
from . import service
from .schemas import TipIn, TipOut

router = APIRouter(prefix="/api/v1/tips", tags=["tips"])


@router.get("", response_model=Page[TipOut])
async def list_tips(db: SessionDep, page: Optional[str] = None, search: Optional[str] = None):
    page_no = parse_page(page)
    items, total = await service.list_tips(db, page=page_no, search=normalise_search(search))
    return Page[TipOut].build(items, total=total, page=page_no, per_page=settings.PAGE_SIZE)


@router.post("", response_model=TipOut, status_code=status.HTTP_201_CREATED)
async def create_tip(body: TipIn, db: SessionDep, identity: Identity = CurrentIdentity):
    return await service.create_tip(db, identity, body)


@router.get("/{tip_id}", response_model=TipOut)
async def get_tip(tip_id: str, db: SessionDep):
    tip = await service.get_tip(db, tip_id)
    if not tip:
        raise NotFound("Tip not found")
    return tip


@router.put("/{tip_id}", response_model=TipOut)
async def update_tip(tip_id: str, body: TipIn, db: SessionDep, identity: Identity = CurrentIdentity):
    return await service.update_tip(db, identity, tip_id, body)


@router.delete("/{tip_id}", response_model=Message)
async def delete_tip(tip_id: str, db: SessionDep, identity: Identity = CurrentIdentity):
    await service.delete_tip(db, identity, tip_id)
    return {"message": "Tip deleted successfully"}
