from datetime import datetime
from typing import Optional

from ..models import CustomModel


class PostOut(CustomModel):
    id: int
    title: str
    slug: str
    content: str
    image: str
    topic_id: int
    topic_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
