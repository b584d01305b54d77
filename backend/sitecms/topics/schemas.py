from datetime import datetime
from typing import List

from ..models import CustomModel


class TopicPostSummary(CustomModel):
    """Posts embedded in a topic response."""
    id: int
    title: str
    slug: str
    image: str
    content: str
    created_at: datetime
    updated_at: datetime


class TopicOut(CustomModel):
    id: int
    name: str
    description: str
    image: str
    user_id: int
    created_at: datetime
    updated_at: datetime
    posts: List[TopicPostSummary] = []
