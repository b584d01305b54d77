from datetime import datetime, timezone
from math import ceil
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CustomModel(BaseModel):
    """
    Common base for every schema in the project.
    Fields are snake_case in Python and camelCase on the wire.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        # accept both `topicId` and `topic_id`
        populate_by_name=True,
        # build schemas straight from SQLAlchemy rows
        from_attributes=True,
        extra="forbid",
    )

    @field_serializer("created_at", "updated_at", check_fields=False)
    def serialize_datetime(self, value, _info):
        """Timestamps go out as ISO-8601 in UTC; naive values are assumed to be UTC."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc).isoformat()
        return value


class Page(CustomModel, Generic[T]):
    """List envelope shared by every paginated endpoint."""
    current_page: int
    total_pages: int
    total_items: int
    per_page: int
    data: List[T]

    @classmethod
    def build(cls, items, *, total: int, page: int, per_page: int) -> "Page[T]":
        return cls.model_validate(
            {
                "current_page": page,
                "total_pages": ceil(total / per_page) if per_page else 0,
                "total_items": total,
                "per_page": per_page,
                "data": list(items),
            },
            from_attributes=True,
        )


class Message(CustomModel):
    message: str
