from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from ..models import CustomModel


class TipIn(CustomModel):
    """Create/replace body. Both fields are required; the service reports what is missing."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, json_schema_extra={"example": "Use pathlib"})
    description: Optional[str] = Field(None, json_schema_extra={"example": "Path objects beat os.path string juggling."})


class TipOut(CustomModel):
    id: int
    title: str
    description: str
    user_id: int
    created_at: datetime
    updated_at: datetime
