from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    type: str
    title: Optional[str] = None
    raw_content: Optional[str] = None
    url: Optional[str] = None
    category: List[str] = Field(default_factory=list)
    summary: Optional[str] = None
    summary_tip: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def _null_category(cls, value):
        return value or []


class ItemResult(ItemOut):
    similarity: float = Field(
        ...,
        ge=-1,
        le=1,
        description="Cosine similarity between the query vector and the item's embedding.",
    )
