from typing import List, Optional

from pydantic import BaseModel, Field


class EmbedRequest(BaseModel):
    text: str = ""


class EmbedResponse(BaseModel):
    ok: bool = True
    embedding: List[float]
    dim: int


class ItemRequest(BaseModel):
    itemId: Optional[int] = None


class ProcessItemResponse(BaseModel):
    ok: bool = True
    dim: Optional[int] = None
    message: Optional[str] = None


class TipResponse(BaseModel):
    ok: bool = True
    tip: str
    message: Optional[str] = None


class DraftSummaryRequest(BaseModel):
    title: str = ""
    description: str = ""
    images: List[str] = Field(default_factory=list)


class DraftSummaryResponse(BaseModel):
    ok: bool = True
    summary: str
