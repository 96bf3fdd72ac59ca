from typing import List, Optional

from pydantic import BaseModel, Field

from vault.schemas.item import ItemResult


class SearchRequest(BaseModel):
    query: str = ""
    userId: str = ""
    limit: Optional[int] = Field(None, ge=1, le=50)
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0)

    # { "query": "prompt ideas for logos", "userId": "4f6c..." }


class SimilarRequest(BaseModel):
    itemId: Optional[int] = None
    limit: Optional[int] = Field(None, ge=1, le=50)
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0)


class LexicalSearchResponse(BaseModel):
    ok: bool = True
    ids: List[int]


class SemanticSearchResponse(BaseModel):
    ok: bool = True
    results: List[ItemResult]
