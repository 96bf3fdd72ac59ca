from typing import Any, Optional

from pydantic import BaseModel


class LinkPreviewRequest(BaseModel):
    # Left untyped so a non-string url is reported as "missing url", not a schema error.
    url: Optional[Any] = None


class LinkPreview(BaseModel):
    title: str = ""
    description: str = ""
    image: str = ""
    url: str


class LinkPreviewResponse(BaseModel):
    ok: bool = True
    preview: LinkPreview
