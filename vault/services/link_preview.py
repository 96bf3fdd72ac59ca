import logging
import re
from typing import Any

import httpx

from vault.errors import InvalidArgument, UnknownFailure, UpstreamFailure
from vault.schemas.links import LinkPreview

logger = logging.getLogger(__name__)

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)


class LinkPreviewService:
    """Fetches title/description/image metadata for a URL from an API-keyed provider."""

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.http_client = http_client
        self.timeout = timeout

    async def preview(self, url: Any) -> LinkPreview:
        if not self.api_key:
            raise UnknownFailure("missing LINK_PREVIEW_API_KEY")
        if not url or not isinstance(url, str):
            raise InvalidArgument("missing url")
        if not _HTTP_URL.match(url):
            raise InvalidArgument("invalid url")

        params = {"key": self.api_key, "q": url}
        try:
            if self.http_client is not None:
                resp = await self.http_client.get(self.endpoint, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.get(self.endpoint, params=params)
        except httpx.RequestError as e:
            logger.error(f"Link preview request for {url} failed: {e}")
            raise UpstreamFailure(f"link preview failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_error:
            body = data if isinstance(data, dict) else {}
            message = body.get("description") or body.get("error") or "linkpreview_failed"
            logger.warning(f"Link preview for {url} returned {resp.status_code}: {message}")
            raise UpstreamFailure(
                str(message), status_code=resp.status_code, body=resp.text
            )
        if not isinstance(data, dict):
            raise UpstreamFailure("malformed link preview response", body=resp.text[:500])

        return LinkPreview(
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            image=str(data.get("image") or ""),
            url=str(data.get("url") or url),
        )
