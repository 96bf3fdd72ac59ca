import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from vault.errors import InvalidArgument, NotFound
from vault.schemas.enrich import ProcessItemResponse
from vault.services.summarizer import CONTENT_PREFIX_CHARS

logger = logging.getLogger(__name__)

EMPTY_CONTENT = "empty_content"


def item_embedding_text(item) -> str:
    """Title, content prefix, URL and categories, one per line."""
    parts = [
        (item.title or "").strip(),
        (item.raw_content or "").strip()[:CONTENT_PREFIX_CHARS],
        (item.url or "").strip(),
        " ".join(item.category or []).strip(),
    ]
    return "\n".join(part for part in parts if part)


class EnrichmentService:
    """Embeds a stored item's text and saves the vector with its dimension tag."""

    def __init__(self, repo, embedder):
        self.repo = repo
        self.embedder = embedder

    async def embed_item(self, item_id: Optional[int]) -> ProcessItemResponse:
        if not item_id:
            raise InvalidArgument("missing itemId")

        item, text = await run_in_threadpool(self._load, item_id)
        if not text:
            await run_in_threadpool(self.repo.clear_embedding, item)
            logger.info(f"Item {item.id} has no text; cleared its embedding")
            return ProcessItemResponse(message=EMPTY_CONTENT)

        vector = await self.embedder.embed(text)
        await run_in_threadpool(self.repo.save_embedding, item, vector)
        logger.info(f"Stored {len(vector)}-dim embedding for item {item.id}")
        return ProcessItemResponse(dim=len(vector))

    def _load(self, item_id):
        item = self.repo.get_item(item_id)
        if item is None:
            raise NotFound("item not found")
        return item, item_embedding_text(item)
