import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool

from vault.errors import InvalidArgument, NotFound
from vault.schemas.item import ItemOut, ItemResult
from vault.settings import ProviderConfig

logger = logging.getLogger(__name__)


class SemanticSearchService:
    def __init__(self, repo, embedder, config: ProviderConfig):
        self.repo = repo
        self.embedder = embedder
        self.config = config

    async def search(
        self,
        query: str,
        user_id: str,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[ItemResult]:
        """
        Embeds a query and returns the owner's items whose cosine similarity
        clears the threshold, best match first.
        """
        query = (query or "").strip()
        user_id = (user_id or "").strip()
        if not user_id:
            raise InvalidArgument("missing userId")
        if not query:
            raise InvalidArgument("missing query")

        vector = await self.embedder.embed(query)
        return await run_in_threadpool(self._nearest, vector, user_id, limit, threshold)

    def find_similar(
        self,
        item_id: Optional[int],
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[ItemResult]:
        """Items near the target's stored embedding, excluding the target itself."""
        if not item_id:
            raise InvalidArgument("missing itemId")

        item = self.repo.get_item(item_id)
        if item is None:
            raise NotFound("item not found")
        if item.embedding is None or len(item.embedding) == 0:
            raise InvalidArgument("item has no embedding")

        return self._nearest(
            list(item.embedding), item.user_id, limit, threshold, exclude_id=item.id
        )

    def _nearest(self, vector, user_id, limit, threshold, exclude_id=None):
        limit = limit or self.config.result_cap
        threshold = self.config.similarity_threshold if threshold is None else threshold

        rows = self.repo.nearest(
            vector,
            user_id=user_id,
            threshold=threshold,
            limit=limit,
            exclude_id=exclude_id,
        )
        results = [
            ItemResult(
                **ItemOut.model_validate(item).model_dump(), similarity=round(sim, 4)
            )
            for item, sim in rows
            # never another owner's item, never the target itself
            if item.user_id == user_id and item.id != exclude_id
        ]
        logger.info(f"Semantic search for user {user_id} returned {len(results)} items")
        return results
