import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vault.errors import PersistenceFailure
from vault.models.item import Item

logger = logging.getLogger(__name__)

RECENT_ITEMS_LIMIT = 200


class ItemsRepo:
    """Owner-scoped reads and enrichment writes against the items table."""

    def __init__(self, db: Session, item_model=Item):
        self.db = db
        self.item_model = item_model

    def get_item(self, item_id: int) -> Optional[Item]:
        return self.db.get(self.item_model, item_id)

    def recent_search_texts(
        self, user_id: str, limit: int = RECENT_ITEMS_LIMIT
    ) -> List[Tuple[int, Optional[str]]]:
        model = self.item_model
        rows = (
            self.db.query(model.id, model.summary_tip)
            .filter(model.user_id == user_id)
            .order_by(model.created_at.desc())
            .limit(limit)
            .all()
        )
        return [(item_id, tip) for item_id, tip in rows]

    def nearest(
        self,
        vector: Sequence[float],
        user_id: str,
        threshold: float,
        limit: int,
        exclude_id: Optional[int] = None,
    ) -> List[Tuple[Item, float]]:
        """
        Cosine nearest neighbours among the owner's items.

        Only vectors carrying the same dimension tag as the query are compared.
        """
        model = self.item_model
        distance = model.embedding.cosine_distance(list(vector))
        similarity = (1 - distance).label("similarity")

        query = (
            self.db.query(model, similarity)
            .filter(model.user_id == user_id)
            .filter(model.embedding.isnot(None))
            .filter(model.embedding_dim == len(vector))
            .filter(similarity >= threshold)
        )
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)

        rows = query.order_by(similarity.desc()).limit(limit).all()
        return [(item, float(sim)) for item, sim in rows]

    def save_summary_tip(self, item: Item, tip: str) -> None:
        item.summary_tip = tip
        self._commit(item, "summary tip")

    def save_embedding(self, item: Item, vector: Sequence[float]) -> None:
        item.embedding = list(vector)
        item.embedding_dim = len(vector)
        self._commit(item, "embedding")

    def clear_embedding(self, item: Item) -> None:
        item.embedding = None
        item.embedding_dim = None
        self._commit(item, "embedding")

    def _commit(self, item: Item, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save {what} for item {item.id}: {e}")
            raise PersistenceFailure(f"failed to save {what}: {e}") from e
        logger.debug(f"Saved {what} for item {item.id}")
