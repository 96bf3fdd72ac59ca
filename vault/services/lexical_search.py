import logging
import re
from typing import Iterable, List, Optional, Tuple

from vault.errors import InvalidArgument
from vault.repos.items_repo import RECENT_ITEMS_LIMIT

logger = logging.getLogger(__name__)

# Whitespace plus Latin and CJK commas, full stops and semicolons.
_DELIMITERS = re.compile(r"[,\s，。；;、]+")


def tokenize(query: str) -> List[str]:
    return [token for token in _DELIMITERS.split(query) if token]


def score_text(tokens: List[str], phrase: str, text: str) -> int:
    """Count token hits in text; a multi-token query also earns a point for the exact phrase."""
    score = sum(1 for token in tokens if token in text)
    if len(tokens) > 1 and phrase in text:
        score += 1
    return score


def rank(
    tokens: List[str], phrase: str, rows: Iterable[Tuple[int, Optional[str]]]
) -> List[int]:
    scored = []
    for item_id, text in rows:
        score = score_text(tokens, phrase, (text or "").lower())
        if score > 0:
            scored.append((item_id, score))
    # sort() is stable, so ties keep the store's recency order
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return [item_id for item_id, _ in scored]


class LexicalSearchService:
    """Best-effort keyword fallback over the owner's most recent items."""

    def __init__(self, repo, candidate_limit: int = RECENT_ITEMS_LIMIT):
        self.repo = repo
        self.candidate_limit = candidate_limit

    def search(self, query: str, user_id: str) -> List[int]:
        query = (query or "").strip()
        user_id = (user_id or "").strip()
        if not user_id:
            raise InvalidArgument("missing userId")
        if not query:
            raise InvalidArgument("missing query")

        phrase = query.lower()
        tokens = tokenize(phrase)
        if not tokens:
            return []

        rows = self.repo.recent_search_texts(user_id, limit=self.candidate_limit)
        ids = rank(tokens, phrase, rows)
        logger.debug(
            f"Lexical search over {len(rows)} items with {len(tokens)} tokens matched {len(ids)}"
        )
        return ids
