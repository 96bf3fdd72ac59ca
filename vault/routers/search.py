import logging

from fastapi import APIRouter, Depends

from vault import dependencies as deps
from vault.errors import UnknownFailure, VaultError
from vault.schemas.search import (
    LexicalSearchResponse,
    SearchRequest,
    SemanticSearchResponse,
    SimilarRequest,
)
from vault.services.lexical_search import LexicalSearchService
from vault.services.semantic_search import SemanticSearchService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/ai-search", response_model=LexicalSearchResponse)
def lexical_search(
    request: SearchRequest,
    service: LexicalSearchService = Depends(deps.get_lexical_search_service),
):
    """
    Keyword search over the owner's recent item tips.
    Works without embeddings, so it stays available when the provider is down.
    """
    try:
        ids = service.search(request.query, request.userId)
        return LexicalSearchResponse(ids=ids)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /ai-search endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e


@router.post("/search", response_model=SemanticSearchResponse)
async def semantic_search(
    request: SearchRequest,
    service: SemanticSearchService = Depends(deps.get_semantic_search_service),
):
    """Embed the query and return the owner's nearest items above the threshold."""
    try:
        results = await service.search(
            request.query,
            request.userId,
            limit=request.limit,
            threshold=request.threshold,
        )
        return SemanticSearchResponse(results=results)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /search endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e


@router.post("/similar", response_model=SemanticSearchResponse)
def similar_items(
    request: SimilarRequest,
    service: SemanticSearchService = Depends(deps.get_semantic_search_service),
):
    try:
        results = service.find_similar(
            request.itemId, limit=request.limit, threshold=request.threshold
        )
        return SemanticSearchResponse(results=results)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /similar endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e
