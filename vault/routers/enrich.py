import logging

from fastapi import APIRouter, Depends

from vault import dependencies as deps
from vault.errors import UnknownFailure, VaultError
from vault.schemas.enrich import (
    DraftSummaryRequest,
    DraftSummaryResponse,
    EmbedRequest,
    EmbedResponse,
    ItemRequest,
    ProcessItemResponse,
    TipResponse,
)
from vault.services.enrichment import EnrichmentService
from vault.services.summarizer import SummarizationService
from vault.services.text_embedder import TextEmbedder

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/embed", response_model=EmbedResponse)
async def embed(
    request: EmbedRequest,
    embedder: TextEmbedder = Depends(deps.get_text_embedder),
):
    """Return the embedding for arbitrary text without storing it."""
    try:
        vector = await embedder.embed(request.text)
        return EmbedResponse(embedding=vector, dim=len(vector))
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /embed endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e


@router.post("/process-item", response_model=ProcessItemResponse)
async def process_item(
    request: ItemRequest,
    service: EnrichmentService = Depends(deps.get_enrichment_service),
):
    """Embed a stored item's text and save the vector on the item."""
    try:
        return await service.embed_item(request.itemId)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /process-item endpoint for {request.itemId}: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e


@router.post("/ai-tip", response_model=TipResponse, response_model_exclude_none=True)
async def ai_tip(
    request: ItemRequest,
    service: SummarizationService = Depends(deps.get_summarization_service),
):
    """
    Generate the short card tip for a stored item and save it.
    A save failure answers 500 with the generated tip and ``saved: false``.
    """
    try:
        return await service.summarize_item(request.itemId)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /ai-tip endpoint for {request.itemId}: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e


@router.post("/summarize", response_model=DraftSummaryResponse)
async def summarize_draft(
    request: DraftSummaryRequest,
    service: SummarizationService = Depends(deps.get_summarization_service),
):
    """Summarize an item that has not been saved yet."""
    try:
        summary = await service.summarize_draft(
            request.title, request.description, request.images
        )
        return DraftSummaryResponse(summary=summary)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /summarize endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e
