import logging

from fastapi import APIRouter, Depends

from vault import dependencies as deps
from vault.errors import UnknownFailure, VaultError
from vault.schemas.links import LinkPreviewRequest, LinkPreviewResponse
from vault.services.link_preview import LinkPreviewService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/link-preview", response_model=LinkPreviewResponse)
async def link_preview(
    request: LinkPreviewRequest,
    service: LinkPreviewService = Depends(deps.get_link_preview_service),
):
    try:
        preview = await service.preview(request.url)
        return LinkPreviewResponse(preview=preview)
    except VaultError:
        raise
    except Exception as e:
        logger.error(f"Error in /link-preview endpoint: {e}")
        raise UnknownFailure(str(e) or "unknown_error") from e
