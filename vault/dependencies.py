from fastapi import Depends

from vault.db.postgres.base import get_db
from vault.errors import UnknownFailure
from vault.repos.items_repo import ItemsRepo
from vault.services.enrichment import EnrichmentService
from vault.services.lexical_search import LexicalSearchService
from vault.services.link_preview import LinkPreviewService
from vault.services.provider import build_ai_client
from vault.services.semantic_search import SemanticSearchService
from vault.services.summarizer import SummarizationService
from vault.services.text_embedder import TextEmbedder
from vault.settings import ProviderConfig, settings


def get_provider_config() -> ProviderConfig:
    return settings.provider_config()


def get_items_repo(db=Depends(get_db)):
    return ItemsRepo(db)


def get_ai_client(config: ProviderConfig = Depends(get_provider_config)):
    try:
        return build_ai_client(config)
    except ValueError as e:
        raise UnknownFailure(str(e)) from e


def get_text_embedder(
    config: ProviderConfig = Depends(get_provider_config),
    ai_client=Depends(get_ai_client),
):
    return TextEmbedder(config, ai_client=ai_client)


def get_lexical_search_service(repo=Depends(get_items_repo)):
    return LexicalSearchService(repo)


def get_semantic_search_service(
    repo=Depends(get_items_repo),
    embedder=Depends(get_text_embedder),
    config: ProviderConfig = Depends(get_provider_config),
):
    return SemanticSearchService(repo=repo, embedder=embedder, config=config)


def get_summarization_service(
    repo=Depends(get_items_repo),
    config: ProviderConfig = Depends(get_provider_config),
    ai_client=Depends(get_ai_client),
):
    return SummarizationService(repo=repo, config=config, ai_client=ai_client)


def get_enrichment_service(
    repo=Depends(get_items_repo),
    embedder=Depends(get_text_embedder),
):
    return EnrichmentService(repo=repo, embedder=embedder)


def get_link_preview_service():
    return LinkPreviewService(
        api_key=settings.LINK_PREVIEW_API_KEY, endpoint=settings.LINK_PREVIEW_URL
    )
