import threading

import pytest

from vault.errors import InvalidArgument, NotFound, PersistenceFailure, UpstreamFailure
from vault.services.enrichment import EMPTY_CONTENT, EnrichmentService, item_embedding_text
from tests.conftest import FakeEmbedder, FakeItemsRepo, make_item


def test_item_embedding_text_joins_non_empty_fields():
    item = make_item(
        title="Title",
        raw_content="z" * 1500,
        url="https://example.com",
        category=["design", "logo"],
    )

    text = item_embedding_text(item)

    assert text == "\n".join(["Title", "z" * 1000, "https://example.com", "design logo"])


def test_item_embedding_text_skips_blank_fields():
    item = make_item(title="  ", raw_content="body", category=[])
    assert item_embedding_text(item) == "body"


@pytest.mark.asyncio
async def test_embed_item_stores_vector_and_reports_dimension():
    item = make_item(id=3, title="Hello", raw_content="World")
    repo = FakeItemsRepo(items=[item])
    embedder = FakeEmbedder(vector=[0.1] * 768)

    result = await EnrichmentService(repo, embedder).embed_item(3)

    assert result.ok is True
    assert result.dim == 768
    assert embedder.calls == ["Hello\nWorld"]
    assert repo.saved_embeddings == [(3, [0.1] * 768)]
    assert item.embedding_dim == 768


@pytest.mark.asyncio
async def test_embed_item_with_no_text_clears_embedding():
    item = make_item(id=4, embedding=[0.5, 0.5])
    repo = FakeItemsRepo(items=[item])
    embedder = FakeEmbedder()

    result = await EnrichmentService(repo, embedder).embed_item(4)

    assert result.message == EMPTY_CONTENT
    assert result.dim is None
    assert repo.cleared == [4]
    assert embedder.calls == []
    assert item.embedding is None


@pytest.mark.asyncio
async def test_embed_item_missing_and_unknown():
    service = EnrichmentService(FakeItemsRepo(), FakeEmbedder())

    with pytest.raises(InvalidArgument):
        await service.embed_item(0)
    with pytest.raises(NotFound):
        await service.embed_item(12)


@pytest.mark.asyncio
async def test_embed_item_provider_failure_leaves_item_untouched():
    item = make_item(id=5, title="T", embedding=[0.9])
    repo = FakeItemsRepo(items=[item])
    service = EnrichmentService(repo, FakeEmbedder(error=UpstreamFailure("down")))

    with pytest.raises(UpstreamFailure):
        await service.embed_item(5)

    assert repo.saved_embeddings == []
    assert item.embedding == [0.9]


@pytest.mark.asyncio
async def test_embed_item_save_failure_is_persistence_failure():
    repo = FakeItemsRepo(items=[make_item(id=6, title="T")], fail_save=True)

    with pytest.raises(PersistenceFailure):
        await EnrichmentService(repo, FakeEmbedder()).embed_item(6)


@pytest.mark.asyncio
async def test_embed_item_runs_store_calls_off_the_event_loop():
    stored = make_item(id=4, title="Hello")
    empty = make_item(id=5)
    repo = FakeItemsRepo(items=[stored, empty])
    service = EnrichmentService(repo, FakeEmbedder())

    await service.embed_item(4)
    await service.embed_item(5)

    assert len(repo.threads) == 4
    assert threading.get_ident() not in repo.threads
