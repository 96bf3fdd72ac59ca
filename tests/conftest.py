import threading
from datetime import datetime, timezone
from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from vault.errors import PersistenceFailure, install_error_handlers
from vault.settings import ProviderConfig


def make_config(**overrides) -> ProviderConfig:
    values = {
        "provider_api_key": "test-key",
        "chat_model": "test/chat",
        "vision_model": "test/vision",
        "embed_model": "test/embed",
        "base_url": "https://llm.example/api/v1",
    }
    values.update(overrides)
    return ProviderConfig(**values)


def make_item(
    id=1,
    user_id="owner-a",
    title="",
    raw_content="",
    url=None,
    category=None,
    summary_tip=None,
    image_url=None,
    embedding=None,
    images=(),
    type="prompt",
):
    """Item stand-in exposing the attributes the services and schemas read."""
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return SimpleNamespace(
        id=id,
        user_id=user_id,
        type=type,
        title=title,
        raw_content=raw_content,
        url=url,
        category=category,
        summary=None,
        summary_tip=summary_tip,
        image_url=image_url,
        embedding=embedding,
        embedding_dim=len(embedding) if embedding is not None else None,
        created_at=stamp,
        updated_at=stamp,
        assets=[SimpleNamespace(image_url=u) for u in images],
    )


class FakeItemsRepo:
    """
    In-memory ItemsRepo stand-in.
    Set fail_save=True to make every write raise PersistenceFailure.
    threads records the thread id of every store call.
    """

    def __init__(self, items=(), recent_rows=None, nearest_rows=None, fail_save=False):
        self.items = {item.id: item for item in items}
        self.recent_rows = recent_rows or []
        self.nearest_rows = nearest_rows or []
        self.fail_save = fail_save
        self.recent_calls = []
        self.nearest_calls = []
        self.saved_tips = []
        self.saved_embeddings = []
        self.cleared = []
        self.threads = []

    def get_item(self, item_id):
        self.threads.append(threading.get_ident())
        return self.items.get(item_id)

    def recent_search_texts(self, user_id, limit=200):
        self.recent_calls.append((user_id, limit))
        return list(self.recent_rows)

    def nearest(self, vector, user_id, threshold, limit, exclude_id=None):
        self.threads.append(threading.get_ident())
        self.nearest_calls.append(
            {
                "vector": list(vector),
                "user_id": user_id,
                "threshold": threshold,
                "limit": limit,
                "exclude_id": exclude_id,
            }
        )
        return list(self.nearest_rows)

    def save_summary_tip(self, item, tip):
        self.threads.append(threading.get_ident())
        if self.fail_save:
            raise PersistenceFailure("failed to save summary tip: db down")
        item.summary_tip = tip
        self.saved_tips.append((item.id, tip))

    def save_embedding(self, item, vector):
        self.threads.append(threading.get_ident())
        if self.fail_save:
            raise PersistenceFailure("failed to save embedding: db down")
        item.embedding = list(vector)
        item.embedding_dim = len(vector)
        self.saved_embeddings.append((item.id, list(vector)))

    def clear_embedding(self, item):
        self.threads.append(threading.get_ident())
        item.embedding = None
        item.embedding_dim = None
        self.cleared.append(item.id)


class FakeEmbedder:
    def __init__(self, vector=None, error=None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.calls = []

    async def embed(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return list(self.vector)


class FakeCreate:
    """Async ``create`` endpoint that records kwargs and returns or raises."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    @property
    def kwargs(self):
        return self.calls[-1] if self.calls else None

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.result


class FakeAIClient:
    def __init__(self, chat_result=None, embed_result=None, error=None):
        self.chat_create = FakeCreate(chat_result, error)
        self.embed_create = FakeCreate(embed_result, error)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.chat_create))
        self.embeddings = SimpleNamespace(create=self.embed_create)


def chat_payload(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def embedding_payload(vector):
    return {"data": [{"index": 0, "embedding": vector}]}


class FakeQuery:
    def __init__(self, rows):
        self.rows = rows
        self.filters = []
        self.order = None
        self.limit_value = None

    def filter(self, expr):
        self.filters.append(expr)
        return self

    def order_by(self, expr):
        self.order = expr
        return self

    def limit(self, value):
        self.limit_value = value
        return self

    def all(self):
        return self.rows


class FakeSession:
    """
    Lightweight SQLAlchemy Session stand-in for repo tests.
    """

    def __init__(self, rows=None, record_map=None, commit_error=None):
        self.rows = rows or []
        self.record_map = record_map or {}
        self.commit_error = commit_error
        self.committed = False
        self.rolled_back = False
        self.last_query = None
        self.query_cols = None

    def query(self, *cols):
        self.query_cols = cols
        self.last_query = FakeQuery(self.rows)
        return self.last_query

    def get(self, model, key):
        return self.record_map.get(key)

    def commit(self):
        if self.commit_error:
            raise self.commit_error
        self.committed = True

    def rollback(self):
        self.rolled_back = True


def build_client(router, overrides=None):
    app = FastAPI()
    install_error_handlers(app)
    for dependency, override in (overrides or {}).items():
        app.dependency_overrides[dependency] = override
    app.include_router(router)
    return TestClient(app)
