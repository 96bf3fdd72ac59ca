import logging
from typing import List

from openai import AsyncOpenAI

from vault.errors import InvalidArgument
from vault.services.provider import build_ai_client, parse_embedding, provider_call
from vault.settings import ProviderConfig

logger = logging.getLogger(__name__)


class TextEmbedder:
    """One round trip to the embedding model per call; no retries, no caching."""

    def __init__(self, config: ProviderConfig, ai_client: AsyncOpenAI | None = None):
        self.config = config
        self.ai_client = ai_client or build_ai_client(config)

    async def embed(self, text: str) -> List[float]:
        """Generate an embedding vector for given text."""
        if not text or not text.strip():
            raise InvalidArgument("missing text")

        resp = await provider_call(
            self.ai_client.embeddings.create(
                model=self.config.embed_model,
                input=text,
                encoding_format="float",
            ),
            "embedding",
        )
        vector = parse_embedding(resp)
        logger.debug(f"Embedded {len(text)} chars into {len(vector)} dims")
        return vector
