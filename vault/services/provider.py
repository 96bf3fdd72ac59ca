"""
Shared plumbing for calls to the OpenRouter (OpenAI-compatible) gateway.

Responses are validated against strict models here so that a malformed
or empty body surfaces as ``UpstreamFailure`` instead of a ``None`` deep
inside a service.
"""

import logging
from typing import Any, Awaitable, List, Optional, TypeVar, Union

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError

from vault.errors import UpstreamFailure
from vault.settings import ProviderConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _ChatMessage(BaseModel):
    content: Optional[str] = None


class _ChatChoice(BaseModel):
    message: Optional[_ChatMessage] = None
    text: Optional[str] = None


class ChatCompletion(BaseModel):
    choices: List[_ChatChoice] = Field(..., min_length=1)


class _EmbeddingDatum(BaseModel):
    embedding: List[float] = Field(..., min_length=1)


class EmbeddingResult(BaseModel):
    data: List[_EmbeddingDatum] = Field(..., min_length=1)


def build_ai_client(config: ProviderConfig) -> AsyncOpenAI:
    key = config.provider_api_key.get_secret_value()
    if not key:
        raise ValueError("OPENROUTER_API_KEY must be set to call the AI provider")
    return AsyncOpenAI(
        api_key=key,
        base_url=config.base_url,
        max_retries=0,
        default_headers={"HTTP-Referer": config.site_url, "X-Title": config.app_title},
    )


def _as_dict(payload: Any) -> Any:
    if hasattr(payload, "model_dump"):
        return payload.model_dump()
    return payload


def _preview(payload: Any) -> str:
    return str(payload)[:500]


def parse_chat_text(payload: Union[dict, Any]) -> str:
    """Return the first choice's text, accepting message content or legacy text."""
    raw = _as_dict(payload)
    try:
        completion = ChatCompletion.model_validate(raw)
    except ValidationError as e:
        raise UpstreamFailure(
            "malformed chat completion response", body=_preview(raw)
        ) from e

    choice = completion.choices[0]
    text = (choice.message.content if choice.message else None) or choice.text or ""
    text = text.strip()
    if not text:
        raise UpstreamFailure("empty chat completion", body=_preview(raw))
    return text


def parse_embedding(payload: Union[dict, Any]) -> List[float]:
    raw = _as_dict(payload)
    try:
        result = EmbeddingResult.model_validate(raw)
    except ValidationError as e:
        raise UpstreamFailure("malformed embedding response", body=_preview(raw)) from e
    return result.data[0].embedding


async def provider_call(call: Awaitable[T], what: str) -> T:
    """Await a single provider round trip, mapping SDK errors to UpstreamFailure."""
    try:
        return await call
    except openai.APIStatusError as e:
        body = e.response.text if e.response is not None else None
        logger.error(f"{what} failed with status {e.status_code}: {body}")
        raise UpstreamFailure(
            f"{what} failed: {e.message}", status_code=e.status_code, body=body
        ) from e
    except openai.APIConnectionError as e:
        logger.error(f"{what} could not reach provider: {e}")
        raise UpstreamFailure(f"{what} failed: {e}") from e
