import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from openai import AsyncOpenAI

from vault.errors import InvalidArgument, NotFound, PersistenceFailure, UpstreamFailure
from vault.schemas.enrich import TipResponse
from vault.services.provider import build_ai_client, parse_chat_text, provider_call
from vault.settings import ProviderConfig

logger = logging.getLogger(__name__)

CONTENT_PREFIX_CHARS = 1000
IMAGE_ONLY_MESSAGE = (
    "This tip was generated from images only and may be less accurate; "
    "adding a keyword or two to the title or content will improve it."
)

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)
_MD_IMAGE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_MD_LINK = re.compile(r"\[[^\]]*\]\([^)]*\)")
_BARE_URL = re.compile(r"https?://\S*", re.IGNORECASE)
_BRACKETS = re.compile(r"[()<>]")
_WHITESPACE = re.compile(r"\s+")
_LEADING_LABEL = re.compile(
    r"^[\s*_#>\"'“”「」]*"
    r"(?:ai\s+)?(?:summary\s+tip|summary|tip|tl;?\s*dr|one[-\s]?liner|"
    r"摘要|提示|重點|重点|簡介|简介|總結|总结)"
    r"[\s*_]*(?:[:：]|\s*[-–]\s)[\s*_]*",
    re.IGNORECASE,
)
_WRAPPING_QUOTES = "\"'“”「」『』"


@dataclass(frozen=True)
class SummaryVariant:
    name: str
    model_attr: str
    max_tokens: int
    max_images: int
    max_length: int = 100
    temperature: float = 0.2


# Card tip persisted on the item; images go to the vision model.
TIP = SummaryVariant(name="tip", model_attr="vision_model", max_tokens=80, max_images=4)
# Draft summary for an unsaved item, never persisted.
BRIEF = SummaryVariant(
    name="brief", model_attr="chat_model", max_tokens=60, max_images=2
)


def clean_tip(raw: str, max_length: int = 100) -> str:
    """Strip labels, markdown and URLs from a model answer and hard-cap its length."""
    if not raw:
        return ""
    text = _MD_IMAGE.sub("", raw)
    text = _MD_LINK.sub("", text)
    text = _BARE_URL.sub("", text)
    text = _BRACKETS.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()

    previous = None
    while previous != text:
        previous = text
        text = _LEADING_LABEL.sub("", text, count=1).strip()

    if len(text) > 1 and text[0] in _WRAPPING_QUOTES and text[-1] in _WRAPPING_QUOTES:
        text = text[1:-1].strip()

    return text[:max_length]


def system_prompt(language: str) -> str:
    return (
        f"You are a note-taking assistant. Reply with exactly one concise line in {language}, "
        "about 30 to 60 characters long.\n"
        "- Summarize the text first; if images are attached, briefly describe them after that.\n"
        "- If there are only images, describe them in very general terms and do not guess details.\n"
        "- Do not start with a label such as 'Summary:' or 'Tip:'.\n"
        "- Never output URLs, markdown links or markdown image syntax."
    )


def build_user_parts(
    title: str, content: str, url: str, image_urls: List[str]
) -> List[Dict[str, Any]]:
    has_text = bool(title or content)
    lines = []
    if title:
        lines.append(f"Title: {title}")
    if content:
        lines.append(f"Content (excerpt): {content[:CONTENT_PREFIX_CHARS]}")
    if url:
        lines.append(f"Link (context only, never output it): {url}")
    if image_urls:
        lines.append(f"{len(image_urls)} image(s) attached.")
        if not has_text:
            lines.append("There is no title or content; summarize from the images alone.")

    parts: List[Dict[str, Any]] = [{"type": "text", "text": "\n".join(lines)}]
    for image_url in image_urls:
        parts.append(
            {"type": "image_url", "image_url": {"url": image_url, "detail": "low"}}
        )
    return parts


def usable_images(urls, limit: int) -> List[str]:
    seen = []
    for url in urls:
        if isinstance(url, str) and _HTTP_URL.match(url) and url not in seen:
            seen.append(url)
    return seen[:limit]


class SummarizationService:
    def __init__(
        self,
        repo,
        config: ProviderConfig,
        ai_client: AsyncOpenAI | None = None,
    ):
        self.repo = repo
        self.config = config
        self.ai_client = ai_client or build_ai_client(config)

    async def summarize_item(
        self, item_id: Optional[int], variant: SummaryVariant = TIP
    ) -> TipResponse:
        """
        Generate a short tip for a stored item and save it to ``summary_tip``.

        A failed save raises ``PersistenceFailure`` carrying the generated tip,
        so callers can tell it apart from a failed generation.
        """
        if not item_id:
            raise InvalidArgument("missing itemId")

        item, title, content, url, images = await run_in_threadpool(
            self._load, item_id, variant
        )
        if not (title or content or url or images):
            raise InvalidArgument("item has no content to summarize")

        tip = await self._generate(variant, title, content, url, images)
        message = IMAGE_ONLY_MESSAGE if images and not (title or content) else None

        try:
            await run_in_threadpool(self.repo.save_summary_tip, item, tip)
        except PersistenceFailure as e:
            result = {"tip": tip}
            if message:
                result["message"] = message
            raise PersistenceFailure(e.message, result=result) from e

        logger.info(f"Saved {variant.name} summary for item {item.id}")
        return TipResponse(tip=tip, message=message)

    def _load(self, item_id: int, variant: SummaryVariant):
        item = self.repo.get_item(item_id)
        if item is None:
            raise NotFound("item not found")

        # item.assets is lazy-loaded
        images = usable_images(
            [item.image_url] + [asset.image_url for asset in item.assets or []],
            variant.max_images,
        )
        return (
            item,
            (item.title or "").strip(),
            (item.raw_content or "").strip(),
            (item.url or "").strip(),
            images,
        )

    async def summarize_draft(
        self,
        title: str,
        description: str,
        images: List[str],
        variant: SummaryVariant = BRIEF,
    ) -> str:
        title = (title or "").strip()
        description = (description or "").strip()
        image_urls = usable_images(images or [], variant.max_images)
        if not (title or description or image_urls):
            raise InvalidArgument("missing title, description or images")

        return await self._generate(variant, title, description, "", image_urls)

    async def _generate(
        self,
        variant: SummaryVariant,
        title: str,
        content: str,
        url: str,
        image_urls: List[str],
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt(self.config.summary_language)},
            {"role": "user", "content": build_user_parts(title, content, url, image_urls)},
        ]
        resp = await provider_call(
            self.ai_client.chat.completions.create(
                model=getattr(self.config, variant.model_attr),
                messages=messages,
                max_tokens=variant.max_tokens,
                temperature=variant.temperature,
            ),
            "summary",
        )
        raw = parse_chat_text(resp)
        tip = clean_tip(raw, variant.max_length)
        if not tip:
            raise UpstreamFailure("model returned no usable summary", body=raw)
        logger.debug(f"Generated {variant.name} summary: {tip!r}")
        return tip
