"""LLM text generation with an offline keyword fallback."""
import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from langchain_openai import ChatOpenAI

from ..core.config import Settings
from ..exceptions import ProviderFailure
from ..models.schemas import DEFAULT_RELEVANCE_SCORE, DEFAULT_TAGS
from . import offline
from .fallback import FallbackChain, Strategy, is_configured

logger = logging.getLogger(__name__)

SUMMARY = "summary"
TAGS = "tags"
RELEVANCE = "relevance"
JUSTIFICATION = "justification"
WIKIPEDIA = "wikipedia"


@dataclass(frozen=True)
class TextRequest:
    """A single text-generation job. ``kind`` selects the offline template."""
    kind: str
    prompt: str
    max_tokens: int
    title: str = ""
    body: str = ""
    topic: str = ""


@lru_cache(maxsize=1)
def _langfuse_callbacks(public_key: str, secret_key: str, host: str) -> list:
    """Build the Langfuse callback handler once per credential set."""
    from langfuse import Langfuse
    from langfuse.langchain import CallbackHandler

    Langfuse(public_key=public_key, secret_key=secret_key, host=host)
    return [CallbackHandler()]


def _create_llm_client(settings: Settings) -> ChatOpenAI:
    """OpenRouter speaks the OpenAI chat-completions protocol."""
    return ChatOpenAI(
        model=settings.openrouter_model,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        temperature=0.7,
        top_p=0.8,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
        default_headers={"X-Title": "SWEN AI News Pipeline"},
    )


class OpenRouterStrategy(Strategy[TextRequest, str]):
    name = "openrouter"

    def __init__(self, settings: Settings, llm: Optional[ChatOpenAI] = None):
        self.settings = settings
        self._llm = llm

    def available(self) -> bool:
        return self._llm is not None or is_configured(self.settings.openrouter_api_key)

    @property
    def llm(self) -> ChatOpenAI:
        if self._llm is None:
            self._llm = _create_llm_client(self.settings)
        return self._llm

    def _callbacks(self) -> list:
        if not self.settings.langfuse_enabled:
            return []
        try:
            return _langfuse_callbacks(
                self.settings.langfuse_public_key,
                self.settings.langfuse_secret_key.get_secret_value(),
                self.settings.langfuse_host,
            )
        except Exception as e:
            logger.warning(f"Langfuse tracing unavailable: {e}")
            return []

    async def run(self, request: TextRequest) -> Optional[str]:
        response = await self.llm.ainvoke(
            request.prompt,
            max_tokens=request.max_tokens,
            config={"callbacks": self._callbacks()},
        )
        content = getattr(response, "content", "")
        if not isinstance(content, str) or not content.strip():
            raise ProviderFailure("OpenRouter returned an empty completion")
        return content


class OfflineTextStrategy(Strategy[TextRequest, str]):
    """Keyword-driven canned text, selected by request kind."""
    name = "offline-text"

    async def run(self, request: TextRequest) -> Optional[str]:
        if request.kind == SUMMARY:
            return offline.mock_summary(request.title, request.body)
        if request.kind == TAGS:
            return json.dumps(offline.mock_tags(request.title, request.body))
        if request.kind == RELEVANCE:
            return offline.mock_relevance(request.title, request.body)
        if request.kind == JUSTIFICATION:
            return offline.mock_media_justification(request.title, request.body)
        if request.kind == WIKIPEDIA:
            return offline.mock_wikipedia_snippet(request.topic)
        return "AI-generated content based on the article's context and themes."


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


def parse_tags(text: str) -> List[str]:
    """Parse a JSON array of tags, falling back to ``DEFAULT_TAGS``."""
    try:
        data = json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, TypeError):
        logger.warning("Tag generation output is not valid JSON, using default tags")
        return list(DEFAULT_TAGS)
    if not isinstance(data, list):
        return list(DEFAULT_TAGS)
    tags = [str(tag).strip() for tag in data if isinstance(tag, (str, int, float)) and str(tag).strip()]
    return tags or list(DEFAULT_TAGS)


_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")


def parse_relevance(text: str) -> float:
    """Read a leading decimal from model output and clamp it to [0, 1]."""
    match = _LEADING_NUMBER.match(text or "")
    if not match:
        return DEFAULT_RELEVANCE_SCORE
    return max(0.0, min(1.0, float(match.group(1))))


class TextGenerator:
    """All article-level text generation goes through one fallback chain."""

    def __init__(self, chain: FallbackChain[TextRequest, str]):
        self.chain = chain

    @property
    def has_remote_model(self) -> bool:
        return any(
            isinstance(strategy, OpenRouterStrategy) and strategy.available()
            for strategy in self.chain.strategies
        )

    async def generate_summary(self, title: str, body: str) -> str:
        prompt = f"""Generate a concise 1-2 sentence factual summary of this news article. Focus on the key facts and main point:

Title: {title}
Content: {body[:500]}...

Summary:"""
        summary = await self.chain.resolve(TextRequest(SUMMARY, prompt, 200, title, body))
        return summary.strip()

    async def generate_tags(self, title: str, body: str) -> List[str]:
        prompt = f"""Generate 3-5 relevant hashtags for this news article. Focus on topics, locations, and themes. Return as JSON array:

Title: {title}
Content: {body[:500]}...

Tags:"""
        return parse_tags(await self.chain.resolve(TextRequest(TAGS, prompt, 150, title, body)))

    async def calculate_relevance_score(self, title: str, body: str) -> float:
        prompt = f"""Rate the relevance of this news article to African audiences on a scale of 0.0 to 1.0. Consider:
- African countries mentioned
- Impact on African economies/societies
- Local relevance and context
- Regional significance

Title: {title}
Content: {body[:500]}...

Relevance Score (0.0-1.0):"""
        return parse_relevance(await self.chain.resolve(TextRequest(RELEVANCE, prompt, 50, title, body)))

    async def generate_media_justification(self, title: str, body: str, media_type: str) -> str:
        prompt = f"""Explain why this {media_type} is relevant to this news article. Be specific about visual or contextual connections:

Title: {title}
Content: {body[:300]}...

Justification:"""
        justification = await self.chain.resolve(TextRequest(JUSTIFICATION, prompt, 200, title, body))
        return justification.strip()

    async def generate_wikipedia_snippet(self, topic: str) -> str:
        prompt = f"""Provide a 1-2 sentence factual explanation about "{topic}" suitable for a Wikipedia-style snippet. Focus on key facts and definitions:

Wikipedia Snippet:"""
        snippet = await self.chain.resolve(TextRequest(WIKIPEDIA, prompt, 150, topic=topic))
        return snippet.strip()


def build_text_generator(settings: Settings, llm: Optional[ChatOpenAI] = None) -> TextGenerator:
    chain = FallbackChain(
        "text-generation",
        [OpenRouterStrategy(settings, llm), OfflineTextStrategy()],
        default="",
    )
    return TextGenerator(chain)
