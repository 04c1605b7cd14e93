"""
Contextual signals for an article: encyclopedic snippet, social sentiment,
search trend and geo location.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from ..core.config import Settings
from ..exceptions import ProviderFailure
from ..models.schemas import Geo
from . import offline
from .fallback import FallbackChain, HttpStrategy, Strategy
from .text_generation import TextGenerator

logger = logging.getLogger(__name__)

SNIPPET_MAX_CHARS = 200

LOCATION_PATTERNS = [
    re.compile(r"(?:\b(?:in|at|from|to)\s+)([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"),
    re.compile(r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s+(?:province|state|country|region)\b"),
    re.compile(r"(Cape Town|Johannesburg|Pretoria|Durban|South Africa|Africa)"),
]


@dataclass(frozen=True)
class SignalQuery:
    """Input for sentiment and trend lookups."""
    title: str
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ArticleText:
    title: str
    body: str


def extract_locations(text: str) -> List[str]:
    """Capitalised place-name candidates in order of first appearance."""
    results = {}
    for pattern in LOCATION_PATTERNS:
        for match in pattern.finditer(text):
            candidate = re.sub(r"^(in|at|from|to)\s+", "", match.group(1), flags=re.IGNORECASE)
            candidate = re.sub(r"\s+(province|state|country|region)$", "", candidate, flags=re.IGNORECASE).strip()
            if len(candidate) > 2:
                results.setdefault(candidate, None)
    return list(results)


# ---------------------------------------------------------------------------
# Encyclopedic snippet

class WikipediaSummaryStrategy(HttpStrategy[str, str]):
    name = "wikipedia"

    def __init__(self, client: httpx.AsyncClient, timeout: float, base_url: str):
        super().__init__(client, timeout, requires_key=False)
        self.base_url = base_url.rstrip("/")

    async def run(self, topic: str) -> Optional[str]:
        data = await self.get_json(f"{self.base_url}/page/summary/{quote(topic, safe='')}")
        extract = data.get("extract") if isinstance(data, dict) else None
        if not extract or not isinstance(extract, str):
            raise ProviderFailure(f"Wikipedia summary for {topic!r} has no extract")
        return extract[:SNIPPET_MAX_CHARS] + "..."


class LLMSnippetStrategy(Strategy[str, str]):
    """Ask the text generator, but only when a real model is configured."""
    name = "llm-snippet"

    def __init__(self, text_generator: TextGenerator):
        self.text_generator = text_generator

    def available(self) -> bool:
        return self.text_generator.has_remote_model

    async def run(self, topic: str) -> Optional[str]:
        return await self.text_generator.generate_wikipedia_snippet(topic) or None


class OfflineSnippetStrategy(Strategy[str, str]):
    name = "snippet-table"

    async def run(self, topic: str) -> Optional[str]:
        return offline.mock_wikipedia_snippet(topic)


# ---------------------------------------------------------------------------
# Sentiment and trend

class GoogleSentimentStrategy(HttpStrategy[SignalQuery, str]):
    name = "google-natural-language"
    url = "https://language.googleapis.com/v1/documents:analyzeSentiment"

    async def run(self, request: SignalQuery) -> Optional[str]:
        text = f"{request.title} {' '.join(request.tags)}"
        data = await self.post_json(
            self.url,
            params={"key": self.api_key},
            json={"document": {"type": "PLAIN_TEXT", "content": text}, "encodingType": "UTF8"},
        )
        sentiment = data.get("documentSentiment") if isinstance(data, dict) else None
        if not sentiment:
            raise ProviderFailure("Google sentiment response has no documentSentiment")
        try:
            score = float(sentiment.get("score", 0.0))
            magnitude = float(sentiment.get("magnitude", 0.0))
        except (AttributeError, TypeError, ValueError) as e:
            raise ProviderFailure(f"Unexpected sentiment payload: {e}") from e
        label = "neutral"
        if score > 0.1:
            label = "positive"
        elif score < -0.1:
            label = "negative"
        return f"{round((score + 1) * 50)}% {label} sentiment (confidence: {round(magnitude * 100)}%)"


class RotationSentimentStrategy(Strategy[SignalQuery, str]):
    name = "sentiment-rotation"

    async def run(self, request: SignalQuery) -> Optional[str]:
        return offline.mock_sentiment(request.title, request.tags)


class RotationTrendStrategy(Strategy[SignalQuery, str]):
    # Google Trends has no official API
    name = "trend-rotation"

    async def run(self, request: SignalQuery) -> Optional[str]:
        return offline.mock_search_trend(request.title, request.tags)


# ---------------------------------------------------------------------------
# Geo

class GoogleGeocodeStrategy(HttpStrategy[ArticleText, Geo]):
    name = "google-geocoding"
    url = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, client: httpx.AsyncClient, timeout: float, api_key, region: str = "za"):
        super().__init__(client, timeout, api_key)
        self.region = region

    async def run(self, request: ArticleText) -> Optional[Geo]:
        locations = extract_locations(f"{request.title} {request.body}")
        if not locations:
            return None
        data = await self.get_json(self.url, params={
            "address": locations[0],
            "key": self.api_key,
            "region": self.region,
        })
        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            return None
        try:
            point = results[0]["geometry"]["location"]
            lat, lng = float(point["lat"]), float(point["lng"])
            address = results[0]["formatted_address"]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderFailure(f"Unexpected geocoding payload: {e}") from e
        return Geo(lat=lat, lng=lng, map_url=offline.build_map_url(lat, lng), formatted_address=address)


class NominatimGeocodeStrategy(HttpStrategy[ArticleText, Geo]):
    """Keyless OSM geocoding, biased to the configured country code."""
    name = "nominatim"

    def __init__(self, client: httpx.AsyncClient, timeout: float, url: str, region: str = "za"):
        super().__init__(client, timeout, requires_key=False)
        self.url = url
        self.region = region

    def available(self) -> bool:
        return bool(self.url)

    async def run(self, request: ArticleText) -> Optional[Geo]:
        locations = extract_locations(f"{request.title} {request.body}")
        if not locations:
            return None
        data = await self.get_json(self.url, params={
            "q": locations[0],
            "format": "json",
            "limit": 1,
            "countrycodes": self.region,
        })
        if not isinstance(data, list) or not data:
            return None
        try:
            lat, lng = float(data[0]["lat"]), float(data[0]["lon"])
            address = data[0]["display_name"]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderFailure(f"Unexpected Nominatim payload: {e}") from e
        return Geo(lat=lat, lng=lng, map_url=offline.build_map_url(lat, lng), formatted_address=address)


class OfflineGeoStrategy(Strategy[ArticleText, Geo]):
    name = "location-table"

    async def run(self, request: ArticleText) -> Optional[Geo]:
        return offline.mock_geo(request.title, request.body)


class ContextService:
    """Resolves the four contextual signals of an enriched record."""

    def __init__(
        self,
        snippet_chain: FallbackChain[str, str],
        sentiment_chain: FallbackChain[SignalQuery, str],
        trend_chain: FallbackChain[SignalQuery, str],
        geo_chain: FallbackChain[ArticleText, Optional[Geo]],
    ):
        self.snippet_chain = snippet_chain
        self.sentiment_chain = sentiment_chain
        self.trend_chain = trend_chain
        self.geo_chain = geo_chain

    async def get_wikipedia_snippet(self, topic: str) -> str:
        if not topic:
            return "Wikipedia information not available for this topic."
        return await self.snippet_chain.resolve(topic)

    async def get_social_sentiment(self, title: str, tags: Sequence[str]) -> str:
        return await self.sentiment_chain.resolve(SignalQuery(title, tuple(tags)))

    async def get_search_trend(self, title: str, tags: Sequence[str]) -> str:
        return await self.trend_chain.resolve(SignalQuery(title, tuple(tags)))

    async def get_geo_context(self, title: str, body: str) -> Optional[Geo]:
        return await self.geo_chain.resolve(ArticleText(title, body))


def build_context_service(
    settings: Settings,
    client: httpx.AsyncClient,
    text_generator: TextGenerator,
) -> ContextService:
    timeout = settings.provider_timeout_seconds
    snippet_chain = FallbackChain(
        "wikipedia-snippet",
        [
            WikipediaSummaryStrategy(client, timeout, settings.wikipedia_api_url),
            LLMSnippetStrategy(text_generator),
            OfflineSnippetStrategy(),
        ],
        default="Wikipedia information not available for this topic.",
    )
    sentiment_chain = FallbackChain(
        "social-sentiment",
        [GoogleSentimentStrategy(client, timeout, settings.google_api_key), RotationSentimentStrategy()],
        default="neutral sentiment",
    )
    trend_chain = FallbackChain("search-trend", [RotationTrendStrategy()], default="")
    geo_chain = FallbackChain(
        "geo-context",
        [
            GoogleGeocodeStrategy(client, timeout, settings.google_api_key, settings.region_code),
            NominatimGeocodeStrategy(client, timeout, settings.nominatim_url, settings.region_code),
            OfflineGeoStrategy(),
        ],
        default=None,
    )
    return ContextService(snippet_chain, sentiment_chain, trend_chain, geo_chain)
