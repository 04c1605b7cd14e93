"""Featured image and related video lookup."""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import httpx

from ..core.config import Settings
from ..exceptions import ProviderFailure
from . import offline
from .fallback import FallbackChain, HttpStrategy, Strategy

logger = logging.getLogger(__name__)

STOP_WORDS = {"the", "and", "for", "with", "from", "this", "that"}


@dataclass(frozen=True)
class MediaQuery:
    title: str
    tags: Tuple[str, ...] = ()

    @property
    def search_terms(self) -> str:
        return extract_search_terms(self.title, self.tags)


def extract_search_terms(title: str, tags: Sequence[str]) -> str:
    """Meaningful title words followed by the tag words, de-duplicated in order."""
    title_words = [
        word for word in title.lower().split(" ")
        if len(word) > 3 and word not in STOP_WORDS
    ]
    tag_words = [tag.replace("#", "").lower() for tag in tags]
    words = list(dict.fromkeys(title_words + tag_words))
    return " ".join(words).strip() or title


class PexelsImageStrategy(HttpStrategy[MediaQuery, str]):
    name = "pexels"
    url = "https://api.pexels.com/v1/search"

    async def run(self, request: MediaQuery) -> Optional[str]:
        data = await self.get_json(
            self.url,
            params={"query": request.search_terms, "per_page": 1, "orientation": "landscape"},
            headers={"Authorization": self.api_key},
        )
        photos = data.get("photos") if isinstance(data, dict) else None
        if not photos:
            return None
        try:
            image_url = photos[0]["src"]["large"]
        except (KeyError, TypeError) as e:
            raise ProviderFailure(f"Unexpected Pexels payload: {e}") from e
        if not isinstance(image_url, str):
            raise ProviderFailure("Pexels photo has no image URL")
        return image_url


class YouTubeVideoStrategy(HttpStrategy[MediaQuery, str]):
    name = "youtube"
    url = "https://www.googleapis.com/youtube/v3/search"

    def __init__(self, client: httpx.AsyncClient, timeout: float, api_key, region_code: str = "za"):
        super().__init__(client, timeout, api_key)
        self.region_code = region_code.upper()

    async def run(self, request: MediaQuery) -> Optional[str]:
        query = request.search_terms
        logger.info(f"YouTube search query: {query!r} (region {self.region_code})")
        data = await self.get_json(self.url, params={
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": 1,
            "key": self.api_key,
            "safeSearch": "moderate",
            "order": "relevance",
            "regionCode": self.region_code,
            "relevanceLanguage": "en",
        })
        items = data.get("items") if isinstance(data, dict) else None
        if not items:
            logger.warning(f"No YouTube videos found for query: {query!r}")
            return None
        try:
            return f"https://www.youtube.com/watch?v={items[0]['id']['videoId']}"
        except (KeyError, TypeError) as e:
            raise ProviderFailure(f"Unexpected YouTube payload: {e}") from e


class PipedVideoStrategy(HttpStrategy[MediaQuery, str]):
    """Keyless YouTube search through a public Piped instance."""
    name = "piped"

    def __init__(self, client: httpx.AsyncClient, timeout: float, base_url: str):
        super().__init__(client, timeout, requires_key=False)
        self.base_url = base_url.rstrip("/")

    def available(self) -> bool:
        return bool(self.base_url)

    async def run(self, request: MediaQuery) -> Optional[str]:
        data = await self.get_json(
            f"{self.base_url}/search",
            params={"q": request.search_terms, "filter": "videos"},
        )
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ProviderFailure("Piped search response has no item list")
        for item in items:
            path = item.get("url") if isinstance(item, dict) else None
            if isinstance(path, str) and path.startswith("/watch?v="):
                return f"https://www.youtube.com{path}"
        return None


class OfflineImageStrategy(Strategy[MediaQuery, str]):
    name = "stock-images"

    async def run(self, request: MediaQuery) -> Optional[str]:
        return offline.mock_image(request.title, request.tags)


class OfflineVideoStrategy(Strategy[MediaQuery, str]):
    name = "canned-videos"

    async def run(self, request: MediaQuery) -> Optional[str]:
        return offline.mock_video(request.title, request.tags)


class MediaService:
    """Picks a featured image and a related video for an article."""

    def __init__(
        self,
        image_chain: FallbackChain[MediaQuery, Optional[str]],
        video_chain: FallbackChain[MediaQuery, Optional[str]],
    ):
        self.image_chain = image_chain
        self.video_chain = video_chain

    async def get_featured_image(self, title: str, tags: Sequence[str] = ()) -> Optional[str]:
        return await self.image_chain.resolve(MediaQuery(title, tuple(tags)))

    async def get_related_video(self, title: str, tags: Sequence[str] = ()) -> Optional[str]:
        return await self.video_chain.resolve(MediaQuery(title, tuple(tags)))


def build_media_service(settings: Settings, client: httpx.AsyncClient) -> MediaService:
    timeout = settings.provider_timeout_seconds
    image_chain = FallbackChain(
        "featured-image",
        [PexelsImageStrategy(client, timeout, settings.pexels_api_key), OfflineImageStrategy()],
        default=None,
    )
    video_chain = FallbackChain(
        "related-video",
        [
            YouTubeVideoStrategy(client, timeout, settings.google_api_key, settings.region_code),
            PipedVideoStrategy(client, timeout, settings.piped_api_url),
            OfflineVideoStrategy(),
        ],
        default=None,
    )
    return MediaService(image_chain, video_chain)
