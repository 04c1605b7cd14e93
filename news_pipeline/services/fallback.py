"""
Tiered provider fallback.

Every enrichment capability (text generation, image, video, snippet,
sentiment, trend, geo) is a ``FallbackChain``: an ordered list of strategies
evaluated by a single first-success combinator. Remote strategies are skipped
when their credential is missing or still a placeholder, and fail over on
network errors, non-2xx responses, timeouts and unexpected payloads. The last
strategy of every chain is an offline one that derives a value from the input
text alone, so a chain always resolves.
"""

import asyncio
import logging
from typing import Any, Generic, Optional, Sequence, TypeVar, Union

import httpx
import openai
from pydantic import SecretStr

from ..exceptions import ProviderFailure

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")

PLACEHOLDER_CREDENTIALS = {
    "your_openrouter_api_key_here",
    "your_pexels_key",
    "your_google_api_key",
    "changeme",
}

# Failures that move a chain on to its next strategy. Anything else is a bug.
PROVIDER_ERRORS = (
    ProviderFailure,
    httpx.HTTPError,
    asyncio.TimeoutError,
    openai.OpenAIError,
)


def is_configured(credential: Union[str, SecretStr, None]) -> bool:
    """Return True when a credential is present and not a template placeholder."""
    if credential is None:
        return False
    if isinstance(credential, SecretStr):
        credential = credential.get_secret_value()
    value = credential.strip()
    if not value:
        return False
    if value.lower() in PLACEHOLDER_CREDENTIALS:
        return False
    return not value.lower().startswith(("your_", "your-"))


class Strategy(Generic[RequestT, ResultT]):
    """One way of producing a capability's result."""

    name = "strategy"

    def available(self) -> bool:
        return True

    async def run(self, request: RequestT) -> Optional[ResultT]:
        raise NotImplementedError


class HttpStrategy(Strategy[RequestT, ResultT]):
    """Base for strategies backed by a remote HTTP provider."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float,
        api_key: Union[str, SecretStr, None] = None,
        requires_key: bool = True,
    ):
        self.client = client
        self.timeout = timeout
        self.requires_key = requires_key
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        if isinstance(self._api_key, SecretStr):
            return self._api_key.get_secret_value()
        return self._api_key or ""

    def available(self) -> bool:
        if not self.requires_key:
            return True
        return is_configured(self._api_key)

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.client.get(url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return _decode_json(response, self.name)

    async def post_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.client.post(url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return _decode_json(response, self.name)


def _decode_json(response: httpx.Response, provider: str) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ProviderFailure(f"{provider} returned a non-JSON payload: {e}") from e


class FallbackChain(Generic[RequestT, ResultT]):
    """Resolve a request against strategies in priority order."""

    def __init__(
        self,
        capability: str,
        strategies: Sequence[Strategy[RequestT, ResultT]],
        default: ResultT,
    ):
        if not strategies:
            raise ValueError(f"Fallback chain '{capability}' needs at least one strategy")
        self.capability = capability
        self.strategies = list(strategies)
        self.default = default

    async def resolve(self, request: RequestT) -> ResultT:
        for strategy in self.strategies:
            if not strategy.available():
                logger.debug(f"{self.capability}: skipping {strategy.name} (not configured)")
                continue
            try:
                result = await strategy.run(request)
            except PROVIDER_ERRORS as e:
                logger.warning(f"{self.capability}: {strategy.name} failed, trying next strategy: {e!r}")
                continue
            if result is not None:
                logger.debug(f"{self.capability}: resolved by {strategy.name}")
                return result
            logger.info(f"{self.capability}: {strategy.name} returned no result")

        logger.error(f"{self.capability}: every strategy came back empty, using default")
        return self.default
