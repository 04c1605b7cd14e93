import asyncio

import httpx
import openai
import pytest
from pydantic import SecretStr

from news_pipeline.exceptions import ProviderFailure
from news_pipeline.services.fallback import FallbackChain, HttpStrategy, Strategy, is_configured


class StaticStrategy(Strategy[str, str]):
    def __init__(self, name, result=None, error=None, available=True):
        self.name = name
        self.result = result
        self.error = error
        self._available = available
        self.calls = 0

    def available(self) -> bool:
        return self._available

    async def run(self, request):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.parametrize("credential,expected", [
    ("real-key-123", True),
    ("", False),
    ("   ", False),
    (None, False),
    ("your_openrouter_api_key_here", False),
    ("your_pexels_key", False),
    ("YOUR-GOOGLE-KEY", False),
    (SecretStr("abc"), True),
    (SecretStr(""), False),
])
def test_is_configured(credential, expected):
    assert is_configured(credential) is expected


@pytest.mark.asyncio
async def test_first_success_wins():
    first = StaticStrategy("first", result="primary")
    second = StaticStrategy("second", result="secondary")
    chain = FallbackChain("demo", [first, second], default="default")

    assert await chain.resolve("q") == "primary"
    assert second.calls == 0


@pytest.mark.asyncio
async def test_unavailable_strategy_is_skipped():
    missing_key = StaticStrategy("remote", result="remote", available=False)
    offline = StaticStrategy("offline", result="mock")
    chain = FallbackChain("demo", [missing_key, offline], default="default")

    assert await chain.resolve("q") == "mock"
    assert missing_key.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    ProviderFailure("bad payload"),
    httpx.ConnectError("refused"),
    asyncio.TimeoutError(),
    openai.OpenAIError("quota"),
])
async def test_provider_errors_fall_through(error):
    failing = StaticStrategy("remote", error=error)
    offline = StaticStrategy("offline", result="mock")
    chain = FallbackChain("demo", [failing, offline], default="default")

    assert await chain.resolve("q") == "mock"
    assert failing.calls == 1


@pytest.mark.asyncio
async def test_none_result_moves_on():
    empty = StaticStrategy("remote", result=None)
    offline = StaticStrategy("offline", result="mock")
    chain = FallbackChain("demo", [empty, offline], default="default")

    assert await chain.resolve("q") == "mock"


@pytest.mark.asyncio
async def test_exhausted_chain_returns_default():
    chain = FallbackChain("demo", [StaticStrategy("a"), StaticStrategy("b", available=False)], default="default")

    assert await chain.resolve("q") == "default"


@pytest.mark.asyncio
async def test_programming_errors_propagate():
    broken = StaticStrategy("remote", error=KeyError("missing"))
    chain = FallbackChain("demo", [broken, StaticStrategy("offline", result="mock")], default="default")

    with pytest.raises(KeyError):
        await chain.resolve("q")


def test_chain_needs_a_strategy():
    with pytest.raises(ValueError):
        FallbackChain("demo", [], default=None)


@pytest.mark.asyncio
async def test_http_strategy_rejects_non_json(client_for):
    client = client_for(lambda request: httpx.Response(200, text="<html>oops</html>"))
    strategy = HttpStrategy(client, timeout=1.0, requires_key=False)

    with pytest.raises(ProviderFailure):
        await strategy.get_json("https://provider.test/search")


@pytest.mark.asyncio
async def test_http_strategy_raises_on_error_status(client_for):
    client = client_for(lambda request: httpx.Response(429, json={"error": "rate limited"}))
    strategy = HttpStrategy(client, timeout=1.0, api_key="key")

    with pytest.raises(httpx.HTTPStatusError):
        await strategy.post_json("https://provider.test/analyze", json={})
    assert strategy.available()
    assert strategy.api_key == "key"
