from datetime import datetime, timezone

import httpx
import pytest
from pydantic import SecretStr

from news_pipeline.core.config import Settings
from news_pipeline.models.schemas import RawItem
from news_pipeline.services.news import SAMPLE_BODY, SAMPLE_PUBLISHER, SAMPLE_SOURCE_URL, SAMPLE_TITLE


def _unavailable(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": "unavailable"})


@pytest.fixture
def offline_client() -> httpx.AsyncClient:
    """Every outbound provider call answers 503."""
    return httpx.AsyncClient(transport=httpx.MockTransport(_unavailable))


@pytest.fixture
def client_for():
    """Build an AsyncClient whose requests are answered by ``handler``."""
    def factory(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        app_env="test",
        openrouter_api_key=SecretStr(""),
        pexels_api_key=SecretStr(""),
        google_api_key=SecretStr(""),
        langfuse_public_key="",
        langfuse_secret_key=SecretStr(""),
        redis_url="",
        storage_backend_policy="per_call",
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def sample_raw() -> RawItem:
    return RawItem(
        title=SAMPLE_TITLE,
        body=SAMPLE_BODY,
        source_url=SAMPLE_SOURCE_URL,
        publisher=SAMPLE_PUBLISHER,
        published_at=datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc),
    )
