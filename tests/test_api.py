from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from news_pipeline.main import create_app
from news_pipeline.services.news import SAMPLE_BODY, SAMPLE_TITLE

ARTICLE = {
    "title": "Kenya Expands Geothermal Capacity",
    "body": SAMPLE_BODY,
    "source_url": "https://news.example.com/kenya-geothermal",
    "publisher": "East Africa Energy",
    "published_at": "2025-01-06T10:00:00Z",
}


@pytest.fixture
def api(settings, offline_client):
    with TestClient(create_app(settings, http_client=offline_client)) as client:
        yield client


def test_health_reports_local_backend(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["storage"] == "local"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_ingest_then_read_back(api):
    created = api.post("/api/v1/news/ingest", json=ARTICLE)

    assert created.status_code == 201
    payload = created.json()
    assert payload["message"] == "News article processed successfully"
    assert payload["data"]["title"] == ARTICLE["title"]
    assert 0.0 <= payload["data"]["relevance_score"] <= 1.0
    assert payload["data"]["tags"]

    fetched = api.get(f"/api/v1/news/{payload['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == payload["id"]

    listing = api.get("/api/v1/news")
    assert listing.status_code == 200
    assert listing.json()["count"] == 1
    assert listing.json()["articles"][0]["id"] == payload["id"]


def test_validation_error(api):
    response = api.post("/api/v1/news/ingest", json={**ARTICLE, "body": "too short", "publisher": "X"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert len(body["details"]) == 2


def test_unknown_id_is_404(api):
    response = api.get("/api/v1/news/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "News article not found"


def test_processing_failure_is_500(api):
    enricher = api.app.state.news_service.enricher
    enricher.context.get_social_sentiment = AsyncMock(side_effect=RuntimeError("bug"))

    response = api.post("/api/v1/news/ingest", json=ARTICLE)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to process news article"}
    assert api.get("/api/v1/news").json()["count"] == 0


def test_seed(api):
    response = api.post("/api/v1/news/seed")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["title"] == SAMPLE_TITLE
    assert data["context"]["geo"]["formatted_address"] == "South Africa"


def test_rss_limit_is_validated(api):
    response = api.post("/api/v1/news/ingest/rss", json={"feed_url": "https://wire.example.com/feed.xml", "limit": 50})

    assert response.status_code == 400


def test_unreachable_url_ingestion(api):
    response = api.post("/api/v1/news/ingest/url", json={"url": "https://down.example.com/story"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to ingest news source"
