from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

DEFAULT_TAGS = ["#News", "#Africa"]
DEFAULT_RELEVANCE_SCORE = 0.7


class RawItem(BaseModel):
    """
    Minimal article data handed to the enricher by an ingestion adapter.
    """
    title: str = Field(..., min_length=1, description="Article headline")
    body: str = Field(..., min_length=1, description="Article text")
    source_url: str = Field(..., description="Canonical URL of the article")
    publisher: str = Field(..., description="Publishing outlet")
    published_at: datetime = Field(..., description="Publication timestamp (ISO-8601)")

    class Config:
        frozen = True


class Geo(BaseModel):
    lat: float
    lng: float
    map_url: str
    formatted_address: str


class Media(BaseModel):
    featured_image_url: Optional[str] = Field(None, description="Selected featured image")
    related_video_url: Optional[str] = Field(None, description="Selected related video")
    media_justification: str = Field(..., description="Why the media fits the article")


class Context(BaseModel):
    wikipedia_snippet: str
    social_sentiment: str
    search_trend: str
    geo: Optional[Geo] = None


class EnrichedRecord(BaseModel):
    """
    Schema for the fully enriched article persisted by the storage gateway.
    """
    id: str = Field(..., description="Stable external identifier (uuid4)")
    title: str
    body: str
    summary: str = Field(..., description="1-2 sentence summary")
    tags: List[str] = Field(default_factory=lambda: list(DEFAULT_TAGS), description="Hashtag-style labels")
    relevance_score: float = Field(DEFAULT_RELEVANCE_SCORE, description="Relevance to African audiences, 0.0-1.0")
    source_url: str
    publisher: str
    published_at: datetime
    ingested_at: datetime = Field(..., description="Enrichment completion timestamp")
    media: Media
    context: Context

    @field_validator('tags')
    def validate_tags(cls, v):
        tags = [str(tag).strip() for tag in v if str(tag).strip()]
        return tags or list(DEFAULT_TAGS)

    @field_validator('relevance_score')
    def validate_relevance_score(cls, v):
        return max(0.0, min(1.0, v))


class NewsIngestRequest(RawItem):
    """Direct submission payload accepted by the ingest endpoint."""
    title: str = Field(..., min_length=5, max_length=200)
    body: str = Field(..., min_length=200, max_length=10000)
    source_url: HttpUrl
    publisher: str = Field(..., min_length=2, max_length=100)
    published_at: datetime

    def to_raw_item(self) -> RawItem:
        data = self.model_dump()
        data["source_url"] = str(self.source_url)
        return RawItem(**data)


class UrlIngestRequest(BaseModel):
    url: HttpUrl


class RssIngestRequest(BaseModel):
    feed_url: HttpUrl
    limit: int = Field(default=5, ge=1, le=10)


class IngestResponse(BaseModel):
    message: str
    id: str
    data: EnrichedRecord


class RssItemResult(BaseModel):
    ok: bool
    title: str
    id: Optional[str] = None
    error: Optional[str] = None


class RssIngestResponse(BaseModel):
    message: str
    count: int
    results: List[RssItemResult]


class NewsListResponse(BaseModel):
    count: int
    articles: List[EnrichedRecord]
