"""
News Enrichment Pipeline Package

Turns raw news articles into enriched records and stores them.

Main components:
- services.fallback: Tiered provider chains with offline strategies
- services.enrichment: Fan-out of every enrichment lookup for one article
- services.storage: Redis store with a local JSON file fallback
- services.news: Facade used by the API and the seed command
- models.schemas: Pydantic models for type safety
- core.config: Configuration management
"""

from .exceptions import (
    IngestionError,
    NewsNotFoundError,
    NewsPipelineError,
    PersistenceError,
    ProcessingError,
    ProviderFailure,
)
from .models.schemas import EnrichedRecord, RawItem

__version__ = "1.0.0"

__all__ = [
    "EnrichedRecord",
    "IngestionError",
    "NewsNotFoundError",
    "NewsPipelineError",
    "PersistenceError",
    "ProcessingError",
    "ProviderFailure",
    "RawItem",
]
