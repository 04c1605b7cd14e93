"""Exception hierarchy shared by the enrichment pipeline and its API surface."""


class NewsPipelineError(Exception):
    """Base class for pipeline errors."""


class ProviderFailure(NewsPipelineError):
    """A single provider strategy could not produce a result.

    Always absorbed by the fallback chain that ran the strategy.
    """


class ProcessingError(NewsPipelineError):
    """Enrichment of a raw item failed as a whole."""

    def __init__(self, message: str = "Failed to process news article"):
        super().__init__(message)


class PersistenceError(NewsPipelineError):
    """The active storage backend failed during an operation."""


class NewsNotFoundError(NewsPipelineError):
    """No enriched record exists for the requested id."""

    def __init__(self, news_id: str):
        super().__init__("News article not found")
        self.news_id = news_id


class IngestionError(NewsPipelineError):
    """A URL or RSS source could not be turned into raw items."""
