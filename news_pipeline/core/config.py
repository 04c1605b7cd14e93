"""Configuration settings for the news enrichment pipeline."""
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


def _default_data_dir() -> str:
    # Production containers only have /tmp writable
    if os.getenv("APP_ENV", "development").lower() == "production":
        return "/tmp/data"
    return "./data"


class Settings(BaseSettings):
    """Configuration settings loaded from environment variables."""

    # Service
    app_env: str = Field(
        default_factory=lambda: os.getenv("APP_ENV", "development").lower(),
        description="Runtime environment: 'development', 'test' or 'production'"
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper(),
        description="Root log level"
    )
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "3000")),
        description="HTTP port for the API server"
    )
    user_agent: str = Field(
        default_factory=lambda: os.getenv("USER_AGENT", "SWENNewsBot/1.0 (+https://swen.example)"),
        description="User-Agent sent to every outbound provider"
    )

    # Text generation (OpenRouter, OpenAI-compatible)
    openrouter_api_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("OPENROUTER_API_KEY", "")),
        description="OpenRouter API key for summary, tags, relevance and snippets"
    )
    openrouter_base_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
        description="OpenAI-compatible base URL"
    )
    openrouter_model: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL", "qwen/qwen3-vl-30b-a3b-thinking"),
        description="Chat model used for all text generation"
    )
    llm_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT_SECONDS", "20")),
        description="Per-call timeout for text generation"
    )

    # Media and context providers
    pexels_api_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("PEXELS_API_KEY", "")),
        description="Pexels API key for featured images"
    )
    google_api_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("GOOGLE_API_KEY", "")),
        description="Google API key (YouTube Data, Natural Language, Geocoding)"
    )
    wikipedia_api_url: str = Field(
        default_factory=lambda: os.getenv("WIKIPEDIA_API_URL", "https://en.wikipedia.org/api/rest_v1"),
        description="Wikipedia REST API base URL"
    )
    piped_api_url: str = Field(
        default_factory=lambda: os.getenv("PIPED_API_URL", "https://pipedapi.kavin.rocks"),
        description="Keyless Piped instance used when YouTube is unavailable"
    )
    nominatim_url: str = Field(
        default_factory=lambda: os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search"),
        description="Keyless OSM Nominatim search endpoint"
    )
    provider_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10")),
        description="Per-call timeout for media and context providers"
    )
    region_code: str = Field(
        default_factory=lambda: os.getenv("REGION_CODE", "za").lower(),
        description="Region bias for video search and geocoding"
    )

    # Storage
    redis_url: str = Field(
        default_factory=lambda: os.getenv("REDIS_URL", ""),
        description="Redis connection URL for the durable store (empty = local file only)"
    )
    redis_key_prefix: str = Field(
        default_factory=lambda: os.getenv("REDIS_KEY_PREFIX", "news"),
        description="Key namespace for stored records"
    )
    redis_socket_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("REDIS_SOCKET_TIMEOUT_SECONDS", "5")),
        description="Socket and connect timeout for Redis operations"
    )
    storage_backend_policy: str = Field(
        default_factory=lambda: os.getenv("STORAGE_BACKEND_POLICY", "per_call").lower(),
        description="'per_call' re-checks Redis on every operation, 'pinned' keeps the first decision"
    )
    data_dir: str = Field(
        default_factory=lambda: os.getenv("DATA_DIR", _default_data_dir()),
        description="Directory for the local JSON fallback store"
    )

    # Langfuse tracing (optional)
    langfuse_public_key: str = Field(
        default_factory=lambda: os.getenv("LANGFUSE_PUBLIC_KEY", ""),
        description="Langfuse public key; tracing is off when empty"
    )
    langfuse_secret_key: SecretStr = Field(
        default_factory=lambda: SecretStr(os.getenv("LANGFUSE_SECRET_KEY", "")),
        description="Langfuse secret key"
    )
    langfuse_host: str = Field(
        default_factory=lambda: os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com"),
        description="Langfuse host"
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    def model_post_init(self, __context):
        """Validate configuration after initialization."""
        valid_envs = ["development", "test", "production"]
        if self.app_env not in valid_envs:
            raise ValueError(f"Invalid app_env '{self.app_env}'. Must be one of: {valid_envs}")
        valid_policies = ["per_call", "pinned"]
        if self.storage_backend_policy not in valid_policies:
            raise ValueError(
                f"Invalid storage_backend_policy '{self.storage_backend_policy}'. Must be one of: {valid_policies}"
            )

    @property
    def storage_file(self) -> Path:
        return Path(self.data_dir) / "news.json"

    @property
    def langfuse_enabled(self) -> bool:
        return bool(self.langfuse_public_key and self.langfuse_secret_key.get_secret_value())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get a cached Settings instance."""
    return Settings()
