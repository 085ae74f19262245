"""
Configuration for the category synchronization pipeline.

Values are read from environment variables (or a local .env file) by Pydantic
BaseSettings. Per-run flags in `SyncConfig` only provide defaults; callers can
override them per `sync()` call through `SyncOptions`.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """Connection settings for the remote catalog REST API."""

    model_config = SettingsConfigDict(
        env_prefix="MAGENTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="http://localhost:8080/rest/",
        description="Base URL of the catalog REST API (trailing slash optional)",
    )
    access_token: str | None = Field(
        default=None, description="Integration access token sent as a bearer token"
    )
    store_code: str | None = Field(
        default=None,
        description="Optional store view code inserted before the V1 path segment",
    )
    request_timeout: float = Field(
        default=30.0,
        description=(
            "Total timeout per catalog request in seconds. Bounds how long a hung "
            "fetch can hold its rate limiter slot."
        ),
    )

    @field_validator("request_timeout")
    def validate_request_timeout(cls, v):
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v


class SyncConfig(BaseSettings):
    """Category synchronization settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Run defaults
    generate_unique_url_keys: bool = Field(
        default=True,
        description="Always regenerate url_key as '<slugified name>-<id>'",
    )
    extended_categories: bool = Field(
        default=False,
        description="Fetch the full record for every category in the tree",
    )

    # Outbound throttling
    requests_per_second: int = Field(
        default=5,
        description="Maximum enrichment request starts per second, process-wide",
    )

    # Cache sink
    cache_key_prefix: str = Field(
        default="category", description="Namespace for category cache keys"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    redis_max_connections: int = Field(
        default=20, description="Max Redis connections in the pool"
    )
    redis_socket_connect_timeout: int = Field(
        default=5,
        description="Connection timeout in seconds (fail-fast on unreachable Redis)",
    )
    redis_socket_timeout: int = Field(
        default=10, description="Socket read/write timeout in seconds"
    )

    # Downstream cache invalidation
    invalidate_cache: bool = Field(
        default=False,
        description="Notify the storefront cache after each category is emitted",
    )
    invalidate_cache_url: str = Field(
        default="http://localhost:3000/invalidate?key=change-me&tag=",
        description="Invalidation endpoint; the entity tag is appended verbatim",
    )
    invalidate_timeout: float = Field(
        default=5.0, description="Timeout in seconds for one invalidation request"
    )

    @field_validator("requests_per_second")
    def validate_requests_per_second(cls, v):
        """
        Validate that the request rate is between 1 and 100 per second.

        Raises:
            ValueError: If `v` is outside 1..100.
        """
        if v < 1 or v > 100:
            raise ValueError("Requests per second must be between 1 and 100")
        return v

    @field_validator("cache_key_prefix")
    def validate_cache_key_prefix(cls, v):
        if not v or ":" in v:
            raise ValueError("Cache key prefix must be non-empty and contain no ':'")
        return v


@lru_cache
def get_catalog_config() -> CatalogConfig:
    """Get cached CatalogConfig instance populated from environment variables.

    Environment variables:
        MAGENTO_URL, MAGENTO_ACCESS_TOKEN, MAGENTO_STORE_CODE,
        MAGENTO_REQUEST_TIMEOUT (default: 30)

    Note:
        For testing, call get_catalog_config.cache_clear() to reset the cache.
    """
    return CatalogConfig()


@lru_cache
def get_sync_config() -> SyncConfig:
    """Get cached SyncConfig instance populated from environment variables.

    Environment variables:
        GENERATE_UNIQUE_URL_KEYS (default: true)
        EXTENDED_CATEGORIES (default: false)
        REQUESTS_PER_SECOND (default: 5)
        CACHE_KEY_PREFIX (default: "category")
        REDIS_URL (default: "redis://localhost:6379/0")
        INVALIDATE_CACHE (default: false)
        INVALIDATE_CACHE_URL, INVALIDATE_TIMEOUT

    Note:
        For testing, call get_sync_config.cache_clear() to reset the cache.
    """
    return SyncConfig()
