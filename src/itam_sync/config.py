import os
from dataclasses import dataclass
from functools import lru_cache

import httpx
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # API
    api_base_url: str = os.getenv("API_BASE_URL", "http://localhost:8787")
    api_version: str = os.getenv("API_VERSION", "v1")
    api_timeout: float = float(os.getenv("API_TIMEOUT", "5.0"))  # httpx default

    # Cache
    cache_stale_time: float = float(os.getenv("CACHE_STALE_TIME", "300"))  # 5 minutes
    cache_gc_time: float = float(os.getenv("CACHE_GC_TIME", "600"))  # 10 minutes
    cache_gc_interval: float = float(os.getenv("CACHE_GC_INTERVAL", "60"))

    # Retry
    query_max_attempts: int = int(os.getenv("QUERY_MAX_ATTEMPTS", "3"))
    mutation_max_attempts: int = int(os.getenv("MUTATION_MAX_ATTEMPTS", "3"))
    retry_base_delay: float = float(os.getenv("RETRY_BASE_DELAY", "1.0"))
    retry_max_delay: float = float(os.getenv("RETRY_MAX_DELAY", "30.0"))

    # Health check
    health_poll_interval: float = float(os.getenv("HEALTH_POLL_INTERVAL", "30"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_format: str = os.getenv("LOG_FORMAT", "console")  # or "json"

    @property
    def api_url(self) -> str:
        """Versioned API root, e.g. ``http://localhost:8787/api/v1``."""
        return f"{self.api_base_url.rstrip('/')}/api/{self.api_version}"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_stale_time < 0 or self.cache_gc_time < 0:
            raise ValueError("CACHE_STALE_TIME and CACHE_GC_TIME must not be negative")

        if self.cache_gc_interval <= 0:
            raise ValueError("CACHE_GC_INTERVAL must be positive")

        if self.query_max_attempts < 1 or self.mutation_max_attempts < 1:
            raise ValueError(
                f"Retry attempts must be at least 1, got query={self.query_max_attempts} "
                f"mutation={self.mutation_max_attempts}"
            )

        if self.log_format not in ("console", "json"):
            raise ValueError(f"LOG_FORMAT must be one of ['console', 'json'], got {self.log_format}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_http_client(
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an async HTTP client configured for the inventory API."""
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.api_timeout,
        transport=transport,
        headers={"Content-Type": "application/json", **(headers or {})},
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
    )
