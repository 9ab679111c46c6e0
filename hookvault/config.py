import math
from functools import lru_cache
from typing import Literal

from pydantic import AnyUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration, built once and passed to components."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    ENV: str = "dev"
    SERVICE_PORT: int = 8080
    LOG_JSON: bool = True
    # Store backend selection: "memory" or "redis"
    STORE_ADAPTER: Literal["memory", "redis"] = "memory"
    REDIS_URL: AnyUrl | None = None
    REDIS_KEY_PREFIX: str = "hookvault:"
    # Comma-separated; empty accepts every namespace
    ALLOWED_NAMESPACES: str = ""
    # Kept as a string so that garbage disables expiry instead of failing startup
    RETENTION_DAYS: str = "30"
    MAX_EVENT_SIZE: int = 65536
    NAMESPACE_SCAN_CAP: int = 2000

    @property
    def allowlist(self) -> frozenset[str]:
        return frozenset(
            part.strip() for part in self.ALLOWED_NAMESPACES.split(",") if part.strip()
        )

    @property
    def retention_ttl_seconds(self) -> int | None:
        """
        Record TTL derived from RETENTION_DAYS.

        Returns None (no expiry) when the value is non-numeric, non-finite,
        non-positive, or shorter than one second.
        """
        try:
            days = float(self.RETENTION_DAYS.strip())
        except ValueError:
            return None
        if not math.isfinite(days) or days <= 0:
            return None
        ttl = math.floor(days * 24 * 60 * 60)
        return ttl if ttl > 0 else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
