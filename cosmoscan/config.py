"""Application configuration and settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cosmoscan.constants import CACHE_TTL_MS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Cosmoscan"
    app_version: str = "1.0.0"
    debug: bool = False
    port: int = Field(default=8000, description="Server port")

    # API
    api_prefix: str = "/api/v1"
    allowed_origins: str = Field(
        default="",
        description="Comma-separated list of allowed origins for CORS",
    )

    # Chain catalog
    chains_dir: Path = Field(
        default=Path(__file__).resolve().parent.parent / "chains",
        description="Directory holding one JSON file per chain",
    )

    # Node access
    user_agent: str = "cosmoscan/1.0"
    read_timeout_seconds: float = 10.0
    probe_timeout_seconds: float = 8.0
    broadcast_timeout_seconds: float = 15.0

    # Cache
    cache_backend: Literal["redis", "memory"] = "memory"
    cache_schema_version: int = 2
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL used when cache_backend is redis",
    )

    # Freshness windows in milliseconds
    ttl_chains_ms: int = CACHE_TTL_MS["chains"]
    ttl_validators_ms: int = CACHE_TTL_MS["validators"]
    ttl_blocks_ms: int = CACHE_TTL_MS["blocks"]
    ttl_transactions_ms: int = CACHE_TTL_MS["transactions"]
    ttl_proposals_ms: int = CACHE_TTL_MS["proposals"]
    ttl_network_ms: int = CACHE_TTL_MS["network"]
    ttl_accounts_ms: int = CACHE_TTL_MS["accounts"]
    ttl_params_ms: int = CACHE_TTL_MS["params"]

    @field_validator(
        "read_timeout_seconds", "probe_timeout_seconds", "broadcast_timeout_seconds"
    )
    @classmethod
    def check_timeout(cls, v: float) -> float:
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def ttl_for(self, kind: str) -> int:
        """Freshness window for a resource kind, falling back to the network TTL."""
        return getattr(self, f"ttl_{kind}_ms", self.ttl_network_ms)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
