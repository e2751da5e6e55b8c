"""HTTP response models."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from cosmoscan.models.cache import CachedRead
from cosmoscan.models.chain import ChainSummary


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    cache_status: Literal["connected", "disconnected"]
    chains: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChainListResponse(BaseModel):
    chains: list[ChainSummary]
    count: int


class CachedResponse(BaseModel):
    """A cached read with its freshness metadata."""

    chain: str
    data: Any
    fetched_at: int = Field(..., description="Epoch milliseconds of the last successful fetch")
    stale: bool = False
    refreshing: bool = False
    warning: str | None = None

    @classmethod
    def from_read(cls, chain: str, read: CachedRead) -> "CachedResponse":
        warning = read.warning
        if read.stale and warning is None:
            warning = "Showing cached data; a refresh is in progress"
        return cls(
            chain=chain,
            data=read.payload,
            fetched_at=read.fetched_at,
            stale=read.stale,
            refreshing=read.refreshing,
            warning=warning,
        )


class ErrorResponse(BaseModel):
    detail: str
    code: str | None = None
    attempts: list[str] = Field(default_factory=list)
