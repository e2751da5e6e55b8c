"""Read cache models."""

from typing import Any

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """A cached payload and the time it was fetched (epoch milliseconds)."""

    key: str
    payload: Any
    fetched_at: int = Field(..., ge=0)


class CachedRead(BaseModel):
    """Result of a stale-while-revalidate read."""

    payload: Any
    fetched_at: int
    stale: bool = Field(default=False, description="Older than the freshness window")
    refreshing: bool = Field(default=False, description="Background refresh started")
    warning: str | None = None
