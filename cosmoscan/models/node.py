"""Node-facing result models."""

from pydantic import BaseModel, Field

from cosmoscan.models.chain import Endpoint


class ProbeResult(BaseModel):
    """Which RPC endpoint to use for indexer-backed queries."""

    endpoint: Endpoint
    capable: bool
    fallback: bool = Field(
        default=False, description="No endpoint was capable; first endpoint returned"
    )

    @property
    def warning(self) -> str | None:
        if self.capable:
            return None
        return (
            f"No RPC endpoint with transaction indexing found; using {self.endpoint.url}. "
            "Transaction search may be unavailable."
        )


class ReconciledIdentity(BaseModel):
    """Chain id to use for signing after comparing config with the live node."""

    chain_id: str
    configured_chain_id: str
    live_chain_id: str | None = None
    mismatch: bool = False
