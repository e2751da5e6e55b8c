"""Custom exceptions for cosmoscan."""

from typing import Any

from cosmoscan.constants import BroadcastState, FailureReason


class CosmoscanError(Exception):
    """Base exception for all cosmoscan errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or "COSMOSCAN_ERROR"
        super().__init__(self.message)


class EndpointError(CosmoscanError):
    """A single endpoint attempt failed; the resolver moves on to the next one."""

    def __init__(
        self,
        endpoint: Any,
        reason: FailureReason,
        detail: str = "",
        status_code: int | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.reason = reason
        self.detail = detail
        self.status_code = status_code
        url = getattr(endpoint, "url", endpoint)
        message = f"{url}: {reason.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message, "ENDPOINT_ERROR")


class AggregateFailure(CosmoscanError):
    """Raised once every endpoint has been tried and none produced a usable payload."""

    def __init__(self, attempts: list[EndpointError], path: str = "") -> None:
        self.attempts = attempts
        self.path = path
        lines = "; ".join(str(a) for a in attempts) or "no endpoints tried"
        target = f" for {path}" if path else ""
        super().__init__(f"All endpoints failed{target}: {lines}", "ALL_ENDPOINTS_FAILED")

    @property
    def reasons(self) -> list[FailureReason]:
        """Per-endpoint failure reasons, in attempt order."""
        return [a.reason for a in self.attempts]


class ValidationError(CosmoscanError):
    """Raised by the composer for malformed transaction intents."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}", "VALIDATION_ERROR")


class SigningRejected(CosmoscanError):
    """The external signer declined or the user cancelled."""

    def __init__(self, message: str = "Request rejected by signer") -> None:
        super().__init__(message, "SIGNING_REJECTED")


class BroadcastRejected(CosmoscanError):
    """The chain rejected a broadcast transaction with a non-zero code."""

    def __init__(
        self, code: int, raw_log: str = "", tx_hash: str | None = None
    ) -> None:
        self.tx_code = code
        self.raw_log = raw_log
        self.tx_hash = tx_hash
        super().__init__(
            f"Transaction rejected with code {code}: {raw_log}", "BROADCAST_REJECTED"
        )


class UnknownChainError(CosmoscanError):
    """Raised when a chain name is not in the catalog."""

    def __init__(self, chain: str) -> None:
        self.chain = chain
        super().__init__(f"Unknown chain: {chain}", "UNKNOWN_CHAIN")


class CacheError(CosmoscanError):
    """Raised when cache operations fail."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message, "CACHE_ERROR")


class InvalidTransitionError(CosmoscanError):
    """Raised when the broadcast state machine is driven out of order."""

    def __init__(self, current: BroadcastState, requested: BroadcastState) -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot transition from {current.value} to {requested.value}",
            "INVALID_TRANSITION",
        )


class ChainMismatchWarning(UserWarning):
    """Configured chain id differs from the id reported by the live node.

    Logged by the reconciler and auto-corrected; never raised.
    """

    def __init__(self, configured: str, live: str) -> None:
        self.configured = configured
        self.live = live
        super().__init__(f"Chain id mismatch: configured {configured}, node reports {live}")
