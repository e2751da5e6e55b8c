"""Ordered multi-endpoint failover for node reads and writes."""

import asyncio
import logging
from typing import Any, Sequence

import httpx
from pydantic import BaseModel, Field

from cosmoscan.constants import FailureReason
from cosmoscan.core.exceptions import AggregateFailure, EndpointError
from cosmoscan.models.chain import Endpoint

logger = logging.getLogger(__name__)


class RequestSpec(BaseModel):
    """A protocol request, independent of which endpoint serves it."""

    method: str = "GET"
    path: str
    params: dict[str, Any] | None = None
    json_body: Any = None
    expect_non_empty: str | None = Field(
        default=None,
        description=(
            "Dotted key path that must hold a non-empty value. Leave unset for "
            "queries where an empty result is a legitimate answer."
        ),
    )


def _walk(payload: Any, path: str) -> Any:
    """Walk a dotted key path, returning None when any step is missing."""
    current = payload
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def _lookup(payload: Any, path: str) -> Any:
    """
    Resolve a key path against the payload, then against its JSON-RPC
    ``result``. Proxies that strip the envelope answer with the bare result.
    """
    value = _walk(payload, path)
    if value is None and isinstance(payload, dict) and isinstance(payload.get("result"), dict):
        value = _walk(payload["result"], path)
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict, str)) and len(value) == 0)


class FailoverResolver:
    """
    Issue a request against an ordered endpoint list until one answers.

    Endpoints are tried one at a time, in order, each bounded by its own
    timeout. The first well-formed payload wins. Every rejected endpoint
    is recorded; when all are rejected an ``AggregateFailure`` is raised
    with one attempt per endpoint.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "cosmoscan/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            timeout: Default per-attempt timeout in seconds.
            user_agent: User-Agent header sent to nodes.
            transport: Optional httpx transport (used by tests).
        """
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout(self) -> float:
        return self._timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self._user_agent,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def resolve(
        self,
        endpoints: Sequence[Endpoint],
        request: RequestSpec,
        timeout: float | None = None,
    ) -> tuple[Any, Endpoint]:
        """
        Resolve a request against endpoints in order.

        Args:
            endpoints: Ordered, non-empty endpoint list.
            request: The request to issue.
            timeout: Per-attempt timeout in seconds; defaults to the resolver's.

        Returns:
            The first accepted payload and the endpoint that produced it.

        Raises:
            ValueError: If the endpoint list is empty.
            AggregateFailure: If every endpoint was rejected.
        """
        if not endpoints:
            raise ValueError("endpoint list must not be empty")

        attempt_timeout = timeout if timeout is not None else self._timeout
        attempts: list[EndpointError] = []

        for index, endpoint in enumerate(endpoints):
            logger.debug(
                f"[Failover] {request.method} {request.path} via {endpoint.url} "
                f"({index + 1}/{len(endpoints)})"
            )
            try:
                payload = await self._attempt(endpoint, request, attempt_timeout)
            except EndpointError as e:
                logger.warning(f"[Failover] Rejected {e}")
                attempts.append(e)
                continue

            if attempts:
                logger.info(
                    f"[Failover] {request.path} served by {endpoint.url} "
                    f"after {len(attempts)} failed endpoint(s)"
                )
            return payload, endpoint

        logger.error(f"[Failover] All {len(endpoints)} endpoints failed for {request.path}")
        raise AggregateFailure(attempts, request.path)

    async def _attempt(
        self, endpoint: Endpoint, request: RequestSpec, timeout: float
    ) -> Any:
        """Issue one request and classify any failure as an EndpointError."""
        client = await self._get_client()
        url = f"{endpoint.url}/{request.path.lstrip('/')}"

        try:
            response = await asyncio.wait_for(
                client.request(
                    request.method,
                    url,
                    params=request.params,
                    json=request.json_body,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise EndpointError(
                endpoint, FailureReason.TIMEOUT, f"no response within {timeout}s"
            ) from e
        except httpx.RequestError as e:
            raise EndpointError(
                endpoint, FailureReason.NETWORK_FAILURE, f"{type(e).__name__}: {e}"
            ) from e

        if response.status_code == 429:
            raise EndpointError(
                endpoint, FailureReason.HTTP_STATUS, "rate limited", status_code=429
            )
        if not response.is_success:
            raise EndpointError(
                endpoint,
                FailureReason.HTTP_STATUS,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise EndpointError(
                endpoint, FailureReason.INVALID_PAYLOAD, "response is not JSON"
            ) from e

        if isinstance(payload, dict) and "error" in payload and "result" not in payload:
            raise EndpointError(
                endpoint, FailureReason.INVALID_PAYLOAD, f"node error: {payload['error']}"
            )

        if request.expect_non_empty and _is_empty(_lookup(payload, request.expect_non_empty)):
            raise EndpointError(
                endpoint,
                FailureReason.EMPTY_PAYLOAD,
                f"{request.expect_non_empty} is empty",
            )

        return payload
