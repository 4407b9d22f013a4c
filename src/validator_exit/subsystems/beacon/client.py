"""
Beacon node API client.

A thin synchronous wrapper around the standard beacon node HTTP API.

Only the read endpoints the exit workflow needs are covered:

- node health and sync status, to vet an endpoint before use
- the head block header, to learn the current slot
- a single validator's state at head

All calls block with a bounded timeout. Every transport or protocol failure
surfaces as ChainUnavailable so callers handle one error type.
"""

from __future__ import annotations

import logging
from typing import Any, Final

import httpx

from validator_exit.types import ChainUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Final = 10.0
"""HTTP request timeout in seconds."""

HEALTH_ENDPOINT: Final = "/eth/v1/node/health"
SYNCING_ENDPOINT: Final = "/eth/v1/node/syncing"
HEAD_HEADER_ENDPOINT: Final = "/eth/v1/beacon/headers/head"
VALIDATOR_ENDPOINT: Final = "/eth/v1/beacon/states/head/validators/{identity}"


class BeaconApiClient:
    """
    Blocking client for one beacon node.

    The underlying connection pool is reused across calls. Use as a context
    manager, or call close() when done.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the node API (e.g., "http://localhost:5052").
            timeout: Per-request timeout in seconds.
            transport: Optional transport override, used by tests.
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> BeaconApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def _get(self, path: str) -> httpx.Response:
        try:
            return self._client.get(path)
        except httpx.RequestError as exc:
            raise ChainUnavailable(
                f"Network error while connecting to {self.base_url}{path}: {exc}"
            ) from exc

    def _get_json(self, path: str) -> dict[str, Any]:
        response = self._get(path)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ChainUnavailable(
                f"HTTP error {exc.response.status_code} from {path}: {exc.response.text[:200]}"
            ) from exc
        try:
            body = response.json()
        except ValueError as exc:
            raise ChainUnavailable(f"Invalid JSON from {path}: {exc}") from exc
        if not isinstance(body, dict):
            raise ChainUnavailable(f"Unexpected response shape from {path}")
        return body

    def check_health(self) -> int:
        """
        Probe the node health endpoint.

        Any HTTP answer means the node is reachable. The status code tells
        ready (200) from syncing (206) from not initialized (503).

        Returns:
            The HTTP status code.

        Raises:
            ChainUnavailable: If the node cannot be reached at all.
        """
        response = self._get(HEALTH_ENDPOINT)
        logger.debug("Health check %s -> %d", self.base_url, response.status_code)
        return response.status_code

    def is_syncing(self) -> bool:
        """
        Ask whether the node is still catching up with the chain.

        Raises:
            ChainUnavailable: If the node is unreachable or the answer lacks is_syncing.
        """
        body = self._get_json(SYNCING_ENDPOINT)
        try:
            value = body["data"]["is_syncing"]
        except (KeyError, TypeError) as exc:
            raise ChainUnavailable("Sync status response has no data.is_syncing") from exc
        if isinstance(value, str):
            return value.lower() == "true"
        return bool(value)

    def get_head_slot(self) -> int:
        """
        Fetch the slot of the current head block.

        Raises:
            ChainUnavailable: If the node is unreachable or the slot is not parsable.
        """
        body = self._get_json(HEAD_HEADER_ENDPOINT)
        try:
            return int(body["data"]["header"]["message"]["slot"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ChainUnavailable("Head header response has no parsable slot") from exc

    def get_validator(self, identity: str) -> dict[str, Any] | None:
        """
        Fetch one validator's state at head.

        Args:
            identity: 0x-prefixed public key (an index also works).

        Returns:
            The ``data`` object of the response, or None if the node does
            not know the validator.

        Raises:
            ChainUnavailable: On transport failure or an unexpected answer.
        """
        path = VALIDATOR_ENDPOINT.format(identity=identity)
        response = self._get(path)

        # Unknown validators are expected for keys that were never deposited.
        #
        # Nodes answer 404, and some answer 400 with a "not found" message.
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.status_code == httpx.codes.BAD_REQUEST and "not found" in response.text.lower():
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ChainUnavailable(
                f"HTTP error {exc.response.status_code} from {path}: {exc.response.text[:200]}"
            ) from exc
        try:
            body = response.json()
        except ValueError as exc:
            raise ChainUnavailable(f"Invalid JSON from {path}: {exc}") from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise ChainUnavailable(f"Validator response for {identity} has no data object")
        return data
