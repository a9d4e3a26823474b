"""HTTP client for the parking backend's read endpoints."""

import asyncio
import logging
import math
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from ..state.models import OccupancySnapshot, Spot

logger = logging.getLogger(__name__)

_SPOT_LIST = TypeAdapter(list[Spot])


class TransportError(Exception):
    """Raised when a backend call fails for any reason (network, timeout, non-2xx, bad payload)."""


class Direction(str, Enum):
    """Directions the backend can count free spots in."""

    FRONT = "front"
    RIGHT = "right"
    LEFT = "left"


async def _log_request(request: httpx.Request) -> None:
    logger.debug(f"Making {request.method} request to: {request.url}")


async def _log_response(response: httpx.Response) -> None:
    logger.debug(f"Response received from {response.request.url}: {response.status_code}")


class OccupancyGateway:
    """
    Async client for the backend's occupancy endpoints.

    Each call either returns a value or raises a single TransportError.
    No retries are performed here; callers decide what a failure means.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Backend address including any path prefix
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (used to fake the backend)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )
        logger.info(f"Gateway ready for {self.base_url} (timeout {self.timeout_seconds}s)")

    async def _get(self, path: str, params: Optional[dict[str, str]] = None) -> httpx.Response:
        if self._client is None:
            await self.connect()

        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise TransportError(f"Request to {path} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {response.request.url}") from e

    async def fetch_all_spots(self) -> list[Spot]:
        """
        Fetch every parking spot in backend order.

        Raises:
            TransportError: On network failure, timeout, non-2xx or malformed payload
        """
        response = await self._get("/parkingSpot")
        try:
            return _SPOT_LIST.validate_python(self._json(response))
        except ValidationError as e:
            raise TransportError(f"Malformed parking spot payload: {e.error_count()} error(s)") from e

    async def fetch_occupied_count(self) -> int:
        """
        Fetch the number of occupied spots as counted by the backend.

        Raises:
            TransportError: On network failure, timeout, non-2xx or non-integer payload
        """
        response = await self._get("/parkingSpot/occupied-count")
        data = self._json(response)
        if isinstance(data, bool) or not isinstance(data, int) or data < 0:
            raise TransportError(f"Unexpected occupied count payload: {data!r}")
        return data

    async def fetch_directional_count(self, direction: Direction | str, zone_name: str) -> int:
        """
        Fetch the free-spot count in one direction for a zone.

        A payload that is not a number resolves to 0 rather than an error,
        and negative counts are clamped to 0.

        Raises:
            TransportError: On network failure, timeout or non-2xx
        """
        direction = Direction(direction)
        response = await self._get(
            "/parkingSpot/count",
            params={"direction": direction.value, "name": zone_name},
        )
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, bool) or not isinstance(data, (int, float)) or not math.isfinite(data):
            logger.debug(f"Non-numeric {direction.value} count for {zone_name}: {data!r}")
            return 0
        return max(0, int(data))

    async def fetch_stats(self) -> OccupancySnapshot:
        """
        Fetch spots and the occupied count concurrently.

        Both must succeed; a failure of either raises and no snapshot
        is produced.

        Raises:
            TransportError: If either request fails
        """
        spots, occupied = await asyncio.gather(
            self.fetch_all_spots(),
            self.fetch_occupied_count(),
            return_exceptions=True,
        )

        for result in (spots, occupied):
            if isinstance(result, TransportError):
                raise TransportError(f"Failed to fetch parking statistics: {result}") from result
            if isinstance(result, BaseException):
                raise result

        return OccupancySnapshot(spots=spots, occupied_count=occupied, fetched_at=datetime.now())

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client has been created."""
        return self._client is not None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Gateway closed")

    async def __aenter__(self) -> "OccupancyGateway":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
