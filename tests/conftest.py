from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio

from parking_occupancy.gateway.client import OccupancyGateway
from parking_occupancy.state.models import Spot

BASE_URL = "http://backend.test/firstParkingBackEnd"


def make_spots(count: int, zone: str = "Zone B1", reserved_every: int = 0, start_id: int = 1) -> list[dict]:
    """Build wire-format spots named like 'A1 Zone B1'."""
    spots = []
    for i in range(count):
        row = "ABCD"[(i // 6) % 4]
        spots.append(
            {
                "parkingSpotId": start_id + i,
                "parkingSpotName": f"{row}{i + 1} {zone}",
                "isReserved": bool(reserved_every) and i % reserved_every == 0,
            }
        )
    return spots


def to_spots(payload: list[dict]) -> list[Spot]:
    return [Spot.model_validate(s) for s in payload]


class FakeBackend:
    """In-memory stand-in for the parking backend."""

    def __init__(self) -> None:
        self.spots: list[dict] = make_spots(30, "Zone B1") + make_spots(10, "Zone B2", start_id=100)
        self.occupied: Any = 4
        self.directional: dict[tuple[str, str], Any] = {}
        self.fail_paths: set[str] = set()
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/firstParkingBackEnd")

        if path in self.fail_paths:
            raise httpx.ConnectError("connection refused", request=request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "backend error"})

        if path == "/parkingSpot":
            return httpx.Response(200, json=self.spots)
        if path == "/parkingSpot/occupied-count":
            return httpx.Response(200, json=self.occupied)
        if path == "/parkingSpot/count":
            key = (request.url.params["direction"], request.url.params["name"])
            payload = self.directional.get(key, 0)
            if isinstance(payload, str) and payload.startswith("<"):
                return httpx.Response(200, text=payload)
            return httpx.Response(200, json=payload)
        return httpx.Response(404)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def gateway(backend: FakeBackend) -> AsyncGenerator[OccupancyGateway, None]:
    async with OccupancyGateway(BASE_URL, transport=httpx.MockTransport(backend.handler)) as gw:
        yield gw
