"""Data models for occupancy state."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConnectivityStatus(str, Enum):
    """Whether the last fetch attempt reached the backend."""

    CONNECTED = "connected"
    OFFLINE = "offline"


class RefreshPhase(str, Enum):
    """Lifecycle of a consumer's refresh."""

    IDLE = "idle"
    REFRESHING = "refreshing"
    SUCCESS = "success"
    FAILED = "failed"


class Spot(BaseModel):
    """A single parking spot as reported by the backend."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    spot_id: int = Field(alias="parkingSpotId")
    name: str = Field(alias="parkingSpotName", min_length=1)
    is_reserved: bool = Field(alias="isReserved")  # True means occupied


class OccupancySnapshot(BaseModel):
    """
    All known spots at a point in time plus aggregate counts.

    occupied_count comes from the backend's dedicated endpoint and is
    never recomputed from the spots' reservation flags, so the two may
    disagree.
    """

    spots: list[Spot]
    occupied_count: int
    fetched_at: datetime

    @property
    def total(self) -> int:
        return len(self.spots)

    @property
    def available(self) -> int:
        return self.total - self.occupied_count

    @property
    def occupancy_rate(self) -> float:
        """Occupied share as a percentage."""
        return (self.occupied_count / self.total) * 100 if self.total > 0 else 0.0


class ConnectivityState(BaseModel):
    """Connection status plus the last error message, replaced as a whole."""

    model_config = ConfigDict(frozen=True)

    status: ConnectivityStatus = ConnectivityStatus.CONNECTED
    error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.status == ConnectivityStatus.CONNECTED

    @classmethod
    def online(cls) -> "ConnectivityState":
        return cls(status=ConnectivityStatus.CONNECTED, error=None)

    @classmethod
    def offline(cls, message: str) -> "ConnectivityState":
        return cls(status=ConnectivityStatus.OFFLINE, error=message)


class DirectionalCounts(BaseModel):
    """Free-spot counts per direction for one zone."""

    zone: str
    front: int = 0
    right: int = 0
    left: int = 0
    fetched_at: datetime
