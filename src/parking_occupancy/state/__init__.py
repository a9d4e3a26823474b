"""State management module."""

from .models import (
    ConnectivityState,
    ConnectivityStatus,
    DirectionalCounts,
    OccupancySnapshot,
    RefreshPhase,
    Spot,
)

__all__ = [
    "ConnectivityState",
    "ConnectivityStatus",
    "DirectionalCounts",
    "OccupancySnapshot",
    "RefreshPhase",
    "Spot",
]
