"""Backend gateway module."""

from .client import Direction, OccupancyGateway, TransportError

__all__ = ["Direction", "OccupancyGateway", "TransportError"]
