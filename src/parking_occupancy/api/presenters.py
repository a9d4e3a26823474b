"""Display helpers shared by the API responses."""

import math
from datetime import datetime
from enum import Enum
from typing import Optional


class AvailabilityLevel(str, Enum):
    """Status colour of the home summary."""

    OK = "ok"
    FULL = "full"
    OFFLINE = "offline"


NO_DATA_MESSAGE = "No parking data available"
UNREACHABLE_MESSAGE = "Unable to load parking data"

DIRECTION_LABELS = {"front": "FRONT", "right": "RIGHT", "left": "LEFT"}


def format_last_updated(last_updated: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Relative age of the last successful update, e.g. '12s ago'."""
    if last_updated is None:
        return "Never"

    now = now or datetime.now()
    seconds = max(0, math.floor((now - last_updated).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    return last_updated.strftime("%H:%M:%S")


def availability_level(connected: bool, available: int) -> AvailabilityLevel:
    if not connected:
        return AvailabilityLevel.OFFLINE
    if available == 0:
        return AvailabilityLevel.FULL
    return AvailabilityLevel.OK


def basement_availability(available: int, ratio: float) -> int:
    """Estimated free spaces on a level as a share of the facility total."""
    return max(0, math.floor(available * ratio))


def empty_state_message(connected: bool) -> str:
    return NO_DATA_MESSAGE if connected else UNREACHABLE_MESSAGE
