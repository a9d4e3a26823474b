"""API request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..guidance.sequencer import StepDirection
from ..state.models import ConnectivityStatus, RefreshPhase
from .presenters import AvailabilityLevel


class SpotResponse(BaseModel):
    """Response schema for a single parking spot."""

    id: int
    name: str
    is_reserved: bool


class SyncStatus(BaseModel):
    """Refresh and connectivity state shared by every consumer."""

    status: ConnectivityStatus
    connected: bool
    error: Optional[str] = None
    phase: RefreshPhase
    is_refreshing: bool
    has_data: bool
    last_updated: Optional[datetime] = None
    last_updated_label: str


class BasementSummary(BaseModel):
    """Estimated availability for one basement level."""

    level: str
    available: int


class SummaryResponse(BaseModel):
    """Response schema for the facility-wide summary."""

    sync: SyncStatus
    available: int
    total: int
    occupied: int
    occupancy_rate: float
    level: AvailabilityLevel
    basements: list[BasementSummary]


class SectionResponse(BaseModel):
    """One named section of a basement."""

    index: int
    label: str
    expanded: bool
    available: int
    total: int
    spots: list[SpotResponse]  # Empty while collapsed


class MapResponse(BaseModel):
    """Response schema for the live map of one basement."""

    sync: SyncStatus
    basement: int
    available: int
    total: int
    occupied: int
    is_empty: bool
    empty_message: Optional[str] = None
    sections: list[SectionResponse]


class SpotGroup(BaseModel):
    """Spots sharing a leading name character."""

    key: str
    spots: list[SpotResponse]


class SectionGridResponse(BaseModel):
    """Compact grid layout of one section."""

    index: int
    label: str
    groups: list[SpotGroup]


class DirectionCount(BaseModel):
    direction: str
    label: str
    count: int


class DirectionsResponse(BaseModel):
    """Response schema for directional counts of a zone."""

    sync: SyncStatus
    zone: str
    counts: list[DirectionCount]


class GuidanceResponse(BaseModel):
    """Current guidance step and progress."""

    instruction: str
    direction: StepDirection
    distance: str
    step_number: int
    total_steps: int
    progress: list[bool]
    is_active: bool
    destination: Optional[SpotResponse] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    backend_connected: bool
    polling_running: bool
    uptime_seconds: float
