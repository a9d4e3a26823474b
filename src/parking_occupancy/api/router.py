"""FastAPI route definitions."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Response

from ..guidance.sequencer import GuidanceSequencer
from ..layout.grouping import group_by_leading_character
from ..layout.partitioner import find_section, zone_token
from ..metrics import get_metrics
from ..state.models import Spot
from ..state.synchronizer import (
    DirectionalCountSynchronizer,
    MapSynchronizer,
    PollingConsumer,
    SummarySynchronizer,
)
from .presenters import (
    DIRECTION_LABELS,
    availability_level,
    basement_availability,
    empty_state_message,
    format_last_updated,
)
from .schemas import (
    BasementSummary,
    DirectionCount,
    DirectionsResponse,
    GuidanceResponse,
    HealthResponse,
    MapResponse,
    SectionGridResponse,
    SectionResponse,
    SpotGroup,
    SpotResponse,
    SummaryResponse,
    SyncStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies injected at startup
_summary: Optional[SummarySynchronizer] = None
_map: Optional[MapSynchronizer] = None
_directions: Optional[DirectionalCountSynchronizer] = None
_guidance: Optional[GuidanceSequencer] = None
_basement_ratios: list[tuple[str, float]] = []
_start_time: datetime = datetime.now()


def init_router(
    summary: SummarySynchronizer,
    map_sync: MapSynchronizer,
    directions: DirectionalCountSynchronizer,
    guidance: GuidanceSequencer,
    basement_ratios: list[tuple[str, float]],
) -> None:
    """
    Initialize router with dependencies.

    Args:
        summary: Consumer behind the home summary
        map_sync: Consumer behind the live map
        directions: Consumer behind the directional counts
        guidance: Guidance sequencer for the navigation simulation
        basement_ratios: (level name, share) pairs for the summary estimate
    """
    global _summary, _map, _directions, _guidance, _basement_ratios, _start_time

    _summary = summary
    _map = map_sync
    _directions = directions
    _guidance = guidance
    _basement_ratios = list(basement_ratios)
    _start_time = datetime.now()

    logger.info("API router initialized")


def _require(dependency):
    if dependency is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return dependency


def _sync_status(consumer: PollingConsumer) -> SyncStatus:
    return SyncStatus(
        status=consumer.connectivity.status,
        connected=consumer.connectivity.connected,
        error=consumer.connectivity.error,
        phase=consumer.phase,
        is_refreshing=consumer.is_refreshing,
        has_data=consumer.has_data,
        last_updated=consumer.last_updated,
        last_updated_label=format_last_updated(consumer.last_updated),
    )


def _spot_response(spot: Spot) -> SpotResponse:
    return SpotResponse(id=spot.spot_id, name=spot.name, is_reserved=spot.is_reserved)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports whether the backend was reachable on the last summary fetch.
    """
    uptime = (datetime.now() - _start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        backend_connected=_summary.connectivity.connected if _summary else False,
        polling_running=_summary.is_running if _summary else False,
        uptime_seconds=uptime,
    )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary() -> SummaryResponse:
    """
    Get facility-wide availability.

    available is total minus the backend's occupied count. It is not
    counted from the spots' reservation flags.
    """
    summary = _require(_summary)
    snapshot = summary.snapshot

    available = snapshot.available if snapshot else 0
    total = snapshot.total if snapshot else 0

    return SummaryResponse(
        sync=_sync_status(summary),
        available=available,
        total=total,
        occupied=snapshot.occupied_count if snapshot else 0,
        occupancy_rate=snapshot.occupancy_rate if snapshot else 0.0,
        level=availability_level(summary.connectivity.connected, available),
        basements=[
            BasementSummary(level=level, available=basement_availability(available, ratio))
            for level, ratio in _basement_ratios
        ],
    )


@router.post("/summary/refresh", response_model=SummaryResponse)
async def refresh_summary() -> SummaryResponse:
    """Refresh the summary now (also used by the error banner's retry)."""
    await _require(_summary).retry()
    return await get_summary()


@router.get("/map", response_model=MapResponse)
async def get_map() -> MapResponse:
    """
    Get the live map for the selected basement.

    Sections are rebuilt from the current snapshot on every call. Spots
    are only listed for expanded sections.
    """
    map_sync = _require(_map)
    layout = map_sync.layout()
    expanded = map_sync.expanded_sections

    sections = [
        SectionResponse(
            index=i,
            label=section.label,
            expanded=expanded.is_expanded(i),
            available=section.available,
            total=len(section.spots),
            spots=[_spot_response(s) for s in section.spots] if expanded.is_expanded(i) else [],
        )
        for i, section in enumerate(layout.sections)
    ]

    return MapResponse(
        sync=_sync_status(map_sync),
        basement=layout.basement,
        available=layout.available,
        total=layout.total,
        occupied=layout.occupied,
        is_empty=layout.is_empty,
        empty_message=empty_state_message(map_sync.connectivity.connected) if layout.is_empty else None,
        sections=sections,
    )


@router.put("/map/basement/{basement}", response_model=MapResponse)
async def select_basement(basement: int) -> MapResponse:
    """Switch the map to another basement and re-fetch immediately."""
    map_sync = _require(_map)
    try:
        await map_sync.select_basement(basement)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await get_map()


@router.post("/map/sections/{index}/toggle", response_model=MapResponse)
async def toggle_section(index: int) -> MapResponse:
    """Expand or collapse a section of the selected basement."""
    map_sync = _require(_map)
    if find_section(map_sync.layout(), index) is None:
        raise HTTPException(status_code=404, detail=f"Section {index} not found")

    map_sync.expanded_sections.toggle(index)
    return await get_map()


@router.get("/map/sections/{index}/grid", response_model=SectionGridResponse)
async def get_section_grid(index: int) -> SectionGridResponse:
    """Get a section's spots grouped by leading name character."""
    map_sync = _require(_map)
    section = find_section(map_sync.layout(), index)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section {index} not found")

    return SectionGridResponse(
        index=index,
        label=section.label,
        groups=[
            SpotGroup(key=key, spots=[_spot_response(s) for s in spots])
            for key, spots in group_by_leading_character(section.spots).items()
        ],
    )


@router.post("/map/refresh", response_model=MapResponse)
async def refresh_map() -> MapResponse:
    """Refresh the map now."""
    await _require(_map).retry()
    return await get_map()


@router.get("/directions", response_model=DirectionsResponse)
async def get_directions() -> DirectionsResponse:
    """Get free-spot counts per direction for the selected zone."""
    directions = _require(_directions)
    counts = directions.counts

    return DirectionsResponse(
        sync=_sync_status(directions),
        zone=directions.zone,
        counts=[
            DirectionCount(
                direction=direction,
                label=label,
                count=getattr(counts, direction) if counts else 0,
            )
            for direction, label in DIRECTION_LABELS.items()
        ],
    )


@router.put("/directions/zone/{basement}", response_model=DirectionsResponse)
async def select_zone(basement: int) -> DirectionsResponse:
    """Switch the directional counts to another basement's zone."""
    directions = _require(_directions)
    try:
        await directions.select_zone(zone_token(basement))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return await get_directions()


@router.post("/directions/refresh", response_model=DirectionsResponse)
async def refresh_directions() -> DirectionsResponse:
    """Refresh directional counts now."""
    await _require(_directions).retry()
    return await get_directions()


def _guidance_response() -> GuidanceResponse:
    view = _require(_guidance).render()
    return GuidanceResponse(
        instruction=view.instruction,
        direction=view.direction,
        distance=view.distance,
        step_number=view.step_number,
        total_steps=view.total_steps,
        progress=view.progress,
        is_active=view.is_active,
        destination=_spot_response(view.destination) if view.destination else None,
    )


@router.get("/guidance", response_model=GuidanceResponse)
async def get_guidance() -> GuidanceResponse:
    """Get the current guidance step."""
    return _guidance_response()


@router.post("/guidance/start", response_model=GuidanceResponse)
async def start_guidance(spot_id: Optional[int] = None) -> GuidanceResponse:
    """
    Start guidance from the first step.

    With `spot_id` the spot is looked up in the latest map snapshot and
    becomes the destination. Reserved spots cannot be picked.
    """
    guidance = _require(_guidance)
    destination = None
    if spot_id is not None:
        snapshot = _require(_map).snapshot
        spots = snapshot.spots if snapshot else []
        destination = next((s for s in spots if s.spot_id == spot_id), None)
        if destination is None:
            raise HTTPException(status_code=404, detail=f"Spot {spot_id} not found")
        if destination.is_reserved:
            raise HTTPException(
                status_code=409, detail=f"Spot '{destination.name}' is occupied"
            )
    guidance.start(destination=destination)
    return _guidance_response()


@router.post("/guidance/advance", response_model=GuidanceResponse)
async def advance_guidance() -> GuidanceResponse:
    """Step guidance forward manually."""
    _require(_guidance).advance()
    return _guidance_response()


@router.post("/guidance/stop", response_model=GuidanceResponse)
async def stop_guidance() -> GuidanceResponse:
    """Stop guidance and reset to the first step."""
    _require(_guidance).stop()
    return _guidance_response()


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - parking_client_refresh_total: Refresh attempts by consumer and trigger
    - parking_client_refresh_failures_total: Failed refreshes by consumer
    - parking_client_refresh_latency_seconds: Refresh latency by consumer
    - parking_client_connected: Connectivity per consumer
    - parking_client_spots_available / parking_client_spots_total: Snapshot counts
    - parking_client_guidance_step: Current guidance step
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
