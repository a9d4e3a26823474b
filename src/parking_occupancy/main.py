"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .api.router import init_router, router
from .config import AppConfig, load_config_or_default
from .gateway.client import OccupancyGateway
from .guidance.sequencer import GuidanceSequencer
from .state.synchronizer import (
    DirectionalCountSynchronizer,
    MapSynchronizer,
    PollingConsumer,
    SummarySynchronizer,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global state
config: Optional[AppConfig] = None
gateway: Optional[OccupancyGateway] = None
consumers: list[PollingConsumer] = []
guidance: Optional[GuidanceSequencer] = None


def build_consumers(
    cfg: AppConfig, client: OccupancyGateway
) -> tuple[SummarySynchronizer, MapSynchronizer, DirectionalCountSynchronizer]:
    """Create one independently timed consumer per view."""
    summary = SummarySynchronizer(client, cfg.polling.summary_interval_seconds)
    map_sync = MapSynchronizer(
        client,
        cfg.polling.map_interval_seconds,
        basement=cfg.polling.default_basement,
        section_names=cfg.layout.section_names,
        section_size=cfg.layout.section_size,
    )
    directions = DirectionalCountSynchronizer(
        client,
        cfg.polling.directional_interval_seconds,
        zone=cfg.polling.default_zone,
    )
    return summary, map_sync, directions


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global config, gateway, consumers, guidance

    logger.info("Starting parking occupancy client...")

    config = load_config_or_default()

    gateway = OccupancyGateway(
        base_url=config.gateway.base_url,
        timeout_seconds=config.gateway.timeout_seconds,
    )
    await gateway.connect()

    summary, map_sync, directions = build_consumers(config, gateway)
    consumers = [summary, map_sync, directions]

    guidance = GuidanceSequencer(
        dwell_seconds=config.guidance.dwell_seconds,
        auto_advance=config.guidance.auto_advance,
    )

    init_router(summary, map_sync, directions, guidance, config.summary.basement_ratios)

    # Each consumer fetches immediately, then polls on its own cadence
    for consumer in consumers:
        consumer.start()
        logger.info(f"{consumer.name} polling every {consumer.interval_seconds}s")

    logger.info(f"Parking occupancy client ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down...")

    for consumer in consumers:
        await consumer.stop()
    for consumer in consumers:
        await consumer.wait_pending()

    if guidance:
        await guidance.close()

    if gateway:
        await gateway.close()

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Parking Occupancy Client",
    description="Live occupancy, basement sections and guidance for a multi-level parking facility",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


def main():
    """Run the application."""
    # Load config just to get API settings
    cfg = load_config_or_default()

    uvicorn.run(
        "parking_occupancy.main:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
