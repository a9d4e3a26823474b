"""Prometheus metrics for occupancy synchronization."""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# Refresh attempts by consumer and what triggered them
REFRESH_ATTEMPTS = Counter(
    "parking_client_refresh_total",
    "Total number of refresh attempts",
    ["consumer", "trigger"],
    registry=REGISTRY,
)

REFRESH_FAILURES = Counter(
    "parking_client_refresh_failures_total",
    "Total number of failed refreshes",
    ["consumer"],
    registry=REGISTRY,
)

# Backend round-trip latency (in seconds)
REFRESH_LATENCY = Histogram(
    "parking_client_refresh_latency_seconds",
    "Time taken for a consumer refresh to complete",
    ["consumer"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
    registry=REGISTRY,
)

CONNECTED = Gauge(
    "parking_client_connected",
    "Whether the consumer's last fetch succeeded (1=connected, 0=offline)",
    ["consumer"],
    registry=REGISTRY,
)

SPOTS_AVAILABLE = Gauge(
    "parking_client_spots_available",
    "Available spots in the consumer's current snapshot",
    ["consumer"],
    registry=REGISTRY,
)

SPOTS_TOTAL = Gauge(
    "parking_client_spots_total",
    "Total spots in the consumer's current snapshot",
    ["consumer"],
    registry=REGISTRY,
)

GUIDANCE_STEP = Gauge(
    "parking_client_guidance_step",
    "Current guidance step index (-1 when inactive)",
    registry=REGISTRY,
)


def record_refresh(consumer: str, manual: bool) -> None:
    """Record a refresh attempt."""
    REFRESH_ATTEMPTS.labels(consumer=consumer, trigger="manual" if manual else "timer").inc()


def record_refresh_result(consumer: str, succeeded: bool, latency_seconds: float) -> None:
    """Record the outcome of a refresh."""
    REFRESH_LATENCY.labels(consumer=consumer).observe(latency_seconds)
    CONNECTED.labels(consumer=consumer).set(1 if succeeded else 0)
    if not succeeded:
        REFRESH_FAILURES.labels(consumer=consumer).inc()


def update_spot_counts(consumer: str, total: int, available: int) -> None:
    """Update a consumer's spot count gauges."""
    SPOTS_TOTAL.labels(consumer=consumer).set(total)
    SPOTS_AVAILABLE.labels(consumer=consumer).set(available)


def update_guidance_step(index: int, active: bool) -> None:
    """Update the guidance step gauge."""
    GUIDANCE_STEP.set(index if active else -1)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
