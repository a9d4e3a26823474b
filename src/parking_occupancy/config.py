"""Configuration models and loading utilities."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

BASE_URL_ENV_VAR = "PARKING_API_BASE_URL"

SECTION_NAMES_B1 = [
    "IJARAH AVENUE(VIP)",
    "FIRST STREET(VIP)",
    "LORATO NTAKHWANA AVENUE",
    "FUN STREET",
    "LESEDI STREET",
    "BOOGEYMAN STREET",
    "WALK OF FAME AVENUE",
    "MODIRI STREET",
    "KGWARI AVENUE",
]

SECTION_NAMES_B2 = [
    "BANK ON WHEELS STREET",
    "MOGWEBI STREET",
    "*174# AVENUE",
    "MOEMEDI STREET",
    "FOUNDATION AVENUE",
    "POLOKO AVENUE",
    "HEEIA STREET",
]


class GatewayConfig(BaseModel):
    """Backend connection configuration."""

    base_url: str = "http://localhost:8080/firstParkingBackEnd"  # Includes path prefix
    timeout_seconds: float = 10.0

    @field_validator("base_url", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
            env_var = v[2:-1]
            return os.environ.get(env_var, "")
        return v

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class PollingConfig(BaseModel):
    """Refresh cadences, one per consumer."""

    summary_interval_seconds: float = 30.0
    map_interval_seconds: float = 5.0
    directional_interval_seconds: float = 5.0
    default_basement: int = 1
    default_zone: str = "Zone B1"

    @field_validator(
        "summary_interval_seconds",
        "map_interval_seconds",
        "directional_interval_seconds",
    )
    @classmethod
    def positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("polling interval must be positive")
        return v


class LayoutConfig(BaseModel):
    """Basement sectioning configuration."""

    section_size: int = 24
    section_names: dict[int, list[str]] = {1: SECTION_NAMES_B1, 2: SECTION_NAMES_B2}

    @field_validator("section_size")
    @classmethod
    def positive_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("section_size must be at least 1")
        return v


class GuidanceConfig(BaseModel):
    """Navigation simulation configuration."""

    dwell_seconds: float = 3.0  # Time spent on each step in automatic mode
    auto_advance: bool = True


class SummaryConfig(BaseModel):
    """Home summary configuration."""

    # Share of facility-wide availability shown per basement level
    basement_ratios: list[tuple[str, float]] = [
        ("Basement Level 1", 0.6),
        ("Basement Level 2", 0.4),
    ]


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Main application configuration."""

    gateway: GatewayConfig = GatewayConfig()
    polling: PollingConfig = PollingConfig()
    layout: LayoutConfig = LayoutConfig()
    guidance: GuidanceConfig = GuidanceConfig()
    summary: SummaryConfig = SummaryConfig()
    api: APIConfig = APIConfig()


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    The PARKING_API_BASE_URL environment variable, when set, takes
    precedence over gateway.base_url from the file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return apply_env_overrides(AppConfig(**data))


def apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment overrides on top of a loaded configuration."""
    base_url = os.environ.get(BASE_URL_ENV_VAR)
    if base_url:
        gateway = GatewayConfig(
            base_url=base_url,
            timeout_seconds=config.gateway.timeout_seconds,
        )
        config = config.model_copy(update={"gateway": gateway})
        logger.info(f"Using backend URL from {BASE_URL_ENV_VAR}: {gateway.base_url}")
    return config


def get_config_path() -> Path:
    """Get the default configuration file path."""
    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist


def load_config_or_default(path: str | Path | None = None) -> AppConfig:
    """Load configuration, falling back to defaults when no file exists."""
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}, using defaults")
        return apply_env_overrides(AppConfig())
    config = load_config(config_path)
    logger.info(f"Loaded configuration from {config_path}")
    return config
