"""Station (bench) configuration."""

from .config import (
    StationConfig,
    create_default_config_file,
    default_config_path,
    load_station_config,
    validate_station_config,
)

__all__ = [
    "StationConfig",
    "create_default_config_file",
    "default_config_path",
    "load_station_config",
    "validate_station_config",
]
