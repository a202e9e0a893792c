"""Station configuration for ldsweep.

A station is the set of instruments on one bench. Its configuration lives in an INI
file (default `~/.ldsweep/station.ini`) with a single `[station]` section:

[station]
# instrument addresses
source_address = USB::4883::32847::M01053290::0::INSTR
analyzer_address = GPIB0::23::INSTR
power_meter_address = 192.168.1.161:5000

# output
output_dir = ./sweeps/

# source
current_limit_ma = 100

# timing (seconds)
settle_time = 0.5

# analyzer window (nm)
analyzer_center_nm = 980
analyzer_span_nm = 20

Any key left out takes the default from `ldsweep.util.defaults`.

See Also
--------
ldsweep.meas.plan : SweepTiming and AnalyzerSetup built from this configuration
"""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from loguru import logger
from mashumaro import DataClassDictMixin

from ldsweep.meas.plan import AnalyzerSetup, SweepTiming
from ldsweep.types import ValidationError
from ldsweep.util.defaults import (
    ANALYZER_CENTER_NM,
    ANALYZER_SPAN_NM,
    CONFIG_DIR,
    DEFAULT_ANALYZER_ADDRESS,
    DEFAULT_CURRENT_LIMIT_MA,
    DEFAULT_PM_ADDRESS,
    DEFAULT_SOURCE_ADDRESS,
    SETTLE_TIME,
)

SECTION = "station"
FLOAT_FIELDS = (
    "current_limit_ma",
    "settle_time",
    "analyzer_center_nm",
    "analyzer_span_nm",
)


def default_config_path() -> Path:
    return CONFIG_DIR / "station.ini"


@dataclass
class StationConfig(DataClassDictMixin):
    source_address: str = DEFAULT_SOURCE_ADDRESS
    analyzer_address: str = DEFAULT_ANALYZER_ADDRESS
    power_meter_address: str = DEFAULT_PM_ADDRESS
    output_dir: str = "./sweeps/"
    current_limit_ma: float = DEFAULT_CURRENT_LIMIT_MA
    settle_time: float = SETTLE_TIME
    analyzer_center_nm: float = ANALYZER_CENTER_NM
    analyzer_span_nm: float = ANALYZER_SPAN_NM

    def timing(self) -> SweepTiming:
        return SweepTiming(settle_time=self.settle_time)

    def analyzer_setup(self) -> AnalyzerSetup:
        return AnalyzerSetup(
            center_nm=self.analyzer_center_nm, span_nm=self.analyzer_span_nm
        )

    def to_parser(self) -> ConfigParser:
        config = ConfigParser()
        config[SECTION] = {k: str(v) for k, v in self.to_dict().items()}
        return config


def validate_station_config(config: ConfigParser) -> tuple[bool, str]:
    """Validate the station section of a parsed configuration.

    Returns
    -------
    tuple[bool, str]
        (is_valid, error_message)
    """
    if SECTION not in config:
        return False, f"Missing [{SECTION}] section"

    known = {f.name for f in fields(StationConfig)}
    unknown = set(config[SECTION]) - known
    if unknown:
        return False, f"Unknown keys: {', '.join(sorted(unknown))}"

    for key in FLOAT_FIELDS:
        if key in config[SECTION]:
            try:
                value = config[SECTION].getfloat(key)
            except ValueError:
                return False, f"Invalid number for {key}: {config[SECTION][key]}"
            if value < 0 or (key != "settle_time" and value == 0):
                return False, f"Invalid value for {key}: {value}"

    return True, ""


def load_station_config(path: Optional[Union[str, Path]] = None) -> StationConfig:
    """Load the station configuration, defaults if the file does not exist.

    Raises ValidationError if the file exists but is invalid.
    """
    path = Path(path) if path else default_config_path()
    if not path.exists():
        logger.debug("No station config at {}, using defaults", path)
        return StationConfig()

    config = ConfigParser()
    config.read(path)
    is_valid, error_msg = validate_station_config(config)
    if not is_valid:
        raise ValidationError(f"Invalid station config {path}: {error_msg}")

    section = config[SECTION]
    values = {}
    for key in section:
        values[key] = section.getfloat(key) if key in FLOAT_FIELDS else section[key]
    logger.debug("Loaded station config from {}", path)
    return StationConfig.from_dict(values)


def create_default_config_file(
    path: Optional[Union[str, Path]] = None, overwrite: bool = False
) -> Path:
    path = Path(path) if path else default_config_path()
    if path.exists() and not overwrite:
        raise FileExistsError(f"Station config already exists at {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        StationConfig().to_parser().write(f)
    logger.info("Created default station config at {}", path)
    return path
