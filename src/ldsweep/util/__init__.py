# -*- coding: utf-8 -*-
"""
Utility functions and constants for ldsweep.

- Logging configuration (`start_log`, `shutdown_log`)
- Response parsing (`parse_scalar`, `parse_trace`)
- VISA discovery (`list_visa_devices`)
- Metadata saving (`save_metadata`)
"""

from .defaults import DEFAULT_LOGLEVEL, TEST_LOGLEVEL
from .logging import (
    clear_log,
    log_default_path,
    shutdown_log,
    start_log,
)
from .parse import (
    ScalarMeasurement,
    TraceMeasurement,
    WavelengthAxis,
    map_trace,
    parse_count,
    parse_scalar,
    parse_trace,
    read_scalar,
)

__all__ = [
    "DEFAULT_LOGLEVEL",
    "TEST_LOGLEVEL",
    "ScalarMeasurement",
    "TraceMeasurement",
    "WavelengthAxis",
    "clear_log",
    "log_default_path",
    "map_trace",
    "parse_count",
    "parse_scalar",
    "parse_trace",
    "read_scalar",
    "shutdown_log",
    "start_log",
]
