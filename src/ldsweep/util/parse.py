"""Conversion of instrument response text into numbers.

Responses arrive as free-form text over a line-oriented channel. Every malformed
value becomes a sentinel instead of an exception, so a long unattended sweep keeps
running through a transient read glitch. The sentinels recorded in that case are
fixed (see `ldsweep.util.defaults`):

- peak wavelength: 0.0 nm
- power: -100.0 dBm
- trace length: 800 points

Anyone relying on data integrity must filter these values out afterwards.
"""

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from loguru import logger

from ldsweep.util.defaults import (
    DEFAULT_TRACE_POINTS,
    MAX_TRACE_POINTS,
    POWER_FALLBACK_DBM,
)


def parse_scalar(line: str, fallback: float, scale: float = 1.0) -> float:
    """Parse one response line as a float, multiplied by `scale`.

    Whitespace and line terminators are stripped first. Returns `fallback`
    (unscaled) if the text is not a floating point literal. Never raises.

    Parameters
    ----------
    line : str
        Raw response text
    fallback : float
        Value returned on parse failure
    scale : float
        Multiplier, e.g. 1e9 to convert metres to nanometres
    """
    return read_scalar(line, fallback, "", scale).value


def parse_trace(
    line: str, delimiter: str = ",", fallback: float = POWER_FALLBACK_DBM
) -> list[float]:
    """Split a delimited response and parse every field on its own.

    A malformed field becomes `fallback`; the rest of the line is kept.
    """
    return [parse_scalar(f, fallback) for f in line.strip().split(delimiter)]


def parse_count(
    line: str,
    fallback: int = DEFAULT_TRACE_POINTS,
    maximum: int = MAX_TRACE_POINTS,
) -> int:
    """Parse a point count in 1..`maximum`, `fallback` if unusable."""
    value = parse_scalar(line, float("nan"))
    if not (math.isfinite(value) and value.is_integer() and 1 <= value <= maximum):
        logger.debug("Unusable point count {!r}, using {}", line, fallback)
        return fallback
    return int(value)


@dataclass
class WavelengthAxis:
    """Linear wavelength axis of a trace (nm)."""

    start_wl: float
    stop_wl: float
    num_points: int = DEFAULT_TRACE_POINTS

    def values(self) -> np.ndarray:
        return np.linspace(self.start_wl, self.stop_wl, self.num_points)


@dataclass
class TraceMeasurement:
    """Power readings mapped onto a wavelength axis.

    Only the first `min(len(raw), axis.num_points)` readings are kept. Excess
    readings are dropped and a short response leaves the remainder unwritten.
    """

    wavelengths: np.ndarray
    powers: np.ndarray = field(default_factory=lambda: np.array([]))

    def __len__(self):
        return len(self.powers)

    def columns(self) -> np.ndarray:
        """(n, 2) array of wavelength, power pairs."""
        return np.column_stack((self.wavelengths, self.powers))


def map_trace(raw: Sequence[float], axis: WavelengthAxis) -> TraceMeasurement:
    n = min(len(raw), axis.num_points)
    wavelengths = axis.values()[:n]
    return TraceMeasurement(wavelengths, np.asarray(raw[:n], dtype=float))


@dataclass
class ScalarMeasurement:
    """One decoded reading. `is_fallback` is set when the sentinel was used."""

    value: float
    unit: str
    is_fallback: bool = False


def read_scalar(
    line: str, fallback: float, unit: str, scale: float = 1.0
) -> ScalarMeasurement:
    """Like `parse_scalar`, but keeps the unit and whether the sentinel was used."""
    try:
        text = line.strip()
        # float() also accepts "1_000"
        if "_" not in text:
            return ScalarMeasurement(float(text) * scale, unit)
    except (ValueError, TypeError, AttributeError):
        pass
    logger.debug("Could not parse {!r}, using fallback {}", line, fallback)
    return ScalarMeasurement(fallback, unit, is_fallback=True)
