"""Data model of a current sweep.

- `SweepPlan`: start/stop/step in mA plus the dwell time, fixed for a sweep.
- `SweepPoint`: one commanded current and what was measured there.
- `ResultRow`: one line of the summary file.
- `SweepOutcome`: how a sweep ended, including the final error queues.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from mashumaro import DataClassDictMixin

from ldsweep.types import ValidationError
from ldsweep.util.defaults import (
    ANALYZER_CENTER_NM,
    ANALYZER_SPAN_NM,
    DEFAULT_DWELL_TIME,
    DEFAULT_TRACE_POINTS,
    SETTLE_TIME,
    TRACE_DIR_NAME,
)
from ldsweep.util.parse import ScalarMeasurement, TraceMeasurement


class SweepVariant(str, Enum):
    """What is captured at each point."""

    SOURCE = "source"  # current source only
    PEAK = "peak"  # + analyzer peak wavelength and power
    TRACE = "trace"  # + full analyzer trace per point

    @classmethod
    def from_flags(cls, has_analyzer: bool, capture_trace: bool) -> SweepVariant:
        if capture_trace:
            if not has_analyzer:
                raise ValidationError("Trace capture requires an analyzer")
            return cls.TRACE
        return cls.PEAK if has_analyzer else cls.SOURCE


@dataclass(frozen=True)
class SweepPlan(DataClassDictMixin):
    """Current sweep parameters.

    Attributes
    ----------
    start : float
        First current (mA)
    stop : float
        Upper bound of the sweep (mA); the last point never exceeds it
    step : float
        Increment between points (mA), must be positive
    dwell_time : float
        Stabilisation wait after setting each current (s)
    """

    start: float
    stop: float
    step: float
    dwell_time: float = DEFAULT_DWELL_TIME

    def __post_init__(self):
        """Validate configuration immediately after initialization."""
        self.validate()

    def validate(self) -> None:
        validators = {
            "step": (self.step > 0, "Sweep step must be positive"),
            "dwell_time": (self.dwell_time >= 0, "Dwell time cannot be negative"),
            "start": (math.isfinite(self.start), "Start current must be finite"),
            "stop": (math.isfinite(self.stop), "Stop current must be finite"),
        }
        for param, (valid, message) in validators.items():
            if not valid:
                raise ValidationError(f"{message} (got {getattr(self, param)})")

    @property
    def point_count(self) -> int:
        return max(0, math.floor((self.stop - self.start) / self.step) + 1)

    def current_at(self, index: int) -> float:
        return self.start + index * self.step

    def currents(self) -> Iterator[float]:
        for i in range(self.point_count):
            yield self.current_at(i)


@dataclass(frozen=True)
class SweepTiming(DataClassDictMixin):
    """Fixed delays of the sweep sequence (s)."""

    settle_time: float = SETTLE_TIME


@dataclass(frozen=True)
class AnalyzerSetup(DataClassDictMixin):
    """Spectrum analyzer window and trace handling."""

    center_nm: float = ANALYZER_CENTER_NM
    span_nm: float = ANALYZER_SPAN_NM
    default_trace_points: int = DEFAULT_TRACE_POINTS
    trace_dir_name: str = TRACE_DIR_NAME

    @property
    def start_nm(self) -> float:
        return self.center_nm - self.span_nm / 2

    @property
    def stop_nm(self) -> float:
        return self.center_nm + self.span_nm / 2

    def window_command(self) -> str:
        return f"CENTERWL {self.center_nm:g}NM;SPANWL {self.span_nm:g}NM;"


@dataclass
class SweepPoint:
    index: int
    current_ma: float
    peak_wavelength: Optional[ScalarMeasurement] = None
    peak_power: Optional[ScalarMeasurement] = None
    trace: Optional[TraceMeasurement] = None
    sweep_confirmed: bool = True

    @property
    def current_a(self) -> float:
        return self.current_ma / 1000.0

    def to_row(self) -> ResultRow:
        return ResultRow(
            current_ma=self.current_ma,
            peak_wavelength_nm=(
                None if self.peak_wavelength is None else self.peak_wavelength.value
            ),
            peak_power_dbm=None if self.peak_power is None else self.peak_power.value,
        )


@dataclass
class ResultRow:
    current_ma: float
    peak_wavelength_nm: Optional[float] = None
    peak_power_dbm: Optional[float] = None

    def format(self) -> str:
        cells = [f"{self.current_ma:.2f}"]
        if self.peak_wavelength_nm is not None:
            cells.append(f"{self.peak_wavelength_nm:.4f}")
        if self.peak_power_dbm is not None:
            cells.append(f"{self.peak_power_dbm:.2f}")
        return ",".join(cells)


@dataclass
class SweepOutcome(DataClassDictMixin):
    """Terminal state of a sweep.

    `unconfirmed_points` lists the indices whose completion flag was not "1".
    The error queue fields hold the raw (stripped) response to the final error
    queries; they are None when the query was not reached.
    """

    variant: SweepVariant
    point_count: int
    completed: bool = False
    points_recorded: int = 0
    unconfirmed_points: list[int] = field(default_factory=list)
    source_error: Optional[str] = None
    analyzer_error: Optional[str] = None
    summary_path: Optional[str] = None
    abort_reason: Optional[str] = None
