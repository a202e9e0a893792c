"""The sweep engine.

One parameterised state machine covers the three sweep variants (source only,
source + analyzer peak, source + analyzer peak + full trace):

    IDLE -> CONFIGURING -> SOURCE_OFF -> STABILIZING -> SOURCE_ON -> STABILIZING
         -> {SET_POINT -> DWELL -> ACQUIRE -> RECORD} x N
         -> FINAL_SOURCE_OFF -> ERROR_CHECK -> DONE

Everything is sequential and blocking. Each command is followed by its response
or by a fixed sleep before the next is issued. Nothing in here retries.

Failure policy
--------------
- A transport failure (or an output file failure) aborts the sweep at once with
  `SweepAbortedError`, which carries the partial `SweepOutcome`.
- Whether the source is switched off on that path is the caller's explicit choice
  (`shutdown_on_abort`); by default it is left alone and this is logged.
- A completion flag other than "1" is only a warning.
- Unparseable analyzer values are recorded as sentinels (0.0 nm, -100.0 dBm).
"""

from __future__ import annotations

import time
from enum import Enum, auto
from typing import Optional, Union

from loguru import logger

from ldsweep.device import CLD1015, HP70952B, Device, Transport
from ldsweep.types import SweepAbortedError, TransportError
from ldsweep.util.parse import WavelengthAxis, map_trace

from .plan import (
    AnalyzerSetup,
    SweepOutcome,
    SweepPlan,
    SweepPoint,
    SweepTiming,
    SweepVariant,
)
from .recorder import PathLike, SweepRecorder


class SweepState(Enum):
    IDLE = auto()
    CONFIGURING = auto()
    SOURCE_OFF = auto()
    STABILIZING = auto()
    SOURCE_ON = auto()
    SET_POINT = auto()
    DWELL = auto()
    ACQUIRE = auto()
    RECORD = auto()
    FINAL_SOURCE_OFF = auto()
    ERROR_CHECK = auto()
    DONE = auto()
    ABORTED = auto()


def _as_driver(instrument: Union[Device, Transport, None], cls):
    if instrument is None or isinstance(instrument, Device):
        return instrument
    return cls(instrument)


class CurrentSweep:
    """Runs one current sweep.

    Parameters
    ----------
    source : CLD1015 or Transport
        Current source, borrowed for the duration of the sweep
    analyzer : HP70952B or Transport, optional
        Spectrum analyzer; None for a source-only sweep
    plan : SweepPlan
    capture_trace : bool
        Also capture and save the full analyzer trace at each point
    recorder : SweepRecorder, optional
        Defaults to a recorder writing into `output_dir`
    timing : SweepTiming, optional
    analyzer_setup : AnalyzerSetup, optional
    shutdown_on_abort : bool
        Make one best-effort "source off" attempt before propagating an abort
    """

    def __init__(
        self,
        source: Union[CLD1015, Transport],
        analyzer: Union[HP70952B, Transport, None],
        plan: SweepPlan,
        capture_trace: bool = False,
        recorder: Optional[SweepRecorder] = None,
        output_dir: PathLike = ".",
        timing: Optional[SweepTiming] = None,
        analyzer_setup: Optional[AnalyzerSetup] = None,
        shutdown_on_abort: bool = False,
    ):
        self.variant = SweepVariant.from_flags(analyzer is not None, capture_trace)
        self.source: CLD1015 = _as_driver(source, CLD1015)
        self.analyzer: Optional[HP70952B] = _as_driver(analyzer, HP70952B)
        self.plan = plan
        self.timing = timing or SweepTiming()
        self.analyzer_setup = analyzer_setup or AnalyzerSetup()
        self.recorder = recorder or SweepRecorder(
            output_dir, self.variant, self.analyzer_setup
        )
        self.shutdown_on_abort = shutdown_on_abort
        self.axis: Optional[WavelengthAxis] = None
        self.state = SweepState.IDLE
        self._point_index: Optional[int] = None

    @property
    def capture_trace(self) -> bool:
        return self.variant is SweepVariant.TRACE

    def _enter(self, state: SweepState) -> None:
        logger.trace("Sweep state {} -> {}", self.state.name, state.name)
        self.state = state

    def _settle(self) -> None:
        self._enter(SweepState.STABILIZING)
        time.sleep(self.timing.settle_time)

    def run(self) -> SweepOutcome:
        outcome = SweepOutcome(
            variant=self.variant,
            point_count=self.plan.point_count,
            summary_path=str(self.recorder.summary_path),
        )
        logger.info(
            "Starting {} sweep with {} points", self.variant.value, outcome.point_count
        )
        try:
            self.recorder.open()
            self._configure()

            self._enter(SweepState.SOURCE_OFF)
            self.source.set_output(False)
            self._settle()
            self._enter(SweepState.SOURCE_ON)
            self.source.set_output(True)
            self._settle()

            for i in range(outcome.point_count):
                self._point_index = i
                point = self._measure_point(i, outcome)
                self._enter(SweepState.RECORD)
                self.recorder.record(point)
                outcome.points_recorded += 1
            self._point_index = None

            self._enter(SweepState.FINAL_SOURCE_OFF)
            self.source.set_output(False)
            if self.analyzer is not None:
                self.analyzer.sweep_off()

            self._enter(SweepState.ERROR_CHECK)
            outcome.source_error = self.source.query_error()
            logger.info("Final error check on CLD1015: {}", outcome.source_error)
            if self.analyzer is not None:
                outcome.analyzer_error = self.analyzer.query_error()
                logger.info("Final error check on OSA: {}", outcome.analyzer_error)
        except TransportError as e:
            self._abort(e, outcome)
        finally:
            self.recorder.close()

        outcome.completed = True
        self._enter(SweepState.DONE)
        if outcome.unconfirmed_points:
            logger.warning(
                "Sweep completed, {} point(s) without confirmed analyzer sweep",
                len(outcome.unconfirmed_points),
            )
        else:
            logger.info("Current sweep completed successfully")
        return outcome

    def _configure(self) -> None:
        self._enter(SweepState.CONFIGURING)
        if self.analyzer is None:
            return
        self.analyzer.preset()
        self.analyzer.single_sweep_mode()
        if self.capture_trace:
            setup = self.analyzer_setup
            self.analyzer.set_window(setup.window_command())
            num_points = self.analyzer.trace_length(setup.default_trace_points)
            self.axis = WavelengthAxis(setup.start_nm, setup.stop_nm, num_points)
            logger.info(
                "Trace axis {:.2f}-{:.2f} nm, {} points",
                self.axis.start_wl,
                self.axis.stop_wl,
                num_points,
            )

    def _measure_point(self, index: int, outcome: SweepOutcome) -> SweepPoint:
        point = SweepPoint(index=index, current_ma=self.plan.current_at(index))

        self._enter(SweepState.SET_POINT)
        self.source.set_current(point.current_a)
        logger.info("Set current to {:.2f} mA", point.current_ma)

        self._enter(SweepState.DWELL)
        time.sleep(self.plan.dwell_time)

        if self.analyzer is None:
            return point

        self._enter(SweepState.ACQUIRE)
        confirmed, response = self.analyzer.take_sweep()
        point.sweep_confirmed = confirmed
        if not confirmed:
            logger.warning(
                "Sweep not confirmed complete at {:.2f} mA. Response: {}",
                point.current_ma,
                response,
            )
            outcome.unconfirmed_points.append(index)

        self.analyzer.peak_search()
        point.peak_wavelength = self.analyzer.peak_wavelength()
        point.peak_power = self.analyzer.peak_power()
        logger.info("  Peak Wavelength: {:.3f} nm", point.peak_wavelength.value)
        logger.info("  Peak Power: {:.2f} dBm", point.peak_power.value)

        if self.capture_trace:
            raw = self.analyzer.read_trace()
            point.trace = map_trace(raw, self.axis)
            if len(raw) != self.axis.num_points:
                logger.debug(
                    "Trace at {:.2f} mA has {} values, expected {}",
                    point.current_ma,
                    len(raw),
                    self.axis.num_points,
                )
        return point

    def _abort(self, error: TransportError, outcome: SweepOutcome) -> None:
        failed_in = self.state.name
        self._enter(SweepState.ABORTED)
        outcome.abort_reason = f"{failed_in}: {error}"
        where = (
            f"point {self._point_index}" if self._point_index is not None else failed_in
        )
        logger.error("Sweep aborted during {}: {}", where, error)
        if self.shutdown_on_abort:
            try:
                self.source.set_output(False)
                logger.warning("Source output switched OFF after abort")
            except TransportError as shutdown_error:
                logger.error("Best-effort source shutdown failed: {}", shutdown_error)
        else:
            logger.warning(
                "Source output state unknown after abort, no shutdown attempted"
            )
        raise SweepAbortedError(f"Sweep aborted: {error}", outcome) from error


def run_sweep(
    source: Union[CLD1015, Transport],
    analyzer: Union[HP70952B, Transport, None],
    plan: SweepPlan,
    capture_trace: bool = False,
    **kwargs,
) -> SweepOutcome:
    """Run a current sweep and return its outcome.

    See `CurrentSweep` for the keyword arguments. Raises `ValidationError` for an
    invalid combination (trace capture without analyzer) and `SweepAbortedError`
    if a transport or output file fails mid-sweep.
    """
    return CurrentSweep(source, analyzer, plan, capture_trace, **kwargs).run()
