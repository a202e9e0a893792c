"""Result recording: summary CSV and per-point trace CSVs.

Summary rows are flushed as soon as they are written, so a crash mid-sweep leaves
every earlier point on disk.

Directory layout
----------------
<output_dir>/current_sweep_results.csv
<output_dir>/traces/trace_<current:.2f>mA.csv   (trace variant)
<output_dir>/trace_overflow.csv                 (only if a trace file failed)

A trace file that cannot be created is replaced by the single shared overflow
file. Rows from different points written there are not told apart.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Optional, Sequence, Union

import numpy as np
from loguru import logger

from ldsweep.types import RecorderError
from ldsweep.util.defaults import SUMMARY_FILENAME, TRACE_OVERFLOW_FILENAME
from ldsweep.util.parse import TraceMeasurement

from .plan import AnalyzerSetup, ResultRow, SweepPoint, SweepVariant

PathLike = Union[str, os.PathLike]

CURRENT_HEADER = "Current (mA)"
PEAK_HEADER = "Peak Wavelength (nm),Peak Power (dBm)"
TRACE_HEADER = "Wavelength (nm),Power (dBm)"
TRACE_FORMAT = ("%.4f", "%.2f")


def summary_header(variant: SweepVariant) -> str:
    if variant is SweepVariant.SOURCE:
        return CURRENT_HEADER
    return f"{CURRENT_HEADER},{PEAK_HEADER}"


def trace_filename(current_ma: float) -> str:
    return f"trace_{current_ma:.2f}mA.csv"


class CSVHandle:
    """An open CSV file, flushed after every write."""

    def __init__(self, path: Path, fh: IO[str]):
        self.path = path
        self._fh = fh

    def write_line(self, line: str) -> None:
        try:
            self._fh.write(line + "\n")
            self._fh.flush()
        except OSError as e:
            raise RecorderError(f"Could not write to {self.path}: {e}") from e

    def write_array(self, data: np.ndarray, fmt: Sequence[str]) -> None:
        """Write a 2D array as delimited rows, one flush for the whole block."""
        try:
            np.savetxt(self._fh, data, fmt=fmt, delimiter=",")
            self._fh.flush()
        except OSError as e:
            raise RecorderError(f"Could not write to {self.path}: {e}") from e

    def close(self) -> None:
        self._fh.close()

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _open_csv(path: Path, mode: str) -> CSVHandle:
    path.parent.mkdir(parents=True, exist_ok=True)
    return CSVHandle(path, open(path, mode, encoding="utf-8", newline=""))


def open_summary(path: PathLike, variant: SweepVariant = SweepVariant.PEAK) -> CSVHandle:
    """Create (truncating) the summary file and write the header for `variant`."""
    path = Path(path)
    try:
        handle = _open_csv(path, "w")
    except OSError as e:
        raise RecorderError(f"Could not create summary file {path}: {e}") from e
    handle.write_line(summary_header(variant))
    logger.debug("Opened summary file {}", path)
    return handle


def append_row(handle: CSVHandle, row: ResultRow) -> None:
    handle.write_line(row.format())


def open_overflow(path: PathLike) -> CSVHandle:
    path = Path(path)
    is_new = not path.exists()
    try:
        handle = _open_csv(path, "a")
    except OSError as e:
        raise RecorderError(f"Could not open trace overflow file {path}: {e}") from e
    if is_new:
        handle.write_line(TRACE_HEADER)
    return handle


def open_trace(
    directory: PathLike, current_ma: float, overflow_path: Optional[PathLike] = None
) -> CSVHandle:
    """Create the trace file for one sweep point.

    Falls back to the shared overflow file (default: `trace_overflow.csv` beside
    `directory`) if the directory or file cannot be created.
    """
    directory = Path(directory)
    path = directory / trace_filename(current_ma)
    try:
        handle = _open_csv(path, "w")
    except OSError as e:
        if overflow_path is None:
            overflow_path = directory.parent / TRACE_OVERFLOW_FILENAME
        logger.warning(
            "Could not create trace file {} ({}), writing to {}", path, e, overflow_path
        )
        return open_overflow(overflow_path)
    handle.write_line(TRACE_HEADER)
    return handle


def write_trace(handle: CSVHandle, trace: TraceMeasurement) -> None:
    handle.write_array(trace.columns(), TRACE_FORMAT)


class SweepRecorder:
    """Writes every recorded `SweepPoint` to the output directory.

    Parameters
    ----------
    output_dir : str or PathLike
        Directory receiving the summary file (created if missing)
    variant : SweepVariant
        Selects the summary columns and whether traces are written
    analyzer : AnalyzerSetup, optional
        Trace subdirectory name
    """

    def __init__(
        self,
        output_dir: PathLike,
        variant: SweepVariant,
        analyzer: Optional[AnalyzerSetup] = None,
        summary_filename: str = SUMMARY_FILENAME,
    ):
        self.output_dir = Path(output_dir)
        self.variant = variant
        self.analyzer = analyzer or AnalyzerSetup()
        self.summary_path = self.output_dir / summary_filename
        self.trace_dir = self.output_dir / self.analyzer.trace_dir_name
        self.overflow_path = self.output_dir / TRACE_OVERFLOW_FILENAME
        self._summary: Optional[CSVHandle] = None
        self.rows_written = 0

    def open(self) -> None:
        self._summary = open_summary(self.summary_path, self.variant)

    def record(self, point: SweepPoint) -> None:
        if self._summary is None:
            self.open()
        append_row(self._summary, point.to_row())
        self.rows_written += 1
        if self.variant is SweepVariant.TRACE and point.trace is not None:
            with open_trace(
                self.trace_dir, point.current_ma, self.overflow_path
            ) as handle:
                write_trace(handle, point.trace)

    def close(self) -> None:
        if self._summary is not None and not self._summary.closed:
            self._summary.close()
            logger.info("Results saved to {}", self.summary_path)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()
