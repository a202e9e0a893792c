"""Tests for the summary and trace file writers."""

import io
from pathlib import Path

import numpy as np
import pytest

from ldsweep.meas import (
    ResultRow,
    SweepPoint,
    SweepRecorder,
    SweepVariant,
    append_row,
    open_summary,
    open_trace,
    trace_filename,
    write_trace,
)
from ldsweep.meas.recorder import CSVHandle
from ldsweep.types import RecorderError
from ldsweep.util.parse import (
    ScalarMeasurement,
    TraceMeasurement,
    WavelengthAxis,
    map_trace,
)


@pytest.mark.parametrize(
    "variant, header",
    [
        (SweepVariant.SOURCE, "Current (mA)"),
        (SweepVariant.PEAK, "Current (mA),Peak Wavelength (nm),Peak Power (dBm)"),
        (SweepVariant.TRACE, "Current (mA),Peak Wavelength (nm),Peak Power (dBm)"),
    ],
)
def test_summary_header(tmp_path, variant, header):
    path = tmp_path / "summary.csv"
    with open_summary(path, variant):
        pass
    assert path.read_text() == header + "\n"


def test_summary_truncates_existing_file(tmp_path):
    path = tmp_path / "summary.csv"
    path.write_text("old contents\n" * 10)
    with open_summary(path, SweepVariant.SOURCE):
        pass
    assert path.read_text() == "Current (mA)\n"


def test_rows_are_durable_before_close(tmp_path):
    path = tmp_path / "summary.csv"
    handle = open_summary(path, SweepVariant.PEAK)
    append_row(handle, ResultRow(1.0, 975.5, -3.0))
    # readable from another file object while still open
    assert path.read_text().splitlines()[-1] == "1.00,975.5000,-3.00"
    append_row(handle, ResultRow(2.0, 975.25, -2.5))
    assert path.read_text().splitlines()[-1] == "2.00,975.2500,-2.50"
    handle.close()


def test_summary_creation_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(RecorderError):
        open_summary(blocker / "summary.csv")


def test_trace_filename():
    assert trace_filename(12.5) == "trace_12.50mA.csv"
    assert trace_filename(0.004) == "trace_0.00mA.csv"


def test_open_trace_creates_directory(tmp_path):
    directory = tmp_path / "traces"
    trace = TraceMeasurement(np.array([970.0, 990.0]), np.array([-1.234, -5.0]))
    with open_trace(directory, 7.25) as handle:
        write_trace(handle, trace)
    assert (directory / "trace_7.25mA.csv").read_text().splitlines() == [
        "Wavelength (nm),Power (dBm)",
        "970.0000,-1.23",
        "990.0000,-5.00",
    ]


class CountingFile(io.StringIO):
    def __init__(self):
        super().__init__()
        self.flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


def test_trace_body_is_written_as_one_block():
    fh = CountingFile()
    handle = CSVHandle(Path("trace.csv"), fh)
    axis = WavelengthAxis(970.0, 990.0, 800)
    write_trace(handle, map_trace([-60.0] * 800, axis))
    lines = fh.getvalue().splitlines()
    assert len(lines) == 800
    assert lines[0] == "970.0000,-60.00"
    assert lines[-1] == "990.0000,-60.00"
    assert fh.flushes == 1


def test_empty_trace_writes_no_rows():
    fh = CountingFile()
    write_trace(CSVHandle(Path("trace.csv"), fh), map_trace([], WavelengthAxis(970, 990)))
    assert fh.getvalue() == ""

def test_open_trace_falls_back_to_one_overflow_file(tmp_path, log_records):
    # a file where the trace directory should be
    (tmp_path / "traces").write_text("")
    trace = TraceMeasurement(np.array([970.0]), np.array([-1.0]))

    for current in (1.0, 2.0):
        with open_trace(tmp_path / "traces", current) as handle:
            assert handle.path == tmp_path / "trace_overflow.csv"
            write_trace(handle, trace)

    assert (tmp_path / "trace_overflow.csv").read_text().splitlines() == [
        "Wavelength (nm),Power (dBm)",
        "970.0000,-1.00",
        "970.0000,-1.00",
    ]
    assert sum(level == "WARNING" for level, _ in log_records) == 2


def test_overflow_failure_is_reported(tmp_path):
    (tmp_path / "traces").write_text("")
    with pytest.raises(RecorderError):
        open_trace(tmp_path / "traces", 1.0, overflow_path=tmp_path / "traces" / "x")


class TestSweepRecorder:
    def point(self, index, current, trace=None):
        return SweepPoint(
            index=index,
            current_ma=current,
            peak_wavelength=ScalarMeasurement(980.0, "nm"),
            peak_power=ScalarMeasurement(-10.0, "dBm"),
            trace=trace,
        )

    def test_peak_variant(self, tmp_path):
        with SweepRecorder(tmp_path, SweepVariant.PEAK) as recorder:
            recorder.record(self.point(0, 0.0))
            recorder.record(self.point(1, 0.5))
        assert recorder.rows_written == 2
        assert (tmp_path / "current_sweep_results.csv").read_text().splitlines() == [
            "Current (mA),Peak Wavelength (nm),Peak Power (dBm)",
            "0.00,980.0000,-10.00",
            "0.50,980.0000,-10.00",
        ]
        assert not (tmp_path / "traces").exists()

    def test_trace_variant(self, tmp_path):
        trace = TraceMeasurement(np.array([970.0, 980.0]), np.array([-50.0, -10.0]))
        with SweepRecorder(tmp_path / "run", SweepVariant.TRACE) as recorder:
            recorder.record(self.point(0, 3.0, trace))
        trace_file = tmp_path / "run" / "traces" / "trace_3.00mA.csv"
        assert trace_file.read_text().splitlines()[1:] == [
            "970.0000,-50.00",
            "980.0000,-10.00",
        ]
