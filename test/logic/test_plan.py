"""Tests for the sweep data model."""

import math

import pytest

from ldsweep.meas import AnalyzerSetup, ResultRow, SweepPlan, SweepVariant
from ldsweep.types import ValidationError


@pytest.mark.parametrize(
    "start, stop, step, expected",
    [
        (0.0, 10.0, 5.0, 3),
        (0.0, 10.0, 3.0, 4),
        (0.0, 9.9, 1.0, 10),
        (2.5, 10.0, 2.5, 4),
        (5.0, 5.0, 1.0, 1),
        (0.0, 0.5, 1.0, 1),
        (10.0, 0.0, 1.0, 0),
        (-5.0, 5.0, 2.0, 6),
    ],
)
def test_point_count(start, stop, step, expected):
    plan = SweepPlan(start, stop, step)
    assert plan.point_count == expected
    assert plan.point_count == max(0, math.floor((stop - start) / step) + 1)

    currents = list(plan.currents())
    assert len(currents) == expected
    if currents:
        assert currents[0] == start
        assert currents[-1] == start + (expected - 1) * step
        assert currents[-1] <= stop
        assert stop - currents[-1] < step


def test_currents_are_not_accumulated():
    plan = SweepPlan(0.0, 100.0, 0.1)
    assert plan.current_at(999) == 0.0 + 999 * 0.1


@pytest.mark.parametrize("step", [0.0, -1.0])
def test_non_positive_step_rejected(step):
    with pytest.raises(ValidationError, match="step must be positive"):
        SweepPlan(0.0, 10.0, step)


def test_negative_dwell_rejected():
    with pytest.raises(ValidationError):
        SweepPlan(0.0, 10.0, 1.0, dwell_time=-0.1)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        SweepPlan(0.0, 10.0, 0.0)


def test_plan_is_immutable():
    plan = SweepPlan(0.0, 10.0, 1.0)
    with pytest.raises(AttributeError):
        plan.step = 2.0


def test_variant_from_flags():
    assert SweepVariant.from_flags(False, False) is SweepVariant.SOURCE
    assert SweepVariant.from_flags(True, False) is SweepVariant.PEAK
    assert SweepVariant.from_flags(True, True) is SweepVariant.TRACE
    with pytest.raises(ValidationError):
        SweepVariant.from_flags(False, True)


def test_result_row_formatting():
    assert ResultRow(5.0).format() == "5.00"
    assert ResultRow(12.346, 980.123456, -12.346).format() == "12.35,980.1235,-12.35"
    assert ResultRow(0.0, 0.0, -100.0).format() == "0.00,0.0000,-100.00"


def test_analyzer_setup_window():
    setup = AnalyzerSetup()
    assert setup.window_command() == "CENTERWL 980NM;SPANWL 20NM;"
    assert setup.start_nm == 970.0
    assert setup.stop_nm == 990.0

    setup = AnalyzerSetup(center_nm=1550.5, span_nm=5)
    assert setup.window_command() == "CENTERWL 1550.5NM;SPANWL 5NM;"
