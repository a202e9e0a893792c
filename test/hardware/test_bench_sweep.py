import pytest
from loguru import logger

import ldsweep.util
from ldsweep.device import CLD1015, HP70952B
from ldsweep.meas import SweepPlan, run_sweep
from ldsweep.util import TEST_LOGLEVEL

pytestmark = pytest.mark.hardware


@pytest.fixture()
def test_log():
    ldsweep.util.start_log(log_to_file=True, log_level=TEST_LOGLEVEL)
    yield
    ldsweep.util.shutdown_log()


@pytest.mark.usefixtures("test_log")
def test_source_identity_and_error_queue(source_transport):
    source = CLD1015(source_transport)
    idn = source.initialise(current_limit_ma=20)
    logger.info("Source: {}", idn)
    assert "CLD1015" in idn
    assert source.query_error().startswith("+0")


@pytest.mark.usefixtures("test_log")
def test_low_current_peak_sweep(source_transport, analyzer_transport, tmp_path):
    """A short sweep kept well below threshold."""
    source = CLD1015(source_transport)
    source.initialise(current_limit_ma=20)
    analyzer = HP70952B(analyzer_transport)
    analyzer.initialise()

    plan = SweepPlan(0.0, 2.0, 1.0, dwell_time=0.1)
    outcome = run_sweep(source, analyzer, plan, output_dir=tmp_path)
    assert outcome.completed
    assert outcome.points_recorded == 3
    lines = (tmp_path / "current_sweep_results.csv").read_text().splitlines()
    assert len(lines) == 4
    logger.info("Final source error queue: {}", outcome.source_error)


@pytest.mark.slow
@pytest.mark.usefixtures("test_log")
def test_low_current_trace_sweep(source_transport, analyzer_transport, tmp_path):
    source = CLD1015(source_transport)
    source.initialise(current_limit_ma=20)
    analyzer = HP70952B(analyzer_transport)
    analyzer.initialise()

    plan = SweepPlan(0.0, 1.0, 1.0, dwell_time=0.1)
    outcome = run_sweep(source, analyzer, plan, capture_trace=True, output_dir=tmp_path)
    assert outcome.completed
    assert len(list((tmp_path / "traces").iterdir())) == 2
