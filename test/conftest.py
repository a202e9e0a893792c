import time

import pytest
from loguru import logger


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "hardware: marks test that require physical hardware"
    )


@pytest.fixture
def sleeps(monkeypatch):
    """Replace time.sleep, recording every requested delay."""
    calls = []
    monkeypatch.setattr(time, "sleep", calls.append)
    return calls


@pytest.fixture
def log_records():
    """Collect (level, message) for everything logged during the test."""
    records = []
    handler_id = logger.add(
        lambda msg: records.append((msg.record["level"].name, msg.record["message"])),
        level="TRACE",
    )
    yield records
    try:
        logger.remove(handler_id)
    except ValueError:
        pass  # already removed by a log shutdown in the test
