"""Tests for station configuration handling."""

from configparser import ConfigParser

import pytest

from ldsweep.meas import AnalyzerSetup, SweepTiming
from ldsweep.system import (
    StationConfig,
    create_default_config_file,
    load_station_config,
    validate_station_config,
)
from ldsweep.types import ValidationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".ldsweep" / "station.ini"
    path.parent.mkdir()
    config = ConfigParser()
    config["station"] = {
        "source_address": "USB::1::2::3::INSTR",
        "analyzer_address": "GPIB0::7::INSTR",
        "current_limit_ma": "80",
        "settle_time": "0.25",
        "analyzer_center_nm": "1310",
    }
    with path.open("w") as f:
        config.write(f)
    return path


def test_missing_file_gives_defaults(tmp_path):
    assert load_station_config(tmp_path / "nope.ini") == StationConfig()


def test_load(config_file):
    station = load_station_config(config_file)
    assert station.source_address == "USB::1::2::3::INSTR"
    assert station.analyzer_address == "GPIB0::7::INSTR"
    assert station.current_limit_ma == 80.0
    # unspecified keys keep their defaults
    assert station.analyzer_span_nm == 20.0
    assert station.timing() == SweepTiming(settle_time=0.25)
    assert station.analyzer_setup() == AnalyzerSetup(center_nm=1310.0, span_nm=20.0)


def test_default_file_round_trip(tmp_path):
    path = create_default_config_file(tmp_path / "station.ini")
    assert load_station_config(path) == StationConfig()
    with pytest.raises(FileExistsError):
        create_default_config_file(path)
    create_default_config_file(path, overwrite=True)


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("current_limit_ma", "lots", "Invalid number"),
        ("current_limit_ma", "0", "Invalid value"),
        ("settle_time", "-1", "Invalid value"),
        ("colour", "blue", "Unknown keys"),
    ],
)
def test_validation(key, value, message):
    config = ConfigParser()
    config["station"] = {key: value}
    is_valid, error_msg = validate_station_config(config)
    assert not is_valid
    assert message in error_msg


def test_validation_missing_section():
    is_valid, error_msg = validate_station_config(ConfigParser())
    assert not is_valid
    assert "Missing [station]" in error_msg


def test_zero_settle_time_allowed():
    config = ConfigParser()
    config["station"] = {"settle_time": "0"}
    assert validate_station_config(config) == (True, "")


def test_invalid_file_raises(config_file):
    config_file.write_text("[station]\nsettle_time = soon\n")
    with pytest.raises(ValidationError, match="settle_time"):
        load_station_config(config_file)
