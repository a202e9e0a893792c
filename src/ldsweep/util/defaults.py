# -*- coding: utf-8 -*-

import pathlib

DEFAULT_LOGLEVEL = "INFO"
TEST_LOGLEVEL = "TRACE"
CONFIG_DIR = pathlib.Path.home() / ".ldsweep"

# source / sweep timing (seconds)
SETTLE_TIME = 0.5  # after each source output state change before the loop
DEFAULT_DWELL_TIME = 0.05

# analyzer
ANALYZER_CENTER_NM = 980.0
ANALYZER_SPAN_NM = 20.0
DEFAULT_TRACE_POINTS = 800  # used when MDS? cannot be read
MAX_TRACE_POINTS = 10000  # larger MDS? replies are treated as unreadable

# sentinel values substituted for unparseable responses
WAVELENGTH_FALLBACK_NM = 0.0
POWER_FALLBACK_DBM = -100.0
METERS_TO_NM = 1.0e9

# output naming
SUMMARY_FILENAME = "current_sweep_results.csv"
TRACE_DIR_NAME = "traces"
TRACE_OVERFLOW_FILENAME = "trace_overflow.csv"
METADATA_FILENAME = "sweep_metadata.json"

# source
DEFAULT_CURRENT_LIMIT_MA = 100.0
DEFAULT_SOURCE_ADDRESS = "USB::4883::32847::M01053290::0::INSTR"
DEFAULT_ANALYZER_ADDRESS = "GPIB0::23::INSTR"
VISA_TIMEOUT_MS = 10000  # a full OSA sweep can take several seconds

# power meter (MPM-210H)
PM_TIMEOUT = 5.0  # seconds, read and write
PM_COMMAND_DELAY = 0.01  # hardware pacing after every transmission
PM_ZERO_TIME = 3.0
DEFAULT_PM_ADDRESS = "192.168.1.161:5000"
