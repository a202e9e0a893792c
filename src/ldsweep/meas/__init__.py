# -*- coding: utf-8 -*-
"""
Current sweep measurements.

- `SweepPlan`, `SweepTiming`, `AnalyzerSetup`: what to run
- `run_sweep` / `CurrentSweep`: the sweep engine
- `SweepRecorder` and the `open_summary` / `append_row` / `open_trace` helpers:
  result files
- `SweepOutcome`: how the sweep ended

Examples
--------
```python
from ldsweep.meas import SweepPlan, run_sweep
outcome = run_sweep(source, osa, SweepPlan(0, 100, 0.5, dwell_time=0.05),
                    capture_trace=True, output_dir="data/run1")
print(outcome.source_error, outcome.analyzer_error)
```
"""

from .plan import (
    AnalyzerSetup,
    ResultRow,
    SweepOutcome,
    SweepPlan,
    SweepPoint,
    SweepTiming,
    SweepVariant,
)
from .recorder import (
    SweepRecorder,
    append_row,
    open_summary,
    open_trace,
    summary_header,
    trace_filename,
    write_trace,
)
from .sweep import CurrentSweep, SweepState, run_sweep

__all__ = [
    "AnalyzerSetup",
    "CurrentSweep",
    "ResultRow",
    "SweepOutcome",
    "SweepPlan",
    "SweepPoint",
    "SweepRecorder",
    "SweepState",
    "SweepTiming",
    "SweepVariant",
    "append_row",
    "open_summary",
    "open_trace",
    "run_sweep",
    "summary_header",
    "trace_filename",
    "write_trace",
]
