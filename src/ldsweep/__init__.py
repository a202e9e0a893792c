# -*- coding: utf-8 -*-
"""# ldsweep

`Laser Diode current SWEEP`

A (python) library for characterising optoelectronic devices: a current source is
stepped through a programmed sweep while an optical spectrum analyzer captures the
peak (and optionally the full trace) at every point. Results go to CSV files.

Subpackages:

- `ldsweep.device`: transports and instrument drivers (CLD1015, HP 70952B, MPM-210H).
- `ldsweep.meas`: the sweep engine, response parsing and result recording.
- `ldsweep.system`: station configuration (instrument addresses, delays).
- `ldsweep.util`: logging, defaults, VISA discovery, metadata saving.
- `ldsweep.cli`: the `ldsweep` command line tool.

## Example

```python
from ldsweep.device import VisaTransport
from ldsweep.meas import SweepPlan, run_sweep

source = VisaTransport.open("USB::4883::32847::M01053290::0::INSTR")
osa = VisaTransport.open("GPIB0::23::INSTR")
outcome = run_sweep(source, osa, SweepPlan(0.0, 100.0, 0.1, dwell_time=0.05))
```
"""

from ._version import __version__
