# -*- coding: utf-8 -*-
"""
Transports and instrument drivers for ldsweep.

- `VisaTransport`, `SocketTransport`: byte channels (see `ldsweep.device.transport`)
- `CLD1015`: laser diode controller used as the current source
- `HP70952B`: optical spectrum analyzer
- `MPM210H`: optical power meter
- `MockTransport` and simulated instruments in `ldsweep.device.mock`

Examples
--------
```python
from ldsweep.device import CLD1015, VisaTransport
src = CLD1015(VisaTransport.open("USB::4883::32847::M01053290::0::INSTR"))
src.initialise(current_limit_ma=100)
src.set_output(True)
```
"""

from .cld1015 import CLD1015
from .device import Device
from .hp70952b import HP70952B
from .mock import MockCLD1015Transport, MockOSATransport, MockTransport
from .mpm210h import MEASUREMENT_MODES, MPM210H, PowerUnit
from .transport import SocketTransport, Transport, VisaTransport, parse_socket_address

__all__ = [
    "CLD1015",
    "Device",
    "HP70952B",
    "MEASUREMENT_MODES",
    "MPM210H",
    "MockCLD1015Transport",
    "MockOSATransport",
    "MockTransport",
    "PowerUnit",
    "SocketTransport",
    "Transport",
    "VisaTransport",
    "parse_socket_address",
]
