"""
Command-line interface for ldsweep.

Built with Click.

Examples
--------
Simulated peak sweep from 0 to 50 mA in 1 mA steps:
```bash
$ ldsweep sweep --start 0 --stop 50 --step 1 --mock
```

Full-trace sweep on real hardware:
```bash
$ ldsweep sweep --start 0 --stop 100 --step 0.5 --dwell 50 -v trace -o data/run1
```

CLI Tree
--------

```
$ ldsweep --tree
cli
└── config
    └── init
    └── show
└── pm
    └── read
    └── zero
└── sweep
└── visa
```
"""

from .base import cli
from .pm import pm
from .station import config

cli.add_command(pm)
cli.add_command(config)

__all__ = ["cli"]
