# -*- coding: utf-8 -*-
"""Saving of run metadata beside the sweep results.

The metadata file (`sweep_metadata.json`) records what was run and how it ended:
plan, timing, analyzer window, timestamps, points recorded, unconfirmed points and
the final instrument error queues.
"""

from __future__ import annotations

import os
import sys
import time
import typing
from pathlib import Path

import numpy as np
import simplejson as json
from loguru import logger

from ldsweep._version import __version__
from ldsweep.types import RecorderError

from .defaults import METADATA_FILENAME

if typing.TYPE_CHECKING:
    from ldsweep.meas import AnalyzerSetup, SweepOutcome, SweepPlan, SweepTiming


def get_command_string() -> str:
    """Get the original command string that was used to run this script."""
    return " ".join(sys.argv)


class NumpyEncoder(json.JSONEncoder):
    """Special json encoder for numpy types"""

    # o = an object to be encoded
    def default(self, o):
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        return json.JSONEncoder.default(self, o)


def timestamp() -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S")


def save_metadata(
    output_dir: typing.Union[str, os.PathLike],
    plan: SweepPlan,
    outcome: SweepOutcome,
    timing: typing.Optional[SweepTiming] = None,
    analyzer_setup: typing.Optional[AnalyzerSetup] = None,
    started: str = "",
    instruments: typing.Optional[dict[str, str]] = None,
) -> Path:
    """Write the metadata json for a sweep (completed or aborted)."""
    path = Path(output_dir) / METADATA_FILENAME
    metadata = {
        "ldsweep_version": __version__,
        "command": get_command_string(),
        "started": started,
        "finished": timestamp(),
        "plan": plan.to_dict(),
        "timing": timing.to_dict() if timing is not None else None,
        "analyzer_setup": (
            analyzer_setup.to_dict() if analyzer_setup is not None else None
        ),
        "instruments": instruments or {},
        "outcome": outcome.to_dict(),
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(metadata, f, cls=NumpyEncoder, indent=4, ignore_nan=True)
    except OSError as e:
        raise RecorderError(f"Could not save metadata to {path}: {e}") from e
    logger.info("Saved sweep metadata to {}", path)
    return path
