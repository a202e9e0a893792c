"""Exception taxonomy for instrument control and sweeps.

Only `TransportError` (and its subclasses) and `ValidationError` stop execution.
Malformed numeric responses never raise; they are turned into sentinel values by
`ldsweep.util.parse`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ldsweep.meas.plan import SweepOutcome


class InstrumentError(RuntimeError):
    """Base exception for ldsweep errors."""

    pass


class TransportError(InstrumentError):
    """Connection, write or read failure on an instrument channel. Fatal."""

    pass


class RecorderError(TransportError):
    """An output file could not be created or written."""

    pass


class SweepAbortedError(TransportError):
    """A sweep stopped before completion.

    Attributes
    ----------
    outcome : SweepOutcome
        Partial outcome, `completed` is False.
    """

    def __init__(self, message: str, outcome: Optional[SweepOutcome] = None):
        super().__init__(message)
        self.outcome = outcome


class ValidationError(InstrumentError, ValueError):
    """Invalid caller argument, rejected before anything is transmitted."""

    pass


class InstrumentDataError(InstrumentError):
    """An instrument response did not contain the expected data."""

    pass
