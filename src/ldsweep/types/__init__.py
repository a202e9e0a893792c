"""Shared types for ldsweep."""

from .errors import (
    InstrumentDataError,
    InstrumentError,
    RecorderError,
    SweepAbortedError,
    TransportError,
    ValidationError,
)

__all__ = [
    "InstrumentDataError",
    "InstrumentError",
    "RecorderError",
    "SweepAbortedError",
    "TransportError",
    "ValidationError",
]
