"""Ledger footprint resolution: local recording or remote simulation."""

from .recording import RecordingStorage  # noqa: F401
from .resolver import (  # noqa: F401
    FootprintResolver,
    LocalExecution,
    LocalFootprintResolver,
    SimulationFootprintResolver,
)

__all__ = [
    "RecordingStorage",
    "FootprintResolver",
    "LocalExecution",
    "LocalFootprintResolver",
    "SimulationFootprintResolver",
]
