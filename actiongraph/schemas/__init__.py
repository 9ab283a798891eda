"""actiongraph Schemas Module - Run metadata and reports."""

from .signal import SignalRecord, RunStatus
from .report import SignalReport, NodeReport, EntryReport, EntryKind

__all__ = [
    "SignalRecord",
    "RunStatus",
    "SignalReport",
    "NodeReport",
    "EntryReport",
    "EntryKind",
]
