"""Cell version history and line diffs."""

from .diff import DiffLine, DiffType, compute_diff
from .manager import CellDiff, HistoryEntry, HistoryManager, SnapshotStatus
from .report import format_diff_prompt

__all__ = [
    "CellDiff",
    "DiffLine",
    "DiffType",
    "HistoryEntry",
    "HistoryManager",
    "SnapshotStatus",
    "compute_diff",
    "format_diff_prompt",
]
