"""Bounded per-cell version history with snapshot baselines.

History lives for the lifetime of a :class:`HistoryManager`; nothing is
persisted. Diffs always compare the last two entries of a cell, whether or not
a snapshot has been taken.
"""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..cells import Cell
from .diff import DiffLine, compute_diff, count_changes

logger = logging.getLogger(__name__)

MAX_HISTORY_ENTRIES = 10


@dataclass(frozen=True)
class HistoryEntry:
    content: str
    output: str | None
    timestamp: float


@dataclass(frozen=True)
class CellDiff:
    """Change between the two most recent history entries of a cell."""

    path: str
    display_name: str
    previous: HistoryEntry
    current: HistoryEntry
    diff: tuple[DiffLine, ...]

    @property
    def added(self) -> int:
        return count_changes(list(self.diff))[0]

    @property
    def removed(self) -> int:
        return count_changes(list(self.diff))[1]


@dataclass(frozen=True)
class SnapshotStatus:
    cell_count: int
    timestamp: float


class HistoryManager:
    """Owns the version history of every cell path.

    Every read or write of the history is a short critical section under one
    lock; diffs are computed outside it, so work on one path never waits on a
    diff of another.
    """

    def __init__(
        self,
        max_entries: int = MAX_HISTORY_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 2:
            raise ValueError("max_entries must be at least 2")
        self.max_entries = max_entries
        self._clock = clock
        self._histories: dict[str, deque[HistoryEntry]] = {}
        self._display_names: dict[str, str] = {}
        self._lock = threading.Lock()
        self._snapshot: SnapshotStatus | None = None

    def _append(self, cell: Cell, force: bool) -> bool:
        with self._lock:
            history = self._histories.setdefault(
                cell.path, deque(maxlen=self.max_entries)
            )
            self._display_names[cell.path] = cell.display_name
            if not force and history and history[-1].content == cell.content:
                return False
            history.append(HistoryEntry(cell.content, cell.output, self._clock()))
            version = len(history)
        logger.debug(f"Recorded version {version} of {cell.display_name}")
        return True

    def record(self, cells: Iterable[Cell]) -> int:
        """Append the current content of each cell whose content changed.

        Unchanged cells are left alone, so recording the same scan twice is a
        no-op. Returns the number of entries appended.
        """
        return sum(1 for cell in cells if self._append(cell, force=False))

    def take_snapshot(self, cells: Iterable[Cell]) -> int:
        """Record every cell, even if unchanged, and mark a baseline.

        Returns the number of cells recorded.
        """
        count = sum(1 for cell in cells if self._append(cell, force=True))
        with self._lock:
            self._snapshot = SnapshotStatus(cell_count=count, timestamp=self._clock())
        logger.info(f"Snapshot taken of {count} cells")
        return count

    def snapshot_status(self) -> SnapshotStatus | None:
        """The active baseline, or None if no snapshot was taken since the last clear."""
        with self._lock:
            return self._snapshot

    def history(self, path: str) -> list[HistoryEntry]:
        with self._lock:
            return list(self._histories.get(path, ()))

    def get_diff(self, path: str) -> CellDiff | None:
        """Diff of the second-to-last against the last entry of ``path``.

        Returns None when fewer than two entries exist.
        """
        with self._lock:
            history = self._histories.get(path)
            if not history or len(history) < 2:
                return None
            previous, current = history[-2], history[-1]
            display_name = self._display_names.get(path, path)
        return CellDiff(
            path=path,
            display_name=display_name,
            previous=previous,
            current=current,
            diff=tuple(compute_diff(previous.content, current.content)),
        )

    def get_all_diffs(self) -> list[CellDiff]:
        """Diffs of every path whose last two entries differ, in first-seen order."""
        with self._lock:
            paths = list(self._histories)
        diffs = []
        for path in paths:
            cell_diff = self.get_diff(path)
            if cell_diff is not None and (cell_diff.added or cell_diff.removed):
                diffs.append(cell_diff)
        return diffs

    def clear_history(self, path: str | None = None) -> None:
        """Forget one path's history, or everything (including the baseline)."""
        with self._lock:
            if path is not None:
                self._histories.pop(path, None)
                self._display_names.pop(path, None)
            else:
                self._histories.clear()
                self._display_names.clear()
                self._snapshot = None
        logger.info(f"Cleared history of {path}" if path else "Cleared all history")
