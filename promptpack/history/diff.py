"""Line-level diffs using Myers' O(ND) shortest edit script."""

from dataclasses import dataclass
from enum import Enum


class DiffType(str, Enum):
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    ADDED = "added"


@dataclass(frozen=True)
class DiffLine:
    type: DiffType
    text: str
    old_line_number: int | None = None
    new_line_number: int | None = None


def _shortest_edit_trace(a: list[str], b: list[str]) -> list[dict[int, int]]:
    """Furthest-reaching x per diagonal k, recorded before each edit distance d."""
    n, m = len(a), len(b)
    v = {1: 0}
    trace = []
    for d in range(n + m + 1):
        trace.append(dict(v))
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[k - 1] < v[k + 1]):
                x = v[k + 1]  # down: insertion
            else:
                x = v[k - 1] + 1  # right: deletion
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x, y = x + 1, y + 1
            v[k] = x
            if x >= n and y >= m:
                return trace
    return trace


def _edit_script(a: list[str], b: list[str]) -> list[tuple[DiffType, int, int]]:
    """Edits in forward order as ``(type, old_index, new_index)``; -1 when absent."""
    trace = _shortest_edit_trace(a, b)
    x, y = len(a), len(b)
    edits: list[tuple[DiffType, int, int]] = []

    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[k - 1] < v[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            x, y = x - 1, y - 1
            edits.append((DiffType.UNCHANGED, x, y))

        if d > 0:
            if x == prev_x:
                edits.append((DiffType.ADDED, -1, prev_y))
            else:
                edits.append((DiffType.REMOVED, prev_x, -1))
        x, y = prev_x, prev_y

    edits.reverse()
    return edits


def compute_diff(old: str, new: str) -> list[DiffLine]:
    """Diff two texts line by line.

    Lines are split on ``\\n``. Old and new line numbers are 1-based and count
    independently: removed lines only carry an old number, added lines only a
    new one.
    """
    a, b = old.split("\n"), new.split("\n")
    lines = []
    old_number = new_number = 1
    for kind, old_index, new_index in _edit_script(a, b):
        if kind is DiffType.UNCHANGED:
            lines.append(DiffLine(kind, a[old_index], old_number, new_number))
            old_number += 1
            new_number += 1
        elif kind is DiffType.REMOVED:
            lines.append(DiffLine(kind, a[old_index], old_line_number=old_number))
            old_number += 1
        else:
            lines.append(DiffLine(kind, b[new_index], new_line_number=new_number))
            new_number += 1
    return lines


def count_changes(diff: list[DiffLine]) -> tuple[int, int]:
    """Number of added and removed lines."""
    added = sum(1 for line in diff if line.type is DiffType.ADDED)
    removed = sum(1 for line in diff if line.type is DiffType.REMOVED)
    return added, removed
