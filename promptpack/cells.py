"""Cell records consumed by the compression engine and the history manager.

A cell is one unit of source text: a file, or a single notebook cell. Cells are
immutable; a new scan produces new values rather than mutating old ones.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


def path_extension(path: str) -> str | None:
    """Lower-cased file extension of a path, without the dot."""
    base = path.replace("\\", "/").rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot <= 0 or dot == len(base) - 1:
        return None
    return base[dot + 1 :].lower()


class CellKind(str, Enum):
    CODE = "code"
    MARKDOWN = "markdown"


class Intent(str, Enum):
    """How a selected cell should be packed."""

    FULL = "full"
    COMPRESSED = "compressed"


@dataclass(frozen=True)
class Cell(ABC):
    """Shared base record for code and markdown cells.

    Identity is ``path``; ``display_name`` is what the prompt shows (e.g. ``Cell 3``
    or ``src/train.py``).
    """

    path: str
    display_name: str
    content: str
    output: str | None = None

    @property
    @abstractmethod
    def kind(self) -> CellKind:
        pass

    @property
    def size(self) -> int:
        """Size of the content in bytes (UTF-8)."""
        return len(self.content.encode("utf-8"))

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n")) if self.content else 0

    @property
    def extension(self) -> str | None:
        return path_extension(self.path)


@dataclass(frozen=True)
class CodeCell(Cell):
    @property
    def kind(self) -> CellKind:
        return CellKind.CODE


@dataclass(frozen=True)
class MarkdownCell(Cell):
    @property
    def kind(self) -> CellKind:
        return CellKind.MARKDOWN


_CELL_INDEX_RE = re.compile(r"Cell\s+(\d+)", re.IGNORECASE)


def parse_cell_index(display_name: str, fallback: int) -> int:
    """Return the notebook index from a ``Cell N`` display name, or ``fallback``."""
    match = _CELL_INDEX_RE.search(display_name)
    if match:
        return int(match.group(1))
    return fallback
