"""Base compressor interface and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .variants import CompressionContext


def count_non_blank(text: str) -> int:
    return sum(1 for line in text.split("\n") if line.strip())


@dataclass
class CompressionStats:
    """Line statistics for one compressed cell, over non-blank lines."""

    original_lines: int
    compressed_lines: int

    @property
    def ratio(self) -> float:
        """Fraction of lines removed, clamped to >= 0."""
        if self.original_lines <= 0:
            return 0.0
        raw = (self.original_lines - self.compressed_lines) / self.original_lines
        return max(0.0, raw)

    @classmethod
    def measure(cls, original: str, compressed: str) -> "CompressionStats":
        return cls(
            original_lines=count_non_blank(original),
            compressed_lines=count_non_blank(compressed),
        )

    def describe(self, language: str) -> str:
        """Render as ``[python: 40->12 lines, 70% reduced]``."""
        diff = self.original_lines - self.compressed_lines
        percent = (
            round(abs(diff) / self.original_lines * 100) if self.original_lines else 0
        )
        verb = "reduced" if diff >= 0 else "expanded"
        return (
            f"[{language}: {self.original_lines}->{self.compressed_lines} lines, "
            f"{percent}% {verb}]"
        )


@dataclass
class CompressionResult:
    """Result of compressing a single cell."""

    compressed: str
    stats: CompressionStats
    verbatim: bool = False  # Content was kept as-is (small cell)


class CellCompressor(ABC):
    """Abstract base class for cell compressors."""

    @abstractmethod
    def compress(
        self,
        content: str,
        context: "CompressionContext | None" = None,
    ) -> CompressionResult:
        """
        Compress one sanitized cell.

        Args:
            content: Sanitized cell text
            context: Per-run facts about the cell (bucket, duplicate/variant links)

        Returns:
            CompressionResult with compressed text and line statistics
        """
        pass
