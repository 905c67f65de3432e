"""Compress source files and notebook cells into compact prompts, and track how they change."""

from .cells import Cell, CellKind, CodeCell, Intent, MarkdownCell
from .compression import CompressionConfig, Skeletonizer
from .errors import ConfigError, EmptySelectionError, PromptPackError
from .history import HistoryManager, compute_diff, format_diff_prompt
from .prompt import PackRequest, PromptAssembler

__all__ = [
    "Cell",
    "CellKind",
    "CodeCell",
    "CompressionConfig",
    "ConfigError",
    "EmptySelectionError",
    "HistoryManager",
    "Intent",
    "MarkdownCell",
    "PackRequest",
    "PromptAssembler",
    "PromptPackError",
    "Skeletonizer",
    "compute_diff",
    "format_diff_prompt",
]
