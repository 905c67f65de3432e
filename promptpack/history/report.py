"""Render cell diffs as a "changes made" prompt."""

from collections.abc import Sequence
from typing import Literal

from ..cells import path_extension
from ..compression.fallback import language_for
from .diff import DiffType
from .manager import CellDiff

DiffStyle = Literal["before-after", "unified"]

_UNIFIED_PREFIX = {
    DiffType.ADDED: "+ ",
    DiffType.REMOVED: "- ",
    DiffType.UNCHANGED: "  ",
}


def format_diff_prompt(diffs: Sequence[CellDiff], style: DiffStyle = "before-after") -> str:
    """Describe the given cell changes, either as before/after blocks or as a
    unified-style listing. Returns an empty string when there is nothing to report.
    """
    if not diffs:
        return ""

    out = ["### CHANGES MADE ###\n\n"]
    out.append(f"The following {len(diffs)} cell(s) have been modified:\n\n")

    for cell_diff in diffs:
        out.append("---\n\n")
        out.append(f"#### {cell_diff.display_name} ####\n\n")

        if style == "unified":
            out.append("```diff\n")
            for line in cell_diff.diff:
                out.append(f"{_UNIFIED_PREFIX[line.type]}{line.text}\n")
            out.append("```\n\n")
        else:
            language = language_for(path_extension(cell_diff.path))
            out.append("**Previous Code:**\n")
            out.append(f"```{language}\n{cell_diff.previous.content}\n```\n\n")
            out.append("**Updated Code:**\n")
            out.append(f"```{language}\n{cell_diff.current.content}\n```\n\n")

        out.append(
            f"*Changes: +{cell_diff.added} lines, -{cell_diff.removed} lines*\n\n"
        )

    return "".join(out)
