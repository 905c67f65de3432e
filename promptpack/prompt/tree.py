"""ASCII tree of the cells in a workspace, with size and line counts."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..cells import Cell

MAX_TREE_LINES = 4000
TRUNCATION_MARKER = "... tree truncated ..."


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.0f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


@dataclass
class _Node:
    name: str
    cell: Cell | None = None
    children: dict[str, "_Node"] = field(default_factory=dict)

    @property
    def is_dir(self) -> bool:
        return self.cell is None

    def sorted_children(self) -> list["_Node"]:
        # directories first, then by name
        return sorted(self.children.values(), key=lambda n: (not n.is_dir, n.name))


def _build(cells: Iterable[Cell]) -> _Node:
    root = _Node(name="")
    for cell in cells:
        parts = [p for p in cell.display_name.replace("\\", "/").split("/") if p]
        node = root
        for part in parts:
            node = node.children.setdefault(part, _Node(name=part))
        node.cell = cell
    return root


def render_tree(cells: Iterable[Cell], max_lines: int = MAX_TREE_LINES) -> str:
    """Render cells as a tree keyed on their display names.

    Output stops after ``max_lines`` entries, followed by a truncation marker.
    """
    lines: list[str] = []
    truncated = False

    def walk(node: _Node, prefix: str) -> None:
        nonlocal truncated
        children = node.sorted_children()
        for i, child in enumerate(children):
            if len(lines) >= max_lines:
                truncated = True
                return
            last = i == len(children) - 1
            stats = ""
            if child.cell is not None:
                stats = f" ({format_size(child.cell.size)}, {child.cell.line_count} lines)"
            lines.append(f"{prefix}{'└─ ' if last else '├─ '}{child.name}{stats}")
            walk(child, prefix + ("   " if last else "│  "))

    walk(_build(cells), "")
    if truncated:
        lines.append(TRUNCATION_MARKER)
    return "\n".join(lines)
