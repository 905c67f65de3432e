"""Loading files and Jupyter notebooks from disk into cells."""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from .cells import Cell, CodeCell, MarkdownCell
from .errors import PromptPackError

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md", ".markdown"}
SKIPPED_DIRS = {".git", "__pycache__", "node_modules", ".venv", "venv", ".ipynb_checkpoints"}
BINARY_SNIFF_BYTES = 1024


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def _is_binary(path: Path) -> bool:
    with open(path, "rb") as f:
        return b"\0" in f.read(BINARY_SNIFF_BYTES)


def _join_source(source: str | list[str]) -> str:
    return source if isinstance(source, str) else "".join(source)


def notebook_output_text(outputs: list[dict]) -> str | None:
    """Text of a code cell's outputs: streams, plain-text results and errors."""
    parts = []
    for output in outputs:
        output_type = output.get("output_type")
        if output_type == "stream":
            parts.append(_join_source(output.get("text", "")))
        elif output_type in ("execute_result", "display_data"):
            text = output.get("data", {}).get("text/plain")
            if text:
                parts.append(_join_source(text))
        elif output_type == "error":
            parts.append(f"{output.get('ename', 'Error')}: {output.get('evalue', '')}")
    text = "".join(p if p.endswith("\n") else p + "\n" for p in parts).rstrip("\n")
    return text or None


def load_notebook(path: Path, root: Path) -> list[Cell]:
    """One cell per notebook code or markdown cell, named ``<notebook>/Cell <N>``.

    Raw cells are skipped but still counted, so ``N`` matches the notebook order.
    """
    try:
        notebook = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise PromptPackError(f"Failed to read notebook {path}: {e}") from e

    name = _display_path(path, root)
    cells: list[Cell] = []
    for i, raw in enumerate(notebook.get("cells", []), start=1):
        cell_type = raw.get("cell_type")
        content = _join_source(raw.get("source", ""))
        cell_path = f"{path.as_posix()}/cell-{i}"
        display_name = f"{name}/Cell {i}"
        if cell_type == "code":
            output = notebook_output_text(raw.get("outputs", []))
            cells.append(CodeCell(cell_path, display_name, content, output))
        elif cell_type == "markdown":
            cells.append(MarkdownCell(cell_path, display_name, content))
    logger.debug(f"Loaded {len(cells)} cells from {name}")
    return cells


def load_file(path: Path, root: Path) -> list[Cell]:
    if path.suffix == ".ipynb":
        return load_notebook(path, root)
    if _is_binary(path):
        logger.debug(f"Skipping binary file {path}")
        return []
    content = path.read_text(encoding="utf-8", errors="replace")
    display_name = _display_path(path, root)
    if path.suffix.lower() in MARKDOWN_EXTENSIONS:
        return [MarkdownCell(path.as_posix(), display_name, content)]
    return [CodeCell(path.as_posix(), display_name, content)]


def iter_files(path: Path) -> Iterator[Path]:
    """Files under ``path`` (or ``path`` itself), sorted, skipping hidden and vendored dirs."""
    if path.is_file():
        yield path
        return
    for child in sorted(path.iterdir()):
        if child.is_dir():
            if child.name in SKIPPED_DIRS or child.name.startswith("."):
                continue
            yield from iter_files(child)
        elif child.is_file():
            yield child


def load_cells(paths: Iterable[Path], root: Path | None = None) -> list[Cell]:
    """Load every file and notebook under ``paths``; display names are relative to ``root``."""
    root = root or Path.cwd()
    cells: list[Cell] = []
    for path in paths:
        if not path.exists():
            raise PromptPackError(f"No such file or directory: {path}")
        for file in iter_files(path):
            cells.extend(load_file(file, root))
    return cells
