"""
Command-line interface for promptpack.

Usage:
    promptpack pack PATHS...          # Pack files/notebooks into one prompt document
    promptpack skeleton FILE          # Show the skeleton of every code cell in FILE
    promptpack diff OLD NEW           # Describe the changes between two versions of a file
    promptpack -v pack PATHS...       # Any command, with debug logs
"""

import logging
from collections.abc import Callable
from functools import wraps
from pathlib import Path

import click

from ..cells import CellKind, CodeCell, Intent
from ..config import PackConfig, load_config
from ..errors import PromptPackError
from ..history import HistoryManager, format_diff_prompt
from ..prompt import PackRequest, PromptAssembler
from ..sources import load_cells
from ..util import console, path_with_tilde
from ..util.tokens import len_tokens

logger = logging.getLogger(__name__)


def _report_errors(f: Callable) -> Callable:
    """Turn library and filesystem errors into click errors (no traceback)."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (PromptPackError, OSError) as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def _emit(document: str, output: Path | None) -> None:
    if output is None:
        click.echo(document, nl=False)
        return
    output.write_text(document)
    console.print(f"Wrote {path_with_tilde(output.resolve())}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs.")
def main(verbose: bool):
    """Pack source files and notebooks into compact prompts."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@main.command("pack")
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path)
)
@click.option(
    "--full",
    "full_patterns",
    multiple=True,
    help="Glob of cells to include in full instead of skeletonized (repeatable).",
)
@click.option("--goal", default=None, help="Goal text appended to the prompt.")
@click.option("--preamble", default=None, help="Preamble text prepended to the prompt.")
@click.option(
    "--auto-preamble", is_flag=True, default=False, help="Generate a preamble from the cells."
)
@click.option("--no-tree", is_flag=True, default=False, help="Omit the file tree.")
@click.option(
    "--with-output", is_flag=True, default=False, help="Include captured cell output."
)
@click.option(
    "--workers", type=click.IntRange(min=1), default=None, help="Skeletonize in parallel."
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the prompt to a file instead of stdout.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of the default lookup.",
)
@_report_errors
def pack(
    paths: tuple[Path, ...],
    full_patterns: tuple[str, ...],
    goal: str | None,
    preamble: str | None,
    auto_preamble: bool,
    no_tree: bool,
    with_output: bool,
    workers: int | None,
    output: Path | None,
    config_path: Path | None,
):
    """Pack PATHS into a prompt document.

    Code cells are skeletonized unless they match a --full glob; markdown cells
    are passed through as-is.
    """
    config = load_config(Path.cwd(), config_path)
    _apply_overrides(
        config,
        full_patterns=full_patterns,
        goal=goal,
        preamble=preamble,
        auto_preamble=auto_preamble,
        no_tree=no_tree,
        with_output=with_output,
        workers=workers,
    )

    cells = load_cells(paths)
    selection = {
        cell.path: Intent.FULL
        if config.is_full(cell.display_name) or config.is_full(cell.path)
        else Intent.COMPRESSED
        for cell in cells
    }
    request = PackRequest(
        cells=cells,
        selection=selection,
        include_output={c.path for c in cells} if config.include_output else set(),
        preamble=config.preamble,
        goal=config.goal,
        include_tree=config.include_tree,
        auto_preamble=config.auto_preamble,
    )
    document = PromptAssembler(config.compression).assemble(request)
    _emit(document, output)

    full = sum(1 for intent in selection.values() if intent is Intent.FULL)
    console.print(
        f"[green]✓[/green] Packed {len(cells)} cells "
        f"({full} full, {len(cells) - full} compressed), "
        f"{len_tokens(document)} tokens"
    )


def _apply_overrides(
    config: PackConfig,
    full_patterns: tuple[str, ...],
    goal: str | None,
    preamble: str | None,
    auto_preamble: bool,
    no_tree: bool,
    with_output: bool,
    workers: int | None,
) -> None:
    if full_patterns:
        config.full = list(full_patterns)
    if goal is not None:
        config.goal = goal
    if preamble is not None:
        config.preamble = preamble
    if auto_preamble:
        config.auto_preamble = True
    if no_tree:
        config.include_tree = False
    if with_output:
        config.include_output = True
    if workers is not None:
        config.compression.workers = workers


@main.command("skeleton")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of the default lookup.",
)
@_report_errors
def skeleton(file: Path, config_path: Path | None):
    """Print the skeleton of every code cell in FILE."""
    config = load_config(Path.cwd(), config_path)
    cells = [c for c in load_cells([file]) if c.kind is CellKind.CODE]
    if not cells:
        raise click.ClickException(f"No code cells in {file}")

    request = PackRequest(
        cells=cells,
        selection={c.path: Intent.COMPRESSED for c in cells},
        include_tree=False,
    )
    click.echo(PromptAssembler(config.compression).assemble(request), nl=False)


@main.command("diff")
@click.argument("old", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--unified", is_flag=True, default=False, help="Line-prefixed diff instead of before/after."
)
@_report_errors
def diff(old: Path, new: Path, unified: bool):
    """Describe how NEW differs from OLD as a "changes made" prompt."""
    history = HistoryManager()
    name = new.as_posix()
    for version in (old, new):
        history.record([CodeCell(name, name, version.read_text(encoding="utf-8"))])

    diffs = history.get_all_diffs()
    if not diffs:
        console.print("No changes.")
        return
    click.echo(
        format_diff_prompt(diffs, style="unified" if unified else "before-after"),
        nl=False,
    )


if __name__ == "__main__":
    main()
