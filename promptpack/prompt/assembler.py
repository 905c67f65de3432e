"""Assembly of the final prompt document.

Document layout::

    PREAMBLE\\n<text>\\n\\n
    TREE\\n<tree>\\n\\n
    FILE <name> FULL|SKELETON|MARKDOWN|ERROR\\n<body>\\nEND_FILE\\n\\n   (per selected cell)
    GOAL\\n<text>\\n
    <fallback warning block, if any cell fell back to the keyword filter>
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from ..cells import Cell, CellKind, Intent, parse_cell_index
from ..compression import (
    CellCompressor,
    CompressionConfig,
    CompressionContext,
    CompressionResult,
    ContextBuilder,
    KeywordLineFilter,
    Skeletonizer,
    sanitize,
)
from ..compression.fallback import comment_prefix_for, is_python_cell, language_for
from ..errors import EmptySelectionError
from .preamble import generate_preamble
from .tree import render_tree

logger = logging.getLogger(__name__)

ContentLoader = Callable[[Cell], str]

ERROR_BODY = "Error reading file."
FALLBACK_WARNING_HEADER = (
    "# ! FALLBACK WARNING: skeletonization failed for the following cells "
    "(keyword filter used):"
)


def _cell_content(cell: Cell) -> str:
    return cell.content


@dataclass
class PackRequest:
    """What to pack: every known cell (for the tree) and the selected subset.

    ``selection`` maps a cell path to how it should be packed; cells not in it
    only appear in the tree.
    """

    cells: Sequence[Cell]
    selection: Mapping[str, Intent]
    include_output: set[str] = field(default_factory=set)
    preamble: str = ""
    goal: str = ""
    include_tree: bool = True
    auto_preamble: bool = False

    @property
    def selected(self) -> list[Cell]:
        return [c for c in self.cells if c.path in self.selection]


@dataclass
class _Job:
    """A loaded, sanitized code cell awaiting rendering."""

    cell: Cell
    intent: Intent
    full_text: str
    sanitized: str
    context: CompressionContext


@dataclass
class _Rendered:
    body: str
    result: CompressionResult | None = None
    fell_back: bool = False


class PromptAssembler:
    """Builds prompt documents from cells.

    A fresh duplicate/variant index is built for every call to :meth:`assemble`;
    the assembler holds no state between runs.
    """

    def __init__(
        self,
        config: CompressionConfig | None = None,
        content_loader: ContentLoader | None = None,
        skeletonizer: CellCompressor | None = None,
    ):
        self.config = config or CompressionConfig()
        self.content_loader = content_loader or _cell_content
        self.skeletonizer = skeletonizer or Skeletonizer(self.config)

    def assemble(self, request: PackRequest) -> str:
        selected = request.selected
        if not selected:
            raise EmptySelectionError("No cells selected")

        sections: list[str] = []

        preamble = self._preamble(request)
        if preamble:
            sections.append(f"PREAMBLE\n{preamble}\n\n")

        if request.include_tree:
            sections.append(f"TREE\n{render_tree(request.cells)}\n\n")

        blocks, fallbacks = self._render_cells(request, selected)
        sections.extend(blocks)

        if request.goal.strip():
            sections.append(f"GOAL\n{request.goal}\n")

        if fallbacks:
            warning = [FALLBACK_WARNING_HEADER, *(f"# ! - {name}" for name in fallbacks)]
            sections.append("\n" + "\n".join(warning) + "\n")

        return "".join(sections)

    def _preamble(self, request: PackRequest) -> str:
        parts = []
        if request.preamble.strip():
            parts.append(request.preamble)
        if request.auto_preamble:
            generated = generate_preamble(request.cells)
            if generated:
                parts.append(generated)
        return "\n\n".join(parts)

    def _render_cells(
        self, request: PackRequest, selected: list[Cell]
    ) -> tuple[list[str], list[str]]:
        # Sequential pre-pass: duplicate/variant links depend on scan order
        builder = ContextBuilder()
        blocks: list[str | _Job] = []
        for position, cell in enumerate(selected, start=1):
            try:
                content = self.content_loader(cell)
            except Exception as e:
                logger.warning(f"Failed to read {cell.display_name}: {e}")
                blocks.append(f"FILE {cell.display_name} ERROR\n{ERROR_BODY}\nEND_FILE\n\n")
                continue

            if cell.kind is CellKind.MARKDOWN:
                blocks.append(f"FILE {cell.display_name} MARKDOWN\n{content}\nEND_FILE\n\n")
                continue

            sanitized = sanitize(content, comment_marker=comment_prefix_for(cell.extension))
            index = parse_cell_index(cell.display_name, position)
            blocks.append(
                _Job(
                    cell=cell,
                    intent=request.selection[cell.path],
                    full_text=sanitize(content),
                    sanitized=sanitized,
                    context=builder.build(index, sanitized),
                )
            )

        jobs = [b for b in blocks if isinstance(b, _Job)]
        rendered = dict(zip(map(id, jobs), self._run(jobs)))

        out: list[str] = []
        fallbacks: list[str] = []
        for block in blocks:
            if isinstance(block, str):
                out.append(block)
                continue
            result = rendered[id(block)]
            if result.fell_back:
                fallbacks.append(block.cell.display_name)
            out.append(self._format_block(block, result, request.include_output))
        return out, fallbacks

    def _run(self, jobs: list[_Job]) -> list[_Rendered]:
        workers = self.config.workers
        if workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                return list(executor.map(self._render, jobs))
        return [self._render(job) for job in jobs]

    def _render(self, job: _Job) -> _Rendered:
        if job.intent is Intent.FULL:
            return _Rendered(body=job.full_text)

        extension = job.cell.extension
        if not is_python_cell(extension):
            keyword_filter = KeywordLineFilter(comment_prefix_for(extension))
            result = keyword_filter.compress(job.sanitized, job.context)
            return _Rendered(body=result.compressed, result=result)

        try:
            result = self.skeletonizer.compress(job.sanitized, job.context)
        except Exception as e:
            logger.warning(
                f"Skeletonization failed for {job.cell.display_name}, "
                f"using keyword filter: {e}"
            )
            result = KeywordLineFilter("#").compress(job.sanitized, job.context)
            return _Rendered(body=result.compressed, result=result, fell_back=True)
        return _Rendered(body=result.compressed, result=result)

    def _format_block(
        self, job: _Job, rendered: _Rendered, include_output: set[str]
    ) -> str:
        cell = job.cell
        mode = "FULL" if job.intent is Intent.FULL else "SKELETON"
        parts = [f"FILE {cell.display_name} {mode}\n", rendered.body]

        if rendered.result is not None and self.config.show_stats:
            prefix = comment_prefix_for(cell.extension)
            stats = rendered.result.stats.describe(language_for(cell.extension))
            parts.append(f"\n{prefix} {stats}")

        if cell.path in include_output and cell.output and cell.output.strip():
            parts.append(f"\n# Output:\n{cell.output}")

        parts.append("\nEND_FILE\n\n")
        return "".join(parts)
