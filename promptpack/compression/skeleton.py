"""Skeletonization of Python-shaped cells.

The skeletonizer walks the top-level lines of a cell and rebuilds it as:

1. structural comments that precede the first import
2. imports (alphabetized)
3. structural comments after the first import
4. kept constants and assignments
5. definitions, with attached comments, decorators and a docstring or summary
6. top-level calls and shell/magic commands
7. a note naming summarized assignments
8. ``# ...`` when anything was dropped (or nothing else was emitted)

followed by the cell's state contract. Indented code is only ever reached
through its enclosing definition.
"""

import logging
import re
from dataclasses import dataclass, field

from .buckets import Bucket
from .compressor import CellCompressor, CompressionResult, CompressionStats, count_non_blank
from .config import CompressionConfig
from .contract import (
    AssignmentAction,
    build_state_contract,
    classify_assignment,
    parse_assignment,
)
from .dedup import indent_of
from .statements import bracket_balance, code_text, collect_statement
from .summary import (
    KEPT_COMMENT_KINDS,
    CommentKind,
    classify_comment,
    definition_names,
    extract_docstring_summary,
    is_comment_line,
    is_print_statement,
    summarize_body,
    summarize_cell,
)
from .variants import (
    BucketVariant,
    CompressionContext,
    Duplicate,
    SignatureDuplicate,
    classify_variant,
)

logger = logging.getLogger(__name__)

_DEF_START_RE = re.compile(r"^(?:async\s+)?(?:def|class)\s")
_CONTROL_START_RE = re.compile(r"^(if|for|while|with|try|except|def|class)\b")
_CALL_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*\s*\(.*\)", re.DOTALL)


def is_import_line(stripped: str) -> bool:
    return stripped.startswith("import ") or stripped.startswith("from ")


def is_top_level_call(statement: str) -> bool:
    if statement.startswith("!") or statement.startswith("%"):
        return True
    if _CONTROL_START_RE.match(statement):
        return False
    return bool(_CALL_RE.match(statement))


@dataclass
class DefinitionBlock:
    header_lines: list[str]
    body_lines: list[str]
    end_index: int
    indent: int


def collect_definition(lines: list[str], start: int) -> DefinitionBlock:
    """Header line(s) and indented body of the definition starting at ``start``.

    Wrapped signatures are followed until brackets balance on a line holding
    a ``:`` outside strings and comments. Blank body lines are dropped.
    """
    base_indent = indent_of(lines[start])
    header = [lines[start].rstrip()]
    balance = bracket_balance(lines[start])
    i = start
    while not (balance <= 0 and ":" in code_text(lines[i])) and i + 1 < len(lines):
        i += 1
        header.append(lines[i].rstrip())
        balance += bracket_balance(lines[i])

    body = []
    j = i + 1
    while j < len(lines):
        line = lines[j]
        if line.strip():
            if indent_of(line) <= base_indent:
                break
            body.append(line)
        j += 1

    return DefinitionBlock(
        header_lines=header, body_lines=body, end_index=j - 1, indent=base_indent
    )


@dataclass
class _Sections:
    """Accumulator for one skeleton walk."""

    imports: dict[str, None] = field(default_factory=dict)
    structural: list[tuple[int, str]] = field(default_factory=list)
    constants: list[str] = field(default_factory=list)
    definitions: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    summarized: list[str] = field(default_factory=list)
    first_import: int | None = None
    skipped: bool = False


class Skeletonizer(CellCompressor):
    """Structural compression of Python cells."""

    def __init__(self, config: CompressionConfig | None = None):
        self.config = config or CompressionConfig()

    def compress(
        self, content: str, context: CompressionContext | None = None
    ) -> CompressionResult:
        cfg = self.config
        variant = classify_variant(context)
        label = (context.bucket if context else Bucket.OTHER).label

        if isinstance(variant, Duplicate):
            names = definition_names(content)
            hint = f" ({', '.join(names)})" if names else ""
            lines = [f"# Duplicate of cell {variant.index}{hint}"]
        elif isinstance(variant, SignatureDuplicate):
            lines = [
                f"# Variant of {label} (signature duplicate of cell {variant.index}): "
                f"{self._summary(content)}"
            ]
        elif isinstance(variant, BucketVariant):
            lines = [
                f"# Variant of {label} (see cell {variant.index}): "
                f"{self._summary(content)}"
            ]
        elif count_non_blank(content) <= cfg.small_cell_threshold:
            return CompressionResult(
                compressed=content,
                stats=CompressionStats.measure(content, content),
                verbatim=True,
            )
        else:
            lines = [f"# Bucket: {label}"] if cfg.show_bucket else []
            lines.extend(self.skeletonize(content))
            contract = build_state_contract(content, cfg.long_value_chars)
            lines.extend(contract.render(cfg.contract_list_limit))

        compressed = "\n".join(lines)
        stats = CompressionStats.measure(content, compressed)
        logger.debug(
            "Skeletonized cell %s: %d -> %d lines",
            context.index if context else "?",
            stats.original_lines,
            stats.compressed_lines,
        )
        return CompressionResult(compressed=compressed, stats=stats)

    def _summary(self, content: str) -> str:
        return summarize_cell(
            content,
            max_names=self.config.max_variant_names,
            max_clauses=self.config.max_variant_clauses,
        )

    def skeletonize(self, code: str) -> list[str]:
        """Structural skeleton of ``code``, without bucket header or contract."""
        lines = code.split("\n")
        out = _Sections()
        pending_decorators: list[str] = []
        pending_comments: list[str] = []

        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()
            if not stripped or indent_of(line) != 0:
                i += 1
                continue

            if is_comment_line(stripped):
                kind = classify_comment(stripped)
                if kind is CommentKind.STRUCTURAL:
                    out.structural.append((i, stripped))
                elif kind in KEPT_COMMENT_KINDS:
                    pending_comments.append(stripped)
                i += 1
                continue

            if stripped.startswith("@"):
                pending_decorators.append(stripped)
                i += 1
                continue

            if _DEF_START_RE.match(stripped):
                block = collect_definition(lines, i)
                out.definitions.extend(pending_comments)
                out.definitions.extend(pending_decorators)
                pending_comments, pending_decorators = [], []
                out.definitions.extend(block.header_lines)
                out.definitions.extend(self._summarize_block(block))
                i = block.end_index + 1
                continue

            statement, end = collect_statement(lines, i)
            text = "\n".join(statement)
            pending_comments, pending_decorators = [], []
            i = end + 1

            if is_import_line(stripped):
                if out.first_import is None:
                    out.first_import = i - len(statement)
                out.imports[text] = None
                continue

            assignment = parse_assignment(" ".join(s.strip() for s in statement))
            if assignment:
                action = classify_assignment(assignment, code, self.config.long_value_chars)
                if action is AssignmentAction.KEEP:
                    out.constants.append(text)
                else:
                    if action is AssignmentAction.SUMMARIZE:
                        out.summarized.append(assignment.name)
                    out.skipped = True
                continue

            if is_print_statement(stripped):
                out.skipped = True
                continue

            if is_top_level_call(text):
                out.calls.append(text)
                continue

            out.skipped = True

        if pending_decorators:
            out.skipped = True

        return self._assemble(out)

    def _summarize_block(self, block: DefinitionBlock) -> list[str]:
        cfg = self.config
        body = block.body_lines
        if count_non_blank("\n".join(body)) <= cfg.small_body_threshold:
            return body

        indent = " " * (block.indent + 4)
        result = []
        docstring = extract_docstring_summary(body)
        if docstring is not None:
            result.append(f'{indent}"""{docstring}"""')
        for summary in summarize_body(
            body,
            has_docstring=docstring is not None,
            phrases_per_line=cfg.phrases_per_line,
            max_lines=cfg.max_summary_lines,
        ):
            result.append(f"{indent}# {summary}")
        return result

    @staticmethod
    def _assemble(out: _Sections) -> list[str]:
        def before_imports(index: int) -> bool:
            return out.first_import is None or index < out.first_import

        result = [text for index, text in out.structural if before_imports(index)]
        result.extend(sorted(out.imports))
        result.extend(text for index, text in out.structural if not before_imports(index))
        result.extend(out.constants)
        result.extend(out.definitions)
        result.extend(out.calls)
        if out.summarized:
            result.append(f"# (assignments: {', '.join(out.summarized)})")
        if out.skipped or not result:
            result.append("# ...")
        return result
