"""Automatic preamble describing a notebook or project from its cells."""

import re
import sys
from collections.abc import Sequence

from ..cells import Cell, CellKind

MAX_DEFINITIONS = 12

_TITLE_RE = re.compile(r"^#\s+(.+)$")
_OUTLINE_RE = re.compile(r"^(#{2,3})\s+(.+)$")
_IMPORT_RE = re.compile(r"^\s*(?:import\s+(\w+)|from\s+(\w+))", re.MULTILINE)
_DEFINITION_RE = re.compile(r"^(class|def)\s+([A-Za-z_]\w*)")

DATA_SOURCE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("CSV File", re.compile(r"\.read_csv\s*\(")),
    ("JSON File", re.compile(r"\.read_json\s*\(|json\.load")),
    ("Parquet File", re.compile(r"\.read_parquet\s*\(")),
    ("Excel File", re.compile(r"\.read_excel\s*\(")),
    ("HuggingFace Dataset", re.compile(r"load_dataset\s*\(")),
    ("SQL Database", re.compile(r"read_sql|\.execute\s*\(\s*['\"]SELECT", re.IGNORECASE)),
    ("Google Drive", re.compile(r"drive\.mount|from\s+google\.colab\s+import\s+drive")),
    ("Web Download", re.compile(r"!wget\s|!curl\s|requests\.get\s*\(|gdown\.download")),
    ("Kaggle", re.compile(r"kaggle\s+datasets|!kaggle")),
    ("GCS Bucket", re.compile(r"gs://|gsutil")),
    ("Torch Checkpoint", re.compile(r"torch\.load\s*\(")),
    ("NumPy File", re.compile(r"np\.load\s*\(|np\.loadtxt")),
)

HARDWARE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("TPU", re.compile(r"xm\.xla_device|google\.colab.*tpu|TPUStrategy")),
    (
        "GPU/CUDA",
        re.compile(
            r"\.to\s*\(\s*['\"]cuda['\"]|torch\.device\s*\(\s*['\"]cuda['\"]"
            r"|cuda\.is_available|torch\.cuda"
        ),
    ),
    ("Apple MPS", re.compile(r"torch\.mps|\.to\s*\(\s*['\"]mps['\"]")),
)


def _is_stdlib(module: str) -> bool:
    return module in sys.stdlib_module_names or module == "__future__"


def extract_title(markdown: Sequence[str]) -> str | None:
    """First top-level ``# Title`` heading of the markdown cells."""
    for text in markdown:
        for line in text.split("\n"):
            match = _TITLE_RE.match(line.strip())
            if match:
                return match.group(1).strip()
    return None


def extract_outline(markdown: Sequence[str]) -> str | None:
    headings = []
    for text in markdown:
        for line in text.split("\n"):
            match = _OUTLINE_RE.match(line.strip())
            if match:
                headings.append((len(match.group(1)), match.group(2).strip()))
    if not headings:
        return None
    lines = [
        f"{'' if level == 2 else '  '}{i}. {text}"
        for i, (level, text) in enumerate(headings, start=1)
    ]
    return "Outline:\n" + "\n".join(lines)


def extract_libraries(code: Sequence[str]) -> list[str]:
    """Third-party top-level modules imported anywhere, sorted."""
    libraries = set()
    for text in code:
        for match in _IMPORT_RE.finditer(text):
            name = match.group(1) or match.group(2)
            if name and not _is_stdlib(name):
                libraries.add(name)
    return sorted(libraries)


def extract_definitions(code: Sequence[str]) -> list[str]:
    definitions: dict[str, None] = {}
    for text in code:
        for line in text.split("\n"):
            match = _DEFINITION_RE.match(line)
            if match:
                definitions[f"{match.group(1)} {match.group(2)}"] = None
    return list(definitions)


def extract_data_sources(code: Sequence[str]) -> list[str]:
    text = "\n".join(code)
    return sorted(name for name, pattern in DATA_SOURCE_PATTERNS if pattern.search(text))


def extract_hardware(code: Sequence[str]) -> str | None:
    text = "\n".join(code)
    hints = [name for name, pattern in HARDWARE_PATTERNS if pattern.search(text)]
    return ", ".join(hints) + " detected" if hints else None


def cell_stats(cells: Sequence[Cell]) -> str | None:
    code = sum(1 for c in cells if c.kind is CellKind.CODE)
    markdown = len(cells) - code
    if not cells:
        return None
    parts = []
    if code:
        parts.append(f"{code} code")
    if markdown:
        parts.append(f"{markdown} markdown")
    return f"Notebook: {len(cells)} cells ({', '.join(parts)})"


def generate_preamble(cells: Sequence[Cell]) -> str:
    """Describe the cells: title, outline, libraries, definitions, data and hardware.

    Sections with nothing to report are omitted; cells with blank content are
    ignored by the content analyzers but still counted.
    """
    code = [c.content for c in cells if c.kind is CellKind.CODE and c.content.strip()]
    markdown = [
        c.content for c in cells if c.kind is CellKind.MARKDOWN and c.content.strip()
    ]

    parts = []
    title = extract_title(markdown)
    if title:
        parts.append(f"Notebook: {title}")

    outline = extract_outline(markdown)
    if outline:
        parts.append(outline)

    libraries = extract_libraries(code)
    if libraries:
        parts.append(f"Libraries: {', '.join(libraries)}")

    definitions = extract_definitions(code)
    if definitions:
        more = ", ..." if len(definitions) > MAX_DEFINITIONS else ""
        parts.append(
            f"Key Definitions: {', '.join(definitions[:MAX_DEFINITIONS])}{more}"
        )

    sources = extract_data_sources(code)
    if sources:
        parts.append(f"Data Sources: {', '.join(sources)}")

    hardware = extract_hardware(code)
    if hardware:
        parts.append(f"Environment: {hardware}")

    stats = cell_stats(cells)
    if stats:
        parts.append(stats)

    return "\n\n".join(parts)
