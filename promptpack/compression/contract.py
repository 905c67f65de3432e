"""State contracts: what a cell defines, and which paths it reads or writes."""

import re
from dataclasses import dataclass
from enum import Enum

from .dedup import indent_of
from .statements import collect_statement
from .summary import definition_name

DATA_FILE_EXTENSIONS = (
    "json",
    "jsonl",
    "csv",
    "tsv",
    "parquet",
    "txt",
    "npy",
    "npz",
    "pkl",
    "pt",
    "pth",
    "ckpt",
    "h5",
    "safetensors",
    "bin",
    "yaml",
)

_STRING_LITERAL_RE = re.compile(r"([\"'])([^\"']+)\1")
_URL_RE = re.compile(r"(?:https?|gs|s3)://[^\s'\"]+")

_REGEX_ANCHOR_RE = re.compile(r"^[\^$]")
_ESCAPE_SEQUENCE_RE = re.compile(r"\\[snrtdwbDWSB]")
_INTERPOLATION_RE = re.compile(r"\{[^}]+\}")
_REGEX_META_RE = re.compile(r"[*+?|()\[\]]")
_PATH_PREFIX_RE = re.compile(r"^[./~]|^[a-zA-Z]:")
_TRAILING_EXTENSION_RE = re.compile(r"\.\w+$")
_DATA_FILE_RE = re.compile(
    r"\.(" + "|".join(DATA_FILE_EXTENSIONS) + r")$", re.IGNORECASE
)

MIN_PATH_CHARS = 4


def looks_like_path(value: str) -> bool:
    """Heuristic: is this string literal a file path?"""
    if len(value) < MIN_PATH_CHARS:
        return False
    if (
        _REGEX_ANCHOR_RE.search(value)
        or _ESCAPE_SEQUENCE_RE.search(value)
        or _INTERPOLATION_RE.search(value)
        or _REGEX_META_RE.search(value)
    ):
        return False
    if "/" in value:
        return bool(_PATH_PREFIX_RE.search(value) or _TRAILING_EXTENSION_RE.search(value))
    return bool(_DATA_FILE_RE.search(value))


def extract_paths(line: str) -> list[str]:
    """Path-like string literals and URLs on one line, first occurrence order."""
    paths = [
        match.group(2)
        for match in _STRING_LITERAL_RE.finditer(line)
        if looks_like_path(match.group(2))
    ]
    paths.extend(_URL_RE.findall(line))
    return list(dict.fromkeys(paths))


class Access(str, Enum):
    READ = "read"
    WRITE = "write"


_WRITE_RE = re.compile(r"save|dump|write|to_csv|to_json|to_parquet")
_OPEN_WRITE_RE = re.compile(r"open\([^)]*,\s*['\"][wa]|mode\s*=\s*['\"][wa]")


def classify_access(line: str) -> Access:
    """Classify the paths on a line as written or read; writes take priority.

    Lines with neither verb default to reads.
    """
    text = line.lower()
    if _WRITE_RE.search(text) or _OPEN_WRITE_RE.search(text):
        return Access.WRITE
    return Access.READ


_ASSIGNMENT_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.+)$")
_CONTROL_RE = re.compile(r"^(if|for|while)\b")
_CONFIG_NAME_RE = re.compile(r"^(config|params|args|options|settings|opts)", re.IGNORECASE)
_LARGE_OBJECT_RE = re.compile(
    r"DataFrame|tensor|array|model|tokenizer|dataset", re.IGNORECASE
)


@dataclass(frozen=True)
class Assignment:
    name: str
    value: str


def parse_assignment(stripped: str) -> Assignment | None:
    """Parse a simple ``name = value`` statement."""
    if "=" not in stripped or "==" in stripped or _CONTROL_RE.match(stripped):
        return None
    match = _ASSIGNMENT_RE.match(stripped)
    if not match:
        return None
    return Assignment(name=match.group(1), value=match.group(2))


class AssignmentAction(str, Enum):
    KEEP = "keep"
    SUMMARIZE = "summarize"
    REMOVE = "remove"


def count_references(code: str, name: str) -> int:
    return len(re.findall(rf"\b{re.escape(name)}\b", code))


def classify_assignment(
    assignment: Assignment, code: str, long_value_chars: int = 100
) -> AssignmentAction:
    """Decide whether a top-level assignment is kept, summarized or removed."""
    name, value = assignment.name, assignment.value
    if name.isupper():
        return AssignmentAction.KEEP
    if looks_like_path(value.strip("\"'")):
        return AssignmentAction.KEEP
    if _CONFIG_NAME_RE.match(name):
        return AssignmentAction.KEEP
    # the assignment itself accounts for one reference
    if count_references(code, name) - 1 > 2:
        return AssignmentAction.KEEP
    if _LARGE_OBJECT_RE.search(value):
        return AssignmentAction.SUMMARIZE
    if len(value) > long_value_chars:
        return AssignmentAction.REMOVE
    return AssignmentAction.KEEP


@dataclass(frozen=True)
class StateContract:
    """Names a cell defines and paths it reads or writes, in first-seen order."""

    defines: tuple[str, ...] = ()
    reads: tuple[str, ...] = ()
    writes: tuple[str, ...] = ()

    def render(self, limit: int = 6, comment: str = "#") -> list[str]:
        lines = [
            f"{comment} Defines: {format_list(self.defines, limit)}",
            f"{comment} Reads: {format_list(self.reads, limit)}",
        ]
        if self.writes:
            lines.append(f"{comment} Writes: {format_list(self.writes, limit)}")
        return lines


def build_state_contract(code: str, long_value_chars: int = 100) -> StateContract:
    defines: dict[str, None] = {}
    reads: dict[str, None] = {}
    writes: dict[str, None] = {}

    lines = code.split("\n")
    statement_end = -1
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue

        # continuation lines of a bracketed statement only contribute paths
        if i > statement_end and indent_of(line) == 0:
            name = definition_name(stripped)
            if name:
                defines[name] = None
            else:
                statement, statement_end = collect_statement(lines, i)
                assignment = parse_assignment(" ".join(s.strip() for s in statement))
                if (
                    assignment
                    and classify_assignment(assignment, code, long_value_chars)
                    is AssignmentAction.KEEP
                ):
                    defines[assignment.name] = None

        paths = extract_paths(line)
        if paths:
            target = writes if classify_access(stripped) is Access.WRITE else reads
            for path in paths:
                target[path] = None

    return StateContract(
        defines=tuple(defines), reads=tuple(reads), writes=tuple(writes)
    )


def format_list(values: "tuple[str, ...] | list[str]", limit: int = 6) -> str:
    unique = [v for v in dict.fromkeys(values) if v]
    if not unique:
        return "(none)"
    suffix = ", ..." if len(unique) > limit else ""
    return ", ".join(unique[:limit]) + suffix
