"""Pattern-derived summaries of code: intent phrases, docstrings and comments."""

import re
from enum import Enum

from .dedup import indent_of

# Phrases in declaration order; each is triggered independently by its own regex
# over the lower-cased text.
INTENT_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern), phrase)
    for pattern, phrase in (
        (r"torch\.load|load_state_dict|\.load\(", "loads checkpoint/state_dict"),
        (
            r"torch\.save|np\.save|save_pretrained|\.to_json|\.to_csv|pickle\.dump",
            "writes artifacts/checkpoints",
        ),
        (r"pd\.read|np\.load|json\.load|open\([^)]*['\"]r", "reads data files"),
        (r"tokenizer\.|\.tokenize|\.encode\(|\.decode\(", "tokenizes/encodes text"),
        (r"augment|shuffle\(|\.sample\(", "applies augmentation/sampling"),
        (r"\.train\(|\.fit\(|optimizer\.|\.backward\(|loss\.", "runs training loop"),
        (r"\.eval\(|accuracy|top_?k|metric|precision|recall", "evaluates metrics"),
        (r"plt\.|\.plot\(|seaborn|sns\.", "plots figures"),
        (r"\.cuda\(|\.to\(device|\.to\(['\"]cuda", "moves tensors to device"),
        (r"pad_sequence|\.pad\(|max_length=|attention_mask", "prepares inputs/masks"),
        (r"dataloader|\.batch\(|collate_fn", "builds batches/dataloaders"),
        (r"\.logits|softmax\(|\.argmax\(", "computes logits/probabilities"),
        (r"!pip|pip install|requirements\.txt", "installs dependencies"),
        (r"!git clone|!wget|!curl|gdown", "downloads external resources"),
    )
)

PRINT_CALL_RE = re.compile(r"print\s*\([^)]+\)")
_PRINT_MESSAGE_RE = re.compile(r"print\s*\(\s*f?[\"']([^\"']+)")
_PRINT_STATEMENT_RE = re.compile(r"^\s*print\s*\(")

# Checked in order; first match wins
PRINT_INTENTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"build|creat|generat"), "building/generating"),
    (re.compile(r"load|read"), "loading"),
    (re.compile(r"sav|writ"), "saving"),
    (re.compile(r"train|epoch"), "training progress"),
    (re.compile(r"process"), "processing"),
    (re.compile(r"done|finish|complete"), "completion"),
)


def is_print_statement(line: str) -> bool:
    return bool(_PRINT_STATEMENT_RE.match(line))


def extract_print_intent(print_call: str) -> str | None:
    """Map the message of a ``print(...)`` call to an intent phrase."""
    match = _PRINT_MESSAGE_RE.search(print_call)
    if not match:
        return None
    message = match.group(1).lower()
    for pattern, intent in PRINT_INTENTS:
        if pattern.search(message):
            return intent
    return None


def collect_phrases(text: str) -> list[str]:
    """Intent phrases for ``text``, deduplicated, in declaration order.

    Print-derived intents follow the pattern phrases.
    """
    lower = text.lower()
    phrases = [phrase for pattern, phrase in INTENT_PATTERNS if pattern.search(lower)]
    for call in PRINT_CALL_RE.findall(text):
        intent = extract_print_intent(call)
        if intent:
            phrases.append(intent)
    return list(dict.fromkeys(phrases))


def summarize_body(
    body_lines: list[str],
    has_docstring: bool = False,
    phrases_per_line: int = 3,
    max_lines: int = 3,
) -> list[str]:
    """Build up to ``max_lines`` ``summary: a, b, c`` lines for a definition body."""
    phrases = collect_phrases("\n".join(body_lines))
    if not phrases:
        return [] if has_docstring else ["summary: implementation elided"]

    lines = []
    for start in range(0, len(phrases), phrases_per_line):
        if len(lines) >= max_lines:
            break
        lines.append("summary: " + ", ".join(phrases[start : start + phrases_per_line]))
    return lines


_DEF_NAME_RE = re.compile(r"^(?:def|class)\s+([A-Za-z_][A-Za-z0-9_]*)")


def definition_name(stripped: str) -> str | None:
    """Name defined by a ``def``/``class`` header line, if it is one."""
    match = _DEF_NAME_RE.match(stripped)
    return match.group(1) if match else None


def definition_names(code: str) -> list[str]:
    """Top-level (zero-indent) def/class names, first occurrence order."""
    names: dict[str, None] = {}
    for line in code.split("\n"):
        stripped = line.strip()
        if not stripped or indent_of(line) != 0:
            continue
        name = definition_name(stripped)
        if name:
            names[name] = None
    return list(names)


def summarize_cell(
    code: str, max_names: int = 3, max_phrases: int = 2, max_clauses: int = 3
) -> str:
    """One-line summary used by variant pointers."""
    parts = []
    names = definition_names(code)
    if names:
        parts.append("defines " + ", ".join(names[:max_names]))
    parts.extend(collect_phrases(code)[:max_phrases])
    if not parts:
        return "content elided"
    return "; ".join(parts[:max_clauses])


_DOCSTRING_ONE_LINE_RE = re.compile(r"^([\"']{3})(.+?)\1$")
_DOCSTRING_OPEN_RE = re.compile(r"^([\"']{3})(.*)$")
_DOCSTRING_CLOSE_RE = re.compile(r"^[\"']{3}$")
_DOCSTRING_TAIL_RE = re.compile(r"[\"']{3}$")


def extract_docstring_summary(body_lines: list[str]) -> str | None:
    """First line of the docstring opening ``body_lines``, if any."""
    if not body_lines:
        return None

    first = body_lines[0].strip()
    match = _DOCSTRING_ONE_LINE_RE.match(first)
    if match:
        return match.group(2).strip()

    match = _DOCSTRING_OPEN_RE.match(first)
    if not match:
        return None
    content = match.group(2).strip()
    if content:
        return content
    if len(body_lines) > 1:
        second = body_lines[1].strip()
        if _DOCSTRING_CLOSE_RE.match(second):
            return None
        return _DOCSTRING_TAIL_RE.sub("", second).strip() or None
    return None


class CommentKind(str, Enum):
    STRUCTURAL = "structural"  # "## Header", "# --- Section ---", "# ====="
    TODO = "todo"
    EXPLANATORY = "explanatory"
    TRIVIAL = "trivial"
    DISABLED_CODE = "disabled_code"


KEPT_COMMENT_KINDS = frozenset(
    {CommentKind.STRUCTURAL, CommentKind.TODO, CommentKind.EXPLANATORY}
)

_MARKDOWN_HEADER_RE = re.compile(r"^#{2,}\s")
_COMMENT_PREFIX_RE = re.compile(r"^#\s*")
_DIVIDER_RE = re.compile(r"^[-=]{3,}|[-=]{3,}$")
_TODO_RE = re.compile(r"^(TODO|FIXME|NOTE|HACK|XXX|BUG|WARNING)\b", re.IGNORECASE)
_DISABLED_CODE_RE = re.compile(
    r"^[a-z_]\w*\s*\(|^\w+\s*=\s*\w|^(import|from|for|if|while|def|class)\s",
    re.IGNORECASE,
)

EXPLANATORY_MIN_CHARS = 15


def is_comment_line(stripped: str) -> bool:
    return stripped.startswith("#") and not stripped.startswith("#!")


def classify_comment(comment: str) -> CommentKind:
    stripped = comment.strip()
    if _MARKDOWN_HEADER_RE.match(stripped):
        return CommentKind.STRUCTURAL

    text = _COMMENT_PREFIX_RE.sub("", stripped)
    if _DIVIDER_RE.search(text):
        return CommentKind.STRUCTURAL
    if _TODO_RE.match(text):
        return CommentKind.TODO
    if _DISABLED_CODE_RE.match(text):
        return CommentKind.DISABLED_CODE
    if len(text) < EXPLANATORY_MIN_CHARS and not text.endswith(":"):
        return CommentKind.TRIVIAL
    return CommentKind.EXPLANATORY
