"""Cell sanitizing: strip injected artifacts and normalize comment markers.

Sanitizing never adds or removes lines, it only rewrites them.
"""

import re

# Citation markers pasted in from chat assistants, e.g. ":contentReference[oaicite:3]{index=3}"
_ARTIFACT_RE = re.compile(r":contentReference\[oaicite:[^\]]+\](?:\{index=\d+\})?")

# Foreign line-comment markers that can be rewritten into each target dialect.
# "#" is never rewritten into "//": in C-family code it starts a preprocessor line.
_FOREIGN_MARKERS = {
    "#": re.compile(r"^(\s*)//\s?"),
}


def strip_artifacts(line: str) -> str:
    return _ARTIFACT_RE.sub("", line)


def sanitize(code: str, comment_marker: str | None = None) -> str:
    """Sanitize raw cell text.

    Args:
        code: Raw cell text
        comment_marker: Target line-comment marker. When given, line comments
            written in a foreign dialect are rewritten to it (``// x`` -> ``# x``).
            When ``None`` only artifacts are stripped.

    Returns:
        Cleaned text with the same number of lines as the input.
    """
    foreign = _FOREIGN_MARKERS.get(comment_marker) if comment_marker else None

    cleaned = []
    for line in code.split("\n"):
        line = strip_artifacts(line)
        if foreign is not None and line.lstrip().startswith("//"):
            line = foreign.sub(lambda m: f"{m.group(1)}{comment_marker} ", line, count=1)
        cleaned.append(line)
    return "\n".join(cleaned)
