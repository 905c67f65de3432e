"""Line-level statement helpers shared by the skeletonizer and the state contract."""

import re

# Complete string literals on one line; triple quotes first so '"""' is not read as '""' + '"'
_STRING_RE = re.compile(
    r'"""(?:\\.|[^\\])*?"""'
    r"|'''(?:\\.|[^\\])*?'''"
    r'|"(?:\\.|[^"\\])*"'
    r"|'(?:\\.|[^'\\])*'"
)
# A quote left open at the end of a line starts a string that continues past it
_OPEN_STRING_RE = re.compile(r"(?:\"\"\"|'''|[\"']).*$")

_OPENERS = "([{"
_CLOSERS = ")]}"


def code_text(line: str) -> str:
    """``line`` with string literals blanked out and any trailing comment removed."""
    text = _STRING_RE.sub("_", line)
    text = text.split("#", 1)[0]
    return _OPEN_STRING_RE.sub("", text)


def bracket_balance(line: str) -> int:
    """Opened minus closed brackets on a line, ignoring strings and comments."""
    balance = 0
    for char in code_text(line):
        if char in _OPENERS:
            balance += 1
        elif char in _CLOSERS:
            balance -= 1
    return balance


def collect_statement(lines: list[str], start: int) -> tuple[list[str], int]:
    """Lines of the statement starting at ``start``, following open brackets.

    Returns the statement lines and the index of its last line.
    """
    statement = [lines[start].rstrip()]
    balance = bracket_balance(lines[start])
    i = start
    while balance > 0 and i + 1 < len(lines):
        i += 1
        statement.append(lines[i].rstrip())
        balance += bracket_balance(lines[i])
    return statement, i
