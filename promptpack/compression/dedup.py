"""Structural duplicate detection.

Two cells are exact structural duplicates when their normalized content hashes
equal, regardless of blank lines, comment lines, or whitespace. Cells whose
top-level ``def``/``class`` headers (with decorators) match are signature
duplicates.
"""

import re
from dataclasses import dataclass, field

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

_WHITESPACE_RE = re.compile(r"\s+")
_DEF_HEADER_RE = re.compile(r"^(def|class)\s+[A-Za-z_][A-Za-z0-9_]*")

SIGNATURE_PART_SEPARATOR = "|"
SIGNATURE_SEPARATOR = "||"


def _is_comment(stripped: str) -> bool:
    return stripped.startswith("#") or stripped.startswith("//")


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def normalize(code: str) -> str:
    """Drop blank and comment lines, remove all whitespace, and concatenate."""
    parts = []
    for line in code.split("\n"):
        stripped = line.strip()
        if not stripped or _is_comment(stripped):
            continue
        parts.append(_WHITESPACE_RE.sub("", stripped))
    return "".join(parts)


def fnv1a(value: str) -> str:
    """32-bit FNV-1a over the UTF-8 bytes of ``value``, as 8 hex digits."""
    h = FNV_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return f"{h:08x}"


def content_hash(code: str) -> str | None:
    """Hash of the normalized content, or None for cells with no code at all."""
    normalized = normalize(code)
    return fnv1a(normalized) if normalized else None


def signature_key(code: str) -> str | None:
    """Ordered top-level def/class headers, each prefixed by its decorators.

    Returns None when the cell has no top-level definition.
    """
    signatures: list[str] = []
    pending_decorators: list[str] = []

    for line in code.split("\n"):
        stripped = line.strip()
        if not stripped or indent_of(line) != 0:
            continue

        if stripped.startswith("@"):
            pending_decorators.append(_WHITESPACE_RE.sub(" ", stripped))
            continue

        if _DEF_HEADER_RE.match(stripped):
            header = _WHITESPACE_RE.sub(" ", stripped)
            signatures.append(
                SIGNATURE_PART_SEPARATOR.join([*pending_decorators, header])
            )
        pending_decorators = []

    if not signatures:
        return None
    return SIGNATURE_SEPARATOR.join(signatures)


@dataclass
class DedupIndex:
    """Run-scoped first-writer-wins maps from hash and signature to cell index.

    Create a fresh index for every compression run; entries are only ever added.
    """

    by_hash: dict[str, int] = field(default_factory=dict)
    by_signature: dict[str, int] = field(default_factory=dict)

    def claim_hash(self, digest: str | None, cell_index: int) -> int | None:
        """Return the earlier owner of ``digest``, or register ``cell_index`` as owner."""
        if digest is None:
            return None
        owner = self.by_hash.setdefault(digest, cell_index)
        return None if owner == cell_index else owner

    def claim_signature(self, key: str | None, cell_index: int) -> int | None:
        """Return the earlier owner of ``key``, or register ``cell_index`` as owner."""
        if key is None:
            return None
        owner = self.by_signature.setdefault(key, cell_index)
        return None if owner == cell_index else owner

    def reset(self) -> None:
        self.by_hash.clear()
        self.by_signature.clear()
