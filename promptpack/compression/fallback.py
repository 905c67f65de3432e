"""Keyword-line filter for cells the skeletonizer does not handle.

Used for non-Python languages and as the fallback when skeletonization of a
cell fails. Keeps declaration-looking lines and collapses runs of anything else
into one indented elision marker.
"""

from .compressor import CellCompressor, CompressionResult, CompressionStats
from .variants import CompressionContext

KEYWORDS = frozenset(
    {
        "import",
        "export",
        "class",
        "function",
        "interface",
        "type",
        "const",
        "let",
        "var",
        "def",
        "struct",
        "enum",
        "pub",
        "fn",
        "async",
    }
)
KEPT_PREFIXES = ("@", "import", "from", "use", "#include")
KEPT_SUFFIXES = ("{", ":")

C_FAMILY_EXTENSIONS = frozenset(
    {
        "c",
        "h",
        "cc",
        "cpp",
        "hpp",
        "cs",
        "java",
        "kt",
        "scala",
        "swift",
        "go",
        "rs",
        "js",
        "jsx",
        "ts",
        "tsx",
        "dart",
    }
)

LANGUAGES = {
    "py": "python",
    "ipynb": "python",
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "rs": "rust",
    "go": "go",
    "c": "c",
    "h": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "hpp": "cpp",
    "java": "java",
    "kt": "kotlin",
    "cs": "csharp",
    "swift": "swift",
    "scala": "scala",
    "dart": "dart",
    "sh": "shell",
    "rb": "ruby",
    "r": "r",
}


def comment_prefix_for(extension: str | None) -> str:
    """Line-comment marker of a language, by file extension."""
    return "//" if extension in C_FAMILY_EXTENSIONS else "#"


def language_for(extension: str | None) -> str:
    if extension is None:
        return "python"
    return LANGUAGES.get(extension, extension)


def is_python_cell(extension: str | None) -> bool:
    """Notebook cells (no extension), notebooks and ``.py`` files are Python."""
    return extension in (None, "py", "ipynb")


def keep_line(stripped: str) -> bool:
    first_word = stripped.split(" ")[0]
    return (
        first_word in KEYWORDS
        or stripped.startswith(KEPT_PREFIXES)
        or stripped.endswith(KEPT_SUFFIXES)
    )


class KeywordLineFilter(CellCompressor):
    """Naive compressor keeping only lines that look like declarations."""

    def __init__(self, comment_prefix: str = "//"):
        self.comment_prefix = comment_prefix

    @property
    def marker(self) -> str:
        return f"{self.comment_prefix} ..."

    def compress(
        self, content: str, context: CompressionContext | None = None
    ) -> CompressionResult:
        result: list[str] = []
        for line in content.split("\n"):
            stripped = line.strip()
            if not stripped:
                continue
            if keep_line(stripped):
                result.append(line.rstrip())
                continue
            if result and result[-1].strip() != self.marker:
                indent = line[: len(line) - len(line.lstrip())]
                result.append(indent + self.marker)

        compressed = "\n".join(result)
        return CompressionResult(
            compressed=compressed, stats=CompressionStats.measure(content, compressed)
        )
