"""Shared helpers for the command-line side of promptpack."""

from pathlib import Path

from rich.console import Console

# stderr, so stdout only ever carries generated documents
console = Console(stderr=True, log_path=False)


def path_with_tilde(path: Path | str) -> str:
    home = str(Path.home())
    path = str(path)
    if path.startswith(home):
        return path.replace(home, "~", 1)
    return path
