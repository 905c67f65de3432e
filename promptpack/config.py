"""Project and user configuration, read from TOML with tomlkit.

Lookup order: ``promptpack.toml`` in the workspace, ``.github/promptpack.toml``
in the workspace, then ``$XDG_CONFIG_HOME/promptpack/config.toml``. The first
existing file wins; without one, defaults are used.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from typing_extensions import Self

from .compression import CompressionConfig
from .errors import ConfigError
from .util import console, path_with_tilde

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "promptpack.toml"


def user_config_path() -> Path:
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "promptpack" / "config.toml"


@dataclass
class PackConfig:
    """Settings for building a prompt pack."""

    preamble: str = ""
    goal: str = ""
    include_tree: bool = True
    auto_preamble: bool = False
    include_output: bool = False
    full: list[str] = field(default_factory=list)  # glob patterns of cells packed in full
    compression: CompressionConfig = field(default_factory=CompressionConfig)

    @classmethod
    def from_dict(cls, doc: dict) -> Self:
        doc = dict(doc)
        compression_data = dict(doc.pop("compression", {}))
        unknown = set(compression_data) - set(CompressionConfig.__annotations__)
        if unknown:
            logger.warning(f"Unknown keys in compression config: {unknown}")
        compression = CompressionConfig.from_dict(compression_data)

        known = {f.name for f in fields(cls)}
        unknown = set(doc) - known
        if unknown:
            logger.warning(f"Unknown keys in config: {unknown}")
        return cls(
            **{k: v for k, v in doc.items() if k in known}, compression=compression
        )

    def is_full(self, name: str) -> bool:
        """Whether a cell path or display name matches one of the ``full`` globs."""
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.full)


def config_paths(workspace: Path | None) -> list[Path]:
    paths = []
    if workspace is not None:
        paths.append(workspace / CONFIG_FILENAME)
        paths.append(workspace / ".github" / CONFIG_FILENAME)
    paths.append(user_config_path())
    return paths


def read_config_file(path: Path) -> PackConfig:
    try:
        with open(path) as f:
            doc = tomlkit.load(f).unwrap()
    except (OSError, TOMLKitError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e
    return PackConfig.from_dict(doc)


def load_config(workspace: Path | None = None, path: Path | None = None) -> PackConfig:
    """Load the configuration for ``workspace``.

    An explicit ``path`` must exist; otherwise the first existing file in the
    lookup order is used.
    """
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return read_config_file(path)

    for candidate in config_paths(workspace):
        if candidate.exists():
            console.log(f"Using configuration at {path_with_tilde(candidate)}")
            return read_config_file(candidate)
    logger.debug("No configuration file found, using defaults")
    return PackConfig()
