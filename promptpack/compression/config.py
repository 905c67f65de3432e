"""Configuration for cell compression."""

from dataclasses import dataclass


@dataclass
class CompressionConfig:
    """Configuration for cell compression."""

    small_cell_threshold: int = 6  # Cells with <= this many non-blank lines are kept verbatim
    small_body_threshold: int = 6  # Definition bodies with <= this many lines are kept
    phrases_per_line: int = 3
    max_summary_lines: int = 3
    contract_list_limit: int = 6  # Entries per Defines/Reads/Writes line
    long_value_chars: int = 100  # Assignments with longer values are removed
    max_variant_names: int = 3
    max_variant_clauses: int = 3
    show_stats: bool = True  # Append the "[lang: a->b lines]" comment
    show_bucket: bool = True  # Prefix skeletons with "# Bucket: ..."
    workers: int = 1  # >1 skeletonizes cells in a thread pool

    @classmethod
    def from_dict(cls, config: dict) -> "CompressionConfig":
        """Create config from dictionary."""
        return cls(**{k: v for k, v in config.items() if k in cls.__annotations__})
