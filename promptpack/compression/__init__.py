"""Cell compression: skeletonization, duplicate detection and state contracts."""

from .buckets import Bucket, classify_bucket
from .compressor import CellCompressor, CompressionResult, CompressionStats
from .config import CompressionConfig
from .contract import StateContract, build_state_contract
from .dedup import DedupIndex, content_hash, signature_key
from .fallback import KeywordLineFilter
from .sanitizer import sanitize
from .skeleton import Skeletonizer
from .variants import CompressionContext, ContextBuilder, VariantKind, classify_variant

__all__ = [
    "Bucket",
    "CellCompressor",
    "CompressionConfig",
    "CompressionContext",
    "CompressionResult",
    "CompressionStats",
    "ContextBuilder",
    "DedupIndex",
    "KeywordLineFilter",
    "Skeletonizer",
    "StateContract",
    "VariantKind",
    "build_state_contract",
    "classify_bucket",
    "classify_variant",
    "content_hash",
    "sanitize",
    "signature_key",
]
