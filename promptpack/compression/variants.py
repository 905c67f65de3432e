"""Per-run compression context and variant classification.

The context of each cell is built in a single sequential pre-pass over the
selection, so that first-writer-wins duplicate detection is deterministic even
when the skeletonization itself runs in parallel.
"""

import logging
from dataclasses import dataclass, field
from typing import TypeAlias

from .buckets import Bucket, classify_bucket
from .dedup import DedupIndex, content_hash, signature_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompressionContext:
    """Facts about one cell, valid for one compression run only."""

    index: int
    bucket: Bucket = Bucket.OTHER
    bucket_primary_index: int | None = None
    duplicate_of_index: int | None = None
    signature_duplicate_of_index: int | None = None


@dataclass(frozen=True)
class NoVariant:
    pass


@dataclass(frozen=True)
class Duplicate:
    index: int


@dataclass(frozen=True)
class SignatureDuplicate:
    index: int


@dataclass(frozen=True)
class BucketVariant:
    index: int


VariantKind: TypeAlias = NoVariant | Duplicate | SignatureDuplicate | BucketVariant


def classify_variant(context: CompressionContext | None) -> VariantKind:
    """Pick the variant kind of a cell; exact duplicates win over signature
    duplicates, which win over bucket variants."""
    if context is None:
        return NoVariant()
    if context.duplicate_of_index is not None:
        return Duplicate(context.duplicate_of_index)
    if context.signature_duplicate_of_index is not None:
        return SignatureDuplicate(context.signature_duplicate_of_index)
    if (
        context.bucket_primary_index is not None
        and context.bucket_primary_index != context.index
    ):
        return BucketVariant(context.bucket_primary_index)
    return NoVariant()


@dataclass
class ContextBuilder:
    """Sequential pre-pass assigning duplicate and variant links to cells.

    Feed cells in selection order; a new builder must be used per run.
    """

    dedup: DedupIndex = field(default_factory=DedupIndex)
    bucket_primaries: dict[Bucket, int] = field(default_factory=dict)

    def build(self, index: int, code: str) -> CompressionContext:
        bucket = classify_bucket(code)

        duplicate_of = self.dedup.claim_hash(content_hash(code), index)

        signature_of = None
        if duplicate_of is None:
            signature_of = self.dedup.claim_signature(signature_key(code), index)

        # The "other" bucket is a catch-all, not a shared purpose
        if (
            duplicate_of is None
            and signature_of is None
            and bucket is not Bucket.OTHER
            and bucket not in self.bucket_primaries
        ):
            self.bucket_primaries[bucket] = index

        primary = (
            self.bucket_primaries.get(bucket) if bucket is not Bucket.OTHER else None
        )
        context = CompressionContext(
            index=index,
            bucket=bucket,
            bucket_primary_index=primary,
            duplicate_of_index=duplicate_of,
            signature_duplicate_of_index=signature_of,
        )
        logger.debug("Cell %d context: %s", index, context)
        return context
