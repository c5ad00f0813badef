"""
Deduplication
=============

Content identities and the per-channel deduplication index.
"""

from blackhole.dedup.identity import (
    DIGEST_SIZE,
    LENGTH_PREFIXED_DIGEST,
    RAW_DIGEST,
    DigestScheme,
)
from blackhole.dedup.index import DeduplicationIndex, deduplicate

__all__ = [
    "DIGEST_SIZE",
    "DigestScheme",
    "RAW_DIGEST",
    "LENGTH_PREFIXED_DIGEST",
    "DeduplicationIndex",
    "deduplicate",
]
