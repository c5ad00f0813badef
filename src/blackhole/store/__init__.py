"""
Block Store
===========

Client side of the check/upload protocol, its batching helper, and an
in-memory reference store.

Example:
    from blackhole.store import BlockStoreClient
    
    async with BlockStoreClient(settings.store.url, batch_size=1000) as client:
        result = await client.check_missing(identities, Channel.LUMA)
"""

from blackhole.store.batching import batch_ranges, partition
from blackhole.store.client import (
    BatchOutcome,
    BlockStoreClient,
    ChannelSync,
    CheckResult,
)


__all__ = [
    "batch_ranges",
    "partition",
    "BatchOutcome",
    "BlockStoreClient",
    "ChannelSync",
    "CheckResult",
]
