"""
Deduplication Index
===================

First-seen-order deduplication of block payloads, one index per channel.

For every payload the content identity is computed and looked up in a
dict; unseen payloads are appended to the unique list and take the next
dense index. The resolved index is appended to the position map either
way, so after n blocks:

    len(position_map) == n
    all(i < len(unique_blocks) for i in position_map)

Indexes live for a single image: build them with `deduplicate()`, use
them, and drop them. They are never shared between images.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from blackhole.dedup.identity import RAW_DIGEST, DigestScheme
from blackhole.models.block import CHANNELS, Block, Channel


logger = logging.getLogger(__name__)


class DeduplicationIndex:
    """
    Insertion-ordered set of unique payloads plus a position map.
    
    Attributes:
        channel: Channel this index covers
        scheme: Digest scheme used as the identity
        
    Example:
        index = DeduplicationIndex(Channel.LUMA)
        for block in blocks:
            index.add(block.y)
        
        index.unique_blocks   # distinct payloads, first-seen order
        index.position_map    # one index per block position
    """
    
    def __init__(self, channel: Channel, scheme: DigestScheme = RAW_DIGEST) -> None:
        self.channel = channel
        self.scheme = scheme
        
        self._index: Dict[bytes, int] = {}
        self._unique: List[bytes] = []
        self._identities: List[bytes] = []
        self._positions: List[int] = []
    
    def add(self, payload: bytes) -> int:
        """
        Record one block position.
        
        Args:
            payload: Channel payload of the block
            
        Returns:
            Index of the payload in the unique list
        """
        identity = self.scheme.digest(payload)
        index = self._index.get(identity)
        if index is None:
            index = len(self._unique)
            self._index[identity] = index
            self._unique.append(payload)
            self._identities.append(identity)
        self._positions.append(index)
        return index
    
    def extend(self, payloads: Iterable[bytes]) -> None:
        """Record several block positions in order."""
        for payload in payloads:
            self.add(payload)
    
    @property
    def unique_blocks(self) -> List[bytes]:
        """Distinct payloads in first-seen order."""
        return list(self._unique)
    
    @property
    def identities(self) -> List[bytes]:
        """Identities of the unique payloads, aligned with unique_blocks."""
        return list(self._identities)
    
    @property
    def position_map(self) -> List[int]:
        """Unique-list index for each recorded block position."""
        return list(self._positions)
    
    def __len__(self) -> int:
        """Number of unique payloads."""
        return len(self._unique)
    
    @property
    def total_blocks(self) -> int:
        """Number of recorded block positions."""
        return len(self._positions)
    
    def get_metrics(self) -> dict:
        """Get index metrics for observability."""
        return {
            "channel": self.channel.value,
            "scheme": self.scheme.name,
            "total_blocks": self.total_blocks,
            "unique_blocks": len(self._unique),
        }


def deduplicate(
    blocks: Sequence[Block],
    scheme: DigestScheme = RAW_DIGEST,
) -> Dict[Channel, DeduplicationIndex]:
    """
    Deduplicate a block sequence channel by channel.
    
    Args:
        blocks: Blocks in decomposition order
        scheme: Identity scheme for every channel
        
    Returns:
        Fresh index per channel, keyed in LUMA, CHROMA_CB, CHROMA_CR order
    """
    indexes = {}
    for channel in CHANNELS:
        index = DeduplicationIndex(channel, scheme)
        index.extend(block.payload(channel) for block in blocks)
        indexes[channel] = index
    
    counts = ", ".join(f"{c.value}={len(i)}" for c, i in indexes.items())
    logger.debug(f"Deduplicated {len(blocks)} blocks ({scheme.name}): {counts}")
    return indexes
