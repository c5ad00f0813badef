"""
Block Models
============

Value types produced by the decomposer and consumed by deduplication.

Layout of one 8x8 block:
    y         64 bytes, one unsigned byte per pixel, row-major
    u_packed  128 bytes, 64 big-endian signed 16-bit values, row-major
    v_packed  128 bytes, 64 big-endian signed 16-bit values, row-major
"""

from dataclasses import dataclass
from enum import Enum


BLOCK_SIZE = 8
PIXELS_PER_BLOCK = BLOCK_SIZE * BLOCK_SIZE
LUMA_PAYLOAD_SIZE = PIXELS_PER_BLOCK
CHROMA_PAYLOAD_SIZE = PIXELS_PER_BLOCK * 2


class Channel(str, Enum):
    """
    Component channel of a block.
    
    Values are the wire names understood by the block store.
    
    Attributes:
        LUMA: Luma component (Y)
        CHROMA_CB: First chroma component (U = R - G)
        CHROMA_CR: Second chroma component (V = B - G)
    """
    
    LUMA = "LUMA"
    CHROMA_CB = "CHROMA_CB"
    CHROMA_CR = "CHROMA_CR"
    
    @property
    def component(self) -> str:
        """Short component name used in container metadata."""
        return _COMPONENTS[self]


_COMPONENTS = {
    Channel.LUMA: "y",
    Channel.CHROMA_CB: "u",
    Channel.CHROMA_CR: "v",
}

# Container and metadata order
CHANNELS = (Channel.LUMA, Channel.CHROMA_CB, Channel.CHROMA_CR)


class PaddingPolicy(str, Enum):
    """
    Fill policy for pixels beyond the original image bounds.
    
    Padding never reaches the visible output (reconstruction crops it away),
    but it changes the content of border blocks and therefore how well they
    deduplicate.
    
    Attributes:
        EDGE: Replicate the nearest edge pixel
        ZERO: Fill with black (0, 0, 0)
    """
    
    EDGE = "edge"
    ZERO = "zero"


@dataclass(frozen=True, slots=True)
class Block:
    """
    One 8x8 tile after the reversible color transform.
    
    Blocks are plain values: they carry no identity until hashed.
    
    Attributes:
        y: Luma payload (64 bytes)
        u_packed: U payload (128 bytes, signed 16-bit big-endian)
        v_packed: V payload (128 bytes, signed 16-bit big-endian)
    """
    
    y: bytes
    u_packed: bytes
    v_packed: bytes
    
    def __post_init__(self) -> None:
        """Validate payload sizes."""
        if len(self.y) != LUMA_PAYLOAD_SIZE:
            raise ValueError(f"y payload must be {LUMA_PAYLOAD_SIZE} bytes, got {len(self.y)}")
        if len(self.u_packed) != CHROMA_PAYLOAD_SIZE:
            raise ValueError(
                f"u payload must be {CHROMA_PAYLOAD_SIZE} bytes, got {len(self.u_packed)}"
            )
        if len(self.v_packed) != CHROMA_PAYLOAD_SIZE:
            raise ValueError(
                f"v payload must be {CHROMA_PAYLOAD_SIZE} bytes, got {len(self.v_packed)}"
            )
    
    def payload(self, channel: Channel) -> bytes:
        """Return the payload for one channel."""
        if channel is Channel.LUMA:
            return self.y
        if channel is Channel.CHROMA_CB:
            return self.u_packed
        return self.v_packed
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the payloads."""
        return f"Block(y={self.y[:4].hex()}..., u={self.u_packed[:4].hex()}..., v={self.v_packed[:4].hex()}...)"
