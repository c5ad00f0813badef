"""
Container Models
================

In-memory form of one BLHO container and its JSON metadata header.

The container stores, per channel, the content identities (raw SHA-256
digests) of the unique blocks in first-seen order, and a position map that
references them once per block position in row-major block order.

Metadata JSON (keys are fixed by the file format):
    {
        "format": "BLHO",
        "version": "2.0",
        "file": "photo.jpg",
        "width": 1920,
        "height": 1080,
        "total_blocks": 32400,
        "unique_y_blocks": 20011,
        "unique_u_blocks": 9120,
        "unique_v_blocks": 8833
    }
"""

from dataclasses import dataclass, field
from typing import Dict, List

from pydantic import BaseModel, Field

from blackhole.models.block import CHANNELS, Channel


CONTAINER_FORMAT = "BLHO"
CONTAINER_FORMAT_VERSION = "2.0"


class ContainerMetadata(BaseModel):
    """
    JSON metadata block of a container.
    
    Attributes:
        format: Format name, always "BLHO"
        version: Format version string
        file: Original image file name
        width: Image width in pixels (before padding)
        height: Image height in pixels (before padding)
        total_blocks: Number of block positions
        unique_y_blocks: Unique luma blocks
        unique_u_blocks: Unique U blocks
        unique_v_blocks: Unique V blocks
    """
    
    format: str = Field(default=CONTAINER_FORMAT, description="Format name")
    version: str = Field(default=CONTAINER_FORMAT_VERSION, description="Format version")
    file: str = Field(..., description="Original image file name")
    width: int = Field(..., ge=0, description="Image width in pixels")
    height: int = Field(..., ge=0, description="Image height in pixels")
    total_blocks: int = Field(..., ge=0, description="Number of block positions")
    unique_y_blocks: int = Field(..., ge=0, description="Unique luma blocks")
    unique_u_blocks: int = Field(..., ge=0, description="Unique U blocks")
    unique_v_blocks: int = Field(..., ge=0, description="Unique V blocks")
    
    def unique_count(self, channel: Channel) -> int:
        """Unique block count declared for a channel."""
        return getattr(self, f"unique_{channel.component}_blocks")


@dataclass
class ContainerData:
    """
    Deduplicated representation of one image.
    
    Attributes:
        file_name: Original image file name
        width: Image width in pixels (before padding)
        height: Image height in pixels (before padding)
        hashes: Per-channel unique block digests, first-seen order
        position_maps: Per-channel index into `hashes`, one per block position
    """
    
    file_name: str
    width: int
    height: int
    hashes: Dict[Channel, List[bytes]] = field(default_factory=dict)
    position_maps: Dict[Channel, List[int]] = field(default_factory=dict)
    
    @property
    def total_blocks(self) -> int:
        """Number of block positions (length of the luma position map)."""
        return len(self.position_maps.get(Channel.LUMA, []))
    
    def metadata(self) -> ContainerMetadata:
        """Build the metadata header for this container."""
        return ContainerMetadata(
            file=self.file_name,
            width=self.width,
            height=self.height,
            total_blocks=self.total_blocks,
            unique_y_blocks=len(self.hashes.get(Channel.LUMA, [])),
            unique_u_blocks=len(self.hashes.get(Channel.CHROMA_CB, [])),
            unique_v_blocks=len(self.hashes.get(Channel.CHROMA_CR, [])),
        )
    
    def summary(self) -> dict:
        """Export counts for logging."""
        return {
            "file": self.file_name,
            "total_blocks": self.total_blocks,
            **{
                f"unique_{channel.component}": len(self.hashes.get(channel, []))
                for channel in CHANNELS
            },
        }
