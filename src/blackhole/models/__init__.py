"""
Data Models
===========

Value types and schemas shared across the pipeline.

Models:
    Blocks:
        - Channel: LUMA / CHROMA_CB / CHROMA_CR
        - PaddingPolicy: fill policy for the padded border
        - Block: one transformed 8x8 tile
    
    Container:
        - ContainerMetadata: JSON header of a container
        - ContainerData: per-channel hash lists and position maps
    
    Wire:
        - BlockCheckRequest / BlockCheckResponse
        - BlockDto / BlockBatchUploadRequest
"""

from blackhole.models.block import (
    BLOCK_SIZE,
    CHANNELS,
    Block,
    Channel,
    PaddingPolicy,
)
from blackhole.models.container import ContainerData, ContainerMetadata
from blackhole.models.wire import (
    BlockBatchUploadRequest,
    BlockCheckRequest,
    BlockCheckResponse,
    BlockDto,
)

__all__ = [
    # Blocks
    "BLOCK_SIZE",
    "CHANNELS",
    "Block",
    "Channel",
    "PaddingPolicy",
    # Container
    "ContainerData",
    "ContainerMetadata",
    # Wire
    "BlockCheckRequest",
    "BlockCheckResponse",
    "BlockDto",
    "BlockBatchUploadRequest",
]
