"""
Image Reconstruction
====================

Rebuilds the original RGB image from its deduplicated representation.

For every block position the referenced payload of each channel is looked
up through the position map, the inverse color transform is applied, and
the padded canvas is cropped back to the stored width and height.

Payloads themselves are not part of a container. They are supplied out of
band by a lookup callable keyed by (channel, raw digest).
"""

import logging
from typing import Callable, Dict, List, Mapping, Sequence

import numpy as np

from blackhole.dedup.identity import RAW_DIGEST
from blackhole.dedup.index import DeduplicationIndex
from blackhole.errors import FormatError
from blackhole.imaging.color_transform import inverse_array
from blackhole.imaging.decomposer import CHROMA_DTYPE, padded_shape
from blackhole.models.block import BLOCK_SIZE, CHANNELS, Block, Channel
from blackhole.models.container import ContainerData


logger = logging.getLogger(__name__)

PayloadLookup = Callable[[Channel, bytes], bytes]


def _untile(tiles: np.ndarray, height: int, width: int) -> np.ndarray:
    """Inverse of the decomposer's tiling: (n, 64) -> padded (H, W) plane."""
    padded_h, padded_w = padded_shape(height, width)
    rows, cols = padded_h // BLOCK_SIZE, padded_w // BLOCK_SIZE
    if tiles.shape[0] != rows * cols:
        raise FormatError(
            f"Expected {rows * cols} blocks for {width}x{height}, got {tiles.shape[0]}"
        )
    planes = tiles.reshape(rows, cols, BLOCK_SIZE, BLOCK_SIZE).swapaxes(1, 2)
    return planes.reshape(padded_h, padded_w)


def _planes_to_image(
    y_rows: List[bytes],
    u_rows: List[bytes],
    v_rows: List[bytes],
    width: int,
    height: int,
) -> np.ndarray:
    y = np.frombuffer(b"".join(y_rows), dtype=np.uint8).reshape(-1, BLOCK_SIZE * BLOCK_SIZE)
    u = np.frombuffer(b"".join(u_rows), dtype=CHROMA_DTYPE).reshape(-1, BLOCK_SIZE * BLOCK_SIZE)
    v = np.frombuffer(b"".join(v_rows), dtype=CHROMA_DTYPE).reshape(-1, BLOCK_SIZE * BLOCK_SIZE)
    
    rgb = inverse_array(
        _untile(y, height, width),
        _untile(u, height, width),
        _untile(v, height, width),
    )
    return rgb[:height, :width].copy()


def blocks_to_image(blocks: Sequence[Block], width: int, height: int) -> np.ndarray:
    """
    Reassemble an image directly from its full block sequence.
    
    Args:
        blocks: Blocks in decomposition order
        width: Original width
        height: Original height
        
    Returns:
        (height, width, 3) uint8 RGB array
    """
    return _planes_to_image(
        [block.y for block in blocks],
        [block.u_packed for block in blocks],
        [block.v_packed for block in blocks],
        width,
        height,
    )


def reconstruct_image(container: ContainerData, lookup: PayloadLookup) -> np.ndarray:
    """
    Reconstruct an image from a decoded container.
    
    Args:
        container: Decoded container (hash lists + position maps)
        lookup: Returns the payload for (channel, raw digest)
        
    Returns:
        (height, width, 3) uint8 RGB array
        
    Raises:
        FormatError: If the container is inconsistent with its dimensions
        KeyError: If the lookup cannot supply a referenced payload
    """
    rows: Dict[Channel, List[bytes]] = {}
    for channel in CHANNELS:
        hashes = container.hashes[channel]
        # Resolve each unique payload once, then fan out through the position map
        unique = [lookup(channel, digest) for digest in hashes]
        rows[channel] = [unique[index] for index in container.position_maps[channel]]
    
    logger.debug(
        f"Reconstructing {container.file_name} ({container.width}x{container.height}) "
        f"from {container.total_blocks} block positions"
    )
    return _planes_to_image(
        rows[Channel.LUMA],
        rows[Channel.CHROMA_CB],
        rows[Channel.CHROMA_CR],
        container.width,
        container.height,
    )


def payload_lookup_from_index(indexes: Mapping[Channel, DeduplicationIndex]) -> PayloadLookup:
    """
    Build a lookup over the unique payloads of a local deduplication run.
    
    Payloads are keyed by their raw digest, the identity stored in containers.
    """
    table: Dict[Channel, Dict[bytes, bytes]] = {
        channel: {RAW_DIGEST.digest(payload): payload for payload in index.unique_blocks}
        for channel, index in indexes.items()
    }
    
    def lookup(channel: Channel, digest: bytes) -> bytes:
        return table[channel][digest]
    
    return lookup
