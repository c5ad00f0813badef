"""
Block Decomposer
================

Tiles an RGB image into 8x8 blocks of transformed Y/U/V payloads.

Pipeline:
    1. Pad width and height up to the next multiple of 8 using the
       configured PaddingPolicy
    2. Apply the reversible color transform to every pixel
    3. Cut the planes into 8x8 tiles, block rows first, then block columns;
       pixels inside a tile are row-major
    4. Pack Y as unsigned bytes and U/V as big-endian signed 16-bit values

The decomposer holds no state between calls: the same image always yields
the same block sequence.
"""

import logging
from typing import List, Tuple

import numpy as np

from blackhole.imaging.color_transform import forward_array
from blackhole.models.block import BLOCK_SIZE, Block, PaddingPolicy


logger = logging.getLogger(__name__)

# Big-endian signed 16-bit, the packed chroma layout
CHROMA_DTYPE = np.dtype(">i2")


def padded_shape(height: int, width: int, block_size: int = BLOCK_SIZE) -> Tuple[int, int]:
    """Round (height, width) up to multiples of block_size."""
    padded_h = -(-height // block_size) * block_size
    padded_w = -(-width // block_size) * block_size
    return padded_h, padded_w


def pad_image(
    image: np.ndarray,
    policy: PaddingPolicy = PaddingPolicy.EDGE,
    block_size: int = BLOCK_SIZE,
) -> np.ndarray:
    """
    Pad an (H, W, 3) image so both sides are multiples of block_size.
    
    Args:
        image: RGB image
        policy: EDGE replicates border pixels, ZERO fills with black
        block_size: Tile size
        
    Returns:
        Padded copy of the image (or a copy if no padding is needed)
    """
    h, w = image.shape[:2]
    padded_h, padded_w = padded_shape(h, w, block_size)
    pad_h = padded_h - h
    pad_w = padded_w - w
    
    if pad_h == 0 and pad_w == 0:
        return image.copy()
    
    pad_width = ((0, pad_h), (0, pad_w), (0, 0))
    if policy is PaddingPolicy.EDGE:
        return np.pad(image, pad_width, mode="edge")
    return np.pad(image, pad_width, mode="constant", constant_values=0)


def _tile(plane: np.ndarray, block_size: int) -> np.ndarray:
    """Reshape a padded (H, W) plane to (n_blocks, block_size * block_size)."""
    h, w = plane.shape
    rows, cols = h // block_size, w // block_size
    tiles = plane.reshape(rows, block_size, cols, block_size).swapaxes(1, 2)
    return tiles.reshape(rows * cols, block_size * block_size)


class BlockDecomposer:
    """
    Turns a decoded image into an ordered sequence of Blocks.
    
    Attributes:
        padding: Fill policy for the padded border
        
    Example:
        decomposer = BlockDecomposer(padding=PaddingPolicy.EDGE)
        blocks = decomposer.decompose(rgb)
        assert len(blocks) == decomposer.block_count(height, width)
    """
    
    def __init__(self, padding: PaddingPolicy = PaddingPolicy.EDGE) -> None:
        self.padding = PaddingPolicy(padding)
    
    @staticmethod
    def block_count(height: int, width: int) -> int:
        """Number of blocks an image of this size decomposes into."""
        padded_h, padded_w = padded_shape(height, width)
        return (padded_h // BLOCK_SIZE) * (padded_w // BLOCK_SIZE)
    
    def decompose(self, image: np.ndarray) -> List[Block]:
        """
        Decompose an RGB image into blocks.
        
        Args:
            image: (H, W, 3) uint8 RGB array
            
        Returns:
            Blocks in row-major block order
            
        Raises:
            ValueError: If the array is not a non-empty (H, W, 3) uint8 image
            TransformRangeError: If the color transform yields Y out of range
        """
        if image.ndim != 3 or image.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) image, got shape {image.shape}")
        if image.dtype != np.uint8:
            raise ValueError(f"Expected uint8 image, got {image.dtype}")
        if image.shape[0] == 0 or image.shape[1] == 0:
            raise ValueError("Image has no pixels")
        
        padded = pad_image(image, self.padding)
        y, u, v = forward_array(padded)
        
        y_tiles = _tile(y.astype(np.uint8), BLOCK_SIZE)
        u_tiles = _tile(u.astype(CHROMA_DTYPE), BLOCK_SIZE)
        v_tiles = _tile(v.astype(CHROMA_DTYPE), BLOCK_SIZE)
        
        blocks = [
            Block(
                y=y_tiles[i].tobytes(),
                u_packed=u_tiles[i].tobytes(),
                v_packed=v_tiles[i].tobytes(),
            )
            for i in range(y_tiles.shape[0])
        ]
        
        logger.debug(
            f"Decomposed {image.shape[1]}x{image.shape[0]} image "
            f"(padded {padded.shape[1]}x{padded.shape[0]}) into {len(blocks)} blocks"
        )
        return blocks
