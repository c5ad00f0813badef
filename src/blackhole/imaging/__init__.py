"""
Imaging
=======

Pixel-level stages of the pipeline:
    - color_transform: reversible RGB <-> YUV transform
    - image_decoder: file/bytes -> RGB array (OpenCV)
    - decomposer: RGB array -> ordered 8x8 Blocks
    - reconstruct: Blocks or container + payloads -> RGB array
"""

from blackhole.imaging.color_transform import forward, forward_array, inverse, inverse_array
from blackhole.imaging.decomposer import BlockDecomposer, pad_image, padded_shape
from blackhole.imaging.image_decoder import decode_image_bytes, decode_image_file
from blackhole.imaging.reconstruct import (
    blocks_to_image,
    payload_lookup_from_index,
    reconstruct_image,
)


__all__ = [
    "forward",
    "inverse",
    "forward_array",
    "inverse_array",
    "BlockDecomposer",
    "pad_image",
    "padded_shape",
    "decode_image_bytes",
    "decode_image_file",
    "blocks_to_image",
    "reconstruct_image",
    "payload_lookup_from_index",
]
