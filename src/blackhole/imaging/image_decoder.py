"""
Image Decoder
=============

Dedicated module for decoding source images into RGB numpy arrays.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Validates shape and dtype
    - Fails fast on corrupt or unreadable files
    - Alpha is dropped; grayscale input is expanded to three channels
    - EXIF orientation is ignored: the stored pixel grid is kept as is
"""

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from blackhole.errors import DecodeError


logger = logging.getLogger(__name__)


def decode_image_bytes(data: bytes, name: str = "<bytes>") -> np.ndarray:
    """
    Decode an encoded image (JPEG, PNG, ...) to an RGB array.
    
    Args:
        data: Encoded image bytes
        name: Label used in error messages
        
    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8
        
    Raises:
        DecodeError: If decoding fails or the image is invalid
    """
    if not data:
        raise DecodeError(f"Failed to decode {name}: empty input")
    
    try:
        nparr = np.frombuffer(data, np.uint8)
        bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION)
    except cv2.error as e:
        raise DecodeError(f"Failed to decode {name}: {e}")
    
    if bgr is None:
        raise DecodeError(f"Failed to decode {name}: cv2.imdecode returned None")
    
    if len(bgr.shape) != 3 or bgr.shape[2] != 3:
        raise DecodeError(f"Invalid image shape for {name}: {bgr.shape}")
    
    if bgr.dtype != np.uint8:
        raise DecodeError(f"Invalid dtype for {name}: {bgr.dtype}")
    
    if bgr.shape[0] == 0 or bgr.shape[1] == 0:
        raise DecodeError(f"Image {name} has no pixels")
    
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def decode_image_file(path: Union[str, Path]) -> np.ndarray:
    """
    Read and decode an image file to an RGB array.
    
    Args:
        path: Path to the image file
        
    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8
        
    Raises:
        DecodeError: If the file cannot be read or decoded
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}")
    
    return decode_image_bytes(data, name=path.name)
