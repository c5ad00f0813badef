"""
Reversible Color Transform
==========================

Lossless integer RGB <-> YUV transform (RCT).

Forward:
    Y = (R + 2G + B) >> 2
    U = R - G
    V = B - G

Inverse:
    G = Y - ((U + V) >> 2)
    R = U + G
    B = V + G

Since Y = G + floor((U + V) / 4) exactly, the inverse recovers G without
loss, and R and B follow. Shifts are arithmetic (floor) for negative
operands in both Python ints and signed numpy arrays. The inverse writes
back modulo 256.

Both scalar and numpy-vectorised forms are provided; the decomposer and
reconstruction work on whole planes.
"""

from typing import Tuple

import numpy as np

from blackhole.errors import TransformRangeError


def forward(r: int, g: int, b: int) -> Tuple[int, int, int]:
    """
    Transform one RGB pixel.
    
    Args:
        r: Red (0-255)
        g: Green (0-255)
        b: Blue (0-255)
        
    Returns:
        Tuple (Y, U, V); Y in [0, 255], U and V in [-255, 255]
        
    Raises:
        TransformRangeError: If Y falls outside [0, 255]
    """
    y = (r + 2 * g + b) >> 2
    if y < 0 or y > 255:
        raise TransformRangeError(f"Y component must be 0-255: {y} for rgb=({r}, {g}, {b})")
    return y, r - g, b - g


def inverse(y: int, u: int, v: int) -> Tuple[int, int, int]:
    """Invert one transformed pixel back to (R, G, B)."""
    g = y - ((u + v) >> 2)
    r = u + g
    b = v + g
    return r & 0xFF, g & 0xFF, b & 0xFF


def forward_array(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Transform an (H, W, 3) RGB array.
    
    Args:
        rgb: uint8 array in RGB channel order
        
    Returns:
        Tuple of int16 planes (Y, U, V), each (H, W)
        
    Raises:
        TransformRangeError: If any Y value falls outside [0, 255]
    """
    channels = rgb.astype(np.int16)
    r, g, b = channels[..., 0], channels[..., 1], channels[..., 2]
    
    y = (r + 2 * g + b) >> 2
    if y.size and (y.min() < 0 or y.max() > 255):
        raise TransformRangeError(
            f"Y component outside 0-255: min={int(y.min())}, max={int(y.max())}"
        )
    
    return y, r - g, b - g


def inverse_array(y: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Invert Y, U, V planes back to an (H, W, 3) uint8 RGB array.
    
    Values wrap modulo 256 on write-back.
    """
    y = y.astype(np.int32)
    u = u.astype(np.int32)
    v = v.astype(np.int32)
    
    g = y - ((u + v) >> 2)
    r = u + g
    b = v + g
    
    rgb = np.stack([r, g, b], axis=-1)
    return (rgb & 0xFF).astype(np.uint8)
