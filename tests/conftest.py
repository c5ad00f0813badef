"""
Test Configuration
==================

Pytest fixtures and test configuration for the block pipeline.
"""

import numpy as np
import pytest


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def black_image():
    """16x16 all-black RGB image (four identical blocks)."""
    return np.zeros((16, 16, 3), dtype=np.uint8)


@pytest.fixture
def random_image():
    """Odd-sized random RGB image, so both axes need padding."""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(21, 13, 3), dtype=np.uint8)


@pytest.fixture
def tiled_image():
    """
    32x24 image built from two repeating 8x8 tiles.
    
    Even block columns hold tile A, odd ones tile B, so every channel
    deduplicates to exactly two unique blocks.
    """
    rng = np.random.default_rng(7)
    tile_a = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    tile_b = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    row = np.concatenate([tile_a, tile_b, tile_a, tile_b], axis=1)
    return np.concatenate([row, row, row], axis=0)
