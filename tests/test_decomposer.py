"""Tests for padding and block decomposition."""

import numpy as np
import pytest

from blackhole.imaging.color_transform import forward
from blackhole.imaging.decomposer import BlockDecomposer, pad_image, padded_shape
from blackhole.imaging.reconstruct import blocks_to_image
from blackhole.models.block import Channel, PaddingPolicy


class TestPadding:
    """Padding geometry and fill policies."""
    
    def test_padded_shape(self):
        """Sizes round up to whole blocks."""
        assert padded_shape(16, 16) == (16, 16)
        assert padded_shape(1, 1) == (8, 8)
        assert padded_shape(21, 13) == (24, 16)
    
    def test_edge_policy_replicates_border(self):
        """EDGE copies the nearest border pixel into the padding."""
        image = np.zeros((3, 5, 3), dtype=np.uint8)
        image[:, -1] = (10, 20, 30)
        image[-1, :] = (40, 50, 60)
        
        padded = pad_image(image, PaddingPolicy.EDGE)
        
        assert padded.shape == (8, 8, 3)
        assert np.array_equal(padded[:3, :5], image)
        assert tuple(padded[0, 7]) == (10, 20, 30)
        assert tuple(padded[7, 0]) == (40, 50, 60)
    
    def test_zero_policy_fills_black(self):
        """ZERO fills the padding with black."""
        image = np.full((3, 5, 3), 200, dtype=np.uint8)
        padded = pad_image(image, PaddingPolicy.ZERO)
        
        assert padded.shape == (8, 8, 3)
        assert np.array_equal(padded[:3, :5], image)
        assert not padded[3:, :].any()
        assert not padded[:, 5:].any()
    
    def test_aligned_image_is_copied(self, black_image):
        """Aligned images come back as an equal copy."""
        padded = pad_image(black_image)
        assert padded is not black_image
        assert np.array_equal(padded, black_image)


class TestBlockDecomposer:
    """Block order, payload layout and counts."""
    
    def test_black_image_gives_four_identical_blocks(self, black_image):
        """A 16x16 black image is four all-zero blocks."""
        blocks = BlockDecomposer().decompose(black_image)
        
        assert len(blocks) == 4
        assert all(block == blocks[0] for block in blocks)
        assert blocks[0].y == bytes(64)
        assert blocks[0].u_packed == bytes(128)
        assert blocks[0].v_packed == bytes(128)
    
    def test_block_count_matches_padded_grid(self, random_image):
        """Block count follows the padded grid."""
        blocks = BlockDecomposer().decompose(random_image)
        assert len(blocks) == (24 // 8) * (16 // 8)
        assert BlockDecomposer.block_count(21, 13) == len(blocks)
    
    def test_payload_layout(self):
        """Y is one byte per pixel, U/V are big-endian int16, row-major."""
        image = np.zeros((8, 8, 3), dtype=np.uint8)
        image[0, 1] = (255, 0, 0)
        image[1, 0] = (0, 255, 0)
        
        block = BlockDecomposer().decompose(image)[0]
        
        y1, u1, v1 = forward(255, 0, 0)
        assert block.y[1] == y1
        assert block.u_packed[2:4] == u1.to_bytes(2, "big", signed=True)
        assert block.v_packed[2:4] == v1.to_bytes(2, "big", signed=True)
        
        y8, u8, v8 = forward(0, 255, 0)
        assert block.y[8] == y8
        assert block.payload(Channel.CHROMA_CB)[16:18] == u8.to_bytes(2, "big", signed=True)
        assert block.payload(Channel.CHROMA_CR)[16:18] == v8.to_bytes(2, "big", signed=True)
    
    def test_block_order_is_row_major(self):
        """Blocks go along a block row first, then down."""
        image = np.zeros((16, 24, 3), dtype=np.uint8)
        for row in range(2):
            for col in range(3):
                image[row * 8:(row + 1) * 8, col * 8:(col + 1) * 8] = row * 3 + col
        
        blocks = BlockDecomposer().decompose(image)
        
        assert [block.y[0] for block in blocks] == [0, 1, 2, 3, 4, 5]
    
    def test_deterministic(self, random_image):
        """The same image always yields the same blocks."""
        decomposer = BlockDecomposer()
        assert decomposer.decompose(random_image) == decomposer.decompose(random_image)
    
    def test_padding_policy_changes_border_blocks_only(self, random_image):
        """Fill policy only affects blocks that contain padding."""
        edge = BlockDecomposer(PaddingPolicy.EDGE).decompose(random_image)
        zero = BlockDecomposer(PaddingPolicy.ZERO).decompose(random_image)
        
        # Block (0, 0) lies fully inside the 13x21 image
        assert edge[0] == zero[0]
        assert edge[-1] != zero[-1]
    
    @pytest.mark.parametrize("policy", list(PaddingPolicy))
    def test_blocks_reassemble_to_original(self, random_image, policy):
        """Reassembling the blocks crops back to the original."""
        blocks = BlockDecomposer(policy).decompose(random_image)
        restored = blocks_to_image(blocks, width=13, height=21)
        assert np.array_equal(restored, random_image)
    
    def test_rejects_non_rgb(self):
        """Only non-empty (H, W, 3) uint8 arrays are accepted."""
        with pytest.raises(ValueError):
            BlockDecomposer().decompose(np.zeros((8, 8), dtype=np.uint8))
        with pytest.raises(ValueError):
            BlockDecomposer().decompose(np.zeros((8, 8, 3), dtype=np.float32))
        with pytest.raises(ValueError):
            BlockDecomposer().decompose(np.zeros((0, 8, 3), dtype=np.uint8))
