"""Tests for content identities and the deduplication index."""

import hashlib
import struct

from blackhole.dedup.identity import DIGEST_SIZE, LENGTH_PREFIXED_DIGEST, RAW_DIGEST
from blackhole.dedup.index import DeduplicationIndex, deduplicate
from blackhole.imaging.decomposer import BlockDecomposer
from blackhole.models.block import CHANNELS, Channel


class TestIdentity:
    """The two digest schemes."""
    
    def test_raw_digest_is_plain_sha256(self):
        """RAW_DIGEST is SHA-256 of the payload alone."""
        payload = b"\x01\x02\x03"
        assert RAW_DIGEST.digest(payload) == hashlib.sha256(payload).digest()
        assert len(RAW_DIGEST.digest(payload)) == DIGEST_SIZE
    
    def test_length_prefixed_digest(self):
        """LENGTH_PREFIXED_DIGEST hashes a 4-byte big-endian length first."""
        payload = bytes(range(64))
        expected = hashlib.sha256(struct.pack(">I", 64) + payload).hexdigest()
        assert LENGTH_PREFIXED_DIGEST.hexdigest(payload) == expected
    
    def test_schemes_differ(self):
        """The two schemes never produce the same identity."""
        payload = bytes(64)
        assert RAW_DIGEST.digest(payload) != LENGTH_PREFIXED_DIGEST.digest(payload)
        assert RAW_DIGEST.name != LENGTH_PREFIXED_DIGEST.name


class TestDeduplicationIndex:
    """First-seen order, dense indices and position maps."""
    
    def test_first_seen_order(self):
        """Unique payloads keep first-seen order with dense indices."""
        index = DeduplicationIndex(Channel.LUMA)
        assigned = [index.add(p) for p in [b"a", b"b", b"a", b"c", b"b", b"a"]]
        
        assert assigned == [0, 1, 0, 2, 1, 0]
        assert index.unique_blocks == [b"a", b"b", b"c"]
        assert index.position_map == [0, 1, 0, 2, 1, 0]
        assert len(index) == 3
        assert index.total_blocks == 6
    
    def test_identities_align_with_unique_blocks(self):
        """Identities line up with unique_blocks."""
        index = DeduplicationIndex(Channel.CHROMA_CB, LENGTH_PREFIXED_DIGEST)
        index.extend([b"x", b"y", b"x"])
        
        assert index.identities == [
            LENGTH_PREFIXED_DIGEST.digest(b"x"),
            LENGTH_PREFIXED_DIGEST.digest(b"y"),
        ]
    
    def test_returned_lists_are_copies(self):
        """Callers cannot mutate the index through its properties."""
        index = DeduplicationIndex(Channel.LUMA)
        index.add(b"a")
        index.position_map.append(99)
        index.unique_blocks.clear()
        
        assert index.position_map == [0]
        assert index.unique_blocks == [b"a"]
    
    def test_metrics(self):
        """Metrics report channel, scheme and counts."""
        index = DeduplicationIndex(Channel.CHROMA_CR)
        index.extend([b"a", b"a"])
        assert index.get_metrics() == {
            "channel": "CHROMA_CR",
            "scheme": RAW_DIGEST.name,
            "total_blocks": 2,
            "unique_blocks": 1,
        }


class TestDeduplicate:
    """deduplicate() over decomposed images."""
    
    def test_black_image_scenario(self, black_image):
        """A black 16x16 image has one unique block per channel."""
        blocks = BlockDecomposer().decompose(black_image)
        indexes = deduplicate(blocks)
        
        assert list(indexes) == list(CHANNELS)
        for channel in CHANNELS:
            assert len(indexes[channel]) == 1
            assert indexes[channel].position_map == [0, 0, 0, 0]
    
    def test_tiled_image_has_two_uniques_per_channel(self, tiled_image):
        """Two alternating tiles deduplicate to two blocks."""
        blocks = BlockDecomposer().decompose(tiled_image)
        indexes = deduplicate(blocks)
        
        for channel in CHANNELS:
            assert len(indexes[channel]) == 2
            assert indexes[channel].position_map == [0, 1, 0, 1] * 3
    
    def test_position_maps_are_valid(self, random_image):
        """Every position references an existing unique block."""
        blocks = BlockDecomposer().decompose(random_image)
        indexes = deduplicate(blocks)
        
        for index in indexes.values():
            assert len(index.position_map) == len(blocks)
            assert all(0 <= i < len(index) for i in index.position_map)
    
    def test_deterministic_across_runs(self, random_image):
        """Identical input gives identical unique sets and maps."""
        first = deduplicate(BlockDecomposer().decompose(random_image.copy()))
        second = deduplicate(BlockDecomposer().decompose(random_image.copy()))
        
        for channel in CHANNELS:
            assert first[channel].unique_blocks == second[channel].unique_blocks
            assert first[channel].position_map == second[channel].position_map
    
    def test_indexes_are_fresh_per_call(self, black_image, random_image):
        """No state leaks from one image to the next."""
        deduplicate(BlockDecomposer().decompose(random_image))
        indexes = deduplicate(BlockDecomposer().decompose(black_image))
        assert all(len(index) == 1 for index in indexes.values())
