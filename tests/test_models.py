"""Tests for block values and the wire schema."""

import base64

import pytest
from pydantic import ValidationError

from blackhole.models.block import Block, Channel
from blackhole.models.wire import (
    BlockBatchUploadRequest,
    BlockCheckRequest,
    BlockCheckResponse,
    BlockDto,
)


HASH = "0123456789abcdef" * 4


class TestBlock:
    """Block payload validation."""
    
    def test_payload_by_channel(self):
        """payload() selects the channel's bytes."""
        block = Block(y=b"\x01" * 64, u_packed=b"\x02" * 128, v_packed=b"\x03" * 128)
        assert block.payload(Channel.LUMA) == b"\x01" * 64
        assert block.payload(Channel.CHROMA_CB) == b"\x02" * 128
        assert block.payload(Channel.CHROMA_CR) == b"\x03" * 128
    
    @pytest.mark.parametrize("y, u, v", [
        (b"\x00" * 63, b"\x00" * 128, b"\x00" * 128),
        (b"\x00" * 64, b"\x00" * 64, b"\x00" * 128),
        (b"\x00" * 64, b"\x00" * 128, b"\x00" * 129),
    ])
    def test_rejects_wrong_sizes(self, y, u, v):
        """Payload lengths are 64, 128 and 128 bytes."""
        with pytest.raises(ValueError):
            Block(y=y, u_packed=u, v_packed=v)
    
    def test_component_names(self):
        """Channels map to y, u, v."""
        assert [c.component for c in Channel] == ["y", "u", "v"]


class TestBlockDto:
    """Upload entry validation and serialization."""
    
    def test_data_serialized_as_base64(self):
        """data is base64 in JSON mode."""
        dto = BlockDto(hash=HASH, data=b"\xff\x00\x10", type=Channel.LUMA)
        assert dto.model_dump(mode="json") == {
            "hash": HASH,
            "data": base64.b64encode(b"\xff\x00\x10").decode("ascii"),
            "type": "LUMA",
        }
    
    def test_parses_wire_json(self):
        """Wire JSON decodes base64 back to bytes."""
        body = (
            '{"blocks": [{"hash": "%s", "data": "AQID", "type": "CHROMA_CB"}]}' % HASH
        )
        request = BlockBatchUploadRequest.model_validate_json(body)
        
        assert request.blocks[0].data == b"\x01\x02\x03"
        assert request.blocks[0].type is Channel.CHROMA_CB
    
    @pytest.mark.parametrize("identity", ["abc", "g" * 64, "a" * 129, ""])
    def test_rejects_bad_hash(self, identity):
        """Hashes must be 16-128 hex characters."""
        with pytest.raises(ValidationError):
            BlockDto(hash=identity, data=b"\x01", type=Channel.LUMA)
    
    def test_rejects_empty_data(self):
        """Empty payloads are invalid."""
        with pytest.raises(ValidationError):
            BlockDto(hash=HASH, data=b"", type=Channel.LUMA)
    
    def test_rejects_invalid_base64(self):
        """Malformed base64 is rejected."""
        with pytest.raises(ValidationError):
            BlockDto(hash=HASH, data="!!notbase64!!", type=Channel.LUMA)
    
    def test_rejects_unknown_type(self):
        """Only the three channel names are accepted."""
        with pytest.raises(ValidationError):
            BlockDto(hash=HASH, data=b"\x01", type="ALPHA")


class TestCheckMessages:
    """Existence-check request and response."""
    
    def test_response_defaults_to_empty(self):
        """A response without 'missing' means nothing is missing."""
        assert BlockCheckResponse.model_validate({}).missing == []
    
    def test_request_serializes_hashes(self):
        """The request body is a plain list of hex identities."""
        assert BlockCheckRequest(hashes=["ab" * 32]).model_dump() == {"hashes": ["ab" * 32]}
