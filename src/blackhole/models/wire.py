"""
Block Store Wire Schema
=======================

Pydantic models for the check/upload protocol spoken with the block store.

Check:
    POST {base}/check?type=LUMA
    request:  {"hashes": ["9f86d0...", ...]}
    response: {"missing": ["9f86d0...", ...]}

Upload:
    POST {base}/upload?type=LUMA
    request:  {"blocks": [{"hash": "9f86d0...", "data": "<base64>", "type": "LUMA"}, ...]}
    response: any 2xx status, body ignored

Block identities on the wire are lowercase hex SHA-256 digests of the
length-prefixed payload (see blackhole.dedup.identity).
"""

import base64
import binascii
from typing import List

from pydantic import BaseModel, Field, field_serializer, field_validator

from blackhole.models.block import Channel


HASH_PATTERN = r"^[a-fA-F0-9]{16,128}$"


class BlockCheckRequest(BaseModel):
    """Request body of the existence check."""
    
    hashes: List[str] = Field(..., description="Hex block identities to check")


class BlockCheckResponse(BaseModel):
    """Response body of the existence check."""
    
    missing: List[str] = Field(
        default_factory=list,
        description="Identities the store does not hold",
    )


class BlockDto(BaseModel):
    """
    One block entry of an upload batch.
    
    Attributes:
        hash: Hex identity of the payload (16-128 hex characters)
        data: Raw payload bytes, base64 encoded on the wire; never empty
        type: Channel the payload belongs to
    """
    
    hash: str = Field(..., pattern=HASH_PATTERN, description="Hex block identity")
    data: bytes = Field(..., min_length=1, description="Block payload")
    type: Channel = Field(..., description="Block channel")
    
    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value):
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except binascii.Error as e:
                raise ValueError(f"data is not valid base64: {e}")
        return value
    
    @field_serializer("data")
    def _encode_data(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")


class BlockBatchUploadRequest(BaseModel):
    """Request body of one upload batch."""
    
    blocks: List[BlockDto] = Field(..., description="Blocks in this batch")
