"""
BLHO Container Codec
====================

Binary layout (big-endian throughout):

    magic            4 bytes   b"BLHO"
    version          1 byte    2
    metadata_length  int32     N
    metadata         N bytes   UTF-8 JSON (ContainerMetadata)
    hash lists       Y, U, V:  uint32 count n, then n x 32-byte digests
    position maps    Y, U, V:  uint32 count n, then n x uint32 indices

Encoding is deterministic for a given ContainerData. Decoding validates
every bound and cross-checks the metadata against the lists it describes;
any violation raises FormatError and no partial result is returned.
"""

import json
import struct
from typing import Dict, List

from pydantic import ValidationError as PydanticValidationError

from blackhole.dedup.identity import DIGEST_SIZE
from blackhole.errors import FormatError
from blackhole.models.block import CHANNELS, Channel
from blackhole.models.container import CONTAINER_FORMAT, ContainerData, ContainerMetadata


MAGIC = b"BLHO"
VERSION = 2

HEADER_FMT = ">4sBi"
HEADER_SIZE = struct.calcsize(HEADER_FMT)  # = 9 bytes

COUNT_FMT = ">I"
COUNT_SIZE = struct.calcsize(COUNT_FMT)


# ----------------------------- encode -------------------------------------

def _validate(data: ContainerData) -> None:
    total = len(data.position_maps.get(Channel.LUMA, []))
    for channel in CHANNELS:
        if channel not in data.hashes or channel not in data.position_maps:
            raise FormatError(f"Missing {channel.value} hash list or position map")
        
        hashes = data.hashes[channel]
        for i, digest in enumerate(hashes):
            if len(digest) != DIGEST_SIZE:
                raise FormatError(
                    f"Invalid {channel.value} hash #{i}: "
                    f"{len(digest)} bytes, expected {DIGEST_SIZE}"
                )
        
        positions = data.position_maps[channel]
        if len(positions) != total:
            raise FormatError(
                f"{channel.value} position map has {len(positions)} entries, expected {total}"
            )
        for index in positions:
            if index < 0 or index >= len(hashes):
                raise FormatError(
                    f"{channel.value} position {index} outside 0..{len(hashes) - 1}"
                )


def encode(data: ContainerData) -> bytes:
    """
    Serialize a container.
    
    Args:
        data: Hash lists and position maps for Y, U, V
        
    Returns:
        Container bytes
        
    Raises:
        FormatError: If a hash is not 32 bytes, the position maps are invalid
            or the metadata cannot be encoded as UTF-8
    """
    _validate(data)
    
    metadata = data.metadata().model_dump()
    try:
        meta_json = json.dumps(metadata, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except UnicodeEncodeError as e:
        raise FormatError(f"Container metadata is not encodable as UTF-8: {e}")
    
    parts = [struct.pack(HEADER_FMT, MAGIC, VERSION, len(meta_json)), meta_json]
    
    for channel in CHANNELS:
        hashes = data.hashes[channel]
        parts.append(struct.pack(COUNT_FMT, len(hashes)))
        parts.extend(bytes(digest) for digest in hashes)
    
    for channel in CHANNELS:
        positions = data.position_maps[channel]
        parts.append(struct.pack(COUNT_FMT, len(positions)))
        parts.append(struct.pack(f">{len(positions)}I", *positions))
    
    return b"".join(parts)


# ----------------------------- decode -------------------------------------

class _Reader:
    """Bounds-checked cursor over container bytes."""
    
    def __init__(self, blob: bytes) -> None:
        self._blob = memoryview(blob)
        self.offset = 0
    
    @property
    def remaining(self) -> int:
        return len(self._blob) - self.offset
    
    def take(self, size: int, what: str) -> bytes:
        if size < 0 or size > self.remaining:
            raise FormatError(
                f"Container truncated reading {what}: need {size} bytes "
                f"at offset {self.offset}, {self.remaining} left"
            )
        chunk = bytes(self._blob[self.offset:self.offset + size])
        self.offset += size
        return chunk
    
    def count(self, what: str) -> int:
        return struct.unpack(COUNT_FMT, self.take(COUNT_SIZE, f"{what} count"))[0]


def _decode_metadata(raw: bytes) -> ContainerMetadata:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Container metadata is not UTF-8: {e}")
    try:
        return ContainerMetadata.model_validate_json(text)
    except PydanticValidationError as e:
        raise FormatError(f"Invalid container metadata: {e}")


def decode(blob: bytes) -> ContainerData:
    """
    Parse container bytes.
    
    Args:
        blob: Full container contents
        
    Returns:
        ContainerData with hash lists and position maps for Y, U, V
        
    Raises:
        FormatError: On wrong magic, unsupported version, truncation,
            inconsistent metadata, out-of-range indices or trailing bytes
    """
    reader = _Reader(blob)
    
    magic, version, meta_len = struct.unpack(HEADER_FMT, reader.take(HEADER_SIZE, "header"))
    if magic != MAGIC:
        raise FormatError(f"Invalid magic {magic!r}, expected {MAGIC!r}")
    if version != VERSION:
        raise FormatError(f"Unsupported container version {version} (expected {VERSION})")
    if meta_len < 0:
        raise FormatError(f"Negative metadata length {meta_len}")
    
    metadata = _decode_metadata(reader.take(meta_len, "metadata"))
    if metadata.format != CONTAINER_FORMAT:
        raise FormatError(f"Unexpected metadata format {metadata.format!r}")
    
    hashes: Dict[Channel, List[bytes]] = {}
    for channel in CHANNELS:
        n = reader.count(f"{channel.value} hash list")
        if n * DIGEST_SIZE > reader.remaining:
            raise FormatError(
                f"Container truncated: {channel.value} declares {n} hashes, "
                f"{reader.remaining} bytes left"
            )
        hashes[channel] = [
            reader.take(DIGEST_SIZE, f"{channel.value} hash") for _ in range(n)
        ]
    
    position_maps: Dict[Channel, List[int]] = {}
    for channel in CHANNELS:
        n = reader.count(f"{channel.value} position map")
        raw = reader.take(n * COUNT_SIZE, f"{channel.value} position map")
        position_maps[channel] = list(struct.unpack(f">{n}I", raw))
    
    if reader.remaining:
        raise FormatError(f"{reader.remaining} trailing bytes after position maps")
    
    data = ContainerData(
        file_name=metadata.file,
        width=metadata.width,
        height=metadata.height,
        hashes=hashes,
        position_maps=position_maps,
    )
    _validate(data)
    
    for channel in CHANNELS:
        if metadata.unique_count(channel) != len(hashes[channel]):
            raise FormatError(
                f"Metadata declares {metadata.unique_count(channel)} unique "
                f"{channel.value} blocks, container holds {len(hashes[channel])}"
            )
    if metadata.total_blocks != data.total_blocks:
        raise FormatError(
            f"Metadata declares {metadata.total_blocks} blocks, "
            f"position maps hold {data.total_blocks}"
        )
    
    return data
