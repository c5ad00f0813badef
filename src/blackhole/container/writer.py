"""
Container Writer
================

Builds containers from deduplication results and moves them to and from disk.

A container is written next to its source image as `<name>.<ext>.blho`
unless an output directory is given.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from blackhole.container.codec import decode, encode
from blackhole.dedup.identity import RAW_DIGEST
from blackhole.dedup.index import DeduplicationIndex
from blackhole.errors import FormatError
from blackhole.models.block import CHANNELS, Channel
from blackhole.models.container import ContainerData


logger = logging.getLogger(__name__)

CONTAINER_SUFFIX = ".blho"


def metadata_file_name(file_name: str) -> str:
    """
    File name as stored in container metadata.
    
    POSIX names that are not valid UTF-8 arrive as surrogate escapes; the
    undecodable bytes become U+FFFD so the metadata stays valid UTF-8.
    """
    return os.fsencode(file_name).decode("utf-8", "replace")


def build_container(
    file_name: str,
    width: int,
    height: int,
    indexes: Mapping[Channel, DeduplicationIndex],
) -> ContainerData:
    """
    Assemble a container from per-channel deduplication indexes.
    
    Identities stored in the container are always raw digests; indexes
    built with another scheme are re-hashed.
    
    Args:
        file_name: Original image file name
        width: Image width before padding
        height: Image height before padding
        indexes: One DeduplicationIndex per channel
    """
    hashes = {}
    for channel in CHANNELS:
        index = indexes[channel]
        if index.scheme == RAW_DIGEST:
            hashes[channel] = index.identities
        else:
            hashes[channel] = [RAW_DIGEST.digest(p) for p in index.unique_blocks]
    
    return ContainerData(
        file_name=metadata_file_name(file_name),
        width=width,
        height=height,
        hashes=hashes,
        position_maps={channel: indexes[channel].position_map for channel in CHANNELS},
    )


def container_path_for(image_path: Union[str, Path], output_dir: Optional[Union[str, Path]] = None) -> Path:
    """Path of the container belonging to an image."""
    image_path = Path(image_path)
    name = image_path.name + CONTAINER_SUFFIX
    if output_dir is not None:
        return Path(output_dir) / name
    return image_path.with_name(name)


def write_container(path: Union[str, Path], data: ContainerData) -> Path:
    """
    Encode and write a container file.
    
    Returns:
        Path that was written
    """
    path = Path(path)
    blob = encode(data)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(blob)
    
    summary = data.summary()
    logger.info(
        f"BLHO v2 written: {path.name} "
        f"total blocks={summary['total_blocks']}, "
        f"unique Y={summary['unique_y']}, U={summary['unique_u']}, V={summary['unique_v']}, "
        f"size={len(blob) / 1024:.1f} KB"
    )
    return path


def read_container(path: Union[str, Path]) -> ContainerData:
    """
    Read and decode a container file.
    
    Raises:
        FormatError: If the file is unreadable or malformed
    """
    path = Path(path)
    try:
        blob = path.read_bytes()
    except OSError as e:
        raise FormatError(f"Cannot read container {path}: {e}")
    return decode(blob)
