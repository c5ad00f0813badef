"""
Container
=========

BLHO container format: codec plus file helpers.
"""

from blackhole.container.codec import MAGIC, VERSION, decode, encode
from blackhole.container.writer import (
    CONTAINER_SUFFIX,
    build_container,
    container_path_for,
    metadata_file_name,
    read_container,
    write_container,
)

__all__ = [
    "MAGIC",
    "VERSION",
    "encode",
    "decode",
    "CONTAINER_SUFFIX",
    "build_container",
    "metadata_file_name",
    "container_path_for",
    "read_container",
    "write_container",
]
