"""
Pipeline
========

Per-file and per-directory orchestration of decode, decomposition,
deduplication, container write and block store synchronisation.
"""

from blackhole.pipeline.processor import (
    FileReport,
    ImageProcessor,
    PreparedImage,
    network_payloads,
)

__all__ = [
    "FileReport",
    "ImageProcessor",
    "PreparedImage",
    "network_payloads",
]
