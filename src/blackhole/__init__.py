"""
Blackhole
=========

Block-level deduplication for collections of similar raster images.

Each image is losslessly transformed (reversible color transform), cut into
8x8 blocks, and deduplicated per channel. The result is persisted as a
compact BLHO container (block identities + position maps) while only the
unique block payloads the remote store does not already hold are uploaded.

Components:
    - imaging: color transform, decoding, decomposition, reconstruction
    - dedup: content identities and the per-channel deduplication index
    - container: BLHO binary container codec
    - store: block store client (check-then-upload) and reference server
    - pipeline: per-file and per-directory processing

Example:
    from blackhole.config import settings
    from blackhole.pipeline import ImageProcessor
    
    processor = ImageProcessor.from_settings(settings, store_client=None)
    reports = await processor.process_directory("img")
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
