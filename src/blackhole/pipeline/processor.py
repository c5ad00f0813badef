"""
Image Processor
===============

Per-file and per-directory processing pipeline.

Per image:
    Decode -> Decompose -> Deduplicate -> write container
           -> (CheckMissing -> UploadMissing) for Y, U, V concurrently

Per directory:
    - Files are picked by suffix, sorted by name
    - At most max_concurrent_files images are in flight; CPU-bound
      stages run in worker threads so network calls overlap
    - Each file is fault-isolated: its failure is logged and reported,
      the other files continue
    - An inaccessible directory raises immediately

Every image gets its own fresh DeduplicationIndex per channel; nothing is
shared between images except the remote store.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from blackhole.container.writer import build_container, container_path_for, write_container
from blackhole.dedup.identity import LENGTH_PREFIXED_DIGEST
from blackhole.dedup.index import DeduplicationIndex, deduplicate
from blackhole.imaging.decomposer import BlockDecomposer
from blackhole.imaging.image_decoder import decode_image_file
from blackhole.models.block import CHANNELS, Channel, PaddingPolicy
from blackhole.models.container import ContainerData
from blackhole.store.client import BlockStoreClient, ChannelSync


logger = logging.getLogger(__name__)


@dataclass
class PreparedImage:
    """CPU-side result for one image, before any network call."""
    
    path: Path
    container: ContainerData
    container_path: Path
    indexes: Dict[Channel, DeduplicationIndex]


@dataclass
class FileReport:
    """
    Outcome of processing one file.
    
    Attributes:
        path: Source image
        ok: False if the file failed before completion
        container_path: Written container, if any
        total_blocks: Number of block positions
        unique_blocks: Unique payloads per channel
        channels: Store synchronisation per channel (empty if disabled)
        error: Failure description when ok is False
    """
    
    path: Path
    ok: bool
    container_path: Optional[Path] = None
    total_blocks: int = 0
    unique_blocks: Dict[Channel, int] = field(default_factory=dict)
    channels: List[ChannelSync] = field(default_factory=list)
    error: Optional[str] = None
    
    @property
    def synced(self) -> bool:
        """True when every channel check and upload succeeded."""
        return all(sync.ok for sync in self.channels)


def network_payloads(index: DeduplicationIndex) -> Dict[str, bytes]:
    """Unique payloads keyed by their length-prefixed hex identity, first-seen order."""
    return {LENGTH_PREFIXED_DIGEST.hexdigest(payload): payload for payload in index.unique_blocks}


class ImageProcessor:
    """
    Runs the full pipeline over files and directories.
    
    Attributes:
        store_client: Block store client, or None to skip synchronisation
        decomposer: Block decomposer (carries the padding policy)
        output_dir: Directory for containers (None = beside each image)
        extensions: Lower-case suffixes processed in a directory
        max_concurrent_files: Images processed at the same time
        
    Example:
        async with BlockStoreClient(url) as client:
            processor = ImageProcessor(store_client=client)
            reports = await processor.process_directory("img")
    """
    
    def __init__(
        self,
        store_client: Optional[BlockStoreClient] = None,
        padding: PaddingPolicy = PaddingPolicy.EDGE,
        output_dir: Optional[Union[str, Path]] = None,
        extensions: Iterable[str] = (".jpg", ".jpeg"),
        max_concurrent_files: int = 2,
    ) -> None:
        if max_concurrent_files < 1:
            raise ValueError("max_concurrent_files must be >= 1")
        
        self.store_client = store_client
        self.decomposer = BlockDecomposer(padding=padding)
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.max_concurrent_files = max_concurrent_files
    
    @classmethod
    def from_settings(cls, settings, store_client: Optional[BlockStoreClient] = None) -> "ImageProcessor":
        """Build a processor from the processing section of Settings."""
        processing = settings.processing
        return cls(
            store_client=store_client,
            padding=processing.padding,
            output_dir=processing.output_dir,
            extensions=processing.extensions,
            max_concurrent_files=processing.max_concurrent_files,
        )
    
    # -------------------------------------------------------------------------
    # Single file
    # -------------------------------------------------------------------------
    
    def prepare(self, path: Union[str, Path]) -> PreparedImage:
        """
        Decode, decompose, deduplicate and write the container for one image.
        
        Raises:
            DecodeError: If the image cannot be decoded
            TransformRangeError: If the color transform goes out of range
            FormatError: If the container cannot be encoded
            OSError: If the container cannot be written
        """
        path = Path(path)
        image = decode_image_file(path)
        height, width = image.shape[:2]
        
        blocks = self.decomposer.decompose(image)
        indexes = deduplicate(blocks)
        
        container = build_container(path.name, width, height, indexes)
        container_path = write_container(container_path_for(path, self.output_dir), container)
        
        return PreparedImage(
            path=path,
            container=container,
            container_path=container_path,
            indexes=indexes,
        )
    
    async def sync_blocks(self, indexes: Mapping[Channel, DeduplicationIndex]) -> List[ChannelSync]:
        """Check and upload every channel concurrently; empty if no store client."""
        if self.store_client is None:
            return []
        
        return list(await asyncio.gather(*(
            self.store_client.sync_channel(network_payloads(indexes[channel]), channel)
            for channel in CHANNELS
        )))
    
    async def process_file(self, path: Union[str, Path]) -> FileReport:
        """
        Run the whole pipeline for one image.
        
        Errors propagate to the caller; use process_directory for
        fault-isolated batch runs.
        """
        path = Path(path)
        logger.info(f"Processing file: {path.name}")
        
        prepared = await asyncio.to_thread(self.prepare, path)
        channels = await self.sync_blocks(prepared.indexes)
        
        unique = {channel: len(prepared.indexes[channel]) for channel in CHANNELS}
        logger.info(
            f"File '{path.name}' processed: "
            f"{unique[Channel.LUMA]} Y blocks, "
            f"{unique[Channel.CHROMA_CB]} U blocks, "
            f"{unique[Channel.CHROMA_CR]} V blocks (unique)"
        )
        
        return FileReport(
            path=path,
            ok=True,
            container_path=prepared.container_path,
            total_blocks=prepared.container.total_blocks,
            unique_blocks=unique,
            channels=channels,
        )
    
    # -------------------------------------------------------------------------
    # Directory
    # -------------------------------------------------------------------------
    
    def list_images(self, directory: Union[str, Path]) -> List[Path]:
        """
        List processable images in a directory, sorted by name.
        
        Raises:
            FileNotFoundError: If the directory does not exist
            NotADirectoryError: If the path is not a directory
            PermissionError: If the directory cannot be listed
        """
        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"'{directory}' does not exist")
        if not directory.is_dir():
            raise NotADirectoryError(f"'{directory}' is not a directory")
        
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in self.extensions
        )
    
    async def _process_isolated(self, path: Path, semaphore: asyncio.Semaphore) -> FileReport:
        async with semaphore:
            try:
                return await self.process_file(path)
            except Exception as e:
                logger.error(f"Error processing {path.name}: {e}")
                return FileReport(path=path, ok=False, error=str(e))
    
    async def process_directory(self, directory: Union[str, Path]) -> List[FileReport]:
        """
        Process every matching image in a directory.
        
        Returns:
            One FileReport per file, in file-name order
            
        Raises:
            FileNotFoundError, NotADirectoryError, PermissionError:
                If the directory is inaccessible
        """
        files = self.list_images(directory)
        if not files:
            logger.warning(f"No images matching {', '.join(self.extensions)} in {directory}")
            return []
        
        semaphore = asyncio.Semaphore(self.max_concurrent_files)
        reports = await asyncio.gather(*(
            self._process_isolated(path, semaphore) for path in files
        ))
        
        failed = sum(1 for report in reports if not report.ok)
        logger.info(
            f"Directory '{directory}' done: {len(reports) - failed} processed, {failed} failed"
        )
        return list(reports)
