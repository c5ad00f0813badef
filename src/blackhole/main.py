"""
Blackhole Command Line
======================

Entry point for batch processing of an image directory.

Usage:
    blackhole                 # processes settings.processing.input_dir
    blackhole path/to/images

Every matching image gets a .blho container and its missing unique blocks
are uploaded to the configured block store. Per-file failures are logged
and do not stop the run; an inaccessible directory exits with status 1.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from blackhole.config import Settings, settings, setup_logging
from blackhole.pipeline import FileReport, ImageProcessor
from blackhole.store import BlockStoreClient


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="blackhole",
        description="Deduplicate image blocks into .blho containers and sync them to a block store",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory of images to process (default: processing.input_dir)",
    )
    return parser.parse_args(argv)


async def run(directory: str, config: Settings) -> List[FileReport]:
    """Process a directory with a store client built from config."""
    if not config.store.enabled:
        logger.info("Block store sync disabled")
        processor = ImageProcessor.from_settings(config)
        return await processor.process_directory(directory)
    
    async with BlockStoreClient(
        config.store.url,
        batch_size=config.store.batch_size,
        timeout=config.store.timeout_seconds,
    ) as client:
        processor = ImageProcessor.from_settings(config, store_client=client)
        reports = await processor.process_directory(directory)
        logger.info(f"Block store client metrics: {client.metrics.to_dict()}")
        return reports


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI; returns the process exit status."""
    args = parse_args(argv)
    setup_logging(settings)
    
    directory = args.directory or settings.processing.input_dir
    logger.info(f"Processing directory: {directory}")
    
    try:
        reports = asyncio.run(run(directory, settings))
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        logger.error(f"Cannot process directory: {e}")
        return 1
    
    failed = [report for report in reports if not report.ok]
    for report in failed:
        logger.warning(f"Failed: {report.path.name}: {report.error}")
    
    logger.info(f"Done: {len(reports) - len(failed)}/{len(reports)} files processed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
