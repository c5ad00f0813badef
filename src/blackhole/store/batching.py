"""
Batch Partitioning
==================

The single place where batch boundaries are computed.

Batches are contiguous, keep input order, and only the last one may be
shorter than the batch size.
"""

from typing import Iterator, List, Sequence, TypeVar


T = TypeVar("T")


def batch_ranges(total: int, batch_size: int) -> Iterator[range]:
    """
    Yield index ranges covering [0, total) in batches.
    
    Args:
        total: Number of items
        batch_size: Maximum items per batch, >= 1
        
    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    for start in range(0, total, batch_size):
        yield range(start, min(start + batch_size, total))


def partition(items: Sequence[T], batch_size: int) -> List[Sequence[T]]:
    """Split a sequence into contiguous slices of at most batch_size items."""
    return [items[r.start:r.stop] for r in batch_ranges(len(items), batch_size)]
