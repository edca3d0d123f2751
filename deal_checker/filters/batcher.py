# deal_checker/filters/batcher.py

"""Split an ASIN sequence into provider-sized batches."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Return contiguous slices of *items*, each at most *size* long."""
    if size < 1:
        msg = f"Batch size must be positive, got {size}"
        raise ValueError(msg)
    return [
        list(items[start:start + size])
        for start in range(0, len(items), size)
    ]
