"""Overlapping sliding-window partitioning of the tile strip."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

from swipe_video.errors import ConfigurationError
from swipe_video.models import Frame

T = TypeVar("T")


def window_starts(count: int, step: int, overlap: int) -> range:
    """Start index of every window over ``count`` items."""
    if count <= overlap:
        raise ConfigurationError(
            f"Need more than {overlap} tiles to build overlapping windows, got {count}"
        )
    if step <= overlap or overlap < 0:
        raise ConfigurationError(
            f"Window step must exceed the overlap (step={step}, overlap={overlap})"
        )
    return range(0, count - overlap, step - overlap)


def partition(items: Sequence[T], step: int, overlap: int) -> List[Frame[T]]:
    """Split ``items`` into windows of up to ``step`` items sharing ``overlap`` at each boundary.

    Windows start every ``step - overlap`` items; the last one is truncated at
    the end of the sequence. No window starts inside the trailing ``overlap``
    items, because such a window would hold nothing its predecessor did not.

    >>> [len(frame) for frame in partition(list(range(10)), 3, 1)]
    [3, 3, 3, 3, 2]
    """
    count = len(items)
    return [
        Frame(items, start, min(start + step, count))
        for start in window_starts(count, step, overlap)
    ]


__all__ = ["partition", "window_starts"]
