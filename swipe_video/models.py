"""Data models used across the swipe video pipeline."""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Iterator, Optional, Sequence, Tuple, TypeVar, Union, overload

T = TypeVar("T")


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with a signed origin and exclusive right/bottom edges."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rect dimensions must be non-negative, got {self.width}x{self.height}"
            )

    @classmethod
    def from_bounds(cls, left: int, top: int, right: int, bottom: int) -> "Rect":
        return cls(left, top, max(0, right - left), max(0, bottom - top))

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def resized(self, width: int, height: int) -> "Rect":
        """Return a rect with the same origin and a new size."""
        return Rect(self.x, self.y, width, height)

    def intersect(self, other: "Rect") -> Optional["Rect"]:
        """Return the overlapping region, or ``None`` when the rects do not overlap."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)


def _caption_tuple(lines: Union[str, Sequence[str]]) -> Tuple[str, ...]:
    if isinstance(lines, str):
        return (lines,)
    return tuple(str(line) for line in lines)


@dataclass(frozen=True)
class Tile:
    """One captioned picture in the source strip.

    Construction fails with :class:`FileNotFoundError` when the picture does not
    exist, so a ``Tile`` always refers to a file that was present when it was made.
    """

    pic_path: Path
    text_up: Tuple[str, ...] = ()
    text_down: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        path = Path(self.pic_path)
        if not path.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path))
        object.__setattr__(self, "pic_path", path)
        object.__setattr__(self, "text_up", _caption_tuple(self.text_up))
        object.__setattr__(self, "text_down", _caption_tuple(self.text_down))


@dataclass(frozen=True)
class Frame(Generic[T]):
    """A contiguous window ``source[start:stop]`` that references, not copies, its items."""

    source: Sequence[T] = field(repr=False)
    start: int
    stop: int

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.stop <= len(self.source):
            raise ValueError(
                f"Frame bounds [{self.start}, {self.stop}) outside sequence of {len(self.source)}"
            )

    def __len__(self) -> int:
        return self.stop - self.start

    def __iter__(self) -> Iterator[T]:
        for index in range(self.start, self.stop):
            yield self.source[index]

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: Union[int, slice]) -> Union[T, Sequence[T]]:
        if isinstance(index, slice):
            return [self.source[i] for i in range(self.start, self.stop)[index]]
        return self.source[range(self.start, self.stop)[index]]

    @property
    def indices(self) -> range:
        return range(self.start, self.stop)


@dataclass
class RenderedVideoResult:
    """Summary of a finished swipe video run.

    ``clip_paths`` lists the intermediate clips only when they were kept;
    otherwise it is empty because the clips are removed after concatenation.
    """

    output_path: Path
    frame_count: int
    clip_paths: Tuple[Path, ...]
    duration_seconds: float


__all__ = [
    "Frame",
    "Rect",
    "RenderedVideoResult",
    "Tile",
]
