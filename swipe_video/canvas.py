"""Mutable RGBA pixel buffer that every drawing primitive writes through."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from swipe_video.models import Rect

Color = Tuple[int, int, int, int]

TRANSPARENT: Color = (0, 0, 0, 0)


def normalize_color(color: Sequence[int]) -> Color:
    """Clamp a 3- or 4-channel sequence into an RGBA tuple."""
    channels = [max(0, min(255, int(channel))) for channel in color]
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4:
        raise ValueError(f"Expected 3 or 4 color channels, got {len(channels)}")
    return (channels[0], channels[1], channels[2], channels[3])


class Canvas:
    """Row-major ``height x width x 4`` uint8 grid.

    Every write outside ``[0, width) x [0, height)`` is silently dropped.
    """

    def __init__(self, width: int, height: int, fill: Sequence[int] = TRANSPARENT) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Canvas dimensions must be non-negative, got {width}x{height}")
        self.pixels = np.empty((height, width, 4), dtype=np.uint8)
        self.pixels[...] = normalize_color(fill)

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "Canvas":
        """Wrap an existing ``H x W x 4`` uint8 array without copying it."""
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an HxWx4 array, got shape {pixels.shape}")
        canvas = cls.__new__(cls)
        canvas.pixels = pixels if pixels.dtype == np.uint8 else pixels.astype(np.uint8)
        return canvas

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def bounds(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> Color:
        r, g, b, a = (int(channel) for channel in self.pixels[y, x])
        return (r, g, b, a)

    def draw_pixel(self, x: int, y: int, color: Color) -> None:
        if self.in_bounds(x, y):
            self.pixels[y, x] = color

    def blend_pixel(self, x: int, y: int, color: Color, weight: float) -> None:
        """Mix ``color`` over the pixel at ``(x, y)`` using ``weight`` in ``[0, 1]``."""
        if not self.in_bounds(x, y):
            return
        weight = min(1.0, max(0.0, weight))
        existing = self.pixels[y, x].astype(np.float32)
        mixed = np.asarray(color, dtype=np.float32) * weight + existing * (1.0 - weight)
        self.pixels[y, x] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)

    def fill_span(self, y: int, x_start: int, x_end: int, color: Color) -> None:
        """Fill the inclusive horizontal span ``x_start..x_end`` on row ``y``."""
        if not 0 <= y < self.height:
            return
        if x_start > x_end:
            x_start, x_end = x_end, x_start
        left = max(0, x_start)
        right = min(self.width - 1, x_end)
        if left > right:
            return
        self.pixels[y, left : right + 1] = color

    def fill_rect(self, rect: Rect, color: Color) -> None:
        region = self.bounds.intersect(rect)
        if region is None:
            return
        self.pixels[region.top : region.bottom, region.left : region.right] = color

    def blend_mask(self, x: int, y: int, coverage: np.ndarray, color: Color) -> None:
        """Alpha-blend ``color`` through a ``h x w`` coverage mask placed at ``(x, y)``.

        ``destination = color * coverage + destination * (1 - coverage)`` on all
        four channels; the part of the mask that falls outside the canvas is dropped.
        """
        mask_height, mask_width = coverage.shape[:2]
        target = self.bounds.intersect(Rect(x, y, mask_width, mask_height))
        if target is None:
            return
        mask = coverage[
            target.top - y : target.bottom - y,
            target.left - x : target.right - x,
        ].astype(np.float32)
        mask = np.clip(mask, 0.0, 1.0)[..., None]
        region = self.pixels[target.top : target.bottom, target.left : target.right]
        mixed = np.asarray(color, dtype=np.float32) * mask + region.astype(np.float32) * (1.0 - mask)
        region[...] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)

    def paste(self, source: "Canvas", x: int, y: int) -> None:
        """Copy ``source`` onto this canvas with its top-left corner at ``(x, y)``."""
        target = self.bounds.intersect(Rect(x, y, source.width, source.height))
        if target is None:
            return
        self.pixels[target.top : target.bottom, target.left : target.right] = source.pixels[
            target.top - y : target.bottom - y,
            target.left - x : target.right - x,
        ]

    def crop(self, rect: Rect) -> "Canvas":
        """Return a copy of the region of ``rect`` that lies on the canvas."""
        region: Optional[Rect] = self.bounds.intersect(rect)
        if region is None:
            return Canvas(0, 0)
        return Canvas.from_array(
            self.pixels[region.top : region.bottom, region.left : region.right].copy()
        )

    def copy(self) -> "Canvas":
        return Canvas.from_array(self.pixels.copy())

    def __repr__(self) -> str:
        return f"Canvas(width={self.width}, height={self.height})"


__all__ = ["Canvas", "Color", "TRANSPARENT", "normalize_color"]
