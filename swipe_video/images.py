"""Decode/encode boundary between picture files and in-memory canvases."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from swipe_video.canvas import Canvas
from swipe_video.errors import ImageCodecError
from swipe_video.models import Rect

PathLike = Union[str, Path]


def _ensure_bgra(pixels: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if pixels is None:
        return None
    if pixels.dtype == np.uint16:
        pixels = (pixels >> 8).astype(np.uint8)
    elif pixels.dtype != np.uint8:
        return None
    if len(pixels.shape) == 2:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGRA)
    if pixels.shape[2] == 1:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGRA)
    if pixels.shape[2] == 3:
        opaque_alpha = np.full((pixels.shape[0], pixels.shape[1], 1), 255, dtype=pixels.dtype)
        return np.concatenate((pixels, opaque_alpha), axis=2)
    if pixels.shape[2] != 4:
        return None
    return pixels


def decode_image(path: PathLike) -> Canvas:
    """Read a picture file into an RGBA canvas.

    Raises ``FileNotFoundError`` when ``path`` is missing and
    :class:`ImageCodecError` when the file exists but cannot be decoded.
    """
    image_path = Path(path)
    if not image_path.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(image_path))

    # cv2.imread cannot open non-ASCII paths on every platform; decode from bytes instead.
    raw = np.frombuffer(image_path.read_bytes(), dtype=np.uint8)
    pixels = _ensure_bgra(cv2.imdecode(raw, cv2.IMREAD_UNCHANGED)) if raw.size else None
    if pixels is None:
        raise ImageCodecError(f"Failed to decode image {image_path}")
    return Canvas.from_array(cv2.cvtColor(pixels, cv2.COLOR_BGRA2RGBA))


def encode_image(canvas: Canvas, path: PathLike) -> Path:
    """Write ``canvas`` to ``path``; the extension picks the format (``.png`` keeps alpha)."""
    image_path = Path(path)
    extension = image_path.suffix.lower() or ".png"
    if canvas.width == 0 or canvas.height == 0:
        raise ImageCodecError(f"Cannot encode an empty canvas to {image_path}")

    bgra = cv2.cvtColor(canvas.pixels, cv2.COLOR_RGBA2BGRA)
    if extension in {".jpg", ".jpeg", ".bmp"}:
        bgra = cv2.cvtColor(bgra, cv2.COLOR_BGRA2BGR)
    try:
        success, buffer = cv2.imencode(extension, bgra)
    except cv2.error as exc:
        raise ImageCodecError(f"Failed to encode image {image_path}: {exc}") from exc
    if not success:
        raise ImageCodecError(f"Failed to encode image {image_path}")

    image_path.write_bytes(buffer.tobytes())
    return image_path


def fit_within(canvas: Canvas, max_width: int, max_height: int) -> Canvas:
    """Resize ``canvas`` to the largest size inside ``max_width x max_height`` with the same aspect."""
    if canvas.width == 0 or canvas.height == 0 or max_width <= 0 or max_height <= 0:
        return Canvas(0, 0)

    ratio = min(max_width / canvas.width, max_height / canvas.height)
    width = max(1, min(max_width, int(round(canvas.width * ratio))))
    height = max(1, min(max_height, int(round(canvas.height * ratio))))
    if (width, height) == (canvas.width, canvas.height):
        return canvas.copy()

    interpolation = cv2.INTER_AREA if ratio < 1.0 else cv2.INTER_LINEAR
    resized = cv2.resize(canvas.pixels, (width, height), interpolation=interpolation)
    return Canvas.from_array(np.ascontiguousarray(resized))


def crop_region(canvas: Canvas, x: int, y: int, width: int, height: int) -> Canvas:
    """Copy the ``width x height`` region at ``(x, y)``, clipped to the canvas."""
    return canvas.crop(Rect(x, y, width, height))


__all__ = [
    "crop_region",
    "decode_image",
    "encode_image",
    "fit_within",
]
