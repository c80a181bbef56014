"""Exception types raised by the swipe video pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class SwipeVideoError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(SwipeVideoError, ValueError):
    """Layout or video parameters violate an invariant."""


class EmptyInputError(SwipeVideoError, ValueError):
    """A tile list or frame that must not be empty was empty."""


class InvalidPolygonError(SwipeVideoError, ValueError):
    """Polygon vertices cannot be rasterized (empty, too short, or explicitly closed)."""


class InvalidFontError(SwipeVideoError):
    """Font data could not be loaded."""


class ImageCodecError(SwipeVideoError):
    """A picture could not be decoded or encoded."""


class TileSourceError(SwipeVideoError):
    """Tile records could not be read into tiles."""


class EncoderError(SwipeVideoError):
    """The external encoder could not be launched or exited with a failure."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command) if command is not None else []
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "ConfigurationError",
    "EmptyInputError",
    "EncoderError",
    "ImageCodecError",
    "InvalidFontError",
    "InvalidPolygonError",
    "SwipeVideoError",
    "TileSourceError",
]
