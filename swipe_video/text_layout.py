"""Glyph layout and auto-fitting text rendering onto a :class:`Canvas`.

Fonts are FreeType faces loaded through Pillow. A *scale* is the font's pixel
size; every metric below is evaluated at the scale it is asked for, so the
centred renderer measures at the maximum scale first and then re-measures at
the scale it settles on.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from swipe_video.canvas import Canvas, Color
from swipe_video.errors import InvalidFontError
from swipe_video.models import Rect

LOGGER = logging.getLogger("swipe_video")

MIN_SCALE = 1.0
MAX_FIT_PASSES = 8
FIT_REFINE_STEP = 0.5

GlyphBounds = Tuple[int, int, int, int]


class GlyphFont:
    """A scalable font exposing glyph metrics and coverage masks at any pixel scale."""

    def __init__(
        self,
        loader: Callable[[float], ImageFont.FreeTypeFont],
        *,
        name: str = "font",
    ) -> None:
        self.name = name
        self._loader = loader
        self._faces: Dict[float, ImageFont.FreeTypeFont] = {}
        self._masks: Dict[Tuple[float, str], Optional[np.ndarray]] = {}
        # Fail at construction rather than on the first frame.
        self.face(MIN_SCALE * 12)

    @classmethod
    def from_bytes(cls, data: bytes, *, name: str = "<memory>") -> "GlyphFont":
        if not data:
            raise InvalidFontError(f"Font data for {name} is empty")

        def loader(size: float) -> ImageFont.FreeTypeFont:
            return ImageFont.truetype(
                io.BytesIO(data),
                size=size,
                layout_engine=ImageFont.Layout.BASIC,
            )

        return cls(loader, name=name)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "GlyphFont":
        font_path = Path(path)
        return cls.from_bytes(font_path.read_bytes(), name=str(font_path))

    @classmethod
    def default(cls) -> "GlyphFont":
        """Pillow's bundled scalable font."""

        def loader(size: float) -> ImageFont.FreeTypeFont:
            face = ImageFont.load_default(size=size)
            if not isinstance(face, ImageFont.FreeTypeFont):
                raise InvalidFontError("Pillow was built without FreeType support")
            return face

        return cls(loader, name="pillow-default")

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    @staticmethod
    def _size_key(scale: float) -> float:
        return round(max(MIN_SCALE, float(scale)), 2)

    def face(self, scale: float) -> ImageFont.FreeTypeFont:
        size = self._size_key(scale)
        face = self._faces.get(size)
        if face is not None:
            return face
        try:
            face = self._loader(size)
        except InvalidFontError:
            raise
        except (OSError, ValueError) as exc:
            raise InvalidFontError(f"Failed to load font {self.name} at size {size}: {exc}") from exc
        self._faces[size] = face
        return face

    def ascent(self, scale: float) -> int:
        return int(self.face(scale).getmetrics()[0])

    def line_height(self, scale: float) -> int:
        ascent, descent = self.face(scale).getmetrics()
        return int(ascent + descent)

    def advance(self, scale: float, char: str) -> float:
        return float(self.face(scale).getlength(char))

    def kerning(self, scale: float, left: str, right: str) -> float:
        face = self.face(scale)
        return float(face.getlength(left + right) - face.getlength(left) - face.getlength(right))

    def glyph_bounds(self, scale: float, char: str) -> GlyphBounds:
        """Ink box of ``char`` relative to a pen at the top-left of the line (ascender anchor)."""
        left, top, right, bottom = self.face(scale).getbbox(char, anchor="la")
        return int(left), int(top), int(right), int(bottom)

    def coverage(self, scale: float, char: str) -> Optional[np.ndarray]:
        """Per-pixel coverage in ``[0, 1]`` over :meth:`glyph_bounds`, or ``None`` without ink."""
        key = (self._size_key(scale), char)
        if key in self._masks:
            return self._masks[key]

        left, top, right, bottom = self.glyph_bounds(scale, char)
        mask: Optional[np.ndarray] = None
        if right > left and bottom > top:
            image = Image.new("L", (right - left, bottom - top), 0)
            ImageDraw.Draw(image).text(
                (-left, -top),
                char,
                font=self.face(scale),
                fill=255,
                anchor="la",
            )
            values = np.asarray(image, dtype=np.float32) / 255.0
            if np.any(values):
                mask = values
        self._masks[key] = mask
        return mask

    def __repr__(self) -> str:
        return f"GlyphFont(name={self.name!r})"


@dataclass(frozen=True)
class PlacedGlyph:
    """A glyph with ink, positioned on a single laid-out line."""

    char: str
    pen_x: float
    bounds: GlyphBounds


def layout_line(font: GlyphFont, scale: float, text: str) -> Tuple[List[PlacedGlyph], float, int]:
    """Lay out ``text`` left to right on one line.

    Returns the glyphs that carry ink, the total advance width and the tallest
    glyph box. Newlines are not interpreted.
    """
    glyphs: List[PlacedGlyph] = []
    pen_x = 0.0
    height = 0
    previous: Optional[str] = None

    for char in text:
        if previous is not None:
            pen_x += font.kerning(scale, previous, char)
        left, top, right, bottom = font.glyph_bounds(scale, char)
        if right > left and bottom > top:
            glyphs.append(PlacedGlyph(char=char, pen_x=pen_x, bounds=(left, top, right, bottom)))
            height = max(height, bottom - top)
        pen_x += font.advance(scale, char)
        previous = char

    return glyphs, pen_x, height


def measure(font: GlyphFont, scale: float, text: str) -> Tuple[int, int]:
    """Width and height of ``text`` rendered on a single line at ``scale``."""
    _, width, height = layout_line(font, scale, text)
    return int(width), int(height)


def draw_text(
    canvas: Canvas,
    color: Color,
    origin: Tuple[int, int],
    scale: float,
    font: GlyphFont,
    text: str,
) -> None:
    """Blend ``text`` onto ``canvas`` with the top-left of its line box at ``origin``."""
    x, y = int(origin[0]), int(origin[1])
    glyphs, _, _ = layout_line(font, scale, text)
    for glyph in glyphs:
        mask = font.coverage(scale, glyph.char)
        if mask is None:
            continue
        left, top, _, _ = glyph.bounds
        canvas.blend_mask(x + int(round(glyph.pen_x + left)), y + top, mask, color)


def fit_scale(font: GlyphFont, rect: Rect, max_scale: float, lines: Sequence[str]) -> float:
    """Largest scale, never above ``max_scale``, at which ``lines`` fit inside ``rect``.

    The first reduction is the uniform ratio ``min(rect.width / raw_width,
    rect.height / raw_height)`` measured at ``max_scale``. Hinting can leave the
    re-measured block a pixel over, so the fit is re-checked and nudged down
    until it holds or the scale bottoms out.
    """
    scale = float(max_scale)
    floor = min(MIN_SCALE, scale)
    if not lines:
        return scale

    for attempt in range(MAX_FIT_PASSES):
        raw_width = max(measure(font, scale, line)[0] for line in lines)
        raw_height = len(lines) * font.line_height(scale)
        if raw_width <= rect.width and raw_height <= rect.height:
            return scale
        if scale <= floor:
            break

        ratios = []
        if raw_width > 0:
            ratios.append(rect.width / raw_width)
        if raw_height > 0:
            ratios.append(rect.height / raw_height)
        candidate = scale * min(ratios) if ratios else scale
        if attempt > 0:
            candidate = min(candidate, scale - FIT_REFINE_STEP)
        scale = max(floor, candidate)

    LOGGER.debug("Text block %r does not fit %s even at scale %.2f", lines, rect, scale)
    return scale


def draw_text_centered(
    canvas: Canvas,
    color: Color,
    rect: Rect,
    max_scale: float,
    font: GlyphFont,
    text: str,
) -> float:
    """Draw multi-line ``text`` centred in ``rect``, shrinking it uniformly to fit.

    Lines are split on line breaks and trimmed. Each line is centred
    horizontally on its own; the block is centred vertically as a whole.
    Returns the scale the text was drawn at.
    """
    lines = [line.strip() for line in text.splitlines()]
    if not lines or rect.is_empty:
        return float(max_scale)

    scale = fit_scale(font, rect, max_scale, lines)
    line_height = font.line_height(scale)
    top = rect.top + (rect.height - line_height * len(lines)) // 2

    for row, line in enumerate(lines):
        width, _ = measure(font, scale, line)
        left = rect.left + (rect.width - width) // 2
        draw_text(canvas, color, (left, top + line_height * row), scale, font, line)
    return scale


__all__ = [
    "GlyphFont",
    "PlacedGlyph",
    "draw_text",
    "draw_text_centered",
    "fit_scale",
    "layout_line",
    "measure",
]
