"""Compose captioned tiles side by side into one wide frame image."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from swipe_video.canvas import Canvas, Color
from swipe_video.config import LayoutParameters
from swipe_video.errors import EmptyInputError
from swipe_video.images import decode_image, fit_within
from swipe_video.models import Rect, Tile
from swipe_video.raster import draw_filled_rounded_rect, draw_line
from swipe_video.text_layout import GlyphFont, draw_text_centered


class FrameCompositor:
    """Render tiles (picture, caption panels, caption text, divider) into frame canvases."""

    def __init__(
        self,
        layout: LayoutParameters,
        font: GlyphFont,
        *,
        logger: logging.Logger,
    ) -> None:
        self.layout = layout
        self.font = font
        self.logger = logger

    # ------------------------------------------------------------------
    # Regions
    # ------------------------------------------------------------------

    def upper_caption_rect(self) -> Rect:
        layout = self.layout
        return Rect(1, layout.picture_height, layout.tile_width - 1, layout.text_up_height)

    def lower_caption_rect(self) -> Rect:
        layout = self.layout
        return Rect(
            1,
            layout.picture_height + layout.text_up_height,
            layout.tile_width - 1,
            layout.text_down_height,
        )

    def caption_line_rects(self, top: int, region_height: int, count: int) -> list[Rect]:
        """Evenly split ``region_height`` rows starting at ``top`` into ``count`` line boxes."""
        if count <= 0:
            return []
        padding = self.layout.caption_padding
        line_height = region_height // count
        width = self.layout.tile_width - 2 * padding
        return [Rect(padding, top + index * line_height, width, line_height) for index in range(count)]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _draw_caption(self, canvas: Canvas, lines: Sequence[str], rects: Iterable[Rect]) -> None:
        for line, rect in zip(lines, rects):
            draw_text_centered(
                canvas,
                self.layout.text_color,
                rect,
                self.layout.max_text_scale,
                self.font,
                line,
            )

    def _draw_panel(self, canvas: Canvas, rect: Rect, color: Color) -> None:
        if rect.is_empty:
            return
        draw_filled_rounded_rect(canvas, rect, self.layout.caption_radius, color)

    def render_tile(self, tile: Tile) -> Canvas:
        """Draw one tile into a ``tile_width x screen_height`` canvas."""
        layout = self.layout
        canvas = Canvas(layout.tile_width, layout.screen_height)

        picture = fit_within(decode_image(tile.pic_path), layout.tile_width, layout.picture_height)
        canvas.paste(
            picture,
            (layout.tile_width - picture.width) // 2,
            (layout.picture_height - picture.height) // 2,
        )

        upper_color, lower_color = layout.caption_colors
        self._draw_panel(canvas, self.upper_caption_rect(), upper_color)
        self._draw_panel(canvas, self.lower_caption_rect(), lower_color)

        self._draw_caption(
            canvas,
            tile.text_up,
            self.caption_line_rects(layout.picture_height, layout.text_up_height, len(tile.text_up)),
        )
        self._draw_caption(
            canvas,
            tile.text_down,
            self.caption_line_rects(
                layout.picture_height + layout.text_up_height,
                layout.text_down_height - layout.text_down_margin,
                len(tile.text_down),
            ),
        )

        draw_line(
            canvas,
            (0.0, float(layout.divider_top)),
            (0.0, float(layout.screen_height)),
            layout.text_color,
        )
        return canvas

    def render(self, tiles: Sequence[Tile]) -> Canvas:
        """Render ``tiles`` side by side at ``i * tile_width``."""
        if len(tiles) == 0:
            raise EmptyInputError("Cannot render an empty frame")

        tile_width = self.layout.tile_width
        frame = Canvas(len(tiles) * tile_width, self.layout.screen_height)
        for index, tile in enumerate(tiles):
            frame.paste(self.render_tile(tile), index * tile_width, 0)
            self.logger.debug("Rendered tile %s at column %d", tile.pic_path.name, index)
        return frame


__all__ = ["FrameCompositor"]
