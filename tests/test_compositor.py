import logging
import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video.compositor import FrameCompositor
from swipe_video.config import LayoutParameters
from swipe_video.errors import EmptyInputError, ImageCodecError
from swipe_video.models import Rect, Tile
from swipe_video.text_layout import GlyphFont

UPPER = (23, 150, 235, 255)
LOWER = (44, 85, 153, 255)
TEXT = (255, 255, 255, 255)


@pytest.fixture(scope="module")
def font() -> GlyphFont:
    return GlyphFont.default()


def small_layout() -> LayoutParameters:
    return LayoutParameters(
        screen_width=40,
        screen_height=60,
        tile_width=20,
        picture_height=20,
        text_up_height=20,
        step=3,
        caption_colors=(UPPER, LOWER),
        text_color=TEXT,
        max_text_scale=12,
        caption_radius=2,
        caption_padding=2,
        text_down_margin=4,
        divider_top=2,
    )


def write_picture(path: Path, rgb: tuple, size: tuple = (10, 10)) -> Path:
    pixels = np.zeros((size[1], size[0], 3), dtype=np.uint8)
    pixels[...] = (rgb[2], rgb[1], rgb[0])
    cv2.imwrite(str(path), pixels)
    return path


def build_compositor(font: GlyphFont) -> FrameCompositor:
    return FrameCompositor(small_layout(), font, logger=logging.getLogger("swipe-video-tests"))


def test_render_tile_places_picture_panels_and_divider(tmp_path, font):
    tile = Tile(pic_path=write_picture(tmp_path / "red.png", (255, 0, 0)))
    canvas = build_compositor(font).render_tile(tile)

    assert (canvas.width, canvas.height) == (20, 60)
    assert canvas.get_pixel(10, 10) == (255, 0, 0, 255)
    assert canvas.get_pixel(10, 30) == UPPER
    assert canvas.get_pixel(10, 50) == LOWER
    assert canvas.get_pixel(0, 30) == TEXT
    assert canvas.get_pixel(0, 1) == (255, 0, 0, 255)


def test_render_tile_centres_picture_inside_picture_region(tmp_path, font):
    tile = Tile(pic_path=write_picture(tmp_path / "wide.png", (0, 255, 0), size=(20, 10)))
    canvas = build_compositor(font).render_tile(tile)

    assert canvas.get_pixel(10, 10) == (0, 255, 0, 255)
    assert canvas.get_pixel(10, 2) == (0, 0, 0, 0)
    assert canvas.get_pixel(10, 17) == (0, 0, 0, 0)


def test_render_tile_draws_caption_text(tmp_path, font):
    tile = Tile(
        pic_path=write_picture(tmp_path / "pic.png", (0, 0, 255)),
        text_up=["Hi", "Yo"],
        text_down=["Lo"],
    )
    compositor = build_compositor(font)
    captioned = compositor.render_tile(tile).pixels
    plain = compositor.render_tile(Tile(pic_path=tile.pic_path)).pixels

    changed_rows = np.nonzero(np.any(captioned != plain, axis=(1, 2)))[0]
    assert changed_rows.size > 0
    assert changed_rows.min() >= 20
    assert changed_rows.max() < 56
    assert np.any(captioned[20:40] != plain[20:40])
    assert np.any(captioned[40:56] != plain[40:56])


def test_caption_line_rects_split_region_evenly(font):
    compositor = build_compositor(font)
    assert compositor.caption_line_rects(20, 20, 2) == [Rect(2, 20, 16, 10), Rect(2, 30, 16, 10)]
    assert compositor.caption_line_rects(40, 16, 3) == [
        Rect(2, 40, 16, 5),
        Rect(2, 45, 16, 5),
        Rect(2, 50, 16, 5),
    ]
    assert compositor.caption_line_rects(20, 20, 0) == []


def test_render_places_tiles_side_by_side(tmp_path, font):
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255)]
    tiles = [Tile(pic_path=write_picture(tmp_path / f"{i}.png", rgb)) for i, rgb in enumerate(colors)]

    frame = build_compositor(font).render(tiles)

    assert (frame.width, frame.height) == (60, 60)
    for index, rgb in enumerate(colors):
        assert frame.get_pixel(index * 20 + 10, 10) == (*rgb, 255)
        assert frame.get_pixel(index * 20, 30) == TEXT


def test_render_empty_frame_raises(font):
    with pytest.raises(EmptyInputError):
        build_compositor(font).render([])


def test_render_undecodable_picture_raises(tmp_path, font):
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"garbage")
    with pytest.raises(ImageCodecError):
        build_compositor(font).render([Tile(pic_path=broken)])
