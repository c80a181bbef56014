import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video.canvas import Canvas
from swipe_video.errors import InvalidFontError
from swipe_video.models import Rect
from swipe_video.text_layout import (
    GlyphFont,
    draw_text,
    draw_text_centered,
    fit_scale,
    layout_line,
    measure,
)

WHITE = (255, 255, 255, 255)


@pytest.fixture(scope="module")
def font() -> GlyphFont:
    return GlyphFont.default()


def ink_box(canvas: Canvas):
    ys, xs = np.nonzero(canvas.pixels[..., 3])
    if len(xs) == 0:
        return None
    return int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())


def test_measure_empty_text_is_zero(font):
    assert measure(font, 40, "") == (0, 0)


def test_measure_grows_with_text_and_scale(font):
    single_width, single_height = measure(font, 40, "A")
    double_width, _ = measure(font, 40, "AA")
    large_width, large_height = measure(font, 80, "A")

    assert single_width > 0 and single_height > 0
    assert double_width > single_width
    assert large_width > single_width
    assert large_height > single_height


def test_layout_line_skips_glyphs_without_ink(font):
    glyphs, advance, _ = layout_line(font, 40, "a b")
    assert [glyph.char for glyph in glyphs] == ["a", "b"]
    assert advance > measure(font, 40, "ab")[0]
    assert glyphs[1].pen_x > glyphs[0].pen_x


def test_draw_text_blends_glyph_coverage(font):
    canvas = Canvas(80, 60)
    draw_text(canvas, WHITE, (5, 5), 40, font, "H")
    box = ink_box(canvas)
    assert box is not None
    assert box[0] >= 5 and box[1] >= 5
    assert canvas.pixels[..., 3].max() == 255


def test_draw_text_space_only_advances(font):
    canvas = Canvas(80, 60)
    draw_text(canvas, WHITE, (5, 5), 40, font, "   ")
    assert ink_box(canvas) is None


def test_draw_centered_keeps_small_text_at_max_scale(font):
    canvas = Canvas(400, 200)
    scale = draw_text_centered(canvas, WHITE, Rect(0, 0, 400, 200), 20, font, "Hi")
    assert scale == 20


def test_draw_centered_shrinks_text_to_fit_rect(font):
    rect = Rect(10, 10, 100, 30)
    canvas = Canvas(120, 50)
    text = "A rather long caption line"

    scale = draw_text_centered(canvas, WHITE, rect, 120, font, text)

    assert scale < 120
    width, height = measure(font, scale, text)
    assert width <= rect.width + 1
    assert height <= rect.height + 1
    box = ink_box(canvas)
    assert box is not None
    left, top, right, bottom = box
    assert left >= rect.left - 1 and right <= rect.right
    assert top >= rect.top - 1 and bottom <= rect.bottom


def test_draw_centered_centres_each_line_horizontally(font):
    rect = Rect(0, 0, 300, 120)
    canvas = Canvas(300, 120)
    draw_text_centered(canvas, WHITE, rect, 30, font, "  WWWWWW \n  i  ")

    line_height = font.line_height(30)
    top = (rect.height - 2 * line_height) // 2
    second_line = canvas.pixels[top + line_height : top + 2 * line_height, :, 3]
    xs = np.nonzero(second_line.max(axis=0))[0]
    assert len(xs) > 0
    centre = (xs.min() + xs.max()) / 2
    assert abs(centre - rect.width / 2) <= 4


def test_fit_scale_is_limited_by_line_count(font):
    rect = Rect(0, 0, 1000, 60)
    lines = ["a", "b", "c"]
    scale = fit_scale(font, rect, 120, lines)
    assert len(lines) * font.line_height(scale) <= rect.height


def test_fit_scale_never_exceeds_small_max_scale(font):
    scale = fit_scale(font, Rect(0, 0, 400, 200), 0.5, ["Hi"])
    assert scale <= 0.5


def test_draw_centered_empty_text_draws_nothing(font):
    canvas = Canvas(50, 50)
    draw_text_centered(canvas, WHITE, Rect(0, 0, 50, 50), 20, font, "")
    assert ink_box(canvas) is None


@pytest.mark.parametrize("data", [b"", b"definitely not a font file"])
def test_invalid_font_data_raises(data):
    with pytest.raises(InvalidFontError):
        GlyphFont.from_bytes(data)


def test_font_from_missing_path_raises_os_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        GlyphFont.from_path(tmp_path / "missing.ttf")
