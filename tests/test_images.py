import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video.canvas import Canvas
from swipe_video.errors import ImageCodecError
from swipe_video.images import crop_region, decode_image, encode_image, fit_within


def test_encode_then_decode_keeps_dimensions_and_alpha(tmp_path):
    canvas = Canvas(37, 21, fill=(10, 20, 30, 255))
    canvas.draw_pixel(3, 4, (200, 100, 50, 128))

    path = encode_image(canvas, tmp_path / "still.png")
    decoded = decode_image(path)

    assert (decoded.width, decoded.height) == (37, 21)
    assert decoded.get_pixel(0, 0) == (10, 20, 30, 255)
    assert decoded.get_pixel(3, 4) == (200, 100, 50, 128)


def test_decode_converts_bgr_and_gray_to_rgba(tmp_path):
    bgr = np.zeros((3, 5, 3), dtype=np.uint8)
    bgr[..., 0] = 255
    cv2.imwrite(str(tmp_path / "blue.png"), bgr)
    gray = np.full((2, 2), 77, dtype=np.uint8)
    cv2.imwrite(str(tmp_path / "gray.png"), gray)

    blue = decode_image(tmp_path / "blue.png")
    assert blue.get_pixel(0, 0) == (0, 0, 255, 255)
    assert blue.pixels.shape == (3, 5, 4)

    grey = decode_image(tmp_path / "gray.png")
    assert grey.get_pixel(1, 1) == (77, 77, 77, 255)


def test_decode_missing_file_raises_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        decode_image(tmp_path / "missing.png")


def test_decode_garbage_raises_codec_error(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"this is not a png")
    with pytest.raises(ImageCodecError):
        decode_image(path)


def test_encode_empty_canvas_raises_codec_error(tmp_path):
    with pytest.raises(ImageCodecError):
        encode_image(Canvas(0, 5), tmp_path / "empty.png")


@pytest.mark.parametrize(
    "size, bounds, expected",
    [
        ((200, 100), (100, 100), (100, 50)),
        ((50, 100), (480, 520), (260, 520)),
        ((480, 520), (480, 520), (480, 520)),
        ((10, 10), (20, 8), (8, 8)),
    ],
)
def test_fit_within_preserves_aspect_ratio(size, bounds, expected):
    canvas = Canvas(size[0], size[1], fill=(1, 2, 3, 255))
    fitted = fit_within(canvas, *bounds)
    assert (fitted.width, fitted.height) == expected
    assert fitted.get_pixel(fitted.width // 2, fitted.height // 2) == (1, 2, 3, 255)


def test_crop_region_copies_and_clips():
    canvas = Canvas(10, 4)
    canvas.fill_rect(canvas.bounds, (9, 9, 9, 255))
    cropped = crop_region(canvas, 6, 0, 8, 4)
    assert (cropped.width, cropped.height) == (4, 4)
    cropped.draw_pixel(0, 0, (0, 0, 0, 0))
    assert canvas.get_pixel(6, 0) == (9, 9, 9, 255)
