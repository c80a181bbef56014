"""Configuration dataclasses and loading helpers for swipe video rendering."""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from swipe_video.canvas import Color
from swipe_video.errors import ConfigurationError
from swipe_video.text_layout import MIN_SCALE

DEFAULT_UPPER_CAPTION_COLOR: Color = (23, 150, 235, 255)
DEFAULT_LOWER_CAPTION_COLOR: Color = (44, 85, 153, 255)
DEFAULT_TEXT_COLOR: Color = (255, 255, 255, 255)


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_bool(name: str, value: Any, default: bool) -> bool:
    """Parse truthy/falsy values from multiple input types."""
    if _is_absent(value):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    elif isinstance(value, (int, float)):
        return value != 0
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: Any, default: int, *, minimum: int) -> int:
    """Parse an integer of at least ``minimum``; absent values fall back to ``default``."""
    if _is_absent(value):
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        parsed = int(value)
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError as exc:
            raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {parsed}")
    return parsed


def _parse_positive_int(name: str, value: Any, default: int) -> int:
    return _parse_int(name, value, default, minimum=1)


def _parse_non_negative_int(name: str, value: Any, default: int) -> int:
    return _parse_int(name, value, default, minimum=0)


def _parse_float(name: str, value: Any, default: float) -> float:
    """Parse a positive number; absent values fall back to ``default``."""
    if _is_absent(value):
        return default
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value!r}")
    return parsed


def _clamp_channels(channels: Any) -> Optional[Tuple[int, ...]]:
    if not isinstance(channels, (list, tuple)) or len(channels) not in (3, 4):
        return None
    try:
        return tuple(max(0, min(255, int(channel))) for channel in channels)
    except (TypeError, ValueError):
        return None


def _parse_hex(value: str) -> Optional[Tuple[int, ...]]:
    hex_value = value.strip()
    for prefix in ("#", "0x", "0X"):
        if hex_value.startswith(prefix):
            hex_value = hex_value[len(prefix):]
            break
    if len(hex_value) not in (6, 8):
        return None
    try:
        return tuple(int(hex_value[i : i + 2], 16) for i in range(0, len(hex_value), 2))
    except ValueError:
        return None


def _parse_color(name: str, value: Any, default: Color) -> Color:
    """Parse ``#RRGGBB``/``#RRGGBBAA`` strings or 3/4-channel lists into RGBA."""
    if _is_absent(value):
        return default
    channels: Optional[Tuple[int, ...]] = None
    if isinstance(value, str):
        channels = _parse_hex(value)
    elif isinstance(value, (list, tuple)):
        channels = _clamp_channels(value)
    if channels is None:
        raise ConfigurationError(f"{name} is not a color, got {value!r}")
    if len(channels) == 3:
        channels = channels + (255,)
    return (channels[0], channels[1], channels[2], channels[3])


def _parse_ffmpeg_color(name: str, value: Any, default: str) -> str:
    """Normalize hex or channel-list colors to ffmpeg's ``0xRRGGBB``; named colors pass through."""
    if _is_absent(value):
        return default
    channels: Optional[Tuple[int, ...]] = None
    if isinstance(value, (list, tuple)):
        channels = _clamp_channels(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.startswith("#"):
            return text
        channels = _parse_hex(text)
    if channels is None:
        raise ConfigurationError(f"{name} is not a color, got {value!r}")
    return "0x{:02X}{:02X}{:02X}".format(*channels[:3])


def _require_int(name: str, value: Any, *, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


def _require_positive_number(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")


@dataclass(frozen=True)
class LayoutParameters:
    """Screen geometry, caption styling and window size for composing frames.

    Every invariant is checked on construction so an invalid layout never
    reaches the renderer.
    """

    screen_width: int = 1920
    screen_height: int = 1080
    tile_width: int = 480
    picture_height: int = 520
    text_up_height: int = 214
    step: int = 40
    caption_colors: Tuple[Color, Color] = (
        DEFAULT_UPPER_CAPTION_COLOR,
        DEFAULT_LOWER_CAPTION_COLOR,
    )
    text_color: Color = DEFAULT_TEXT_COLOR
    max_text_scale: float = 120.0
    caption_radius: int = 10
    caption_padding: int = 10
    text_down_margin: int = 30
    divider_top: int = 10

    def __post_init__(self) -> None:
        for name in ("screen_width", "screen_height", "tile_width", "picture_height", "step"):
            _require_int(name, getattr(self, name), minimum=1)
        for name in ("text_up_height", "caption_radius", "caption_padding", "text_down_margin", "divider_top"):
            _require_int(name, getattr(self, name), minimum=0)
        _require_positive_number("max_text_scale", self.max_text_scale)
        if self.max_text_scale < MIN_SCALE:
            raise ConfigurationError(
                f"max_text_scale must be at least {MIN_SCALE:g} px, got {self.max_text_scale}"
            )

        if self.picture_height > self.screen_height:
            raise ConfigurationError(
                f"picture_height > screen_height; {self.picture_height} > {self.screen_height}"
            )
        if self.picture_height + self.text_up_height > self.screen_height:
            raise ConfigurationError(
                "picture_height + text_up_height exceeds screen_height; "
                f"{self.picture_height} + {self.text_up_height} > {self.screen_height}"
            )
        if self.screen_width % self.tile_width != 0:
            raise ConfigurationError(
                f"screen_width % tile_width != 0; {self.screen_width} % {self.tile_width} != 0"
            )
        if self.text_down_height < self.text_down_margin:
            raise ConfigurationError(
                f"Lower caption height {self.text_down_height} is smaller than its "
                f"bottom margin {self.text_down_margin}"
            )
        if self.step <= self.overlap:
            raise ConfigurationError(
                f"step must exceed the overlap of {self.overlap} tiles, got {self.step}"
            )
        if self.tile_width <= 2 * self.caption_padding:
            raise ConfigurationError(
                f"tile_width {self.tile_width} leaves no room inside caption padding {self.caption_padding}"
            )
        if len(self.caption_colors) != 2:
            raise ConfigurationError("caption_colors must hold an upper and a lower color")

    @property
    def overlap(self) -> int:
        """Number of tiles spanning one screen width."""
        return self.screen_width // self.tile_width

    @property
    def text_down_height(self) -> int:
        return self.screen_height - self.picture_height - self.text_up_height

    def effective_step(self, tile_count: int) -> int:
        return min(self.step, tile_count)


@dataclass(frozen=True)
class VideoParameters:
    """Encoder-facing settings: timing, background and quality."""

    fps: int = 60
    background_color: str = "white"
    cover_seconds: float = 3.0
    ending_seconds: float = 3.0
    scroll_seconds_per_tile: float = 3.0
    quality: int = 23
    preset: str = "fast"

    def __post_init__(self) -> None:
        _require_int("fps", self.fps, minimum=1)
        _require_int("quality", self.quality, minimum=0)
        if self.quality > 51:
            raise ConfigurationError(f"quality (CRF) must be <= 51, got {self.quality}")
        for name in ("cover_seconds", "ending_seconds", "scroll_seconds_per_tile"):
            _require_positive_number(name, getattr(self, name))
        if not str(self.background_color).strip():
            raise ConfigurationError("background_color must not be empty")
        if not str(self.preset).strip():
            raise ConfigurationError("preset must not be empty")


@dataclass(frozen=True)
class Config:
    """Root configuration object for a swipe video run."""

    layout: LayoutParameters = field(default_factory=LayoutParameters)
    video: VideoParameters = field(default_factory=VideoParameters)
    work_dir: Path = Path("work")
    font_path: Optional[Path] = None
    keep_intermediates: bool = False


def _parse_caption_colors(value: Any) -> Tuple[Color, Color]:
    if _is_absent(value):
        return (DEFAULT_UPPER_CAPTION_COLOR, DEFAULT_LOWER_CAPTION_COLOR)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ConfigurationError(f"caption_colors must hold an upper and a lower color, got {value!r}")
    return (
        _parse_color("caption_colors[0]", value[0], DEFAULT_UPPER_CAPTION_COLOR),
        _parse_color("caption_colors[1]", value[1], DEFAULT_LOWER_CAPTION_COLOR),
    )


def _section(name: str, raw: Any) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{name} must be an object, got {raw!r}")
    return raw


def build_layout(raw: Mapping[str, Any]) -> LayoutParameters:
    """Create validated :class:`LayoutParameters` from loosely typed values.

    Missing keys take their defaults; a value that is present but unusable
    raises :class:`ConfigurationError`.
    """
    raw = _section("layout", raw)
    default = LayoutParameters()

    def positive(key: str) -> int:
        return _parse_positive_int(key, raw.get(key), getattr(default, key))

    def non_negative(key: str) -> int:
        return _parse_non_negative_int(key, raw.get(key), getattr(default, key))

    return LayoutParameters(
        screen_width=positive("screen_width"),
        screen_height=positive("screen_height"),
        tile_width=positive("tile_width"),
        picture_height=positive("picture_height"),
        text_up_height=non_negative("text_up_height"),
        step=positive("step"),
        caption_colors=_parse_caption_colors(raw.get("caption_colors")),
        text_color=_parse_color("text_color", raw.get("text_color"), default.text_color),
        max_text_scale=_parse_float("max_text_scale", raw.get("max_text_scale"), default.max_text_scale),
        caption_radius=non_negative("caption_radius"),
        caption_padding=non_negative("caption_padding"),
        text_down_margin=non_negative("text_down_margin"),
        divider_top=non_negative("divider_top"),
    )


def build_video(raw: Mapping[str, Any]) -> VideoParameters:
    """Create validated :class:`VideoParameters` from loosely typed values."""
    raw = _section("video", raw)
    default = VideoParameters()

    def seconds(key: str) -> float:
        return _parse_float(key, raw.get(key), getattr(default, key))

    preset = raw.get("preset")
    return VideoParameters(
        fps=_parse_positive_int("fps", raw.get("fps"), default.fps),
        background_color=_parse_ffmpeg_color(
            "background_color", raw.get("background_color"), default.background_color
        ),
        cover_seconds=seconds("cover_seconds"),
        ending_seconds=seconds("ending_seconds"),
        scroll_seconds_per_tile=seconds("scroll_seconds_per_tile"),
        quality=_parse_non_negative_int("quality", raw.get("quality"), default.quality),
        preset=default.preset if _is_absent(preset) else str(preset).strip(),
    )


def _optional_path(value: Any) -> Optional[Path]:
    if _is_absent(value):
        return None
    return Path(value)


def _build_config(data: Mapping[str, Any]) -> Config:
    work_dir = data.get("work_dir")
    return Config(
        layout=build_layout(data.get("layout")),
        video=build_video(data.get("video")),
        work_dir=Path("work") if _is_absent(work_dir) else Path(work_dir),
        font_path=_optional_path(data.get("font_path")),
        keep_intermediates=_parse_bool("keep_intermediates", data.get("keep_intermediates"), False),
    )


def _load_env_config(env: Mapping[str, str]) -> Config:
    """Configuration derived from environment variables."""
    layout = {
        "screen_width": env.get("SCREEN_WIDTH"),
        "screen_height": env.get("SCREEN_HEIGHT"),
        "tile_width": env.get("TILE_WIDTH"),
        "picture_height": env.get("PICTURE_HEIGHT"),
        "text_up_height": env.get("TEXT_UP_HEIGHT"),
        "step": env.get("STEP"),
        "max_text_scale": env.get("MAX_TEXT_SCALE"),
    }
    video = {
        "fps": env.get("VIDEO_FPS"),
        "background_color": env.get("VIDEO_BACKGROUND_COLOR"),
        "cover_seconds": env.get("COVER_SECONDS"),
        "ending_seconds": env.get("ENDING_SECONDS"),
        "scroll_seconds_per_tile": env.get("SCROLL_SECONDS_PER_TILE"),
        "quality": env.get("VIDEO_QUALITY"),
    }
    return _build_config({
        "layout": layout,
        "video": video,
        "work_dir": env.get("WORK_DIR"),
        "font_path": env.get("FONT_PATH"),
        "keep_intermediates": env.get("KEEP_INTERMEDIATES"),
    })


def load_config(config_path: Path | str | None, env: Mapping[str, str] | None = None) -> Config:
    """Load configuration from a JSON file, or from the environment when it does not exist."""
    source_env = os.environ if env is None else env

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                try:
                    data = json.load(handle)
                except json.JSONDecodeError as exc:
                    raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
            if not isinstance(data, Mapping):
                raise ConfigurationError(f"Expected a JSON object in {path}")
            return _build_config(data)

    return _load_env_config(source_env)


__all__ = [
    "Config",
    "LayoutParameters",
    "VideoParameters",
    "build_layout",
    "build_video",
    "load_config",
    "_parse_bool",
    "_parse_color",
    "_parse_ffmpeg_color",
    "_parse_positive_int",
]
