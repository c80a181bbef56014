"""
Compose captioned picture tiles into overlapping panoramic frames and encode
them into a single horizontally scrolling video.
"""

from .config import Config, LayoutParameters, VideoParameters, load_config
from .errors import (
    ConfigurationError,
    EmptyInputError,
    EncoderError,
    ImageCodecError,
    InvalidFontError,
    InvalidPolygonError,
    SwipeVideoError,
    TileSourceError,
)
from .models import Frame, Rect, RenderedVideoResult, Tile
from .partition import partition
from .pipeline import VideoPipeline, create_pipeline
from .tiles import load_tiles, save_tiles
