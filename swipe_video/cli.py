"""
Command line entry point for rendering a swipe video from a tile list.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from dotenv import load_dotenv

from swipe_video.config import Config, load_config
from swipe_video.errors import EncoderError, SwipeVideoError
from swipe_video.logging_setup import configure_logging
from swipe_video.pipeline import create_pipeline
from swipe_video.tiles import load_tiles

DEFAULT_CONFIG_PATH = Path("config.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swipe-video",
        description="Compose captioned picture tiles into a horizontally scrolling video.",
    )
    parser.add_argument(
        "tiles",
        type=Path,
        help="JSON array of tile records (pic_path, text_up, text_down).",
    )
    parser.add_argument(
        "output",
        type=Path,
        help="Path of the video file to write (e.g. output.mp4).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="JSON configuration file; environment variables are used when it does not exist "
        "(default: config.json).",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        help="Directory for intermediate pictures and clips (overrides the configuration).",
    )
    parser.add_argument(
        "--font",
        type=Path,
        help="TrueType/OpenType font for captions (default: Pillow's bundled font).",
    )
    parser.add_argument(
        "--keep-intermediates",
        action="store_true",
        help="Leave frame pictures, clips and the concat list in the working directory.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log output to this file.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging, including encoder command lines.",
    )
    return parser


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    overrides = {}
    if args.work_dir is not None:
        overrides["work_dir"] = args.work_dir
    if args.font is not None:
        overrides["font_path"] = args.font
    if args.keep_intermediates:
        overrides["keep_intermediates"] = True
    return dataclasses.replace(config, **overrides) if overrides else config


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = configure_logging(verbose=args.verbose, log_file=args.log_file)
    load_dotenv()

    try:
        config = _apply_overrides(load_config(args.config), args)
        logger.debug("Resolved configuration: %s", config)
        tiles = load_tiles(args.tiles)
        pipeline = create_pipeline(config, logger=logger)
        result = pipeline.run(tiles, args.output)
    except EncoderError as exc:
        logger.error("Encoding failed: %s", exc)
        if exc.command:
            logger.error("Command: %s", " ".join(exc.command))
        return 1
    except (SwipeVideoError, OSError) as exc:
        logger.error("Swipe video failed: %s", exc)
        return 1

    logger.info(
        "Done: %d frames, %.1fs of video at %s",
        result.frame_count,
        result.duration_seconds,
        result.output_path,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
