"""Turn a tile strip into frames, frames into clips, and clips into one video."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from swipe_video.canvas import Canvas
from swipe_video.compositor import FrameCompositor
from swipe_video.config import Config, LayoutParameters, VideoParameters
from swipe_video.encoder import (
    Encoder,
    FfmpegEncoder,
    concat_job,
    scroll_duration,
    scroll_job,
    still_job,
    write_concat_manifest,
)
from swipe_video.errors import EmptyInputError
from swipe_video.images import crop_region, encode_image
from swipe_video.models import RenderedVideoResult, Tile
from swipe_video.partition import partition
from swipe_video.progress import FrameProgress
from swipe_video.text_layout import GlyphFont

COVER_NAME = "cover"
ENDING_NAME = "ending"
MANIFEST_NAME = "list.txt"
PICTURE_SUFFIX = ".png"
CLIP_SUFFIX = ".mp4"


def _temporary_sibling(path: Path) -> Path:
    return path.with_name(f".tmp_{uuid.uuid4().hex}_{path.name}")


class VideoPipeline:
    """Render every frame, encode cover, scroll clips and ending, then concatenate them."""

    def __init__(
        self,
        layout: LayoutParameters,
        video: VideoParameters,
        compositor: FrameCompositor,
        encoder: Encoder,
        work_dir: Path,
        *,
        logger: logging.Logger,
        keep_intermediates: bool = False,
    ) -> None:
        self.layout = layout
        self.video = video
        self.compositor = compositor
        self.encoder = encoder
        self.work_dir = Path(work_dir)
        self.logger = logger
        self.keep_intermediates = keep_intermediates

    # ------------------------------------------------------------------
    # Per-frame stages
    # ------------------------------------------------------------------

    def _encode_still(self, canvas: Canvas, x: int, name: str, seconds: float) -> Path:
        layout = self.layout
        still = crop_region(canvas, x, 0, layout.screen_width, layout.screen_height)
        picture = Path(f"{name}{PICTURE_SUFFIX}")
        encode_image(still, self.work_dir / picture)
        clip = picture.with_suffix(CLIP_SUFFIX)
        self.encoder.run(still_job(picture, clip, seconds, layout=layout, video=self.video))
        self.logger.debug("Encoded %s (%ss still)", clip, seconds)
        return clip

    def _encode_scroll(self, canvas: Canvas, name: str, tile_count: int) -> Path:
        picture = Path(f"{name}{PICTURE_SUFFIX}")
        encode_image(canvas, self.work_dir / picture)
        clip = picture.with_suffix(CLIP_SUFFIX)
        self.encoder.run(
            scroll_job(picture, clip, tile_count, layout=self.layout, video=self.video)
        )
        self.logger.debug("Encoded %s (%d tiles)", clip, tile_count)
        return clip

    # ------------------------------------------------------------------
    # Concatenation and cleanup
    # ------------------------------------------------------------------

    def _intermediate_paths(self, clips: Sequence[Path]) -> List[Path]:
        paths = [self.work_dir / MANIFEST_NAME]
        for clip in clips:
            paths.append(self.work_dir / clip)
            paths.append(self.work_dir / clip.with_suffix(PICTURE_SUFFIX))
        return paths

    def _remove_quietly(self, paths: Sequence[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                self.logger.warning("Failed to remove intermediate file %s: %s", path, exc)

    def _concatenate(self, clips: Sequence[Path], output: Path) -> None:
        temp_output = _temporary_sibling(output)
        try:
            write_concat_manifest(self.work_dir / MANIFEST_NAME, clips)
            self.encoder.run(concat_job(Path(MANIFEST_NAME), temp_output))
            temp_output.replace(output)
        finally:
            self._remove_quietly([temp_output])
            if self.keep_intermediates:
                self.logger.info("Keeping intermediate files in %s", self.work_dir)
            else:
                self._remove_quietly(self._intermediate_paths(clips))

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, tiles: Sequence[Tile], output: Path | str) -> RenderedVideoResult:
        """Produce ``output`` from ``tiles``.

        Any render or encode failure aborts the run and leaves the files
        written so far in the working directory. Once concatenation starts,
        intermediates are removed whether or not it succeeds, unless
        ``keep_intermediates`` is set.
        """
        if len(tiles) == 0:
            raise EmptyInputError("No tiles to render")

        layout = self.layout
        step = layout.effective_step(len(tiles))
        frames = partition(tiles, step, layout.overlap)
        output_path = Path(output).resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.work_dir.mkdir(parents=True, exist_ok=True)

        self.logger.info(
            "Rendering %d tiles into %d frames (step %d, overlap %d)",
            len(tiles),
            len(frames),
            step,
            layout.overlap,
        )

        width = max(2, len(str(len(frames))))
        progress = FrameProgress(len(frames), logger=self.logger)
        clips: List[Path] = []
        duration = 0.0

        for index, frame in enumerate(frames):
            canvas = self.compositor.render(frame)

            if index == 0:
                clips.append(self._encode_still(canvas, 0, COVER_NAME, self.video.cover_seconds))
                duration += self.video.cover_seconds

            clips.append(self._encode_scroll(canvas, f"{index:0{width}d}", len(frame)))
            duration += scroll_duration(len(frame), layout.overlap, self.video.scroll_seconds_per_tile)

            if index == len(frames) - 1:
                clips.append(
                    self._encode_still(
                        canvas,
                        canvas.width - layout.screen_width,
                        ENDING_NAME,
                        self.video.ending_seconds,
                    )
                )
                duration += self.video.ending_seconds

            progress.advance(f"tiles {frame.start}-{frame.stop - 1}")

        self._concatenate(clips, output_path)
        self.logger.info("Swipe video written to %s (%.1fs)", output_path, duration)

        kept_clips = tuple(self.work_dir / clip for clip in clips) if self.keep_intermediates else ()
        return RenderedVideoResult(
            output_path=output_path,
            frame_count=len(frames),
            clip_paths=kept_clips,
            duration_seconds=duration,
        )


def load_font(font_path: Optional[Path]) -> GlyphFont:
    if font_path is None:
        return GlyphFont.default()
    return GlyphFont.from_path(font_path)


def create_pipeline(
    config: Config,
    *,
    logger: logging.Logger,
    encoder: Optional[Encoder] = None,
    font: Optional[GlyphFont] = None,
) -> VideoPipeline:
    """Wire a :class:`VideoPipeline` from ``config``; ``encoder`` defaults to ffmpeg."""
    work_dir = Path(config.work_dir)
    compositor = FrameCompositor(
        config.layout,
        font if font is not None else load_font(config.font_path),
        logger=logger,
    )
    return VideoPipeline(
        config.layout,
        config.video,
        compositor,
        encoder if encoder is not None else FfmpegEncoder(work_dir, video=config.video, logger=logger),
        work_dir,
        logger=logger,
        keep_intermediates=config.keep_intermediates,
    )


__all__ = ["VideoPipeline", "create_pipeline", "load_font"]
