"""External encoder jobs and the ffmpeg-backed runner that executes them."""

from __future__ import annotations

import enum
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

from swipe_video.config import LayoutParameters, VideoParameters
from swipe_video.errors import EncoderError


class JobKind(str, enum.Enum):
    STILL = "still"
    SCROLL = "scroll"
    CONCAT = "concat"


@dataclass(frozen=True)
class EncoderJob:
    """One encoder invocation described by its inputs rather than by command-line flags."""

    kind: JobKind
    inputs: Tuple[Path, ...]
    output: Path
    duration: Optional[float] = None
    filter_graph: Optional[str] = None


class Encoder(Protocol):
    def run(self, job: EncoderJob) -> None: ...


def format_number(value: float) -> str:
    """Render ``value`` without a trailing ``.0`` so ffmpeg arguments stay readable."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _background_source(layout: LayoutParameters, video: VideoParameters) -> str:
    return (
        f"color={video.background_color}:s={layout.screen_width}x{layout.screen_height}"
        f":r={video.fps}[bg]"
    )


def still_job(
    picture: Path,
    output: Path,
    seconds: float,
    *,
    layout: LayoutParameters,
    video: VideoParameters,
) -> EncoderJob:
    """Loop one picture over the background for ``seconds``."""
    graph = f"{_background_source(layout, video)};[bg][0]overlay=shortest=1"
    return EncoderJob(JobKind.STILL, (picture,), output, duration=seconds, filter_graph=graph)


def scroll_duration(tile_count: int, overlap: int, seconds_per_tile: float) -> float:
    return (tile_count - overlap) * seconds_per_tile + 1


def scroll_speed(tile_width: int, seconds_per_tile: float) -> float:
    """Horizontal pan speed in pixels per second."""
    return tile_width / seconds_per_tile


def scroll_job(
    picture: Path,
    output: Path,
    tile_count: int,
    *,
    layout: LayoutParameters,
    video: VideoParameters,
) -> EncoderJob:
    """Pan across a ``tile_count`` wide frame picture at a constant speed."""
    duration = scroll_duration(tile_count, layout.overlap, video.scroll_seconds_per_tile)
    speed = format_number(scroll_speed(layout.tile_width, video.scroll_seconds_per_tile))
    graph = f"{_background_source(layout, video)};[bg][0]overlay=x=-t*{speed}:shortest=1"
    return EncoderJob(JobKind.SCROLL, (picture,), output, duration=duration, filter_graph=graph)


def _escape_for_concat(path: Path) -> str:
    """Escape single quotes for FFmpeg concat demuxer entries."""
    return str(path).replace("'", "'\\''")


def write_concat_manifest(manifest_path: Path, clips: Sequence[Path]) -> Path:
    """Write one ``file '<path>'`` line per clip, in order."""
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    with manifest_path.open("w", encoding="utf-8") as handle:
        for clip in clips:
            handle.write(f"file '{_escape_for_concat(clip)}'\n")
    return manifest_path


def concat_job(manifest: Path, output: Path) -> EncoderJob:
    return EncoderJob(JobKind.CONCAT, (manifest,), output)


class FfmpegEncoder:
    """Run :class:`EncoderJob` instances through the ffmpeg command-line tool."""

    def __init__(
        self,
        work_dir: Path,
        *,
        video: VideoParameters,
        logger: logging.Logger,
        binary: str = "ffmpeg",
    ) -> None:
        self.work_dir = Path(work_dir)
        self.video = video
        self.logger = logger
        self.binary = binary

    # ------------------------------------------------------------------
    # Command construction
    # ------------------------------------------------------------------

    def _codec_args(self) -> List[str]:
        return [
            "-c:v",
            "libx264",
            "-crf",
            str(self.video.quality),
            "-preset",
            self.video.preset,
            "-pix_fmt",
            "yuv420p",
        ]

    def build_command(self, job: EncoderJob) -> List[str]:
        if len(job.inputs) != 1:
            raise EncoderError(
                f"{job.kind.value} jobs take exactly one input, got {len(job.inputs)}"
            )
        source = str(job.inputs[0])

        if job.kind is JobKind.CONCAT:
            return [
                self.binary,
                "-f",
                "concat",
                "-safe",
                "0",
                "-i",
                source,
                "-c",
                "copy",
                "-y",
                str(job.output),
            ]

        if job.duration is None or job.filter_graph is None:
            raise EncoderError(f"{job.kind.value} job for {job.output} needs a duration and a filter graph")
        duration = format_number(job.duration)

        if job.kind is JobKind.STILL:
            return [
                self.binary,
                "-r",
                "1",
                "-loop",
                "1",
                "-i",
                source,
                "-filter_complex",
                job.filter_graph,
                *self._codec_args(),
                "-t",
                duration,
                "-y",
                str(job.output),
            ]

        return [
            self.binary,
            "-r",
            "1",
            "-loop",
            "1",
            "-t",
            duration,
            "-i",
            source,
            "-filter_complex",
            job.filter_graph,
            *self._codec_args(),
            "-y",
            str(job.output),
        ]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, job: EncoderJob) -> None:
        if shutil.which(self.binary) is None:
            raise EncoderError(
                f"{self.binary} not found on PATH. Install ffmpeg with libx264.",
                command=[self.binary],
            )

        cmd = self.build_command(job)
        self.logger.debug("Running %s job: %s", job.kind.value, " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=self.work_dir,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise EncoderError(f"Failed to launch {self.binary}: {exc}", command=cmd) from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="ignore") if result.stderr else ""
            self.logger.error("%s failed for %s:\n%s", self.binary, job.output, stderr.strip())
            raise EncoderError(
                f"{self.binary} exited with status {result.returncode} while writing {job.output}",
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )


__all__ = [
    "Encoder",
    "EncoderJob",
    "FfmpegEncoder",
    "JobKind",
    "concat_job",
    "format_number",
    "scroll_duration",
    "scroll_job",
    "scroll_speed",
    "still_job",
    "write_concat_manifest",
]
