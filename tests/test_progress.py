import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video.logging_setup import LOGGER_NAME, configure_logging
from swipe_video.progress import FrameProgress, eta_string, format_duration


def test_format_duration_buckets():
    assert format_duration(0.2) == "<1s"
    assert format_duration(42) == "42s"
    assert format_duration(125) == "2m05s"
    assert format_duration(3723) == "1h02m03s"


def test_eta_string_before_first_frame():
    assert eta_string(0.0, 0, 10) == "ETA estimating"
    assert eta_string(5.0, 11, 10) == "ETA estimating"


def test_eta_string_extrapolates_remaining_time():
    assert eta_string(10.0, 1, 4).startswith("ETA 30s (finish ")


def test_frame_progress_logs_each_frame():
    ticks = iter([100.0, 104.0, 110.0])
    progress = FrameProgress(
        2, logger=logging.getLogger("swipe-video-tests"), clock=lambda: next(ticks)
    )

    first = progress.advance("tiles 0-2")
    second = progress.advance()

    assert first.startswith("Frame 1/2 (50.0%) ETA 4s")
    assert first.endswith(" - tiles 0-2")
    assert second.startswith("Frame 2/2 (100.0%) ETA <1s")
    assert progress.completed == 2


def test_configure_logging_writes_log_file(tmp_path):
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    log_path = tmp_path / "logs" / "run.log"
    try:
        logger = configure_logging(verbose=True, log_file=log_path, include_stream=False)
        logger.debug("encoder command")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    contents = log_path.read_text(encoding="utf-8")
    assert " - DEBUG - encoder command" in contents
