import json
import logging
import sys
import types
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video import cli
from swipe_video.errors import EncoderError
from swipe_video.models import RenderedVideoResult

LOGGER = logging.getLogger("swipe-video-tests")


class FakePipeline:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def run(self, tiles, output):
        self.calls.append((list(tiles), Path(output)))
        if self.error is not None:
            raise self.error
        return RenderedVideoResult(
            output_path=Path(output).resolve(),
            frame_count=1,
            clip_paths=(),
            duration_seconds=12.0,
        )


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    logging_calls = []

    def fake_configure_logging(**kwargs):
        logging_calls.append(kwargs)
        return LOGGER

    monkeypatch.setattr(cli, "configure_logging", fake_configure_logging)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)

    cv2.imwrite(str(tmp_path / "pic.png"), np.zeros((4, 4, 3), dtype=np.uint8))
    (tmp_path / "tiles.json").write_text(
        json.dumps([{"pic_path": "pic.png", "text_up": ["Up"]}] * 6),
        encoding="utf-8",
    )
    (tmp_path / "config.json").write_text(json.dumps({"work_dir": "scratch"}), encoding="utf-8")
    return types.SimpleNamespace(path=tmp_path, logging_calls=logging_calls)


def install_pipeline(monkeypatch, pipeline):
    created = []

    def fake_create_pipeline(config, *, logger):
        created.append(config)
        return pipeline

    monkeypatch.setattr(cli, "create_pipeline", fake_create_pipeline)
    return created


def test_main_runs_pipeline_with_overrides(workspace, monkeypatch):
    pipeline = FakePipeline()
    created = install_pipeline(monkeypatch, pipeline)

    exit_code = cli.main(
        [
            "tiles.json",
            "out.mp4",
            "--work-dir",
            "elsewhere",
            "--font",
            "caption.ttf",
            "--keep-intermediates",
            "--verbose",
        ]
    )

    assert exit_code == 0
    config = created[0]
    assert config.work_dir == Path("elsewhere")
    assert config.font_path == Path("caption.ttf")
    assert config.keep_intermediates is True
    tiles, output = pipeline.calls[0]
    assert len(tiles) == 6
    assert output == Path("out.mp4")
    assert workspace.logging_calls == [{"verbose": True, "log_file": None}]


def test_main_uses_config_file_without_overrides(workspace, monkeypatch):
    created = install_pipeline(monkeypatch, FakePipeline())

    assert cli.main(["tiles.json", "out.mp4"]) == 0
    assert created[0].work_dir == Path("scratch")
    assert created[0].keep_intermediates is False


def test_main_reports_encoder_failures(workspace, monkeypatch, caplog):
    error = EncoderError("ffmpeg exited with status 1", command=["ffmpeg", "-y", "x.mp4"], returncode=1)
    install_pipeline(monkeypatch, FakePipeline(error=error))

    with caplog.at_level(logging.ERROR, logger="swipe-video-tests"):
        assert cli.main(["tiles.json", "out.mp4"]) == 1
    assert "ffmpeg -y x.mp4" in caplog.text


def test_main_fails_for_missing_tiles_file(workspace, monkeypatch):
    pipeline = FakePipeline()
    install_pipeline(monkeypatch, pipeline)

    assert cli.main(["missing.json", "out.mp4"]) == 1
    assert pipeline.calls == []


def test_main_fails_for_invalid_layout(workspace, monkeypatch):
    (workspace.path / "bad.json").write_text(
        json.dumps({"layout": {"tile_width": 500}}), encoding="utf-8"
    )
    created = install_pipeline(monkeypatch, FakePipeline())

    assert cli.main(["tiles.json", "out.mp4", "--config", "bad.json"]) == 1
    assert created == []


def test_parser_requires_tiles_and_output():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["tiles.json"])
