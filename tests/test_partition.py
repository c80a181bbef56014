import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from swipe_video.errors import ConfigurationError
from swipe_video.models import Frame
from swipe_video.partition import partition, window_starts


def _shape(frames):
    return [len(frame) for frame in frames], [frame.start for frame in frames]


def test_partition_eight_tiles_step_three_overlap_one():
    frames = partition(list(range(8)), 3, 1)
    assert _shape(frames) == ([3, 3, 3, 2], [0, 2, 4, 6])


def test_partition_ten_tiles_truncates_last_window():
    frames = partition(list(range(10)), 3, 1)
    assert _shape(frames) == ([3, 3, 3, 3, 2], [0, 2, 4, 6, 8])
    assert list(frames[-1]) == [8, 9]


@pytest.mark.parametrize(
    "count, step, overlap",
    [(5, 2, 0), (9, 4, 1), (10, 3, 2), (41, 40, 4), (6, 5, 4), (100, 7, 3), (5, 40, 4)],
)
def test_partition_windows_share_overlap_and_cover_everything(count, step, overlap):
    items = list(range(count))
    frames = partition(items, step, overlap)

    for previous, current in zip(frames, frames[1:]):
        shared = set(previous) & set(current)
        assert len(shared) == overlap
        assert list(previous)[len(previous) - overlap :] == list(current)[:overlap]

    for frame in frames:
        assert len(frame) <= step
        assert list(frame) == items[frame.start : frame.stop]

    covered = [item for frame in frames for item in frame]
    assert sorted(set(covered)) == items
    assert len(covered) == count + overlap * (len(frames) - 1)


def test_partition_frames_are_views_of_the_source():
    items = ["a", "b", "c", "d"]
    frames = partition(items, 3, 1)
    assert isinstance(frames[0], Frame)
    assert frames[0].source is items
    assert frames[1][0] == "c"
    assert frames[1][-1] == "d"
    assert frames[0][1:] == ["b", "c"]
    assert frames[1].indices == range(2, 4)


@pytest.mark.parametrize(
    "count, step, overlap",
    [(10, 3, 3), (10, 2, 4), (4, 5, 4), (3, 5, 4), (0, 3, 1), (5, 3, -1)],
)
def test_partition_rejects_invalid_window_configuration(count, step, overlap):
    with pytest.raises(ConfigurationError):
        partition(list(range(count)), step, overlap)


def test_window_starts_matches_step_minus_overlap():
    assert list(window_starts(12, 5, 2)) == [0, 3, 6, 9]


def test_too_few_items_reported_before_step_check():
    with pytest.raises(ConfigurationError, match="Need more than 4 tiles"):
        window_starts(2, 2, 4)
