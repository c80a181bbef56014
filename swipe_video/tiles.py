"""Load and save tile records stored as JSON."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple, Union

from swipe_video.errors import TileSourceError
from swipe_video.models import Tile


def _caption_lines(record: Mapping[str, Any], key: str, index: int) -> Tuple[str, ...]:
    value = record.get(key, [])
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(line, str) for line in value):
        raise TileSourceError(f"Tile record {index}: '{key}' must be a list of strings")
    return tuple(value)


def parse_tile_records(records: Any, *, base_dir: Path) -> List[Tile]:
    """Turn decoded tile records into :class:`Tile` objects.

    Relative ``pic_path`` values resolve against ``base_dir``. A missing picture
    raises ``FileNotFoundError`` from :class:`Tile` itself.
    """
    if not isinstance(records, list):
        raise TileSourceError("Tile document must be a JSON array of records")

    tiles: List[Tile] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise TileSourceError(f"Tile record {index} is not an object")
        raw_path = record.get("pic_path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise TileSourceError(f"Tile record {index} has no 'pic_path'")

        pic_path = Path(raw_path)
        if not pic_path.is_absolute():
            pic_path = base_dir / pic_path
        tiles.append(
            Tile(
                pic_path=pic_path,
                text_up=_caption_lines(record, "text_up", index),
                text_down=_caption_lines(record, "text_down", index),
            )
        )
    return tiles


def load_tiles(path: Union[str, Path]) -> List[Tile]:
    tiles_path = Path(path)
    with tiles_path.open("r", encoding="utf-8") as handle:
        try:
            records = json.load(handle)
        except json.JSONDecodeError as exc:
            raise TileSourceError(f"Invalid JSON in {tiles_path}: {exc}") from exc
    return parse_tile_records(records, base_dir=tiles_path.resolve().parent)


def save_tiles(path: Union[str, Path], tiles: Sequence[Tile]) -> Path:
    """Write ``tiles`` in the format :func:`load_tiles` reads.

    Picture paths under the target directory are stored relative to it.
    """
    tiles_path = Path(path)
    base_dir = tiles_path.resolve().parent
    records = []
    for tile in tiles:
        pic_path = tile.pic_path.resolve()
        try:
            stored = pic_path.relative_to(base_dir).as_posix()
        except ValueError:
            stored = str(pic_path)
        records.append({
            "pic_path": stored,
            "text_up": list(tile.text_up),
            "text_down": list(tile.text_down),
        })

    tiles_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = tiles_path.with_name(f".tmp_{uuid.uuid4().hex}_{tiles_path.name}")
    with temp_path.open("w", encoding="utf-8") as handle:
        json.dump(records, handle, ensure_ascii=False, indent=2)
    temp_path.replace(tiles_path)
    return tiles_path


__all__ = ["load_tiles", "parse_tile_records", "save_tiles"]
