from __future__ import annotations

from pathlib import Path

import pytest
from run_timeline.core import fs


def test_atomic_write_text_overwrites(tmp_path: Path) -> None:
    path = tmp_path / "d1" / "timeline.json"
    fs.atomic_write_text(path, "[]\n")
    assert path.read_text() == "[]\n"

    fs.atomic_write_text(path, "[1]")
    assert path.read_text() == "[1]"

    leftovers = [p.name for p in path.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_atomic_target_keeps_old_file_on_error(tmp_path: Path) -> None:
    path = tmp_path / "timeline.parquet"
    path.write_text("old")

    with pytest.raises(RuntimeError):
        with fs.atomic_target(path) as tmp:
            tmp.write_text("half written")
            raise RuntimeError("export failed")

    assert path.read_text() == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["timeline.parquet"]


def test_safe_unlink_missing_file_is_noop(tmp_path: Path) -> None:
    target = tmp_path / "nope.txt"
    fs.safe_unlink(target)
    assert not target.exists()

    fs.ensure_parent(tmp_path / "a" / "b" / "c.txt")
    assert (tmp_path / "a" / "b").is_dir()
