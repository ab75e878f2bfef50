import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


def ensure_parent(path: Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def safe_unlink(path: os.PathLike[str] | str) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        return


def fsync_path(path: Path) -> None:
    """fsync a file or directory; best effort on filesystems that refuse it."""
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


@contextmanager
def atomic_target(path: Path) -> Iterator[Path]:
    """
    Yield a temp path next to `path` for the caller to write.

    On a clean exit the temp file is synced and renamed over `path`, so readers
    see either the old complete export or the new one. On error the temp file
    is removed and `path` is untouched.
    """
    path = Path(path)
    ensure_parent(path)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        yield tmp
        fsync_path(tmp)
        os.replace(tmp, path)
        fsync_path(path.parent)
    finally:
        safe_unlink(tmp)


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    with atomic_target(path) as tmp:
        tmp.write_text(text, encoding=encoding, newline="\n")
