"""Filesystem helpers for persisting assets under a single root directory."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]


def atomic_write(path: PathLike, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers see either the old or the new bytes.

    The payload goes to a sibling temp file that is fsynced and then renamed
    over the target; the temp file is removed if any step fails.
    """

    target = Path(path)
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_name, target)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
    _sync_directory(target.parent)


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Whether ``child`` resolves inside the existing directory ``parent``."""

    root = Path(parent).resolve()
    if not root.is_dir():
        return False
    return Path(child).resolve().is_relative_to(root)


def _sync_directory(directory: Path) -> None:
    # Persists the rename on POSIX; Windows cannot open directories.
    if os.name == "nt":
        return
    dir_fd = os.open(directory, os.O_RDONLY | getattr(os, "O_DIRECTORY", 0))
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)


__all__ = ["PathLike", "atomic_write", "is_within"]
