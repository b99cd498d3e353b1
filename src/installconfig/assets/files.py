"""Persisted asset files and the storage seams the reconciler reads through."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol, runtime_checkable

from installconfig.utils.fs import PathLike, atomic_write, is_within

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssetFile:
    """A named byte payload as stored under the asset directory."""

    filename: str
    data: bytes

    def with_filename(self, filename: str) -> AssetFile:
        return replace(self, filename=filename)


@runtime_checkable
class FileFetcher(Protocol):
    """Read access to persisted assets by logical filename.

    Implementations raise ``FileNotFoundError`` when the name is absent and
    any other ``OSError`` for storage failures.
    """

    def fetch_by_name(self, name: str) -> AssetFile: ...


class FilesProvider(Protocol):
    def files(self) -> tuple[AssetFile, ...]: ...


class DirectoryFileFetcher:
    """``FileFetcher`` backed by a directory on the local filesystem."""

    __slots__ = ("_root",)

    def __init__(self, root: PathLike) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def fetch_by_name(self, name: str) -> AssetFile:
        path = self._root / name
        if not self._root.exists():
            raise FileNotFoundError(f"asset directory does not exist: {self._root}")
        if not self._root.is_dir():
            raise NotADirectoryError(f"asset directory is not a directory: {self._root}")
        if not is_within(path, self._root):
            raise PermissionError(f"refusing to read outside asset directory: {name!r}")
        data = path.read_bytes()
        logger.debug("fetched asset file", extra={"asset_file": name, "size": len(data)})
        return AssetFile(filename=name, data=data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._root)!r})"


def write_asset_files(asset: FilesProvider, directory: PathLike) -> tuple[Path, ...]:
    """Persist every file of ``asset`` under ``directory``; return written paths."""

    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for item in asset.files():
        target = root / item.filename
        if not is_within(target, root):
            raise PermissionError(f"refusing to write outside asset directory: {item.filename!r}")
        target.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(target, item.data)
        logger.info("wrote asset file", extra={"asset_file": item.filename, "path": str(target)})
        written.append(target)
    return tuple(written)


__all__ = [
    "AssetFile",
    "DirectoryFileFetcher",
    "FileFetcher",
    "FilesProvider",
    "write_asset_files",
]
