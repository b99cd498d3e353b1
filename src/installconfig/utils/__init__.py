"""Utility exports for filesystem helpers."""

from installconfig.utils.fs import PathLike, atomic_write, is_within

__all__ = [
    "PathLike",
    "atomic_write",
    "is_within",
]
