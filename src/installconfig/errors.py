"""
installconfig — error taxonomy.

File: src/installconfig/errors.py
Last updated: 2026-10-18

Purpose
- Define the caller-facing failures of the load/generate cycle.

What should be included in this file
- ``InstallConfigError`` and its read/decode/validate/encode subclasses.
- ``UnknownPlatformError`` for broken upstream platform resolution.

Functional requirements
- Every recoverable error names the file it concerns.
- The platform invariant violation must not be an ``InstallConfigError`` so
  handlers of ordinary failures never swallow it.

Non-functional requirements
- No imports from other installconfig modules (leaf module).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from installconfig.validation.install_config import FieldError


class InstallConfigError(Exception):
    """Base class for failures surfaced to the caller of a synthesis cycle."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        self.filename = filename
        super().__init__(message)


class ArtifactReadError(InstallConfigError):
    """Raised when storage fails for a reason other than the file being absent."""


class ArtifactDecodeError(InstallConfigError):
    """Raised when persisted bytes do not parse into an install config."""


class ArtifactEncodeError(InstallConfigError):
    """Raised when an install config cannot be serialized."""


class ArtifactValidationError(InstallConfigError):
    """Raised when a persisted install config fails validation."""

    def __init__(self, filename: str, errors: Sequence[FieldError]) -> None:
        self.errors = tuple(errors)
        if not self.errors:
            rendered = "- <root>: unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.errors)
        super().__init__(f"invalid {filename!r} file:\n{rendered}", filename=filename)


class MissingDependencyError(InstallConfigError):
    """Raised when a dependency value set is built from an incomplete snapshot."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"unresolved dependencies: {', '.join(self.missing)}")


class UnknownPlatformError(RuntimeError):
    """Raised when the platform selection does not hold exactly one variant.

    Only broken upstream dependency resolution produces this, so it sits
    outside the ``InstallConfigError`` hierarchy.
    """

    def __init__(self, populated: Sequence[str]) -> None:
        self.populated = tuple(populated)
        if not self.populated:
            detail = "no platform variant is populated"
        elif len(self.populated) == 1:
            detail = f"unsupported platform variant: {self.populated[0]}"
        else:
            detail = f"multiple platform variants are populated: {', '.join(self.populated)}"
        super().__init__(f"unknown platform type: {detail}")


__all__ = [
    "ArtifactDecodeError",
    "ArtifactEncodeError",
    "ArtifactReadError",
    "ArtifactValidationError",
    "InstallConfigError",
    "MissingDependencyError",
    "UnknownPlatformError",
]
