"""Resolved upstream values consumed by install-config synthesis."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from installconfig.domain.models import Platform
from installconfig.errors import MissingDependencyError


class DependencyKind(StrEnum):
    CLUSTER_ID = "cluster_id"
    SSH_KEY = "ssh_key"
    BASE_DOMAIN = "base_domain"
    CLUSTER_NAME = "cluster_name"
    PULL_SECRET = "pull_secret"
    PLATFORM = "platform"


# Static dependency declaration of the install-config asset, in resolution order.
DEPENDENCY_KINDS: Final[tuple[DependencyKind, ...]] = (
    DependencyKind.CLUSTER_ID,
    DependencyKind.SSH_KEY,
    DependencyKind.BASE_DOMAIN,
    DependencyKind.CLUSTER_NAME,
    DependencyKind.PULL_SECRET,
    DependencyKind.PLATFORM,
)


@dataclass(frozen=True, slots=True)
class DependencyValueSet:
    """Immutable snapshot of every value the synthesizer reads.

    The snapshot is produced by whatever resolves the dependency graph; the
    synthesizer never triggers resolution itself and never mutates the values.
    """

    cluster_id: str
    ssh_key: str
    base_domain: str
    cluster_name: str
    pull_secret: str
    platform: Platform

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> DependencyValueSet:
        """Build a snapshot from values keyed by ``DependencyKind``.

        Raises ``MissingDependencyError`` naming every absent kind.
        """

        missing = [kind.value for kind in DEPENDENCY_KINDS if values.get(kind.value) is None]
        if missing:
            raise MissingDependencyError(missing)

        platform = values[DependencyKind.PLATFORM.value]
        if not isinstance(platform, Platform):
            kind = DependencyKind.PLATFORM.value
            raise TypeError(f"{kind} must be a Platform, got {type(platform).__name__}")
        return cls(
            cluster_id=_as_text(values, DependencyKind.CLUSTER_ID),
            ssh_key=_as_text(values, DependencyKind.SSH_KEY),
            base_domain=_as_text(values, DependencyKind.BASE_DOMAIN),
            cluster_name=_as_text(values, DependencyKind.CLUSTER_NAME),
            pull_secret=_as_text(values, DependencyKind.PULL_SECRET),
            platform=platform,
        )


def _as_text(values: Mapping[str, object], kind: DependencyKind) -> str:
    value = values[kind.value]
    if not isinstance(value, str):
        raise TypeError(f"{kind.value} must be a string, got {type(value).__name__}")
    return value


__all__ = ["DEPENDENCY_KINDS", "DependencyKind", "DependencyValueSet"]
