"""Platform variant resolution: per-platform defaults for synthesis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from installconfig.constants import (
    PLATFORM_AWS,
    PLATFORM_LIBVIRT,
    PLATFORM_NONE,
    PLATFORM_OPENSTACK,
)
from installconfig.domain.models import Platform
from installconfig.errors import UnknownPlatformError

DEFAULT_REPLICAS: Final[int] = 3
SINGLE_NODE_REPLICAS: Final[int] = 1
LIBVIRT_DEFAULT_MACHINE_CIDR: Final[str] = "192.168.126.0/24"


@dataclass(frozen=True, slots=True)
class PlatformDefaults:
    """Variant-specific parameters consumed by the synthesizer.

    ``machine_cidr`` is ``None`` when the variant keeps the global default.
    """

    variant: str
    machine_cidr: str | None
    master_replicas: int
    worker_replicas: int


# One entry per supported variant; adding a platform means adding a row here.
_VARIANT_DEFAULTS: Final[dict[str, PlatformDefaults]] = {
    PLATFORM_AWS: PlatformDefaults(
        variant=PLATFORM_AWS,
        machine_cidr=None,
        master_replicas=DEFAULT_REPLICAS,
        worker_replicas=DEFAULT_REPLICAS,
    ),
    PLATFORM_LIBVIRT: PlatformDefaults(
        variant=PLATFORM_LIBVIRT,
        machine_cidr=LIBVIRT_DEFAULT_MACHINE_CIDR,
        master_replicas=SINGLE_NODE_REPLICAS,
        worker_replicas=SINGLE_NODE_REPLICAS,
    ),
    PLATFORM_NONE: PlatformDefaults(
        variant=PLATFORM_NONE,
        machine_cidr=None,
        master_replicas=DEFAULT_REPLICAS,
        worker_replicas=DEFAULT_REPLICAS,
    ),
    PLATFORM_OPENSTACK: PlatformDefaults(
        variant=PLATFORM_OPENSTACK,
        machine_cidr=None,
        master_replicas=DEFAULT_REPLICAS,
        worker_replicas=DEFAULT_REPLICAS,
    ),
}


def resolve_platform(platform: Platform) -> PlatformDefaults:
    """Return the defaults for the single populated variant of ``platform``.

    Raises ``UnknownPlatformError`` when zero or several variants are populated
    or the populated one has no defaults registered.
    """

    if not isinstance(platform, Platform):
        raise UnknownPlatformError((type(platform).__name__,))
    populated = platform.populated()
    if len(populated) != 1:
        raise UnknownPlatformError(populated)
    defaults = _VARIANT_DEFAULTS.get(populated[0])
    if defaults is None:
        raise UnknownPlatformError(populated)
    return defaults


def supported_platforms() -> tuple[str, ...]:
    return tuple(_VARIANT_DEFAULTS)


__all__ = [
    "DEFAULT_REPLICAS",
    "LIBVIRT_DEFAULT_MACHINE_CIDR",
    "PlatformDefaults",
    "SINGLE_NODE_REPLICAS",
    "resolve_platform",
    "supported_platforms",
]
