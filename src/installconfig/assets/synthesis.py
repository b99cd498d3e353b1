"""Install-config synthesis from a resolved dependency snapshot.

This is the single place defaulting policy lives. Synthesis performs no I/O
and is deterministic: the same snapshot always yields an equal config, and
therefore byte-identical YAML.
"""

from __future__ import annotations

from typing import Final

from installconfig.assets.platform import PlatformDefaults, resolve_platform
from installconfig.constants import MASTER_POOL, NETWORK_TYPE_OPENSHIFT_SDN, WORKER_POOL
from installconfig.domain.dependencies import DependencyValueSet
from installconfig.domain.models import (
    ClusterNetworkEntry,
    InstallConfig,
    MachinePool,
    Networking,
    Platform,
)
from installconfig.errors import UnknownPlatformError

DEFAULT_MACHINE_CIDR: Final[str] = "10.0.0.0/16"
DEFAULT_SERVICE_CIDR: Final[str] = "172.30.0.0/16"
DEFAULT_CLUSTER_CIDR: Final[str] = "10.128.0.0/14"
# Equivalent to a /23 per node.
DEFAULT_HOST_SUBNET_LENGTH: Final[int] = 9
DEFAULT_NETWORK_TYPE: Final[str] = NETWORK_TYPE_OPENSHIFT_SDN


def synthesize_install_config(
    values: DependencyValueSet,
    defaults: PlatformDefaults | None = None,
) -> InstallConfig:
    """Merge ``values`` and the platform defaults into a new ``InstallConfig``.

    ``defaults`` is resolved from ``values.platform`` when not supplied; an
    unrecognized or absent platform variant raises ``UnknownPlatformError``.
    """

    resolved = defaults if defaults is not None else resolve_platform(values.platform)
    selected = getattr(values.platform, resolved.variant, None)
    if selected is None:
        raise UnknownPlatformError(values.platform.populated())

    return InstallConfig(
        cluster_name=values.cluster_name,
        cluster_id=values.cluster_id,
        ssh_key=values.ssh_key,
        base_domain=values.base_domain,
        networking=Networking(
            type=DEFAULT_NETWORK_TYPE,
            machine_cidr=resolved.machine_cidr or DEFAULT_MACHINE_CIDR,
            service_cidr=DEFAULT_SERVICE_CIDR,
            cluster_networks=(
                ClusterNetworkEntry(
                    cidr=DEFAULT_CLUSTER_CIDR,
                    host_subnet_length=DEFAULT_HOST_SUBNET_LENGTH,
                ),
            ),
        ),
        machines=(
            MachinePool(name=MASTER_POOL, replicas=resolved.master_replicas),
            MachinePool(name=WORKER_POOL, replicas=resolved.worker_replicas),
        ),
        platform=Platform.of(selected),
        pull_secret=values.pull_secret,
    )


__all__ = [
    "DEFAULT_CLUSTER_CIDR",
    "DEFAULT_HOST_SUBNET_LENGTH",
    "DEFAULT_MACHINE_CIDR",
    "DEFAULT_NETWORK_TYPE",
    "DEFAULT_SERVICE_CIDR",
    "synthesize_install_config",
]
