"""Stable constants shared across the install-config packages."""

from __future__ import annotations

from typing import Final

# Persisted artifact names.
INSTALL_CONFIG_FILENAME: Final[str] = "install-config.yaml"
DEPRECATED_INSTALL_CONFIG_FILENAME: Final[str] = "install-config.yml"
INSTALL_CONFIG_ASSET_NAME: Final[str] = "Install Config"

# Runtime settings file and environment prefix.
DEFAULT_SETTINGS_FILE: Final[str] = "installer.toml"
ENV_PREFIX: Final[str] = "INSTALLER_"
SETTINGS_SCHEMA_VERSION: Final[int] = 1

# Machine pool role names, in the order they are emitted.
MASTER_POOL: Final[str] = "master"
WORKER_POOL: Final[str] = "worker"
MACHINE_POOL_NAMES: Final[tuple[str, ...]] = (MASTER_POOL, WORKER_POOL)

# Supported platform variants, in declaration order.
PLATFORM_AWS: Final[str] = "aws"
PLATFORM_LIBVIRT: Final[str] = "libvirt"
PLATFORM_NONE: Final[str] = "none"
PLATFORM_OPENSTACK: Final[str] = "openstack"
PLATFORM_NAMES: Final[tuple[str, ...]] = (
    PLATFORM_AWS,
    PLATFORM_LIBVIRT,
    PLATFORM_NONE,
    PLATFORM_OPENSTACK,
)

# Network plugins accepted in a persisted install config.
NETWORK_TYPE_OPENSHIFT_SDN: Final[str] = "OpenshiftSDN"
NETWORK_TYPES: Final[tuple[str, ...]] = (NETWORK_TYPE_OPENSHIFT_SDN, "OVNKubernetes")

__all__ = [
    "DEFAULT_SETTINGS_FILE",
    "DEPRECATED_INSTALL_CONFIG_FILENAME",
    "ENV_PREFIX",
    "INSTALL_CONFIG_ASSET_NAME",
    "INSTALL_CONFIG_FILENAME",
    "MACHINE_POOL_NAMES",
    "MASTER_POOL",
    "NETWORK_TYPES",
    "NETWORK_TYPE_OPENSHIFT_SDN",
    "PLATFORM_AWS",
    "PLATFORM_LIBVIRT",
    "PLATFORM_NAMES",
    "PLATFORM_NONE",
    "PLATFORM_OPENSTACK",
    "SETTINGS_SCHEMA_VERSION",
    "WORKER_POOL",
]
