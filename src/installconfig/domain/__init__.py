"""
installconfig — domain layer

File: src/installconfig/domain/__init__.py
Last updated: 2026-10-18

Purpose
- Domain types shared across packages: InstallConfig, Platform variants,
  DependencyValueSet, and the YAML codec.

What should be included in this file
- Re-export of core domain entities for convenience.
- Keep domain layer free of filesystem side effects.

Functional requirements
- Domain objects must be immutable and serializable.
"""

from installconfig.domain.codec import dump_install_config, parse_install_config
from installconfig.domain.dependencies import (
    DEPENDENCY_KINDS,
    DependencyKind,
    DependencyValueSet,
)
from installconfig.domain.models import (
    AWSPlatform,
    ClusterNetworkEntry,
    InstallConfig,
    LibvirtNetwork,
    LibvirtPlatform,
    MachinePool,
    Networking,
    NonePlatform,
    OpenStackPlatform,
    Platform,
    PlatformVariant,
)

__all__ = [
    "AWSPlatform",
    "ClusterNetworkEntry",
    "DEPENDENCY_KINDS",
    "DependencyKind",
    "DependencyValueSet",
    "InstallConfig",
    "LibvirtNetwork",
    "LibvirtPlatform",
    "MachinePool",
    "Networking",
    "NonePlatform",
    "OpenStackPlatform",
    "Platform",
    "PlatformVariant",
    "dump_install_config",
    "parse_install_config",
]
