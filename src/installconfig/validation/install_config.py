"""
installconfig — install-config validation.

File: src/installconfig/validation/install_config.py
Last updated: 2026-10-18

Purpose
- Check a decoded install config against the semantic rules a hand-edited
  ``install-config.yaml`` must satisfy before it replaces synthesis.

What should be included in this file
- Field-level rules for metadata, identity, keys, networking, machine pools,
  every platform variant, and the pull secret.
- A structured verdict (field path + message) and an aggregate error.

Functional requirements
- Report every failure, in document order; never stop at the first one.
- An empty verdict means the config is accepted.

Non-functional requirements
- Deterministic and side-effect free (no network lookups).
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import json
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

from installconfig.constants import MACHINE_POOL_NAMES, NETWORK_TYPES
from installconfig.domain.models import (
    AWSPlatform,
    InstallConfig,
    LibvirtPlatform,
    Networking,
    OpenStackPlatform,
    Platform,
)

_DNS_LABEL: Final[str] = r"[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS_SUBDOMAIN_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^{_DNS_LABEL}(\.{_DNS_LABEL})*$"
)
_MAX_DNS_SUBDOMAIN: Final[int] = 253

_SSH_KEY_TYPES: Final[frozenset[str]] = frozenset(
    {
        "ssh-rsa",
        "ssh-dss",
        "ssh-ed25519",
        "ecdsa-sha2-nistp256",
        "ecdsa-sha2-nistp384",
        "ecdsa-sha2-nistp521",
        "sk-ssh-ed25519@openssh.com",
        "sk-ecdsa-sha2-nistp256@openssh.com",
    }
)

AWS_REGIONS: Final[tuple[str, ...]] = (
    "ap-northeast-1",
    "ap-northeast-2",
    "ap-northeast-3",
    "ap-south-1",
    "ap-southeast-1",
    "ap-southeast-2",
    "ca-central-1",
    "cn-north-1",
    "cn-northwest-1",
    "eu-central-1",
    "eu-north-1",
    "eu-west-1",
    "eu-west-2",
    "eu-west-3",
    "sa-east-1",
    "us-east-1",
    "us-east-2",
    "us-west-1",
    "us-west-2",
)


@dataclass(frozen=True, slots=True)
class FieldError:
    """Single structured validation failure."""

    path: str
    message: str


Validator = Callable[[InstallConfig], Sequence[FieldError]]


class InstallConfigValidationError(ValueError):
    """Raised when strict install-config validation fails."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors = tuple(errors)
        if not self.errors:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.errors)
        super().__init__(f"invalid install config:\n{rendered}")


class _ErrorCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[FieldError] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(FieldError(path=path, message=message))

    def items(self) -> tuple[FieldError, ...]:
        return tuple(self._items)


def validate_install_config(config: InstallConfig) -> tuple[FieldError, ...]:
    """Validate ``config`` and return every field error with a deterministic path."""

    errors = _ErrorCollector()

    _validate_dns_subdomain(config.cluster_name, "metadata.name", errors)
    if not config.cluster_id.strip():
        errors.add("clusterID", "must not be empty")
    if config.ssh_key.strip():
        _validate_ssh_public_key(config.ssh_key, "sshKey", errors)
    _validate_dns_subdomain(config.base_domain, "baseDomain", errors)
    _validate_networking(config.networking, "networking", errors)
    _validate_machines(config, "machines", errors)
    _validate_platform(config.platform, "platform", errors)
    _validate_pull_secret(config.pull_secret, "pullSecret", errors)

    return errors.items()


def assert_valid_install_config(config: InstallConfig) -> InstallConfig:
    """Validate ``config`` and raise ``InstallConfigValidationError`` on failure."""

    errors = validate_install_config(config)
    if errors:
        raise InstallConfigValidationError(errors)
    return config


def _validate_dns_subdomain(value: str, path: str, errors: _ErrorCollector) -> None:
    if not value:
        errors.add(path, "must not be empty")
        return
    if len(value) > _MAX_DNS_SUBDOMAIN:
        errors.add(path, f"must be no more than {_MAX_DNS_SUBDOMAIN} characters")
        return
    if not _DNS_SUBDOMAIN_PATTERN.fullmatch(value):
        errors.add(
            path,
            "must be a lowercase RFC 1123 subdomain: alphanumeric characters, '-' or '.', "
            "starting and ending with an alphanumeric character",
        )


def _validate_ssh_public_key(value: str, path: str, errors: _ErrorCollector) -> None:
    parts = value.strip().split(None, 2)
    if len(parts) < 2:
        errors.add(path, "must be an OpenSSH public key (<type> <base64> [comment])")
        return

    key_type, encoded = parts[0], parts[1]
    if key_type not in _SSH_KEY_TYPES:
        errors.add(path, f"unsupported key type {key_type!r}")
        return

    try:
        blob = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        errors.add(path, "key data is not valid base64")
        return

    if len(blob) < 4:
        errors.add(path, "key data is truncated")
        return
    name_length = int.from_bytes(blob[:4], "big")
    embedded = blob[4 : 4 + name_length]
    if len(embedded) != name_length or embedded.decode("ascii", errors="replace") != key_type:
        errors.add(path, f"key data does not match key type {key_type!r}")


def _validate_networking(networking: Networking, path: str, errors: _ErrorCollector) -> None:
    if not networking.type:
        errors.add(f"{path}.type", "must not be empty")
    elif networking.type not in NETWORK_TYPES:
        expected = ", ".join(sorted(NETWORK_TYPES))
        errors.add(
            f"{path}.type", f"invalid value {networking.type!r}; expected one of: {expected}"
        )

    machine = _parse_cidr(networking.machine_cidr, f"{path}.machineCIDR", errors)
    service = _parse_cidr(networking.service_cidr, f"{path}.serviceCIDR", errors)
    if machine is not None and service is not None and machine.overlaps(service):
        errors.add(f"{path}.serviceCIDR", f"must not overlap with machineCIDR {machine}")

    if not networking.cluster_networks:
        errors.add(f"{path}.clusterNetworks", "must contain at least one entry")
        return

    for index, entry in enumerate(networking.cluster_networks):
        entry_path = f"{path}.clusterNetworks[{index}]"
        network = _parse_cidr(entry.cidr, f"{entry_path}.cidr", errors)
        if network is None:
            continue
        if service is not None and network.overlaps(service):
            errors.add(f"{entry_path}.cidr", f"must not overlap with serviceCIDR {service}")
        maximum = network.max_prefixlen - network.prefixlen
        if not 1 <= entry.host_subnet_length <= maximum:
            errors.add(
                f"{entry_path}.hostSubnetLength",
                f"must be between 1 and {maximum} for cluster network {network}",
            )


def _validate_machines(config: InstallConfig, path: str, errors: _ErrorCollector) -> None:
    seen: set[str] = set()
    for index, pool in enumerate(config.machines):
        pool_path = f"{path}[{index}]"
        if pool.name not in MACHINE_POOL_NAMES:
            expected = ", ".join(MACHINE_POOL_NAMES)
            errors.add(
                f"{pool_path}.name", f"invalid pool {pool.name!r}; expected one of: {expected}"
            )
        elif pool.name in seen:
            errors.add(f"{pool_path}.name", f"duplicate machine pool {pool.name!r}")
        seen.add(pool.name)

        if pool.replicas is None:
            errors.add(f"{pool_path}.replicas", "missing required field")
        elif pool.replicas < 1:
            errors.add(f"{pool_path}.replicas", "must be >= 1")

    for name in MACHINE_POOL_NAMES:
        if name not in seen:
            errors.add(path, f"missing required machine pool {name!r}")


def _validate_platform(platform: Platform, path: str, errors: _ErrorCollector) -> None:
    populated = platform.populated()
    if len(populated) != 1:
        found = ", ".join(populated) if populated else "none"
        errors.add(path, f"must specify exactly one platform (found: {found})")
        return

    if platform.aws is not None:
        _validate_aws(platform.aws, f"{path}.aws", errors)
    elif platform.libvirt is not None:
        _validate_libvirt(platform.libvirt, f"{path}.libvirt", errors)
    elif platform.openstack is not None:
        _validate_openstack(platform.openstack, f"{path}.openstack", errors)


def _validate_aws(aws: AWSPlatform, path: str, errors: _ErrorCollector) -> None:
    if not aws.region:
        errors.add(f"{path}.region", "must not be empty")
    elif aws.region not in AWS_REGIONS:
        errors.add(f"{path}.region", f"unsupported region {aws.region!r}")
    if aws.vpc_cidr_block is not None:
        _parse_cidr(aws.vpc_cidr_block, f"{path}.vpcCIDRBlock", errors)


def _validate_libvirt(libvirt: LibvirtPlatform, path: str, errors: _ErrorCollector) -> None:
    if not libvirt.uri.strip():
        errors.add(f"{path}.URI", "must not be empty")
    if not libvirt.network.interface.strip():
        errors.add(f"{path}.network.if", "must not be empty")
    _parse_cidr(libvirt.network.ip_range, f"{path}.network.ipRange", errors)


def _validate_openstack(
    openstack: OpenStackPlatform, path: str, errors: _ErrorCollector
) -> None:
    for key, value in (
        ("region", openstack.region),
        ("cloud", openstack.cloud),
        ("externalNetwork", openstack.external_network),
        ("baseImage", openstack.base_image),
    ):
        if not value.strip():
            errors.add(f"{path}.{key}", "must not be empty")


def _validate_pull_secret(value: str, path: str, errors: _ErrorCollector) -> None:
    if not value.strip():
        errors.add(path, "must not be empty")
        return
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        errors.add(path, f"must be valid JSON ({exc.msg})")
        return
    if not isinstance(parsed, dict):
        errors.add(path, "must be a JSON object")
        return
    if not isinstance(parsed.get("auths"), dict):
        errors.add(path, "must contain an 'auths' object")


def _parse_cidr(
    value: str, path: str, errors: _ErrorCollector
) -> ipaddress.IPv4Network | None:
    if not value:
        errors.add(path, "must not be empty")
        return None
    try:
        network = ipaddress.ip_network(value, strict=True)
    except ValueError as exc:
        errors.add(path, f"invalid CIDR {value!r} ({exc})")
        return None
    if not isinstance(network, ipaddress.IPv4Network):
        errors.add(path, "must be an IPv4 network")
        return None
    return network


__all__ = [
    "AWS_REGIONS",
    "FieldError",
    "InstallConfigValidationError",
    "Validator",
    "assert_valid_install_config",
    "validate_install_config",
]
