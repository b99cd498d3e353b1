"""Shared deterministic builders for install-config unit tests."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Final

from installconfig.assets.files import AssetFile
from installconfig.assets.synthesis import synthesize_install_config
from installconfig.domain.dependencies import DependencyValueSet
from installconfig.domain.models import (
    AWSPlatform,
    InstallConfig,
    LibvirtNetwork,
    LibvirtPlatform,
    NonePlatform,
    OpenStackPlatform,
    Platform,
    PlatformVariant,
)

PULL_SECRET: Final[str] = '{"auths":{"quay.io":{"auth":"dXNlcjpwYXNzd29yZA==","email":"a@b.c"}}}'
CLUSTER_ID: Final[str] = "6f8d9a62-2f7b-4c27-9c55-0f3c2c1b7e10"
CLUSTER_NAME: Final[str] = "test-cluster"
BASE_DOMAIN: Final[str] = "example.com"


def make_ssh_key(key_type: str = "ssh-ed25519", *, comment: str = "tester@example") -> str:
    name = key_type.encode("ascii")
    blob = len(name).to_bytes(4, "big") + name + (32).to_bytes(4, "big") + bytes(range(32))
    return f"{key_type} {base64.b64encode(blob).decode('ascii')} {comment}"


def make_variant(name: str) -> PlatformVariant:
    if name == "aws":
        return AWSPlatform(region="us-east-1", user_tags={"team": "infra", "env": "ci"})
    if name == "libvirt":
        return LibvirtPlatform(
            uri="qemu+tcp://192.168.122.1/system",
            network=LibvirtNetwork(interface="tt0", ip_range="192.168.124.0/24"),
        )
    if name == "none":
        return NonePlatform()
    if name == "openstack":
        return OpenStackPlatform(
            region="regionOne",
            cloud="openstack",
            external_network="public",
            base_image="rhcos",
        )
    raise ValueError(f"unknown platform variant {name!r}")


def make_values(platform: str | Platform = "none", **overrides: object) -> DependencyValueSet:
    selected = platform if isinstance(platform, Platform) else Platform.of(make_variant(platform))
    values: dict[str, object] = {
        "cluster_id": CLUSTER_ID,
        "ssh_key": make_ssh_key(),
        "base_domain": BASE_DOMAIN,
        "cluster_name": CLUSTER_NAME,
        "pull_secret": PULL_SECRET,
        "platform": selected,
    }
    values.update(overrides)
    return DependencyValueSet(**values)  # type: ignore[arg-type]


def make_install_config(platform: str = "none", **overrides: object) -> InstallConfig:
    return synthesize_install_config(make_values(platform, **overrides))


class MemoryFileFetcher:
    """In-memory ``FileFetcher``; values may be bytes or an exception to raise."""

    def __init__(self, files: Mapping[str, bytes | BaseException] | None = None) -> None:
        self._files = dict(files or {})
        self.requested: list[str] = []

    def fetch_by_name(self, name: str) -> AssetFile:
        self.requested.append(name)
        if name not in self._files:
            raise FileNotFoundError(name)
        entry = self._files[name]
        if isinstance(entry, BaseException):
            raise entry
        return AssetFile(filename=name, data=entry)


__all__ = [
    "BASE_DOMAIN",
    "CLUSTER_ID",
    "CLUSTER_NAME",
    "MemoryFileFetcher",
    "PULL_SECRET",
    "make_install_config",
    "make_ssh_key",
    "make_values",
    "make_variant",
]
