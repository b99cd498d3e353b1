from __future__ import annotations

import pytest

from installconfig.assets.platform import (
    DEFAULT_REPLICAS,
    LIBVIRT_DEFAULT_MACHINE_CIDR,
    PlatformDefaults,
    resolve_platform,
    supported_platforms,
)
from installconfig.domain.models import AWSPlatform, NonePlatform, Platform
from installconfig.errors import InstallConfigError, UnknownPlatformError

from .. import make_variant


def test_supported_platforms_are_listed_alphabetically() -> None:
    assert supported_platforms() == ("aws", "libvirt", "none", "openstack")


def test_libvirt_overrides_machine_cidr_and_uses_single_replicas() -> None:
    defaults = resolve_platform(Platform.of(make_variant("libvirt")))

    assert defaults == PlatformDefaults(
        variant="libvirt",
        machine_cidr=LIBVIRT_DEFAULT_MACHINE_CIDR,
        master_replicas=1,
        worker_replicas=1,
    )


@pytest.mark.parametrize("name", ["aws", "none", "openstack"])
def test_other_variants_keep_global_defaults(name: str) -> None:
    defaults = resolve_platform(Platform.of(make_variant(name)))

    assert defaults.variant == name
    assert defaults.machine_cidr is None
    assert defaults.master_replicas == DEFAULT_REPLICAS
    assert defaults.worker_replicas == DEFAULT_REPLICAS


def test_empty_platform_is_an_invariant_violation() -> None:
    with pytest.raises(UnknownPlatformError, match="no platform variant is populated") as excinfo:
        resolve_platform(Platform())

    assert not isinstance(excinfo.value, InstallConfigError)
    assert excinfo.value.populated == ()


def test_multiple_variants_are_an_invariant_violation() -> None:
    platform = Platform(aws=AWSPlatform(region="us-east-1"), none=NonePlatform())

    with pytest.raises(UnknownPlatformError, match="multiple platform variants") as excinfo:
        resolve_platform(platform)

    assert excinfo.value.populated == ("aws", "none")


def test_non_platform_input_is_rejected() -> None:
    with pytest.raises(UnknownPlatformError, match="unsupported platform variant: str"):
        resolve_platform("none")  # type: ignore[arg-type]
