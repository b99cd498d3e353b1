"""
installconfig — unit tests for domain models

File: tests/unit/domain/test_install_config_models.py
Last updated: 2026-10-18

Purpose
- Validate the install-config dataclasses, their wire field names, and structural decoding.

What this test file should cover
- Serialized key names and order.
- Platform variant selection helpers.
- Structural decode failures naming the offending field path.
- Dependency snapshot construction from a mapping.

Functional requirements
- Offline; no filesystem access.
"""

from __future__ import annotations

import pytest

from installconfig.domain.dependencies import (
    DEPENDENCY_KINDS,
    DependencyKind,
    DependencyValueSet,
)
from installconfig.domain.models import (
    AWSPlatform,
    InstallConfig,
    MachinePool,
    NonePlatform,
    Platform,
)
from installconfig.errors import InstallConfigError, MissingDependencyError

from .. import CLUSTER_ID, PULL_SECRET, make_install_config, make_variant


def test_install_config_to_dict_uses_wire_names_in_fixed_order() -> None:
    config = make_install_config("aws")
    payload = config.to_dict()

    assert list(payload) == [
        "metadata",
        "clusterID",
        "sshKey",
        "baseDomain",
        "networking",
        "machines",
        "platform",
        "pullSecret",
    ]
    assert payload["metadata"] == {"name": "test-cluster"}
    assert payload["clusterID"] == CLUSTER_ID
    assert payload["pullSecret"] == PULL_SECRET
    assert list(payload["networking"]) == [  # type: ignore[arg-type]
        "type",
        "machineCIDR",
        "serviceCIDR",
        "clusterNetworks",
    ]
    assert payload["platform"] == {
        "aws": {"region": "us-east-1", "userTags": {"env": "ci", "team": "infra"}}
    }


def test_libvirt_variant_serializes_uri_and_network_interface_keys() -> None:
    platform = Platform.of(make_variant("libvirt"))

    assert platform.to_dict() == {
        "libvirt": {
            "URI": "qemu+tcp://192.168.122.1/system",
            "network": {"if": "tt0", "ipRange": "192.168.124.0/24"},
        }
    }


def test_platform_populated_and_variant_reflect_set_fields() -> None:
    empty = Platform()
    single = Platform.of(NonePlatform())
    double = Platform(aws=AWSPlatform(region="us-east-1"), none=NonePlatform())

    assert empty.populated() == ()
    assert empty.variant is None
    assert single.populated() == ("none",)
    assert single.variant == "none"
    assert double.populated() == ("aws", "none")
    assert double.variant is None


def test_machine_pool_omits_absent_replicas() -> None:
    assert MachinePool(name="worker", replicas=None).to_dict() == {"name": "worker"}
    assert MachinePool(name="worker", replicas=2).to_dict() == {"name": "worker", "replicas": 2}


def test_from_dict_round_trips_to_an_equal_model() -> None:
    for name in ("aws", "libvirt", "none", "openstack"):
        config = make_install_config(name)
        assert InstallConfig.from_dict(config.to_dict()) == config


def test_from_dict_tolerates_absent_scalars_for_the_validator() -> None:
    decoded = InstallConfig.from_dict({"metadata": {"name": "demo"}})

    assert decoded.cluster_name == "demo"
    assert decoded.cluster_id == ""
    assert decoded.machines == ()
    assert decoded.platform.populated() == ()


def test_from_dict_ignores_creation_timestamp_metadata() -> None:
    payload = make_install_config().to_dict()
    payload["metadata"] = {"name": "test-cluster", "creationTimestamp": None}

    assert InstallConfig.from_dict(payload).cluster_name == "test-cluster"


@pytest.mark.parametrize(
    ("mutate", "match"),
    [
        (lambda p: p.update({"extra": 1}), r"<root>: unexpected fields: \['extra'\]"),
        (lambda p: p.update({"clusterID": 7}), r"clusterID: expected string, got int"),
        (
            lambda p: p["machines"][0].update({"replicas": "three"}),
            r"machines\[0\]\.replicas: expected integer, got str",
        ),
        (
            lambda p: p["machines"][0].update({"replicas": True}),
            r"machines\[0\]\.replicas: expected integer, got bool",
        ),
        (
            lambda p: p["platform"].update({"gcp": {}}),
            r"platform: unexpected fields: \['gcp'\]",
        ),
        (
            lambda p: p["networking"].update({"clusterNetworks": "10.0.0.0/8"}),
            r"networking\.clusterNetworks: expected array, got str",
        ),
        (lambda p: p.update({"metadata": []}), r"metadata: expected object, got list"),
        (lambda p: p.update({"networking": ""}), r"networking: expected object, got str"),
        (lambda p: p.update({"platform": 0}), r"platform: expected object, got int"),
    ],
)
def test_from_dict_rejects_malformed_structure_with_field_path(mutate, match: str) -> None:
    payload = make_install_config().to_dict()
    mutate(payload)

    with pytest.raises(ValueError, match=match):
        InstallConfig.from_dict(payload)


def test_dependency_kinds_are_declared_statically_in_resolution_order() -> None:
    assert [kind.value for kind in DEPENDENCY_KINDS] == [
        "cluster_id",
        "ssh_key",
        "base_domain",
        "cluster_name",
        "pull_secret",
        "platform",
    ]


def test_dependency_value_set_from_mapping_reports_every_missing_kind() -> None:
    with pytest.raises(MissingDependencyError) as excinfo:
        DependencyValueSet.from_mapping(
            {
                DependencyKind.CLUSTER_ID.value: CLUSTER_ID,
                DependencyKind.SSH_KEY.value: "",
            }
        )

    assert excinfo.value.missing == ("base_domain", "cluster_name", "pull_secret", "platform")
    assert isinstance(excinfo.value, InstallConfigError)
    assert "unresolved dependencies: base_domain" in str(excinfo.value)


def test_dependency_value_set_from_mapping_builds_snapshot() -> None:
    platform = Platform.of(NonePlatform())
    values = DependencyValueSet.from_mapping(
        {
            "cluster_id": CLUSTER_ID,
            "ssh_key": "",
            "base_domain": "example.com",
            "cluster_name": "demo",
            "pull_secret": PULL_SECRET,
            "platform": platform,
        }
    )

    assert values.platform is platform
    assert values.cluster_name == "demo"


def test_dependency_value_set_from_mapping_rejects_wrong_platform_type() -> None:
    with pytest.raises(TypeError, match="platform must be a Platform"):
        DependencyValueSet.from_mapping(
            {
                "cluster_id": CLUSTER_ID,
                "ssh_key": "",
                "base_domain": "example.com",
                "cluster_name": "demo",
                "pull_secret": PULL_SECRET,
                "platform": "none",
            }
        )


def test_aws_user_tags_are_copied_into_sorted_pairs() -> None:
    tags = {"team": "infra", "env": "ci"}
    variant = AWSPlatform(region="us-east-1", user_tags=tags)

    tags["owner"] = "someone-else"

    assert variant.user_tags == (("env", "ci"), ("team", "infra"))
    assert variant.to_dict()["userTags"] == {"env": "ci", "team": "infra"}
    assert hash(Platform.of(variant)) == hash(Platform.of(make_variant("aws")))
