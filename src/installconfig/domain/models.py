"""Frozen dataclass models for the install config and its canonical serialization."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import NoReturn, TypeVar

from installconfig.constants import PLATFORM_NAMES

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

TModel = TypeVar("TModel", bound="CanonicalModel")


class CanonicalModel:
    """Mixin for canonical wire-dict serialization."""

    __slots__ = ()

    def to_dict(self) -> dict[str, JSONValue]:
        _fail(self.__class__.__name__, "to_dict is not implemented for this model type")

    @classmethod
    def from_dict(cls: type[TModel], data: Mapping[str, object]) -> TModel:
        _fail(cls.__name__, "from_dict is not implemented for this model type")


@dataclass(frozen=True, slots=True)
class ClusterNetworkEntry(CanonicalModel):
    cidr: str
    host_subnet_length: int

    def to_dict(self) -> dict[str, JSONValue]:
        return {"cidr": self.cidr, "hostSubnetLength": self.host_subnet_length}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], path: str = "clusterNetworks"
    ) -> ClusterNetworkEntry:
        parsed = _expect_object(data, path, allowed={"cidr", "hostSubnetLength"})
        return cls(
            cidr=_as_str(parsed.get("cidr"), f"{path}.cidr"),
            host_subnet_length=_as_int(
                parsed.get("hostSubnetLength", 0), f"{path}.hostSubnetLength"
            ),
        )


@dataclass(frozen=True, slots=True)
class Networking(CanonicalModel):
    type: str
    machine_cidr: str
    service_cidr: str
    cluster_networks: tuple[ClusterNetworkEntry, ...] = ()

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "type": self.type,
            "machineCIDR": self.machine_cidr,
            "serviceCIDR": self.service_cidr,
            "clusterNetworks": [entry.to_dict() for entry in self.cluster_networks],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "networking") -> Networking:
        parsed = _expect_object(
            data,
            path,
            allowed={"type", "machineCIDR", "serviceCIDR", "clusterNetworks"},
        )
        entries = _as_sequence(parsed.get("clusterNetworks"), f"{path}.clusterNetworks")
        return cls(
            type=_as_str(parsed.get("type"), f"{path}.type"),
            machine_cidr=_as_str(parsed.get("machineCIDR"), f"{path}.machineCIDR"),
            service_cidr=_as_str(parsed.get("serviceCIDR"), f"{path}.serviceCIDR"),
            cluster_networks=tuple(
                ClusterNetworkEntry.from_dict(
                    _as_mapping(item, f"{path}.clusterNetworks[{index}]"),
                    f"{path}.clusterNetworks[{index}]",
                )
                for index, item in enumerate(entries)
            ),
        )


@dataclass(frozen=True, slots=True)
class MachinePool(CanonicalModel):
    name: str
    replicas: int | None

    def to_dict(self) -> dict[str, JSONValue]:
        out: dict[str, JSONValue] = {"name": self.name}
        if self.replicas is not None:
            out["replicas"] = self.replicas
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "machines") -> MachinePool:
        parsed = _expect_object(data, path, allowed={"name", "replicas"})
        raw_replicas = parsed.get("replicas")
        return cls(
            name=_as_str(parsed.get("name"), f"{path}.name"),
            replicas=None if raw_replicas is None else _as_int(raw_replicas, f"{path}.replicas"),
        )


@dataclass(frozen=True, slots=True)
class AWSPlatform(CanonicalModel):
    region: str
    # Stored as sorted (key, value) pairs; a mapping passed in is copied.
    user_tags: tuple[tuple[str, str], ...] | Mapping[str, str] = ()
    vpc_cidr_block: str | None = None

    def __post_init__(self) -> None:
        pairs = self.user_tags.items() if isinstance(self.user_tags, Mapping) else self.user_tags
        object.__setattr__(self, "user_tags", tuple(sorted((str(k), str(v)) for k, v in pairs)))

    def to_dict(self) -> dict[str, JSONValue]:
        out: dict[str, JSONValue] = {"region": self.region}
        if self.user_tags:
            out["userTags"] = dict(self.user_tags)
        if self.vpc_cidr_block is not None:
            out["vpcCIDRBlock"] = self.vpc_cidr_block
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "platform.aws") -> AWSPlatform:
        parsed = _expect_object(data, path, allowed={"region", "userTags", "vpcCIDRBlock"})
        raw_block = parsed.get("vpcCIDRBlock")
        return cls(
            region=_as_str(parsed.get("region"), f"{path}.region"),
            user_tags=_as_str_dict(parsed.get("userTags"), f"{path}.userTags"),
            vpc_cidr_block=(
                None if raw_block is None else _as_str(raw_block, f"{path}.vpcCIDRBlock")
            ),
        )


@dataclass(frozen=True, slots=True)
class LibvirtNetwork(CanonicalModel):
    interface: str
    ip_range: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"if": self.interface, "ipRange": self.ip_range}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], path: str = "platform.libvirt.network"
    ) -> LibvirtNetwork:
        parsed = _expect_object(data, path, allowed={"if", "ipRange"})
        return cls(
            interface=_as_str(parsed.get("if"), f"{path}.if"),
            ip_range=_as_str(parsed.get("ipRange"), f"{path}.ipRange"),
        )


@dataclass(frozen=True, slots=True)
class LibvirtPlatform(CanonicalModel):
    uri: str
    network: LibvirtNetwork

    def to_dict(self) -> dict[str, JSONValue]:
        return {"URI": self.uri, "network": self.network.to_dict()}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], path: str = "platform.libvirt"
    ) -> LibvirtPlatform:
        parsed = _expect_object(data, path, allowed={"URI", "network"})
        raw_network = parsed.get("network")
        network_path = f"{path}.network"
        return cls(
            uri=_as_str(parsed.get("URI"), f"{path}.URI"),
            network=LibvirtNetwork.from_dict(
                {} if raw_network is None else _as_mapping(raw_network, network_path),
                network_path,
            ),
        )


@dataclass(frozen=True, slots=True)
class NonePlatform(CanonicalModel):
    """Bring-your-own-infrastructure platform; carries no settings."""

    def to_dict(self) -> dict[str, JSONValue]:
        return {}

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "platform.none") -> NonePlatform:
        _expect_object(data, path, allowed=set())
        return cls()


@dataclass(frozen=True, slots=True)
class OpenStackPlatform(CanonicalModel):
    region: str
    cloud: str
    external_network: str
    base_image: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "region": self.region,
            "cloud": self.cloud,
            "externalNetwork": self.external_network,
            "baseImage": self.base_image,
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, object], path: str = "platform.openstack"
    ) -> OpenStackPlatform:
        parsed = _expect_object(
            data, path, allowed={"region", "cloud", "externalNetwork", "baseImage"}
        )
        return cls(
            region=_as_str(parsed.get("region"), f"{path}.region"),
            cloud=_as_str(parsed.get("cloud"), f"{path}.cloud"),
            external_network=_as_str(parsed.get("externalNetwork"), f"{path}.externalNetwork"),
            base_image=_as_str(parsed.get("baseImage"), f"{path}.baseImage"),
        )


PlatformVariant = AWSPlatform | LibvirtPlatform | NonePlatform | OpenStackPlatform

_VARIANT_DECODERS: dict[str, Callable[[Mapping[str, object], str], PlatformVariant]] = {
    "aws": AWSPlatform.from_dict,
    "libvirt": LibvirtPlatform.from_dict,
    "none": NonePlatform.from_dict,
    "openstack": OpenStackPlatform.from_dict,
}


@dataclass(frozen=True, slots=True)
class Platform(CanonicalModel):
    """Platform selection; a well-formed value holds exactly one variant."""

    aws: AWSPlatform | None = None
    libvirt: LibvirtPlatform | None = None
    none: NonePlatform | None = None
    openstack: OpenStackPlatform | None = None

    @classmethod
    def of(cls, variant: PlatformVariant) -> Platform:
        """Wrap a single variant value in a platform selection."""

        if isinstance(variant, AWSPlatform):
            return cls(aws=variant)
        if isinstance(variant, LibvirtPlatform):
            return cls(libvirt=variant)
        if isinstance(variant, NonePlatform):
            return cls(none=variant)
        if isinstance(variant, OpenStackPlatform):
            return cls(openstack=variant)
        _fail("platform", f"unsupported platform variant {type(variant).__name__}")

    def populated(self) -> tuple[str, ...]:
        return tuple(name for name in PLATFORM_NAMES if getattr(self, name) is not None)

    @property
    def variant(self) -> str | None:
        names = self.populated()
        if len(names) != 1:
            return None
        return names[0]

    def to_dict(self) -> dict[str, JSONValue]:
        out: dict[str, JSONValue] = {}
        for name in PLATFORM_NAMES:
            value = getattr(self, name)
            if value is not None:
                out[name] = value.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "platform") -> Platform:
        parsed = _expect_object(data, path, allowed=set(PLATFORM_NAMES))
        values: dict[str, object] = {}
        for name in PLATFORM_NAMES:
            raw = parsed.get(name)
            if raw is None:
                continue
            variant_path = f"{path}.{name}"
            decode = _VARIANT_DECODERS[name]
            values[name] = decode(_as_mapping(raw, variant_path), variant_path)
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class InstallConfig(CanonicalModel):
    """The synthesized or loaded install configuration."""

    cluster_name: str
    cluster_id: str
    ssh_key: str
    base_domain: str
    networking: Networking
    machines: tuple[MachinePool, ...]
    platform: Platform
    pull_secret: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "metadata": {"name": self.cluster_name},
            "clusterID": self.cluster_id,
            "sshKey": self.ssh_key,
            "baseDomain": self.base_domain,
            "networking": self.networking.to_dict(),
            "machines": [pool.to_dict() for pool in self.machines],
            "platform": self.platform.to_dict(),
            "pullSecret": self.pull_secret,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object], path: str = "") -> InstallConfig:
        parsed = _expect_object(
            data,
            path or "<root>",
            allowed={
                "metadata",
                "clusterID",
                "sshKey",
                "baseDomain",
                "networking",
                "machines",
                "platform",
                "pullSecret",
            },
        )
        metadata = _expect_object(
            _section(parsed, "metadata"),
            "metadata",
            allowed={"name", "creationTimestamp"},
        )
        machines = _as_sequence(parsed.get("machines"), "machines")
        return cls(
            cluster_name=_as_str(metadata.get("name"), "metadata.name"),
            cluster_id=_as_str(parsed.get("clusterID"), "clusterID"),
            ssh_key=_as_str(parsed.get("sshKey"), "sshKey"),
            base_domain=_as_str(parsed.get("baseDomain"), "baseDomain"),
            networking=Networking.from_dict(_section(parsed, "networking"), "networking"),
            machines=tuple(
                MachinePool.from_dict(
                    _as_mapping(item, f"machines[{index}]"), f"machines[{index}]"
                )
                for index, item in enumerate(machines)
            ),
            platform=Platform.from_dict(_section(parsed, "platform"), "platform"),
            pull_secret=_as_str(parsed.get("pullSecret"), "pullSecret"),
        )


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _expect_object(value: object, path: str, *, allowed: set[str]) -> dict[str, object]:
    mapping = _as_mapping(value, path)
    parsed: dict[str, object] = {}
    for key, item in mapping.items():
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        parsed[key] = item

    unknown = sorted(key for key in parsed if key not in allowed)
    if unknown:
        _fail(path, f"unexpected fields: {unknown}")
    return parsed


def _section(parsed: Mapping[str, object], key: str) -> Mapping[str, object]:
    # Only an absent or null section decodes as empty.
    value = parsed.get(key)
    return {} if value is None else _as_mapping(value, key)


def _as_mapping(value: object, path: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        _fail(path, f"expected object, got {type(value).__name__}")
    return value


def _as_str(value: object, path: str) -> str:
    # Absent and null scalars decode to the empty string; the validator decides
    # which of them are required.
    if value is None:
        return ""
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _as_int(value: object, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        _fail(path, f"expected integer, got {type(value).__name__}")
    return value


def _as_sequence(value: object, path: str) -> list[object]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    _fail(path, f"expected array, got {type(value).__name__}")


def _as_str_dict(value: object, path: str) -> dict[str, str]:
    if value is None:
        return {}
    mapping = _as_mapping(value, path)
    out: dict[str, str] = {}
    for key in sorted(mapping, key=str):
        if not isinstance(key, str):
            _fail(path, f"object keys must be strings, got {type(key).__name__}")
        item = mapping[key]
        if not isinstance(item, str):
            _fail(f"{path}.{key}", f"expected string, got {type(item).__name__}")
        out[key] = item
    return out


__all__ = [
    "AWSPlatform",
    "CanonicalModel",
    "ClusterNetworkEntry",
    "InstallConfig",
    "JSONScalar",
    "JSONValue",
    "LibvirtNetwork",
    "LibvirtPlatform",
    "MachinePool",
    "Networking",
    "NonePlatform",
    "OpenStackPlatform",
    "Platform",
    "PlatformVariant",
]
