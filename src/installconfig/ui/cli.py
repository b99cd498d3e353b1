"""Command-line interface router for installconfig."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from installconfig import __version__
from installconfig.assets import (
    AssetOrigin,
    DirectoryFileFetcher,
    InstallConfigAsset,
    reconcile_install_config,
    write_asset_files,
)
from installconfig.constants import INSTALL_CONFIG_FILENAME, PLATFORM_NAMES
from installconfig.domain.dependencies import DependencyKind, DependencyValueSet
from installconfig.domain.models import (
    AWSPlatform,
    LibvirtNetwork,
    LibvirtPlatform,
    NonePlatform,
    OpenStackPlatform,
    Platform,
    PlatformVariant,
)
from installconfig.errors import ArtifactValidationError
from installconfig.observability import correlation_scope, setup_logging, shutdown_logging
from installconfig.settings import (
    SettingsLoadError,
    SettingsValidationError,
    dump_effective_settings,
    load_settings,
    redact_settings,
)
from installconfig.ui.render import CLIRenderer, create_renderer


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="installconfig",
        description=(
            "installconfig — create, validate, and inspect install-config.yaml.\n\n"
            "Common workflows:\n"
            "  installconfig create --platform none ...   Write install-config.yaml\n"
            "  installconfig validate --dir ./cluster     Check a hand-edited file\n"
            "  installconfig show --json                  Print the effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--dir",
        dest="asset_dir",
        default=None,
        help="Asset directory holding install-config.yaml (default: [assets] dir setting).",
    )
    common.add_argument(
        "--settings",
        dest="settings_path",
        default=None,
        help="Path to installer TOML settings (default: ./installer.toml if present).",
    )
    common.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Override [logging] level.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )
    common.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Emit machine-readable JSON on stdout.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # create --------------------------------------------------------------
    create_parser = subparsers.add_parser(
        "create",
        parents=[common],
        help="Load or generate install-config.yaml and write it to the asset directory",
        description=(
            "Adopt an existing install-config.yaml after validating it, or generate one\n"
            "from the supplied values when none exists.\n\n"
            "Examples:\n"
            "  installconfig create --cluster-name demo --base-domain example.com \\\n"
            "      --pull-secret-file pull.json --platform none\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_dependency_arguments(create_parser)
    create_parser.set_defaults(handler=_cmd_create)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Validate the persisted install-config.yaml",
        description=(
            "Load install-config.yaml (or the deprecated install-config.yml) and report\n"
            "every field error. Exits 1 when the file is invalid.\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.set_defaults(handler=_cmd_validate)

    # show ----------------------------------------------------------------
    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Print the persisted install config",
    )
    show_parser.set_defaults(handler=_cmd_show)

    # settings ------------------------------------------------------------
    settings_parser = subparsers.add_parser(
        "settings",
        parents=[common],
        help="Print effective installer settings (redacted)",
    )
    settings_parser.set_defaults(handler=_cmd_settings)

    return parser


def _add_dependency_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("install config values (used only when generating)")
    group.add_argument("--cluster-name", default=None, help="Cluster name (metadata.name).")
    group.add_argument("--base-domain", default=None, help="Base DNS domain of the cluster.")
    group.add_argument("--ssh-key", default=None, help="SSH public key text.")
    group.add_argument("--ssh-key-file", default=None, help="Read the SSH public key from a file.")
    group.add_argument("--pull-secret", default=None, help="Pull secret JSON text.")
    group.add_argument(
        "--pull-secret-file", default=None, help="Read the pull secret JSON from a file."
    )
    group.add_argument(
        "--cluster-id", default=None, help="Cluster identifier (default: a fresh UUID4)."
    )
    group.add_argument(
        "--platform", default=None, choices=PLATFORM_NAMES, help="Target platform."
    )

    aws = parser.add_argument_group("aws platform")
    aws.add_argument("--aws-region", default=None, help="AWS region.")

    libvirt = parser.add_argument_group("libvirt platform")
    libvirt.add_argument("--libvirt-uri", default=None, help="libvirt connection URI.")
    libvirt.add_argument("--libvirt-network-if", default=None, help="Network interface name.")
    libvirt.add_argument("--libvirt-ip-range", default=None, help="Network IP range (CIDR).")

    openstack = parser.add_argument_group("openstack platform")
    openstack.add_argument("--openstack-region", default=None, help="OpenStack region.")
    openstack.add_argument("--openstack-cloud", default=None, help="clouds.yaml entry name.")
    openstack.add_argument(
        "--openstack-external-network", default=None, help="External network name."
    )
    openstack.add_argument("--openstack-base-image", default=None, help="Base image name.")


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        settings = _load_effective_settings(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    run_id = uuid.uuid4().hex
    handle = setup_logging(settings["logging"], run_id=run_id)
    try:
        with correlation_scope(run_id=run_id, command=str(namespace.command)):
            result = handler(namespace, settings)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging(handle)
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_create(args: argparse.Namespace, settings: Mapping[str, Any]) -> int:
    asset_dir = _asset_dir(settings)
    fetcher = DirectoryFileFetcher(asset_dir)
    asset = reconcile_install_config(fetcher, lambda: _dependency_values(args))
    written = write_asset_files(asset, asset_dir)
    origin = asset.origin.value if asset.origin is not None else "unknown"

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "create",
                "origin": origin,
                "files": [path.as_posix() for path in written],
            }
        )
        return 0

    renderer = _get_renderer(args)
    renderer.kv("Install config", origin)
    for path in written:
        renderer.ok(f"wrote {path.as_posix()}")
    if asset.origin is AssetOrigin.GENERATED:
        renderer.next_steps(
            [
                f"$EDITOR {(asset_dir / INSTALL_CONFIG_FILENAME).as_posix()}",
                f"installconfig validate --dir {asset_dir.as_posix()}",
            ]
        )
    return 0


def _cmd_validate(args: argparse.Namespace, settings: Mapping[str, Any]) -> int:
    asset_dir = _asset_dir(settings)
    asset = InstallConfigAsset()
    try:
        found = asset.load(DirectoryFileFetcher(asset_dir))
    except ArtifactValidationError as exc:
        if not _flag(args, "json"):
            raise
        _emit_json(
            {
                "command": "validate",
                "valid": False,
                "errors": [{"path": item.path, "message": item.message} for item in exc.errors],
            }
        )
        return 1

    if not found:
        raise CLIError(f"no {INSTALL_CONFIG_FILENAME} found in {asset_dir.as_posix()}", 2)

    if _flag(args, "json"):
        _emit_json({"command": "validate", "valid": True, "errors": []})
        return 0

    _get_renderer(args).ok(f"{INSTALL_CONFIG_FILENAME} is valid")
    return 0


def _cmd_show(args: argparse.Namespace, settings: Mapping[str, Any]) -> int:
    asset_dir = _asset_dir(settings)
    asset = InstallConfigAsset()
    if not asset.load(DirectoryFileFetcher(asset_dir)) or asset.config is None:
        raise CLIError(f"no {INSTALL_CONFIG_FILENAME} found in {asset_dir.as_posix()}", 2)

    if _flag(args, "json"):
        _emit_json(asset.config.to_dict())
        return 0

    assert asset.file is not None
    sys.stdout.write(asset.file.data.decode("utf-8"))
    return 0


def _cmd_settings(args: argparse.Namespace, settings: Mapping[str, Any]) -> int:
    if _flag(args, "json"):
        print(dump_effective_settings(settings))
        return 0

    renderer = _get_renderer(args)
    renderer.text(json.dumps(redact_settings(settings), indent=2, sort_keys=True))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"))


def _load_effective_settings(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, object] = {
        "assets.dir": _optional_str(getattr(args, "asset_dir", None)),
        "logging.level": _optional_str(getattr(args, "log_level", None)),
    }
    try:
        return load_settings(
            _optional_str(getattr(args, "settings_path", None)), cli_overrides=overrides
        )
    except (SettingsLoadError, SettingsValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _asset_dir(settings: Mapping[str, Any]) -> Path:
    return Path(str(settings["assets"]["dir"]))


def _dependency_values(args: argparse.Namespace) -> DependencyValueSet:
    """Resolve the dependency snapshot from flags; only called when generating."""

    cluster_id = _optional_str(getattr(args, "cluster_id", None)) or str(uuid.uuid4())
    ssh_key = _text_or_file(args, "ssh_key", "ssh_key_file")
    pull_secret = _text_or_file(args, "pull_secret", "pull_secret_file")
    platform_name = _optional_str(getattr(args, "platform", None))

    values: dict[str, object] = {
        DependencyKind.CLUSTER_ID.value: cluster_id,
        # SSH access is optional.
        DependencyKind.SSH_KEY.value: ssh_key if ssh_key is not None else "",
        DependencyKind.BASE_DOMAIN.value: _optional_str(getattr(args, "base_domain", None)),
        DependencyKind.CLUSTER_NAME.value: _optional_str(getattr(args, "cluster_name", None)),
        DependencyKind.PULL_SECRET.value: pull_secret,
        DependencyKind.PLATFORM.value: (
            Platform.of(_platform_variant(args, platform_name)) if platform_name else None
        ),
    }
    return DependencyValueSet.from_mapping(values)


_VariantBuilder = Callable[[argparse.Namespace], PlatformVariant]


def _build_aws(args: argparse.Namespace) -> PlatformVariant:
    return AWSPlatform(region=_require_flag(args, "aws_region"))


def _build_libvirt(args: argparse.Namespace) -> PlatformVariant:
    return LibvirtPlatform(
        uri=_require_flag(args, "libvirt_uri"),
        network=LibvirtNetwork(
            interface=_require_flag(args, "libvirt_network_if"),
            ip_range=_require_flag(args, "libvirt_ip_range"),
        ),
    )


def _build_none(args: argparse.Namespace) -> PlatformVariant:
    return NonePlatform()


def _build_openstack(args: argparse.Namespace) -> PlatformVariant:
    return OpenStackPlatform(
        region=_require_flag(args, "openstack_region"),
        cloud=_require_flag(args, "openstack_cloud"),
        external_network=_require_flag(args, "openstack_external_network"),
        base_image=_require_flag(args, "openstack_base_image"),
    )


_VARIANT_BUILDERS: dict[str, _VariantBuilder] = {
    "aws": _build_aws,
    "libvirt": _build_libvirt,
    "none": _build_none,
    "openstack": _build_openstack,
}


def _platform_variant(args: argparse.Namespace, name: str) -> PlatformVariant:
    builder = _VARIANT_BUILDERS.get(name)
    if builder is None:
        raise CLIError(f"unsupported platform: {name}", exit_code=2)
    return builder(args)


def _text_or_file(args: argparse.Namespace, text_attr: str, file_attr: str) -> str | None:
    text = _optional_str(getattr(args, text_attr, None))
    path = _optional_str(getattr(args, file_attr, None))
    if text is not None and path is not None:
        raise CLIError(
            f"--{text_attr.replace('_', '-')} and --{file_attr.replace('_', '-')} "
            "are mutually exclusive",
            exit_code=2,
        )
    if path is None:
        return text
    try:
        return Path(path).expanduser().read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise CLIError(f"unable to read {path}: {exc}", exit_code=2) from exc


def _require_flag(args: argparse.Namespace, name: str) -> str:
    value = _optional_str(getattr(args, name, None))
    if value is None:
        raise CLIError(f"--{name.replace('_', '-')} is required for this platform", exit_code=2)
    return value


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
