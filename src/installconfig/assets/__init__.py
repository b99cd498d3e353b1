"""Install-config asset: platform defaults, synthesis, storage, and the reconcile cycle."""

from installconfig.assets.files import (
    AssetFile,
    DirectoryFileFetcher,
    FileFetcher,
    write_asset_files,
)
from installconfig.assets.installconfig import (
    AssetOrigin,
    AssetState,
    InstallConfigAsset,
    encode_install_config,
    fetch_install_config_file,
    reconcile_install_config,
)
from installconfig.assets.platform import PlatformDefaults, resolve_platform
from installconfig.assets.synthesis import synthesize_install_config

__all__ = [
    "AssetFile",
    "AssetOrigin",
    "AssetState",
    "DirectoryFileFetcher",
    "FileFetcher",
    "InstallConfigAsset",
    "PlatformDefaults",
    "encode_install_config",
    "fetch_install_config_file",
    "reconcile_install_config",
    "resolve_platform",
    "synthesize_install_config",
    "write_asset_files",
]
