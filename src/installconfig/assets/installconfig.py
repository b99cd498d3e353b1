"""
installconfig — install-config asset

File: src/installconfig/assets/installconfig.py
Last updated: 2026-10-18

Purpose
- Own the install-config artifact: accept a persisted copy when one exists and
  validates, otherwise synthesize it from resolved dependency values.

What should be included in this file
- ``InstallConfigAsset`` (load, generate, files) and its lifecycle state.
- The canonical/deprecated filename lookup.
- ``reconcile_install_config`` driving one load-or-generate cycle.

Functional requirements
- The canonical filename wins over the deprecated one; the deprecated name is
  accepted with a warning and rewritten to the canonical name.
- An absent artifact is not an error; unreadable, undecodable, or invalid
  content is, and never falls back to synthesis.
- A failed cycle leaves no config or file behind.

Non-functional requirements
- Synchronous; no retries; every error chains its cause.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

import yaml

from installconfig.assets.files import AssetFile, FileFetcher
from installconfig.assets.platform import resolve_platform
from installconfig.assets.synthesis import synthesize_install_config
from installconfig.constants import (
    DEPRECATED_INSTALL_CONFIG_FILENAME,
    INSTALL_CONFIG_ASSET_NAME,
    INSTALL_CONFIG_FILENAME,
)
from installconfig.domain.codec import dump_install_config, parse_install_config
from installconfig.domain.dependencies import DEPENDENCY_KINDS, DependencyKind, DependencyValueSet
from installconfig.domain.models import InstallConfig
from installconfig.errors import (
    ArtifactDecodeError,
    ArtifactEncodeError,
    ArtifactReadError,
    ArtifactValidationError,
)
from installconfig.validation.install_config import Validator, validate_install_config

logger = logging.getLogger(__name__)

DependencySource = DependencyValueSet | Callable[[], DependencyValueSet]

# Lookup order: the first name that exists wins.
_CANDIDATE_FILENAMES: tuple[str, ...] = (
    INSTALL_CONFIG_FILENAME,
    DEPRECATED_INSTALL_CONFIG_FILENAME,
)


class AssetState(StrEnum):
    UNINITIALIZED = "uninitialized"
    MATERIALIZED = "materialized"
    FAILED = "failed"


class AssetOrigin(StrEnum):
    LOADED = "loaded"
    GENERATED = "generated"


def fetch_install_config_file(fetcher: FileFetcher) -> AssetFile | None:
    """Return the persisted install-config file under its canonical name, or ``None``.

    Storage failures other than "not found" raise ``ArtifactReadError``.
    """

    for name in _CANDIDATE_FILENAMES:
        try:
            found = fetcher.fetch_by_name(name)
        except FileNotFoundError:
            continue
        except OSError as exc:
            raise ArtifactReadError(
                f"failed to read {name!r}: {exc}", filename=name
            ) from exc

        if name != INSTALL_CONFIG_FILENAME:
            logger.warning(
                "Using deprecated %s file. Use %s instead.",
                name,
                INSTALL_CONFIG_FILENAME,
            )
            return found.with_filename(INSTALL_CONFIG_FILENAME)
        return found
    return None


def encode_install_config(config: InstallConfig) -> bytes:
    """Serialize ``config`` for persistence, wrapping failures in ``ArtifactEncodeError``."""

    try:
        return dump_install_config(config)
    except (yaml.YAMLError, TypeError, ValueError) as exc:
        raise ArtifactEncodeError(
            f"failed to marshal {INSTALL_CONFIG_FILENAME!r}: {exc}",
            filename=INSTALL_CONFIG_FILENAME,
        ) from exc


class InstallConfigAsset:
    """Generates (or loads) the ``install-config.yaml`` file."""

    name = INSTALL_CONFIG_ASSET_NAME

    __slots__ = ("_config", "_file", "_origin", "_state")

    def __init__(self) -> None:
        self._config: InstallConfig | None = None
        self._file: AssetFile | None = None
        self._origin: AssetOrigin | None = None
        self._state = AssetState.UNINITIALIZED

    @property
    def config(self) -> InstallConfig | None:
        return self._config

    @property
    def file(self) -> AssetFile | None:
        return self._file

    @property
    def state(self) -> AssetState:
        return self._state

    @property
    def origin(self) -> AssetOrigin | None:
        return self._origin

    @staticmethod
    def dependencies() -> tuple[DependencyKind, ...]:
        return DEPENDENCY_KINDS

    def generate(self, values: DependencyValueSet) -> InstallConfig:
        """Synthesize the config from ``values`` and materialize its file."""

        self._reset()
        try:
            defaults = resolve_platform(values.platform)
            config = synthesize_install_config(values, defaults)
            data = encode_install_config(config)
        except Exception:
            self._state = AssetState.FAILED
            raise

        self._materialize(config, AssetFile(INSTALL_CONFIG_FILENAME, data), AssetOrigin.GENERATED)
        logger.info(
            "generated install config",
            extra={"asset": self.name, "platform": defaults.variant},
        )
        return config

    def load(self, fetcher: FileFetcher, validator: Validator = validate_install_config) -> bool:
        """Adopt a persisted install config; return ``False`` when none exists.

        Raises ``ArtifactReadError``, ``ArtifactDecodeError`` or
        ``ArtifactValidationError``; the asset is left empty in every case.
        """

        self._reset()
        try:
            found = fetch_install_config_file(fetcher)
            if found is None:
                logger.debug("no persisted install config", extra={"asset": self.name})
                return False

            try:
                config = parse_install_config(found.data)
            except ValueError as exc:
                raise ArtifactDecodeError(
                    f"failed to unmarshal {found.filename!r}: {exc}",
                    filename=found.filename,
                ) from exc

            errors = tuple(validator(config))
            if errors:
                raise ArtifactValidationError(INSTALL_CONFIG_FILENAME, errors)
        except Exception:
            self._state = AssetState.FAILED
            raise

        self._materialize(config, found, AssetOrigin.LOADED)
        logger.info("loaded install config", extra={"asset": self.name})
        return True

    def files(self) -> tuple[AssetFile, ...]:
        if self._file is None:
            return ()
        return (self._file,)

    def _materialize(self, config: InstallConfig, file: AssetFile, origin: AssetOrigin) -> None:
        self._config = config
        self._file = file
        self._origin = origin
        self._state = AssetState.MATERIALIZED

    def _reset(self) -> None:
        self._config = None
        self._file = None
        self._origin = None
        self._state = AssetState.UNINITIALIZED

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state.value!r}, origin={self._origin!r})"


def reconcile_install_config(
    fetcher: FileFetcher,
    dependencies: DependencySource,
    validator: Validator = validate_install_config,
) -> InstallConfigAsset:
    """Run one load-or-generate cycle and return the materialized asset.

    ``dependencies`` may be a callable; it is only invoked when no persisted
    install config exists.
    """

    asset = InstallConfigAsset()
    if asset.load(fetcher, validator):
        return asset

    if isinstance(dependencies, DependencyValueSet):
        values = dependencies
    else:
        values = dependencies()
    asset.generate(values)
    return asset


__all__ = [
    "AssetOrigin",
    "AssetState",
    "DependencySource",
    "InstallConfigAsset",
    "encode_install_config",
    "fetch_install_config_file",
    "reconcile_install_config",
]
