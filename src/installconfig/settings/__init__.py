"""
installconfig — runtime settings package.

File: src/installconfig/settings/__init__.py
Last updated: 2026-10-18

Purpose
- Public surface for installer runtime settings (``installer.toml``), distinct
  from the install config the tool produces.

Functional requirements
- Re-export the loader entry points and the schema validation types.
"""

from installconfig.settings.loader import (
    SettingsLoadError,
    dump_effective_settings,
    load_settings,
    normalize_paths,
)
from installconfig.settings.schema import (
    DEFAULT_SETTINGS,
    InstallerSettings,
    SettingsValidationError,
    SettingsValidationIssue,
    SettingsValidationResult,
    assert_valid_settings,
    default_settings,
    redact_settings,
    validate_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "InstallerSettings",
    "SettingsLoadError",
    "SettingsValidationError",
    "SettingsValidationIssue",
    "SettingsValidationResult",
    "assert_valid_settings",
    "default_settings",
    "dump_effective_settings",
    "load_settings",
    "normalize_paths",
    "redact_settings",
    "validate_settings",
]
