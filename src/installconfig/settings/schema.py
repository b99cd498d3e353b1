"""
installconfig — runtime settings schema and validation.

File: src/installconfig/settings/schema.py
Last updated: 2026-10-18

Purpose
- Define authoritative installer settings defaults and strict validation rules.

What should be included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, and enums.
- Deterministic deep-merge helpers.
- Redaction of sensitive-looking fields for effective-settings dumps.

Functional requirements
- Validate settings payloads and return structured errors (field path + message).
- Reject unknown fields, and reject embedded secrets outright.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from installconfig.constants import SETTINGS_SCHEMA_VERSION

SettingsSchemaVersion: Final[int] = SETTINGS_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

_SENSITIVE_KEY_TOKENS: Final[frozenset[str]] = frozenset(
    {
        "secret",
        "token",
        "password",
        "passwd",
        "private",
        "credential",
        "credentials",
        "auth",
        "auths",
    }
)
_SENSITIVE_KEY_PHRASES: Final[tuple[str, ...]] = (
    "pull_secret",
    "access_token",
    "private_key",
    "password",
    "secret",
)

# Settings paths that are normalized relative to the settings file location.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (
    ("assets", "dir"),
    ("logging", "log_dir"),
)


class MetaSettings(TypedDict):
    schema_version: int


class AssetsSettings(TypedDict):
    dir: str


class LoggingSettings(TypedDict):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    format: Literal["json", "text"]
    log_dir: str
    log_to_stderr: bool
    redact_secrets: bool


class InstallerSettings(TypedDict):
    meta: MetaSettings
    assets: AssetsSettings
    logging: LoggingSettings


DEFAULT_SETTINGS: Final[InstallerSettings] = {
    "meta": {
        "schema_version": SettingsSchemaVersion,
    },
    "assets": {
        "dir": ".",
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
        "log_dir": "",
        "log_to_stderr": True,
        "redact_secrets": True,
    },
}


@dataclass(frozen=True, slots=True)
class SettingsValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class SettingsValidationResult:
    """Validation result with normalized settings when no issues were found."""

    settings: dict[str, Any] | None
    issues: tuple[SettingsValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.settings is not None and not self.issues


class SettingsValidationError(ValueError):
    """Raised when strict settings validation fails."""

    def __init__(self, issues: Sequence[SettingsValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid settings:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[SettingsValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(SettingsValidationIssue(path=path, message=message))

    def items(self) -> tuple[SettingsValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_settings() -> InstallerSettings:
    """Return a deep copy of deterministic built-in defaults."""

    return copy.deepcopy(DEFAULT_SETTINGS)


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < SettingsSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {SettingsSchemaVersion}; "
            "upgrade installer.toml to the current schema"
        )
    if found_version > SettingsSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {SettingsSchemaVersion}; "
            "upgrade the installconfig runtime"
        )
    return "schema version is current"


def merge_settings(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_settings(settings: Mapping[str, object] | object) -> SettingsValidationResult:
    """Validate settings and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(settings, "<root>", issues)
    if root is None:
        return SettingsValidationResult(settings=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return SettingsValidationResult(settings=None, issues=issues.items())
    return SettingsValidationResult(settings=normalized, issues=())


def assert_valid_settings(settings: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate settings and raise ``SettingsValidationError`` on failure."""

    result = validate_settings(settings)
    if result.settings is None:
        raise SettingsValidationError(result.issues)
    return result.settings


def redact_settings(settings: Mapping[str, object] | object) -> dict[str, Any]:
    """Return deterministic redacted representation for logs."""

    if not isinstance(settings, Mapping):
        return {}
    redacted = _redact_value(settings, parent_key=None)
    if isinstance(redacted, dict):
        return redacted
    return {}


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "assets", "logging"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="meta", issues=issues, validator=_validate_meta, out=out)
    _section(payload, key="assets", issues=issues, validator=_validate_assets, out=out)
    _section(payload, key="logging", issues=issues, validator=_validate_logging, out=out)
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"schema_version"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        parsed = _as_int(
            payload["schema_version"], _join(path, "schema_version"), issues, minimum=1
        )
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != SettingsSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(parsed))
    return out


def _validate_assets(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"dir"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "dir" in payload:
        parsed = _as_path_text(payload["dir"], _join(path, "dir"), issues)
        if parsed is not None:
            out["dir"] = parsed
    return out


def _validate_logging(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"level", "format", "log_dir", "log_to_stderr", "redact_secrets"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}

    if "level" in payload:
        raw_level = payload["level"]
        if isinstance(raw_level, str):
            raw_level = raw_level.strip().upper()
        parsed_level = _as_enum(
            raw_level, _join(path, "level"), issues, allowed_values=LOG_LEVELS
        )
        if parsed_level is not None:
            out["level"] = parsed_level

    if "format" in payload:
        parsed_format = _as_enum(
            payload["format"], _join(path, "format"), issues, allowed_values=LOG_FORMATS
        )
        if parsed_format is not None:
            out["format"] = parsed_format

    if "log_dir" in payload:
        # Empty string disables file logging.
        raw_dir = payload["log_dir"]
        if isinstance(raw_dir, str) and not raw_dir.strip():
            out["log_dir"] = ""
        else:
            parsed_dir = _as_path_text(raw_dir, _join(path, "log_dir"), issues)
            if parsed_dir is not None:
                out["log_dir"] = parsed_dir

    for flag in ("log_to_stderr", "redact_secrets"):
        if flag in payload:
            parsed_flag = _as_bool(payload[flag], _join(path, flag), issues)
            if parsed_flag is not None:
                out[flag] = parsed_flag

    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key in allowed:
            continue
        key_path = _join(path, key)
        if _looks_sensitive_key(key):
            issues.add(
                key_path,
                "embedded secret values are forbidden; pass them on the command line",
            )
        else:
            issues.add(key_path, "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _looks_sensitive_key(key: str) -> bool:
    normalized = _normalize_key(key)
    if any(phrase in normalized for phrase in _SENSITIVE_KEY_PHRASES):
        return True
    tokens = tuple(token for token in normalized.split("_") if token)
    return any(token in _SENSITIVE_KEY_TOKENS for token in tokens)


def _normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        item = value[key]
        out[key] = _deep_copy_mapping(item) if isinstance(item, Mapping) else copy.deepcopy(item)
    return out


def _redact_value(value: object, parent_key: str | None) -> object:
    if isinstance(value, Mapping):
        out: dict[str, object] = {}
        for key in sorted(value):
            item = value[key]
            if _looks_sensitive_key(key) and not isinstance(item, bool):
                out[key] = "<redacted>"
            else:
                out[key] = _redact_value(item, key)
        return out
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, parent_key) for item in value]
    return value


__all__ = [
    "DEFAULT_SETTINGS",
    "InstallerSettings",
    "LOG_FORMATS",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "SettingsSchemaVersion",
    "SettingsValidationError",
    "SettingsValidationIssue",
    "SettingsValidationResult",
    "assert_valid_settings",
    "default_settings",
    "merge_settings",
    "migration_guidance",
    "redact_settings",
    "validate_settings",
]
