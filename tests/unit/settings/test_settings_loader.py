"""
installconfig — unit tests for runtime settings loading

File: tests/unit/settings/test_settings_loader.py
Last updated: 2026-10-18

Purpose
- Validate precedence and path handling of ``installer.toml`` loading.

What this test file should cover
- Precedence: CLI > environment > file > defaults.
- Environment coercion failures and missing explicit files.
- Path normalization relative to the settings file and working directory.

Functional requirements
- Use injected ``environ`` and ``cwd``; never read the real process environment.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from installconfig.settings import (
    SettingsLoadError,
    SettingsValidationError,
    default_settings,
    dump_effective_settings,
    load_settings,
    normalize_paths,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_apply_when_no_settings_file_exists(tmp_path: Path) -> None:
    loaded = load_settings(environ={}, cwd=tmp_path)

    expected = default_settings()
    assert loaded["logging"] == expected["logging"]
    assert loaded["meta"] == expected["meta"]
    assert loaded["assets"]["dir"] == tmp_path.resolve().as_posix()


def test_default_settings_file_in_cwd_is_picked_up(tmp_path: Path) -> None:
    _write(tmp_path / "installer.toml", '[logging]\nlevel = "debug"\n')

    loaded = load_settings(environ={}, cwd=tmp_path)

    assert loaded["logging"]["level"] == "DEBUG"


def test_precedence_is_cli_then_env_then_file(tmp_path: Path) -> None:
    settings_path = _write(
        tmp_path / "conf" / "installer.toml",
        '[logging]\nlevel = "INFO"\nformat = "text"\nlog_to_stderr = true\n',
    )
    environ = {
        "INSTALLER_LOGGING_LEVEL": "ERROR",
        "INSTALLER_LOGGING_FORMAT": "json",
        "INSTALLER_LOGGING_LOG_TO_STDERR": "off",
    }

    loaded = load_settings(
        settings_path,
        cli_overrides={"logging.level": "DEBUG", "logging.format": None},
        environ=environ,
        cwd=tmp_path,
    )

    assert loaded["logging"]["level"] == "DEBUG"
    assert loaded["logging"]["format"] == "json"
    assert loaded["logging"]["log_to_stderr"] is False


def test_file_paths_resolve_relative_to_settings_file(tmp_path: Path) -> None:
    settings_path = _write(
        tmp_path / "conf" / "installer.toml",
        '[assets]\ndir = "../cluster"\n\n[logging]\nlog_dir = "logs"\n',
    )

    loaded = load_settings(settings_path, environ={}, cwd=tmp_path / "elsewhere")

    root = tmp_path.resolve()
    assert loaded["assets"]["dir"] == (root / "cluster").as_posix()
    assert loaded["logging"]["log_dir"] == (root / "conf" / "logs").as_posix()


def test_cli_and_env_paths_resolve_relative_to_cwd(tmp_path: Path) -> None:
    loaded = load_settings(
        cli_overrides={"assets.dir": "out"},
        environ={"INSTALLER_LOGGING_LOG_DIR": "runs"},
        cwd=tmp_path,
    )

    root = tmp_path.resolve()
    assert loaded["assets"]["dir"] == (root / "out").as_posix()
    assert loaded["logging"]["log_dir"] == (root / "runs").as_posix()


def test_empty_log_dir_stays_empty(tmp_path: Path) -> None:
    _write(tmp_path / "installer.toml", '[logging]\nlog_dir = ""\n')

    loaded = load_settings(environ={}, cwd=tmp_path)

    assert loaded["logging"]["log_dir"] == ""


def test_missing_explicit_settings_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(SettingsLoadError, match="settings file not found"):
        load_settings(tmp_path / "nope.toml", environ={}, cwd=tmp_path)


def test_invalid_toml_is_an_error(tmp_path: Path) -> None:
    settings_path = _write(tmp_path / "installer.toml", "[logging\nlevel = 1\n")

    with pytest.raises(SettingsLoadError, match="invalid TOML"):
        load_settings(settings_path, environ={}, cwd=tmp_path)


@pytest.mark.parametrize(
    ("env_name", "raw", "match"),
    [
        ("INSTALLER_LOGGING_REDACT_SECRETS", "maybe", "must be a boolean"),
        ("INSTALLER_META_SCHEMA_VERSION", "one", "must be an integer"),
    ],
)
def test_env_coercion_failures_are_reported(
    tmp_path: Path, env_name: str, raw: str, match: str
) -> None:
    with pytest.raises(SettingsLoadError, match=match):
        load_settings(environ={env_name: raw}, cwd=tmp_path)


def test_env_value_is_validated_after_merge(tmp_path: Path) -> None:
    with pytest.raises(SettingsValidationError, match="logging.level"):
        load_settings(environ={"INSTALLER_LOGGING_LEVEL": "LOUD"}, cwd=tmp_path)


def test_embedded_pull_secret_in_file_is_rejected(tmp_path: Path) -> None:
    settings_path = _write(
        tmp_path / "installer.toml",
        '[assets]\ndir = "."\npull_secret = "{}"\n',
    )

    with pytest.raises(SettingsValidationError) as excinfo:
        load_settings(settings_path, environ={}, cwd=tmp_path)

    assert [(issue.path, issue.message) for issue in excinfo.value.issues] == [
        (
            "assets.pull_secret",
            "embedded secret values are forbidden; pass them on the command line",
        )
    ]


def test_normalize_paths_leaves_non_path_fields_untouched(tmp_path: Path) -> None:
    payload = {"assets": {"dir": "a/../b"}, "logging": {"level": "INFO", "log_dir": ""}}

    normalized = normalize_paths(payload, base_dir=tmp_path)

    assert normalized["assets"]["dir"] == (tmp_path / "b").as_posix()
    assert normalized["logging"] == {"level": "INFO", "log_dir": ""}
    assert payload["assets"]["dir"] == "a/../b"


def test_dump_effective_settings_is_sorted_json(tmp_path: Path) -> None:
    loaded = load_settings(environ={}, cwd=tmp_path)

    dumped = dump_effective_settings(loaded)

    assert list(json.loads(dumped)) == ["assets", "logging", "meta"]
    assert json.loads(dumped)["logging"]["redact_secrets"] is True
