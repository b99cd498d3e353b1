"""YAML encoding and decoding of install configs.

Encoding is deterministic: fields are emitted in model declaration order and
mappings supplied by the user (tags) are sorted, so equal configs always
produce identical bytes.
"""

from __future__ import annotations

from typing import cast

import yaml

from installconfig.domain.models import InstallConfig


def dump_install_config(config: InstallConfig) -> bytes:
    """Serialize ``config`` to YAML bytes."""

    rendered = yaml.safe_dump(
        config.to_dict(),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=False,
        width=120,
    )
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    return rendered.encode("utf-8")


def parse_install_config(data: bytes | str) -> InstallConfig:
    """Parse YAML (or JSON) text into an ``InstallConfig``.

    Raises ``ValueError`` for unparseable text, a non-mapping document, or a
    structurally malformed field.
    """

    text = data.decode("utf-8") if isinstance(data, bytes) else data
    try:
        loaded = cast("object", yaml.safe_load(text))
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid YAML ({exc})") from exc

    if loaded is None:
        raise ValueError("document is empty")
    if not isinstance(loaded, dict):
        raise ValueError(f"expected top-level YAML mapping, got {type(loaded).__name__}")
    return InstallConfig.from_dict(loaded)


__all__ = ["dump_install_config", "parse_install_config"]
