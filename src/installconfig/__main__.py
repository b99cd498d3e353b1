"""Module entrypoint for ``python -m installconfig``."""

from __future__ import annotations

from installconfig.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
