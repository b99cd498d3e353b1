"""
installconfig — package root

File: src/installconfig/__init__.py
Last updated: 2026-10-18

Purpose
- Package root. Synthesizes the cluster install configuration from resolved
  upstream values, or adopts a validated ``install-config.yaml`` from disk.

What should be included in this file
- Version export and minimal public API surface (keep small).
- Import boundary rules: avoid importing heavy submodules at import time.

Functional requirements
- Must not have side effects at import time (no settings loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
