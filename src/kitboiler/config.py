"""Environment configuration, read at call time so tests and the CLI can override it."""

from __future__ import annotations

import os
import shutil


def go_binary() -> str:
    """Return the Go toolchain binary. Override with `KITBOILER_GO`."""
    return os.environ.get("KITBOILER_GO") or "go"


def gofmt_binary() -> str:
    """Return the formatter binary. Override with `KITBOILER_GOFMT`."""
    return os.environ.get("KITBOILER_GOFMT") or "gofmt"


def goimports_binary() -> str:
    """Return the import inference binary. Override with `KITBOILER_GOIMPORTS`."""
    return os.environ.get("KITBOILER_GOIMPORTS") or "goimports"


def locator_kind() -> str:
    """Return `go` or `module`. Override with `KITBOILER_LOCATOR`.

    Defaults to `go` (build-tag aware `go list`) when the Go toolchain is on PATH.
    """
    override = os.environ.get("KITBOILER_LOCATOR")
    if override:
        return override
    return "go" if shutil.which(go_binary()) else "module"
