"""Wrappers around the Go tools kitboiler delegates to (gofmt, goimports, go list)."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from . import config
from .errors import ToolError

logger = logging.getLogger(__name__)


def run_tool(cmd: list[str], *, cwd: Path | None = None, stdin: str | None = None) -> str:
    """Run cmd and return its stdout; a missing binary or nonzero exit raises ToolError."""
    prog = cmd[0] if cmd else "<unknown>"
    logger.debug("running %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            input=stdin.encode("utf-8") if stdin is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolError(f"command not found: {prog} (install it or set the matching KITBOILER_* variable)") from e

    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        out = "\n".join(s for s in [stdout.strip("\n"), stderr.strip("\n")] if s)
        raise ToolError(f"command failed: {' '.join(cmd)}\n{out}")
    return stdout


def format_source(src: str) -> str:
    """Format Go source with gofmt."""
    return run_tool([config.gofmt_binary()], stdin=src)


def infer_imports(src: str, *, src_dir: Path) -> str:
    """Let goimports add the import a bare `pkg.Name` expression needs."""
    return run_tool([config.goimports_binary(), "-srcdir", str(src_dir)], stdin=src)
