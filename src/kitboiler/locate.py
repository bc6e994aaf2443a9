"""Package discovery: map a Go import path to a directory, its files and imports."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from . import config
from .errors import ConfigError, GoSyntaxError, PackageNotFoundError, ToolError
from .goast import parse_file
from .gotool import run_tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageInfo:
    import_path: str
    name: str
    dir: Path
    go_files: list[str]
    imports: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[Path]:
        return [self.dir / f for f in self.go_files]


class Locator(Protocol):
    def locate(self, import_path: str, src_dir: Path) -> PackageInfo: ...


class GoListLocator:
    """Resolve packages with `go list -json`, which applies build tags and vendoring."""

    def locate(self, import_path: str, src_dir: Path) -> PackageInfo:
        try:
            out = run_tool([config.go_binary(), "list", "-json", import_path], cwd=Path(src_dir))
        except ToolError as e:
            raise PackageNotFoundError(f"couldn't find package {import_path}: {e}") from e

        try:
            obj = json.loads(out)
        except Exception as e:  # noqa: BLE001 - boundary parse
            raise PackageNotFoundError(f"failed to parse go list output for {import_path}: {e}") from e

        err = obj.get("Error")
        if isinstance(err, dict) and err.get("Err"):
            raise PackageNotFoundError(f"couldn't find package {import_path}: {err['Err']}")
        if not obj.get("Dir") or not obj.get("Name"):
            raise PackageNotFoundError(f"couldn't find package {import_path}")

        return PackageInfo(
            import_path=str(obj.get("ImportPath") or import_path),
            name=str(obj["Name"]),
            dir=Path(str(obj["Dir"])),
            go_files=[str(f) for f in obj.get("GoFiles") or []],
            imports=[str(i) for i in obj.get("Imports") or []],
        )


class ModuleLocator:
    """Resolve packages on disk without the Go toolchain.

    Looks, in order, at relative paths, the enclosing module (nearest go.mod),
    its vendor directory, $GOROOT/src and every $GOPATH/src. Build constraints
    are not evaluated, apart from skipping `_test.go` files and files tagged
    `ignore`.
    """

    def locate(self, import_path: str, src_dir: Path) -> PackageInfo:
        src_dir = Path(src_dir)
        for d in self._candidates(import_path, src_dir):
            if not d.is_dir():
                continue
            info = self._read_dir(_canonical_path(d) if import_path.startswith(".") else import_path, d)
            if info is not None:
                logger.debug("located %s at %s", import_path, d)
                return info
        raise PackageNotFoundError(f"couldn't find package {import_path} from {src_dir}")

    def _candidates(self, import_path: str, src_dir: Path) -> list[Path]:
        if import_path.startswith("."):
            return [(src_dir / import_path).resolve()]

        out: list[Path] = []
        root = _find_module_root(src_dir.resolve())
        if root is not None:
            module_path = _read_module_path(root)
            if import_path == module_path:
                out.append(root)
            elif import_path.startswith(module_path + "/"):
                out.append(root / import_path[len(module_path) + 1 :])
            out.append(root / "vendor" / import_path)

        goroot = os.environ.get("GOROOT")
        if goroot:
            out.append(Path(goroot) / "src" / import_path)
        gopath = os.environ.get("GOPATH") or os.path.expanduser("~/go")
        for entry in gopath.split(os.pathsep):
            if entry:
                out.append(Path(entry) / "src" / import_path)
        return out

    def _read_dir(self, import_path: str, d: Path) -> PackageInfo | None:
        name: str | None = None
        files: list[str] = []
        imports: set[str] = set()
        for p in sorted(d.glob("*.go")):
            if p.name.endswith("_test.go") or not p.is_file():
                continue
            data = p.read_bytes()
            if _ignored(data):
                continue
            try:
                f = parse_file(data, filename=str(p))
            except GoSyntaxError as e:
                logger.warning("skipping %s: %s", p, e)
                continue
            if name is None:
                name = f.package
            elif f.package != name:
                logger.debug("skipping %s: package %s, expected %s", p, f.package, name)
                continue
            files.append(p.name)
            imports.update(i.path for i in f.imports)
        if name is None:
            return None
        return PackageInfo(import_path=import_path, name=name, dir=d, go_files=files, imports=sorted(imports))


def default_locator(kind: str | None = None) -> Locator:
    """Return the locator named by kind, or by configuration when kind is None."""
    kind = kind or config.locator_kind()
    if kind == "go":
        return GoListLocator()
    if kind == "module":
        return ModuleLocator()
    raise ConfigError(
        f"unknown locator: {kind!r} (expected 'go' or 'module'; check --locator or KITBOILER_LOCATOR)"
    )


def _ignored(data: bytes) -> bool:
    for raw in data.splitlines():
        line = raw.strip()
        if line.startswith(b"package "):
            return False
        if line in {b"//go:build ignore", b"// +build ignore"}:
            return True
    return False


def _read_module_path(module_dir: Path) -> str:
    go_mod = module_dir / "go.mod"
    for line in go_mod.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line.startswith("module "):
            return line.split()[1].strip('"')
    raise PackageNotFoundError(f"failed to parse module path from {go_mod}")


def _find_module_root(start: Path) -> Path | None:
    p = start
    while True:
        if (p / "go.mod").exists():
            return p
        if p.parent == p:
            return None
        p = p.parent


def _canonical_path(d: Path) -> str:
    """Import path for a directory inside a module; the directory itself otherwise."""
    root = _find_module_root(d)
    if root is None:
        return str(d)
    rel = d.relative_to(root)
    module_path = _read_module_path(root)
    if str(rel) == ".":
        return module_path
    return f"{module_path}/{'/'.join(rel.parts)}"
