"""Parsed-package cache shared by every lookup of one generator run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import GoSyntaxError, TypeNotFoundError
from .goast import parse_file
from .goast.nodes import SourceFile, TypeSpec
from .locate import Locator, PackageInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedPackage:
    info: PackageInfo
    files: tuple[SourceFile, ...]

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def path(self) -> str:
        return self.info.import_path


class SourceLoader:
    """Locate and parse packages once per import path.

    One loader is created per top-level invocation and dropped afterwards; embedded
    interfaces and options structs resolved during the run reuse its parses.
    """

    def __init__(self, locator: Locator, src_dir: Path):
        self.locator = locator
        self.src_dir = Path(src_dir)
        self._packages: dict[str, ParsedPackage] = {}

    def package(self, import_path: str) -> ParsedPackage:
        cached = self._packages.get(import_path)
        if cached is not None:
            return cached

        info = self.locator.locate(import_path, self.src_dir)
        files: list[SourceFile] = []
        for p in info.paths:
            try:
                files.append(parse_file(p.read_bytes(), filename=str(p)))
            except GoSyntaxError as e:
                # Unparsable files are skipped, as `go/parser` based tools do.
                logger.warning("skipping %s: %s", p, e)
        pkg = ParsedPackage(info=info, files=tuple(files))
        self._packages[import_path] = pkg
        # `go list` may canonicalise the path (e.g. "./api" -> "example.com/mod/api").
        self._packages.setdefault(info.import_path, pkg)
        logger.debug("parsed %s (%d files)", info.import_path, len(files))
        return pkg

    def type_spec(self, import_path: str, name: str) -> tuple[ParsedPackage, SourceFile, TypeSpec]:
        """Find the top-level type declaration `name` in the package at `import_path`."""
        pkg = self.package(import_path)
        for f in pkg.files:
            spec = f.find_type(name)
            if spec is not None:
                return pkg, f, spec
        raise TypeNotFoundError(f"type {name} not found in {import_path}")
