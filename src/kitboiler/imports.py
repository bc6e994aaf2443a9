"""Compute the import block of a generated file."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from .goast.nodes import Named, iter_named
from .qualify import default_package_name
from .symbols import MethodSignature, ParamKind

logger = logging.getLogger(__name__)

# Imports every generated file needs, with the alias each one is given.
BASELINE_IMPORTS: tuple[tuple[str, str], ...] = (
    ("context", ""),
    ("encoding/json", ""),
    ("net/http", ""),
    ("github.com/go-kit/kit/endpoint", ""),
    ("github.com/go-kit/kit/transport/http", "httptransport"),
)

# Identifiers declared inside the generated functions; a package with one of
# these names would be shadowed where its types are used.
RESERVED_NAMES = frozenset({"ctx", "e", "err", "opts", "r", "req", "request", "response", "svc", "v", "w"})


class ImportSet:
    """Import path -> alias, each path at most once.

    An empty alias means the package is referred to by its own name. Aliases are
    only assigned when that name is already taken.
    """

    def __init__(self, *, reserved: Iterable[str] = ()):
        self._aliases: dict[str, str] = {}
        self._by_name: dict[str, str] = {}
        self._reserved = frozenset(reserved)

    def add(self, path: str, alias: str = "", *, name: str | None = None) -> str:
        """Register path and return the identifier that refers to it in generated code.

        `name` is the package name as the source spells it; when it differs from
        what the import path implies, it is kept as an explicit alias.
        """
        if path in self._aliases:
            return self.local_name(path)

        default = default_package_name(path)
        local = alias or name or default
        if local != default:
            alias = local
        if local in self._by_name or local in self._reserved:
            base = local
            n = 2
            while f"{base}{n}" in self._by_name or f"{base}{n}" in self._reserved:
                n += 1
            local = alias = f"{base}{n}"
            logger.debug("aliasing %s as %s", path, local)

        self._aliases[path] = alias
        self._by_name[local] = path
        return local

    def local_name(self, path: str) -> str:
        return self._aliases[path] or default_package_name(path)

    def local_names(self) -> dict[str, str]:
        return {path: self.local_name(path) for path in self._aliases}

    def alias(self, path: str) -> str:
        return self._aliases[path]

    def lines(self) -> list[str]:
        """Import specs sorted by path, e.g. `httptransport "github.com/go-kit/kit/transport/http"`."""
        out = []
        for path in sorted(self._aliases):
            alias = self._aliases[path]
            out.append(f'{alias} "{path}"' if alias else f'"{path}"')
        return out

    def __contains__(self, path: object) -> bool:
        return path in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._aliases))

    def __len__(self) -> int:
        return len(self._aliases)


def resolve_imports(iface: Named, methods: Iterable[MethodSignature]) -> ImportSet:
    """Return the imports needed by the generated code for iface's methods."""
    imports = ImportSet(reserved=RESERVED_NAMES)
    for path, alias in BASELINE_IMPORTS:
        imports.add(path, alias)
    if iface.path is not None:
        imports.add(iface.path, name=iface.qualifier)

    for m in methods:
        for p in (*m.params, *m.results):
            if p.kind is ParamKind.CONTEXT:
                continue
            if p.kind is ParamKind.OPTIONS and p.options is not None:
                _add_named(imports, [p.options], m)
            else:
                _add_named(imports, iter_named(p.type), m)
        for s in m.option_setters:
            _add_named(imports, [s.options_type, *iter_named(s.field_type)], m)
    return imports


def _add_named(imports: ImportSet, names: Iterable[Named], m: MethodSignature) -> None:
    for n in names:
        if n.path is not None:
            imports.add(n.path, name=n.qualifier)
        elif n.qualifier is not None:
            logger.warning("%s.%s: no import found for %s, generated code may not compile", m.origin, m.name, n.render())
