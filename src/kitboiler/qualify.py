"""Rewrite type expressions so they stay meaningful outside their declaring package."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from .goast.nodes import (
    Approx,
    Array,
    Chan,
    Field,
    Func,
    ImportDecl,
    Interface,
    Map,
    Method,
    Named,
    Pointer,
    Slice,
    Struct,
    TypeExpr,
    Union,
    Variadic,
)

logger = logging.getLogger(__name__)

_MAJOR_VERSION_RE = re.compile(r"v[0-9]+")


def default_package_name(import_path: str) -> str:
    """Guess the package name for an import path the way goimports does.

    "github.com/go-kit/kit/endpoint" -> "endpoint", "gopkg.in/yaml.v3" -> "yaml",
    "example.com/mod/v2" -> "mod", "github.com/x/go-redis" -> "redis".
    """
    parts = import_path.split("/")
    base = parts[-1]
    if _MAJOR_VERSION_RE.fullmatch(base) and len(parts) > 1:
        base = parts[-2]
    if base.startswith("go-"):
        base = base[3:]
    return re.split(r"[^\w]", base, maxsplit=1)[0]


def is_exported(name: str) -> bool:
    return bool(name) and name[0].isupper()


@dataclass(frozen=True)
class Scope:
    """The package (and file imports) a type expression was written in."""

    package: str
    path: str
    imports: tuple[ImportDecl, ...] = ()

    def lookup(self, qualifier: str) -> str | None:
        """Return the import path a package qualifier refers to, if the file imports it."""
        for imp in self.imports:
            if imp.alias in {"_", "."}:
                continue
            name = imp.alias or default_package_name(imp.path)
            if name == qualifier:
                return imp.path
        return None


def qualify(expr: TypeExpr, scope: Scope) -> TypeExpr:
    """Return expr with every exported local type name qualified by scope's package.

    Examples, assuming package net/http:
        int        => int
        Handler    => http.Handler
        io.Reader  => io.Reader (path resolved from the file's imports)
        *Request   => *http.Request
    """
    if isinstance(expr, Named):
        args = tuple(qualify(a, scope) for a in expr.args)
        if expr.qualifier is not None:
            path = expr.path
            if path is None:
                path = scope.lookup(expr.qualifier)
                if path is None:
                    logger.debug("qualifier %s is not imported by package %s", expr.qualifier, scope.path)
            return replace(expr, path=path, args=args)
        if expr.path is None and is_exported(expr.name):
            return Named(expr.name, qualifier=scope.package, path=scope.path, args=args)
        return replace(expr, args=args)
    if isinstance(expr, (Pointer, Slice, Variadic, Approx)):
        return type(expr)(qualify(expr.elem, scope))
    if isinstance(expr, Array):
        return Array(expr.length, qualify(expr.elem, scope))
    if isinstance(expr, Chan):
        return Chan(qualify(expr.elem, scope), expr.dir)
    if isinstance(expr, Map):
        return Map(qualify(expr.key, scope), qualify(expr.value, scope))
    if isinstance(expr, Union):
        return Union(tuple(qualify(t, scope) for t in expr.terms))
    if isinstance(expr, Func):
        return _qualify_func(expr, scope)
    if isinstance(expr, Struct):
        return Struct(tuple(_qualify_field(f, scope) for f in expr.fields))
    if isinstance(expr, Interface):
        elems: list[Method | TypeExpr] = []
        for e in expr.elems:
            if isinstance(e, Method):
                elems.append(Method(e.name, _qualify_func(e.func, scope), e.line))
            else:
                elems.append(qualify(e, scope))
        return Interface(tuple(elems))
    raise TypeError(f"unexpected type expression: {expr!r}")


def qualify_text(expr: TypeExpr, scope: Scope) -> str:
    return qualify(expr, scope).render()


def _qualify_field(f: Field, scope: Scope) -> Field:
    return Field(f.names, qualify(f.type, scope), f.tag)


def _qualify_func(fn: Func, scope: Scope) -> Func:
    return Func(
        params=tuple(_qualify_field(f, scope) for f in fn.params),
        results=tuple(_qualify_field(f, scope) for f in fn.results),
    )
