"""Resolve an interface declaration into its flattened method set."""

from __future__ import annotations

import logging

from .errors import (
    DuplicateMethodError,
    EmbedCycleError,
    EmptyInterfaceError,
    InvalidSignatureError,
    NotAnInterfaceError,
    PackageNotFoundError,
)
from .goast.nodes import Field, Interface, Method, Named, TypeExpr, Variadic
from .loader import SourceLoader
from .qualify import Scope, qualify
from .reference import InterfaceRef
from .symbols import MethodSignature, Param, ParamKind

logger = logging.getLogger(__name__)

OPTIONS_SUFFIX = "Setter"

# Names the generated endpoint closure declares itself; a result with one of
# these names would be redeclared by the `:=` assignment.
RESERVED_RESULT_NAMES = frozenset({"ctx", "request", "req", "svc"})

_PREDECLARED = frozenset({"any", "comparable", "error"})


def options_struct(t: TypeExpr) -> Named | None:
    """Return the options struct a `...FooOptionsSetter` parameter configures (`FooOptions`)."""
    if not isinstance(t, Variadic) or not isinstance(t.elem, Named):
        return None
    name = t.elem.name
    if not name.endswith(OPTIONS_SUFFIX) or len(name) == len(OPTIONS_SUFFIX):
        return None
    return Named(name[: -len(OPTIONS_SUFFIX)], qualifier=t.elem.qualifier, path=t.elem.path)


def param_kind(t: TypeExpr, *, result: bool) -> ParamKind:
    if result:
        if isinstance(t, Named) and t.name == "error" and t.qualifier is None:
            return ParamKind.ERROR
        return ParamKind.ORDINARY
    if isinstance(t, Named) and t.name == "Context" and t.path == "context":
        return ParamKind.CONTEXT
    if options_struct(t) is not None:
        return ParamKind.OPTIONS
    return ParamKind.ORDINARY


def extract(ref: InterfaceRef, loader: SourceLoader) -> list[MethodSignature]:
    """Return the methods of the referenced interface, embedded interfaces flattened in place.

    Methods reached twice through different embeds are kept once (first position)
    when their signatures are identical; conflicting signatures are an error.
    """
    methods = _interface(ref.path, ref.name, loader, stack=())

    seen: dict[str, MethodSignature] = {}
    out: list[MethodSignature] = []
    for m in methods:
        prev = seen.get(m.name)
        if prev is None:
            seen[m.name] = m
            out.append(m)
            continue
        if not prev.same_signature(m):
            raise DuplicateMethodError(
                f"method {m.name} is declared by both {prev.origin} and {m.origin} with different signatures"
            )
        logger.debug("dropping duplicate method %s from %s", m.name, m.origin)
    return out


def _interface(
    path: str, name: str, loader: SourceLoader, *, stack: tuple[tuple[str, str], ...]
) -> list[MethodSignature]:
    key = (path, name)
    if key in stack:
        chain = " -> ".join(f"{p}.{n}" for p, n in (*stack, key))
        raise EmbedCycleError(f"interface embeds itself: {chain}")
    stack = (*stack, key)

    pkg, f, spec = loader.type_spec(path, name)
    scope = Scope(package=pkg.name, path=pkg.path, imports=f.imports)
    origin = f"{pkg.name}.{name}"

    typ = spec.type
    if spec.alias and isinstance(typ, Named):
        target = _embedded_target(qualify(typ, scope), scope, origin)
        return _interface(target.path or pkg.path, target.name, loader, stack=stack)
    if not isinstance(typ, Interface):
        raise NotAnInterfaceError(f"not an interface: {path}.{name}")
    if spec.type_params:
        raise InvalidSignatureError(f"generic interfaces are not supported: {path}.{name}")
    if not typ.elems:
        raise EmptyInterfaceError(f"empty interface: {path}.{name}")

    out: list[MethodSignature] = []
    for elem in typ.elems:
        if isinstance(elem, Method):
            out.append(_method(elem, scope, origin))
            continue
        target = _embedded_target(qualify(elem, scope), scope, origin)
        logger.debug("%s embeds %s", origin, target.render())
        out.extend(_interface(target.path or pkg.path, target.name, loader, stack=stack))
    return out


def _embedded_target(t: TypeExpr, scope: Scope, origin: str) -> Named:
    if not isinstance(t, Named) or t.args:
        raise InvalidSignatureError(f"{origin}: cannot embed {t.render()} in a service interface")
    if t.qualifier is None and t.name in _PREDECLARED:
        raise InvalidSignatureError(f"{origin}: cannot embed predeclared {t.name}")
    if t.qualifier is not None and t.path is None:
        raise PackageNotFoundError(f"{origin}: package {t.qualifier} is not imported by {scope.path}")
    return t


def _params(fields: tuple[Field, ...], scope: Scope, *, result: bool) -> list[Param]:
    params: list[Param] = []
    for field in fields:
        typ = qualify(field.type, scope)
        kind = param_kind(typ, result=result)
        # An anonymous field still yields one (nameless) parameter.
        for name in field.names or ("",):
            params.append(Param(name=name, type=typ, kind=kind))
    return params


def _method(m: Method, scope: Scope, origin: str) -> MethodSignature:
    params = _params(m.func.params, scope, result=False)
    results = _params(m.func.results, scope, result=True)
    where = f"{origin}.{m.name}"

    seen: set[str] = set()
    for i, p in enumerate(params):
        if p.kind is ParamKind.CONTEXT:
            continue
        _check_name(p, f"{where}: parameter {i} ({p.type_text})", seen)
    for i, p in enumerate(results):
        _check_name(p, f"{where}: result {i} ({p.type_text})", seen)
        if p.name in RESERVED_RESULT_NAMES:
            raise InvalidSignatureError(f"{where}: result name {p.name!r} is reserved by the generated endpoint")

    return MethodSignature(
        name=m.name,
        params=tuple(params),
        results=tuple(results),
        origin=origin,
        scope=scope,
    )


def _check_name(p: Param, what: str, seen: set[str]) -> None:
    if not p.name or p.name == "_":
        raise InvalidSignatureError(f"{what} has no name; names become request/response fields")
    if p.name in seen:
        raise InvalidSignatureError(f"{what}: duplicate name {p.name!r}")
    seen.add(p.name)
