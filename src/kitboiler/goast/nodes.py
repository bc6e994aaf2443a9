"""Structured Go type expressions and the declarations kitboiler reads.

Type expressions are immutable. Qualification builds new trees instead of
mutating parsed ones, so a cached package can be shared across lookups.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass


LocalNames = Mapping[str, str]


@dataclass(frozen=True)
class Named:
    """A (possibly package-qualified, possibly instantiated) type name.

    `qualifier` is the package identifier as written (`io` in `io.Reader`).
    `path` is the import path the qualifier stands for, once known.
    """

    name: str
    qualifier: str | None = None
    path: str | None = None
    args: tuple[TypeExpr, ...] = ()

    def render(self, local_names: LocalNames | None = None) -> str:
        q = self.qualifier
        if self.path is not None and local_names is not None and self.path in local_names:
            q = local_names[self.path]
        out = f"{q}.{self.name}" if q else self.name
        if self.args:
            out += "[" + ", ".join(a.render(local_names) for a in self.args) + "]"
        return out


@dataclass(frozen=True)
class Pointer:
    elem: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return "*" + self.elem.render(local_names)


@dataclass(frozen=True)
class Slice:
    elem: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return "[]" + self.elem.render(local_names)


@dataclass(frozen=True)
class Array:
    length: str
    elem: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return f"[{self.length}]" + self.elem.render(local_names)


@dataclass(frozen=True)
class Map:
    key: TypeExpr
    value: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return f"map[{self.key.render(local_names)}]{self.value.render(local_names)}"


@dataclass(frozen=True)
class Chan:
    elem: TypeExpr
    dir: str = "both"  # both | send | recv

    def render(self, local_names: LocalNames | None = None) -> str:
        inner = self.elem.render(local_names)
        if self.dir == "send":
            return f"chan<- {inner}"
        if self.dir == "recv":
            return f"<-chan {inner}"
        if isinstance(self.elem, Chan) and self.elem.dir == "recv":
            return f"chan ({inner})"
        return f"chan {inner}"


@dataclass(frozen=True)
class Variadic:
    elem: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return "..." + self.elem.render(local_names)


@dataclass(frozen=True)
class Approx:
    elem: TypeExpr

    def render(self, local_names: LocalNames | None = None) -> str:
        return "~" + self.elem.render(local_names)


@dataclass(frozen=True)
class Union:
    terms: tuple[TypeExpr, ...]

    def render(self, local_names: LocalNames | None = None) -> str:
        return " | ".join(t.render(local_names) for t in self.terms)


@dataclass(frozen=True)
class Field:
    """A parameter, result or struct field group. No names means anonymous/embedded."""

    names: tuple[str, ...]
    type: TypeExpr
    tag: str | None = None

    @property
    def embedded(self) -> bool:
        return not self.names

    def render(self, local_names: LocalNames | None = None) -> str:
        out = self.type.render(local_names)
        if self.names:
            out = ", ".join(self.names) + " " + out
        if self.tag:
            out += " " + self.tag
        return out


@dataclass(frozen=True)
class Func:
    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()

    def render_signature(self, local_names: LocalNames | None = None) -> str:
        out = "(" + ", ".join(f.render(local_names) for f in self.params) + ")"
        if len(self.results) == 1 and not self.results[0].names:
            out += " " + self.results[0].render(local_names)
        elif self.results:
            out += " (" + ", ".join(f.render(local_names) for f in self.results) + ")"
        return out

    def render(self, local_names: LocalNames | None = None) -> str:
        return "func" + self.render_signature(local_names)


@dataclass(frozen=True)
class Struct:
    fields: tuple[Field, ...] = ()

    def render(self, local_names: LocalNames | None = None) -> str:
        if not self.fields:
            return "struct{}"
        return "struct{ " + "; ".join(f.render(local_names) for f in self.fields) + " }"


@dataclass(frozen=True)
class Method:
    name: str
    func: Func
    line: int = 0

    def render(self, local_names: LocalNames | None = None) -> str:
        return self.name + self.func.render_signature(local_names)


@dataclass(frozen=True)
class Interface:
    # Each element is a Method or an embedded type expression (name, union, ~T).
    elems: tuple[Method | TypeExpr, ...] = ()

    def render(self, local_names: LocalNames | None = None) -> str:
        if not self.elems:
            return "interface{}"
        return "interface{ " + "; ".join(e.render(local_names) for e in self.elems) + " }"


TypeExpr = Named | Pointer | Slice | Array | Map | Chan | Variadic | Approx | Union | Func | Struct | Interface


def iter_named(expr: TypeExpr) -> Iterator[Named]:
    """Yield every Named reachable from expr, including generic arguments."""
    if isinstance(expr, Named):
        yield expr
        for a in expr.args:
            yield from iter_named(a)
    elif isinstance(expr, (Pointer, Slice, Array, Chan, Variadic, Approx)):
        yield from iter_named(expr.elem)
    elif isinstance(expr, Map):
        yield from iter_named(expr.key)
        yield from iter_named(expr.value)
    elif isinstance(expr, Union):
        for t in expr.terms:
            yield from iter_named(t)
    elif isinstance(expr, Func):
        for f in (*expr.params, *expr.results):
            yield from iter_named(f.type)
    elif isinstance(expr, Struct):
        for f in expr.fields:
            yield from iter_named(f.type)
    elif isinstance(expr, Interface):
        for e in expr.elems:
            if isinstance(e, Method):
                yield from iter_named(e.func)
            else:
                yield from iter_named(e)


@dataclass(frozen=True)
class ImportDecl:
    path: str
    alias: str | None = None  # None, "_", "." or an identifier


@dataclass(frozen=True)
class TypeSpec:
    name: str
    type: TypeExpr
    type_params: tuple[Field, ...] = ()
    alias: bool = False
    line: int = 0


@dataclass(frozen=True)
class SourceFile:
    path: str
    package: str
    imports: tuple[ImportDecl, ...]
    types: tuple[TypeSpec, ...]

    def find_type(self, name: str) -> TypeSpec | None:
        for spec in self.types:
            if spec.name == name:
                return spec
        return None
