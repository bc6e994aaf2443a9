"""Read Go declarations through tree-sitter's Go grammar."""

from __future__ import annotations

import codecs
from dataclasses import replace
from functools import lru_cache
from typing import NoReturn

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

from ..errors import GoSyntaxError
from .nodes import (
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
    SourceFile,
    Struct,
    TypeExpr,
    TypeSpec,
    Union,
    Variadic,
)

# Older releases of the grammar use the *_spec / constraint_elem names.
_METHOD_ELEMS = frozenset({"method_elem", "method_spec"})
_TYPE_ELEMS = frozenset({"type_elem", "type_constraint", "constraint_elem"})


@lru_cache(maxsize=1)
def _go_parser() -> Parser:
    return Parser(get_language("go"))


def parse_file(src: str | bytes, *, filename: str = "<input>") -> SourceFile:
    """Parse the package clause, imports and top-level type declarations of a Go file.

    Function, method, var and const declarations are ignored. A file with any
    syntax error, or that is not valid UTF-8, raises GoSyntaxError.
    """
    data = _source_bytes(src, filename)
    tree = _go_parser().parse(data)
    return _Reader(data, filename).file(tree.root_node)


def parse_type(src: str) -> TypeExpr:
    """Parse a single Go type expression, e.g. `map[string]*pkg.Foo`."""
    data = _source_bytes(f"package p\n\ntype _ {src}\n", "<type>")
    root = _go_parser().parse(data).root_node
    r = _Reader(data, "<type>")
    r.check(root)
    decls = [c for c in _named(root) if c.type != "package_clause"]
    specs = [c for c in _named(decls[0]) if c.type == "type_spec"] if len(decls) == 1 else []
    if len(specs) != 1 or decls[0].type != "type_declaration":
        raise GoSyntaxError(f"not a single type expression: {src!r}")
    return r.type(specs[0].child_by_field_name("type"))


def _source_bytes(src: str | bytes, filename: str) -> bytes:
    data = src.encode("utf-8") if isinstance(src, str) else src
    # Go accepts a leading byte order mark.
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8) :]
    try:
        data.decode("utf-8")
    except UnicodeDecodeError as e:
        line = data.count(b"\n", 0, e.start) + 1
        raise GoSyntaxError("illegal UTF-8 encoding", filename=filename, line=line) from e
    return data


def _named(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type != "comment"]


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _unquote(lit: str) -> str:
    return lit[1:-1]


class _Reader:
    """Turns tree-sitter nodes of one source buffer into kitboiler declarations."""

    def __init__(self, data: bytes, filename: str):
        self.data = data
        self.filename = filename

    def text(self, node: Node) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8")

    def fail(self, msg: str, node: Node) -> NoReturn:
        raise GoSyntaxError(msg, filename=self.filename, line=node.start_point[0] + 1)

    def check(self, root: Node) -> None:
        if not root.has_error:
            return
        bad = _first_error(root) or root
        if bad.is_missing:
            self.fail(f"missing {bad.type}", bad)
        snippet = self.text(bad).strip().splitlines()
        self.fail(f"syntax error near {snippet[0][:40]!r}" if snippet else "syntax error", bad)

    # Declarations.

    def file(self, root: Node) -> SourceFile:
        self.check(root)
        package: str | None = None
        imports: list[ImportDecl] = []
        types: list[TypeSpec] = []
        for node in _named(root):
            if node.type == "package_clause":
                package = self.text(_named(node)[0])
            elif node.type == "import_declaration":
                for spec in _named(node):
                    specs = _named(spec) if spec.type == "import_spec_list" else [spec]
                    imports.extend(self.import_spec(s) for s in specs)
            elif node.type == "type_declaration":
                types.extend(self.type_spec(s) for s in _named(node) if s.type in {"type_spec", "type_alias"})
        if package is None:
            self.fail("expected 'package' clause", root)
        return SourceFile(path=self.filename, package=package, imports=tuple(imports), types=tuple(types))

    def import_spec(self, node: Node) -> ImportDecl:
        name = node.child_by_field_name("name")
        path = node.child_by_field_name("path")
        return ImportDecl(path=_unquote(self.text(path)), alias=self.text(name) if name is not None else None)

    def type_spec(self, node: Node) -> TypeSpec:
        name = node.child_by_field_name("name")
        tparams = node.child_by_field_name("type_parameters")
        return TypeSpec(
            name=self.text(name),
            type=self.type(node.child_by_field_name("type")),
            type_params=self.type_params(tparams) if tparams is not None else (),
            alias=node.type == "type_alias",
            line=name.start_point[0] + 1,
        )

    def type_params(self, node: Node) -> tuple[Field, ...]:
        fields = []
        for decl in _named(node):
            names = tuple(self.text(n) for n in decl.children_by_field_name("name"))
            fields.append(Field(names, self.type(decl.child_by_field_name("type"))))
        return tuple(fields)

    # Types.

    def type(self, node: Node | None) -> TypeExpr:
        if node is None:
            raise GoSyntaxError("expected type", filename=self.filename)
        kind = node.type
        if kind == "type_identifier":
            return Named(self.text(node))
        if kind == "qualified_type":
            return Named(
                self.text(node.child_by_field_name("name")),
                qualifier=self.text(node.child_by_field_name("package")),
            )
        if kind == "generic_type":
            base = self.type(node.child_by_field_name("type"))
            if not isinstance(base, Named):
                self.fail(f"unsupported generic type {self.text(node)!r}", node)
            args = _named(node.child_by_field_name("type_arguments"))
            return replace(base, args=tuple(self.type(a) for a in args))
        if kind == "pointer_type":
            return Pointer(self.type(_named(node)[0]))
        if kind == "slice_type":
            return Slice(self.type(node.child_by_field_name("element")))
        if kind == "array_type":
            length = " ".join(self.text(node.child_by_field_name("length")).split())
            return Array(length, self.type(node.child_by_field_name("element")))
        if kind == "implicit_length_array_type":
            return Array("...", self.type(node.child_by_field_name("element")))
        if kind == "map_type":
            return Map(self.type(node.child_by_field_name("key")), self.type(node.child_by_field_name("value")))
        if kind == "channel_type":
            return self.channel(node)
        if kind == "function_type":
            return self.signature(node)
        if kind == "struct_type":
            return self.struct(node)
        if kind == "interface_type":
            return self.interface(node)
        if kind == "negated_type":
            return Approx(self.type(_named(node)[0]))
        if kind in {"parenthesized_type", "interface_type_name"}:
            return self.type(_named(node)[0])
        if kind in _TYPE_ELEMS:
            terms = [self.type(t) for t in _named(node)]
            return terms[0] if len(terms) == 1 else Union(tuple(terms))
        self.fail(f"unsupported type {self.text(node)!r}", node)

    def channel(self, node: Node) -> Chan:
        elem = self.type(node.child_by_field_name("value"))
        tokens = [c.type for c in node.children if not c.is_named]
        if tokens[:1] == ["<-"]:
            return Chan(elem, "recv")
        if "<-" in tokens:
            return Chan(elem, "send")
        return Chan(elem)

    def signature(self, node: Node) -> Func:
        params = self.params(node.child_by_field_name("parameters"))
        result = node.child_by_field_name("result")
        if result is None:
            results: tuple[Field, ...] = ()
        elif result.type == "parameter_list":
            results = self.params(result)
        else:
            results = (Field((), self.type(result)),)
        return Func(params=params, results=results)

    def params(self, node: Node) -> tuple[Field, ...]:
        fields = []
        for decl in _named(node):
            names = tuple(self.text(n) for n in decl.children_by_field_name("name"))
            typ = self.type(decl.child_by_field_name("type"))
            if decl.type == "variadic_parameter_declaration":
                typ = Variadic(typ)
            fields.append(Field(names, typ))
        if any(f.names for f in fields) and not all(f.names for f in fields):
            self.fail("mixed named and unnamed parameters", node)
        return tuple(fields)

    def struct(self, node: Node) -> Struct:
        fields: list[Field] = []
        for body in _named(node):
            for decl in _named(body):
                if decl.type != "field_declaration":
                    continue
                names = tuple(self.text(n) for n in decl.children_by_field_name("name"))
                typ = self.type(decl.child_by_field_name("type"))
                # Embedded `*T` keeps its star as an anonymous token.
                if not names and any(c.type == "*" for c in decl.children):
                    typ = Pointer(typ)
                tag = decl.child_by_field_name("tag")
                fields.append(Field(names, typ, self.text(tag) if tag is not None else None))
        return Struct(tuple(fields))

    def interface(self, node: Node) -> Interface:
        elems: list[Method | TypeExpr] = []
        for child in _named(node):
            if child.type in _METHOD_ELEMS:
                name = child.child_by_field_name("name")
                elems.append(Method(self.text(name), self.signature(child), child.start_point[0] + 1))
            else:
                elems.append(self.type(child))
        return Interface(tuple(elems))
