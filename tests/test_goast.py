from __future__ import annotations

import pytest


@pytest.mark.parametrize(
    "src",
    [
        "int",
        "*http.Request",
        "[]*model.QueryResult",
        "[4]byte",
        "map[string][]int",
        "<-chan []T",
        "chan<- error",
        "func(a, b int) (string, error)",
        "func(context.Context) error",
        "List[int]",
        "pkg.Pair[string, *Node]",
        "struct{}",
        "interface{}",
        "struct{ A, B int; C string `json:\"c\"` }",
    ],
)
def test_parse_type_renders_back(src):
    from kitboiler.goast import parse_type

    assert parse_type(src).render() == src


def test_parse_type_structure():
    from kitboiler.goast import parse_type
    from kitboiler.goast.nodes import Field, Func, Map, Named, Pointer

    assert parse_type("map[string]*pkg.Foo") == Map(Named("string"), Pointer(Named("Foo", qualifier="pkg")))
    fn = parse_type("func(a, b int, opts ...Setter)")
    assert isinstance(fn, Func)
    assert fn.params[0] == Field(("a", "b"), Named("int"))
    assert fn.params[1].names == ("opts",)
    assert fn.params[1].type.render() == "...Setter"


def test_parse_type_rejects_mixed_parameter_names():
    from kitboiler.errors import GoSyntaxError
    from kitboiler.goast import parse_type

    with pytest.raises(GoSyntaxError, match="mixed named and unnamed"):
        parse_type("func(a int, string)")


def test_parse_file_reads_imports_and_types_and_skips_the_rest():
    from kitboiler.goast import parse_file
    from kitboiler.goast.nodes import ImportDecl, Interface, Method, Named, Struct

    f = parse_file(
        """
// Package api does things.
package api

import "fmt"

import (
    "context"
    kithttp "github.com/go-kit/kit/transport/http"
    _ "embed"
)

const Version = "1.0"

var handlers = map[string]func(){
    "a": func() { fmt.Println("a") },
}

func (s *server) Do(ctx context.Context) error {
    if s == nil {
        return nil
    }
    return nil
}

type (
    Service interface {
        Do(ctx context.Context) (err error)
        fmt.Stringer
    }

    server struct {
        *kithttp.Server
        name, addr string `json:"name"`
    }
)

type ID = string
""",
        filename="api.go",
    )
    assert f.package == "api"
    assert f.imports == (
        ImportDecl("fmt"),
        ImportDecl("context"),
        ImportDecl("github.com/go-kit/kit/transport/http", alias="kithttp"),
        ImportDecl("embed", alias="_"),
    )
    assert [t.name for t in f.types] == ["Service", "server", "ID"]

    svc = f.find_type("Service")
    assert svc is not None
    assert isinstance(svc.type, Interface)
    method, embedded = svc.type.elems
    assert isinstance(method, Method) and method.name == "Do"
    assert embedded == Named("Stringer", qualifier="fmt")

    server = f.find_type("server")
    assert server is not None and isinstance(server.type, Struct)
    assert server.type.fields[0].embedded
    assert server.type.fields[1].names == ("name", "addr")
    assert server.type.fields[1].tag == '`json:"name"`'

    alias = f.find_type("ID")
    assert alias is not None and alias.alias


def test_parse_file_distinguishes_array_types_from_type_params():
    from kitboiler.goast import parse_file
    from kitboiler.goast.nodes import Array

    f = parse_file("package p\n\ntype Buf [N]byte\n\ntype List[T any] struct{ items []T }\n")
    buf = f.find_type("Buf")
    lst = f.find_type("List")
    assert buf is not None and isinstance(buf.type, Array)
    assert lst is not None and [p.names for p in lst.type_params] == [("T",)]


def test_parse_file_reports_position_of_syntax_errors():
    from kitboiler.errors import GoSyntaxError
    from kitboiler.goast import parse_file

    with pytest.raises(GoSyntaxError, match=r"broken\.go:\d+: "):
        parse_file("package p\n\ntype T interface { Do( }\n", filename="broken.go")
    with pytest.raises(GoSyntaxError, match=r"x\.go:\d+: "):
        parse_file("package p\n#\n", filename="x.go")


def test_parse_file_accepts_byte_order_mark():
    from kitboiler.goast import parse_file

    f = parse_file(b"\xef\xbb\xbfpackage api\n\ntype S interface{ M(name string) (err error) }\n", filename="svc.go")
    assert f.package == "api"
    assert [t.name for t in f.types] == ["S"]
    assert parse_file("\ufeffpackage api\n").package == "api"


def test_parse_file_rejects_invalid_utf8():
    from kitboiler.errors import GoSyntaxError
    from kitboiler.goast import parse_file

    with pytest.raises(GoSyntaxError, match=r"latin1\.go:2: illegal UTF-8 encoding"):
        parse_file(b"package p\n// caf\xe9\n", filename="latin1.go")
