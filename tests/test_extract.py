from __future__ import annotations

import pytest


EMBED_FILES = {
    "api/api.go": """
        package api

        import "example.com/ex/store"

        type Service interface {
            First() (err error)
            Inner
            store.Store
            Last(id int) (ok bool)
        }

        type Inner interface {
            InnerA() (err error)
            InnerB() (err error)
        }
    """,
    "store/store.go": """
        package store

        type Store interface {
            Get(key Key) (value *Value, err error)
        }

        type Key string

        type Value struct{}
    """,
}


class CountingLocator:
    def __init__(self):
        from kitboiler.locate import ModuleLocator

        self.inner = ModuleLocator()
        self.calls: list[str] = []

    def locate(self, import_path, src_dir):
        self.calls.append(import_path)
        return self.inner.locate(import_path, src_dir)


def _extract(write_module, files, name="Service", *, locator=None):
    from kitboiler.extract import extract
    from kitboiler.loader import SourceLoader
    from kitboiler.locate import ModuleLocator
    from kitboiler.reference import InterfaceRef

    root = write_module("example.com/ex", files)
    loader = SourceLoader(locator or ModuleLocator(), root)
    return extract(InterfaceRef("example.com/ex/api", name), loader)


def _api(src: str) -> dict[str, str]:
    return {"api/api.go": src}


def test_extract_returns_methods_in_declaration_order(loader):
    from kitboiler.extract import extract
    from kitboiler.reference import InterfaceRef
    from kitboiler.symbols import ParamKind

    fns = extract(InterfaceRef("example.com/svc/api", "MyService"), loader)
    assert [f.name for f in fns] == ["MyFirstFunction", "MyFirstQuery", "MySecondQuery"]

    first, query, second = fns
    assert [(p.name, p.type_text, p.kind) for p in first.params] == [("name", "string", ParamKind.ORDINARY)]
    assert [(p.name, p.type_text, p.kind) for p in query.results] == [
        ("results", "[]*model.QueryResult", ParamKind.ORDINARY),
        ("err", "error", ParamKind.ERROR),
    ]
    assert second.results[0].type.elem.path == "example.com/svc/somepkg"
    assert first.origin == "api.MyService"


def test_extract_flattens_embedded_interfaces_in_place(write_module):
    fns = _extract(write_module, EMBED_FILES)
    assert [f.name for f in fns] == ["First", "InnerA", "InnerB", "Get", "Last"]

    get = fns[3]
    assert get.origin == "store.Store"
    # Qualified relative to the package that declared the method.
    assert [p.type_text for p in get.params] == ["store.Key"]
    assert [p.type_text for p in get.results] == ["*store.Value", "error"]


def test_extract_parses_each_package_once(write_module):
    locator = CountingLocator()
    _extract(write_module, EMBED_FILES, locator=locator)
    assert locator.calls == ["example.com/ex/api", "example.com/ex/store"]


def test_extract_detects_embedding_cycles(write_module):
    from kitboiler.errors import EmbedCycleError

    files = _api(
        """
        package api

        type Service interface {
            A
        }

        type A interface {
            Do() (err error)
            B
        }

        type B interface {
            A
        }
        """
    )
    with pytest.raises(EmbedCycleError, match=r"api\.A -> example.com/ex/api\.B -> example.com/ex/api\.A"):
        _extract(write_module, files)


def test_extract_merges_identical_methods_from_overlapping_embeds(write_module):
    files = _api(
        """
        package api

        type Reader interface {
            Read(p []byte) (n int, err error)
        }

        type ReadCloser interface {
            Reader
            Close() (err error)
        }

        type Service interface {
            Reader
            ReadCloser
        }
        """
    )
    assert [f.name for f in _extract(write_module, files)] == ["Read", "Close"]


def test_extract_rejects_conflicting_duplicate_methods(write_module):
    from kitboiler.errors import DuplicateMethodError

    files = _api(
        """
        package api

        type X interface {
            Do() (err error)
        }

        type Y interface {
            Do(id int) (err error)
        }

        type Service interface {
            X
            Y
        }
        """
    )
    with pytest.raises(DuplicateMethodError, match="Do"):
        _extract(write_module, files)


@pytest.mark.parametrize(
    ("name", "error", "match"),
    [
        ("Config", "NotAnInterfaceError", "not an interface"),
        ("Nothing", "EmptyInterfaceError", "empty interface"),
        ("Missing", "TypeNotFoundError", "type Missing not found"),
        ("Generic", "InvalidSignatureError", "generic interfaces"),
    ],
)
def test_extract_declaration_errors(write_module, name, error, match):
    from kitboiler import errors

    files = _api(
        """
        package api

        type Config struct {
            Addr string
        }

        type Nothing interface{}

        type Generic[T any] interface {
            Get() (v T, err error)
        }
        """
    )
    with pytest.raises(getattr(errors, error), match=match):
        _extract(write_module, files, name)


@pytest.mark.parametrize(
    ("method", "match"),
    [
        ("Do(string) (err error)", "parameter 0 .string. has no name"),
        ("Do(id string) (string, error)", "result 0 .string. has no name"),
        ("Do(_ string) (err error)", "has no name"),
        ("Do(id string) (id int, err error)", "duplicate name 'id'"),
        ("Do(id string) (req int, err error)", "reserved"),
    ],
)
def test_extract_rejects_unusable_names(write_module, method, match):
    from kitboiler.errors import InvalidSignatureError

    files = _api(f"package api\n\ntype Service interface {{\n    {method}\n}}\n")
    with pytest.raises(InvalidSignatureError, match=match):
        _extract(write_module, files)


def test_extract_classifies_context_params(write_module):
    from kitboiler.symbols import ParamKind

    files = _api(
        """
        package api

        import "context"

        type Service interface {
            Ping(context.Context) (err error)
            Get(ctx context.Context, id string) (name string, err error)
        }
        """
    )
    ping, get = _extract(write_module, files)
    assert [(p.name, p.kind) for p in ping.params] == [("", ParamKind.CONTEXT)]
    assert [p.kind for p in get.params] == [ParamKind.CONTEXT, ParamKind.ORDINARY]


def test_extract_follows_type_aliases(write_module):
    files = {
        "api/api.go": """
            package api

            import "example.com/ex/store"

            type Service = store.Store
        """,
        "store/store.go": EMBED_FILES["store/store.go"],
    }
    assert [f.name for f in _extract(write_module, files)] == ["Get"]


def test_extract_reads_files_with_byte_order_mark(write_module):
    files = _api("\ufeffpackage api\n\ntype Service interface {\n    M(name string) (err error)\n}\n")
    assert [f.name for f in _extract(write_module, files)] == ["M"]
