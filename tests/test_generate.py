from __future__ import annotations

from pathlib import Path

import pytest


def _fake_goimports(path: str):
    calls: list[tuple[str, Path]] = []

    def infer(src: str, *, src_dir: Path) -> str:
        calls.append((src, src_dir))
        return f'package hack\n\nimport "{path}"\n\n' + src.split("\n", 1)[1]

    return infer, calls


def test_generate_from_qualified_reference(svc_module: Path):
    from kitboiler import generate
    from kitboiler.locate import ModuleLocator

    out = generate(
        "example.com/svc/api.MyService",
        package="svcendpoints",
        src_dir=svc_module,
        locator=ModuleLocator(),
        formatter=None,
    )
    assert "package svcendpoints\n" in out
    for name in ("MyFirstFunction", "MyFirstQuery", "MySecondQuery"):
        assert f"func {name}EndPoint(svc api.MyService) endpoint.Endpoint {{" in out
        assert f"func {name}HTTPJSONHandler(e endpoint.Endpoint) http.Handler {{" in out
        assert f"func Decode{name}Request(" in out
    assert out.index("MyFirstFunctionRequest") < out.index("MyFirstQueryRequest") < out.index("MySecondQueryRequest")


def test_generate_infers_import_path_of_short_reference(svc_module: Path):
    from kitboiler import generate

    infer, calls = _fake_goimports("example.com/svc/api")
    # No locator given: the module locator is picked from KITBOILER_LOCATOR.
    out = generate("api.MyService", src_dir=svc_module, formatter=None, inferrer=infer)

    assert calls == [("package hack\nvar i api.MyService\n", svc_module)]
    assert "package endpoints\n" in out
    assert '"example.com/svc/api"' in out


def test_generate_from_relative_reference(svc_module: Path):
    from kitboiler.generate import build_service
    from kitboiler.locate import ModuleLocator

    service = build_service("./api.MyService", src_dir=svc_module, locator=ModuleLocator())
    assert service.iface.path == "example.com/svc/api"
    assert service.iface.render() == "api.MyService"
    assert [m.name for m in service.methods] == ["MyFirstFunction", "MyFirstQuery", "MySecondQuery"]


@pytest.mark.parametrize(
    ("iface", "error"),
    [
        ("net/http/", "BadReferenceSyntaxError"),
        ("example.com/svc/nope.Service", "PackageNotFoundError"),
        ("example.com/svc/api.Missing", "TypeNotFoundError"),
        ("example.com/svc/model.QueryResult", "NotAnInterfaceError"),
    ],
)
def test_generate_errors(svc_module: Path, iface: str, error: str):
    from kitboiler import errors, generate
    from kitboiler.locate import ModuleLocator

    with pytest.raises(getattr(errors, error)):
        generate(iface, src_dir=svc_module, locator=ModuleLocator(), formatter=None)


def test_generate_ignores_undecodable_sibling_files(svc_module: Path):
    from kitboiler import generate
    from kitboiler.locate import ModuleLocator

    (svc_module / "api" / "latin1.go").write_bytes(b"package api\n\n// caf\xe9\n")
    out = generate("example.com/svc/api.MyService", src_dir=svc_module, locator=ModuleLocator(), formatter=None)
    assert "func MyFirstFunctionEndPoint(svc api.MyService) endpoint.Endpoint {" in out
