from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest


SERVICE_FILES = {
    "api/service.go": """
        package api

        import (
            "context"

            "example.com/svc/model"
            "example.com/svc/somepkg"
        )

        // MyService is the service kitboiler generates endpoints for.
        type MyService interface {
            MyFirstFunction(name string) (err error)
            MyFirstQuery() (results []*model.QueryResult, err error)
            MySecondQuery() (result *somepkg.FooBar, err error)
        }

        type impl struct{}

        func (impl) MyFirstFunction(name string) error { return nil }

        var _ = context.Background
    """,
    "model/model.go": """
        package model

        type QueryResult struct {
            ID   int
            Name string
        }
    """,
    "somepkg/foobar.go": """
        package somepkg

        type FooBar struct{}
    """,
}


@pytest.fixture(autouse=True)
def _isolate_go_env(monkeypatch, tmp_path):
    # Keep package lookups inside the test's own module tree.
    monkeypatch.setenv("KITBOILER_LOCATOR", "module")
    monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))
    monkeypatch.delenv("GOROOT", raising=False)


@pytest.fixture
def write_module(tmp_path):
    def _write(module: str, files: dict[str, str], *, root: Path | None = None) -> Path:
        root = root or tmp_path / module.replace("/", "_")
        root.mkdir(parents=True, exist_ok=True)
        (root / "go.mod").write_text(f"module {module}\n\ngo 1.22\n", encoding="utf-8")
        for rel, src in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(dedent(src).lstrip(), encoding="utf-8")
        return root

    return _write


@pytest.fixture
def svc_module(write_module) -> Path:
    return write_module("example.com/svc", SERVICE_FILES)


@pytest.fixture
def loader(svc_module):
    from kitboiler.loader import SourceLoader
    from kitboiler.locate import ModuleLocator

    return SourceLoader(ModuleLocator(), svc_module)
