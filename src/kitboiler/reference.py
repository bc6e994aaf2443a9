"""Parse the user-supplied interface reference into an import path and identifier."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import BadReferenceSyntaxError, GoSyntaxError, ToolError
from .goast import parse_file, parse_type
from .goast.nodes import Named
from .gotool import infer_imports
from .qualify import Scope

logger = logging.getLogger(__name__)

Inferrer = Callable[..., str]

# Name used for the synthesized file in error messages.
_HACK_FILE = "__go_impl__.go"


@dataclass(frozen=True)
class InterfaceRef:
    path: str
    name: str

    def __str__(self) -> str:
        return f"{self.path}.{self.name}"


def find_interface(iface: str, src_dir: Path, *, inferrer: Inferrer = infer_imports) -> InterfaceRef:
    """Return the import path and identifier of an interface.

    Given "http.ResponseWriter", the import path is inferred with goimports and
    the result is ("net/http", "ResponseWriter"). A fully qualified reference such
    as "net/http.ResponseWriter" is simply split.
    """
    if len(iface.split()) != 1:
        raise BadReferenceSyntaxError(f"couldn't parse interface: {iface}")

    slash = iface.rfind("/")
    if slash > -1:
        dot = iface.rfind(".")
        # reject net/http/
        if slash + 1 == len(iface):
            raise BadReferenceSyntaxError(f"interface name cannot end with a '/' character: {iface}")
        # reject net/http.
        if dot + 1 == len(iface):
            raise BadReferenceSyntaxError(f"interface name cannot end with a '.' character: {iface}")
        # reject net/http/httputil and net/http.Foo.Bar
        if iface[slash:].count(".") != 1:
            raise BadReferenceSyntaxError(f"invalid interface name: {iface}")
        return InterfaceRef(path=iface[:dot], name=iface[dot + 1 :])

    try:
        expr = parse_type(iface)
    except GoSyntaxError as e:
        raise BadReferenceSyntaxError(f"couldn't parse interface: {iface}") from e
    if not isinstance(expr, Named) or expr.qualifier is None or expr.args:
        raise BadReferenceSyntaxError(f"couldn't parse interface: {iface} (expected pkg.Name)")

    src = "package hack\n" + "var i " + iface + "\n"
    try:
        out = inferrer(src, src_dir=Path(src_dir))
    except ToolError as e:
        raise BadReferenceSyntaxError(f"couldn't parse interface: {iface}: {e}") from e

    try:
        f = parse_file(out, filename=_HACK_FILE)
    except GoSyntaxError as e:
        raise BadReferenceSyntaxError(f"couldn't parse interface: {iface}: {e}") from e
    if not f.imports:
        raise BadReferenceSyntaxError(f"unrecognized interface: {iface}")

    path = Scope(package=f.package, path="", imports=f.imports).lookup(expr.qualifier)
    if path is None:
        path = f.imports[0].path
    logger.debug("inferred %s as %s.%s", iface, path, expr.name)
    return InterfaceRef(path=path, name=expr.name)
