"""End-to-end generation: reference, extraction, options, imports, rendering."""

from __future__ import annotations

import logging
from pathlib import Path

from .extract import extract
from .goast.nodes import Named
from .gotool import format_source, infer_imports
from .imports import resolve_imports
from .loader import SourceLoader
from .locate import Locator, default_locator
from .options import expand_options
from .reference import Inferrer, find_interface
from .render import Formatter, Service, render

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "endpoints"


def build_service(
    iface: str,
    *,
    package: str = DEFAULT_PACKAGE,
    src_dir: str | Path | None = None,
    locator: Locator | None = None,
    inferrer: Inferrer = infer_imports,
) -> Service:
    """Resolve iface and collect everything the template needs."""
    src_dir = Path(src_dir) if src_dir is not None else Path.cwd()
    ref = find_interface(iface, src_dir, inferrer=inferrer)
    logger.debug("generating %s for %s", package, ref)

    loader = SourceLoader(locator or default_locator(), src_dir)
    methods = [expand_options(m, loader) for m in extract(ref, loader)]

    pkg = loader.package(ref.path)
    iface_type = Named(ref.name, qualifier=pkg.name, path=pkg.path)
    return Service(
        package=package,
        iface=iface_type,
        methods=tuple(methods),
        imports=resolve_imports(iface_type, methods),
    )


def generate(
    iface: str,
    *,
    package: str = DEFAULT_PACKAGE,
    src_dir: str | Path | None = None,
    locator: Locator | None = None,
    formatter: Formatter | None = format_source,
    inferrer: Inferrer = infer_imports,
) -> str:
    """Generate go-kit endpoints, request/response types and HTTP handlers for iface.

    Pass `formatter=None` to skip gofmt.
    """
    service = build_service(iface, package=package, src_dir=src_dir, locator=locator, inferrer=inferrer)
    return render(service, formatter=formatter)
