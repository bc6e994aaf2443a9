"""Render a Service into go-kit endpoint boilerplate."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

from .errors import GenerationError, ToolError
from .goast.nodes import Named, Slice, TypeExpr, Variadic
from .gotool import format_source
from .imports import ImportSet
from .symbols import MethodSignature, Param, ParamKind

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "endpoints.go.j2"

Formatter = Callable[[str], str]


@dataclass(frozen=True)
class Service:
    """Everything one generated file is made from."""

    package: str
    iface: Named
    methods: tuple[MethodSignature, ...]
    imports: ImportSet


@jinja2.pass_context
def go_type(ctx: Any, t: TypeExpr) -> str:
    return t.render(ctx["local_names"])


@jinja2.pass_context
def field_type(ctx: Any, p: Param) -> str:
    """Request field type: the options struct for an options param, else the param type."""
    if p.kind is ParamKind.OPTIONS and p.options is not None:
        return p.options.render(ctx["local_names"])
    if isinstance(p.type, Variadic):
        return Slice(p.type.elem).render(ctx["local_names"])
    return p.type.render(ctx["local_names"])


@jinja2.pass_context
def call_args(ctx: Any, fn: MethodSignature) -> str:
    """Arguments for the service call: request fields, then the option setters."""
    args: list[str] = []
    for p in fn.params:
        if p.kind is ParamKind.CONTEXT:
            args.append("ctx")
        elif p.kind is ParamKind.ORDINARY:
            args.append(f"req.{p.name}..." if isinstance(p.type, Variadic) else f"req.{p.name}")
    args.extend(s.render(ctx["local_names"]) for s in fn.option_setters)
    return ", ".join(args)


def filter_error(params: Iterable[Param]) -> list[Param]:
    return [p for p in params if p.kind is not ParamKind.ERROR]


def request_fields(params: Iterable[Param]) -> list[Param]:
    return [p for p in params if p.kind is not ParamKind.CONTEXT]


def error_result(fn: MethodSignature) -> Param | None:
    """The result forwarded as the endpoint's error: the last `error` result."""
    errs = [p for p in fn.results if p.kind is ParamKind.ERROR]
    return errs[-1] if errs else None


def error_name(fn: MethodSignature) -> str:
    p = error_result(fn)
    return p.name if p is not None else "nil"


def join_params(fn: MethodSignature) -> str:
    # Errors other than the forwarded one are discarded so every variable is used.
    forwarded = error_result(fn)
    names = []
    for p in fn.results:
        if p.kind is ParamKind.ERROR and p is not forwarded:
            names.append("_")
        else:
            names.append(p.name)
    return ", ".join(names)


def takes_params(fn: MethodSignature) -> bool:
    return any(p.kind in {ParamKind.ORDINARY, ParamKind.OPTIONS} for p in fn.params)


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
        autoescape=False,
    )
    env.filters.update(
        {
            "go_type": go_type,
            "field_type": field_type,
            "call_args": call_args,
            "filter_error": filter_error,
            "request_fields": request_fields,
            "error_name": error_name,
            "join_params": join_params,
        }
    )
    env.tests["takes_params"] = takes_params
    return env


_ENV = _environment()


def render(service: Service, *, formatter: Formatter | None = format_source) -> str:
    """Render service to Go source.

    Formatting is best effort: if the formatter fails the unformatted source is
    returned.
    """
    try:
        template = _ENV.get_template(TEMPLATE_NAME)
        raw = template.render(service=service, local_names=service.imports.local_names())
    except jinja2.TemplateError as e:
        raise GenerationError(f"failed to render {TEMPLATE_NAME}: {e}") from e

    if formatter is None:
        return raw
    try:
        return formatter(raw)
    except ToolError as e:
        logger.warning("formatting failed, emitting unformatted source: %s", e)
        return raw
