"""Expand `opts ...FooOptionsSetter` parameters into one setter call per FooOptions field."""

from __future__ import annotations

import logging
from dataclasses import replace

from .errors import PackageNotFoundError, UnsupportedOptionsFieldError
from .extract import options_struct
from .goast.nodes import Named, Struct
from .loader import SourceLoader
from .qualify import Scope, default_package_name, qualify
from .symbols import MethodSignature, OptionSetter, Param, ParamKind

logger = logging.getLogger(__name__)


def expand_options(method: MethodSignature, loader: SourceLoader) -> MethodSignature:
    """Return method with its options params resolved and their setters attached.

    Setters follow the ordinary arguments in the generated call, in param order
    and then struct-field order.
    """
    params: list[Param] = []
    setters: list[OptionSetter] = []
    for p in method.params:
        if p.kind is not ParamKind.OPTIONS:
            params.append(p)
            continue
        opts_type = _resolve(p, method, loader)
        params.append(replace(p, options=opts_type))
        setters.extend(_setters(p, opts_type, loader))
    return replace(method, params=tuple(params), option_setters=tuple(setters))


def _resolve(p: Param, method: MethodSignature, loader: SourceLoader) -> Named:
    opts_type = options_struct(p.type)
    if opts_type is None:
        raise UnsupportedOptionsFieldError(f"{method.origin}.{method.name}: {p.type_text} is not an options setter")
    if opts_type.path is not None:
        return opts_type

    scope = method.scope
    if scope is None:
        raise PackageNotFoundError(f"{method.origin}.{method.name}: can't resolve options type {opts_type.render()}")
    if opts_type.qualifier is None:
        return replace(opts_type, qualifier=scope.package, path=scope.path)

    # The file didn't import the qualifier; fall back to the package's other imports.
    for ip in loader.package(scope.path).info.imports:
        if default_package_name(ip) == opts_type.qualifier or ip.endswith("/" + opts_type.qualifier):
            logger.debug("resolved options qualifier %s to %s", opts_type.qualifier, ip)
            return replace(opts_type, path=ip)
    raise PackageNotFoundError(
        f"{method.origin}.{method.name}: package {opts_type.qualifier} of {opts_type.render()} is not imported"
    )


def _setters(p: Param, opts_type: Named, loader: SourceLoader) -> list[OptionSetter]:
    if opts_type.path is None:
        raise PackageNotFoundError(f"can't resolve the package of options type {opts_type.render()}")
    pkg, f, spec = loader.type_spec(opts_type.path, opts_type.name)
    if not isinstance(spec.type, Struct):
        raise UnsupportedOptionsFieldError(f"{opts_type.render()} is not a struct type")

    scope = Scope(package=pkg.name, path=pkg.path, imports=f.imports)
    out: list[OptionSetter] = []
    for field in spec.type.fields:
        if field.embedded:
            raise UnsupportedOptionsFieldError(
                f"{opts_type.render()}: embedded field {field.type.render()} cannot be set by an option"
            )
        field_type = qualify(field.type, scope)
        for name in field.names:
            out.append(OptionSetter(param=p.name, field=name, field_type=field_type, options_type=opts_type))
    return out
