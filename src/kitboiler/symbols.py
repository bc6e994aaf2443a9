"""Method, parameter and option-setter records shared by extraction and rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .goast.nodes import LocalNames, Named, TypeExpr
from .qualify import Scope


class ParamKind(Enum):
    ORDINARY = auto()
    OPTIONS = auto()  # `opts ...FooOptionsSetter`, expanded into per-field setters
    ERROR = auto()  # a result of type `error`
    CONTEXT = auto()  # a `context.Context` parameter, fed from the endpoint's ctx


@dataclass(frozen=True)
class Param:
    name: str
    type: TypeExpr
    kind: ParamKind = ParamKind.ORDINARY
    # For OPTIONS params: the options struct the setters configure.
    options: Named | None = None

    @property
    def type_text(self) -> str:
        return self.type.render()


@dataclass(frozen=True)
class OptionSetter:
    param: str  # name of the options param on the request struct
    field: str
    field_type: TypeExpr
    options_type: Named

    def render(self, local_names: LocalNames | None = None) -> str:
        t = self.options_type.render(local_names)
        ft = self.field_type.render(local_names)
        return (
            f"func(v {ft}) func(*{t}) {{ return func(opts *{t}) {{ opts.{self.field} = v }} }}"
            f"(req.{self.param}.{self.field})"
        )


@dataclass(frozen=True)
class MethodSignature:
    name: str
    params: tuple[Param, ...] = ()
    results: tuple[Param, ...] = ()
    option_setters: tuple[OptionSetter, ...] = ()
    # Declaring interface ("pkg.Iface") and the scope its types were written in.
    origin: str = ""
    scope: Scope | None = field(default=None, compare=False)

    def same_signature(self, other: MethodSignature) -> bool:
        return self.name == other.name and self.params == other.params and self.results == other.results
