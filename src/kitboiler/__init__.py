"""kitboiler: generate go-kit endpoint boilerplate from a Go service interface."""

from __future__ import annotations

from . import errors
from .generate import build_service, generate
from .reference import InterfaceRef, find_interface

__all__ = [
    "InterfaceRef",
    "build_service",
    "errors",
    "find_interface",
    "generate",
]
