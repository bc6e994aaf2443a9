"""Go front end: declarations and structured type expressions, parsed with tree-sitter."""

from __future__ import annotations

from .parser import parse_file, parse_type

__all__ = ["parse_file", "parse_type"]
