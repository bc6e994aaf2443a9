"""Domain-specific errors for kitboiler."""

from __future__ import annotations


class KitBoilerError(Exception):
    """Base error for kitboiler."""


class BadReferenceSyntaxError(KitBoilerError):
    """Raised when an interface reference string cannot be parsed."""


class PackageNotFoundError(KitBoilerError):
    """Raised when an import path cannot be resolved to a package directory."""


class TypeNotFoundError(KitBoilerError):
    """Raised when a package does not declare the requested type."""


class NotAnInterfaceError(KitBoilerError):
    """Raised when the requested type is declared but is not an interface."""


class EmptyInterfaceError(KitBoilerError):
    """Raised when the requested interface declares no methods."""


class UnsupportedOptionsFieldError(KitBoilerError):
    """Raised when an options struct cannot be expanded into setters."""


class InvalidSignatureError(KitBoilerError):
    """Raised when a method signature cannot be turned into request/response types."""


class EmbedCycleError(KitBoilerError):
    """Raised when embedded interfaces refer back to an interface being expanded."""


class DuplicateMethodError(KitBoilerError):
    """Raised when two embedded interfaces contribute conflicting methods."""


class GoSyntaxError(KitBoilerError):
    """Raised when Go source is not valid UTF-8 or does not parse."""

    def __init__(self, msg: str, *, filename: str | None = None, line: int | None = None):
        self.filename = filename
        self.line = line
        where = ""
        if filename is not None:
            where = f"{filename}:{line}: " if line is not None else f"{filename}: "
        elif line is not None:
            where = f"line {line}: "
        super().__init__(f"{where}{msg}")


class GenerationError(KitBoilerError):
    """Raised when the code template fails to render."""


class ToolError(KitBoilerError):
    """Raised when an external Go tool is missing or exits with an error."""


class ConfigError(KitBoilerError):
    """Raised when a configuration value (environment or flag) is not recognized."""
