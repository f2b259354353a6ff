"""
Error types for route tree construction, naming, and file merging.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class RoutegenError(Exception):
    """Base exception for all routegen errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class EmptyPathError(RoutegenError):
    """
    Raised when a method is inserted with an empty HTTP path.
    """

    pass


class DuplicateRouteError(RoutegenError):
    """
    Raised when the same (path, verb) pair is inserted twice into one tree.
    """

    pass


class AlreadyRegisteredError(RoutegenError):
    """
    Raised when a router registration line is already present in the
    central registration file.

    This is the normal outcome of regenerating an unchanged project, so
    callers report it as a warning rather than aborting.
    """

    pass


class MalformedAnchorError(RoutegenError):
    """
    Raised when an existing file lacks the marker comment that new code
    must be inserted after.

    Examples:
    - ``# routegen:register v1`` removed from register.py
    - ``# routegen:imports v1`` renamed by a formatter
    """

    pass


class RegistryExhaustionError(RoutegenError):
    """
    Raised when no unused identifier can be derived from a candidate name.
    """

    pass


class TemplateRenderError(RoutegenError):
    """
    Raised when a template is missing or fails to render.
    """

    pass


class FileReadError(RoutegenError):
    """
    Raised when an existing project file cannot be read for merging.

    Examples:
    - register.py saved in a non-UTF-8 encoding
    - middleware.py not readable by the current user
    """

    pass


class ConfigError(RoutegenError):
    """
    Raised when routegen.toml or an API list cannot be loaded.

    Examples:
    - Malformed TOML or JSON
    - Unknown keys or wrong value types
    - Method without a name
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of the file an error refers to.

    Attributes:
        file: Path of the offending file
        line: Optional line number (1-indexed)
    """

    file: Path
    line: int | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "app/router/register.py:12"
        """
        if self.line is not None:
            return f"{self.file}:{self.line}"
        return str(self.file)


def make_anchor_error(message: str, file: Path | None = None) -> MalformedAnchorError:
    """
    Helper to create a MalformedAnchorError with optional file context.

    Args:
        message: Error description
        file: Optional path of the file being merged

    Returns:
        MalformedAnchorError with context if a file was given
    """
    if file is not None:
        return MalformedAnchorError(message, ErrorContext(file=file))
    return MalformedAnchorError(message)
