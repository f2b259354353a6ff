"""
routegen - FastAPI router generation with incremental merging.

Builds a route tree from a flat list of API methods, names its groups and
middleware hooks, and merges the generated code into a project that may
already contain hand-edited files.
"""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core.errors import (
    AlreadyRegisteredError,
    DuplicateRouteError,
    EmptyPathError,
    FileReadError,
    MalformedAnchorError,
    RegistryExhaustionError,
    RoutegenError,
)
from .core.ir import GeneratedFile, Method, ServiceSpec


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("routegen")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "AlreadyRegisteredError",
    "DuplicateRouteError",
    "EmptyPathError",
    "FileReadError",
    "GeneratedFile",
    "MalformedAnchorError",
    "Method",
    "RegistryExhaustionError",
    "RoutegenError",
    "ServiceSpec",
]
