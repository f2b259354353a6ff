"""
Jinja2 templating for generated router code.

Sets up the Jinja2 environment with the route filters and loads templates
from a per-project override directory first, then from the templates
shipped in this package.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
)

from routegen.core.errors import TemplateRenderError
from routegen.core.ir import ANY_VERB
from routegen.core.merge import MIDDLEWARE_SINGLE_TEMPLATE
from routegen.core.paths import to_route_path
from routegen.core.tree import NodeKind

logger = logging.getLogger(__name__)

# Template directory
TEMPLATES_DIR = Path(__file__).parent

ROUTER_TEMPLATE = "router.py.j2"
REGISTER_TEMPLATE = "register.py.j2"
MIDDLEWARE_TEMPLATE = "middleware.py.j2"
PACKAGE_INIT_TEMPLATE = "package_init.py.j2"

TEMPLATE_NAMES = (
    ROUTER_TEMPLATE,
    REGISTER_TEMPLATE,
    MIDDLEWARE_TEMPLATE,
    MIDDLEWARE_SINGLE_TEMPLATE,
    PACKAGE_INIT_TEMPLATE,
)

# Module-level names each template binds itself; aliases must avoid them
ROUTER_BOUND_NAMES = ("APIRouter", "FastAPI", "app", "middleware", "register", "root")
REGISTER_BOUND_NAMES = ("FastAPI", "app", "register")

# Methods FastAPI registers for an ANY route
ANY_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


def _route_path_filter(segment: str) -> str:
    """Node segment as a FastAPI route path."""
    return to_route_path(segment)


def _route_prefix_filter(segment: str) -> str:
    """Node segment as an ``APIRouter`` prefix; FastAPI rejects a bare ``/``."""
    if segment == "/":
        return ""
    return to_route_path(segment)


def _route_methods_filter(verb: str) -> str:
    """Python list literal of the methods a route answers."""
    methods = ANY_METHODS if verb == ANY_VERB else (verb,)
    return "[" + ", ".join(f'"{m}"' for m in methods) + "]"


class TemplateRenderer:
    """
    Renders the named router templates.

    Args:
        template_dir: Optional directory whose templates override the
            packaged ones by file name
        disabled: Template names that must not produce files
    """

    def __init__(self, template_dir: Path | None = None, disabled: Iterable[str] = ()):
        loaders = []
        if template_dir is not None:
            loaders.append(FileSystemLoader(str(template_dir)))
        loaders.append(FileSystemLoader(str(TEMPLATES_DIR)))

        self.template_dir = template_dir
        self.disabled = frozenset(disabled)
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["route_path"] = _route_path_filter
        self.env.filters["route_prefix"] = _route_prefix_filter
        self.env.filters["route_methods"] = _route_methods_filter
        self.env.globals["NodeKind"] = NodeKind

    def is_enabled(self, template_name: str) -> bool:
        return template_name not in self.disabled

    def render(self, template_name: str, data: Mapping[str, Any]) -> str:
        """
        Render ``template_name`` with ``data``.

        Raises:
            TemplateRenderError: If the template is missing or fails to render
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**data)
        except TemplateNotFound as e:
            raise TemplateRenderError(f"tpl {e.name} not found") from e
        except TemplateError as e:
            raise TemplateRenderError(
                f"execute template \"{template_name}\" failed, {e}"
            ) from e
