"""
Incremental merging of generated fragments into existing files.

Files that users may edit (register.py, middleware.py) are never
regenerated wholesale. Instead new fragments are spliced in after fixed,
versioned marker comments:

    # routegen:imports v1     new ``import <package> as <alias>`` lines go here
    # routegen:register v1    new ``<alias>.register(app)`` lines go here

Middleware stubs have no anchor; they are appended to the end of the file.

Every merge is computed on the file text in memory and is idempotent:
merging the same fragment into its own output changes nothing (or, for
registrations, raises AlreadyRegisteredError).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import AlreadyRegisteredError, make_anchor_error
from .tree import NodeKind, RouteNode

if TYPE_CHECKING:
    from routegen.templates import TemplateRenderer

logger = logging.getLogger(__name__)

ANCHOR_VERSION = 1
IMPORT_ANCHOR = f"# routegen:imports v{ANCHOR_VERSION}"
REGISTER_ANCHOR = f"# routegen:register v{ANCHOR_VERSION}"

MIDDLEWARE_SINGLE_TEMPLATE = "middleware_single.py.j2"

_IMPORT_ANCHOR_RE = re.compile(
    rf"^(?P<indent>[ \t]*){re.escape(IMPORT_ANCHOR)}[ \t]*(?:\n|\Z)", re.MULTILINE
)
_REGISTER_ANCHOR_RE = re.compile(
    rf"^(?P<indent>[ \t]*){re.escape(REGISTER_ANCHOR)}[ \t]*(?:\n|\Z)", re.MULTILINE
)
_IMPORT_AS_RE = re.compile(
    r"^[ \t]*import[ \t]+(?P<package>[\w.]+)[ \t]+as[ \t]+(?P<alias>\w+)",
    re.MULTILINE,
)
_REGISTRATION_RE = re.compile(r"^[ \t]*(?P<alias>\w+)\.register\(app\)", re.MULTILINE)


def import_line(alias: str, package: str) -> str:
    return f"import {package} as {alias}"


def registration_line(alias: str) -> str:
    return f"{alias}.register(app)"


def imported_routers(content: str) -> dict[str, str]:
    """``package -> alias`` for every ``import <package> as <alias>`` line."""
    return {m.group("package"): m.group("alias") for m in _IMPORT_AS_RE.finditer(content)}


def bound_aliases(content: str) -> set[str]:
    """Aliases a registration file already imports or registers."""
    names = set(imported_routers(content).values())
    names.update(m.group("alias") for m in _REGISTRATION_RE.finditer(content))
    return names


def middleware_hook_name(middleware: str) -> str:
    """Function name emitted for a middleware hook."""
    return f"{middleware}_mw"


def collect_middleware(root: RouteNode) -> list[str]:
    """
    Hook names a tree needs, in tree order without duplicates.

    Group and leaf nodes own a router and contribute its group hook; leaf and
    unified nodes own a route and contribute its handler hook.
    """
    names: list[str] = []
    for _, node in root.walk():
        if node.kind is not NodeKind.UNIFIED and node.group_middleware:
            names.append(node.group_middleware)
        if node.kind is not NodeKind.GROUP and node.handler_middleware:
            names.append(node.handler_middleware)
    return list(dict.fromkeys(names))


class IncrementalMerger:
    """
    Splices imports, registration lines and middleware stubs into file text.

    Args:
        renderer: Templating collaborator used to render middleware stubs
    """

    def __init__(self, renderer: TemplateRenderer):
        self.renderer = renderer

    def merge_import(
        self, content: str, alias: str, package: str, path: Path | None = None
    ) -> str:
        """
        Add ``import <package> as <alias>`` after the import anchor.

        Content that already mentions ``package`` is returned unchanged.

        Raises:
            MalformedAnchorError: If the import anchor is missing
        """
        if re.search(rf"(?<![\w.]){re.escape(package)}(?![\w.])", content):
            logger.debug("Import of %s already present", package)
            return content
        return _splice_after_anchor(
            content, _IMPORT_ANCHOR_RE, import_line(alias, package), IMPORT_ANCHOR, path
        )

    def merge_registration(self, content: str, alias: str, path: Path | None = None) -> str:
        """
        Add ``<alias>.register(app)`` after the register anchor.

        Raises:
            AlreadyRegisteredError: If the exact line is already present
            MalformedAnchorError: If the register anchor is missing
        """
        line = registration_line(alias)
        if re.search(rf"^[ \t]*{re.escape(line)}[ \t]*$", content, re.MULTILINE):
            raise AlreadyRegisteredError(f"the router ({line}) has been registered")
        return _splice_after_anchor(content, _REGISTER_ANCHOR_RE, line, REGISTER_ANCHOR, path)

    def merge_router(
        self, content: str, alias: str, package: str, path: Path | None = None
    ) -> str:
        """
        Import and register the router module ``package`` under ``alias``.

        A router counts as registered once its module is imported, whatever
        alias it was imported under.

        Raises:
            AlreadyRegisteredError: If ``package`` is already imported, or
                the registration line is already present
            MalformedAnchorError: If either anchor is missing
        """
        existing = imported_routers(content).get(package)
        if existing is not None:
            raise AlreadyRegisteredError(
                f"the router ({registration_line(existing)}) has been registered"
            )
        merged = _splice_after_anchor(
            content, _IMPORT_ANCHOR_RE, import_line(alias, package), IMPORT_ANCHOR, path
        )
        return self.merge_registration(merged, alias, path=path)

    def merge_middleware(self, content: str, names: Iterable[str]) -> str:
        """Append a stub for every hook in ``names`` not yet defined in ``content``."""
        for name in names:
            if f"def {middleware_hook_name(name)}(" in content:
                continue
            stub = self.renderer.render(MIDDLEWARE_SINGLE_TEMPLATE, {"middleware_name": name})
            if content and not content.endswith("\n"):
                content += "\n"
            content += stub
            logger.debug("Appended middleware hook %s", middleware_hook_name(name))
        return content


def _splice_after_anchor(
    content: str,
    pattern: re.Pattern[str],
    line: str,
    anchor: str,
    path: Path | None,
) -> str:
    match = pattern.search(content)
    if match is None:
        raise make_anchor_error(f"insert-point '{anchor}' not found", path)

    head = content[: match.end()]
    if not head.endswith("\n"):
        head += "\n"
    return f"{head}{match.group('indent')}{line}\n{content[match.end():]}"
