"""
String utility functions for routegen.

Provides the identifier transformations used when naming route groups,
middleware hooks and package aliases.
"""

from __future__ import annotations

import keyword
import re

_NON_IDENT_RE = re.compile(r"[^0-9A-Za-z_]")
_NON_LABEL_RE = re.compile(r"[^0-9a-z]+")


def to_var_name(parts: list[str]) -> str:
    """
    Join name parts into a valid Python identifier.

    Parts are joined with ``__``; parameter markers (``:`` and ``*``) are
    dropped and any other character that cannot appear in an identifier is
    replaced by ``_``. A leading digit gets a ``_`` prefix and a
    Python keyword a ``_`` suffix.

    Examples:
        >>> to_var_name(["user-info"])
        'user_info'
        >>> to_var_name([":id"])
        'id'
        >>> to_var_name(["v1", "2fa"])
        'v1__2fa'
        >>> to_var_name(["2fa"])
        '_2fa'
        >>> to_var_name(["import"])
        'import_'
    """
    joined = "__".join(parts)
    joined = joined.replace(":", "").replace("*", "")
    name = _NON_IDENT_RE.sub("_", joined)
    if name and name[0].isdigit():
        name = "_" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


def to_label(text: str) -> str:
    """
    Normalize a path segment into a naming label.

    Lower-cases the text and collapses runs of non-alphanumeric characters
    into a single ``_``, trimming them at both ends.

    Examples:
        >>> to_label(":id")
        'id'
        >>> to_label("{user_id}")
        'user_id'
        >>> to_label("Order-Items")
        'order_items'
    """
    return _NON_LABEL_RE.sub("_", text.lower()).strip("_")


def to_middleware_name(text: str) -> str:
    """Lower-cased identifier form of a label, used as a hook name candidate."""
    return to_var_name([text]).lower()


def snake_case(name: str) -> str:
    """
    Convert PascalCase or camelCase to snake_case.

    Examples:
        >>> snake_case("GetUser")
        'get_user'
        >>> snake_case("listHTTPRoutes")
        'list_http_routes'
        >>> snake_case("Class")
        'class_'
    """
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return to_var_name([name.lower()])
