"""
Route path tokenizing.

Paths are split on ``/`` into segments; each tree node stores its segment
with the leading separator restored (``user`` -> ``/user``).
"""

from __future__ import annotations

import re

SEPARATOR = "/"

_PARAM_RE = re.compile(r"^:(?P<name>\w+)$")
_CATCH_ALL_RE = re.compile(r"^\*(?P<name>\w+)$")


def normalize_path(path: str) -> str:
    """Ensure a route path starts with the separator."""
    if not path.startswith(SEPARATOR):
        return SEPARATOR + path
    return path


def split_path(path: str) -> list[str]:
    """
    Split a route path into segments.

    One leading empty component is dropped, everything else is kept, so a
    trailing slash yields a trailing empty segment.

    Examples:
        >>> split_path("/api/user/:id")
        ['api', 'user', ':id']
        >>> split_path("/")
        ['']
        >>> split_path("/api/")
        ['api', '']
    """
    parts = path.split(SEPARATOR)
    if parts[0] == "":
        parts = parts[1:]
    return parts


def segment_path(segment: str) -> str:
    """Node path for a bare segment."""
    return SEPARATOR + segment


def shared_prefix_length(a: list[str], b: list[str]) -> int:
    """Number of leading segments two segment chains have in common."""
    count = 0
    for left, right in zip(a, b):
        if left != right:
            break
        count += 1
    return count


def strip_non_alnum_prefix(text: str) -> str:
    """
    Drop leading characters that are neither letters nor digits.

    Examples:
        >>> strip_non_alnum_prefix("/:id")
        'id'
        >>> strip_non_alnum_prefix("/")
        '/'
    """
    for i, char in enumerate(text):
        if char.isalnum():
            return text[i:]
    return text


def to_route_path(segment_or_path: str) -> str:
    """
    Rewrite ``:name`` and ``*name`` parameters into FastAPI path syntax.

    Examples:
        >>> to_route_path("/:id")
        '/{id}'
        >>> to_route_path("/static/*filepath")
        '/static/{filepath:path}'
    """
    converted = []
    for part in segment_or_path.split(SEPARATOR):
        if match := _PARAM_RE.match(part):
            part = "{" + match.group("name") + "}"
        elif match := _CATCH_ALL_RE.match(part):
            part = "{" + match.group("name") + ":path}"
        converted.append(part)
    return SEPARATOR.join(converted)
