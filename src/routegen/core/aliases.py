"""
Handler package aliasing.

Every distinct handler module referenced by a router is imported under a
short alias. Aliases are memoized by the exact package path, so two packages
that share a basename (``app.v1.user`` and ``app.v2.user``) still get two
different aliases.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .names import ALIAS_SCOPE, UniqueNameAllocator
from .strings import to_var_name

logger = logging.getLogger(__name__)


def package_basename(package_path: str) -> str:
    """
    Last component of a dotted or slash separated package path.

    Examples:
        >>> package_basename("app.handler.user")
        'user'
        >>> package_basename("app/handler/user")
        'user'
    """
    normalized = package_path.replace("/", ".").strip(".")
    return normalized.rsplit(".", 1)[-1]


class HandlerAliasBinder:
    """
    Resolves handler package paths to unique import aliases for one run.

    Args:
        allocator: Run-scoped allocator
        reserved: Names the importing module binds itself; no alias may
            shadow them
    """

    def __init__(self, allocator: UniqueNameAllocator, reserved: Iterable[str] = ()):
        self.allocator = allocator
        self.allocator.reserve(ALIAS_SCOPE, reserved)
        self._table: dict[str, str] = {}

    @property
    def aliases(self) -> Mapping[str, str]:
        """Read-only view of the package path -> alias table."""
        return MappingProxyType(self._table)

    def resolve(self, package_path: str) -> str:
        """
        Return the alias for ``package_path``, allocating one on first use.

        Args:
            package_path: Import path of the handler module

        Returns:
            The alias, stable for the rest of the run
        """
        alias = self._table.get(package_path)
        if alias is not None:
            return alias

        candidate = to_var_name([package_basename(package_path)])
        alias = self.allocator.allocate(ALIAS_SCOPE, candidate)
        self._table[package_path] = alias
        logger.debug("Bound handler package %s to alias %s", package_path, alias)
        return alias
