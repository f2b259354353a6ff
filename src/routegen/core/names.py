"""
Run-scoped identifier registries.

A NameRegistry records every identifier handed out during one generation
run, per naming scope. The UniqueNameAllocator derives collision-free names
from candidates against it. Both are created per run and passed down
explicitly; nothing here is module-global.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import RegistryExhaustionError

GROUP_SCOPE = "group"
HANDLER_SCOPE = "handler"
ALIAS_SCOPE = "alias"
HOOK_SCOPE = "hook"
REGISTER_SCOPE = "register"


class NameRegistry:
    """Sets of allocated identifiers, one per scope. Names are never released."""

    def __init__(self) -> None:
        self._scopes: dict[str, set[str]] = {}

    def __contains__(self, item: tuple[str, str]) -> bool:
        scope, name = item
        return name in self._scopes.get(scope, ())

    def register(self, scope: str, name: str) -> None:
        self._scopes.setdefault(scope, set()).add(name)

    def size(self, scope: str) -> int:
        return len(self._scopes.get(scope, ()))

    def names(self, scope: str) -> frozenset[str]:
        return frozenset(self._scopes.get(scope, ()))


class UniqueNameAllocator:
    """
    Hands out identifiers that were never used before in a scope.

    Example:
        allocator = UniqueNameAllocator(NameRegistry())
        allocator.allocate("group", "user")  # 'user'
        allocator.allocate("group", "user")  # 'user0'
        allocator.allocate("group", "user")  # 'user1'
    """

    def __init__(self, registry: NameRegistry | None = None):
        self.registry = registry if registry is not None else NameRegistry()

    def allocate(
        self,
        scope: str,
        candidate: str,
        *,
        reserve_in: Iterable[str] = (),
    ) -> str:
        """
        Allocate a name derived from ``candidate``.

        The candidate is returned unchanged when it is free; otherwise the
        integer suffixes 0, 1, 2, ... are tried in turn. An empty candidate
        always takes the numbered form.

        Args:
            scope: Registry scope the name must be unique in
            candidate: Preferred name
            reserve_in: Further scopes the name must also be free in; it is
                registered in all of them

        Returns:
            The allocated name

        Raises:
            RegistryExhaustionError: If no free name was found within
                registry size + 1 attempts
        """
        scopes = (scope, *reserve_in)
        if candidate and self._is_free(scopes, candidate):
            self._register(scopes, candidate)
            return candidate

        # Each registered name blocks at most one suffix, so one of the
        # first (total size + 1) suffixes is always free.
        attempts = sum(self.registry.size(s) for s in scopes) + 1
        for i in range(attempts):
            name = f"{candidate}{i}"
            if self._is_free(scopes, name):
                self._register(scopes, name)
                return name

        raise RegistryExhaustionError(
            f"no unique name available for '{candidate}' in scope '{scope}'"
        )

    def reserve(self, scope: str, names: Iterable[str]) -> None:
        """Mark ``names`` as taken in ``scope`` without allocating them."""
        for name in names:
            self.registry.register(scope, name)

    def _is_free(self, scopes: tuple[str, ...], name: str) -> bool:
        return all((s, name) not in self.registry for s in scopes)

    def _register(self, scopes: tuple[str, ...], name: str) -> None:
        for s in scopes:
            self.registry.register(s, name)
