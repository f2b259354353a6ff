"""
Scope naming for route trees.

After all methods are inserted, ScopeNamer walks the tree once, depth-first
and pre-order, and gives every node:

- ``middleware``: the variable its ``APIRouter`` is bound to, which is also
  the ``group_name`` its children register on
- ``group_middleware`` / ``handler_middleware``: the hook functions emitted
  into middleware.py
- ``path_prefix``: the ancestor-qualified label, e.g. ``_api_user``

All names go through the run's UniqueNameAllocator, so they stay unique
across every tree named in the same run.
"""

from __future__ import annotations

import logging

from .names import GROUP_SCOPE, HANDLER_SCOPE, HOOK_SCOPE, UniqueNameAllocator
from .strings import snake_case, to_label, to_middleware_name
from .tree import RouteNode

logger = logging.getLogger(__name__)


class ScopeNamer:
    """
    Assigns group and hook names to a completed route tree.

    Args:
        allocator: Run-scoped allocator
        snake_style: Derive hook names from the accumulated path prefix and
            the snake-cased handler name instead of the short unique labels
    """

    def __init__(self, allocator: UniqueNameAllocator, snake_style: bool = False):
        self.allocator = allocator
        self.snake_style = snake_style

    def dye(self, root: RouteNode) -> None:
        """Name every node below ``root``. Already-named nodes keep their names."""
        for _, node in root.walk():
            if node.parent is None:
                continue
            node.group_name = node.parent.middleware
            if node.middleware:
                continue
            self._name_node(node)
            logger.debug(
                "Named %s: group=%s handler=%s prefix=%s",
                node.full_path,
                node.group_middleware,
                node.handler_middleware,
                node.path_prefix,
            )

    def _name_node(self, node: RouteNode) -> None:
        assert node.parent is not None
        label = node.path
        if len(label) > 1 and label.startswith("/"):
            label = label[1:]
        node.path_prefix = f"{node.parent.path_prefix}_{to_label(label)}"

        if node.handler is not None and not node.children:
            # Route without children: group and handler share one hook
            name = self.allocator.allocate(
                GROUP_SCOPE,
                to_middleware_name(node.raw_handler_name),
                reserve_in=(HANDLER_SCOPE,),
            )
            node.middleware = f"_{name}"
            node.handler_middleware = node.middleware
        else:
            group = self.allocator.allocate(
                GROUP_SCOPE, to_middleware_name(label), reserve_in=(HANDLER_SCOPE,)
            )
            node.middleware = f"_{group}"
            if node.handler is not None:
                handler = self.allocator.allocate(
                    HANDLER_SCOPE,
                    to_middleware_name(node.raw_handler_name),
                    reserve_in=(GROUP_SCOPE,),
                )
                node.handler_middleware = f"_{handler}"
        node.group_middleware = node.middleware

        if self.snake_style:
            self._apply_snake_style(node)

    def _apply_snake_style(self, node: RouteNode) -> None:
        if node.children:
            node.group_middleware = self.allocator.allocate(HOOK_SCOPE, node.path_prefix)
        if node.handler is not None:
            node.handler_middleware = self.allocator.allocate(
                HOOK_SCOPE, f"_{snake_case(node.raw_handler_name)}"
            )
        if not node.children:
            node.group_middleware = node.handler_middleware
