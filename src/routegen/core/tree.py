"""
Route tree construction.

The route tree is a trie of path segments. Methods are inserted one at a
time; each insertion reuses the longest chain of existing group nodes that
matches its path and appends only the trailing segments. The deepest new node
is the leaf carrying the verb and handler reference.

Example:
    tree = RouteTree(binder, default_handler_package="app.handler.user")
    tree.insert(Method(name="GetUser", path="/api/user/:id", verb="GET"))
    tree.insert(Method(name="CreateUser", path="/api/user", verb="POST"))

    # /
    # └── /api
    #     ├── /user
    #     │   └── /:id        GET  user.GetUser
    #     └── /user           POST user.CreateUser
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from .aliases import HandlerAliasBinder
from .errors import DuplicateRouteError, EmptyPathError
from .ir import HandlerReference, Method, canonical_verb
from .paths import normalize_path, segment_path, split_path, strip_non_alnum_prefix

logger = logging.getLogger(__name__)

ROOT_NAME = "root"


class NodeKind(str, Enum):
    """What a route node emits."""

    GROUP = "group"  # Router only
    LEAF = "leaf"  # Route plus a router for its children
    UNIFIED = "unified"  # Route without children; one shared hook


@dataclass(eq=False)
class RouteNode:
    """
    One path segment in the route tree.

    Nodes compare by identity: two nodes with the same segment text under
    different parents are different nodes. ``parent`` is a non-owning
    back-reference used for reading only.
    """

    path: str
    http_verb: str = ""
    handler: HandlerReference | None = None
    parent: RouteNode | None = field(default=None, repr=False)
    children: list[RouteNode] = field(default_factory=list, repr=False)

    # Filled in by ScopeNamer
    group_name: str = ""
    middleware: str = ""
    group_middleware: str = ""
    handler_middleware: str = ""
    path_prefix: str = ""

    @property
    def is_leaf(self) -> bool:
        return bool(self.http_verb)

    @property
    def kind(self) -> NodeKind:
        if not self.http_verb:
            return NodeKind.GROUP
        if self.children:
            return NodeKind.LEAF
        return NodeKind.UNIFIED

    @property
    def raw_handler_name(self) -> str:
        """Bare handler identifier: the last component of ``alias.name``."""
        if self.handler is None:
            return ""
        return self.handler.qualified.rsplit(".", 1)[-1]

    @property
    def full_path(self) -> str:
        parts = []
        node: RouteNode | None = self
        while node is not None and node.parent is not None:
            parts.append(node.path)
            node = node.parent
        return "".join(reversed(parts)) or "/"

    def walk(self, depth: int = 0) -> Iterator[tuple[int, RouteNode]]:
        """Yield ``(depth, node)`` for this node and its descendants, pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)

    def sort_children(self) -> None:
        self.children.sort(key=sort_key)


def sort_key(node: RouteNode) -> tuple[bool, str, str, str]:
    """
    Sibling order: groups before verb-carrying nodes, then the segment with
    leading non-alphanumerics stripped (``/:id`` sorts as ``id``), then the
    verb, then the raw segment.
    """
    return (node.is_leaf, strip_non_alnum_prefix(node.path), node.http_verb, node.path)


class RouteTree:
    """
    Trie of route segments for one service.

    Args:
        binder: Run-scoped handler alias binder
        default_handler_package: Module that handles methods without an
            explicit handler package
        sort_router: Keep children sorted after every insertion, and only
            share group nodes between paths
    """

    def __init__(
        self,
        binder: HandlerAliasBinder,
        default_handler_package: str,
        sort_router: bool = True,
    ):
        self.binder = binder
        self.default_handler_package = default_handler_package
        self.sort_router = sort_router
        self.root = RouteNode(
            path="/",
            group_name=ROOT_NAME,
            middleware=ROOT_NAME,
            group_middleware=ROOT_NAME,
        )
        self._method_refs: dict[str, HandlerReference] = {}

    def insert(self, method: Method) -> RouteNode:
        """
        Insert a method and return its leaf node.

        Raises:
            EmptyPathError: If the method has an empty path
            DuplicateRouteError: If the (path, verb) pair is already present
        """
        if not method.path:
            raise EmptyPathError(f"empty path for method '{method.name}'")

        segments = split_path(normalize_path(method.path))
        verb = canonical_verb(method.verb)
        parent, matched = self.find_nearest(segments, verb)
        if matched == len(segments):
            raise DuplicateRouteError(f"path '{method.path}' has been registered for {verb}")

        handler = self._resolve_handler(method, parent)
        leaf = self._append(parent, segments[matched:], verb, handler)
        logger.debug("Inserted %s %s -> %s", verb, leaf.full_path, handler.qualified)
        return leaf

    def find_nearest(self, segments: list[str], verb: str) -> tuple[RouteNode, int]:
        """
        Walk the tree along ``segments`` as far as existing nodes allow.

        Interior segments must match the node's segment text exactly; the
        final segment must additionally match the verb.

        Returns:
            ``(deepest matching node, matched segment count)``; a count equal
            to ``len(segments)`` means the route is already registered
        """
        verb = canonical_verb(verb)
        cur = self.root
        matched = 0
        while matched < len(segments):
            final = matched == len(segments) - 1
            child = self._match_child(cur, segment_path(segments[matched]), verb if final else None)
            if child is None:
                break
            cur = child
            matched += 1
        return cur, matched

    def sort(self) -> None:
        """Sort the children of every node."""
        for _, node in self.root.walk():
            node.sort_children()

    def walk(self) -> Iterator[tuple[int, RouteNode]]:
        return self.root.walk()

    def leaves(self) -> list[RouteNode]:
        return [node for _, node in self.walk() if node.is_leaf]

    def routes(self) -> list[tuple[str, str, str]]:
        """``(full path, verb, qualified handler)`` for every leaf, in tree order."""
        return [
            (leaf.full_path, leaf.http_verb, leaf.handler.qualified if leaf.handler else "")
            for leaf in self.leaves()
        ]

    def dump(self) -> str:
        """Indented text rendering of the tree, one node per line."""
        lines = []
        for depth, node in self.walk():
            line = "  " * depth + node.path
            if node.is_leaf:
                line += f" {node.http_verb}"
                if node.handler is not None:
                    line += f" {node.handler.qualified}"
            lines.append(line)
        return "\n".join(lines)

    def _match_child(self, node: RouteNode, path: str, verb: str | None) -> RouteNode | None:
        fallback = None
        for child in node.children:
            if child.path != path:
                continue
            if verb is not None:
                if child.http_verb == verb:
                    return child
            elif not child.is_leaf:
                return child
            elif fallback is None and not self.sort_router:
                # Unsorted trees may hang deeper routes off an existing leaf
                fallback = child
        return fallback

    def _append(
        self,
        parent: RouteNode,
        segments: list[str],
        verb: str,
        handler: HandlerReference,
    ) -> RouteNode:
        cur = parent
        for i, segment in enumerate(segments):
            child = RouteNode(path=segment_path(segment), parent=cur)
            if i == len(segments) - 1:
                child.http_verb = verb
                child.handler = handler
            cur.children.append(child)
            if self.sort_router:
                cur.sort_children()
            cur = child
        return cur

    def _resolve_handler(self, method: Method, parent: RouteNode) -> HandlerReference:
        if method.handler_package:
            alias = self.binder.resolve(method.handler_package)
            ref = HandlerReference(package=method.handler_package, alias=alias, name=method.name)
            self._method_refs[method.name] = ref
            return ref

        inherited = self._method_refs.get(method.name) or self._ancestor_reference(parent)
        if inherited is not None:
            logger.info("Handler package: %s", inherited.package)
            return HandlerReference(
                package=inherited.package, alias=inherited.alias, name=method.name
            )

        alias = self.binder.resolve(self.default_handler_package)
        return HandlerReference(
            package=self.default_handler_package, alias=alias, name=method.name
        )

    def _ancestor_reference(self, node: RouteNode) -> HandlerReference | None:
        current: RouteNode | None = node
        while current is not None:
            handler = current.handler
            if handler is not None and handler.package != self.default_handler_package:
                return handler
            current = current.parent
        return None
