"""Tests for ScopeNamer."""

from routegen.core.aliases import HandlerAliasBinder
from routegen.core.ir import Method
from routegen.core.names import GROUP_SCOPE, HANDLER_SCOPE, UniqueNameAllocator
from routegen.core.naming import ScopeNamer
from routegen.core.tree import ROOT_NAME, RouteNode, RouteTree


def named_nodes(tree: RouteTree) -> dict[tuple[str, str], RouteNode]:
    """Index non-root nodes by (full path, verb)."""
    return {(node.full_path, node.http_verb): node for _, node in tree.walk() if node.parent}


class TestScopeNamer:
    """Tests for ScopeNamer.dye in default mode."""

    def test_user_scenario_names(self, user_tree: RouteTree, namer: ScopeNamer):
        namer.dye(user_tree.root)
        nodes = named_nodes(user_tree)

        api = nodes[("/api", "")]
        user = nodes[("/api/user", "")]
        get_user = nodes[("/api/user/:id", "GET")]
        create_user = nodes[("/api/user", "POST")]

        assert (api.middleware, api.group_name, api.path_prefix) == ("_api", ROOT_NAME, "_api")
        assert (user.middleware, user.group_name, user.path_prefix) == (
            "_user",
            "_api",
            "_api_user",
        )
        assert get_user.group_name == "_user"
        assert get_user.handler_middleware == get_user.middleware == "_getuser"
        assert get_user.path_prefix == "_api_user_id"
        assert create_user.group_name == "_api"
        assert create_user.handler_middleware == "_createuser"

    def test_group_middleware_matches_middleware(self, user_tree: RouteTree, namer: ScopeNamer):
        namer.dye(user_tree.root)
        for _, node in user_tree.walk():
            assert node.group_middleware == node.middleware

    def test_unified_name_reserved_in_both_scopes(
        self, user_tree: RouteTree, allocator: UniqueNameAllocator, namer: ScopeNamer
    ):
        namer.dye(user_tree.root)
        assert (GROUP_SCOPE, "getuser") in allocator.registry
        assert (HANDLER_SCOPE, "getuser") in allocator.registry

    def test_leaf_with_children_gets_two_hooks(self, binder: HandlerAliasBinder, namer: ScopeNamer):
        tree = RouteTree(binder, "app.handler.userapi", sort_router=False)
        tree.insert(Method(name="CreateUser", path="/user", verb="POST"))
        tree.insert(Method(name="GetUser", path="/user/:id", verb="GET"))
        namer.dye(tree.root)

        user = named_nodes(tree)[("/user", "POST")]
        assert user.middleware == user.group_middleware == "_user"
        assert user.handler_middleware == "_createuser"
        (child,) = user.children
        assert child.group_name == "_user"

    def test_handler_hook_never_reused_as_group_hook(
        self, binder: HandlerAliasBinder, namer: ScopeNamer
    ):
        tree = RouteTree(binder, "app.handler.userapi", sort_router=False)
        tree.insert(Method(name="Foo", path="/user", verb="GET"))
        tree.insert(Method(name="Bar", path="/user/x", verb="GET"))
        tree.insert(Method(name="Baz", path="/foo/y", verb="GET"))
        namer.dye(tree.root)

        nodes = named_nodes(tree)
        assert nodes[("/user", "GET")].handler_middleware == "_foo"
        assert nodes[("/foo", "")].middleware == "_foo0"

        hooks = []
        for _, node in tree.walk():
            hooks.append(node.group_middleware)
            if node.handler_middleware and node.handler_middleware != node.group_middleware:
                hooks.append(node.handler_middleware)
        assert hooks == ["root", "_user", "_foo", "_bar", "_foo0", "_baz"]

    def test_colliding_labels_numbered(self, binder: HandlerAliasBinder, namer: ScopeNamer):
        tree = RouteTree(binder, "app.handler.userapi")
        tree.insert(Method(name="ListV1", path="/v1/user/list", verb="GET"))
        tree.insert(Method(name="ListV2", path="/v2/user/list", verb="GET"))
        namer.dye(tree.root)

        nodes = named_nodes(tree)
        assert nodes[("/v1/user", "")].middleware == "_user"
        assert nodes[("/v2/user", "")].middleware == "_user0"

    def test_names_unique_across_trees(self, binder: HandlerAliasBinder, namer: ScopeNamer):
        first = RouteTree(binder, "app.handler.a")
        first.insert(Method(name="GetA", path="/api/a", verb="GET"))
        second = RouteTree(binder, "app.handler.b")
        second.insert(Method(name="GetB", path="/api/b", verb="GET"))
        namer.dye(first.root)
        namer.dye(second.root)

        assert named_nodes(first)[("/api", "")].middleware == "_api"
        assert named_nodes(second)[("/api", "")].middleware == "_api0"

    def test_empty_handler_name_numbered(self, binder: HandlerAliasBinder, namer: ScopeNamer):
        tree = RouteTree(binder, "app.handler.userapi")
        tree.insert(Method(name="", path="/x", verb="GET"))
        namer.dye(tree.root)
        assert named_nodes(tree)[("/x", "GET")].middleware == "_0"

    def test_dye_is_idempotent(self, user_tree: RouteTree, namer: ScopeNamer):
        namer.dye(user_tree.root)
        before = [(n.middleware, n.handler_middleware) for _, n in user_tree.walk()]
        namer.dye(user_tree.root)
        after = [(n.middleware, n.handler_middleware) for _, n in user_tree.walk()]
        assert before == after

    def test_root_is_seeded(self, user_tree: RouteTree, namer: ScopeNamer):
        namer.dye(user_tree.root)
        root = user_tree.root
        assert (root.group_name, root.middleware, root.group_middleware) == (ROOT_NAME,) * 3


class TestSnakeStyle:
    """Tests for ScopeNamer.dye in snake-style mode."""

    def test_user_scenario_hooks(self, user_tree: RouteTree, allocator: UniqueNameAllocator):
        ScopeNamer(allocator, snake_style=True).dye(user_tree.root)
        nodes = named_nodes(user_tree)

        assert nodes[("/api", "")].group_middleware == "_api"
        assert nodes[("/api/user", "")].group_middleware == "_api_user"

        get_user = nodes[("/api/user/:id", "GET")]
        assert get_user.handler_middleware == "_get_user"
        assert get_user.group_middleware == "_get_user"
        # Router variables keep the short names
        assert get_user.middleware == "_getuser"

        assert nodes[("/api/user", "POST")].handler_middleware == "_create_user"

    def test_snake_hooks_unique(self, binder: HandlerAliasBinder, allocator: UniqueNameAllocator):
        tree = RouteTree(binder, "app.handler.userapi")
        tree.insert(Method(name="GetUser", path="/a/user", verb="GET"))
        tree.insert(Method(name="getUser", path="/b/user", verb="GET"))
        ScopeNamer(allocator, snake_style=True).dye(tree.root)

        hooks = [leaf.handler_middleware for leaf in tree.leaves()]
        assert hooks == ["_get_user", "_get_user0"]
