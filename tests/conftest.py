"""Shared pytest fixtures for routegen tests."""

from pathlib import Path

import pytest

from routegen.config import RouterLayout
from routegen.core.aliases import HandlerAliasBinder
from routegen.core.ir import Method, ServiceSpec
from routegen.core.names import NameRegistry, UniqueNameAllocator
from routegen.core.naming import ScopeNamer
from routegen.core.tree import RouteTree
from routegen.templates import TemplateRenderer


@pytest.fixture
def allocator() -> UniqueNameAllocator:
    """Return an allocator over a fresh registry."""
    return UniqueNameAllocator(NameRegistry())


@pytest.fixture
def binder(allocator: UniqueNameAllocator) -> HandlerAliasBinder:
    """Return a binder sharing the allocator's registry."""
    return HandlerAliasBinder(allocator)


@pytest.fixture
def namer(allocator: UniqueNameAllocator) -> ScopeNamer:
    """Return a namer sharing the allocator's registry."""
    return ScopeNamer(allocator)


@pytest.fixture
def user_methods() -> list[Method]:
    """Return the GetUser/CreateUser pair."""
    return [
        Method(name="GetUser", path="/api/user/:id", verb="GET"),
        Method(name="CreateUser", path="/api/user", verb="POST"),
    ]


@pytest.fixture
def user_tree(binder: HandlerAliasBinder, user_methods: list[Method]) -> RouteTree:
    """Return a sorted tree holding the GetUser/CreateUser pair."""
    tree = RouteTree(binder, default_handler_package="app.handler.userapi")
    for method in user_methods:
        tree.insert(method)
    return tree


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Return a renderer over the packaged templates."""
    return TemplateRenderer()


@pytest.fixture
def layout() -> RouterLayout:
    """Return the default router layout."""
    return RouterLayout()


@pytest.fixture
def user_service(user_methods: list[Method]) -> ServiceSpec:
    """Return a service for the GetUser/CreateUser pair."""
    return ServiceSpec(name="user", package="userapi", methods=user_methods)


@pytest.fixture
def order_service() -> ServiceSpec:
    """Return a second service living in a nested package."""
    return ServiceSpec(
        name="OrderService",
        package="shop/orders",
        methods=[
            Method(name="ListOrders", path="/orders", verb="GET"),
            Method(name="GetOrder", path="/orders/:id", verb="GET"),
            Method(name="DeleteOrder", path="/orders/:id", verb="DELETE"),
        ],
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Return an empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project
