"""
Router generation.

RouterGenerator drives one generation run: for every service it builds and
names a route tree, renders the router module, and merges the side files
(middleware.py and the central register.py) that users are allowed to edit.

Nothing is written here. The run returns every file it produced; the caller
persists them only if the whole run succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from routegen.config import GenerateOptions, RouterLayout
from routegen.core.aliases import HandlerAliasBinder
from routegen.core.errors import AlreadyRegisteredError, ConfigError
from routegen.core.ir import GeneratedFile, ServiceSpec
from routegen.core.merge import (
    IMPORT_ANCHOR,
    REGISTER_ANCHOR,
    IncrementalMerger,
    bound_aliases,
    collect_middleware,
    imported_routers,
)
from routegen.core.names import REGISTER_SCOPE, NameRegistry, UniqueNameAllocator
from routegen.core.naming import ScopeNamer
from routegen.core.strings import snake_case, to_var_name
from routegen.core.tree import RouteTree
from routegen.fs import FileSystem, LocalFileSystem
from routegen.templates import (
    MIDDLEWARE_SINGLE_TEMPLATE,
    MIDDLEWARE_TEMPLATE,
    PACKAGE_INIT_TEMPLATE,
    REGISTER_BOUND_NAMES,
    REGISTER_TEMPLATE,
    ROUTER_BOUND_NAMES,
    ROUTER_TEMPLATE,
    TemplateRenderer,
)

logger = logging.getLogger(__name__)

REGISTER_FILE_NAME = "register.py"
MIDDLEWARE_FILE_NAME = "middleware.py"
PACKAGE_INIT_FILE_NAME = "__init__.py"


@dataclass
class GenerationResult:
    """
    Result of one generation run.

    Attributes:
        files: Files to persist, in the order they were first produced
        warnings: Non-fatal conditions to show the user
        trees: Named route tree per service name
    """

    files: list[GeneratedFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trees: dict[str, RouteTree] = field(default_factory=dict)

    def add_warning(self, warning: str) -> None:
        """Record a warning."""
        self.warnings.append(warning)

    def get_file(self, path: Path | str) -> GeneratedFile | None:
        """Look up a produced file by its project-relative path."""
        wanted = Path(path)
        for file in self.files:
            if file.path == wanted:
                return file
        return None


class _PendingFiles:
    """Files produced so far in a run, layered over the project on disk."""

    def __init__(self, filesystem: FileSystem):
        self.filesystem = filesystem
        self._files: dict[Path, GeneratedFile] = {}

    def exists(self, path: Path) -> bool:
        return path in self._files or self.filesystem.exists(path)

    def read(self, path: Path) -> str:
        if path in self._files:
            return self._files[path].content
        return self.filesystem.read_all(path)

    def put(self, path: Path, content: str, template_name: str) -> None:
        previous = self._files.get(path)
        is_new = previous.is_new_file if previous else not self.filesystem.exists(path)
        self._files[path] = GeneratedFile(
            path=path, content=content, is_new_file=is_new, template_name=template_name
        )

    def files(self) -> list[GeneratedFile]:
        return list(self._files.values())


@dataclass
class _RunContext:
    """Registries shared by every service in one run."""

    allocator: UniqueNameAllocator
    binder: HandlerAliasBinder
    namer: ScopeNamer
    merger: IncrementalMerger
    pending: _PendingFiles


class RouterGenerator:
    """
    Generates FastAPI routers for a list of services.

    Example:
        generator = RouterGenerator(RouterLayout(), project_root=Path("."))
        result = generator.generate(api_list.services)
        persist_files(result.files, Path("."))
    """

    def __init__(
        self,
        layout: RouterLayout,
        options: GenerateOptions | None = None,
        renderer: TemplateRenderer | None = None,
        filesystem: FileSystem | None = None,
        project_root: Path = Path("."),
    ):
        """
        Initialize generator.

        Args:
            layout: Router directory and package layout
            options: Sorting and middleware naming switches
            renderer: Templating collaborator (packaged templates if omitted)
            filesystem: Read access to the project (disk at project_root if omitted)
            project_root: Root that generated paths are relative to
        """
        self.layout = layout
        self.options = options or GenerateOptions()
        self.renderer = renderer or TemplateRenderer()
        self.filesystem = filesystem or LocalFileSystem(project_root)

    def generate(self, services: Sequence[ServiceSpec]) -> GenerationResult:
        """
        Run generation for ``services``.

        Returns:
            GenerationResult with every produced file and any warnings

        Raises:
            RoutegenError: Any error other than AlreadyRegisteredError aborts
                the run; no files are returned
        """
        ctx = self._new_context()
        result = GenerationResult()
        routers: dict[Path, str] = {}

        for service in services:
            router_path = self.router_path(service)
            if router_path in routers:
                raise ConfigError(
                    f"services '{routers[router_path]}' and '{service.name}' "
                    f"both generate {router_path}"
                )
            routers[router_path] = service.name
            tree = self._build_tree(service, ctx)
            result.trees[service.name] = tree
            self._generate_service(service, tree, ctx, result)

        result.files = ctx.pending.files()
        logger.info("Generated %d file(s) for %d service(s)", len(result.files), len(services))
        return result

    def build_trees(self, services: Sequence[ServiceSpec]) -> dict[str, RouteTree]:
        """Build and name the route trees of ``services`` without rendering anything."""
        ctx = self._new_context()
        return {service.name: self._build_tree(service, ctx) for service in services}

    def default_handler_package(self, service: ServiceSpec) -> str:
        if service.handler_package:
            return service.handler_package
        return ".".join([self.layout.handler_package, *service.package_parts])

    def package_dir(self, service: ServiceSpec) -> Path:
        return self.layout.router_path().joinpath(*service.package_parts)

    def router_module(self, service: ServiceSpec) -> str:
        module = snake_case(service.name)
        # middleware.py and __init__.py share the package directory
        if f"{module}.py" in (MIDDLEWARE_FILE_NAME, PACKAGE_INIT_FILE_NAME):
            module += "_"
        return module

    def router_path(self, service: ServiceSpec) -> Path:
        return self.package_dir(service) / f"{self.router_module(service)}.py"

    def router_import_path(self, service: ServiceSpec) -> str:
        """Dotted import path of the router module generated for ``service``."""
        return ".".join(
            [self.layout.router_package, *service.package_parts, self.router_module(service)]
        )

    def register_alias(self, service: ServiceSpec) -> str:
        """Preferred alias of the router module in register.py, e.g. ``shop_orders_order``."""
        return to_var_name(["_".join([*service.package_parts, self.router_module(service)])])

    def _new_context(self) -> _RunContext:
        allocator = UniqueNameAllocator(NameRegistry())
        allocator.reserve(REGISTER_SCOPE, REGISTER_BOUND_NAMES)
        return _RunContext(
            allocator=allocator,
            binder=HandlerAliasBinder(allocator, reserved=ROUTER_BOUND_NAMES),
            namer=ScopeNamer(allocator, snake_style=self.options.snake_style_middleware),
            merger=IncrementalMerger(self.renderer),
            pending=_PendingFiles(self.filesystem),
        )

    def _build_tree(self, service: ServiceSpec, ctx: _RunContext) -> RouteTree:
        tree = RouteTree(
            ctx.binder,
            default_handler_package=self.default_handler_package(service),
            sort_router=self.options.sort_router,
        )
        for method in service.methods:
            tree.insert(method)
        ctx.namer.dye(tree.root)
        logger.debug("Route tree for %s:\n%s", service.name, tree.dump())
        return tree

    def _generate_service(
        self,
        service: ServiceSpec,
        tree: RouteTree,
        ctx: _RunContext,
        result: GenerationResult,
    ) -> None:
        package_dir = self.package_dir(service)

        self._generate_package_inits(service, ctx)
        if self.renderer.is_enabled(ROUTER_TEMPLATE):
            self._generate_router(service, tree, ctx)
        if self.renderer.is_enabled(MIDDLEWARE_TEMPLATE):
            self._update_middleware(service, tree, package_dir / MIDDLEWARE_FILE_NAME, ctx)
        if self.renderer.is_enabled(REGISTER_TEMPLATE):
            self._update_register(service, ctx, result)

    def _generate_package_inits(self, service: ServiceSpec, ctx: _RunContext) -> None:
        if not self.renderer.is_enabled(PACKAGE_INIT_TEMPLATE):
            return
        directory = self.layout.router_path()
        for part in [None, *service.package_parts]:
            if part is not None:
                directory = directory / part
            init_path = directory / PACKAGE_INIT_FILE_NAME
            if ctx.pending.exists(init_path):
                continue
            content = self.renderer.render(
                PACKAGE_INIT_TEMPLATE, {"package_name": directory.name}
            )
            ctx.pending.put(init_path, content, PACKAGE_INIT_TEMPLATE)

    def _generate_router(
        self,
        service: ServiceSpec,
        tree: RouteTree,
        ctx: _RunContext,
    ) -> None:
        handler_packages = {
            leaf.handler.alias: leaf.handler.package
            for leaf in tree.leaves()
            if leaf.handler is not None
        }
        data = {
            "service_name": service.name,
            "handler_packages": dict(sorted(handler_packages.items())),
            "root": tree.root,
        }
        router_path = self.router_path(service)
        content = self.renderer.render(ROUTER_TEMPLATE, data)
        ctx.pending.put(router_path, content, ROUTER_TEMPLATE)
        logger.info("Generated router %s", router_path)

    def _update_middleware(
        self,
        service: ServiceSpec,
        tree: RouteTree,
        path: Path,
        ctx: _RunContext,
    ) -> None:
        names = collect_middleware(tree.root)
        if not ctx.pending.exists(path):
            content = self.renderer.render(
                MIDDLEWARE_TEMPLATE,
                {"service_name": service.name, "middleware_names": names},
            )
            ctx.pending.put(path, content, MIDDLEWARE_TEMPLATE)
            logger.info("Generated middleware %s", path)
            return

        if not self.renderer.is_enabled(MIDDLEWARE_SINGLE_TEMPLATE):
            return
        current = ctx.pending.read(path)
        merged = ctx.merger.merge_middleware(current, names)
        if merged != current:
            ctx.pending.put(path, merged, MIDDLEWARE_TEMPLATE)
            logger.info("Updated middleware %s", path)

    def _update_register(
        self,
        service: ServiceSpec,
        ctx: _RunContext,
        result: GenerationResult,
    ) -> None:
        router_dir = self.layout.router_path()
        path = router_dir / REGISTER_FILE_NAME
        dep_pkg = self.router_import_path(service)

        if not ctx.pending.exists(path):
            dep_pkg_alias = ctx.allocator.allocate(REGISTER_SCOPE, self.register_alias(service))
            content = self.renderer.render(
                REGISTER_TEMPLATE,
                {
                    "package_name": router_dir.name,
                    "dep_pkg": dep_pkg,
                    "dep_pkg_alias": dep_pkg_alias,
                    "import_anchor": IMPORT_ANCHOR,
                    "register_anchor": REGISTER_ANCHOR,
                },
            )
            ctx.pending.put(path, content, REGISTER_TEMPLATE)
            logger.info("Generated register %s", path)
            return

        current = ctx.pending.read(path)
        # Aliases from earlier runs or hand edits are taken too
        ctx.allocator.reserve(REGISTER_SCOPE, bound_aliases(current))
        dep_pkg_alias = imported_routers(current).get(dep_pkg)
        if dep_pkg_alias is None:
            dep_pkg_alias = ctx.allocator.allocate(REGISTER_SCOPE, self.register_alias(service))
        try:
            merged = ctx.merger.merge_router(current, dep_pkg_alias, dep_pkg, path=path)
        except AlreadyRegisteredError as e:
            logger.warning("%s", e)
            result.add_warning(str(e))
            return
        ctx.pending.put(path, merged, REGISTER_TEMPLATE)
        logger.info("Registered %s in %s", dep_pkg_alias, path)
