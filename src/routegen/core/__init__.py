"""
Route tree construction, naming, and incremental merging.
"""

from .aliases import HandlerAliasBinder
from .errors import (
    AlreadyRegisteredError,
    ConfigError,
    DuplicateRouteError,
    EmptyPathError,
    FileReadError,
    MalformedAnchorError,
    RegistryExhaustionError,
    RoutegenError,
    TemplateRenderError,
)
from .ir import ApiList, GeneratedFile, HandlerReference, Method, ServiceSpec
from .merge import IncrementalMerger
from .names import NameRegistry, UniqueNameAllocator
from .naming import ScopeNamer
from .tree import NodeKind, RouteNode, RouteTree

__all__ = [
    "AlreadyRegisteredError",
    "ApiList",
    "ConfigError",
    "DuplicateRouteError",
    "EmptyPathError",
    "FileReadError",
    "GeneratedFile",
    "HandlerAliasBinder",
    "HandlerReference",
    "IncrementalMerger",
    "MalformedAnchorError",
    "Method",
    "NameRegistry",
    "NodeKind",
    "RegistryExhaustionError",
    "RouteNode",
    "RouteTree",
    "RoutegenError",
    "ScopeNamer",
    "ServiceSpec",
    "TemplateRenderError",
    "UniqueNameAllocator",
]
