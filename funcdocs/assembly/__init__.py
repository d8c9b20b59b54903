"""Documentation assembly: hierarchy, registry, references, pages and navigation."""

from .backlinks import BacklinkIndex, build_backlinks
from .hierarchy import resolve_hierarchy
from .navigation import NavigationEmitter, NavType
from .pages import DocTree, PageAssembler, PageRenderer
from .references import (
    BrokenReferenceError,
    DiagramMarker,
    InlineMarker,
    MarkerKind,
    ReferenceResolver,
    ResolvedBody,
    ResolvedReference,
    relative_url,
)
from .registry import Registry, build_registry

__all__ = [
    "BacklinkIndex",
    "BrokenReferenceError",
    "DiagramMarker",
    "DocTree",
    "InlineMarker",
    "MarkerKind",
    "NavType",
    "NavigationEmitter",
    "PageAssembler",
    "PageRenderer",
    "ReferenceResolver",
    "Registry",
    "ResolvedBody",
    "ResolvedReference",
    "build_backlinks",
    "build_registry",
    "relative_url",
    "resolve_hierarchy",
]
