"""Turns the page tree into the ordered ``nav`` list of mkdocs.yml."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..config import DocsConfig
from ..markdown import ucwords
from ..models import UNCATEGORISED, Fragment, FragmentKind, owner_key
from .pages import DocTree
from .registry import INDEX_PAGE, Registry

CHILD_PREFIX = "↳ "
HOME_ENTRY = {"Home": INDEX_PAGE}

NavEntry = Union[str, Dict[str, object]]


class NavType(IntEnum):
    """Section ordering: documented code first, then static content, then the rest."""

    REGULAR = 1
    STATIC = 2
    UNCATEGORISED = 3


@dataclass
class _NavItem:
    title: str
    content: Union[str, List[NavEntry]]
    type: NavType
    sort_key: str
    is_child: bool = False
    parent_key: Optional[str] = None
    identifier: Optional[str] = None


class NavigationEmitter:
    """Walks a :class:`DocTree` depth first and emits mkdocs navigation entries."""

    def __init__(self, registry: Registry, fragments: Sequence[Fragment], config: DocsConfig) -> None:
        self.registry = registry
        self._fragments: Dict[str, Fragment] = {owner_key(f.owner): f for f in fragments}
        self._static_labels = {label.lower() for label in config.static_labels()}

    def emit(self, tree: DocTree) -> List[NavEntry]:
        return [dict(HOME_ENTRY), *self._emit_level(tree, "")]

    def _emit_level(self, tree: DocTree, prefix: str) -> List[NavEntry]:
        items: List[_NavItem] = []
        for name, child in tree.directories.items():
            title = directory_title(name)
            items.append(
                _NavItem(
                    title=title,
                    content=self._emit_level(child, f"{prefix}{name}/"),
                    type=self._directory_type(title),
                    sort_key=title.lower(),
                )
            )
        for filename in tree.pages:
            if filename == INDEX_PAGE and prefix:
                continue
            items.append(self._file_item(prefix + filename))

        entries: List[NavEntry] = []
        if prefix and INDEX_PAGE in tree.pages:
            entries.append(prefix + INDEX_PAGE)
        entries.extend({item.title: item.content} for item in sort_items(items))
        return entries

    def _file_item(self, path: str) -> _NavItem:
        owner = self.registry.owners_by_path.get(path)
        fragment = self._fragments.get(owner) if owner else None
        if fragment is None:
            title = file_title(PurePosixPath(path).name)
            return _NavItem(title=title, content=path, type=NavType.REGULAR, sort_key=title.lower())

        title = self.registry.titles.get(owner) or fragment.display_title or fragment.title
        display = f"{CHILD_PREFIX}{title}" if fragment.is_child_page else title
        return _NavItem(
            title=display,
            content=path,
            type=fragment_type(fragment),
            sort_key=title.lower(),
            is_child=fragment.is_child_page,
            parent_key=fragment.parent_nav_id,
            identifier=fragment.identifier,
        )

    def _directory_type(self, title: str) -> NavType:
        lowered = title.lower()
        if lowered == UNCATEGORISED.lower():
            return NavType.UNCATEGORISED
        if lowered in self._static_labels:
            return NavType.STATIC
        return NavType.REGULAR


def sort_items(items: Sequence[_NavItem]) -> List[_NavItem]:
    """Order one navigation level.

    Type priority comes first. A child page follows its parent when both sit
    on the same level with the same type; siblings of one parent are
    alphabetical, everything else is alphabetical by title.
    """
    parents = {item.identifier: item for item in items if item.identifier}

    def key(item: _NavItem) -> Tuple[int, str, str, int, str]:
        parent = parents.get(item.parent_key) if item.is_child and item.parent_key else None
        if parent is not None and parent is not item and parent.type == item.type:
            return (int(item.type), parent.sort_key, parent.identifier or "", 1, item.sort_key)
        return (int(item.type), item.sort_key, item.identifier or "", 0, "")

    return sorted(items, key=key)


def fragment_type(fragment: Fragment) -> NavType:
    if fragment.kind is FragmentKind.STATIC:
        return NavType.STATIC
    if fragment.is_uncategorised:
        return NavType.UNCATEGORISED
    return NavType.REGULAR


def directory_title(name: str) -> str:
    return ucwords(name.replace("_", " ").replace("-", " "))


def file_title(filename: str) -> str:
    stem = PurePosixPath(filename).stem
    return ucwords(stem.replace("-(", " (").replace("_", " ").replace("-", " "))


__all__ = [
    "CHILD_PREFIX",
    "HOME_ENTRY",
    "NavType",
    "NavigationEmitter",
    "directory_title",
    "file_title",
    "fragment_type",
    "sort_items",
]
