"""Output paths and lookup maps shared by every later assembly pass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..logging import get_logger
from ..markdown import slug
from ..models import Fragment, FragmentKind, owner_key

logger = get_logger("assembly.registry")

INDEX_PAGE = "index.md"


@dataclass(frozen=True)
class Registry:
    """Read-only snapshot of where every fragment lives and how it is named."""

    paths: Mapping[str, str]
    titles: Mapping[str, str]
    nav_paths: Mapping[str, str]
    nav_ids: Mapping[str, str]
    dependents: Mapping[str, Tuple[str, ...]]
    owners_by_path: Mapping[str, str]
    kinds: Mapping[str, FragmentKind]

    def path_for(self, owner: str) -> Optional[str]:
        return self.paths.get(owner_key(owner))

    def owner_for_nav_id(self, nav_id: str) -> Optional[str]:
        return self.nav_ids.get(nav_id.strip())

    def nav_path_for(self, owner: str, default: Optional[str] = None) -> Optional[str]:
        return self.nav_paths.get(owner_key(owner), default)

    def dependents_of(self, owner: str) -> Tuple[str, ...]:
        return self.dependents.get(owner_key(owner), ())

    def is_static(self, owner: str) -> bool:
        return self.kinds.get(owner_key(owner)) is FragmentKind.STATIC


def build_registry(fragments: Sequence[Fragment]) -> Registry:
    """Assign every fragment a unique output path and build the lookup maps.

    Code fragments get slugged paths; a second and third fragment landing on
    ``dir/name.md`` become ``dir/name-(2).md`` and ``dir/name-(3).md`` with
    ``Title (2)``/``Title (3)``. A code page whose slug matches a directory
    created by another fragment becomes that directory's ``index.md``.
    Static fragments keep their nav directories and source file name verbatim.
    """
    directories = _directory_prefixes(fragments)
    occurrences: Dict[Tuple[str, ...], int] = {}
    # The welcome page owns the root index.
    taken: Set[str] = {INDEX_PAGE}

    paths: Dict[str, str] = {}
    titles: Dict[str, str] = {}
    nav_paths: Dict[str, str] = {}
    nav_ids: Dict[str, str] = {}
    kinds: Dict[str, FragmentKind] = {}

    for fragment in fragments:
        key = owner_key(fragment.owner)
        dirs = _output_directories(fragment)
        title = fragment.display_title or fragment.title

        if fragment.kind is FragmentKind.STATIC:
            filename = _static_filename(fragment)
            stem, suffix = _split_suffix(filename)
            count = 1
            path = _join(dirs, filename)
        else:
            stem, suffix = _slug_segment(fragment.title), ".md"
            slot = dirs + (stem,)
            count = occurrences[slot] = occurrences.get(slot, 0) + 1
            if count == 1 and slot in directories:
                path = _join(slot, INDEX_PAGE)
            else:
                path = _join(dirs, _numbered(stem, count, suffix))

        while path in taken:
            count += 1
            path = _join(dirs, _numbered(stem, count, suffix))
            if fragment.kind is FragmentKind.CODE:
                occurrences[dirs + (stem,)] = count
        if count > 1:
            logger.debug("Output path conflict for %s; using %s", fragment.owner, path)
            title = f"{title} ({count})"

        taken.add(path)
        paths[key] = path
        titles[key] = title
        nav_paths[key] = fragment.nav_path
        kinds[key] = fragment.kind
        if fragment.nav_id:
            if fragment.nav_id in nav_ids:
                logger.warning(
                    "Duplicate @navid %r on %s; keeping %s",
                    fragment.nav_id,
                    fragment.owner,
                    nav_ids[fragment.nav_id],
                )
            else:
                nav_ids[fragment.nav_id] = key

    return Registry(
        paths=MappingProxyType(paths),
        titles=MappingProxyType(titles),
        nav_paths=MappingProxyType(nav_paths),
        nav_ids=MappingProxyType(nav_ids),
        dependents=MappingProxyType(_dependents(fragments)),
        owners_by_path=MappingProxyType({path: owner for owner, path in paths.items()}),
        kinds=MappingProxyType(kinds),
    )


def _dependents(fragments: Sequence[Fragment]) -> Dict[str, Tuple[str, ...]]:
    users: Dict[str, List[str]] = {}
    for fragment in fragments:
        user = owner_key(fragment.owner)
        for used in fragment.uses:
            bucket = users.setdefault(owner_key(used), [])
            if user not in bucket:
                bucket.append(user)
    return {owner: tuple(bucket) for owner, bucket in users.items()}


def _output_directories(fragment: Fragment) -> Tuple[str, ...]:
    if fragment.kind is FragmentKind.STATIC:
        return tuple(fragment.directories)
    return tuple(_slug_segment(segment) for segment in fragment.directories)


def _directory_prefixes(fragments: Sequence[Fragment]) -> Set[Tuple[str, ...]]:
    prefixes: Set[Tuple[str, ...]] = set()
    for fragment in fragments:
        dirs = _output_directories(fragment)
        for depth in range(1, len(dirs) + 1):
            prefixes.add(dirs[:depth])
    return prefixes


def _static_filename(fragment: Fragment) -> str:
    relative = fragment.relative_source
    if relative:
        return PurePosixPath(relative).name
    return f"{fragment.title}.md"


def _split_suffix(filename: str) -> Tuple[str, str]:
    path = PurePosixPath(filename)
    return path.stem, path.suffix


def _slug_segment(segment: str) -> str:
    return slug(segment) or "untitled"


def _numbered(stem: str, count: int, suffix: str) -> str:
    return f"{stem}{suffix}" if count == 1 else f"{stem}-({count}){suffix}"


def _join(directories: Sequence[str], filename: str) -> str:
    return "/".join([*directories, filename])


__all__ = ["INDEX_PAGE", "Registry", "build_registry"]
