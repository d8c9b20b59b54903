"""Inverts resolved references into "Referenced by" entries."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple, Union

from ..models import owner_key
from .references import ResolvedBody
from .registry import Registry


@dataclass(frozen=True)
class BacklinkIndex:
    """``target owner -> source owners`` in display order."""

    entries: Mapping[str, Tuple[str, ...]]

    def sources_for(self, owner: str) -> Tuple[str, ...]:
        return self.entries.get(owner_key(owner), ())

    def __contains__(self, owner: object) -> bool:
        return isinstance(owner, str) and bool(self.sources_for(owner))

    def __len__(self) -> int:
        return len(self.entries)


def build_backlinks(
    resolved_bodies: Union[Mapping[str, ResolvedBody], Iterable[ResolvedBody]],
    registry: Registry,
) -> BacklinkIndex:
    """Collect one backlink per (source, target) pair, skipping self references."""
    bodies = resolved_bodies.values() if isinstance(resolved_bodies, Mapping) else resolved_bodies
    collected: Dict[str, List[str]] = {}
    for body in bodies:
        for reference in body.references:
            if reference.target_owner == body.owner:
                continue
            sources = collected.setdefault(reference.target_owner, [])
            if body.owner not in sources:
                sources.append(body.owner)

    def sort_key(owner: str) -> Tuple[str, str]:
        return ((registry.nav_path_for(owner) or owner).lower(), owner)

    return BacklinkIndex(
        entries=MappingProxyType(
            {target: tuple(sorted(sources, key=sort_key)) for target, sources in collected.items()}
        )
    )


__all__ = ["BacklinkIndex", "build_backlinks"]
