"""Attaches child pages declared with ``@navparent`` to their parents."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from ..logging import get_logger
from ..models import Fragment

logger = get_logger("assembly.hierarchy")

_Strategy = Callable[[Fragment, str], bool]


def _by_nav_id(candidate: Fragment, reference: str) -> bool:
    return candidate.nav_id is not None and candidate.nav_id == reference


def _by_display_title(candidate: Fragment, reference: str) -> bool:
    return candidate.display_title is not None and candidate.display_title.lower() == reference.lower()


def _by_owner(candidate: Fragment, reference: str) -> bool:
    return candidate.owner == reference


def _by_last_segment(candidate: Fragment, reference: str) -> bool:
    return candidate.title.lower() == reference.lower()


# Earlier strategies win over later ones across every candidate root.
STRATEGIES: Sequence[_Strategy] = (_by_nav_id, _by_display_title, _by_owner, _by_last_segment)


def find_parent(reference: str, roots: Sequence[Fragment]) -> Optional[Fragment]:
    reference = reference.strip()
    for strategy in STRATEGIES:
        for candidate in roots:
            if strategy(candidate, reference):
                return candidate
    return None


def resolve_hierarchy(fragments: Sequence[Fragment]) -> List[Fragment]:
    """Return roots in input order followed by children, annotated with their parent.

    A child whose parent cannot be found is kept as-is; the navigation falls
    back to its own ``nav_path``.
    """
    roots = [fragment for fragment in fragments if not fragment.nav_parent]
    children = [fragment for fragment in fragments if fragment.nav_parent]

    resolved: List[Fragment] = list(roots)
    for child in children:
        parent = find_parent(child.nav_parent or "", roots)
        if parent is None:
            logger.debug("Parent %r of %s not found; keeping its own navigation path", child.nav_parent, child.owner)
            resolved.append(child)
            continue
        resolved.append(
            replace(
                child,
                parent_nav_id=parent.identifier,
                parent_nav_path=parent.nav_path,
                is_child_page=True,
            )
        )
    return resolved


__all__ = ["STRATEGIES", "find_parent", "resolve_hierarchy"]
