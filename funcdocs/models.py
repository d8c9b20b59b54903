"""Core data models shared across funcdocs components."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

NAV_SEPARATOR = " / "
UNCATEGORISED = "Uncategorised"

_OWNER_SPLIT = re.compile(r"::|[\\/:.]")


class FragmentKind(str, Enum):
    """Origin of a fragment; decides how its output path is slugged."""

    CODE = "code"
    STATIC = "static"


def owner_key(value: str) -> str:
    """Normalise an owner string for use as a lookup key.

    ``@uses \\App\\Models\\User`` and ``App\\Models\\User`` name the same
    owner, so surrounding whitespace and leading backslashes are dropped.
    """
    return value.strip().lstrip("\\")


def split_nav_path(nav_path: str) -> list[str]:
    """Split a breadcrumb into trimmed, non-empty segments."""
    return [segment.strip() for segment in nav_path.split("/") if segment.strip()]


def normalize_nav_path(nav_path: str) -> str:
    return NAV_SEPARATOR.join(split_nav_path(nav_path))


def owner_leaf(owner: str) -> str:
    """Return the last component of an owner (class name, function, file stem)."""
    cleaned = owner_key(owner)
    if cleaned.endswith(".md"):
        cleaned = cleaned[: -len(".md")]
    parts = [part for part in _OWNER_SPLIT.split(cleaned) if part]
    return parts[-1] if parts else cleaned


@dataclass(frozen=True)
class Fragment:
    """One unit of extracted documentation."""

    owner: str
    nav_path: str
    description: str = ""
    kind: FragmentKind = FragmentKind.CODE
    nav_id: Optional[str] = None
    nav_parent: Optional[str] = None
    uses: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    display_title: Optional[str] = None
    content_type: Optional[str] = None
    source_file: Optional[str] = None
    start_line: Optional[int] = None
    # Set by the hierarchy resolver only.
    parent_nav_id: Optional[str] = None
    parent_nav_path: Optional[str] = None
    is_child_page: bool = False

    def __post_init__(self) -> None:
        normalized = normalize_nav_path(self.nav_path)
        if not normalized:
            raise ValueError(f"Fragment {self.owner!r} has an empty navigation path")
        object.__setattr__(self, "nav_path", normalized)
        object.__setattr__(self, "uses", tuple(self.uses))
        object.__setattr__(self, "links", tuple(self.links))
        object.__setattr__(self, "nav_id", self.nav_id or None)
        object.__setattr__(self, "nav_parent", self.nav_parent or None)

    @property
    def segments(self) -> list[str]:
        return split_nav_path(self.nav_path)

    @property
    def title(self) -> str:
        """Last navigation segment, the default page title."""
        return self.segments[-1]

    @property
    def directories(self) -> list[str]:
        return self.segments[:-1]

    @property
    def identifier(self) -> str:
        """Key children use to point at this fragment once it is a parent."""
        return self.nav_id or self.owner

    @property
    def relative_source(self) -> Optional[str]:
        """For static fragments, the path after ``<contentType>:`` in the owner."""
        if self.kind is not FragmentKind.STATIC:
            return None
        _, sep, relative = self.owner.partition(":")
        return relative if sep else None

    @property
    def is_uncategorised(self) -> bool:
        return self.segments[0].lower() == UNCATEGORISED.lower()


@dataclass
class GenerationResult:
    """Summary of a completed generation run."""

    docs_dir: Path
    manifest_path: Path
    pages: list[str] = field(default_factory=list)
    issues: list = field(default_factory=list)
