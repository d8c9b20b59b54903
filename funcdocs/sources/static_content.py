"""Reads standalone markdown files configured as static content."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..config import StaticContentSource
from ..logging import get_logger
from ..markdown import first_heading, is_fence, ucwords
from ..models import NAV_SEPARATOR, Fragment, FragmentKind, split_nav_path

_SINGLE_DIRECTIVES = ("@navid", "@navparent", "@nav")
_LIST_DIRECTIVES = ("@uses", "@links", "@link")


@dataclass
class _Directives:
    values: dict = field(default_factory=dict)
    uses: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)


class StaticContentReader:
    """Converts markdown files from configured static sources into fragments."""

    def __init__(self, sources: Sequence[StaticContentSource]) -> None:
        self.sources = list(sources)
        self.logger = get_logger("sources.static")

    def read(self) -> List[Fragment]:
        fragments: List[Fragment] = []
        for source in self.sources:
            if not source.path.is_dir():
                self.logger.debug("Static content path %s not found; skipping", source.path)
                continue
            files = sorted(source.path.rglob("*.md"), key=lambda p: p.relative_to(source.path).as_posix())
            for file_path in files:
                relative = file_path.relative_to(source.path).as_posix()
                text = file_path.read_text(encoding="utf-8")
                fragments.append(parse_static_file(text, relative, source))
        if fragments:
            self.logger.info("Found %d static content files", len(fragments))
        return fragments


def parse_static_file(text: str, relative_path: str, source: StaticContentSource) -> Fragment:
    """Turn one markdown document into a static fragment."""
    lines = _strip_front_matter(text.split("\n"))
    directives, body_lines = _extract_directives(lines)

    nav_path = directives.values.get("@nav") or default_nav_path(relative_path, body_lines, source.nav_prefix)
    display_title = first_heading(body_lines) or split_nav_path(nav_path)[-1]

    return Fragment(
        owner=f"{source.name}:{relative_path}",
        nav_path=nav_path,
        description="\n".join(body_lines),
        kind=FragmentKind.STATIC,
        nav_id=directives.values.get("@navid"),
        nav_parent=directives.values.get("@navparent"),
        uses=tuple(directives.uses),
        links=tuple(directives.links),
        display_title=display_title,
        content_type=source.name,
        source_file=str(source.path / relative_path),
        start_line=1,
    )


def default_nav_path(relative_path: str, body_lines: Sequence[str], nav_prefix: str) -> str:
    """``guides/getting_started/setup.md`` -> ``Guides / Getting Started / <Title>``."""
    parts = relative_path[: -len(".md")].split("/") if relative_path.endswith(".md") else relative_path.split("/")
    title = first_heading(body_lines) or ucwords(parts[-1].replace("_", " "))
    directories = [ucwords(part.replace("_", " ")) for part in parts[:-1]]
    return NAV_SEPARATOR.join([nav_prefix, *directories, title])


def _strip_front_matter(lines: List[str]) -> List[str]:
    start: Optional[int] = None
    for index, line in enumerate(lines):
        if line.strip():
            start = index
            break
    if start is None or lines[start].strip() != "---":
        return lines
    for end in range(start + 1, len(lines)):
        if lines[end].strip() == "---":
            return lines[end + 1:]
    # Unterminated block; leave the document untouched.
    return lines


def _extract_directives(lines: Sequence[str]) -> Tuple[_Directives, List[str]]:
    directives = _Directives()
    kept: List[str] = []
    in_fence = False
    for line in lines:
        if is_fence(line):
            in_fence = not in_fence
            kept.append(line)
            continue
        stripped = line.strip()
        if in_fence or not stripped.startswith("@"):
            kept.append(line)
            continue
        matched = _match_directive(stripped, _SINGLE_DIRECTIVES)
        if matched and matched not in directives.values:
            directives.values[matched] = stripped[len(matched):].strip()
            continue
        matched = _match_directive(stripped, _LIST_DIRECTIVES)
        if matched:
            value = stripped[len(matched):].strip()
            target = directives.uses if matched == "@uses" else directives.links
            if value:
                target.append(value)
            continue
        kept.append(line)
    return directives, kept


def _match_directive(line: str, names: Sequence[str]) -> Optional[str]:
    for name in names:
        if line.startswith(name + " ") or line == name:
            return name
    return None


__all__ = ["StaticContentReader", "default_nav_path", "parse_static_file"]
