"""Builds the page tree and renders every page body."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from ..logging import get_logger
from ..markdown import slug, starts_with_heading
from ..models import Fragment, FragmentKind, owner_key
from .backlinks import BacklinkIndex
from .references import ResolvedBody, keeps_file_suffix, relative_url
from .registry import Registry

logger = get_logger("assembly.pages")

HIGHLIGHT_STYLE = "fill:#ffe7cd,stroke:#b38000,stroke-width:4px"

_MARKDOWN_LINK = re.compile(r"^\[.*\]\s*\(.*\)$")
_URL_WITH_TITLE = re.compile(r"^(\S+)\s+(.*)$")


@dataclass
class DocTree:
    """Nested ``directory -> (directories, pages)`` structure of the output."""

    directories: Dict[str, "DocTree"] = field(default_factory=dict)
    pages: Dict[str, str] = field(default_factory=dict)

    def add(self, path: str, content: str) -> None:
        *dirs, filename = path.split("/")
        node = self
        for name in dirs:
            node = node.directories.setdefault(name, DocTree())
        node.pages[filename] = content

    def get(self, path: str) -> Optional[str]:
        *dirs, filename = path.split("/")
        node: Optional[DocTree] = self
        for name in dirs:
            node = node.directories.get(name) if node else None
        return node.pages.get(filename) if node else None

    def iter_pages(self, prefix: str = "") -> Iterator[Tuple[str, str]]:
        """Yield ``(relative path, content)`` for every page, depth first."""
        for filename, content in self.pages.items():
            yield prefix + filename, content
        for name, child in self.directories.items():
            yield from child.iter_pages(f"{prefix}{name}/")

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_pages())


@dataclass(frozen=True)
class SectionItem:
    """One linked (or undocumented) entry of a dependency or backlink section."""

    name: str
    label: str
    node_id: str
    url: Optional[str] = None


class PageRenderer:
    """Renders section blocks from the Jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self._env.filters["mermaid_label"] = mermaid_label

    def render(self, template_name: str, **context: object) -> str:
        template = self._env.get_template(template_name)
        return template.render(highlight=HIGHLIGHT_STYLE, **context).strip("\n")


class PageAssembler:
    """Places every fragment at its registry path and renders its markdown."""

    def __init__(self, registry: Registry, backlinks: BacklinkIndex, renderer: PageRenderer | None = None) -> None:
        self.registry = registry
        self.backlinks = backlinks
        self.renderer = renderer or PageRenderer()

    def assemble(self, fragments: Sequence[Fragment], bodies: Mapping[str, ResolvedBody]) -> DocTree:
        tree = DocTree()
        for fragment in fragments:
            key = owner_key(fragment.owner)
            path = self.registry.paths[key]
            body = bodies[key].text if key in bodies else fragment.description
            tree.add(path, self.render_page(fragment, body))
        logger.debug("Assembled %d pages", len(fragments))
        return tree

    def render_page(self, fragment: Fragment, body: str) -> str:
        key = owner_key(fragment.owner)
        title = self.registry.titles.get(key, fragment.title)
        text = body.strip("\n")
        if fragment.kind is FragmentKind.STATIC:
            head = text
            if not starts_with_heading(head):
                head = f"# {title}\n\n{head}" if head else f"# {title}"
        else:
            head = f"# {title}\n\nSource: `{fragment.owner}`\n{{:.page-subtitle}}\n\n{text}"

        blocks = [head.rstrip()]
        blocks.extend(self._sections(fragment))
        return "\n\n".join(blocks) + "\n"

    def _sections(self, fragment: Fragment) -> List[str]:
        key = owner_key(fragment.owner)
        source_path = self.registry.paths[key]
        me = self._self_node(key)
        sections: List[str] = []

        if fragment.uses:
            items = [self._item(used, source_path) for used in fragment.uses]
            sections.append(self.renderer.render("building_blocks.md.j2", me=me, items=items))

        dependents = self.registry.dependents_of(key)
        if dependents:
            items = [self._item(user, source_path) for user in dependents]
            sections.append(self.renderer.render("used_by.md.j2", me=me, items=items))

        referrers = self.backlinks.sources_for(key)
        if referrers:
            items = [self._item(source, source_path) for source in referrers]
            sections.append(self.renderer.render("referenced_by.md.j2", me=me, items=items))

        if fragment.links:
            links = [format_link(link) for link in fragment.links if link.strip()]
            sections.append(self.renderer.render("further_reading.md.j2", links=links))

        return sections

    def _self_node(self, key: str) -> SectionItem:
        return SectionItem(
            name=key,
            label=self.registry.nav_path_for(key, key) or key,
            node_id=_node_id(key),
        )

    def _item(self, owner: str, source_path: str) -> SectionItem:
        raw = owner.strip()
        key = owner_key(raw)
        target_path = self.registry.path_for(key)
        url = None
        if target_path is not None:
            keep_suffix = self.registry.is_static(key) and keeps_file_suffix(target_path)
            url = relative_url(source_path, target_path, keep_suffix=keep_suffix)
        return SectionItem(
            name=raw,
            label=self.registry.nav_path_for(key, raw) or raw,
            node_id=_node_id(key),
            url=url,
        )


def format_link(link: str) -> str:
    """``[T](u)`` passes through, ``url Title`` becomes ``[Title](url)``, bare urls link to themselves."""
    link = link.strip()
    if _MARKDOWN_LINK.match(link):
        return link
    match = _URL_WITH_TITLE.match(link)
    if match:
        return f"[{match.group(2)}]({match.group(1)})"
    return f"[{link}]({link})"


def _node_id(owner: str) -> str:
    return slug(owner) or "node"


def mermaid_label(value: str) -> str:
    """Quote-safe node label for a mermaid graph."""
    return value.replace('"', "#quot;")


__all__ = ["DocTree", "PageAssembler", "PageRenderer", "SectionItem", "format_link"]
