"""Resolves ``@ref:`` and ``@navid:`` markers into relative markdown links."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..logging import get_logger
from ..markdown import first_heading, is_fence
from ..models import Fragment, owner_key, owner_leaf
from .registry import Registry

logger = get_logger("assembly.references")

_TARGET = r"(?P<kind>ref|navid):(?P<target>[^\s\]\)#\"]+)(?:#(?P<fragment>[^\s\]\)\"]+))?"

INLINE_PATTERN = re.compile(
    r"\[(?P<text>[^\]\n]+)\]\(@" + _TARGET + r"\)"
    r"|\[@" + _TARGET.replace("?P<", "?P<b_") + r"\]"
)

DIAGRAM_PATTERN = re.compile(
    r"^(?P<indent>\s*)click\s+(?P<node>\S+)\s+(?:(?P<href>href)\s+)?\"?@" + _TARGET + r"\"?"
    r"(?:\s+\"(?P<tooltip>[^\"]*)\")?"
    r"(?:\s+(?P<link_target>_blank|_self|_parent|_top))?\s*;?\s*$"
)

# Inside a diagram, a token outside a ``click`` line has nowhere to go.
MARKER_TOKEN = re.compile(r"@" + _TARGET)


class MarkerKind(str, Enum):
    """How a marker names its target."""

    BY_OWNER = "ref"
    BY_NAV_ID = "navid"


@dataclass(frozen=True)
class InlineMarker:
    """``[@ref:Owner]`` or ``[text](@navid:id#anchor)`` in running text."""

    kind: MarkerKind
    target: str
    fragment: Optional[str] = None
    custom_text: Optional[str] = None

    @property
    def token(self) -> str:
        return _token(self.kind, self.target, self.fragment)


@dataclass(frozen=True)
class DiagramMarker:
    """``click Node "@ref:Owner" "tooltip"`` inside a mermaid block.

    ``node_id`` is ``None`` for a token that sits elsewhere in the block.
    """

    kind: MarkerKind
    target: str
    node_id: Optional[str] = None
    fragment: Optional[str] = None
    tooltip: Optional[str] = None
    link_target: Optional[str] = None

    @property
    def token(self) -> str:
        return _token(self.kind, self.target, self.fragment)


Marker = Union[InlineMarker, DiagramMarker]


@dataclass(frozen=True)
class ResolvedReference:
    title: str
    url: str
    target_owner: str


@dataclass(frozen=True)
class ResolvedBody:
    """A fragment body with every marker replaced, plus the edges it produced."""

    owner: str
    text: str
    references: Tuple[ResolvedReference, ...] = ()


class BrokenReferenceError(RuntimeError):
    """Raised when a marker names a page that does not exist."""

    def __init__(self, marker: Marker, source_owner: Optional[str] = None) -> None:
        self.marker = marker
        self.source_owner = source_owner
        message = f"Broken reference: {marker.token}"
        if source_owner:
            message += f" (referenced from {source_owner})"
        super().__init__(message)


def _token(kind: MarkerKind, target: str, fragment: Optional[str]) -> str:
    token = f"@{kind.value}:{target}"
    return f"{token}#{fragment}" if fragment else token


def relative_url(source_path: str, target_path: str, *, keep_suffix: bool = False) -> str:
    """Link from the page at ``source_path`` to the page at ``target_path``.

    Both are registry paths. Targets are addressed directory-style
    (``../a/svc/``) unless ``keep_suffix`` is set, in which case the ``.md``
    file itself is linked.
    """
    source_dirs = _strip_md(source_path).split("/")[:-1]
    if keep_suffix:
        target_parts = target_path.split("/")
        trailing = ""
    else:
        target_parts = _strip_md(target_path).split("/")
        if target_parts[-1] == "index":
            target_parts = target_parts[:-1]
        trailing = "/"

    common = 0
    while (
        common < len(source_dirs)
        and common < len(target_parts)
        and source_dirs[common] == target_parts[common]
    ):
        common += 1

    ups = len(source_dirs) - common
    remainder = [part.replace(" ", "%20") for part in target_parts[common:]]
    if not remainder:
        return "../" * ups if ups else "./"
    url = "/".join(remainder) + trailing
    return "../" * ups + url if ups else "./" + url


def _strip_md(path: str) -> str:
    return path[: -len(".md")] if path.endswith(".md") else path


def keeps_file_suffix(path: str) -> bool:
    """Static pages with spaces or capitals are linked by file, not directory URL."""
    return " " in path or any(char.isupper() for char in path)


def auto_title(fragment: Fragment) -> str:
    """Leading H1 of the body, else the last nav segment, else the owner's last part."""
    return first_heading(fragment.description) or fragment.title or owner_leaf(fragment.owner)


def find_markers(text: str) -> List[Marker]:
    """All markers in a body: diagram ``click`` lines first, then inline ones."""
    diagram: List[Marker] = []
    inline: List[Marker] = []
    for is_diagram, chunk in _split_diagrams(text):
        if is_diagram:
            diagram.extend(
                _diagram_marker(match)
                for match in map(DIAGRAM_PATTERN.match, chunk.split("\n"))
                if match is not None
            )
        else:
            inline.extend(_inline_marker(match) for match in INLINE_PATTERN.finditer(chunk))
    return diagram + inline


class ReferenceResolver:
    """Rewrites marker syntax in fragment bodies using a built registry."""

    def __init__(self, registry: Registry, fragments: Sequence[Fragment]) -> None:
        self.registry = registry
        self._fragments: Dict[str, Fragment] = {owner_key(f.owner): f for f in fragments}

    def resolve_all(self, fragments: Iterable[Fragment]) -> Mapping[str, ResolvedBody]:
        bodies = {owner_key(fragment.owner): self.resolve(fragment) for fragment in fragments}
        return MappingProxyType(bodies)

    def resolve(self, fragment: Fragment) -> ResolvedBody:
        """Look up every marker (diagram ones first), then rewrite the body.

        Raises :class:`BrokenReferenceError` for an unknown target and for a
        token inside a diagram block that is not part of a ``click`` line.
        """
        source_path = self.registry.path_for(fragment.owner) or ""
        resolved: Dict[str, ResolvedReference] = {}
        references: List[ResolvedReference] = []
        for marker in find_markers(fragment.description):
            if marker.token not in resolved:
                resolved[marker.token] = self.lookup(marker, source_path, fragment.owner)
            references.append(resolved[marker.token])

        rendered: List[str] = []
        for is_diagram, chunk in _split_diagrams(fragment.description):
            if is_diagram:
                rendered.append(self._rewrite_diagram(chunk, fragment, resolved))
            else:
                rendered.append(self._rewrite_inline(chunk, resolved))

        if references:
            logger.debug("Resolved %d reference(s) in %s", len(references), fragment.owner)
        return ResolvedBody(
            owner=owner_key(fragment.owner),
            text="\n".join(rendered),
            references=tuple(references),
        )

    def lookup(self, marker: Marker, source_path: str, source_owner: Optional[str] = None) -> ResolvedReference:
        """Resolve one marker or raise :class:`BrokenReferenceError`."""
        if marker.kind is MarkerKind.BY_NAV_ID:
            owner = self.registry.owner_for_nav_id(marker.target)
        else:
            owner = owner_key(marker.target)
        target_path = self.registry.path_for(owner) if owner else None
        target = self._fragments.get(owner) if owner else None
        if target_path is None or target is None:
            raise BrokenReferenceError(marker, source_owner)

        keep_suffix = self.registry.is_static(owner) and keeps_file_suffix(target_path)
        url = relative_url(source_path, target_path, keep_suffix=keep_suffix)
        if marker.fragment:
            url = f"{url}#{marker.fragment}"
        return ResolvedReference(title=auto_title(target), url=url, target_owner=owner)

    def _rewrite_inline(self, text: str, resolved: Mapping[str, ResolvedReference]) -> str:
        def replace(match: re.Match) -> str:
            marker = _inline_marker(match)
            reference = resolved[marker.token]
            label = marker.custom_text if marker.custom_text is not None else reference.title
            return f"[{label}]({reference.url})"

        return INLINE_PATTERN.sub(replace, text)

    def _rewrite_diagram(
        self,
        block: str,
        fragment: Fragment,
        resolved: Mapping[str, ResolvedReference],
    ) -> str:
        lines = []
        for line in block.split("\n"):
            match = DIAGRAM_PATTERN.match(line)
            if match is None:
                stray = MARKER_TOKEN.search(line)
                if stray is not None:
                    raise BrokenReferenceError(_stray_marker(stray), fragment.owner)
                lines.append(line)
                continue
            marker = _diagram_marker(match)
            reference = resolved[marker.token]
            tooltip = marker.tooltip if marker.tooltip is not None else f"View documentation for {reference.title}"
            href = "href " if match.group("href") else ""
            suffix = f" {marker.link_target}" if marker.link_target else ""
            lines.append(
                f'{match.group("indent")}click {marker.node_id} {href}"{reference.url}" "{tooltip}"{suffix}'
            )
        return "\n".join(lines)


def _inline_marker(match: re.Match) -> InlineMarker:
    if match.group("kind"):
        return InlineMarker(
            kind=MarkerKind(match.group("kind")),
            target=match.group("target"),
            fragment=match.group("fragment"),
            custom_text=match.group("text"),
        )
    return InlineMarker(
        kind=MarkerKind(match.group("b_kind")),
        target=match.group("b_target"),
        fragment=match.group("b_fragment"),
    )


def _diagram_marker(match: re.Match) -> DiagramMarker:
    return DiagramMarker(
        kind=MarkerKind(match.group("kind")),
        target=match.group("target"),
        node_id=match.group("node"),
        fragment=match.group("fragment"),
        tooltip=match.group("tooltip"),
        link_target=match.group("link_target"),
    )


def _stray_marker(match: re.Match) -> DiagramMarker:
    return DiagramMarker(
        kind=MarkerKind(match.group("kind")),
        target=match.group("target"),
        fragment=match.group("fragment"),
    )


def _split_diagrams(text: str) -> List[Tuple[bool, str]]:
    """Split text into alternating (is_mermaid_block, chunk) pieces, line-preserving."""
    chunks: List[Tuple[bool, str]] = []
    current: List[str] = []
    in_diagram = False
    for line in text.split("\n"):
        if not in_diagram and line.strip().startswith("```mermaid"):
            if current:
                chunks.append((False, "\n".join(current)))
            current = [line]
            in_diagram = True
            continue
        current.append(line)
        if in_diagram and is_fence(line) and len(current) > 1:
            chunks.append((True, "\n".join(current)))
            current = []
            in_diagram = False
    if current or not chunks:
        chunks.append((in_diagram, "\n".join(current)))
    return chunks


__all__ = [
    "BrokenReferenceError",
    "DiagramMarker",
    "InlineMarker",
    "Marker",
    "MarkerKind",
    "ReferenceResolver",
    "ResolvedBody",
    "ResolvedReference",
    "auto_title",
    "find_markers",
    "keeps_file_suffix",
    "relative_url",
]
