"""Runs the assembly passes and writes the MkDocs site sources."""

from __future__ import annotations

import copy
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .assembly.backlinks import BacklinkIndex, build_backlinks
from .assembly.hierarchy import resolve_hierarchy
from .assembly.navigation import NavEntry, NavigationEmitter
from .assembly.pages import DocTree, PageAssembler, PageRenderer
from .assembly.references import ReferenceResolver
from .assembly.registry import INDEX_PAGE, Registry, build_registry
from .config import DocsConfig
from .logging import get_logger
from .models import Fragment, GenerationResult
from .sources.static_content import StaticContentReader
from .validators.markdown import MarkdownValidator, ValidationIssue

MANIFEST_NAME = "mkdocs.yml"

WELCOME_PAGE = (
    "# Welcome\n\n"
    "This is the automatically generated functional documentation for the project. \n\n"
    "Use the navigation on the left to explore the documented processes."
)

_QUOTED_PYTHON_TAG = re.compile(r"'(!!python[^']*)'")


@dataclass
class SitePlan:
    """Everything a run produces, held in memory until it is written."""

    fragments: List[Fragment]
    registry: Registry
    backlinks: BacklinkIndex
    tree: DocTree
    nav: List[NavEntry]
    issues: List[ValidationIssue] = field(default_factory=list)


class DocsGenerator:
    """Builds the page tree and navigation manifest for a set of fragments."""

    def __init__(
        self,
        config: DocsConfig,
        *,
        validate: bool = True,
        validator: Optional[MarkdownValidator] = None,
        renderer: Optional[PageRenderer] = None,
    ) -> None:
        self.config = config
        self.validate = validate
        self.validator = validator or MarkdownValidator()
        self.renderer = renderer or PageRenderer(config.templates_dir)
        self.logger = get_logger("generator")

    def generate(self, fragments: Sequence[Fragment], docs_base_dir: Optional[Path] = None) -> GenerationResult:
        """Plan the whole site, then replace the output directory.

        A :class:`~funcdocs.assembly.references.BrokenReferenceError` raised
        while planning propagates before anything on disk is touched.
        """
        base_dir = Path(docs_base_dir) if docs_base_dir is not None else self.config.output_dir
        plan = self.plan(self.collect(fragments))
        return self.write(plan, base_dir)

    def collect(self, fragments: Sequence[Fragment]) -> List[Fragment]:
        """Code fragments followed by the fragments read from static content sources."""
        return [*fragments, *StaticContentReader(self.config.static_content).read()]

    def plan(self, fragments: Sequence[Fragment]) -> SitePlan:
        ordered = resolve_hierarchy(fragments)
        registry = build_registry(ordered)
        bodies = ReferenceResolver(registry, ordered).resolve_all(ordered)
        backlinks = build_backlinks(bodies, registry)
        tree = PageAssembler(registry, backlinks, self.renderer).assemble(ordered, bodies)
        nav = NavigationEmitter(registry, ordered, self.config).emit(tree)
        issues = self._validate(ordered) if self.validate else []
        return SitePlan(
            fragments=ordered,
            registry=registry,
            backlinks=backlinks,
            tree=tree,
            nav=nav,
            issues=issues,
        )

    def write(self, plan: SitePlan, base_dir: Path) -> GenerationResult:
        docs_dir = base_dir / self.config.docs_dir_name
        if docs_dir.exists():
            shutil.rmtree(docs_dir)
        docs_dir.mkdir(parents=True)

        (docs_dir / INDEX_PAGE).write_text(WELCOME_PAGE, encoding="utf-8")
        pages: List[str] = []
        for relative, content in plan.tree.iter_pages():
            target = docs_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            pages.append(relative)

        manifest_path = base_dir / MANIFEST_NAME
        manifest_path.write_text(render_manifest(self.config.site, plan.nav), encoding="utf-8")
        self.logger.info("Wrote %d pages to %s", len(pages), docs_dir)
        return GenerationResult(
            docs_dir=docs_dir,
            manifest_path=manifest_path,
            pages=pages,
            issues=list(plan.issues),
        )

    def _validate(self, fragments: Sequence[Fragment]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for fragment in fragments:
            found = self.validator.validate(fragment.description, fragment.source_file or fragment.owner)
            for issue in found:
                self.logger.warning("%s:%d %s", issue.file, issue.line, issue.message)
            issues.extend(found)
        return issues


def render_manifest(site: Dict[str, Any], nav: Sequence[NavEntry]) -> str:
    """Dump site settings plus ``nav`` as YAML, leaving ``!!python`` tags unquoted."""
    data = copy.deepcopy(site)
    data["nav"] = list(nav)
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False, width=4096)
    return _QUOTED_PYTHON_TAG.sub(r"\1", dumped)


__all__ = ["DocsGenerator", "MANIFEST_NAME", "SitePlan", "WELCOME_PAGE", "render_manifest"]
