"""Helpers for building fragments and throwaway projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from funcdocs.config import DocsConfig, StaticContentSource
from funcdocs.models import Fragment, FragmentKind


def code_fragment(owner: str, nav_path: str, description: str = "", **kwargs) -> Fragment:
    return Fragment(owner=owner, nav_path=nav_path, description=description, **kwargs)


def static_fragment(owner: str, nav_path: str, description: str = "", **kwargs) -> Fragment:
    content_type = owner.split(":", 1)[0]
    kwargs.setdefault("content_type", content_type)
    return Fragment(
        owner=owner,
        nav_path=nav_path,
        description=description,
        kind=FragmentKind.STATIC,
        **kwargs,
    )


class ProjectBuilder:
    """Writes files into a temporary project and builds matching configs."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def config(self, *, static: Mapping[str, str] | None = None) -> DocsConfig:
        """Config rooted at the project; `static` maps source names to relative paths."""
        sources = [
            StaticContentSource(name=name, path=self.root / relative, nav_prefix=name.capitalize())
            for name, relative in (static or {}).items()
        ]
        return DocsConfig(root=self.root, static_content=sources)

    def path(self) -> Path:
        return self.root


__all__ = ["ProjectBuilder", "code_fragment", "static_fragment"]
