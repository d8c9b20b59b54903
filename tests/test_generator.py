from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest
import yaml

from funcdocs.assembly.references import BrokenReferenceError
from funcdocs.generator import MANIFEST_NAME, WELCOME_PAGE, DocsGenerator, render_manifest
from tests._fixtures.docs_builder import code_fragment


def _read_tree(root: Path) -> Dict[str, str]:
    return {
        path.relative_to(root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def _example_fragments():
    return [
        code_fragment("Svc", "A/Svc", "# Svc Title\nbody", nav_id="svc"),
        code_fragment("Ctrl", "B/Ctrl", "uses [@navid:svc]"),
    ]


def test_generate_writes_pages_and_manifest(project) -> None:
    config = project.config()
    out = project.path() / "site"

    result = DocsGenerator(config).generate(_example_fragments(), out)

    docs_dir = out / "generated"
    assert result.docs_dir == docs_dir
    assert result.manifest_path == out / MANIFEST_NAME
    assert sorted(result.pages) == ["a/svc.md", "b/ctrl.md"]
    assert (docs_dir / "index.md").read_text(encoding="utf-8") == WELCOME_PAGE

    controller = (docs_dir / "b/ctrl.md").read_text(encoding="utf-8")
    assert "uses [Svc Title](../a/svc/)" in controller

    service = (docs_dir / "a/svc.md").read_text(encoding="utf-8")
    assert "## Referenced by" in service
    assert "* [B / Ctrl](../b/ctrl/)" in service

    manifest_text = result.manifest_path.read_text(encoding="utf-8")
    assert "format: !!python/name:pymdownx.superfences.fence_code_format" in manifest_text
    manifest = yaml.load(manifest_text, Loader=yaml.BaseLoader)
    assert manifest["site_name"] == "Functional Documentation"
    assert manifest["docs_dir"] == "generated"
    assert manifest["nav"] == [
        {"Home": "index.md"},
        {"A": [{"Svc": "a/svc.md"}]},
        {"B": [{"Ctrl": "b/ctrl.md"}]},
    ]


def test_generate_is_idempotent(project) -> None:
    config = project.config()
    out = project.path() / "site"
    generator = DocsGenerator(config)

    generator.generate(_example_fragments(), out)
    first = _read_tree(out)
    generator.generate(_example_fragments(), out)

    assert _read_tree(out) == first


def test_previous_output_is_replaced(project) -> None:
    out = project.path() / "site"
    project.write({"site/generated/stale.md": "old"})

    DocsGenerator(project.config()).generate(_example_fragments(), out)

    assert not (out / "generated/stale.md").exists()


def test_broken_reference_leaves_output_untouched(project) -> None:
    out = project.path() / "site"
    project.write({"site/generated/old.md": "old"})
    fragments = [code_fragment("app.Page", "Docs / Page", "See [@ref:app.Missing].")]

    with pytest.raises(BrokenReferenceError):
        DocsGenerator(project.config()).generate(fragments, out)

    assert (out / "generated/old.md").read_text(encoding="utf-8") == "old"
    assert not (out / MANIFEST_NAME).exists()


def test_unresolved_parent_falls_back_to_own_navigation(project) -> None:
    fragments = [code_fragment("app.Orphan", "Docs / Orphan", nav_parent="nobody")]

    result = DocsGenerator(project.config()).generate(fragments, project.path() / "site")

    assert result.pages == ["docs/orphan.md"]
    manifest = yaml.load(result.manifest_path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
    assert manifest["nav"][1] == {"Docs": [{"Orphan": "docs/orphan.md"}]}


def test_static_content_is_merged(project) -> None:
    project.write(
        {
            "handbook/getting_started/intro.md": "# Introduction\n\nRead [@ref:app.Svc].\n",
        }
    )
    config = project.config(static={"handbook": "handbook"})
    fragments = [code_fragment("app.Svc", "Core / Svc", "Service.")]

    result = DocsGenerator(config).generate(fragments, project.path() / "site")

    assert "Handbook/Getting Started/intro.md" in result.pages
    intro = (result.docs_dir / "Handbook/Getting Started/intro.md").read_text(encoding="utf-8")
    assert "Read [Svc](../../core/svc/)." in intro
    service = (result.docs_dir / "core/svc.md").read_text(encoding="utf-8")
    assert "(../Handbook/Getting%20Started/intro.md)" in service
    manifest = yaml.load(result.manifest_path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
    assert manifest["nav"][1:] == [
        {"Core": [{"Svc": "core/svc.md"}]},
        {"Handbook": [{"Getting Started": [{"Introduction": "Handbook/Getting Started/intro.md"}]}]},
    ]


def test_validation_issues_are_reported(project) -> None:
    fragment = code_fragment("app.Page", "Docs / Page", "Steps:\n- one\n- two", source_file="app/page.py")

    result = DocsGenerator(project.config()).generate([fragment], project.path() / "site")

    assert [(issue.type, issue.file, issue.line) for issue in result.issues] == [
        ("missing_blank_line_before_list", "app/page.py", 2)
    ]


def test_validation_can_be_disabled(project) -> None:
    fragment = code_fragment("app.Page", "Docs / Page", "Steps:\n- one")

    result = DocsGenerator(project.config(), validate=False).generate([fragment], project.path() / "site")

    assert result.issues == []


def test_render_manifest_keeps_site_settings_first() -> None:
    text = render_manifest({"site_name": "Demo"}, [{"Home": "index.md"}])

    assert text == "site_name: Demo\nnav:\n- Home: index.md\n"
