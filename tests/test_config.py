from __future__ import annotations

from pathlib import Path

import pytest

from funcdocs.config import CONFIG_FILENAME, DEFAULT_SITE, ConfigError, load_config


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.paths == []
    assert config.static_content == []
    assert config.output_dir == tmp_path.resolve() / "docs"
    assert config.docs_dir_name == "generated"
    assert config.site == DEFAULT_SITE
    assert config.site is not DEFAULT_SITE


def test_load_config_reads_yaml(project) -> None:
    project.write(
        {
            CONFIG_FILENAME: """
                paths:
                  - src
                output: build/docs
                templates_dir: doc_templates
                static_content:
                  guides:
                    path: docs/guides
                  handbook:
                    path: docs/handbook
                    nav_prefix: Team Handbook
                site:
                  site_name: Shop Docs
                  docs_dir: pages
                build_command:
                  - mkdocs
                  - build
            """,
        }
    )
    root = project.path().resolve()

    config = load_config(project.path())

    assert config.paths == [root / "src"]
    assert config.output_dir == root / "build/docs"
    assert config.templates_dir == root / "doc_templates"
    assert [(source.name, source.path, source.nav_prefix) for source in config.static_content] == [
        ("guides", root / "docs/guides", "Guides"),
        ("handbook", root / "docs/handbook", "Team Handbook"),
    ]
    assert config.static_labels() == ["Guides", "Team Handbook"]
    assert config.site["site_name"] == "Shop Docs"
    assert config.site["theme"] == DEFAULT_SITE["theme"]
    assert config.docs_dir_name == "pages"
    assert config.build_command == ["mkdocs", "build"]


def test_invalid_yaml_raises(project) -> None:
    project.write({CONFIG_FILENAME: "paths: [unclosed\n"})

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(project.path())


def test_non_mapping_root_raises(project) -> None:
    project.write({CONFIG_FILENAME: "- just\n- a list\n"})

    with pytest.raises(ConfigError):
        load_config(project.path() / CONFIG_FILENAME)


def test_static_entry_requires_a_path(project) -> None:
    project.write({CONFIG_FILENAME: "static_content:\n  guides:\n    nav_prefix: Guides\n"})

    with pytest.raises(ConfigError, match="guides"):
        load_config(project.path())


def test_empty_file_yields_defaults(project) -> None:
    project.write({CONFIG_FILENAME: "\n"})

    config = load_config(project.path())

    assert config.build_command == "docker run --rm -v {path}:/docs squidfunk/mkdocs-material build"
