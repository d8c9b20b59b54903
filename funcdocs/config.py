"""Configuration loading for funcdocs (.funcdocs.yml)."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

CONFIG_FILENAME = ".funcdocs.yml"

DEFAULT_DOCS_DIR = "generated"

DEFAULT_BUILD_COMMAND = "docker run --rm -v {path}:/docs squidfunk/mkdocs-material build"

DEFAULT_SITE: Dict[str, Any] = {
    "site_name": "Functional Documentation",
    "docs_dir": DEFAULT_DOCS_DIR,
    "theme": {
        "name": "material",
        "palette": {"scheme": "default", "primary": "indigo", "accent": "indigo"},
        "features": [
            "navigation.instant",
            "navigation.tracking",
            "navigation.top",
            "navigation.indexes",
            "content.diagram",
        ],
    },
    "markdown_extensions": [
        "admonition",
        "pymdownx.details",
        "attr_list",
        {"pymdownx.highlight": {"anchor_linenums": True}},
        "pymdownx.inlinehilite",
        {
            "pymdownx.superfences": {
                "custom_fences": [
                    {
                        "name": "mermaid",
                        "class": "mermaid",
                        "format": "!!python/name:pymdownx.superfences.fence_code_format",
                    }
                ]
            }
        },
    ],
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class StaticContentSource:
    """A directory of standalone markdown files merged into the site."""

    name: str
    path: Path
    nav_prefix: str


@dataclass
class DocsConfig:
    """Represents the settings defined in .funcdocs.yml."""

    root: Path
    paths: List[Path] = field(default_factory=list)
    output: Optional[Path] = None
    static_content: List[StaticContentSource] = field(default_factory=list)
    site: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_SITE))
    templates_dir: Optional[Path] = None
    build_command: Union[str, List[str]] = DEFAULT_BUILD_COMMAND

    @property
    def docs_dir_name(self) -> str:
        return str(self.site.get("docs_dir") or DEFAULT_DOCS_DIR)

    @property
    def output_dir(self) -> Path:
        return self.output or (self.root / "docs")

    def static_labels(self) -> List[str]:
        """Navigation labels that mark a section as static content."""
        return [source.nav_prefix for source in self.static_content]


def load_config(config_path: Path) -> DocsConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    paths = [_resolve(root, item) for item in _as_str_list(data.get("paths"))]

    output_str = _as_str(data.get("output"))
    output = _resolve(root, output_str) if output_str else None

    templates_str = _as_str(data.get("templates_dir"))
    templates_dir = _resolve(root, templates_str) if templates_str else None

    static_content = _parse_static_content(root, data.get("static_content"))

    site = copy.deepcopy(DEFAULT_SITE)
    site_data = data.get("site")
    if site_data is not None:
        if not isinstance(site_data, dict):
            raise ConfigError("'site' must be a mapping of mkdocs settings")
        site.update(site_data)

    build_command = _parse_build_command(data.get("build_command"))

    return DocsConfig(
        root=root,
        paths=paths,
        output=output,
        static_content=static_content,
        site=site,
        templates_dir=templates_dir,
        build_command=build_command,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _parse_static_content(root: Path, value: Any) -> List[StaticContentSource]:
    if value is None:
        return []
    if not isinstance(value, dict):
        raise ConfigError("'static_content' must map content types to {path, nav_prefix}")
    sources: List[StaticContentSource] = []
    for name, entry in value.items():
        entry = _as_dict(entry)
        path_str = _as_str(entry.get("path"))
        if not path_str:
            raise ConfigError(f"static_content.{name} is missing a 'path'")
        nav_prefix = _as_str(entry.get("nav_prefix")) or _ucfirst(str(name))
        sources.append(
            StaticContentSource(name=str(name), path=_resolve(root, path_str), nav_prefix=nav_prefix)
        )
    return sources


def _parse_build_command(value: Any) -> Union[str, List[str]]:
    if value is None:
        return DEFAULT_BUILD_COMMAND
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, (str, int)) for item in value):
        return [str(item) for item in value]
    raise ConfigError("'build_command' must be a string or a list of arguments")


def _resolve(root: Path, value: str) -> Path:
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else root / candidate


def _ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_SITE",
    "DocsConfig",
    "StaticContentSource",
    "load_config",
]
