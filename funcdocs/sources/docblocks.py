"""Extracts ``@functional`` documentation from Python docstrings."""

from __future__ import annotations

import ast
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from ..logging import get_logger
from ..markdown import is_fence, is_list_item
from ..models import NAV_SEPARATOR, UNCATEGORISED, Fragment, FragmentKind

FUNCTIONAL_TAG = "@functional"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    "build",
    "dist",
}

_DocumentedNode = Union[ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef]


@dataclass
class DocblockMetadata:
    """Annotations collected from a functional docstring."""

    nav_path: Optional[str] = None
    nav_id: Optional[str] = None
    nav_parent: Optional[str] = None
    uses: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)


class DocblockExtractor:
    """Turns functional docstrings under the configured paths into fragments."""

    def __init__(self) -> None:
        self.logger = get_logger("sources.docblocks")

    def extract(self, paths: Sequence[Path]) -> List[Fragment]:
        fragments: List[Fragment] = []
        for base in paths:
            if not base.exists():
                self.logger.warning("Source path %s does not exist; skipping", base)
                continue
            for file_path in self._iter_python_files(base):
                fragments.extend(self.extract_file(file_path, base))
        self.logger.info("Found %d documentation fragments in source code", len(fragments))
        return fragments

    def extract_file(self, file_path: Path, base: Path) -> List[Fragment]:
        """Parse one module; a file that cannot be parsed yields no fragments."""
        try:
            source = file_path.read_text(encoding="utf-8")
            tree = ast.parse(source, filename=str(file_path))
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
            self.logger.error("Error parsing file %s: %s", file_path, exc)
            return []

        module_name = _module_name(file_path, base)
        fragments: List[Fragment] = []
        for node, qualname, default_title in _walk_documented(tree, module_name):
            docstring = ast.get_docstring(node, clean=True)
            if not docstring or FUNCTIONAL_TAG not in docstring:
                continue
            fragment = parse_docstring(
                docstring,
                owner=qualname,
                default_title=default_title,
                source_file=str(file_path),
                start_line=getattr(node, "lineno", 1),
            )
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    @staticmethod
    def _iter_python_files(base: Path) -> Iterator[Path]:
        if base.is_file():
            if base.suffix == ".py":
                yield base
            return
        for path in sorted(base.rglob("*.py")):
            relative_parts = path.relative_to(base).parts[:-1]
            if any(part in _EXCLUDED_DIRS for part in relative_parts):
                continue
            yield path


def parse_docstring(
    docstring: str,
    *,
    owner: str,
    default_title: str,
    source_file: Optional[str] = None,
    start_line: Optional[int] = None,
) -> Optional[Fragment]:
    """Build a fragment from a functional docstring, or ``None`` when it is empty."""
    if FUNCTIONAL_TAG not in docstring:
        return None
    lines = docstring.split("\n")
    metadata = _collect_metadata(lines)
    body_lines = _isolate_functional_block(lines)
    body_lines = _deindent(body_lines)
    body_lines = _separate_lists(body_lines)
    body_lines = _demote_headings(body_lines)

    if not any(line.strip() for line in body_lines) and not metadata.uses:
        return None

    nav_path = metadata.nav_path or f"{UNCATEGORISED}{NAV_SEPARATOR}{default_title}"
    return Fragment(
        owner=owner,
        nav_path=nav_path,
        description="\n".join(body_lines).strip("\n"),
        kind=FragmentKind.CODE,
        nav_id=metadata.nav_id,
        nav_parent=metadata.nav_parent,
        uses=tuple(metadata.uses),
        links=tuple(metadata.links),
        source_file=source_file,
        start_line=start_line,
    )


def _collect_metadata(lines: Iterable[str]) -> DocblockMetadata:
    metadata = DocblockMetadata()
    for line in lines:
        parts = line.strip().lstrip("* ").split(None, 1)
        if not parts:
            continue
        directive = parts[0]
        value = parts[1].strip() if len(parts) > 1 else ""
        if directive == "@navid":
            metadata.nav_id = value
        elif directive == "@navparent":
            metadata.nav_parent = value
        elif directive == "@nav":
            metadata.nav_path = value
        elif directive == "@uses" and value:
            metadata.uses.append(value)
        elif directive in ("@link", "@links") and value:
            metadata.links.append(value)
    return metadata


def _isolate_functional_block(lines: Sequence[str]) -> List[str]:
    collected: List[str] = []
    inside = False
    for line in lines:
        if not inside:
            if line.strip().startswith(FUNCTIONAL_TAG):
                inside = True
                remainder = re.sub(r"@functional\s*", "", line, count=1)
                if remainder.strip():
                    collected.append(remainder)
            continue
        # Any annotation, even inside a bullet, ends the description.
        if line.strip().lstrip("*- ").startswith("@"):
            break
        collected.append(line)
    return collected


def _deindent(lines: List[str]) -> List[str]:
    min_indent: Optional[int] = None
    in_fence = False
    for line in lines:
        if is_fence(line):
            in_fence = not in_fence
            continue
        if in_fence or not line.strip():
            continue
        indent = len(line) - len(line.lstrip(" "))
        if min_indent is None or indent < min_indent:
            min_indent = indent
    if not min_indent:
        return list(lines)
    prefix = " " * min_indent
    return [line[min_indent:] if line.startswith(prefix) else line for line in lines]


def _separate_lists(lines: List[str]) -> List[str]:
    if not lines:
        return []
    fixed = [lines[0]]
    for previous, current in zip(lines, lines[1:]):
        if is_list_item(current) and previous.strip() and not is_list_item(previous):
            fixed.append("")
        fixed.append(current)
    return fixed


def _demote_headings(lines: List[str]) -> List[str]:
    demoted: List[str] = []
    in_fence = False
    for line in lines:
        if is_fence(line):
            in_fence = not in_fence
        stripped = line.lstrip()
        if not in_fence and stripped.startswith("#"):
            demoted.append("#" + stripped)
        else:
            demoted.append(line)
    return demoted


def _module_name(file_path: Path, base: Path) -> str:
    root = base if base.is_dir() else base.parent
    relative = file_path.relative_to(root).with_suffix("")
    parts = list(relative.parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts:
        parts = [root.name]
    return ".".join(parts)


def _walk_documented(
    tree: ast.Module, module_name: str
) -> Iterator[tuple[_DocumentedNode, str, str]]:
    yield tree, module_name, module_name.rsplit(".", 1)[-1]
    yield from _walk_body(tree.body, module_name, class_name=None)


def _walk_body(
    body: Sequence[ast.stmt], prefix: str, class_name: Optional[str]
) -> Iterator[tuple[_DocumentedNode, str, str]]:
    for node in body:
        if isinstance(node, ast.ClassDef):
            qualname = f"{prefix}.{node.name}"
            yield node, qualname, node.name
            yield from _walk_body(node.body, qualname, class_name=node.name)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            qualname = f"{prefix}.{node.name}"
            title = f"{class_name}.{node.name}" if class_name else node.name
            yield node, qualname, title


__all__ = ["DocblockExtractor", "FUNCTIONAL_TAG", "parse_docstring"]
