"""Authoring checks for functional documentation bodies.

The validator never blocks generation: every finding is reported back to the
caller, which logs it and carries on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Sequence

from ..markdown import is_list_item

_HEADING = re.compile(r"^#+\s+")
_BLOCKQUOTE = re.compile(r"^\s*>")
_TOC_MARKER = re.compile(r"<!--\s*TOC\s*-->", re.IGNORECASE)
_ABSOLUTE_LINK = re.compile(r"\[([^\]]+)\]\((/[^)]+)\)")
_PROTOCOL_RELATIVE = re.compile(r"^//(www\.|[a-z0-9-]+\.)")
_MARKER = re.compile(r"@(ref|navid):([^\s\])]+)")
_PATH_PREFIX = re.compile(r"^(\.|/)")

SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


@dataclass
class ValidationIssue:
    """A single authoring problem found in a documentation body."""

    type: str
    severity: str
    file: str
    line: int
    message: str
    context: Dict[str, str] = field(default_factory=dict)
    suggestion: Optional[str] = None


class MarkdownValidator:
    """Detects markdown that renders badly or links nowhere once published."""

    name = "markdown"

    def validate(self, content: str, file_path: str = "unknown") -> List[ValidationIssue]:
        lines = content.split("\n")
        issues: List[ValidationIssue] = []
        issues.extend(self._check_blank_line_before_lists(lines, file_path))
        issues.extend(self._check_absolute_links(lines, file_path))
        issues.extend(self._check_ref_targets(lines, file_path))
        return issues

    def _check_blank_line_before_lists(self, lines: Sequence[str], file_path: str) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for index in range(1, len(lines)):
            current, previous = lines[index], lines[index - 1]
            if not is_list_item(current) or not previous.strip() or is_list_item(previous):
                continue
            if _HEADING.match(previous) or _BLOCKQUOTE.match(current) or _TOC_MARKER.search(previous):
                continue
            issues.append(
                ValidationIssue(
                    type="missing_blank_line_before_list",
                    severity=SEVERITY_WARNING,
                    file=file_path,
                    line=index + 1,
                    message=f'Missing blank line before list item. Previous line: "{_truncate(previous, 50)}"',
                    context={"previous_line": previous, "current_line": current},
                )
            )
        return issues

    def _check_absolute_links(self, lines: Sequence[str], file_path: str) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for number, line in enumerate(lines, start=1):
            for match in _ABSOLUTE_LINK.finditer(line):
                text, target = match.group(1), match.group(2)
                if _PROTOCOL_RELATIVE.match(target):
                    continue
                issues.append(
                    ValidationIssue(
                        type="absolute_file_link",
                        severity=SEVERITY_WARNING,
                        file=file_path,
                        line=number,
                        message=f'Absolute file path link "{_truncate(target, 60)}" will not work in web documentation',
                        context={"current_line": line, "link_text": text, "link_path": target},
                        suggestion=_suggest_link_fix(target),
                    )
                )
        return issues

    def _check_ref_targets(self, lines: Sequence[str], file_path: str) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for number, line in enumerate(lines, start=1):
            for match in _MARKER.finditer(line):
                kind, target = match.group(1), match.group(2)
                # Stable ids are free-form; only owner references must be symbols.
                if kind != "ref":
                    continue
                reason = _file_path_reason(target)
                if reason is None:
                    continue
                issues.append(
                    ValidationIssue(
                        type="ref_syntax_misuse",
                        severity=SEVERITY_ERROR,
                        file=file_path,
                        line=number,
                        message=f"@ref syntax used with file path instead of a qualified name ({reason})",
                        context={"current_line": line, "ref_target": target, "ref_type": kind},
                        suggestion=_suggest_ref_fix(target),
                    )
                )
        return issues


def _file_path_reason(target: str) -> Optional[str]:
    # Static owners look like "guides:setup/intro.md" and are legitimate targets.
    if re.match(r"^[A-Za-z0-9_-]+:", target):
        return None
    if _PATH_PREFIX.match(target):
        return "starts with a file path indicator (/, ./, etc.)"
    if "/" in target:
        return "contains forward slashes (/)"
    if target.endswith(".py"):
        return "ends with .py extension"
    return None


def _suggest_link_fix(target: str) -> str:
    if target.endswith(".py"):
        return (
            "Options:\n"
            f"      1. Use code block (no link): `{target}`\n"
            f"      2. If the symbol is documented, use: [@ref:{_dotted_name(target)}]\n"
            "      3. Use relative path if file exists in docs"
        )
    return (
        "Options:\n"
        f"      1. Use code block (no link): `{target}`\n"
        "      2. Use relative path if file exists in docs"
    )


def _suggest_ref_fix(target: str) -> str:
    suggestion = "@ref syntax expects a fully-qualified name, not a file path.\n\n"
    if target.endswith(".py"):
        dotted = _dotted_name(target)
        return suggestion + (
            "Correct syntax:\n"
            f"      [@ref:{dotted}]\n\n"
            "Alternative:\n"
            f"      If you don't want a link, use a code block: `{dotted.rsplit('.', 1)[-1]}`"
        )
    return suggestion + (
        "Example of correct syntax:\n"
        "      [@ref:app.services.MyService]\n\n"
        "Alternative:\n"
        f"      Use a code block if you don't need a link: `{target}`"
    )


def _dotted_name(path: str) -> str:
    parts = [part for part in PurePosixPath(path.strip("/")).with_suffix("").parts if part not in (".", "..")]
    if "src" in parts:
        parts = parts[parts.index("src") + 1:]
    return ".".join(parts) or path


def _truncate(text: str, length: int = 50) -> str:
    text = text.strip()
    return text if len(text) <= length else text[:length] + "..."


def format_issues(issues: Sequence[ValidationIssue]) -> str:
    """Render issues as a console report; empty input gives an empty string."""
    if not issues:
        return ""
    rule = "=" * 80
    out = [rule, f"Markdown Validation Warnings ({len(issues)} issues found)", rule, ""]
    for issue in issues:
        out.append(f"[{issue.severity.upper()}] {PurePosixPath(issue.file).name}:{issue.line}")
        out.append(f"  {issue.message}")
        if issue.context:
            out.append("  Context:")
            if "previous_line" in issue.context:
                out.append(f"    Line {issue.line - 1}: {issue.context['previous_line'].strip()}")
            if "current_line" in issue.context:
                out.append(f"    Line {issue.line}: {issue.context['current_line'].strip()}")
            if "link_text" in issue.context and "link_path" in issue.context:
                out.append(f"    Link text: {issue.context['link_text']}")
                out.append(f"    Link path: {issue.context['link_path']}")
        if issue.suggestion:
            out.append("  Suggestion:")
            out.append("    " + issue.suggestion.replace("\n", "\n    "))
        out.append("")
    out.append(rule)
    return "\n".join(out) + "\n"


__all__ = [
    "MarkdownValidator",
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "ValidationIssue",
    "format_issues",
]
