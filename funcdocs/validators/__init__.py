"""Validation of documentation bodies before they are published."""

from .markdown import (
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    MarkdownValidator,
    ValidationIssue,
    format_issues,
)

__all__ = [
    "MarkdownValidator",
    "SEVERITY_ERROR",
    "SEVERITY_WARNING",
    "ValidationIssue",
    "format_issues",
]
