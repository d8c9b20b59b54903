"""Small markdown text helpers shared by the sources and the assembly engine."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Optional

_H1_PATTERN = re.compile(r"^#\s+(.+)$")
_LIST_ITEM_PATTERN = re.compile(r"^(?:[-*+]\s+|\d+\.\s+)")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def first_heading(lines: Iterable[str] | str) -> Optional[str]:
    """Return the text of a top-level heading found at the start of the content.

    Leading blank lines are skipped; the search stops at the first non-blank
    line that is not a ``# `` heading.
    """
    if isinstance(lines, str):
        lines = lines.split("\n")
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        match = _H1_PATTERN.match(stripped)
        if match:
            return match.group(1).strip()
        break
    return None


def starts_with_heading(text: str) -> bool:
    return bool(re.match(r"^#\s+", text.strip()))


def is_list_item(line: str) -> bool:
    return bool(_LIST_ITEM_PATTERN.match(line.lstrip()))


def is_fence(line: str) -> bool:
    return line.strip().startswith("```")


def slug(value: str) -> str:
    """URL slug for navigation segments: ``Auth Service::login`` -> ``auth-service-login``."""
    value = value.replace("::", "-")
    ascii_value = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    return _NON_ALNUM.sub("-", ascii_value.lower()).strip("-")


def ucwords(value: str) -> str:
    """Upper-case the first letter of each space separated word, leaving the rest alone."""
    return " ".join(word[:1].upper() + word[1:] for word in value.split(" "))


__all__ = [
    "first_heading",
    "is_fence",
    "is_list_item",
    "slug",
    "starts_with_heading",
    "ucwords",
]
