"""Fragment sources: functional docstrings and static markdown files."""

from .docblocks import DocblockExtractor, parse_docstring
from .static_content import StaticContentReader, parse_static_file

__all__ = [
    "DocblockExtractor",
    "StaticContentReader",
    "parse_docstring",
    "parse_static_file",
]
