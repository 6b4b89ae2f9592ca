"""Markdown and plain-text files: one record per file.

Markdown (and YAML) files expose their frontmatter fields, the raw
frontmatter block for display, and the first "# " heading:

    ---
    description: Commit staged changes
    argument-hint: [message]
    ---

    # Commit

Plain-text files have no frontmatter; their "heading" is the first
non-blank line.
"""

from pathlib import Path

from .base import Record, file_mtime_ms
from ..templates import (
    extract_raw_frontmatter,
    parse_first_heading,
    parse_first_line,
    parse_frontmatter,
)


def parse_markdown(path: Path) -> list[Record]:
    content = path.read_text(encoding='utf-8')
    return [Record(
        path=path,
        frontmatter=parse_frontmatter(content),
        raw_frontmatter=extract_raw_frontmatter(content),
        heading=parse_first_heading(content),
        mtime_ms=file_mtime_ms(path),
    )]


def parse_plain_text(path: Path) -> list[Record]:
    content = path.read_text(encoding='utf-8')
    return [Record(
        path=path,
        heading=parse_first_line(content),
        mtime_ms=file_mtime_ms(path),
    )]
