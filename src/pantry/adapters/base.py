"""Shared record type for the content adapters."""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any

from ..templates import TemplateContext, get_basename, get_dirname


class ParseSkip(Exception):
    """Raised by a parser when a file yields no records; carries the reason."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class Record:
    """One raw unit ready for template resolution."""
    path: Path
    frontmatter: dict[str, str] = field(default_factory=dict)
    raw_frontmatter: str = ''
    heading: str = ''
    json_data: dict[str, Any] | None = None
    parents: list[dict[str, Any]] | None = None
    mtime_ms: float | None = None
    expanded: bool = False    # from a query/JSONL expansion; needs a non-empty name

    def context(self, prefix: str = '') -> TemplateContext:
        file_path = str(self.path)
        return TemplateContext(
            basename=get_basename(file_path),
            frontmatter=self.frontmatter,
            prefix=prefix,
            dirname=get_dirname(file_path),
            file_path=file_path,
            heading=self.heading,
            json_data=self.json_data,
            parents=self.parents,
        )


def file_mtime_ms(path: Path) -> float:
    return path.stat().st_mtime * 1000
