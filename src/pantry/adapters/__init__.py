"""Content adapters: turn a matched file into raw records.

The format is chosen once per file from its extension and whether the
entry's pattern carries a query suffix ("config.json@.members").
"""

import logging
from enum import Enum
from pathlib import Path

from .base import ParseSkip, Record
from .json_query import parse_json_document, parse_json_query
from .jsonl import parse_jsonl
from .markdown import parse_markdown, parse_plain_text


logger = logging.getLogger(__name__)

QUERY_SEPARATOR = '@.'

# Extensions parsed for frontmatter/heading; anything else is plain text
STRUCTURED_EXTENSIONS = frozenset({'.md', '.json', '.jsonl', '.yaml', '.yml'})


class ContentFormat(Enum):
    MARKDOWN = 'markdown'
    JSON = 'json'
    JSON_QUERY = 'json_query'
    JSONL = 'jsonl'
    JSONL_QUERY = 'jsonl_query'
    PLAIN_TEXT = 'plain_text'


def split_query(pattern: str) -> tuple[str, str | None]:
    """Split "glob@.query" into ("glob", ".query"); no suffix gives None."""
    index = pattern.find(QUERY_SEPARATOR)
    if index == -1:
        return pattern, None
    return pattern[:index], pattern[index + 1:]


def detect_format(path: Path, query: str | None) -> ContentFormat:
    name = path.name
    if name.endswith('.json'):
        return ContentFormat.JSON_QUERY if query else ContentFormat.JSON
    if name.endswith('.jsonl'):
        return ContentFormat.JSONL_QUERY if query else ContentFormat.JSONL
    if path.suffix.lower() in STRUCTURED_EXTENSIONS:
        return ContentFormat.MARKDOWN
    return ContentFormat.PLAIN_TEXT


def parse_file(path: Path, query: str | None = None) -> list[Record]:
    """Parse one file into records. Never raises for unreadable or bad content."""
    path = Path(path)
    content_format = detect_format(path, query)

    try:
        if content_format is ContentFormat.JSON_QUERY:
            return parse_json_query(path, query)
        if content_format in (ContentFormat.JSONL, ContentFormat.JSONL_QUERY):
            return parse_jsonl(path, query)
        if content_format is ContentFormat.JSON:
            return parse_json_document(path)
        if content_format is ContentFormat.MARKDOWN:
            return parse_markdown(path)
        return parse_plain_text(path)
    except ParseSkip as e:
        logger.warning("Skipped %s: %s", path, e.reason)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
    return []


__all__ = [
    "ContentFormat",
    "ParseSkip",
    "Record",
    "STRUCTURED_EXTENSIONS",
    "detect_format",
    "parse_file",
    "split_query",
]
