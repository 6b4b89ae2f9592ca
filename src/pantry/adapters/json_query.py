"""JSON documents, whole or expanded through a jq query.

Without a query a .json file is one record whose fields are reachable as
{json@path}. With a query ("team.json@.members") every object in the
resulting array becomes its own record (a bare stream like ".members[]"
yields only its first value; use "[.members[]]"), and the whole document stays
reachable as {json:1@path}:

    {"team": "core", "members": [{"name": "alice"}, {"name": "bob"}]}

    name: "{json@name}"
    description: "{json:1@team}"
"""

import json
import logging
from pathlib import Path

from .base import ParseSkip, Record, file_mtime_ms
from ..query import evaluate_jq
from ..templates import parse_json_content


logger = logging.getLogger(__name__)


def _load_document(path: Path) -> dict | None:
    try:
        return parse_json_content(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ParseSkip(path, f"invalid JSON: {e}") from e


def parse_json_document(path: Path) -> list[Record]:
    document = _load_document(path)
    return [Record(path=path, json_data=document, mtime_ms=file_mtime_ms(path))]


def parse_json_query(path: Path, query: str) -> list[Record]:
    document = _load_document(path)
    if document is None:
        raise ParseSkip(path, "top-level JSON value is not an object")

    result = evaluate_jq(document, query)
    if not isinstance(result, list):
        logger.debug("Query %r on %s did not produce an array", query, path)
        return []

    return [
        Record(path=path, json_data=element, parents=[document], expanded=True)
        for element in result
        if isinstance(element, dict)
    ]
