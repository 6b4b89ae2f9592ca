"""JSONL files: one record per line, or per query result within a line.

Each non-blank line is parsed on its own; malformed lines are skipped
without failing the file. With a query, it runs against every line and an
array result is expanded element-wise, the line object becoming the parent
({json:1@path}).
"""

import json
import logging
from pathlib import Path

from .base import Record
from ..query import evaluate_jq


logger = logging.getLogger(__name__)


def _line_records(path: Path, line_data: dict, query: str | None) -> list[Record]:
    if query is None:
        return [Record(path=path, json_data=line_data, expanded=True)]

    result = evaluate_jq(line_data, query)
    if result is None:
        return []

    elements = result if isinstance(result, list) else [result]
    return [
        Record(path=path, json_data=element, parents=[line_data], expanded=True)
        for element in elements
        if isinstance(element, dict)
    ]


def parse_jsonl(path: Path, query: str | None = None) -> list[Record]:
    records = []
    skipped = 0

    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                skipped += 1
                continue
            if not isinstance(data, dict):
                skipped += 1
                continue
            records.extend(_line_records(path, data, query))

    if skipped:
        logger.debug("Skipped %d invalid lines in %s", skipped, path)
    return records
