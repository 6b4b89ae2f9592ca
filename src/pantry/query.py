"""Nested-query evaluation for JSON documents, backed by jq.

Patterns like "**/config.json@.members" carry a jq expression after "@".
The expression is applied to the parsed document; an array result is
expanded into one item per element by the adapters.
"""

import logging
from functools import lru_cache
from typing import Any

import jq


logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _compile(expression: str):
    return jq.compile(expression)


def evaluate_jq(data: Any, expression: str) -> Any:
    """Evaluate a jq expression against data.

    Returns the first value the expression yields, or None when it yields
    nothing. A stream such as ".members[]" gives only its first element;
    wrap it as "[.members[]]" to get every element as one array.
    Malformed expressions and runtime errors return None instead of raising.
    """
    try:
        outputs = _compile(expression).input_value(data).all()
    except ValueError as e:
        logger.warning("jq evaluation failed for %r: %s", expression, e)
        return None

    if not outputs:
        return None
    if len(outputs) > 1:
        logger.debug("jq expression %r yielded %d values; using the first", expression, len(outputs))
    result = outputs[0]
    logger.debug(
        "jq evaluation of %r returned %s",
        expression,
        f"list of {len(result)}" if isinstance(result, list) else type(result).__name__,
    )
    return result
