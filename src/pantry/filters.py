"""Enable/disable matching for item names.

Patterns are exact names ("commit") or prefixes with a trailing star
("ralph-loop:*"). Used both per entry and for the global settings lists.
"""

from typing import Iterable


def match_name(pattern: str, name: str) -> bool:
    """Exact match, or prefix match when the pattern ends with '*'."""
    if pattern.endswith('*'):
        return name.startswith(pattern[:-1])
    return pattern == name


def is_enabled(
    name: str,
    enable: Iterable[str] | None = None,
    disable: Iterable[str] | None = None,
) -> bool:
    """Decide whether a name survives the allow/deny lists.

    With a non-empty allow-list the name must match one of its patterns.
    A match in the deny-list always disables, even if also allowed.
    No lists at all means everything is enabled.
    """
    if enable:
        if not any(match_name(p, name) for p in enable):
            return False

    if disable:
        if any(match_name(p, name) for p in disable):
            return False

    return True
