"""Resolve {prefix} values from JSON files near a matched file.

An entry's prefixPattern has the form "<glob>@<field.path>", e.g.

    prefixPattern: ".claude-plugin/plugin.json@name"

Starting at the matched file's directory and walking up (never leaving the
entry root), the first directory where the glob finds files wins. The match
closest to the file is read and the dotted field extracted, so commands
inside a plugin get that plugin's name as their prefix.
"""

import json
import logging
from collections import OrderedDict
from pathlib import Path


logger = logging.getLogger(__name__)

CACHE_MAX_SIZE = 100


def parse_prefix_pattern(pattern: str) -> tuple[str, str] | None:
    """Split "glob@field.path" at the last '@'. None if there is no '@'."""
    if '@' not in pattern:
        return None
    glob_pattern, field_path = pattern.rsplit('@', 1)
    return glob_pattern, field_path


def _common_parts(a: Path, b: Path) -> int:
    common = 0
    for x, y in zip(a.parts, b.parts):
        if x != y:
            break
        common += 1
    return common


def find_closest_match(matches: list[Path], target: Path) -> Path | None:
    """The match sharing the longest leading path with target (first wins ties)."""
    if not matches:
        return None
    closest = matches[0]
    for candidate in matches[1:]:
        if _common_parts(candidate, target) > _common_parts(closest, target):
            closest = candidate
    return closest


def extract_field(json_path: Path, field_path: str) -> str:
    """Read a dotted string field from a JSON file; '' when absent or not a string."""
    try:
        value = json.loads(json_path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.debug("Could not read prefix source %s: %s", json_path, e)
        return ''

    for key in field_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return ''

    return value if isinstance(value, str) else ''


class PrefixResolver:
    """Resolves prefixPattern values, caching results per directory."""

    def __init__(self, max_size: int = CACHE_MAX_SIZE):
        self.max_size = max_size
        self._cache: OrderedDict[str, str] = OrderedDict()

    def clear(self) -> None:
        self._cache.clear()

    def _remember(self, key: str, prefix: str) -> str:
        if key not in self._cache and len(self._cache) >= self.max_size:
            self._cache.popitem(last=False)
        self._cache[key] = prefix
        return prefix

    def resolve(self, file_path: Path, prefix_pattern: str, base_path: Path) -> str:
        parts = parse_prefix_pattern(prefix_pattern)
        if not parts:
            return ''
        glob_pattern, field_path = parts

        file_path = Path(file_path)
        search_dir = file_path.parent
        cache_key = f"{search_dir}:{prefix_pattern}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        base_path = Path(base_path).expanduser()
        while search_dir.is_relative_to(base_path):
            try:
                matches = sorted(p for p in search_dir.glob(glob_pattern) if p.is_file())
            except (OSError, ValueError, NotImplementedError) as e:
                logger.debug("Prefix glob %r failed in %s: %s", glob_pattern, search_dir, e)
                matches = []

            closest = find_closest_match(matches, file_path)
            if closest is not None:
                return self._remember(cache_key, extract_field(closest, field_path))

            if search_dir.parent == search_dir:
                break
            search_dir = search_dir.parent

        return self._remember(cache_key, '')
