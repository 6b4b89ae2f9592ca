"""Glob-like pattern matching and directory traversal.

Supported patterns:
- "*.md"                 direct children of the root only
- "SKILL.md"             a specific file name at the root
- "**/*.md"              file name at any depth
- "**/commands/*.md"     files inside any directory whose path *ends* with commands
- "**/*/SKILL.md"        SKILL.md one directory below anything
- "**/{commands,agents}/*.md"  brace alternatives, results unioned

Intermediate directory patterns anchor to the end of the relative path, so
"**/commands/*.md" matches both project/commands/x.md and
plugins/my-plugin/commands/x.md.
"""

import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterator


logger = logging.getLogger(__name__)

RECURSIVE_PREFIX = '**/'

_BRACE_RE = re.compile(r'\{([^}]+)\}')


@dataclass(frozen=True)
class ParsedPattern:
    recursive: bool
    intermediate: str | None    # e.g. "plugins/*/commands"
    file_pattern: str


def parse_pattern(pattern: str) -> ParsedPattern:
    """Split a pattern into recursion flag, intermediate part and file part."""
    if not pattern.startswith(RECURSIVE_PREFIX):
        return ParsedPattern(recursive=False, intermediate=None, file_pattern=pattern)

    rest = pattern[len(RECURSIVE_PREFIX):]
    if '/' not in rest:
        return ParsedPattern(recursive=True, intermediate=None, file_pattern=rest)

    intermediate, file_pattern = rest.rsplit('/', 1)
    return ParsedPattern(recursive=True, intermediate=intermediate, file_pattern=file_pattern)


def expand_braces(pattern: str) -> list[str]:
    """Expand the first {a,b} group, recursing for any that remain.

    "**/{commands,agents}/*.md" -> ["**/commands/*.md", "**/agents/*.md"]
    """
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]

    prefix = pattern[:match.start()]
    suffix = pattern[match.end():]

    results = []
    for alternative in match.group(1).split(','):
        results.extend(expand_braces(prefix + alternative.strip() + suffix))
    return results


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern:
    parts = []
    for ch in pattern:
        if ch == '*':
            parts.append('.*')
        elif ch == '?':
            parts.append('.')
        else:
            parts.append(re.escape(ch))
    return re.compile(''.join(parts), re.DOTALL)


def matches_glob(name: str, pattern: str) -> bool:
    """Match a single path segment against a glob (* and ? only)."""
    if pattern == '*':
        return True
    return _glob_regex(pattern).fullmatch(name) is not None


def matches_intermediate_suffix(relative_path: str, intermediate: str) -> bool:
    """Check the trailing segments of a directory path against a pattern.

    "project1/commands" matches "commands"; "plugins/my-plugin/commands"
    matches "plugins/*/commands"; "plugin1" matches "*".
    """
    path_segments = relative_path.split('/')
    pattern_segments = intermediate.split('/')

    if len(path_segments) < len(pattern_segments):
        return False

    tail = path_segments[len(path_segments) - len(pattern_segments):]
    return all(matches_glob(seg, pat) for seg, pat in zip(tail, pattern_segments))


def matches_file(file_name: str, relative_path: str, parsed: ParsedPattern) -> bool:
    """Check a file found during the walk against the file pattern.

    Files under intermediate patterns are collected when their directory
    matches, never here.
    """
    if not parsed.recursive:
        return relative_path == file_name and matches_glob(file_name, parsed.file_pattern)

    if parsed.intermediate:
        return False

    return matches_glob(file_name, parsed.file_pattern)


def _list_dir(directory: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        # Permission errors and races: skip this directory, keep walking
        logger.debug("Failed to read directory %s: %s", directory, e)
        return []


def _scan_dir(directory: Path, file_pattern: str) -> Iterator[Path]:
    """Files directly inside a directory matching the file pattern."""
    for entry in _list_dir(directory):
        if entry.is_file(follow_symlinks=False) and matches_glob(entry.name, file_pattern):
            yield directory / entry.name


def _walk(directory: Path, parsed: ParsedPattern, relative_path: str) -> Iterator[Path]:
    for entry in _list_dir(directory):
        full_path = directory / entry.name
        entry_relative = f"{relative_path}/{entry.name}" if relative_path else entry.name

        if entry.is_dir(follow_symlinks=False):
            if not parsed.recursive:
                continue
            if parsed.intermediate and matches_intermediate_suffix(entry_relative, parsed.intermediate):
                yield from _scan_dir(full_path, parsed.file_pattern)
            # Always descend: deeper directories may match too
            yield from _walk(full_path, parsed, entry_relative)
        elif entry.is_file(follow_symlinks=False) and matches_file(entry.name, entry_relative, parsed):
            yield full_path


def find_files(directory: Path, pattern: str) -> list[Path]:
    """All files under directory matching pattern, without duplicates."""
    directory = Path(directory)
    found: dict[Path, None] = {}
    for expanded in expand_braces(pattern):
        for path in _walk(directory, parse_pattern(expanded), ''):
            found.setdefault(path, None)
    return list(found)
