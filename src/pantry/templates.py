"""Template resolution for entry fields.

Placeholders:
- {prefix}              prefix resolved from the entry's prefixPattern
- {basename}            file name without extension
- {dirname}             parent directory name
- {dirname:N}           directory name N levels up ({dirname:2} = grandparent)
- {frontmatter@field}   any frontmatter field
- {heading}             first "# " heading (first non-blank line for plain text)
- {json@path}           value from the record's JSON data (dots, [0], [-1])
- {json:N@path}         value from the N-th parent document (1 = direct parent)
- {line}, {content}, {filepath}

Fallback: "A|B" resolves B when A comes out empty, e.g.
"{frontmatter@description}|{heading}".

Placeholders whose data is absent from the context are left as written.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any


_DIRNAME_LEVEL_RE = re.compile(r'\{dirname:(\d+)\}')
_FRONTMATTER_RE = re.compile(r'\{frontmatter@([^}]+)\}')
_PARENT_JSON_RE = re.compile(r'\{json:(\d+)@([^}]+)\}')
_JSON_RE = re.compile(r'\{json@([^}]+)\}')

_FRONTMATTER_BLOCK_RE = re.compile(r'\A---\s*\n(.*?)\n---', re.DOTALL)
_FRONTMATTER_SKIP_RE = re.compile(r'\A---\s*\n.*?\n---\s*\n?', re.DOTALL)
_FRONTMATTER_LINE_RE = re.compile(r'^([a-zA-Z0-9_-]+):\s*(.+)$')
_HEADING_RE = re.compile(r'^# (.+)$', re.MULTILINE)
_INDEX_TOKEN_RE = re.compile(r'^\[(-?\d+)\]$')


@dataclass
class TemplateContext:
    """Everything a template may reference for one record."""
    basename: str
    frontmatter: dict[str, str] = field(default_factory=dict)
    prefix: str | None = None
    dirname: str | None = None
    file_path: str | None = None
    heading: str | None = None
    line: str | None = None
    content: str | None = None
    json_data: dict[str, Any] | None = None
    # Enclosing documents for expanded records, nearest first
    parents: list[dict[str, Any]] | None = None


def resolve_template(template: str, context: TemplateContext) -> str:
    """Resolve placeholders in template against context.

    >>> resolve_template("agent-{frontmatter@name}",
    ...                  TemplateContext(basename="agent", frontmatter={"name": "helper"}))
    'agent-helper'
    """
    if '|' in template:
        primary, fallback = template.split('|', 1)
        return resolve_template(primary, context) or resolve_template(fallback, context)

    result = template

    if context.prefix is not None:
        result = result.replace('{prefix}', context.prefix)

    result = result.replace('{basename}', context.basename)

    if context.file_path:
        file_path = context.file_path
        result = _DIRNAME_LEVEL_RE.sub(lambda m: get_dirname(file_path, int(m.group(1))), result)
    if context.dirname is not None:
        result = result.replace('{dirname}', context.dirname)

    result = result.replace('{heading}', context.heading or '')
    result = result.replace('{line}', context.line or '')
    result = result.replace('{content}', context.content or '')
    result = result.replace('{filepath}', context.file_path or '')

    result = _FRONTMATTER_RE.sub(lambda m: context.frontmatter.get(m.group(1), ''), result)

    if context.parents is not None:
        parents = context.parents

        def _parent_value(m: re.Match) -> str:
            index = int(m.group(1)) - 1
            if index < 0 or index >= len(parents):
                return ''
            return resolve_json_path(parents[index], m.group(2))

        result = _PARENT_JSON_RE.sub(_parent_value, result)

    if context.json_data is not None:
        data = context.json_data
        result = _JSON_RE.sub(lambda m: resolve_json_path(data, m.group(1)), result)

    return result


def get_dirname(file_path: str, level: int = 1) -> str:
    """Name of the directory `level` steps above the file (1 = parent)."""
    parts = str(file_path).split('/')
    index = len(parts) - 1 - level
    return parts[index] if index >= 0 else ''


def get_basename(file_path: str) -> str:
    """File name without its last extension."""
    name = str(file_path).split('/')[-1]
    return re.sub(r'\.[^.]+$', '', name)


def parse_frontmatter(content: str) -> dict[str, str]:
    """Parse a leading --- block into flat key/value strings.

    Only single-line "key: value" pairs are read; surrounding quotes are
    stripped. Values are kept verbatim otherwise, so "[message]" stays text.
    """
    match = _FRONTMATTER_BLOCK_RE.match(content)
    if not match or not match.group(1):
        return {}

    result = {}
    for line in match.group(1).split('\n'):
        line_match = _FRONTMATTER_LINE_RE.match(line)
        if not line_match:
            continue
        value = line_match.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        result[line_match.group(1)] = value
    return result


def extract_raw_frontmatter(content: str) -> str:
    """The frontmatter block text (without the --- fences), trimmed."""
    match = _FRONTMATTER_BLOCK_RE.match(content)
    return match.group(1).strip() if match else ''


def parse_first_heading(content: str) -> str:
    """First "# " heading after any frontmatter block."""
    body = content
    skip = _FRONTMATTER_SKIP_RE.match(content)
    if skip:
        body = content[skip.end():]

    match = _HEADING_RE.search(body)
    return match.group(1).strip() if match else ''


def parse_first_line(content: str) -> str:
    """First non-blank line, stripped (plain-text "heading")."""
    for line in content.split('\n'):
        if line.strip():
            return line.strip()
    return ''


def parse_json_content(content: str) -> dict[str, Any] | None:
    """Parse JSON text; None unless it is a JSON object.

    Raises json.JSONDecodeError for malformed input.
    """
    parsed = json.loads(content)
    if not isinstance(parsed, dict):
        return None
    return parsed


def _stringify(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(',', ':'))
    return str(value)


def _tokenize_json_path(path: str) -> list[str]:
    # "items[0].name" -> ["items", "[0]", "name"]
    tokens = []
    for part in re.split(r'\.|\[', path):
        if not part:
            continue
        tokens.append('[' + part if part.endswith(']') else part)
    return tokens


def resolve_json_path(data: dict[str, Any], path: str) -> str:
    """Follow a dotted/indexed path into data and render the value as text.

    Missing values give ''. Objects and arrays render as compact JSON.
    """
    current: Any = data

    for token in _tokenize_json_path(path):
        if current is None:
            return ''

        index_match = _INDEX_TOKEN_RE.match(token)
        if index_match:
            if not isinstance(current, list):
                return ''
            index = int(index_match.group(1))
            if index < 0:
                index += len(current)
            current = current[index] if 0 <= index < len(current) else None
        else:
            if not isinstance(current, dict):
                return ''
            current = current.get(token)

    return _stringify(current)
