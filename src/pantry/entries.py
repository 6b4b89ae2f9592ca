"""Search entries (configuration) and search items (results).

An entry describes where to look and how to turn each match into an item:

    name: "agent-{basename}"
    type: mention
    description: "{frontmatter@description}|{heading}"
    path: ~/.claude/agents
    pattern: "*.md"

Items are rebuilt from scratch on every cache refresh and never mutated.
"""

from pathlib import Path
from dataclasses import dataclass, fields
from typing import Any

from .filters import is_enabled


COMMAND = 'command'
MENTION = 'mention'
SEARCH_TYPES = (COMMAND, MENTION)

# displayTime value meaning "explicitly hidden", as opposed to unset
DISPLAY_TIME_HIDDEN = 'none'

# Settings files from the editor extension use camelCase keys
_CAMEL_KEYS = {
    'argumentHint': 'argument_hint',
    'inputFormat': 'input_format',
    'searchPrefix': 'search_prefix',
    'orderBy': 'order_by',
    'displayTime': 'display_time',
    'prefixPattern': 'prefix_pattern',
    'maxSuggestions': 'max_suggestions',
}


def _as_patterns(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class SearchEntry:
    """A configured content source: root path + pattern + templates."""
    name: str
    description: str
    type: str                       # command | mention
    path: str                       # may start with ~
    pattern: str                    # glob, optionally suffixed with @.<query>
    label: str | None = None
    color: str | None = None        # template, or "template|literal"
    icon: str | None = None
    argument_hint: str | None = None
    input_format: str | None = None
    search_prefix: str | None = None
    order_by: str | None = None     # "<field> [asc|desc]"
    display_time: str | None = None
    prefix_pattern: str | None = None
    max_suggestions: int | None = None
    enable: tuple[str, ...] | None = None
    disable: tuple[str, ...] | None = None

    @property
    def source_id(self) -> str:
        # Unexpanded path, so the id matches what the user configured
        return f"{self.path}:{self.pattern}"

    @property
    def root(self) -> Path:
        return Path(self.path).expanduser()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'SearchEntry':
        """Build an entry from a settings mapping.

        Accepts snake_case keys and the camelCase spelling used by the editor
        settings format. Unknown keys are ignored. A missing required key
        raises KeyError.
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = _CAMEL_KEYS.get(key, key)
            if key in known:
                values[key] = value

        for key in ('name', 'description', 'type', 'path', 'pattern'):
            if key not in values:
                raise KeyError(key)

        values['enable'] = _as_patterns(values.get('enable'))
        values['disable'] = _as_patterns(values.get('disable'))
        return cls(**values)


@dataclass(frozen=True)
class SearchItem:
    """A resolved, display-ready command or mention."""
    name: str
    description: str
    type: str
    file_path: str
    source_id: str                  # "path:pattern" of the originating entry
    sort_key: str | None = None
    frontmatter: str | None = None  # raw frontmatter block, for display
    label: str | None = None
    color: str | None = None
    icon: str | None = None
    argument_hint: str | None = None
    input_format: str | None = None
    updated_at: float | None = None      # file mtime, epoch ms
    display_time: float | str | None = None

    @property
    def display_time_hidden(self) -> bool:
        return self.display_time == DISPLAY_TIME_HIDDEN

    def to_dict(self) -> dict[str, Any]:
        """Render with camelCase keys, leaving out unset optional fields."""
        result = {
            'name': self.name,
            'description': self.description,
            'type': self.type,
            'filePath': self.file_path,
            'sourceId': self.source_id,
        }
        optional = {
            'sortKey': self.sort_key,
            'frontmatter': self.frontmatter,
            'label': self.label,
            'color': self.color,
            'icon': self.icon,
            'argumentHint': self.argument_hint,
            'inputFormat': self.input_format,
            'updatedAt': self.updated_at,
            'displayTime': self.display_time,
        }
        for key, value in optional.items():
            if value is not None:
                result[key] = value
        return result


@dataclass(frozen=True)
class NameFilter:
    """Allow/deny lists of item names (exact, or prefix with trailing *)."""
    enable: tuple[str, ...] = ()
    disable: tuple[str, ...] = ()

    def allows(self, name: str) -> bool:
        return is_enabled(name, self.enable, self.disable)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> 'NameFilter | None':
        if not data:
            return None
        return cls(
            enable=_as_patterns(data.get('enable')) or (),
            disable=_as_patterns(data.get('disable')) or (),
        )


@dataclass(frozen=True)
class Settings:
    """Global enable/disable lists, applied at query time per type."""
    commands: NameFilter | None = None
    mentions: NameFilter | None = None

    def filter_for(self, search_type: str) -> NameFilter | None:
        if search_type == COMMAND:
            return self.commands
        if search_type == MENTION:
            return self.mentions
        return None
