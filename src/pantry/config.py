"""Configuration loading for the command/mention catalog.

Settings live at ~/.claude/pantry/settings.yaml alongside other Claude Code
config:

    entries:
      - name: "{basename}"
        type: command
        description: "{frontmatter@description}|{heading}"
        path: ~/.claude/commands
        pattern: "*.md"
    commands:
      disable: ["debug-*"]
    mentions:
      enable: ["agent-*"]

If settings don't exist, creates them from the built-in defaults.
"""

import copy
from pathlib import Path
from typing import Any
import yaml

from .entries import COMMAND, MENTION, NameFilter, SearchEntry, Settings


# Seconds a full scan stays valid
CACHE_TTL_SECONDS = 5.0

DEFAULT_MAX_SUGGESTIONS = 20
DEFAULT_ORDER_BY = 'name'


def get_pantry_dir() -> Path:
    """Get the pantry directory (~/.claude/pantry/)."""
    return Path.home() / '.claude' / 'pantry'


def get_settings_path() -> Path:
    """Get the settings file path."""
    return get_pantry_dir() / 'settings.yaml'


DEFAULT_ENTRIES = [
    # User's custom slash commands
    {
        'name': '{basename}',
        'type': COMMAND,
        'description': '{frontmatter@description}|{heading}',
        'path': '~/.claude/commands',
        'pattern': '*.md',
        'argument_hint': '{frontmatter@argument-hint}',
        'max_suggestions': DEFAULT_MAX_SUGGESTIONS,
        'order_by': DEFAULT_ORDER_BY,
    },
    # User's custom agents
    {
        'name': 'agent-{basename}',
        'type': MENTION,
        'description': '{frontmatter@description}|{heading}',
        'path': '~/.claude/agents',
        'pattern': '*.md',
        'max_suggestions': DEFAULT_MAX_SUGGESTIONS,
        'order_by': DEFAULT_ORDER_BY,
        # 'search_prefix': 'agent',  # require @agent: to search agents
    },
]

DEFAULT_SETTINGS = {
    'entries': DEFAULT_ENTRIES,
    'commands': {
        'enable': [],
        'disable': [],
    },
    'mentions': {
        'enable': [],
        'disable': [],
    },
}


def default_entries() -> list[SearchEntry]:
    """Built-in entries used when no entries are configured."""
    return [SearchEntry.from_dict(data) for data in DEFAULT_ENTRIES]


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """
    Load settings from ~/.claude/pantry/settings.yaml (or path).

    Creates the settings directory and file from defaults if they don't exist.
    Missing top-level keys are filled in from defaults. Entry paths keep
    their ~ so source ids match what the user wrote.
    """
    settings_path = path or get_settings_path()

    if settings_path.exists():
        with open(settings_path) as f:
            config = yaml.safe_load(f) or {}
    else:
        # Create from defaults
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        config = copy.deepcopy(DEFAULT_SETTINGS)
        with open(settings_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    return _deep_merge(DEFAULT_SETTINGS, config)


def entries_from_config(config: dict[str, Any]) -> list[SearchEntry]:
    """Entries from a loaded settings dict; falls back to defaults when empty."""
    raw_entries = config.get('entries') or []
    if not raw_entries:
        return default_entries()
    return [SearchEntry.from_dict(data) for data in raw_entries]


def settings_from_config(config: dict[str, Any]) -> Settings:
    """Global enable/disable lists from a loaded settings dict."""
    return Settings(
        commands=NameFilter.from_dict(config.get('commands')),
        mentions=NameFilter.from_dict(config.get('mentions')),
    )


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base, preferring override values."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
