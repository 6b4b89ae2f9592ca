"""Catalog of slash commands and @-mentions built from files on disk."""

from .entries import COMMAND, MENTION, SearchEntry, SearchItem, Settings
from .loader import SearchLoader

__all__ = [
    "COMMAND",
    "MENTION",
    "SearchEntry",
    "SearchItem",
    "SearchLoader",
    "Settings",
]
