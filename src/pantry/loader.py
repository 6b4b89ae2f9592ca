"""SearchLoader: scan configured entries into a cached catalog of items.

    loader = SearchLoader(entries, settings)
    loader.get_items('command')              # all commands, default order
    loader.search_items('mention', 'agent:re')

A full scan is cached for a few seconds. Config or settings changes clear
the cache right away; otherwise expiry is purely time-based.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .adapters import parse_file, split_query
from .assembler import build_item, deduplicate, filter_entry_items, sort_items
from .config import CACHE_TTL_SECONDS, DEFAULT_MAX_SUGGESTIONS, DEFAULT_ORDER_BY, default_entries
from .entries import COMMAND, MENTION, SearchEntry, SearchItem, Settings
from .patterns import find_files
from .prefix import PrefixResolver


logger = logging.getLogger(__name__)

CACHE_KEY = 'all'


@dataclass
class CacheSlot:
    items: list[SearchItem]
    timestamp: float
    # Sorted, filtered get_items results per type; dropped with the slot
    views: dict[str, list[SearchItem]] = field(default_factory=dict)


def _coerce_entries(entries: Iterable[SearchEntry | dict[str, Any]] | None) -> list[SearchEntry]:
    if not entries:
        return default_entries()
    return [e if isinstance(e, SearchEntry) else SearchEntry.from_dict(e) for e in entries]


class SearchLoader:
    """Config-driven loader for commands and mentions."""

    def __init__(
        self,
        entries: Iterable[SearchEntry | dict[str, Any]] | None = None,
        settings: Settings | None = None,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.entries = _coerce_entries(entries)
        self.settings = settings
        self.ttl = ttl
        self._clock = clock
        self._cache: dict[str, CacheSlot] = {}
        self._prefixes = PrefixResolver()

    # -- configuration -----------------------------------------------------

    def update_config(self, entries: Iterable[SearchEntry | dict[str, Any]] | None) -> None:
        """Replace the entries; the cache is only cleared if they changed."""
        new_entries = _coerce_entries(entries)
        if new_entries != self.entries:
            self.entries = new_entries
            self.invalidate_cache()
            logger.debug("Config updated: %d entries", len(self.entries))

    def update_settings(self, settings: Settings | None) -> None:
        """Replace the global enable/disable lists; clears the cache on change."""
        if settings != self.settings:
            self.settings = settings
            self.invalidate_cache()

    def invalidate_cache(self) -> None:
        self._cache.clear()
        self._prefixes.clear()
        logger.debug("Cache invalidated")

    def is_expired(self) -> bool:
        slot = self._cache.get(CACHE_KEY)
        return slot is None or self._clock() - slot.timestamp >= self.ttl

    # -- queries -----------------------------------------------------------

    def get_items(self, search_type: str) -> list[SearchItem]:
        """All items of a type, globally filtered, in the type's default order.

        While the cache is fresh, repeated calls return the same list object.
        """
        self.load_all()
        slot = self._cache[CACHE_KEY]
        view = slot.views.get(search_type)
        if view is None:
            view = sort_items(self._items_of_type(search_type), self.get_order_by(search_type))
            slot.views[search_type] = view
        return view

    def search_items(self, search_type: str, query: str) -> list[SearchItem]:
        """Items of a type matching query.

        Entries with a search_prefix only take part when the query starts
        with "<prefix>:"; the prefix is stripped before matching. Matching is
        a case-insensitive substring test on name or description.
        """
        items = [item for item in self._items_of_type(search_type) if self._prefix_allows(item, query)]
        order_by = self.get_order_by_for_query(search_type, query)

        if not query:
            return sort_items(items, order_by)

        matched = []
        for item in items:
            entry = self._find_entry(item)
            prefix = f"{entry.search_prefix}:" if entry and entry.search_prefix else ''
            actual_query = query[len(prefix):] if query.startswith(prefix) else query

            # Bare prefix: show everything from that entry
            if not actual_query:
                matched.append(item)
                continue

            needle = actual_query.lower()
            if needle in item.name.lower() or needle in item.description.lower():
                matched.append(item)

        return sort_items(matched, order_by)

    def get_max_suggestions(self, search_type: str) -> int:
        """Largest max_suggestions among the type's entries."""
        entries = self._entries_of_type(search_type)
        if not entries:
            return DEFAULT_MAX_SUGGESTIONS
        return max(entry.max_suggestions or DEFAULT_MAX_SUGGESTIONS for entry in entries)

    def get_search_prefixes(self, search_type: str) -> list[str]:
        """Search prefixes for a type, with their trailing colon."""
        return [f"{e.search_prefix}:" for e in self._entries_of_type(search_type) if e.search_prefix]

    def get_order_by(self, search_type: str) -> str:
        """orderBy of the first entry of the type."""
        entries = self._entries_of_type(search_type)
        if not entries:
            return DEFAULT_ORDER_BY
        return entries[0].order_by or DEFAULT_ORDER_BY

    def get_order_by_for_query(self, search_type: str, query: str) -> str:
        """orderBy of the entry whose search prefix the query uses.

        Falls back to the first entry without a search prefix, then to the
        first entry of the type.
        """
        entries = self._entries_of_type(search_type)
        if not entries:
            return DEFAULT_ORDER_BY

        for entry in entries:
            if entry.search_prefix and query.startswith(f"{entry.search_prefix}:"):
                return entry.order_by or DEFAULT_ORDER_BY

        for entry in entries:
            if not entry.search_prefix:
                return entry.order_by or DEFAULT_ORDER_BY

        return entries[0].order_by or DEFAULT_ORDER_BY

    # -- loading -----------------------------------------------------------

    def load_all(self) -> list[SearchItem]:
        """Every item from every entry, sorted by name. Served from cache while fresh."""
        slot = self._cache.get(CACHE_KEY)
        if slot is not None and not self.is_expired():
            return slot.items

        items = sort_items(self._load_entries(), DEFAULT_ORDER_BY)
        self._cache[CACHE_KEY] = CacheSlot(items=items, timestamp=self._clock())

        logger.info(
            "Loaded %d items (%d commands, %d mentions)",
            len(items),
            sum(1 for i in items if i.type == COMMAND),
            sum(1 for i in items if i.type == MENTION),
        )
        return items

    def _load_entries(self) -> list[SearchItem]:
        all_items: list[SearchItem] = []
        seen: dict[str, set[str]] = {}

        for entry in self.entries:
            try:
                items = self._load_entry(entry)
            except Exception:
                logger.exception("Failed to load entry %s", entry.source_id)
                continue
            all_items.extend(deduplicate(items, seen))

        return all_items

    def _load_entry(self, entry: SearchEntry) -> list[SearchItem]:
        root = entry.root
        if not root.exists():
            # Soft failure: path may not exist on this machine
            logger.debug("Search path does not exist: %s", root)
            return []
        if not root.is_dir():
            logger.warning("Search path is not a directory: %s", root)
            return []

        file_glob, query = split_query(entry.pattern)
        files = find_files(root, file_glob)

        items = []
        for path in files:
            records = parse_file(path, query)
            if not records:
                continue

            prefix = ''
            if entry.prefix_pattern:
                prefix = self._prefixes.resolve(path, entry.prefix_pattern, root)

            for record in records:
                item = build_item(record, entry, prefix)
                if item is not None:
                    items.append(item)

        items = filter_entry_items(items, entry)
        logger.debug(
            "Loaded entry %s: %d files, %d items (query=%r)",
            entry.source_id, len(files), len(items), query,
        )
        return items

    # -- helpers -----------------------------------------------------------

    def _entries_of_type(self, search_type: str) -> list[SearchEntry]:
        return [entry for entry in self.entries if entry.type == search_type]

    def _find_entry(self, item: SearchItem) -> SearchEntry | None:
        for entry in self.entries:
            if entry.type == item.type and entry.source_id == item.source_id:
                return entry
        return None

    def _items_of_type(self, search_type: str) -> list[SearchItem]:
        items = [item for item in self.load_all() if item.type == search_type]
        name_filter = self.settings.filter_for(search_type) if self.settings else None
        if name_filter is not None:
            items = [item for item in items if name_filter.allows(item.name)]
        return items

    def _prefix_allows(self, item: SearchItem, query: str) -> bool:
        entry = self._find_entry(item)
        if entry is None or not entry.search_prefix:
            return True
        return query.startswith(f"{entry.search_prefix}:")
