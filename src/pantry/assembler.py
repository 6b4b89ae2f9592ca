"""Turn parsed records into search items, then dedupe and order them."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable

from .adapters import Record
from .entries import DISPLAY_TIME_HIDDEN, SearchEntry, SearchItem
from .filters import is_enabled
from .templates import TemplateContext, resolve_template


logger = logging.getLogger(__name__)

ICON_PREFIX = 'codicon-'
UPDATED_AT = 'updatedAt'
# Fields read straight off the item when sorting; no sort key needed
DIRECT_SORT_FIELDS = ('name', 'description', UPDATED_AT)

_DIRECTIONS = ('asc', 'desc')
_ORDER_FIELD_RE = re.compile(r'\{(?:json@|frontmatter@)?(\w+(?:\.\w+)*)\}', re.ASCII)


@dataclass(frozen=True)
class OrderBy:
    """Parsed "<field> [asc|desc]".

    "name"                   -> field "name", asc
    "description desc"       -> field "description", desc
    "{json@createdAt} desc"  -> field "createdAt", desc, template "{json@createdAt}"
    """
    field: str
    direction: str
    template: str

    @property
    def descending(self) -> bool:
        return self.direction == 'desc'

    @classmethod
    def parse(cls, order_by: str) -> 'OrderBy':
        text = order_by.strip()
        parts = text.split()
        last = parts[-1].lower() if parts else ''
        if last in _DIRECTIONS:
            direction = last
            template = ' '.join(parts[:-1])
        else:
            direction = 'asc'
            template = text

        field = template
        match = _ORDER_FIELD_RE.search(template)
        if match:
            field = match.group(1)
        return cls(field=field, direction=direction, template=template)


def resolve_color(template: str, context: TemplateContext) -> str:
    """Resolve a color, falling back to the literal after '|'.

    "{json@color}|#ffffff" gives "#ffffff" when the record has no color.
    """
    if '|' not in template:
        return resolve_template(template, context)
    primary, fallback = template.split('|', 1)
    return resolve_template(primary, context) or fallback


def resolve_icon(template: str, context: TemplateContext) -> str:
    icon = resolve_template(template, context)
    if icon and not icon.startswith(ICON_PREFIX):
        icon = ICON_PREFIX + icon
    return icon


def _parse_number(text: str) -> float | None:
    # Plain decimal or exponent forms only: no "1_000", "inf" or "nan"
    if '_' in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def resolve_display_time(
    entry: SearchEntry,
    context: TemplateContext,
    mtime_ms: float | None = None,
) -> float | str | None:
    """Timestamp to display, DISPLAY_TIME_HIDDEN, or None when unset."""
    if not entry.display_time:
        return None
    if entry.display_time == DISPLAY_TIME_HIDDEN:
        return DISPLAY_TIME_HIDDEN

    if OrderBy.parse(entry.display_time).field == UPDATED_AT:
        return mtime_ms

    resolved = resolve_template(entry.display_time, context)
    if not resolved:
        return None
    return _parse_number(resolved.strip())


def resolve_sort_key(entry: SearchEntry, context: TemplateContext) -> str | None:
    """Sort key for custom order fields; None for name/description/updatedAt."""
    if not entry.order_by:
        return None
    order = OrderBy.parse(entry.order_by)
    if order.field in DIRECT_SORT_FIELDS:
        return None
    return resolve_template(order.template, context) or None


def build_item(record: Record, entry: SearchEntry, prefix: str = '') -> SearchItem | None:
    """Resolve an entry's templates against one record.

    Returns None for expanded records (query/JSONL) whose name is empty.
    """
    context = record.context(prefix)
    name = resolve_template(entry.name, context)
    if record.expanded and not name:
        return None

    label = resolve_template(entry.label, context) if entry.label else ''
    color = resolve_color(entry.color, context) if entry.color else ''
    icon = resolve_icon(entry.icon, context) if entry.icon else ''
    argument_hint = resolve_template(entry.argument_hint, context) if entry.argument_hint else ''

    return SearchItem(
        name=name,
        description=resolve_template(entry.description, context),
        type=entry.type,
        file_path=str(record.path),
        source_id=entry.source_id,
        sort_key=resolve_sort_key(entry, context),
        frontmatter=record.raw_frontmatter or None,
        label=label or None,
        color=color or None,
        icon=icon or None,
        argument_hint=argument_hint or None,
        input_format=entry.input_format or None,
        updated_at=record.mtime_ms,
        display_time=resolve_display_time(entry, context, record.mtime_ms),
    )


def filter_entry_items(items: list[SearchItem], entry: SearchEntry) -> list[SearchItem]:
    """Apply the entry's own enable/disable lists."""
    if not entry.enable and not entry.disable:
        return items
    return [item for item in items if is_enabled(item.name, entry.enable, entry.disable)]


def dedup_key(item: SearchItem) -> str:
    # Same name is allowed twice when labels tell the items apart
    return f"{item.name}:{item.label}" if item.label else item.name


def deduplicate(
    items: Iterable[SearchItem],
    seen: dict[str, set[str]],
) -> list[SearchItem]:
    """Drop items whose key was already seen for the same source.

    `seen` maps source_id -> keys and is shared across calls, so
    scoping stays per entry while the caller merges all entries.
    """
    kept = []
    for item in items:
        keys = seen.setdefault(item.source_id, set())
        key = dedup_key(item)
        if key in keys:
            logger.debug("Dropped duplicate %r from %s (%s)", key, item.source_id, item.file_path)
            continue
        keys.add(key)
        kept.append(item)
    return kept


def collation_key(text: str) -> str:
    return text.casefold()


def sort_items(items: Iterable[SearchItem], order_by: str) -> list[SearchItem]:
    """Stable sort by an orderBy string; ties keep their incoming order."""
    order = OrderBy.parse(order_by)

    if order.field == UPDATED_AT:
        key = lambda item: item.updated_at or 0
    elif order.field == 'name':
        key = lambda item: collation_key(item.name)
    elif order.field == 'description':
        key = lambda item: collation_key(item.description)
    else:
        key = lambda item: collation_key(item.sort_key if item.sort_key is not None else item.name)

    return sorted(items, key=key, reverse=order.descending)
