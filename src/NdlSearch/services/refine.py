"""Client-side narrowing and ordering of search items.

Applied after a page has been fetched. Nothing here fails: a filter that
matches nothing yields an empty list.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from NdlSearch.core.models import SearchItem
from NdlSearch.core.params import language_codes

SortField = Literal["title", "creator", "date"]
SortOrder = Literal["asc", "desc"]

_YEAR_RE = re.compile(r"(\d{4})")
_CHUNK_RE = re.compile(r"(\d+)")
_MISSING_YEAR = "0000"


@dataclass(frozen=True, slots=True)
class ItemFilter:
    """Client-side filter.

    Attributes:
        language: Allowed language codes; items without a language are dropped.
        date_from: Lower year bound; only the first four characters are used.
        date_to: Upper year bound; only the first four characters are used.
        creator: Case-insensitive substring of any creator.
    """

    language: str | Sequence[str] | None = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    creator: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Client-side sort order."""

    field: SortField
    order: SortOrder = "asc"


def item_year(item: SearchItem) -> Optional[str]:
    """Return the first 4-digit run of ``item.date``."""
    if not item.date:
        return None
    match = _YEAR_RE.search(item.date)
    return match.group(1) if match else None


def natural_key(text: str) -> tuple[tuple[int, int, str], ...]:
    """Locale-tolerant sort key: NFKC, casefolded, digit runs compared numerically."""
    normalized = unicodedata.normalize("NFKC", text).casefold()
    key: list[tuple[int, int, str]] = []
    for chunk in _CHUNK_RE.split(normalized):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((0, int(chunk), chunk))
        else:
            key.append((1, 0, chunk))
    return tuple(key)


def filter_items(items: Sequence[SearchItem], item_filter: ItemFilter) -> list[SearchItem]:
    """Apply language, date-range and creator filters in that order."""
    result = list(items)

    codes = language_codes(item_filter.language)
    if codes:
        result = [item for item in result if item.language and item.language in codes]

    if item_filter.date_from or item_filter.date_to:
        lower = item_filter.date_from[:4] if item_filter.date_from else None
        upper = item_filter.date_to[:4] if item_filter.date_to else None

        def in_range(item: SearchItem) -> bool:
            year = item_year(item)
            if year is None:
                return True
            if lower and year < lower:
                return False
            if upper and year > upper:
                return False
            return True

        result = [item for item in result if in_range(item)]

    if item_filter.creator:
        needle = item_filter.creator.lower()
        result = [
            item for item in result
            if any(needle in creator.lower() for creator in item.creators)
        ]

    return result


def sort_items(items: Sequence[SearchItem], spec: SortSpec) -> list[SearchItem]:
    """Return items ordered by ``spec``; ties keep their original order."""
    if spec.field == "title":
        key = lambda item: natural_key(item.title)  # noqa: E731
    elif spec.field == "creator":
        key = lambda item: natural_key(item.creators[0] if item.creators else "")  # noqa: E731
    elif spec.field == "date":
        key = lambda item: item_year(item) or _MISSING_YEAR  # noqa: E731
    else:
        raise ValueError(f"Unsupported sort field: {spec.field}")
    return sorted(items, key=key, reverse=spec.order == "desc")


def refine_items(
    items: Sequence[SearchItem],
    *,
    item_filter: ItemFilter | None = None,
    sort: SortSpec | None = None,
) -> list[SearchItem]:
    """Filter then sort."""
    result = list(items)
    if item_filter is not None:
        result = filter_items(result, item_filter)
    if sort is not None:
        result = sort_items(result, sort)
    return result
