"""OpenSearch feed parser.

Parses NDL OpenSearch RSS 2.0 / Atom feeds with feedparser. Totals come from
the OpenSearch namespace elements (``openSearch:totalResults`` and friends).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

import feedparser
from dateutil import parser as dt_parser

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import UNKNOWN_TITLE, OpenSearchItem


@dataclass(frozen=True, slots=True)
class OpenSearchFeed:
    """Parsed feed: items plus the totals the service reported.

    ``start_index`` is 0-based as sent by the service.
    """

    items: Sequence[OpenSearchItem]
    total_results: int
    start_index: int
    items_per_page: int


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return dt_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def _to_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _entry_authors(entry: Any) -> list[str]:
    names = [a.get("name", "").strip() for a in entry.get("authors", []) if a.get("name")]
    if names:
        return names
    author = entry.get("author")
    return [author.strip()] if author else []


def _entry_link(entry: Any) -> Optional[str]:
    link = entry.get("link")
    if link:
        return link
    for candidate in entry.get("links", []):
        if candidate.get("href"):
            return candidate["href"]
    return entry.get("id") or None


def parse_opensearch_feed(xml_text: str) -> OpenSearchFeed:
    """Parse OpenSearch feed XML.

    Args:
        xml_text: RSS or Atom feed text.

    Returns:
        OpenSearchFeed with normalized items.

    Raises:
        ValidationError: If the text is not a feed at all.
    """
    feed = feedparser.parse(xml_text)
    if feed.get("bozo") and not feed.get("entries") and not feed.get("version"):
        raise ValidationError(f"Failed to parse OpenSearch feed: {feed.get('bozo_exception')}")

    items: list[OpenSearchItem] = []
    for entry in feed.entries:
        title = (entry.get("title") or "").replace("\n", " ").strip() or UNKNOWN_TITLE
        published = entry.get("published") or entry.get("updated")
        items.append(
            OpenSearchItem(
                title=title,
                link=_entry_link(entry),
                description=entry.get("summary") or entry.get("description") or None,
                published=published or None,
                published_at=_parse_dt(published),
                authors=tuple(_entry_authors(entry)),
                publisher=entry.get("publisher") or None,
                categories=tuple(t.get("term") for t in entry.get("tags", []) if t.get("term")),
                raw=entry,
            )
        )

    header = feed.get("feed", {})
    return OpenSearchFeed(
        items=items,
        total_results=_to_int(header.get("opensearch_totalresults"), len(items)),
        start_index=_to_int(header.get("opensearch_startindex"), 0),
        items_per_page=_to_int(header.get("opensearch_itemsperpage"), len(items)),
    )
