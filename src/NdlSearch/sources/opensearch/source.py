"""OpenSearch data source.

Composes fetching and feed parsing. OpenSearch offsets are 0-based; they are
converted to 1-based positions before pagination is computed and converted
back when reporting the next/previous offsets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import OpenSearchResponse, PaginationState
from NdlSearch.core.pagination import compute_pagination, from_zero_based, to_zero_based
from NdlSearch.sources.opensearch.client import OpenSearchApiClient
from NdlSearch.sources.opensearch.parser import OpenSearchFeed, parse_opensearch_feed
from NdlSearch.utils.log import log

FEED_FORMATS = frozenset({"rss", "atom"})
RESPONSE_LANGS = frozenset({"ja", "en"})
MAX_COUNT = 500


def next_start(pagination: PaginationState) -> Optional[int]:
    """0-based offset of the next page, or None on the last page."""
    if pagination.next_page_params is None:
        return None
    return to_zero_based(pagination.next_page_params.start_index)


def previous_start(pagination: PaginationState) -> Optional[int]:
    """0-based offset of the previous page, or None on the first page."""
    if pagination.previous_page_params is None:
        return None
    return to_zero_based(pagination.previous_page_params.start_index)


@dataclass(slots=True)
class OpenSearchSource:
    """Searches the NDL OpenSearch feed.

    Attributes:
        client: HTTP client fetching the feed text.
        name: Source name used in logs.
        parser: Feed parser; swap in tests to feed pre-parsed feeds.
    """

    client: OpenSearchApiClient
    name: str = "opensearch"
    parser: Callable[[str], OpenSearchFeed] = parse_opensearch_feed

    def search(
        self,
        q: str,
        *,
        count: int = 10,
        start: int = 0,
        format: str = "rss",  # noqa: A002 - API parameter name
        hl: str | None = None,
    ) -> OpenSearchResponse:
        """Run one OpenSearch query.

        Args:
            q: Free-text query, must not be blank.
            count: Page size, 1..500.
            start: 0-based offset.
            format: ``rss`` or ``atom``.
            hl: Response language.

        Returns:
            OpenSearchResponse with 1-based pagination and the 0-based ``start``.

        Raises:
            ValidationError: On invalid arguments.
        """
        problems: list[str] = []
        if not q or not q.strip():
            problems.append("q cannot be empty")
        if not 1 <= count <= MAX_COUNT:
            problems.append(f"count must be between 1 and {MAX_COUNT}")
        if start < 0:
            problems.append("start must be >= 0")
        if format not in FEED_FORMATS:
            problems.append(f"format must be one of {sorted(FEED_FORMATS)}")
        if hl is not None and hl not in RESPONSE_LANGS:
            problems.append(f"hl must be one of {sorted(RESPONSE_LANGS)}")
        if problems:
            raise ValidationError("Invalid OpenSearch parameters", problems=tuple(problems))

        xml = self.client.fetch(q=q.strip(), count=count, start=start, format=format, hl=hl)
        feed = self.parser(xml)
        pagination = compute_pagination(feed.total_results, count, from_zero_based(start))
        log.debug("OpenSearch parsed %d entries (total=%d)", len(feed.items), feed.total_results)
        return OpenSearchResponse(
            items=feed.items,
            pagination=pagination,
            start=start,
            query=q.strip(),
            format=format,
        )

    def close(self) -> None:
        self.client.close()
