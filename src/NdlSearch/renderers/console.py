"""Console text output.

Renders search results into human-friendly text and logs it line by line.
"""

from __future__ import annotations

from NdlSearch.core.models import OpenSearchResponse, PaginationState, SearchResponse
from NdlSearch.renderers.base import OutputWriter, SearchResult
from NdlSearch.utils.log import log


def _pagination_line(pagination: PaginationState) -> str:
    return (
        f"Total: {pagination.total_results}  "
        f"Page {pagination.current_page}/{pagination.total_pages}  "
        f"({pagination.items_per_page} per page)"
    )


def _render_sru(response: SearchResponse) -> list[str]:
    lines = [f"Query: {response.query.cql or '-'}", _pagination_line(response.pagination), ""]
    for idx, item in enumerate(response.items, start=response.pagination.start_index):
        lines.append(f"{idx}. {item.title}")
        if item.creators:
            lines.append(f"   Creators: {', '.join(item.creators)}")
        if item.publishers:
            lines.append(f"   Publisher: {', '.join(item.publishers)}")
        if item.date:
            lines.append(f"   Date: {item.date}")
        if item.language:
            lines.append(f"   Language: {item.language}")
        if item.subjects:
            lines.append(f"   Subjects: {', '.join(item.subjects)}")
        if item.identifier:
            lines.append(f"   Id: {item.identifier}")
        lines.append("")
    return lines


def _render_opensearch(response: OpenSearchResponse) -> list[str]:
    lines = [f"Query: {response.query}", _pagination_line(response.pagination), ""]
    for idx, item in enumerate(response.items, start=response.start + 1):
        lines.append(f"{idx}. {item.title}")
        if item.authors:
            lines.append(f"   Authors: {', '.join(item.authors)}")
        if item.publisher:
            lines.append(f"   Publisher: {item.publisher}")
        if item.published:
            lines.append(f"   Published: {item.published}")
        if item.link:
            lines.append(f"   Link: {item.link}")
        lines.append("")
    return lines


def render_text(result: SearchResult) -> str:
    """Render a search result into a text block ready to print."""
    if isinstance(result, OpenSearchResponse):
        lines = _render_opensearch(result)
    else:
        lines = _render_sru(result)
    if not result.items:
        lines.append("No results.")
    return "\n".join(lines).rstrip() + "\n"


class ConsoleOutputWriter(OutputWriter):
    """Write results to console via logging."""

    def write_result(self, result: SearchResult) -> None:
        for line in render_text(result).splitlines():
            log.info(line)

    def finalize(self, action: str) -> None:
        """No-op for console output."""
