"""Command implementations for the NdlSearch CLI.

Each command holds its collaborators and runs one request, separated from
click parameter handling and from output formatting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from NdlSearch.config import RetryConfig
from NdlSearch.core.cql import QueryValidation, validate_cql_query
from NdlSearch.core.models import SruExplain
from NdlSearch.core.params import SimpleSearchParams
from NdlSearch.renderers import OutputWriter
from NdlSearch.services.search import SearchOptions, SruSearchService
from NdlSearch.sources.opensearch.source import OpenSearchSource, next_start
from NdlSearch.utils.log import log
from NdlSearch.utils.retry import call_with_backoff

T = TypeVar("T")


def _with_retry(retry: RetryConfig, func: Callable[[], T]) -> T:
    return call_with_backoff(
        func,
        max_attempts=retry.max_attempts,
        base_pause=retry.base_pause,
        max_sleep=retry.max_sleep,
    )


@dataclass(slots=True)
class SearchCommand:
    """Run an SRU search from named parameters or a raw CQL string."""

    service: SruSearchService
    output_writer: OutputWriter
    retry: RetryConfig
    options: SearchOptions
    params: Optional[SimpleSearchParams] = None
    cql: Optional[str] = None

    def execute(self) -> None:
        if self.cql is not None:
            log.info("cql=%s", self.cql)
            response = _with_retry(self.retry, lambda: self.service.search_cql(self.cql or "", self.options))
        else:
            response = _with_retry(
                self.retry,
                lambda: self.service.search(self.params or SimpleSearchParams(), self.options),
            )
            log.info("cql=%s", response.query.cql or "-")
        log.info(
            "Fetched %d items (total %d)",
            len(response.items),
            response.pagination.total_results,
        )
        if response.pagination.next_page_params is not None:
            log.info("Next page: --start %d", response.pagination.next_page_params.start_index)
        self.output_writer.write_result(response)


@dataclass(slots=True)
class OpenSearchCommand:
    """Run one OpenSearch query."""

    source: OpenSearchSource
    output_writer: OutputWriter
    retry: RetryConfig
    q: str
    count: int = 10
    start: int = 0
    format: str = "rss"  # noqa: A003 - feed format name
    hl: Optional[str] = None

    def execute(self) -> None:
        response = _with_retry(
            self.retry,
            lambda: self.source.search(self.q, count=self.count, start=self.start, format=self.format, hl=self.hl),
        )
        log.info("Fetched %d items (total %d)", len(response.items), response.pagination.total_results)
        following = next_start(response.pagination)
        if following is not None:
            log.info("Next page: --start %d", following)
        self.output_writer.write_result(response)


@dataclass(slots=True)
class ExplainCommand:
    """Fetch and log the SRU service description."""

    service: SruSearchService
    retry: RetryConfig
    version: Optional[str] = None

    def execute(self) -> SruExplain:
        explain = _with_retry(self.retry, lambda: self.service.explain(version=self.version))
        log.info("Database: %s", explain.title or explain.database or "-")
        if explain.description:
            log.info("Description: %s", explain.description)
        if explain.host:
            log.info("Server: %s:%s", explain.host, explain.port or "-")
        log.info("Indexes (%d):", len(explain.indexes))
        for index in explain.indexes:
            prefix = f"{index.set}." if index.set else ""
            log.info("  %s%s  %s", prefix, index.name, index.title or "")
        log.info("Schemas (%d):", len(explain.schemas))
        for schema in explain.schemas:
            log.info("  %s  %s", schema.name or "-", schema.identifier)
        return explain


def run_validate(query: str) -> QueryValidation:
    """Validate a CQL string locally and log the outcome."""
    result = validate_cql_query(query)
    log.info("valid=%s complexity=%d", result.is_valid, result.complexity)
    for error in result.errors:
        log.error("  %s", error)
    for warning in result.warnings:
        log.warning("  %s", warning)
    return result
