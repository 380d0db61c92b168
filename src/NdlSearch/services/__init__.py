"""Service layer for NdlSearch.

Provides the SRU search service and factories that wire clients from
configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from NdlSearch.services.refine import ItemFilter, SortSpec
from NdlSearch.services.search import SearchOptions, SruSearchService, SruTransport

if TYPE_CHECKING:
    from NdlSearch.config import AppConfig
    from NdlSearch.sources.opensearch.source import OpenSearchSource


def create_search_service(config: AppConfig, *, user_agent: str | None = None) -> SruSearchService:
    """Create an SRU search service from configuration.

    Args:
        config: Application configuration.
        user_agent: Optional User-Agent override.

    Returns:
        SruSearchService backed by ``SruApiClient``.
    """
    from NdlSearch.sources.sru.client import SruApiClient

    client = SruApiClient(base_url=config.sru.base_url, timeout=config.sru.timeout, user_agent=user_agent)
    return SruSearchService(client=client)


def create_opensearch_source(config: AppConfig, *, user_agent: str | None = None) -> OpenSearchSource:
    """Create an OpenSearch source from configuration."""
    from NdlSearch.sources.opensearch.client import OpenSearchApiClient
    from NdlSearch.sources.opensearch.source import OpenSearchSource

    client = OpenSearchApiClient(
        base_url=config.opensearch.base_url,
        timeout=config.opensearch.timeout,
        user_agent=user_agent,
    )
    return OpenSearchSource(client=client)


def default_search_options(config: AppConfig, **overrides: object) -> SearchOptions:
    """Build SearchOptions seeded from the ``sru`` config section."""
    values: dict[str, object] = {
        "maximum_records": config.sru.maximum_records,
        "record_schema": config.sru.record_schema,
        "version": config.sru.version,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return SearchOptions(**values)  # type: ignore[arg-type]


__all__ = [
    "ItemFilter",
    "SearchOptions",
    "SortSpec",
    "SruSearchService",
    "SruTransport",
    "create_opensearch_source",
    "create_search_service",
    "default_search_options",
]
