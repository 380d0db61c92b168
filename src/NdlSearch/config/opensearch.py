"""OpenSearch endpoint configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NdlSearch.config.common import ConfigSection
from NdlSearch.sources.opensearch.client import DEFAULT_TIMEOUT, NDL_OPENSEARCH_BASE_URL
from NdlSearch.sources.opensearch.source import FEED_FORMATS, MAX_COUNT


@dataclass(frozen=True, slots=True)
class OpenSearchConfig:
    """OpenSearch client and default request settings."""

    base_url: str = NDL_OPENSEARCH_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    count: int = 10
    format: str = "rss"  # noqa: A003 - config key name


def load_opensearch(raw: Mapping[str, Any]) -> OpenSearchConfig:
    section = ConfigSection.of(raw, "opensearch", ("base_url", "timeout", "count", "format"))
    return OpenSearchConfig(
        base_url=section.url("base_url", NDL_OPENSEARCH_BASE_URL),
        timeout=section.number("timeout", DEFAULT_TIMEOUT, positive=True),
        count=section.integer("count", 10, minimum=1, maximum=MAX_COUNT),
        format=section.choice("format", "rss", FEED_FORMATS, fold=str.lower),
    )
