"""NDL OpenSearch API client.

Fetches the raw RSS/Atom feed. Shares the status mapping of the SRU client and
never retries.
"""

from __future__ import annotations

from typing import Optional

import requests

from NdlSearch.core.errors import ApiError, NetworkError
from NdlSearch.sources.sru.client import DEFAULT_USER_AGENT, raise_for_status
from NdlSearch.utils.log import log

NDL_OPENSEARCH_BASE_URL = "https://ndlsearch.ndl.go.jp/api/opensearch"

DEFAULT_TIMEOUT = 30.0

HEADERS = {
    "Accept": "application/rss+xml,application/atom+xml,application/xml;q=0.9,*/*;q=0.8",
}


class OpenSearchApiClient:
    """Low-level HTTP client for the NDL OpenSearch API."""

    def __init__(
        self,
        *,
        base_url: str = NDL_OPENSEARCH_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._headers = {**HEADERS, "User-Agent": user_agent or DEFAULT_USER_AGENT}
        self._session = requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> OpenSearchApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def fetch(
        self,
        *,
        q: str,
        count: Optional[int] = None,
        start: Optional[int] = None,
        format: Optional[str] = None,  # noqa: A002 - API parameter name
        hl: Optional[str] = None,
    ) -> str:
        """Fetch an OpenSearch feed.

        Args:
            q: Free-text query.
            count: Page size.
            start: 0-based offset.
            format: ``rss`` or ``atom``.
            hl: Response language (``ja``/``en``).

        Returns:
            Feed XML text.

        Raises:
            NetworkError: On timeouts and connection failures.
            RateLimitError: On HTTP 429.
            ApiError: On other non-2xx statuses.
        """
        params: dict[str, str] = {"q": q}
        if count is not None:
            params["count"] = str(count)
        if start is not None:
            params["start"] = str(start)
        if format:
            params["format"] = format
        if hl:
            params["hl"] = hl

        log.debug("OpenSearch fetch: q=%s count=%s start=%s format=%s", q, count, start, format)
        try:
            resp = self._session.get(self.base_url, params=params, headers=self._headers, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise NetworkError("Failed to perform OpenSearch request", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Unexpected request error: {e}", status=0, cause=e) from e

        raise_for_status(resp, service="OpenSearch")
        log.debug("OpenSearch response ok: status=%s bytes=%s", resp.status_code, len(resp.text))
        return resp.text
