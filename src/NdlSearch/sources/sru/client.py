"""NDL SRU API client.

Calls the SRU endpoint over HTTP and returns the raw XML text. Parsing and
domain mapping are handled elsewhere. Failures are mapped to the NdlSearch
error taxonomy; this client never retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

import requests

from NdlSearch.core.errors import ApiError, NetworkError, RateLimitError
from NdlSearch.utils.log import log

NDL_SRU_BASE_URL = "https://ndlsearch.ndl.go.jp/api/sru"

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "ndl-search/0.1 (+https://ndlsearch.ndl.go.jp/help/api)"

HEADERS = {
    "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
}

_STATUS_MESSAGES = {
    400: "Bad request. Check the search conditions.",
    401: "Authentication is required.",
    403: "Access was denied.",
    404: "SRU API endpoint was not found.",
    500: "The server reported an error. Try again after a while.",
    502: "The service is temporarily unavailable. Try again after a while.",
    503: "The service is temporarily unavailable. Try again after a while.",
    504: "The service is temporarily unavailable. Try again after a while.",
}


@dataclass(frozen=True, slots=True)
class SearchRetrieveRequest:
    """Parameters of one ``searchRetrieve`` call.

    Attributes:
        query: CQL query text.
        version: SRU version (``1.1`` or ``1.2``).
        start_record: 1-based start position.
        maximum_records: Page size.
        record_schema: Record schema identifier.
        record_packing: ``xml`` or ``string``.
        sort_by: Server-side sort specification.
        result_set_ttl: Result set time-to-live in seconds.
        stylesheet: Stylesheet URL.
        inprocess: NDL processing hint flag.
        lang: Response language preference (``ja``/``en``).
    """

    query: str
    version: Optional[str] = None
    start_record: Optional[int] = None
    maximum_records: Optional[int] = None
    record_schema: Optional[str] = None
    record_packing: Optional[str] = None
    sort_by: Optional[str] = None
    result_set_ttl: Optional[int] = None
    stylesheet: Optional[str] = None
    inprocess: Optional[bool] = None
    lang: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ExplainRequest:
    """Parameters of one ``explain`` call."""

    version: Optional[str] = None
    record_packing: Optional[str] = None
    stylesheet: Optional[str] = None


def build_search_params(request: SearchRetrieveRequest) -> dict[str, str]:
    """Build query-string parameters for ``searchRetrieve``.

    Only parameters that are set are emitted.
    """
    params: dict[str, str] = {"operation": "searchRetrieve", "query": request.query}
    if request.version:
        params["version"] = request.version
    if request.start_record:
        params["startRecord"] = str(request.start_record)
    if request.maximum_records:
        params["maximumRecords"] = str(request.maximum_records)
    if request.record_schema:
        params["recordSchema"] = request.record_schema
    if request.record_packing:
        params["recordPacking"] = request.record_packing
    if request.sort_by:
        params["sortBy"] = request.sort_by
    if request.result_set_ttl:
        params["resultSetTTL"] = str(request.result_set_ttl)
    if request.stylesheet:
        params["stylesheet"] = request.stylesheet
    if request.inprocess is not None:
        params["inprocess"] = "true" if request.inprocess else "false"
    if request.lang:
        params["lang"] = request.lang
    return params


def build_explain_params(request: ExplainRequest) -> dict[str, str]:
    """Build query-string parameters for ``explain``."""
    params: dict[str, str] = {"operation": "explain"}
    if request.version:
        params["version"] = request.version
    if request.record_packing:
        params["recordPacking"] = request.record_packing
    if request.stylesheet:
        params["stylesheet"] = request.stylesheet
    return params


def raise_for_status(resp: requests.Response, *, service: str = "SRU") -> None:
    """Map a non-2xx response onto the error taxonomy.

    Raises:
        RateLimitError: On HTTP 429, carrying ``Retry-After`` when present.
        ApiError: On any other non-2xx status.
    """
    status = resp.status_code
    if 200 <= status < 300:
        return
    if status == 429:
        retry_after = resp.headers.get("Retry-After")
        if retry_after:
            message = f"Request limit reached. Retry after {retry_after} seconds."
        else:
            message = "Request limit reached. Please wait before retrying."
        raise RateLimitError(message, retry_after=retry_after)
    message = _STATUS_MESSAGES.get(status, f"{service} API request failed (status: {status})")
    raise ApiError(message, status=status)


class SruApiClient:
    """Low-level HTTP client for the NDL SRU API.

    Responsible only for making network requests and returning the raw XML.
    """

    def __init__(
        self,
        *,
        base_url: str = NDL_SRU_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
    ) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            base_url: SRU endpoint URL.
            timeout: Request timeout in seconds.
            user_agent: User-Agent header; a package default when None.
        """
        self.base_url = base_url
        self.timeout = timeout
        self._headers = {**HEADERS, "User-Agent": user_agent or DEFAULT_USER_AGENT}
        self._session = requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> SruApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def search_retrieve(self, request: SearchRetrieveRequest) -> str:
        """Issue a ``searchRetrieve`` request.

        Args:
            request: Request parameters.

        Returns:
            Response XML text.

        Raises:
            NetworkError: On timeouts and connection failures.
            RateLimitError: On HTTP 429.
            ApiError: On other non-2xx statuses.
        """
        params = build_search_params(request)
        log.debug(
            "SRU searchRetrieve: query=%s startRecord=%s maximumRecords=%s recordSchema=%s",
            request.query,
            request.start_record,
            request.maximum_records,
            request.record_schema,
        )
        return self._get(params)

    def explain(self, request: ExplainRequest | None = None) -> str:
        """Issue an ``explain`` request and return the response XML text."""
        params = build_explain_params(request or ExplainRequest())
        log.debug("SRU explain: version=%s", params.get("version"))
        return self._get(params)

    def _get(self, params: Mapping[str, str]) -> str:
        try:
            resp = self._session.get(
                self.base_url,
                params=dict(params),
                headers=self._headers,
                timeout=self.timeout,
            )
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise NetworkError(
                "Network error occurred. Check your internet connection.",
                cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Unexpected request error: {e}", status=0, cause=e) from e

        raise_for_status(resp)
        log.debug("SRU response ok: status=%s bytes=%s", resp.status_code, len(resp.text))
        return resp.text
