"""SRU search orchestration.

Ties query compilation, dispatch, parsing, diagnostic classification, item
extraction, pagination and client-side refinement together.

Flow for ``search``
- compile named parameters into CQL (validation failures raise before dispatch)
- empty CQL short-circuits to an empty, well-formed response
- dispatch through the transport, parse the XML
- diagnostics are authoritative: a classified diagnostic raises
- extract items, compute pagination, filter and sort
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import (
    QueryInfo,
    SearchResponse,
    SruExplain,
    SruResponse,
    SruSearchRetrieve,
)
from NdlSearch.core.pagination import compute_pagination
from NdlSearch.core.params import DateRange, check_date_range
from NdlSearch.services.refine import ItemFilter, SortSpec, refine_items
from NdlSearch.sources.sru.client import ExplainRequest, SearchRetrieveRequest
from NdlSearch.sources.sru.diagnostics import classify_diagnostics
from NdlSearch.sources.sru.parser import parse_sru_response
from NdlSearch.sources.sru.query import SimpleParamsInput, compile_simple_query
from NdlSearch.sources.sru.records import extract_search_items
from NdlSearch.utils.log import log

DEFAULT_MAXIMUM_RECORDS = 10
MAX_MAXIMUM_RECORDS = 500
DEFAULT_RECORD_SCHEMA = "dcndl"
DEFAULT_VERSION = "1.2"
MAX_RESULT_SET_TTL = 3600

SRU_VERSIONS = frozenset({"1.1", "1.2"})
RECORD_PACKINGS = frozenset({"xml", "string"})
RESPONSE_LANGS = frozenset({"ja", "en"})
RECORD_SCHEMAS = frozenset(
    {
        "info:srw/schema/1/dc-v1.1",
        "info:srw/schema/1/mods-v3.0",
        "http://www.loc.gov/mods/v3",
        "info:srw/schema/1/marcxml-v1.1",
        "http://www.loc.gov/MARC21/slim",
        "dcndl",
        "dcterms",
    }
)
SORT_FIELDS = frozenset({"title", "creator", "date"})
SORT_ORDERS = frozenset({"asc", "desc"})


class SruTransport(Protocol):
    """Transport collaborator: issues requests and returns response text."""

    def search_retrieve(self, request: SearchRetrieveRequest) -> str:
        """Return searchRetrieve response XML."""
        raise NotImplementedError

    def explain(self, request: ExplainRequest | None = None) -> str:
        """Return explain response XML."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Request and refinement options for one search.

    Attributes:
        maximum_records: Page size, 1..500.
        start_record: 1-based start position.
        record_schema: Record schema identifier.
        version: SRU version.
        record_packing: ``xml`` or ``string``.
        server_sort: SRU ``sortBy`` passed to the service as-is.
        result_set_ttl: Result set time-to-live in seconds, 1..3600.
        stylesheet: Stylesheet URL.
        inprocess: NDL processing hint flag.
        lang: Response language (``ja``/``en``).
        sort: Client-side sort.
        filter: Client-side filter.
        include_raw_xml: Keep the response body on the result.
    """

    maximum_records: int = DEFAULT_MAXIMUM_RECORDS
    start_record: int = 1
    record_schema: str = DEFAULT_RECORD_SCHEMA
    version: str = DEFAULT_VERSION
    record_packing: Optional[str] = None
    server_sort: Optional[str] = None
    result_set_ttl: Optional[int] = None
    stylesheet: Optional[str] = None
    inprocess: Optional[bool] = None
    lang: Optional[str] = None
    sort: Optional[SortSpec] = None
    filter: Optional[ItemFilter] = None  # noqa: A003 - option name
    include_raw_xml: bool = False


def check_search_options(options: SearchOptions) -> None:
    """Validate search options.

    Raises:
        ValidationError: Listing every invalid option.
    """
    problems: list[str] = []
    if not isinstance(options.maximum_records, int) or not 1 <= options.maximum_records <= MAX_MAXIMUM_RECORDS:
        problems.append(f"maximum_records must be between 1 and {MAX_MAXIMUM_RECORDS}")
    if not isinstance(options.start_record, int) or options.start_record < 1:
        problems.append("start_record must be >= 1")
    if options.record_schema not in RECORD_SCHEMAS:
        problems.append(f"Unsupported record_schema: {options.record_schema!r}")
    if options.version not in SRU_VERSIONS:
        problems.append(f"version must be one of {sorted(SRU_VERSIONS)}")
    if options.record_packing is not None and options.record_packing not in RECORD_PACKINGS:
        problems.append(f"record_packing must be one of {sorted(RECORD_PACKINGS)}")
    if options.result_set_ttl is not None and not 1 <= options.result_set_ttl <= MAX_RESULT_SET_TTL:
        problems.append(f"result_set_ttl must be between 1 and {MAX_RESULT_SET_TTL}")
    if options.stylesheet is not None and not options.stylesheet.startswith(("http://", "https://")):
        problems.append("stylesheet must be an http(s) URL")
    if options.lang is not None and options.lang not in RESPONSE_LANGS:
        problems.append(f"lang must be one of {sorted(RESPONSE_LANGS)}")
    if options.sort is not None:
        if options.sort.field not in SORT_FIELDS:
            problems.append(f"sort.field must be one of {sorted(SORT_FIELDS)}")
        if options.sort.order not in SORT_ORDERS:
            problems.append(f"sort.order must be one of {sorted(SORT_ORDERS)}")
    if options.filter is not None and (options.filter.date_from or options.filter.date_to):
        problems.extend(
            check_date_range(
                DateRange(options.filter.date_from, options.filter.date_to),
                config_key="filter.date_range",
            )
        )
    if problems:
        raise ValidationError("Invalid search options", problems=tuple(problems))


@dataclass(slots=True)
class SruSearchService:
    """Application service running SRU searches through a transport.

    Attributes:
        client: Transport collaborator (usually ``SruApiClient``).
        parser: Response parser; swap in tests to feed pre-parsed responses.
    """

    client: SruTransport
    parser: Callable[[str], SruResponse] = parse_sru_response

    def search(self, params: SimpleParamsInput, options: SearchOptions | None = None) -> SearchResponse:
        """Search with named parameters.

        Args:
            params: ``SimpleSearchParams`` or an equivalent mapping.
            options: Request and refinement options.

        Returns:
            SearchResponse; empty (and not dispatched) when no field is set.

        Raises:
            ValidationError: Invalid parameters/options, or an unexpected
                response kind.
            QuerySyntaxError: Syntax or unsupported-feature diagnostic.
            ServiceDiagnosticError: Any other diagnostic.
            RateLimitError, ApiError, NetworkError: From the transport.
        """
        opts = options or SearchOptions()
        check_search_options(opts)
        cql = compile_simple_query(params)
        if not cql:
            log.debug("Empty query, skipping dispatch")
            # An empty result always reports page 1.
            return SearchResponse(
                items=[],
                pagination=compute_pagination(0, opts.maximum_records, 1),
                query=QueryInfo(cql="", schema=opts.record_schema),
            )
        return self._execute(cql, opts)

    def search_cql(self, query: str, options: SearchOptions | None = None) -> SearchResponse:
        """Search with a raw CQL string.

        Raises:
            ValidationError: If ``query`` is blank or options are invalid.
        """
        opts = options or SearchOptions()
        check_search_options(opts)
        if not query or not query.strip():
            raise ValidationError("CQL query cannot be empty")
        return self._execute(query.strip(), opts)

    def explain(self, version: str | None = None, record_packing: str | None = None) -> SruExplain:
        """Fetch the service capability description.

        Raises:
            ValidationError: On invalid arguments or a non-explain response.
        """
        problems: list[str] = []
        if version is not None and version not in SRU_VERSIONS:
            problems.append(f"version must be one of {sorted(SRU_VERSIONS)}")
        if record_packing is not None and record_packing not in RECORD_PACKINGS:
            problems.append(f"record_packing must be one of {sorted(RECORD_PACKINGS)}")
        if problems:
            raise ValidationError("Invalid explain parameters", problems=tuple(problems))

        xml = self.client.explain(ExplainRequest(version=version, record_packing=record_packing))
        response = self.parser(xml)
        if not isinstance(response, SruExplain):
            raise ValidationError("Expected explain response but got searchRetrieve response")
        return response

    def _execute(self, cql: str, opts: SearchOptions) -> SearchResponse:
        request = SearchRetrieveRequest(
            query=cql,
            version=opts.version,
            start_record=opts.start_record,
            maximum_records=opts.maximum_records,
            record_schema=opts.record_schema,
            record_packing=opts.record_packing,
            sort_by=opts.server_sort,
            result_set_ttl=opts.result_set_ttl,
            stylesheet=opts.stylesheet,
            inprocess=opts.inprocess,
            lang=opts.lang,
        )
        log.debug("SRU query: %s", cql)
        xml = self.client.search_retrieve(request)
        response = self.parser(xml)
        if not isinstance(response, SruSearchRetrieve):
            raise ValidationError("Expected searchRetrieve response but got explain response")

        error = classify_diagnostics(response.diagnostics)
        if error is not None:
            log.debug("SRU diagnostic classified as %s: %s", error.category, error.message)
            raise error

        items = extract_search_items(response)
        pagination = compute_pagination(
            response.number_of_records,
            opts.maximum_records,
            opts.start_record,
            next_record_position=response.next_record_position,
            result_set_id=response.result_set_id,
        )
        refined = refine_items(items, item_filter=opts.filter, sort=opts.sort)
        log.debug(
            "SRU search done: total=%d extracted=%d returned=%d",
            pagination.total_results,
            len(items),
            len(refined),
        )
        return SearchResponse(
            items=refined,
            pagination=pagination,
            query=QueryInfo(cql=cql, schema=opts.record_schema),
            diagnostics=tuple(response.diagnostics),
            raw_xml=xml if opts.include_raw_xml else None,
        )
