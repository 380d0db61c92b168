from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional, Sequence, Union


UNKNOWN_TITLE = "Unknown Title"


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """SRU diagnostic returned by the service, even on HTTP 200.

    Attributes:
        uri: Diagnostic identifier URI (e.g. ``info:srw/diagnostic/1/10``).
        code: Numeric code as text, when the service sent one.
        message: Human-readable message.
        details: Supplementary detail text.
    """

    message: str
    uri: Optional[str] = None
    code: Optional[str] = None
    details: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PageParams:
    """Parameters that fetch a neighbouring page."""

    start_index: int
    items_per_page: int


@dataclass(frozen=True, slots=True)
class PaginationState:
    """Navigation state derived from a start position and a total count.

    ``current_page`` and ``total_pages`` are always computed, never supplied.

    Attributes:
        total_results: Total records matching the query.
        current_page: 1-based page number containing ``start_index``.
        total_pages: ``ceil(total_results / items_per_page)``.
        items_per_page: Page size.
        start_index: Protocol-native start position (1-based).
        has_previous_page: ``current_page > 1``.
        has_next_page: ``current_page < total_pages``.
        next_page_params: Parameters for the next page, if any.
        previous_page_params: Parameters for the previous page, if any.
        next_record_position: Server-reported next record position.
        result_set_id: Server-side result set identifier.
    """

    total_results: int
    current_page: int
    total_pages: int
    items_per_page: int
    start_index: int
    has_previous_page: bool
    has_next_page: bool
    next_page_params: Optional[PageParams] = None
    previous_page_params: Optional[PageParams] = None
    next_record_position: Optional[int] = None
    result_set_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SearchItem:
    """Normalized bibliographic record.

    Attributes:
        title: Record title; ``"Unknown Title"`` when nothing was extractable.
        identifier: First identifier (URI, ISBN, JP number...).
        creators: Creator names in record order.
        publishers: Publisher names.
        date: Publication date text as sent by the service.
        subjects: Subject headings.
        type: Material type.
        language: Language code.
        raw: Opaque record payload for callers needing unmapped fields.
    """

    title: str = UNKNOWN_TITLE
    identifier: Optional[str] = None
    creators: Sequence[str] = ()
    publishers: Sequence[str] = ()
    date: Optional[str] = None
    subjects: Sequence[str] = ()
    type: Optional[str] = None  # noqa: A003 - bibliographic field name
    language: Optional[str] = None
    raw: Any = None


@dataclass(frozen=True, slots=True)
class QueryInfo:
    """Echo of what was sent: the CQL text and the record schema."""

    cql: str
    schema: str


@dataclass(frozen=True, slots=True)
class SearchResponse:
    """Final result of a search call."""

    items: Sequence[SearchItem]
    pagination: PaginationState
    query: QueryInfo
    diagnostics: Sequence[DiagnosticRecord] = ()
    raw_xml: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SruRecord:
    """One record of a searchRetrieve response.

    Attributes:
        schema: Record schema identifier.
        packing: ``xml`` or ``string``.
        data: Parsed record payload (an lxml element, or text for string packing).
        position: 1-based position in the result set.
        identifier: Record identifier if the service sent one.
    """

    schema: str
    packing: str
    data: Any
    position: Optional[int] = None
    identifier: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SruSearchRetrieve:
    """Parsed ``searchRetrieveResponse``."""

    version: str
    number_of_records: int
    records: Sequence[SruRecord] = ()
    diagnostics: Sequence[DiagnosticRecord] = ()
    result_set_id: Optional[str] = None
    result_set_idle_time: Optional[int] = None
    next_record_position: Optional[int] = None
    echoed_query: Optional[str] = None
    kind: Literal["searchRetrieve"] = "searchRetrieve"


@dataclass(frozen=True, slots=True)
class IndexInfo:
    """An index advertised by ``explain``."""

    name: str
    title: Optional[str] = None
    set: Optional[str] = None  # noqa: A003 - CQL context set name


@dataclass(frozen=True, slots=True)
class SchemaInfo:
    """A record schema advertised by ``explain``."""

    identifier: str
    name: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SruExplain:
    """Parsed ``explainResponse`` (service capabilities)."""

    version: str
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    indexes: Sequence[IndexInfo] = ()
    schemas: Sequence[SchemaInfo] = ()
    diagnostics: Sequence[DiagnosticRecord] = ()
    kind: Literal["explain"] = "explain"


SruResponse = Union[SruSearchRetrieve, SruExplain]


@dataclass(frozen=True, slots=True)
class OpenSearchItem:
    """One entry of an OpenSearch feed."""

    title: str
    link: Optional[str] = None
    description: Optional[str] = None
    published: Optional[str] = None
    published_at: Optional[datetime] = None
    authors: Sequence[str] = ()
    publisher: Optional[str] = None
    categories: Sequence[str] = ()
    raw: Any = None


@dataclass(frozen=True, slots=True)
class OpenSearchResponse:
    """Result of an OpenSearch query.

    ``start`` stays 0-based as the protocol sends it; ``pagination`` is 1-based.
    """

    items: Sequence[OpenSearchItem]
    pagination: PaginationState
    start: int
    query: str
    format: str  # noqa: A003 - feed format name
