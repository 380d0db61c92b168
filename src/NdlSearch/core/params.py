"""Named search parameters and their validation.

``SimpleSearchParams`` is the caller-facing search request: a bag of optional
named fields that the SRU translator turns into CQL. Validation is explicit
(``check_*``) and always runs before any query is built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Mapping, Sequence

from NdlSearch.core.errors import ValidationError

if TYPE_CHECKING:
    from NdlSearch.core.cql import BooleanOperator, CqlOperator

LANGUAGE_CODES: Final[frozenset[str]] = frozenset(
    {"jpn", "eng", "chi", "kor", "fre", "ger", "rus", "spa", "ita", "por"}
)
MATERIAL_TYPES: Final[frozenset[str]] = frozenset(
    {
        "Book",
        "Article",
        "Journal",
        "Newspaper",
        "Thesis",
        "Map",
        "Music",
        "Video",
        "Sound",
        "Software",
        "Website",
        "Database",
    }
)
SEARCH_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "title",
        "creator",
        "subject",
        "description",
        "publisher",
        "contributor",
        "date",
        "type",
        "format",
        "identifier",
        "source",
        "language",
        "relation",
        "coverage",
        "rights",
        "isbn",
        "issn",
        "jpno",
        "ndlna",
        "anywhere",
    }
)
CQL_OPERATORS: Final[frozenset[str]] = frozenset(
    {"=", "exact", "adj", "all", "any", "contains", "starts", "ends"}
)

_ISBN_RE = re.compile(r"^[\dX-]+$")
_ISSN_RE = re.compile(r"^\d{4}-\d{3}[\dX]$")
_DATE_RE = re.compile(r"^\d{4}(-\d{2}-\d{2})?$")

_SIMPLE_TEXT_KEYS = ("title", "creator", "subject", "publisher", "isbn", "issn", "type", "anywhere", "description")
_EXCLUDE_TEXT_KEYS = ("title", "creator", "subject", "type")


@dataclass(frozen=True, slots=True)
class DateRange:
    """Publication date bounds (``YYYY`` or ``YYYY-MM-DD``), both inclusive."""

    date_from: str | None = None
    date_to: str | None = None


@dataclass(frozen=True, slots=True)
class ExcludeParams:
    """Conditions that must not match; combined as ``NOT (...)``."""

    title: str | None = None
    creator: str | None = None
    subject: str | None = None
    language: str | Sequence[str] | None = None
    type: str | None = None  # noqa: A003 - mirrors the CQL index name


@dataclass(frozen=True, slots=True)
class SimpleSearchParams:
    """Named search criteria.

    Every field is optional; a request with nothing set translates to the empty
    query and short-circuits without contacting the service.

    Attributes:
        title: Title condition.
        creator: Author/creator condition.
        subject: Subject heading condition.
        publisher: Publisher condition.
        isbn: ISBN, hyphens allowed.
        issn: ISSN in ``NNNN-NNNC`` form.
        language: One language code or several (OR-combined).
        date_range: Publication date bounds.
        type: Material type (e.g. ``Book``).
        anywhere: Free text across all indexes.
        description: Content description condition.
        exclude: Conditions to negate.
    """

    title: str | None = None
    creator: str | None = None
    subject: str | None = None
    publisher: str | None = None
    isbn: str | None = None
    issn: str | None = None
    language: str | Sequence[str] | None = None
    date_range: DateRange | None = None
    type: str | None = None  # noqa: A003 - mirrors the CQL index name
    anywhere: str | None = None
    description: str | None = None
    exclude: ExcludeParams | None = None


@dataclass(frozen=True, slots=True)
class SearchField:
    """One advanced-search condition."""

    field: str
    value: str
    operator: CqlOperator = "="


@dataclass(frozen=True, slots=True)
class AdvancedSearchParams:
    """Field conditions joined by a single boolean operator."""

    fields: tuple[SearchField, ...] = ()
    operator: BooleanOperator = "AND"


def language_codes(value: str | Sequence[str] | None) -> tuple[str, ...]:
    """Normalize a language value into a tuple of codes."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    return tuple(code for code in value if code and code.strip())


def check_date_range(date_range: DateRange, config_key: str = "date_range") -> list[str]:
    """Return problems with a date range (empty list when valid)."""
    problems: list[str] = []
    for label, value in (("from", date_range.date_from), ("to", date_range.date_to)):
        if value is not None and not isinstance(value, str):
            problems.append(f"{config_key}.{label} must be a string")
        elif value is not None and not _DATE_RE.match(value):
            problems.append(f"{config_key}.{label} must be YYYY or YYYY-MM-DD: {value!r}")
    if problems:
        return problems
    if date_range.date_from and date_range.date_to and date_range.date_from > date_range.date_to:
        problems.append(f"{config_key}.from must be before or equal to {config_key}.to")
    return problems


def check_simple_params(params: SimpleSearchParams) -> None:
    """Validate simple search parameters.

    Raises:
        ValidationError: If any field violates its format; every problem is
            listed in ``problems``.
    """
    problems: list[str] = []
    for key in _SIMPLE_TEXT_KEYS:
        value = getattr(params, key)
        if value is not None and not isinstance(value, str):
            problems.append(f"{key} must be a string")
    if params.date_range is not None and not isinstance(params.date_range, DateRange):
        problems.append("date_range must be a DateRange")
    if params.exclude is not None and not isinstance(params.exclude, ExcludeParams):
        problems.append("exclude must be an ExcludeParams")
    if problems:
        raise ValidationError("Invalid search parameters", problems=tuple(problems))

    if params.isbn and not _ISBN_RE.match(params.isbn):
        problems.append(f"Invalid ISBN format: {params.isbn!r}")
    if params.issn and not _ISSN_RE.match(params.issn):
        problems.append(f"Invalid ISSN format: {params.issn!r}")
    problems.extend(_check_languages(params.language, "language"))
    if params.date_range is not None:
        problems.extend(check_date_range(params.date_range))
    if params.type and params.type not in MATERIAL_TYPES:
        problems.append(f"Unknown material type: {params.type!r}")

    if params.exclude is not None:
        exclude = params.exclude
        for key in _EXCLUDE_TEXT_KEYS:
            value = getattr(exclude, key)
            if value is not None and not isinstance(value, str):
                problems.append(f"exclude.{key} must be a string")
        problems.extend(_check_languages(exclude.language, "exclude.language"))
        if isinstance(exclude.type, str) and exclude.type and exclude.type not in MATERIAL_TYPES:
            problems.append(f"Unknown material type in exclude: {exclude.type!r}")

    if problems:
        raise ValidationError("Invalid search parameters", problems=tuple(problems))


def check_advanced_params(params: AdvancedSearchParams) -> None:
    """Validate advanced search parameters.

    Raises:
        ValidationError: If a field, operator or value is invalid.
    """
    problems: list[str] = []
    if params.operator not in ("AND", "OR"):
        problems.append(f"operator must be AND or OR: {params.operator!r}")
    for idx, item in enumerate(params.fields):
        if item.field not in SEARCH_FIELDS:
            problems.append(f"fields[{idx}].field is not a known index: {item.field!r}")
        if not isinstance(item.value, str) or not item.value:
            problems.append(f"fields[{idx}].value cannot be empty")
        if item.operator not in CQL_OPERATORS:
            problems.append(f"fields[{idx}].operator is not supported: {item.operator!r}")
    if problems:
        raise ValidationError("Invalid advanced search parameters", problems=tuple(problems))


def parse_simple_params(raw: Mapping[str, Any]) -> SimpleSearchParams:
    """Build ``SimpleSearchParams`` from a plain mapping.

    Accepts ``date_range`` or ``dateRange`` (with ``from``/``to`` keys) and a
    nested ``exclude`` mapping. Key order in ``raw`` has no effect on the
    resulting query.

    Raises:
        ValidationError: On unknown keys or wrongly shaped values.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Search parameters must be a mapping")

    allowed = set(SimpleSearchParams.__dataclass_fields__) | {"dateRange"}
    unknown = sorted(str(key) for key in raw if key not in allowed)
    if unknown:
        raise ValidationError("Invalid search parameters", problems=tuple(f"Unknown parameter: {k}" for k in unknown))

    values: dict[str, Any] = {key: raw[key] for key in _SIMPLE_TEXT_KEYS if raw.get(key) is not None}
    if raw.get("language") is not None:
        values["language"] = _parse_language(raw["language"], "language")

    date_raw = raw.get("date_range", raw.get("dateRange"))
    if date_raw is not None:
        values["date_range"] = _parse_date_range(date_raw)

    exclude_raw = raw.get("exclude")
    if exclude_raw is not None:
        values["exclude"] = _parse_exclude(exclude_raw)

    return SimpleSearchParams(**values)


def parse_advanced_params(raw: Mapping[str, Any]) -> AdvancedSearchParams:
    """Build ``AdvancedSearchParams`` from a mapping with ``fields`` and ``operator``."""
    if not isinstance(raw, Mapping):
        raise ValidationError("Advanced search parameters must be a mapping")
    fields_raw = raw.get("fields") or []
    if not isinstance(fields_raw, (list, tuple)):
        raise ValidationError("Invalid advanced search parameters", problems=("fields must be a list",))
    fields: list[SearchField] = []
    for idx, item in enumerate(fields_raw):
        if not isinstance(item, Mapping):
            raise ValidationError("Invalid advanced search parameters", problems=(f"fields[{idx}] must be an object",))
        fields.append(
            SearchField(
                field=str(item.get("field", "")),
                value=item.get("value", ""),
                operator=item.get("operator") or "=",
            )
        )
    return AdvancedSearchParams(fields=tuple(fields), operator=raw.get("operator") or "AND")


def _check_languages(value: Any, config_key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (str, list, tuple)):
        return [f"{config_key} must be a code or a list of codes"]
    problems: list[str] = []
    for code in language_codes(value):
        if code not in LANGUAGE_CODES:
            problems.append(f"Unknown language code in {config_key}: {code!r}")
    return problems


def _parse_language(value: Any, config_key: str) -> str | tuple[str, ...]:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(code, str) for code in value):
        return tuple(value)
    raise ValidationError("Invalid search parameters", problems=(f"{config_key} must be a code or a list of codes",))


def _parse_date_range(value: Any) -> DateRange:
    if isinstance(value, DateRange):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError("Invalid search parameters", problems=("date_range must be an object",))
    date_from = value.get("from", value.get("date_from"))
    date_to = value.get("to", value.get("date_to"))
    for label, bound in (("from", date_from), ("to", date_to)):
        if bound is not None and not isinstance(bound, str):
            raise ValidationError("Invalid search parameters", problems=(f"date_range.{label} must be a string",))
    return DateRange(date_from=date_from, date_to=date_to)


def _parse_exclude(value: Any) -> ExcludeParams:
    if isinstance(value, ExcludeParams):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError("Invalid search parameters", problems=("exclude must be an object",))
    allowed = set(ExcludeParams.__dataclass_fields__)
    unknown = sorted(str(key) for key in value if key not in allowed)
    if unknown:
        raise ValidationError(
            "Invalid search parameters",
            problems=tuple(f"Unknown exclude parameter: {k}" for k in unknown),
        )
    values: dict[str, Any] = {key: value[key] for key in _EXCLUDE_TEXT_KEYS if value.get(key) is not None}
    if value.get("language") is not None:
        values["language"] = _parse_language(value["language"], "exclude.language")
    return ExcludeParams(**values)
