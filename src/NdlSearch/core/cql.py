"""CQL query builder.

Builds boolean CQL query strings for the NDL SRU API out of field/value/operator
conditions. ``CqlQuery`` is an immutable value: every operation returns a new
query, so a builder can be shared freely between calls.

Rendering rules
- exact (``=``/``exact``)  -> field="value"
- ``adj`` / ``contains``   -> field adj "value"
- ``all``                  -> field all "value"
- ``any``                  -> field any "value"
- ``starts``               -> field="value*"
- ``ends``                 -> field="*value"

Values are escaped (backslash, double quote, ``*``, ``?``) before rendering
unless ``auto_escape`` is disabled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Final, Iterable, Literal

from NdlSearch.core.params import DateRange, check_date_range

CqlOperator = Literal["=", "exact", "adj", "all", "any", "contains", "starts", "ends"]
BooleanOperator = Literal["AND", "OR"]

_OPERATOR_TEMPLATES: Final[dict[str, str]] = {
    "=": '{field}="{value}"',
    "exact": '{field}="{value}"',
    "adj": '{field} adj "{value}"',
    "contains": '{field} adj "{value}"',
    "all": '{field} all "{value}"',
    "any": '{field} any "{value}"',
    "starts": '{field}="{value}*"',
    "ends": '{field}="*{value}"',
}
_BOOLEAN_OPERATORS: Final[frozenset[str]] = frozenset({"AND", "OR"})

FREE_TEXT_FIELD: Final[str] = "anywhere"

_ESCAPE_RE = re.compile(r'([\\"*?])')
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_FREE_TEXT_RE = re.compile(rf'(?:^|[\s(]){FREE_TEXT_FIELD}(?:=|\s)')
_ISBN_STRIP_RE = re.compile(r"[-\s]")

_UNESCAPED_QUOTE_RE = re.compile(r'(?<!\\)"')
_AND_RE = re.compile(r"\bAND\b", re.IGNORECASE)
_OR_RE = re.compile(r"\bOR\b", re.IGNORECASE)
_NOT_RE = re.compile(r"\bNOT\b", re.IGNORECASE)

_MAX_COMPLEXITY = 10
_MANY_CONDITIONS = 5
_VERY_COMPLEX = 7


def escape_value(value: str) -> str:
    """Escape CQL special characters (``\\``, ``"``, ``*``, ``?``)."""
    return _ESCAPE_RE.sub(r"\\\1", value)


def unescape_value(value: str) -> str:
    """Reverse ``escape_value``."""
    return _UNESCAPE_RE.sub(r"\1", value)


def render_condition(field_name: str, value: str, operator: str = "=") -> str:
    """Render one condition without escaping.

    Raises:
        ValueError: If ``operator`` is not a known CQL relation.
    """
    template = _OPERATOR_TEMPLATES.get(operator)
    if template is None:
        raise ValueError(f"Unsupported CQL operator: {operator}")
    return template.format(field=field_name, value=value)


def _clamp(value: int) -> int:
    return min(_MAX_COMPLEXITY, max(1, value))


@dataclass(frozen=True, slots=True)
class QueryValidation:
    """Outcome of validating a query.

    Attributes:
        is_valid: True when no errors were found.
        query: The validated query text.
        errors: Blocking problems.
        warnings: Non-blocking remarks (slow or broad queries).
        complexity: Score between 1 and 10.
    """

    is_valid: bool
    query: str
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    complexity: int = 1


@dataclass(frozen=True, slots=True)
class CqlQuery:
    """Immutable CQL query value.

    Attributes:
        conditions: Rendered conditions and groups, in insertion order.
        operator: Boolean operator joining the conditions.
        auto_escape: Escape values before rendering.
        add_parentheses: Parenthesize both sides in ``combine_and``.
        default_text_operator: Relation used by ``anywhere``.
    """

    conditions: tuple[str, ...] = ()
    operator: BooleanOperator = "AND"
    auto_escape: bool = True
    add_parentheses: bool = True
    default_text_operator: CqlOperator = "="

    def __post_init__(self) -> None:
        if self.operator not in _BOOLEAN_OPERATORS:
            raise ValueError(f"Unsupported boolean operator: {self.operator}")
        if self.default_text_operator not in _OPERATOR_TEMPLATES:
            raise ValueError(f"Unsupported CQL operator: {self.default_text_operator}")

    def __bool__(self) -> bool:
        return bool(self.conditions)

    def __str__(self) -> str:
        return self.build()

    def __and__(self, other: CqlQuery) -> CqlQuery:
        return self.combine_and(other)

    def __or__(self, other: CqlQuery) -> CqlQuery:
        return self.combine_or(other)

    def __invert__(self) -> CqlQuery:
        return self.negate()

    # Core operations

    def add_condition(self, field_name: str, value: str, operator: CqlOperator = "=") -> CqlQuery:
        """Return a query with one more field condition.

        Blank values are dropped and the query is returned unchanged.
        """
        if not value or not value.strip():
            return self
        rendered_value = escape_value(value) if self.auto_escape else value
        return self.add_group(render_condition(field_name, rendered_value, operator))

    def add_conditions(self, conditions: Iterable[tuple[str, str, CqlOperator]]) -> CqlQuery:
        """Add several ``(field, value, operator)`` conditions in order."""
        query = self
        for field_name, value, operator in conditions:
            query = query.add_condition(field_name, value, operator)
        return query

    def add_group(self, expression: str) -> CqlQuery:
        """Append an already rendered sub-query as-is."""
        if not expression:
            return self
        return replace(self, conditions=self.conditions + (expression,))

    def combine_and(self, other: CqlQuery) -> CqlQuery:
        """Combine with another query as two parenthesized halves.

        The halves become this query's conditions, so ``build`` joins them
        with ``self.operator``: AND on a default builder, OR on an OR builder.
        """
        other_query = other.build()
        if not other_query:
            return self
        if not self.conditions:
            return self.add_group(other_query)
        current = self._joined()
        if self.add_parentheses:
            return replace(self, conditions=(f"({current})", f"({other_query})"))
        return replace(self, conditions=(current, other_query))

    def combine_or(self, other: CqlQuery) -> CqlQuery:
        """OR-combine with another query into a single condition."""
        other_query = other.build()
        if not other_query:
            return self
        if not self.conditions:
            return self.add_group(other_query)
        return replace(self, conditions=(f"({self._joined()}) OR ({other_query})",))

    def negate(self) -> CqlQuery:
        """Wrap the accumulated conditions in ``NOT (...)``."""
        if not self.conditions:
            return self
        return replace(self, conditions=(f"NOT ({self._joined()})",))

    def build(self) -> str:
        """Render the final CQL string (empty string for an empty query)."""
        return self._joined()

    def validate(self) -> QueryValidation:
        """Score the query and report problems."""
        query = self.build()
        count = len(self.conditions)
        complexity = _clamp(count)
        errors: list[str] = []
        warnings: list[str] = []

        if not query:
            errors.append("Query is empty")

        if count > _MANY_CONDITIONS:
            warnings.append("Complex query with many conditions may be slow")
            complexity = _clamp(complexity + 2)

        if any(_FREE_TEXT_RE.search(condition) for condition in self.conditions):
            warnings.append("Full-text search across all fields may return many results")
            complexity = _clamp(complexity + 1)

        return QueryValidation(
            is_valid=not errors,
            query=query,
            errors=tuple(errors),
            warnings=tuple(warnings),
            complexity=complexity,
        )

    # Field sugar

    def title(self, value: str, operator: CqlOperator = "=") -> CqlQuery:
        return self.add_condition("title", value, operator)

    def creator(self, value: str, operator: CqlOperator = "=") -> CqlQuery:
        return self.add_condition("creator", value, operator)

    def subject(self, value: str, operator: CqlOperator = "=") -> CqlQuery:
        return self.add_condition("subject", value, operator)

    def publisher(self, value: str, operator: CqlOperator = "=") -> CqlQuery:
        return self.add_condition("publisher", value, operator)

    def description(self, value: str, operator: CqlOperator = "=") -> CqlQuery:
        return self.add_condition("description", value, operator)

    def material_type(self, value: str) -> CqlQuery:
        return self.add_condition("type", value, "=")

    def isbn(self, value: str) -> CqlQuery:
        """ISBN condition; hyphens and whitespace are stripped first."""
        return self.add_condition("isbn", _ISBN_STRIP_RE.sub("", value), "=")

    def issn(self, value: str) -> CqlQuery:
        return self.add_condition("issn", value, "=")

    def language(self, codes: str | Iterable[str]) -> CqlQuery:
        """Language filter; several codes render as an OR group."""
        values = [codes] if isinstance(codes, str) else [c for c in codes if c and c.strip()]
        if not values:
            return self
        if len(values) == 1:
            return self.add_condition("language", values[0], "=")
        rendered = [render_condition("language", self._value(code)) for code in values]
        return self.add_group("(" + " OR ".join(rendered) + ")")

    def date_range(self, date_from: str | None = None, date_to: str | None = None) -> CqlQuery:
        """Publication date bounds rendered with ``from`` / ``until``.

        Raises:
            ValueError: If a bound is not ``YYYY``/``YYYY-MM-DD`` or the range
                is reversed.
        """
        date_from, date_to = date_from or None, date_to or None
        problems = check_date_range(DateRange(date_from, date_to))
        if problems:
            raise ValueError("; ".join(problems))
        bounds: list[str] = []
        if date_from:
            bounds.append(f'from="{date_from}"')
        if date_to:
            bounds.append(f'until="{date_to}"')
        if not bounds:
            return self
        if len(bounds) == 1:
            return self.add_group(bounds[0])
        return self.add_group("(" + " AND ".join(bounds) + ")")

    def anywhere(self, text: str) -> CqlQuery:
        """Free-text condition across all indexes."""
        return self.add_condition(FREE_TEXT_FIELD, text, self.default_text_operator)

    def _value(self, value: str) -> str:
        return escape_value(value) if self.auto_escape else value

    def _joined(self) -> str:
        return f" {self.operator} ".join(self.conditions)


def validate_cql_query(query: str) -> QueryValidation:
    """Check a raw CQL string for balance problems and score its complexity.

    Args:
        query: CQL text, typically written by hand.

    Returns:
        Validation result; the query is echoed stripped.
    """
    text = query or ""
    errors: list[str] = []
    warnings: list[str] = []

    if not text.strip():
        errors.append("Query cannot be empty")

    if text.count("(") != text.count(")"):
        errors.append("Unmatched parentheses in query")

    if len(_UNESCAPED_QUOTE_RE.findall(text)) % 2 != 0:
        errors.append("Unmatched quotes in query")

    and_count = len(_AND_RE.findall(text))
    or_count = len(_OR_RE.findall(text))
    not_count = len(_NOT_RE.findall(text))
    complexity = min(_MAX_COMPLEXITY, 1 + and_count + or_count + not_count * 2)

    if complexity > _VERY_COMPLEX:
        warnings.append("Very complex query may be slow")

    return QueryValidation(
        is_valid=not errors,
        query=text.strip(),
        errors=tuple(errors),
        warnings=tuple(warnings),
        complexity=complexity,
    )
