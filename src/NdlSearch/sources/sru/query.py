"""SRU query compiler.

Compiles named search parameters into a CQL query string for the NDL SRU API.

Rules
- Fields are applied in a fixed order, whatever order the caller supplied
  them in: title, creator, subject, publisher, isbn, issn, language,
  date_range, type, anywhere, description.
- ``exclude`` builds a second query (title, creator, subject, language, type),
  negates it and AND-combines it onto the main one.
- Nothing set at all compiles to ``""``; callers treat that as a no-op search.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from NdlSearch.core.cql import CqlQuery
from NdlSearch.core.params import (
    AdvancedSearchParams,
    ExcludeParams,
    SimpleSearchParams,
    check_advanced_params,
    check_simple_params,
    language_codes,
    parse_advanced_params,
    parse_simple_params,
)

SimpleParamsInput = Union[SimpleSearchParams, Mapping[str, Any]]
AdvancedParamsInput = Union[AdvancedSearchParams, Mapping[str, Any]]


def _coerce_simple(params: SimpleParamsInput) -> SimpleSearchParams:
    if isinstance(params, SimpleSearchParams):
        return params
    return parse_simple_params(params)


def _compile_exclude(exclude: ExcludeParams) -> CqlQuery:
    query = CqlQuery()
    if exclude.title:
        query = query.title(exclude.title)
    if exclude.creator:
        query = query.creator(exclude.creator)
    if exclude.subject:
        query = query.subject(exclude.subject)
    codes = language_codes(exclude.language)
    if codes:
        query = query.language(codes)
    if exclude.type:
        query = query.material_type(exclude.type)
    return query


def build_simple_query(params: SimpleParamsInput) -> CqlQuery:
    """Validate named parameters and return the builder value.

    Raises:
        ValidationError: If the parameters are malformed.
    """
    simple = _coerce_simple(params)
    check_simple_params(simple)

    query = CqlQuery()
    if simple.title:
        query = query.title(simple.title)
    if simple.creator:
        query = query.creator(simple.creator)
    if simple.subject:
        query = query.subject(simple.subject)
    if simple.publisher:
        query = query.publisher(simple.publisher)
    if simple.isbn:
        query = query.isbn(simple.isbn)
    if simple.issn:
        query = query.issn(simple.issn)
    codes = language_codes(simple.language)
    if codes:
        query = query.language(codes)
    if simple.date_range is not None:
        query = query.date_range(simple.date_range.date_from, simple.date_range.date_to)
    if simple.type:
        query = query.material_type(simple.type)
    if simple.anywhere:
        query = query.anywhere(simple.anywhere)
    if simple.description:
        query = query.description(simple.description)

    if simple.exclude is not None:
        excluded = _compile_exclude(simple.exclude)
        if excluded:
            query = query.combine_and(excluded.negate())
    return query


def compile_simple_query(params: SimpleParamsInput) -> str:
    """Compile named parameters into CQL.

    Args:
        params: ``SimpleSearchParams`` or an equivalent mapping.

    Returns:
        CQL query string, ``""`` when no field is set.

    Raises:
        ValidationError: If the parameters are malformed; no partial query is
            returned.
    """
    return build_simple_query(params).build()


def compile_advanced_query(params: AdvancedParamsInput) -> str:
    """Compile advanced field conditions into CQL.

    Args:
        params: ``AdvancedSearchParams`` or a mapping with ``fields`` and
            ``operator``.

    Returns:
        CQL query string joined with the chosen boolean operator.

    Raises:
        ValidationError: If a field, operator or value is invalid.
    """
    advanced = params if isinstance(params, AdvancedSearchParams) else parse_advanced_params(params)
    check_advanced_params(advanced)
    query = CqlQuery(operator=advanced.operator)
    for item in advanced.fields:
        query = query.add_condition(item.field, item.value, item.operator)
    return query.build()
