"""SRU XML response parser.

Parses an SRU response into the tagged ``SruSearchRetrieve`` / ``SruExplain``
variant. Element matching is by local name so that namespace prefixes used by
the service (``srw:``, ``zs:``, none) do not matter.
"""

from __future__ import annotations

from typing import Iterator, Optional

from lxml import etree

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import (
    DiagnosticRecord,
    IndexInfo,
    SchemaInfo,
    SruExplain,
    SruRecord,
    SruResponse,
    SruSearchRetrieve,
)


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def parse_xml(text: str | bytes) -> etree._Element:
    """Parse XML text safely (no entity resolution, no network).

    Raises:
        ValidationError: If the text is not well-formed XML.
    """
    data = text.encode("utf-8") if isinstance(text, str) else text
    try:
        return etree.fromstring(data, parser=_xml_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ValidationError(f"Failed to parse SRU XML response: {e}", cause=e) from e


def local_name(element: etree._Element) -> str:
    """Return the tag without its namespace (``""`` for comments/PIs)."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def children(element: etree._Element | None, name: str) -> Iterator[etree._Element]:
    """Yield direct children whose local name is ``name``."""
    if element is None:
        return
    for child in element:
        if local_name(child) == name:
            yield child


def child(element: etree._Element | None, name: str) -> Optional[etree._Element]:
    """Return the first direct child named ``name`` or None."""
    return next(children(element, name), None)


def child_text(element: etree._Element | None, name: str) -> Optional[str]:
    """Return stripped text of the first child named ``name`` (None when blank)."""
    found = child(element, name)
    if found is None or found.text is None:
        return None
    text = found.text.strip()
    return text or None


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_diagnostics(container: etree._Element | None) -> tuple[DiagnosticRecord, ...]:
    out: list[DiagnosticRecord] = []
    for diag in children(child(container, "diagnostics"), "diagnostic"):
        uri = child_text(diag, "uri")
        details = child_text(diag, "details")
        message = child_text(diag, "message") or details or uri or "Unknown diagnostic"
        out.append(
            DiagnosticRecord(
                message=message,
                uri=uri,
                code=child_text(diag, "code"),
                details=details,
            )
        )
    return tuple(out)


def _parse_record(record: etree._Element) -> SruRecord:
    packing = child_text(record, "recordPacking") or "xml"
    data_el = child(record, "recordData")
    data: object = None
    if data_el is not None:
        elements = [el for el in data_el if isinstance(el.tag, str)]
        if elements:
            data = elements[0]
        elif data_el.text and data_el.text.strip():
            data = data_el.text.strip()
    return SruRecord(
        schema=child_text(record, "recordSchema") or "",
        packing=packing,
        data=data,
        position=_to_int(child_text(record, "recordPosition")),
        identifier=child_text(record, "recordIdentifier"),
    )


def _parse_search_retrieve(root: etree._Element) -> SruSearchRetrieve:
    number_text = child_text(root, "numberOfRecords")
    number = _to_int(number_text)
    if number is None:
        raise ValidationError(
            "Invalid SRU search response format: numberOfRecords is missing or not an integer"
        )
    echoed = child(root, "echoedSearchRetrieveRequest")
    return SruSearchRetrieve(
        version=child_text(root, "version") or "",
        number_of_records=number,
        records=tuple(_parse_record(r) for r in children(child(root, "records"), "record")),
        diagnostics=_parse_diagnostics(root),
        result_set_id=child_text(root, "resultSetId"),
        result_set_idle_time=_to_int(child_text(root, "resultSetIdleTime")),
        next_record_position=_to_int(child_text(root, "nextRecordPosition")),
        echoed_query=child_text(echoed, "query"),
    )


def _parse_explain(root: etree._Element) -> SruExplain:
    explain: etree._Element | None = None
    data_el = child(child(root, "record"), "recordData")
    if data_el is not None:
        explain = child(data_el, "explain")

    server = child(explain, "serverInfo")
    database = child(explain, "databaseInfo")

    indexes: list[IndexInfo] = []
    for index in children(child(explain, "indexInfo"), "index"):
        name_el = child(child(index, "map"), "name")
        if name_el is None or not (name_el.text or "").strip():
            continue
        indexes.append(
            IndexInfo(
                name=name_el.text.strip(),
                title=child_text(index, "title"),
                set=name_el.get("set"),
            )
        )

    schemas: list[SchemaInfo] = []
    for schema in children(child(explain, "schemaInfo"), "schema"):
        identifier = schema.get("identifier")
        if not identifier:
            continue
        schemas.append(
            SchemaInfo(identifier=identifier, name=schema.get("name"), title=child_text(schema, "title"))
        )

    return SruExplain(
        version=child_text(root, "version") or "",
        host=child_text(server, "host"),
        port=_to_int(child_text(server, "port")),
        database=child_text(server, "database"),
        title=child_text(database, "title"),
        description=child_text(database, "description"),
        indexes=tuple(indexes),
        schemas=tuple(schemas),
        diagnostics=_parse_diagnostics(root),
    )


def parse_sru_response(xml_text: str | bytes) -> SruResponse:
    """Parse SRU response XML.

    Args:
        xml_text: Response body.

    Returns:
        ``SruSearchRetrieve`` or ``SruExplain`` depending on the root element.

    Raises:
        ValidationError: On malformed XML or an unexpected root element.
    """
    root = parse_xml(xml_text)
    name = local_name(root)
    if name == "searchRetrieveResponse":
        return _parse_search_retrieve(root)
    if name == "explainResponse":
        return _parse_explain(root)
    raise ValidationError(
        f"Invalid SRU response: no searchRetrieveResponse or explainResponse found (root={name!r})"
    )
