"""Record extraction for SRU searchRetrieve responses.

Maps ``srw_dc:dc`` (Dublin Core) and DCNDL ``rdf:RDF`` payloads onto
``SearchItem``. Anything that cannot be mapped keeps the defaults; the record
payload itself is always kept on ``SearchItem.raw``.
"""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

from lxml import etree

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import UNKNOWN_TITLE, SearchItem, SruRecord, SruResponse, SruSearchRetrieve
from NdlSearch.sources.sru.parser import local_name, parse_xml
from NdlSearch.utils.log import log

DC_NS = "http://purl.org/dc/elements/1.1/"
DCTERMS_NS = "http://purl.org/dc/terms/"
DCNDL_NS = "http://ndl.go.jp/dcndl/terms/"
FOAF_NS = "http://xmlns.com/foaf/0.1/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS_NS = "http://www.w3.org/2000/01/rdf-schema#"


def _ns_children(element: etree._Element | None, ns: str, name: str) -> Iterator[etree._Element]:
    if element is None:
        return
    tag = f"{{{ns}}}{name}"
    for child in element:
        if child.tag == tag:
            yield child


def _texts(element: etree._Element | None, ns: str, name: str) -> list[str]:
    out: list[str] = []
    for child in _ns_children(element, ns, name):
        text = "".join(child.itertext()).strip()
        if text:
            out.append(text)
    return out


def _first_text(element: etree._Element | None, ns: str, name: str) -> Optional[str]:
    values = _texts(element, ns, name)
    return values[0] if values else None


def _record_root(record: SruRecord) -> Optional[etree._Element]:
    data = record.data
    if data is None:
        return None
    if isinstance(data, str):
        try:
            return parse_xml(data)
        except ValidationError as e:
            log.debug("SRU record payload is not XML, keeping defaults: %s", e)
            return None
    return data


def _from_dublin_core(dc: etree._Element) -> dict[str, object]:
    fields: dict[str, object] = {}
    title = _first_text(dc, DC_NS, "title")
    if title:
        fields["title"] = title
    creators = _texts(dc, DC_NS, "creator")
    if creators:
        fields["creators"] = tuple(creators)
    publishers = _texts(dc, DC_NS, "publisher")
    if publishers:
        fields["publishers"] = tuple(publishers)
    subjects = _texts(dc, DC_NS, "subject")
    if subjects:
        fields["subjects"] = tuple(subjects)
    for key in ("date", "language", "type"):
        value = _first_text(dc, DC_NS, key)
        if value:
            fields[key] = value
    identifier = _first_text(dc, DC_NS, "identifier")
    if identifier:
        fields["identifier"] = identifier
    return fields


def _dcndl_publishers(resource: etree._Element) -> list[str]:
    names: list[str] = []
    for publisher in _ns_children(resource, DCTERMS_NS, "publisher"):
        for agent in _ns_children(publisher, FOAF_NS, "Agent"):
            names.extend(_texts(agent, FOAF_NS, "name"))
    return names


def _dcndl_subjects(resource: etree._Element) -> list[str]:
    subjects: list[str] = []
    for subject in _ns_children(resource, DCTERMS_NS, "subject"):
        described = list(_ns_children(subject, RDF_NS, "Description"))
        if described:
            for desc in described:
                subjects.extend(_texts(desc, RDF_NS, "value"))
            continue
        text = "".join(subject.itertext()).strip()
        if text:
            subjects.append(text)
    return subjects


def _from_dcndl(rdf: etree._Element) -> dict[str, object]:
    for resource in _ns_children(rdf, DCNDL_NS, "BibResource"):
        title = _first_text(resource, DCTERMS_NS, "title")
        if not title:
            continue
        fields: dict[str, object] = {"title": title}
        creators = _texts(resource, DC_NS, "creator")
        if creators:
            fields["creators"] = tuple(creators)
        publishers = _dcndl_publishers(resource)
        if publishers:
            fields["publishers"] = tuple(publishers)
        subjects = _dcndl_subjects(resource)
        if subjects:
            fields["subjects"] = tuple(subjects)
        date = _first_text(resource, DCTERMS_NS, "date")
        if date:
            fields["date"] = date
        language = _first_text(resource, DCTERMS_NS, "language")
        if language:
            fields["language"] = language
        for material in _ns_children(resource, DCNDL_NS, "materialType"):
            label = material.get(f"{{{RDFS_NS}}}label")
            if label:
                fields["type"] = label
                break
        about = resource.get(f"{{{RDF_NS}}}about")
        if about:
            fields["identifier"] = about
        return fields
    return {}


def extract_search_item(record: SruRecord) -> SearchItem:
    """Map one SRU record onto a ``SearchItem``."""
    fields: dict[str, object] = {}
    root = _record_root(record)
    if root is not None:
        name = local_name(root)
        if name == "dc":
            fields = _from_dublin_core(root)
        elif name == "RDF":
            fields = _from_dcndl(root)
    if record.identifier:
        fields["identifier"] = record.identifier
    fields.setdefault("title", UNKNOWN_TITLE)
    return SearchItem(raw=record.data, **fields)  # type: ignore[arg-type]


def extract_search_items(response: SruResponse) -> Sequence[SearchItem]:
    """Extract normalized items from a parsed response.

    Returns an empty list for ``explain`` responses.
    """
    if not isinstance(response, SruSearchRetrieve):
        return []
    return [extract_search_item(record) for record in response.records]
