"""Tests for SRU response parsing and record extraction."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path
from xml.sax.saxutils import escape

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NdlSearch.core.errors import ValidationError
from NdlSearch.core.models import UNKNOWN_TITLE, SruExplain, SruRecord, SruSearchRetrieve
from NdlSearch.sources.sru.parser import parse_sru_response
from NdlSearch.sources.sru.records import extract_search_item, extract_search_items

DC_RESPONSE = """<searchRetrieveResponse xmlns="http://www.loc.gov/zing/srw/">
  <version>1.2</version>
  <numberOfRecords>7208</numberOfRecords>
  <resultSetId>rs-1</resultSetId>
  <resultSetIdleTime>300</resultSetIdleTime>
  <records>
    <record>
      <recordSchema>info:srw/schema/1/dc-v1.1</recordSchema>
      <recordPacking>xml</recordPacking>
      <recordData>
        <srw_dc:dc xmlns:srw_dc="info:srw/schema/1/dc-schema" xmlns:dc="http://purl.org/dc/elements/1.1/">
          <dc:title>吾輩は猫である</dc:title>
          <dc:creator>夏目漱石 著</dc:creator>
          <dc:publisher>岩波書店</dc:publisher>
          <dc:date>1990</dc:date>
          <dc:language>jpn</dc:language>
          <dc:subject>小説</dc:subject>
          <dc:subject>日本文学</dc:subject>
          <dc:type>Book</dc:type>
          <dc:identifier>urn:isbn:9784003101018</dc:identifier>
        </srw_dc:dc>
      </recordData>
      <recordPosition>1</recordPosition>
    </record>
    <record>
      <recordSchema>info:srw/schema/1/dc-v1.1</recordSchema>
      <recordPacking>xml</recordPacking>
      <recordData>
        <srw_dc:dc xmlns:srw_dc="info:srw/schema/1/dc-schema" xmlns:dc="http://purl.org/dc/elements/1.1/">
          <dc:creator>Anonymous</dc:creator>
        </srw_dc:dc>
      </recordData>
      <recordPosition>2</recordPosition>
    </record>
  </records>
  <nextRecordPosition>3</nextRecordPosition>
  <echoedSearchRetrieveRequest>
    <query>title="猫"</query>
  </echoedSearchRetrieveRequest>
</searchRetrieveResponse>
"""

DCNDL_RDF = """<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
    xmlns:rdfs="http://www.w3.org/2000/01/rdf-schema#"
    xmlns:dc="http://purl.org/dc/elements/1.1/"
    xmlns:dcterms="http://purl.org/dc/terms/"
    xmlns:dcndl="http://ndl.go.jp/dcndl/terms/"
    xmlns:foaf="http://xmlns.com/foaf/0.1/">
  <dcndl:BibAdminResource rdf:about="https://ndlsearch.ndl.go.jp/books/R100000002-I000001">
    <dcndl:record rdf:resource="https://ndlsearch.ndl.go.jp/books/R100000002-I000001#material"/>
  </dcndl:BibAdminResource>
  <dcndl:BibResource rdf:about="https://ndlsearch.ndl.go.jp/books/R100000002-I000001#material">
    <dcterms:title>Kokoro</dcterms:title>
    <dc:creator>Natsume, Soseki</dc:creator>
    <dcterms:publisher>
      <foaf:Agent>
        <foaf:name>Iwanami Shoten</foaf:name>
      </foaf:Agent>
    </dcterms:publisher>
    <dcterms:subject>
      <rdf:Description>
        <rdf:value>Japanese fiction</rdf:value>
      </rdf:Description>
    </dcterms:subject>
    <dcterms:date>2001</dcterms:date>
    <dcterms:language>jpn</dcterms:language>
    <dcndl:materialType rdf:resource="http://ndl.go.jp/ndltype/Book" rdfs:label="Book"/>
  </dcndl:BibResource>
</rdf:RDF>"""

DCNDL_RESPONSE = f"""<srw:searchRetrieveResponse xmlns:srw="http://www.loc.gov/zing/srw/">
  <srw:version>1.2</srw:version>
  <srw:numberOfRecords>1</srw:numberOfRecords>
  <srw:records>
    <srw:record>
      <srw:recordSchema>dcndl</srw:recordSchema>
      <srw:recordPacking>string</srw:recordPacking>
      <srw:recordData>{escape(DCNDL_RDF)}</srw:recordData>
      <srw:recordPosition>1</srw:recordPosition>
    </srw:record>
  </srw:records>
</srw:searchRetrieveResponse>
"""

DIAGNOSTIC_RESPONSE = """<searchRetrieveResponse xmlns="http://www.loc.gov/zing/srw/"
    xmlns:diag="http://www.loc.gov/zing/srw/diagnostic/">
  <version>1.2</version>
  <numberOfRecords>0</numberOfRecords>
  <diagnostics>
    <diag:diagnostic>
      <diag:uri>info:srw/diagnostic/1/10</diag:uri>
      <diag:message>Query syntax error</diag:message>
      <diag:details>unexpected token</diag:details>
    </diag:diagnostic>
    <diag:diagnostic>
      <diag:uri>info:srw/diagnostic/1/99</diag:uri>
    </diag:diagnostic>
  </diagnostics>
</searchRetrieveResponse>
"""

EXPLAIN_RESPONSE = """<explainResponse xmlns="http://www.loc.gov/zing/srw/">
  <version>1.2</version>
  <record>
    <recordSchema>http://explain.z3950.org/dtd/2.0/</recordSchema>
    <recordPacking>xml</recordPacking>
    <recordData>
      <explain xmlns="http://explain.z3950.org/dtd/2.0/">
        <serverInfo protocol="SRU">
          <host>ndlsearch.ndl.go.jp</host>
          <port>443</port>
          <database>api/sru</database>
        </serverInfo>
        <databaseInfo>
          <title>NDL Search</title>
          <description>National Diet Library Search</description>
        </databaseInfo>
        <indexInfo>
          <index>
            <title>Title</title>
            <map><name set="dc">title</name></map>
          </index>
          <index>
            <title>Broken</title>
            <map/>
          </index>
        </indexInfo>
        <schemaInfo>
          <schema identifier="info:srw/schema/1/dc-v1.1" name="dc">
            <title>Dublin Core</title>
          </schema>
          <schema name="missing-identifier"/>
        </schemaInfo>
      </explain>
    </recordData>
  </record>
</explainResponse>
"""


class TestParseSearchRetrieve(unittest.TestCase):
    def test_envelope_fields(self) -> None:
        response = parse_sru_response(DC_RESPONSE)
        self.assertIsInstance(response, SruSearchRetrieve)
        self.assertEqual(response.kind, "searchRetrieve")
        self.assertEqual(response.version, "1.2")
        self.assertEqual(response.number_of_records, 7208)
        self.assertEqual(response.result_set_id, "rs-1")
        self.assertEqual(response.result_set_idle_time, 300)
        self.assertEqual(response.next_record_position, 3)
        self.assertEqual(response.echoed_query, 'title="猫"')
        self.assertEqual(len(response.records), 2)
        self.assertEqual(response.records[1].position, 2)

    def test_bytes_input(self) -> None:
        response = parse_sru_response(DC_RESPONSE.encode("utf-8"))
        self.assertEqual(response.number_of_records, 7208)

    def test_dublin_core_items(self) -> None:
        items = extract_search_items(parse_sru_response(DC_RESPONSE))
        first, second = items
        self.assertEqual(first.title, "吾輩は猫である")
        self.assertEqual(tuple(first.creators), ("夏目漱石 著",))
        self.assertEqual(tuple(first.publishers), ("岩波書店",))
        self.assertEqual(tuple(first.subjects), ("小説", "日本文学"))
        self.assertEqual(first.date, "1990")
        self.assertEqual(first.language, "jpn")
        self.assertEqual(first.type, "Book")
        self.assertEqual(first.identifier, "urn:isbn:9784003101018")
        self.assertEqual(second.title, UNKNOWN_TITLE)
        self.assertEqual(tuple(second.creators), ("Anonymous",))

    def test_string_packed_dcndl_record(self) -> None:
        response = parse_sru_response(DCNDL_RESPONSE)
        record = response.records[0]
        self.assertEqual(record.packing, "string")
        self.assertIsInstance(record.data, str)

        item = extract_search_items(response)[0]
        self.assertEqual(item.title, "Kokoro")
        self.assertEqual(tuple(item.creators), ("Natsume, Soseki",))
        self.assertEqual(tuple(item.publishers), ("Iwanami Shoten",))
        self.assertEqual(tuple(item.subjects), ("Japanese fiction",))
        self.assertEqual(item.date, "2001")
        self.assertEqual(item.language, "jpn")
        self.assertEqual(item.type, "Book")
        self.assertEqual(item.identifier, "https://ndlsearch.ndl.go.jp/books/R100000002-I000001#material")

    def test_record_identifier_wins(self) -> None:
        record = SruRecord(schema="dcndl", packing="string", data=DCNDL_RDF, identifier="R1")
        self.assertEqual(extract_search_item(record).identifier, "R1")

    def test_unparseable_payload_keeps_defaults(self) -> None:
        record = SruRecord(schema="dcndl", packing="string", data="not xml at all")
        item = extract_search_item(record)
        self.assertEqual(item.title, UNKNOWN_TITLE)
        self.assertEqual(item.raw, "not xml at all")

    def test_diagnostics(self) -> None:
        response = parse_sru_response(DIAGNOSTIC_RESPONSE)
        self.assertEqual(response.number_of_records, 0)
        first, second = response.diagnostics
        self.assertEqual(first.message, "Query syntax error")
        self.assertEqual(first.uri, "info:srw/diagnostic/1/10")
        self.assertEqual(first.details, "unexpected token")
        self.assertIsNone(first.code)
        self.assertEqual(second.message, "info:srw/diagnostic/1/99")


class TestParseExplain(unittest.TestCase):
    def test_explain_fields(self) -> None:
        response = parse_sru_response(EXPLAIN_RESPONSE)
        self.assertIsInstance(response, SruExplain)
        self.assertEqual(response.kind, "explain")
        self.assertEqual(response.host, "ndlsearch.ndl.go.jp")
        self.assertEqual(response.port, 443)
        self.assertEqual(response.database, "api/sru")
        self.assertEqual(response.title, "NDL Search")
        self.assertEqual([(i.name, i.set, i.title) for i in response.indexes], [("title", "dc", "Title")])
        self.assertEqual(len(response.schemas), 1)
        self.assertEqual(response.schemas[0].identifier, "info:srw/schema/1/dc-v1.1")
        self.assertEqual(response.schemas[0].title, "Dublin Core")

    def test_explain_has_no_items(self) -> None:
        self.assertEqual(extract_search_items(parse_sru_response(EXPLAIN_RESPONSE)), [])


class TestParseFailures(unittest.TestCase):
    def test_malformed_xml(self) -> None:
        with self.assertRaises(ValidationError):
            parse_sru_response("<searchRetrieveResponse><numberOfRecords>")

    def test_unknown_root(self) -> None:
        with self.assertRaises(ValidationError):
            parse_sru_response("<html><body>maintenance</body></html>")

    def test_missing_record_count(self) -> None:
        with self.assertRaises(ValidationError):
            parse_sru_response("<searchRetrieveResponse><version>1.2</version></searchRetrieveResponse>")

    def test_non_integer_record_count(self) -> None:
        with self.assertRaises(ValidationError):
            parse_sru_response(
                "<searchRetrieveResponse><numberOfRecords>many</numberOfRecords></searchRetrieveResponse>"
            )


if __name__ == "__main__":
    unittest.main()
