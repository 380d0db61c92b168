"""Tests for CLI commands and output writers."""

import json
import sys
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NdlSearch.cli.commands import SearchCommand, run_validate
from NdlSearch.cli.ui import cli
from NdlSearch.config import RetryConfig
from NdlSearch.core.cql import CqlQuery
from NdlSearch.core.errors import ApiError
from NdlSearch.core.models import QueryInfo, SearchItem, SearchResponse
from NdlSearch.core.pagination import compute_pagination
from NdlSearch.core.params import SimpleSearchParams
from NdlSearch.renderers import JsonFileWriter, render_json, render_text
from NdlSearch.services.search import SearchOptions

DEFAULT_PATH = REPO_ROOT / "config" / "default.yml"


def _response(cql: str = 'title="A"') -> SearchResponse:
    return SearchResponse(
        items=[SearchItem(title="Kokoro", creators=("Natsume, Soseki",), date="2001", identifier="R1")],
        pagination=compute_pagination(25, 10, 1),
        query=QueryInfo(cql=cql, schema="dcndl"),
    )


class _StubService:
    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls: list[tuple] = []

    def search(self, params, options):
        self.calls.append(("search", params, options))
        return _response(CqlQuery().title(params.title or "").build())

    def search_cql(self, query, options):
        self.calls.append(("cql", query, options))
        if self.failures:
            self.failures -= 1
            raise ApiError("down", status=503)
        return _response(query)


class _StubOutputWriter:
    def __init__(self) -> None:
        self.results = []

    def write_result(self, result) -> None:
        self.results.append(result)

    def finalize(self, action: str) -> None:
        del action


class TestSearchCommand(unittest.TestCase):
    def test_named_params_search_writes_result(self) -> None:
        service = _StubService()
        writer = _StubOutputWriter()
        SearchCommand(
            service=service,
            output_writer=writer,
            retry=RetryConfig(max_attempts=1),
            options=SearchOptions(),
            params=SimpleSearchParams(title="A"),
        ).execute()

        self.assertEqual(service.calls[0][0], "search")
        self.assertEqual(writer.results[0].query.cql, 'title="A"')

    def test_cql_search_retries_server_errors(self) -> None:
        service = _StubService(failures=1)
        writer = _StubOutputWriter()
        SearchCommand(
            service=service,
            output_writer=writer,
            retry=RetryConfig(max_attempts=2, base_pause=0.0, max_sleep=0.0),
            options=SearchOptions(),
            cql='creator="B"',
        ).execute()

        self.assertEqual(len(service.calls), 2)
        self.assertEqual(len(writer.results), 1)


class TestRenderers(unittest.TestCase):
    def test_render_text(self) -> None:
        text = render_text(_response())
        self.assertIn('Query: title="A"', text)
        self.assertIn("Page 1/3", text)
        self.assertIn("1. Kokoro", text)
        self.assertIn("Creators: Natsume, Soseki", text)

    def test_render_json_omits_raw_xml_unless_kept(self) -> None:
        payload = render_json(_response())
        self.assertEqual(payload["protocol"], "sru")
        self.assertEqual(payload["pagination"]["total_pages"], 3)
        self.assertEqual(payload["items"][0]["creators"], ["Natsume, Soseki"])
        self.assertNotIn("raw_xml", payload)

    def test_json_writer_creates_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            writer = JsonFileWriter(tmp)
            writer.write_result(_response())
            writer.finalize("search")
            files = list((Path(tmp) / "json").glob("search_*.json"))
            self.assertEqual(len(files), 1)
            data = json.loads(files[0].read_text(encoding="utf-8"))
        self.assertEqual(data[0]["items"][0]["title"], "Kokoro")


class TestValidateCommand(unittest.TestCase):
    def test_run_validate(self) -> None:
        self.assertTrue(run_validate('title="a"').is_valid)
        self.assertFalse(run_validate('(title="a"').is_valid)

    def test_cli_validate_exit_codes(self) -> None:
        runner = CliRunner()
        ok = runner.invoke(cli, ["--config", str(DEFAULT_PATH), "validate", 'title="a" AND creator="b"'])
        self.assertEqual(ok.exit_code, 0)
        bad = runner.invoke(cli, ["--config", str(DEFAULT_PATH), "validate", '(title="a"'])
        self.assertEqual(bad.exit_code, 1)

    def test_cli_rejects_broken_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.yml"
            path.write_text("sru:\n  maximum_records: 9999\n", encoding="utf-8")
            result = CliRunner().invoke(cli, ["--config", str(path), "validate", 'title="a"'])
        self.assertEqual(result.exit_code, 2)


if __name__ == "__main__":
    unittest.main()
