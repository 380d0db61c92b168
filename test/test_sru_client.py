"""Tests for the SRU HTTP client."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import requests

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from NdlSearch.core.errors import ApiError, NetworkError, RateLimitError
from NdlSearch.sources.sru.client import (
    ExplainRequest,
    SearchRetrieveRequest,
    SruApiClient,
    build_explain_params,
    build_search_params,
)


def _response(status: int, text: str = "<ok/>", headers: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = headers or {}
    return resp


def _client_with(resp: MagicMock | None = None, error: Exception | None = None) -> tuple[SruApiClient, MagicMock]:
    client = SruApiClient(base_url="https://example.test/sru", timeout=5.0, user_agent="tests/1.0")
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = resp
    client._session = session
    return client, session


class TestBuildParams(unittest.TestCase):
    def test_only_set_parameters_are_emitted(self) -> None:
        params = build_search_params(SearchRetrieveRequest(query='title="A"'))
        self.assertEqual(params, {"operation": "searchRetrieve", "query": 'title="A"'})

    def test_all_parameters(self) -> None:
        request = SearchRetrieveRequest(
            query='title="A"',
            version="1.2",
            start_record=11,
            maximum_records=20,
            record_schema="dcndl",
            record_packing="xml",
            sort_by="title/ascending",
            result_set_ttl=60,
            inprocess=False,
            lang="en",
        )
        params = build_search_params(request)
        self.assertEqual(params["startRecord"], "11")
        self.assertEqual(params["maximumRecords"], "20")
        self.assertEqual(params["recordSchema"], "dcndl")
        self.assertEqual(params["recordPacking"], "xml")
        self.assertEqual(params["sortBy"], "title/ascending")
        self.assertEqual(params["resultSetTTL"], "60")
        self.assertEqual(params["inprocess"], "false")
        self.assertEqual(params["lang"], "en")

    def test_explain_params(self) -> None:
        self.assertEqual(build_explain_params(ExplainRequest()), {"operation": "explain"})
        self.assertEqual(
            build_explain_params(ExplainRequest(version="1.1")),
            {"operation": "explain", "version": "1.1"},
        )


class TestSruApiClient(unittest.TestCase):
    def test_search_retrieve_returns_text(self) -> None:
        client, session = _client_with(_response(200, "<searchRetrieveResponse/>"))
        text = client.search_retrieve(SearchRetrieveRequest(query='title="A"', maximum_records=5))

        self.assertEqual(text, "<searchRetrieveResponse/>")
        args, kwargs = session.get.call_args
        self.assertEqual(args[0], "https://example.test/sru")
        self.assertEqual(kwargs["params"]["maximumRecords"], "5")
        self.assertEqual(kwargs["headers"]["User-Agent"], "tests/1.0")
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_explain_sends_operation(self) -> None:
        client, session = _client_with(_response(200, "<explainResponse/>"))
        client.explain()
        self.assertEqual(session.get.call_args.kwargs["params"], {"operation": "explain"})

    def test_rate_limit_carries_retry_after(self) -> None:
        client, _ = _client_with(_response(429, headers={"Retry-After": "60"}))
        with self.assertRaises(RateLimitError) as ctx:
            client.search_retrieve(SearchRetrieveRequest(query="x"))
        self.assertEqual(ctx.exception.retry_after, "60")
        self.assertIn("60", ctx.exception.message)

    def test_rate_limit_without_header(self) -> None:
        client, _ = _client_with(_response(429))
        with self.assertRaises(RateLimitError) as ctx:
            client.search_retrieve(SearchRetrieveRequest(query="x"))
        self.assertIsNone(ctx.exception.retry_after)

    def test_server_error_maps_to_api_error(self) -> None:
        client, _ = _client_with(_response(503))
        with self.assertRaises(ApiError) as ctx:
            client.search_retrieve(SearchRetrieveRequest(query="x"))
        self.assertEqual(ctx.exception.status, 503)
        self.assertTrue(ctx.exception.is_server_error)

    def test_not_found_is_not_server_error(self) -> None:
        client, _ = _client_with(_response(404))
        with self.assertRaises(ApiError) as ctx:
            client.search_retrieve(SearchRetrieveRequest(query="x"))
        self.assertEqual(ctx.exception.status, 404)
        self.assertFalse(ctx.exception.is_server_error)

    def test_timeout_maps_to_network_error(self) -> None:
        client, _ = _client_with(error=requests.exceptions.Timeout("slow"))
        with self.assertRaises(NetworkError):
            client.search_retrieve(SearchRetrieveRequest(query="x"))

    def test_connection_error_maps_to_network_error(self) -> None:
        client, _ = _client_with(error=requests.exceptions.ConnectionError("refused"))
        with self.assertRaises(NetworkError):
            client.explain()

    def test_context_manager_closes_session(self) -> None:
        client, session = _client_with(_response(200))
        with client:
            pass
        session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
