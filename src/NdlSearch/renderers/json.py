"""JSON output.

Renders search results into JSON-serializable objects and provides
JsonFileWriter, which writes one file per command run.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from NdlSearch.core.models import OpenSearchResponse, PaginationState, SearchResponse
from NdlSearch.renderers.base import OutputWriter, SearchResult
from NdlSearch.utils.log import log


def _pagination_payload(pagination: PaginationState) -> dict[str, Any]:
    return asdict(pagination)


def render_json(result: SearchResult) -> dict[str, Any]:
    """Render a search result into a JSON-serializable dict.

    Raw record payloads are not included; ``raw_xml`` is, when it was kept.
    """
    if isinstance(result, OpenSearchResponse):
        return {
            "protocol": "opensearch",
            "query": result.query,
            "format": result.format,
            "start": result.start,
            "pagination": _pagination_payload(result.pagination),
            "items": [
                {
                    "title": item.title,
                    "link": item.link,
                    "description": item.description,
                    "published": item.published,
                    "authors": list(item.authors),
                    "publisher": item.publisher,
                    "categories": list(item.categories),
                }
                for item in result.items
            ],
        }

    payload: dict[str, Any] = {
        "protocol": "sru",
        "query": {"cql": result.query.cql, "schema": result.query.schema},
        "pagination": _pagination_payload(result.pagination),
        "diagnostics": [asdict(d) for d in result.diagnostics],
        "items": [
            {
                "title": item.title,
                "identifier": item.identifier,
                "creators": list(item.creators),
                "publishers": list(item.publishers),
                "date": item.date,
                "subjects": list(item.subjects),
                "type": item.type,
                "language": item.language,
            }
            for item in result.items
        ],
    }
    if result.raw_xml is not None:
        payload["raw_xml"] = result.raw_xml
    return payload


class JsonFileWriter(OutputWriter):
    """Accumulate results and write them to a JSON file on finalize."""

    def __init__(self, base_dir: str) -> None:
        self.output_dir = Path(base_dir) / "json"
        self.all_results: list[dict[str, Any]] = []

    def write_result(self, result: SearchResult) -> None:
        self.all_results.append(render_json(result))

    def finalize(self, action: str) -> None:
        """Write accumulated results to ``<base_dir>/json/<action>_<timestamp>.json``."""
        payload = json.dumps(self.all_results, ensure_ascii=False, indent=2)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = self.output_dir / f"{action}_{timestamp}.json"
        output_path.write_text(payload, encoding="utf-8")
        log.info("JSON saved to %s", output_path)
