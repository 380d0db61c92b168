"""SRU endpoint configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from NdlSearch.config.common import ConfigSection
from NdlSearch.services.search import (
    DEFAULT_MAXIMUM_RECORDS,
    DEFAULT_RECORD_SCHEMA,
    DEFAULT_VERSION,
    MAX_MAXIMUM_RECORDS,
    RECORD_SCHEMAS,
    SRU_VERSIONS,
)
from NdlSearch.sources.sru.client import DEFAULT_TIMEOUT, NDL_SRU_BASE_URL


@dataclass(frozen=True, slots=True)
class SruConfig:
    """SRU client and default request settings."""

    base_url: str = NDL_SRU_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    maximum_records: int = DEFAULT_MAXIMUM_RECORDS
    record_schema: str = DEFAULT_RECORD_SCHEMA
    version: str = DEFAULT_VERSION


def load_sru(raw: Mapping[str, Any]) -> SruConfig:
    """Load the optional ``sru`` section.

    Raises:
        TypeError: If a value has the wrong type.
        ValueError: If a value is out of range or unsupported.
    """
    section = ConfigSection.of(
        raw, "sru", ("base_url", "timeout", "maximum_records", "record_schema", "version")
    )
    return SruConfig(
        base_url=section.url("base_url", NDL_SRU_BASE_URL),
        timeout=section.number("timeout", DEFAULT_TIMEOUT, positive=True),
        maximum_records=section.integer(
            "maximum_records", DEFAULT_MAXIMUM_RECORDS, minimum=1, maximum=MAX_MAXIMUM_RECORDS
        ),
        record_schema=section.choice("record_schema", DEFAULT_RECORD_SCHEMA, RECORD_SCHEMAS),
        version=section.choice("version", DEFAULT_VERSION, SRU_VERSIONS),
    )
