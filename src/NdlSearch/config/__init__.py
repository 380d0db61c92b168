"""Public configuration API for NdlSearch."""

from __future__ import annotations

from NdlSearch.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from NdlSearch.config.opensearch import OpenSearchConfig
from NdlSearch.config.output import OutputConfig
from NdlSearch.config.retry import RetryConfig
from NdlSearch.config.runtime import RuntimeConfig
from NdlSearch.config.sru import SruConfig

__all__ = [
    "RuntimeConfig",
    "SruConfig",
    "OpenSearchConfig",
    "RetryConfig",
    "OutputConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
]
