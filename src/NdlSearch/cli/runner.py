"""Command runner for coordinating CLI execution.

Manages logging configuration, client lifecycle and the error boundary for
command execution.
"""

from __future__ import annotations

import os
from typing import Callable

import click

from NdlSearch.cli.commands import ExplainCommand, OpenSearchCommand, SearchCommand, run_validate
from NdlSearch.config import AppConfig
from NdlSearch.core.errors import NdlSearchError, ValidationError, user_message
from NdlSearch.core.params import SimpleSearchParams
from NdlSearch.renderers import create_output_writer
from NdlSearch.services import create_opensearch_source, create_search_service
from NdlSearch.services.search import SearchOptions
from NdlSearch.utils.log import configure_logging, log

USER_AGENT_ENV = "NDL_SEARCH_USER_AGENT"


class CommandRunner:
    """Runs CLI commands with logging set up and errors mapped to ``click.Abort``."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @property
    def user_agent(self) -> str | None:
        return os.getenv(USER_AGENT_ENV) or None

    def run_search(
        self,
        action: str,
        *,
        options: SearchOptions,
        params: SimpleSearchParams | None = None,
        cql: str | None = None,
    ) -> None:
        """Run an SRU search (named parameters or raw CQL) and write the output.

        Raises:
            click.Abort: When the search fails.
        """
        self._configure(action)

        def body() -> None:
            service = create_search_service(self.config, user_agent=self.user_agent)
            output_writer = create_output_writer(self.config.output)
            try:
                SearchCommand(
                    service=service,
                    output_writer=output_writer,
                    retry=self.config.retry,
                    options=options,
                    params=params,
                    cql=cql,
                ).execute()
                output_writer.finalize(action)
            finally:
                service.client.close()

        self._guard(action, body)

    def run_opensearch(self, action: str, *, q: str, count: int | None, start: int, hl: str | None) -> None:
        """Run an OpenSearch query and write the output.

        Raises:
            click.Abort: When the search fails.
        """
        self._configure(action)

        def body() -> None:
            source = create_opensearch_source(self.config, user_agent=self.user_agent)
            output_writer = create_output_writer(self.config.output)
            try:
                OpenSearchCommand(
                    source=source,
                    output_writer=output_writer,
                    retry=self.config.retry,
                    q=q,
                    count=count or self.config.opensearch.count,
                    start=start,
                    format=self.config.opensearch.format,
                    hl=hl,
                ).execute()
                output_writer.finalize(action)
            finally:
                source.close()

        self._guard(action, body)

    def run_explain(self, action: str, *, version: str | None) -> None:
        """Fetch and log the SRU explain response.

        Raises:
            click.Abort: When the request fails.
        """
        self._configure(action)

        def body() -> None:
            service = create_search_service(self.config, user_agent=self.user_agent)
            try:
                ExplainCommand(service=service, retry=self.config.retry, version=version).execute()
            finally:
                service.client.close()

        self._guard(action, body)

    def run_validate(self, action: str, *, query: str) -> None:
        """Validate a CQL string locally.

        Raises:
            click.Abort: When the query is invalid.
        """
        self._configure(action)
        result = run_validate(query)
        if not result.is_valid:
            raise click.Abort

    def _configure(self, action: str) -> None:
        configure_logging(self.config.runtime, action=action)

    @staticmethod
    def _guard(action: str, body: Callable[[], None]) -> None:
        try:
            body()
        except ValidationError as e:
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
        except NdlSearchError as e:
            log.error("%s failed: %s", action, user_message(e))
            log.debug("%s error detail: %s", action, e.message)
            raise click.Abort from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
