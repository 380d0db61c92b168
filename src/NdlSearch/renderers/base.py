"""Base classes for output writers.

Separates command control flow from how results are shown or stored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Union

from NdlSearch.core.models import OpenSearchResponse, SearchResponse

SearchResult = Union[SearchResponse, OpenSearchResponse]


class OutputWriter(ABC):
    """Abstract base class for command output writers."""

    @abstractmethod
    def write_result(self, result: SearchResult) -> None:
        """Write one search result page.

        Args:
            result: SRU or OpenSearch response.
        """

    @abstractmethod
    def finalize(self, action: str) -> None:
        """Flush accumulated output.

        Args:
            action: The CLI command name (e.g. 'search').
        """


@dataclass(slots=True)
class MultiOutputWriter(OutputWriter):
    """Delegate output to multiple writers."""

    writers: Sequence[OutputWriter]

    def write_result(self, result: SearchResult) -> None:
        for writer in self.writers:
            writer.write_result(result)

    def finalize(self, action: str) -> None:
        for writer in self.writers:
            writer.finalize(action)
