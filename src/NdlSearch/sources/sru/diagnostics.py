"""SRU diagnostic classification.

The service can answer HTTP 200 with an embedded failure. Diagnostics are
scanned in order and the first one matching a rule decides the error; when
none matches, the very first diagnostic produces a generic error.

Rules, in priority order per diagnostic
- uri ``query/syntax`` or message mentions "syntax"       -> QuerySyntaxError
- uri ``query/feature`` or message mentions "unsupported" -> QuerySyntaxError
- uri ``resultset`` or message mentions "result"          -> ServiceDiagnosticError
- leading integer code >= 10                              -> ServiceDiagnosticError
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from NdlSearch.core.errors import NdlSearchError, QuerySyntaxError, ServiceDiagnosticError
from NdlSearch.core.models import DiagnosticRecord

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_GENERIC_CODE_THRESHOLD = 10


def diagnostic_code(record: DiagnosticRecord) -> Optional[int]:
    """Return the leading integer of ``record.code`` or None."""
    if not record.code:
        return None
    match = _LEADING_INT_RE.match(record.code)
    return int(match.group(1)) if match else None


def classify_diagnostic(record: DiagnosticRecord) -> Optional[NdlSearchError]:
    """Classify a single diagnostic, or return None when no rule matches."""
    uri = record.uri or ""
    message = record.message or ""
    lowered = message.lower()

    if "query/syntax" in uri or "syntax" in lowered:
        return QuerySyntaxError(f"CQL query syntax error: {message}", diagnostic=record)
    if "query/feature" in uri or "unsupported" in lowered:
        return QuerySyntaxError(f"Unsupported search feature: {message}", diagnostic=record)
    if "resultset" in uri or "result" in lowered:
        return ServiceDiagnosticError(f"Result set processing error: {message}", diagnostic=record)

    code = diagnostic_code(record)
    if code is not None and code >= _GENERIC_CODE_THRESHOLD:
        return ServiceDiagnosticError(f"Search error (code: {record.code}): {message}", diagnostic=record)
    return None


def classify_diagnostics(diagnostics: Optional[Sequence[DiagnosticRecord]]) -> Optional[NdlSearchError]:
    """Decide whether a response's diagnostics mean the search failed.

    Args:
        diagnostics: Diagnostics in service order; None or empty means none.

    Returns:
        The error to raise, or None when there are no diagnostics.
    """
    if not diagnostics:
        return None

    for record in diagnostics:
        error = classify_diagnostic(record)
        if error is not None:
            return error

    first = diagnostics[0]
    return ServiceDiagnosticError(f"Search processing failed: {first.message}", diagnostic=first)
