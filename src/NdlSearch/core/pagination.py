"""Pagination calculator.

Positions are 1-based, as SRU sends them. The OpenSearch feed counts from 0;
translate at that protocol's boundary with ``from_zero_based`` and
``to_zero_based`` instead of mixing the two conventions here.
"""

from __future__ import annotations

from typing import Optional

from NdlSearch.core.models import PageParams, PaginationState


def compute_pagination(
    total_results: int,
    items_per_page: int,
    start_index: int,
    *,
    next_record_position: Optional[int] = None,
    result_set_id: Optional[str] = None,
) -> PaginationState:
    """Derive the navigation state for one page.

    Args:
        total_results: Total matching records (may be 0).
        items_per_page: Page size, at least 1.
        start_index: 1-based position of the first record on the page.
        next_record_position: Server-reported next position, echoed as-is.
        result_set_id: Server result set id, echoed as-is.

    Returns:
        PaginationState with derived page numbers and neighbour parameters.

    Raises:
        ValueError: If ``items_per_page`` or ``start_index`` is below 1.
    """
    if items_per_page < 1:
        raise ValueError(f"items_per_page must be >= 1, got {items_per_page}")
    if start_index < 1:
        raise ValueError(f"start_index must be >= 1, got {start_index}")
    total = max(0, int(total_results))

    current_page = (start_index - 1) // items_per_page + 1
    total_pages = -(-total // items_per_page)
    has_next = current_page < total_pages
    has_previous = current_page > 1

    next_params = PageParams(start_index + items_per_page, items_per_page) if has_next else None
    previous_params = (
        PageParams(max(1, start_index - items_per_page), items_per_page) if has_previous else None
    )

    return PaginationState(
        total_results=total,
        current_page=current_page,
        total_pages=total_pages,
        items_per_page=items_per_page,
        start_index=start_index,
        has_previous_page=has_previous,
        has_next_page=has_next,
        next_page_params=next_params,
        previous_page_params=previous_params,
        next_record_position=next_record_position,
        result_set_id=result_set_id,
    )


def from_zero_based(start: int) -> int:
    """Convert a 0-based offset into a 1-based position."""
    if start < 0:
        raise ValueError(f"start must be >= 0, got {start}")
    return start + 1


def to_zero_based(start_index: int) -> int:
    """Convert a 1-based position into a 0-based offset."""
    if start_index < 1:
        raise ValueError(f"start_index must be >= 1, got {start_index}")
    return start_index - 1
