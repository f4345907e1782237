"""Page boundary arithmetic for index listings.

Page numbers shown to readers are 1-based. For a 0-based page index ``i``
the navigation fields are ``prev_page = i`` and ``next_page = i + 2``, so the
first page carries ``prev_page == 0`` and the last carries
``next_page == all_page + 1``. Templates must treat both as "no such page".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageInfo:
    """Navigation metadata for one listing page."""

    current_page: int
    prev_page: int
    next_page: int
    all_page: int

    @property
    def has_prev(self) -> bool:
        return self.prev_page >= 1

    @property
    def has_next(self) -> bool:
        return self.next_page <= self.all_page


def page_count(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` items ``limit`` at a time.

    Integer ceiling division; exact for arbitrarily large counts.

    Raises:
        ValueError: ``limit`` is not positive or ``total`` is negative.
    """
    if limit <= 0:
        raise ValueError(f"page size must be positive, got {limit}")
    if total < 0:
        raise ValueError(f"item count must not be negative, got {total}")
    return (total + limit - 1) // limit


def total_pages(total: int, per_page: int) -> int:
    """Template-facing variant of :func:`page_count` that never raises."""
    if per_page <= 0 or total <= 0:
        return 0
    return page_count(total, per_page)


def page_info(index: int, all_page: int) -> PageInfo:
    """Navigation metadata for the 0-based page ``index`` of ``all_page`` pages."""
    if not 0 <= index < all_page:
        raise ValueError(f"page index {index} outside [0, {all_page})")
    return PageInfo(
        current_page=index + 1,
        prev_page=index,
        next_page=index + 2,
        all_page=all_page,
    )


def page_window(current: int, total: int, size: int) -> list[int]:
    """Contiguous page numbers around ``current`` for a paginator widget.

    Returns ``min(size, total)`` ascending numbers clamped to ``[1, total]``,
    centred on ``current`` unless that would cross an edge.

    >>> page_window(5, 10, 3)
    [4, 5, 6]
    >>> page_window(1, 10, 3)
    [1, 2, 3]
    >>> page_window(10, 10, 3)
    [8, 9, 10]
    """
    if total <= 0 or size <= 0:
        return []
    size = min(size, total)

    half = size // 2
    start = current - half
    end = start + size - 1

    if start < 1:
        start = 1
        end = size
    if end > total:
        end = total
        start = max(1, end - size + 1)

    return list(range(start, end + 1))


__all__ = ["PageInfo", "page_count", "page_info", "page_window", "total_pages"]
