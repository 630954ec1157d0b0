"""Page arithmetic for the payments view"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


def compute_pages(total_items: int, page_size: int) -> int:
    """Number of pages for a collection; an empty collection still has one page"""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    total_items = max(0, total_items)
    # Ceiling division without floats
    return max(1, -(-total_items // page_size))


def clamp_page(requested: int, total_pages: int) -> int:
    """Pull a requested page back into [1, total_pages]"""
    return min(max(1, requested), max(1, total_pages))


def window_of(total_pages: int, current: int, max_visible: int) -> List[int]:
    """
    Page numbers to show in the pager.

    Returns a contiguous run of min(max_visible, total_pages) numbers centred on
    the current page, shifted toward the boundary near either end.

    Example:
        window_of(10, 1, 5)  → [1, 2, 3, 4, 5]
        window_of(10, 6, 5)  → [4, 5, 6, 7, 8]
        window_of(10, 10, 5) → [6, 7, 8, 9, 10]
    """
    total_pages = max(1, total_pages)
    max_visible = max(1, max_visible)
    current = clamp_page(current, total_pages)

    start = max(1, current - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)

    # Near the last page, slide the window back so it stays full
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)

    return list(range(start, end + 1))


@dataclass(frozen=True)
class PaginationState:
    """Pagination snapshot derived from the server-reported total"""

    page: int
    page_size: int
    total_items: int
    total_pages: int
    page_numbers: Tuple[int, ...]

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_next else None

    @property
    def prev_page(self) -> Optional[int]:
        return self.page - 1 if self.has_prev else None


def paginate(total_items: int, page_size: int, page: int, max_visible: int) -> PaginationState:
    """Build a PaginationState with the page clamped into range"""
    total_pages = compute_pages(total_items, page_size)
    current = clamp_page(page, total_pages)
    return PaginationState(
        page=current,
        page_size=page_size,
        total_items=max(0, total_items),
        total_pages=total_pages,
        page_numbers=tuple(window_of(total_pages, current, max_visible)),
    )
