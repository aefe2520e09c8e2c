"""
Pagination Helper

Page metadata over a list of results, used by listing endpoints.
"""

import math
from typing import Generic, List, Sequence, TypeVar

T = TypeVar('T')


class PaginatedList(Generic[T]):
    """
    One page of results plus paging metadata.

    Pages are zero-based. When the total is unknown (``total_count < 0``)
    it is estimated from the page contents: a short page means there are no
    further pages, a full page means there is at least one more item.
    """

    def __init__(
        self,
        items: Sequence[T],
        page_index: int,
        page_size: int,
        total_count: int = -1,
    ):
        """
        Initialize a page.

        Args:
            items: Items on this page
            page_index: Zero-based page number
            page_size: Maximum items per page
            total_count: Total items across all pages, -1 if unknown

        Raises:
            ValueError: If page_index is negative or page_size is not positive
        """
        if page_index < 0:
            raise ValueError(f"Page index must not be negative, got {page_index}")
        if page_size <= 0:
            raise ValueError(f"Page size must be positive, got {page_size}")

        self.items: List[T] = list(items)
        self.page_index = page_index
        self.page_size = page_size

        if total_count < 0:
            current_count = len(self.items)
            if current_count < page_size:
                total_count = page_index * page_size + current_count
            else:
                total_count = (page_index + 1) * page_size + 1

        self.total_count = total_count
        self.total_pages = math.ceil(total_count / page_size)

    @classmethod
    def from_sequence(
        cls,
        source: Sequence[T],
        page_index: int,
        page_size: int,
    ) -> 'PaginatedList[T]':
        """Slice one page out of a fully materialised sequence."""
        if page_index < 0:
            raise ValueError(f"Page index must not be negative, got {page_index}")
        if page_size <= 0:
            raise ValueError(f"Page size must be positive, got {page_size}")
        start = page_index * page_size
        return cls(source[start:start + page_size], page_index, page_size, len(source))

    @property
    def has_previous_page(self) -> bool:
        return self.page_index > 0

    @property
    def has_next_page(self) -> bool:
        return self.page_index + 1 < self.total_pages

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self, serialize=None) -> dict:
        """
        Convert page to dictionary for API responses.

        Args:
            serialize: Optional callable applied to each item

        Returns:
            Dictionary with items and paging metadata
        """
        items = [serialize(item) for item in self.items] if serialize else list(self.items)
        return {
            "items": items,
            "page_index": self.page_index,
            "page_size": self.page_size,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "has_previous_page": self.has_previous_page,
            "has_next_page": self.has_next_page,
        }
