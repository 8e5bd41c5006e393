import logging
from typing import Callable

from errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class Paginator:
    """Fixed-size row windows over ``total_rows``. Pages are numbered from 1.

    ``page_count`` is ``total_rows // page_size + 1``, so a row count that is
    an exact multiple of the page size gets a trailing empty page.
    """

    def __init__(
        self,
        total_rows: int,
        page_size: int = DEFAULT_PAGE_SIZE,
        on_change: Callable[[int, int], None] | None = None,
    ):
        if page_size <= 0:
            raise ValidationError(f"Page size must be positive, got {page_size}")
        self.page_size = page_size
        self.on_change = on_change
        self.current_page = 1
        self.total_rows = max(0, total_rows)
        self._clamp()

    def _clamp(self):
        self.current_page = max(1, min(self.current_page, self.page_count))

    def update_total_rows(self, total_rows: int):
        self.total_rows = max(0, total_rows)
        self._clamp()

    @property
    def page_count(self) -> int:
        return self.total_rows // self.page_size + 1

    @property
    def first_row_offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    @property
    def last_row_offset(self) -> int:
        return min(self.first_row_offset + self.page_size - 1, self.total_rows - 1)

    def go_to_page(self, page: int) -> bool:
        page = max(1, min(page, self.page_count))
        if page == self.current_page:
            return False
        self.current_page = page
        logger.debug(
            "page %d/%d rows %d-%d",
            page,
            self.page_count,
            self.first_row_offset,
            self.last_row_offset,
        )
        if self.on_change is not None:
            self.on_change(self.first_row_offset, self.last_row_offset)
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    def page_of_row(self, row: int) -> int:
        return max(0, row) // self.page_size + 1

    def ensure_row_visible(self, row: int) -> bool:
        return self.go_to_page(self.page_of_row(row))
