from typing import Sequence

import pandas as pd

from errors import ValidationError
from pagination import DEFAULT_PAGE_SIZE, Paginator
from spreadsheet import Spreadsheet


class PageController:
    """Keeps the visible page of a Spreadsheet loaded for a view.

    Row arguments to ``set_cell`` are relative to the current page; insert and
    delete take absolute rows and keep the pager's total in sync.
    """

    def __init__(self, spreadsheet: Spreadsheet, page_size: int = DEFAULT_PAGE_SIZE):
        self.spreadsheet = spreadsheet
        self.pager = Paginator(spreadsheet.row_count, page_size, on_change=self._load)
        self.rows: list[list[str | None]] = []
        self.refresh()

    def _load(self, start: int, end: int):
        self.rows = self.spreadsheet.get_rows(start, end)

    def refresh(self):
        self.pager.update_total_rows(self.spreadsheet.row_count)
        self._load(self.pager.first_row_offset, self.pager.last_row_offset)

    # ----- page queries -----
    @property
    def current_page(self) -> int:
        return self.pager.current_page

    @property
    def page_count(self) -> int:
        return self.pager.page_count

    @property
    def first_row_offset(self) -> int:
        return self.pager.first_row_offset

    @property
    def last_row_offset(self) -> int:
        return self.pager.last_row_offset

    @property
    def columns(self) -> list[str]:
        return self.spreadsheet.columns()

    @property
    def frame(self) -> pd.DataFrame:
        return self.spreadsheet.get_frame(self.first_row_offset, self.last_row_offset)

    # ----- navigation -----
    def go_to_page(self, page: int) -> bool:
        return self.pager.go_to_page(page)

    def next_page(self) -> bool:
        return self.pager.next_page()

    def previous_page(self) -> bool:
        return self.pager.previous_page()

    # ----- edits -----
    def set_cell(self, page_row: int, column: int, value: str | None):
        if not 0 <= page_row < len(self.rows):
            raise ValidationError(f"Row {page_row} is not on the current page")
        row = self.first_row_offset + page_row
        self.spreadsheet.set_cell(row, column, value)
        self.rows[page_row][column] = value if value != "" else None

    def insert_row(self, position: int | None, values: Sequence[str | None]) -> int:
        row = self.spreadsheet.insert_row(position, values)
        self.pager.update_total_rows(self.spreadsheet.row_count)
        if not self.pager.ensure_row_visible(row):
            self.refresh()
        return row

    def delete_rows(self, start: int, end: int) -> int:
        count = self.spreadsheet.delete_rows(start, end)
        self.refresh()
        return count
