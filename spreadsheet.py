"""The Spreadsheet aggregate: columns, rows and cells plus dirty tracking.

All mutation goes through this class. The cached row count and the dirty flag
only move after the underlying write succeeded, so a failed call leaves the
sheet exactly as it was.
"""

import contextlib
import logging
import os
from typing import Iterator, Sequence

import pandas as pd

from cell_store import CellStore
from column_catalog import ColumnCatalog
from errors import ValidationError
from file_type_handler import FileTypeHandler
from row_index import RowIndex

logger = logging.getLogger(__name__)

# Insert position meaning "append after the last row/column".
END = None

DEFAULT_CHUNK_SIZE = 1000


class Spreadsheet:
    def __init__(self):
        self.store = CellStore()
        self.catalog = ColumnCatalog(self.store)
        self.index = RowIndex(self.store)
        self.path: str | None = None
        self._dirty = False

    @classmethod
    def new(cls) -> "Spreadsheet":
        return cls()

    @classmethod
    def open(cls, path, kind: str | None = None) -> "Spreadsheet":
        """Load ``path`` through the format adapter for its kind."""
        handler = FileTypeHandler(path, kind)
        sheet = cls()
        try:
            headers, rows = handler.load()
            with sheet.bulk():
                sheet.insert_columns(END, headers)
                for fields in rows:
                    sheet.insert_row(END, fields)
        except BaseException:
            sheet.close()
            raise
        sheet.path = os.fspath(path)
        sheet.clear_dirty()
        logger.info(
            "opened %s (%d columns, %d rows)",
            sheet.path,
            sheet.column_count,
            sheet.row_count,
        )
        return sheet

    def save(self, path=None, kind: str | None = None) -> None:
        target = path if path is not None else self.path
        if target is None:
            raise ValidationError("No path to save to")
        handler = FileTypeHandler(target, kind)
        handler.save(self.columns(), self.iter_rows())
        self.path = os.fspath(target)
        self.clear_dirty()
        logger.info("saved %s", self.path)

    def close(self):
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    # ----- dirty tracking -----
    def is_dirty(self) -> bool:
        return self._dirty

    def clear_dirty(self):
        self._dirty = False

    def _mark_dirty(self):
        self._dirty = True

    @contextlib.contextmanager
    def bulk(self):
        """Group many mutations into one transaction.

        If anything inside fails, the transaction is rolled back and the
        cached row count and dirty flag return to their previous values.
        """
        row_count = self.index.row_count
        dirty = self._dirty
        try:
            with self.store.transaction():
                yield self
        except BaseException:
            self.index.reset_count(row_count)
            self._dirty = dirty
            raise

    # ----- columns -----
    @property
    def column_count(self) -> int:
        return self.catalog.column_count()

    def columns(self) -> list[str]:
        return self.catalog.columns()

    def insert_columns(self, position: int | None, names: Sequence[str]) -> int:
        first = self.catalog.insert_columns(position, names)
        self._mark_dirty()
        return first

    # ----- rows and cells -----
    @property
    def row_count(self) -> int:
        return self.index.row_count

    def insert_row(self, position: int | None, values: Sequence[str | None]) -> int:
        row = self.index.insert(position, list(values), self.column_count)
        self._mark_dirty()
        return row

    def delete_rows(self, start: int, end: int) -> int:
        count = self.index.delete(start, end)
        self._mark_dirty()
        return count

    def get_cell(self, row: int, column: int) -> str | None:
        return self.store.get(row, column)

    def set_cell(self, row: int, column: int, value: str | None) -> None:
        if not 0 <= row < self.row_count:
            raise ValidationError(f"Row {row} is outside 0-{self.row_count - 1}")
        if not 0 <= column < self.column_count:
            raise ValidationError(
                f"Column {column} is outside 0-{self.column_count - 1}"
            )
        self.store.put(row, column, value)
        self._mark_dirty()

    def get_rows(self, start: int, end: int) -> list[list[str | None]]:
        return self.index.read(start, end, self.column_count)

    def iter_rows(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[list[str | None]]:
        """Yield every row in order, reading ``chunk_size`` rows at a time."""
        if chunk_size <= 0:
            raise ValidationError("chunk_size must be positive")
        start = 0
        while start < self.row_count:
            end = min(start + chunk_size, self.row_count) - 1
            yield from self.get_rows(start, end)
            start = end + 1

    def get_frame(self, start: int, end: int) -> pd.DataFrame:
        """The rows in ``[start, end]`` as a DataFrame indexed by row number."""
        rows = self.get_rows(start, end)
        frame = pd.DataFrame(rows, columns=self.columns(), dtype=object)
        frame.index = pd.RangeIndex(start, start + len(rows))
        return frame
