import logging
from typing import Sequence

from cell_store import CellStore
from errors import ValidationError

logger = logging.getLogger(__name__)


class RowIndex:
    """Positional rows over a CellStore, with a cached row count.

    The count is never derived from the stored cells (a row may have none);
    it is adjusted by every insert/delete, and only after the underlying
    write committed.
    """

    def __init__(self, store: CellStore, row_count: int = 0):
        self.store = store
        self._row_count = max(0, row_count)

    @property
    def row_count(self) -> int:
        return self._row_count

    def reset_count(self, row_count: int):
        self._row_count = max(0, row_count)

    def clamp_position(self, position: int | None) -> int:
        if position is None:
            return self._row_count
        return max(0, min(position, self._row_count))

    def insert(self, position: int | None, values: Sequence[str | None], width: int) -> int:
        if len(values) > width:
            raise ValidationError(
                f"Row has {len(values)} values but the sheet has {width} columns"
            )
        position = self.clamp_position(position)
        with self.store.transaction():
            # Shift first; writing first would move the new row along with the rest.
            if position < self._row_count:
                self.store.shift_rows(position, 1)
            self.store.put_row(position, values)
        self._row_count += 1
        return position

    def delete(self, start: int, end: int) -> int:
        last = self._row_count - 1
        start = max(0, min(start, last))
        end = max(0, min(end, last))
        if self._row_count == 0 or start > end:
            raise ValidationError(
                f"Invalid row range {start}-{end} for {self._row_count} rows"
            )
        count = end - start + 1
        with self.store.transaction():
            self.store.delete_rows(start, end)
            self.store.shift_rows(end + 1, -count)
        self._row_count -= count
        logger.debug("deleted rows %d-%d", start, end)
        return count

    def read(self, start: int, end: int, width: int) -> list[list[str | None]]:
        """Return one entry per row in ``[start, end]``, ``width`` slots each.

        Rows without stored cells come back as all-None entries, so the result
        always has ``end - start + 1`` rows.
        """
        if start < 0:
            raise ValidationError(f"Row offset {start} is negative")
        if end < start:
            return []

        logger.debug("loading spreadsheet values in range %d - %d", start, end)
        rows: list[list[str | None]] = []
        current: list[str | None] = []
        for row, col, value in self.store.scan(start, end):
            # Fill every expected row up to this cell's row.
            while start + len(rows) < row:
                rows.append(current if current else [None] * width)
                current = []
            if not current:
                current = [None] * width
            if col < width:
                current[col] = value if value != "" else None
        while len(rows) < end - start + 1:
            rows.append(current if current else [None] * width)
            current = []
        return rows
