import logging
from typing import Sequence

from cell_store import CellStore

logger = logging.getLogger(__name__)


class ColumnCatalog:
    """Ordered column names with contiguous ids ``0..N-1``."""

    def __init__(self, store: CellStore):
        self.store = store

    def column_count(self) -> int:
        # ids are contiguous, so the largest one gives the count via the index
        return self.store.execute(
            "SELECT COALESCE(MAX(id) + 1, 0) FROM columns"
        ).fetchone()[0]

    def columns(self) -> list[str]:
        rows = self.store.execute("SELECT name FROM columns ORDER BY id ASC").fetchall()
        return [name for (name,) in rows]

    def clamp_position(self, position: int | None) -> int:
        count = self.column_count()
        if position is None:
            return count
        return max(0, min(position, count))

    def insert_columns(self, position: int | None, names: Sequence[str]) -> int:
        """Splice ``names`` in at ``position`` (``None`` appends).

        Columns at or right of the position, and their cells, move right by
        ``len(names)`` before the new names are written. Returns the id of
        the first inserted column.
        """
        names = ["" if name is None else str(name) for name in names]
        position = self.clamp_position(position)
        if not names:
            return position

        width = len(names)
        with self.store.transaction():
            if position < self.column_count():
                self.store.execute(
                    "UPDATE columns SET id = -(id + ?) - 1 WHERE id >= ?",
                    (width, position),
                )
                self.store.execute("UPDATE columns SET id = -id - 1 WHERE id < 0")
                self.store.shift_columns(position, width)
            self.store.executemany(
                "INSERT INTO columns (id, name) VALUES (?, ?)",
                [(position + offset, name) for offset, name in enumerate(names)],
            )
        logger.debug("inserted %d column(s) at %d", width, position)
        return position
