"""Sparse cell storage backed by an in-memory SQLite database.

Cells are keyed by ``(row, col)`` and hold optional text. A cell without a
value is not stored at all, so an emptied cell and a never-written cell are
indistinguishable on read. Rows and columns are purely positional: inserting
or deleting shifts the keys of every cell below (or right of) the change.
"""

import contextlib
import logging
import sqlite3
from typing import Iterable, Sequence

from errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE columns (
    id          INTEGER PRIMARY KEY NOT NULL,
    name        TEXT NOT NULL
);

CREATE TABLE cells (
    row_pos     INTEGER NOT NULL,
    col_pos     INTEGER NOT NULL,
    value       TEXT,
    PRIMARY KEY (row_pos, col_pos),
    FOREIGN KEY (col_pos) REFERENCES columns(id)
);
"""


def is_blank(value: str | None) -> bool:
    return value is None or value == ""


@contextlib.contextmanager
def storage_errors(action: str):
    """Re-raise sqlite failures as StorageError."""
    try:
        yield
    except sqlite3.Error as exc:
        raise StorageError(f"{action} failed: {exc}") from exc


class CellStore:
    def __init__(self, database: str = ":memory:"):
        with storage_errors("opening cell store"):
            # Autocommit mode; transactions are issued explicitly below.
            self.connection = sqlite3.connect(database, isolation_level=None)
            self.connection.executescript(SCHEMA)
        self._depth = 0
        self._closed = False

    # ----- lifecycle -----
    def close(self):
        if self._closed:
            return
        self._closed = True
        with storage_errors("closing cell store"):
            self.connection.close()

    @contextlib.contextmanager
    def transaction(self):
        """Run the enclosed statements atomically.

        The outermost call opens a transaction that commits when it exits
        normally and rolls back on any exception. Nested calls run inside a
        savepoint, so a failure caught by the caller undoes only the nested
        block's own writes.
        """
        outermost = self._depth == 0
        savepoint = f"sp_{self._depth}"
        with storage_errors("starting transaction"):
            self.connection.execute("BEGIN" if outermost else f"SAVEPOINT {savepoint}")
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if self.connection.in_transaction:
                with storage_errors("rolling back"):
                    if outermost:
                        self.connection.execute("ROLLBACK")
                    else:
                        self.connection.execute(f"ROLLBACK TO {savepoint}")
                        self.connection.execute(f"RELEASE {savepoint}")
            raise
        self._depth -= 1
        if not outermost:
            with storage_errors("releasing savepoint"):
                self.connection.execute(f"RELEASE {savepoint}")
        else:
            try:
                with storage_errors("committing"):
                    self.connection.execute("COMMIT")
            except StorageError:
                if self.connection.in_transaction:
                    self.connection.execute("ROLLBACK")
                raise

    def execute(self, sql: str, params: Sequence = ()) -> sqlite3.Cursor:
        with storage_errors("query"):
            return self.connection.execute(sql, params)

    def executemany(self, sql: str, rows: Iterable[Sequence]) -> None:
        with storage_errors("batch write"):
            self.connection.executemany(sql, rows)

    # ----- point access -----
    def get(self, row: int, col: int) -> str | None:
        found = self.execute(
            "SELECT value FROM cells WHERE row_pos = ? AND col_pos = ?", (row, col)
        ).fetchone()
        if found is None or is_blank(found[0]):
            return None
        return found[0]

    def put(self, row: int, col: int, value: str | None) -> None:
        with self.transaction():
            if is_blank(value):
                self.execute(
                    "DELETE FROM cells WHERE row_pos = ? AND col_pos = ?", (row, col)
                )
            else:
                self.execute(
                    "INSERT OR REPLACE INTO cells (row_pos, col_pos, value) VALUES (?, ?, ?)",
                    (row, col, str(value)),
                )

    def put_row(self, row: int, values: Iterable[str | None]) -> None:
        cells = [
            (row, col, str(value))
            for col, value in enumerate(values)
            if not is_blank(value)
        ]
        if not cells:
            return
        with self.transaction():
            self.executemany(
                "INSERT INTO cells (row_pos, col_pos, value) VALUES (?, ?, ?)", cells
            )

    # ----- bulk key rewrites -----
    def _shift(self, key: str, start: int, delta: int) -> None:
        # Park the moved keys on the negative side first so the primary key
        # never sees two cells on the same (row, col) halfway through.
        with self.transaction():
            self.execute(
                f"UPDATE cells SET {key} = -({key} + ?) - 1 WHERE {key} >= ?",
                (delta, start),
            )
            self.execute(f"UPDATE cells SET {key} = -{key} - 1 WHERE {key} < 0")

    def shift_rows(self, start: int, delta: int) -> None:
        """Move every cell with ``row >= start`` by ``delta`` rows."""
        if delta == 0:
            return
        logger.debug("shifting rows >= %d by %d", start, delta)
        self._shift("row_pos", start, delta)

    def shift_columns(self, start: int, delta: int) -> None:
        """Move every cell with ``col >= start`` by ``delta`` columns."""
        if delta == 0:
            return
        logger.debug("shifting cell columns >= %d by %d", start, delta)
        self._shift("col_pos", start, delta)

    def delete_rows(self, start: int, end: int) -> None:
        with self.transaction():
            self.execute(
                "DELETE FROM cells WHERE row_pos >= ? AND row_pos <= ?", (start, end)
            )

    # ----- range reads -----
    def scan(self, start: int, end: int) -> list[tuple[int, int, str | None]]:
        """Return the stored cells with ``start <= row <= end`` in (row, col) order."""
        return self.execute(
            """
            SELECT row_pos, col_pos, value FROM cells
            WHERE row_pos >= ? AND row_pos <= ?
            ORDER BY row_pos, col_pos ASC
            """,
            (start, end),
        ).fetchall()
