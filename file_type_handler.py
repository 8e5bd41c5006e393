import contextlib
import itertools
import logging
import os
import zipfile
from typing import Iterable, Iterator, Sequence

import pandas as pd

from errors import StorageError, UnsupportedFormatError

logger = logging.getLogger(__name__)

Row = list[str | None]


def _text(value) -> str | None:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return str(value)


def _frame_rows(df: pd.DataFrame) -> Iterator[Row]:
    for record in df.itertuples(index=False, name=None):
        yield [_text(value) for value in record]


def _chunks(rows: Iterable[Row], size: int) -> Iterator[list[Row]]:
    it = iter(rows)
    while True:
        chunk = list(itertools.islice(it, size))
        if not chunk:
            return
        yield chunk


@contextlib.contextmanager
def _io_errors(action: str, path: str, errors: tuple = ()):
    try:
        yield
    except (OSError, ValueError, *errors) as exc:
        raise StorageError(f"{action} {path} failed: {exc}") from exc


def _split_header(df: pd.DataFrame) -> tuple[list[str], Iterator[Row]]:
    if df is None or df.shape[0] == 0 or df.shape[1] == 0:
        return [], iter(())
    headers = [_text(value) or "" for value in df.iloc[0]]
    return headers, _frame_rows(df.iloc[1:])


class CsvAdapter:
    """Delimited text. Everything is read as text, the header row verbatim."""

    def __init__(self, sep: str = ",", chunk_size: int = 1000):
        self.sep = sep
        self.chunk_size = chunk_size

    def load(self, path: str) -> tuple[list[str], Iterator[Row]]:
        with _io_errors("Reading", path):
            try:
                df = pd.read_csv(
                    path,
                    sep=self.sep,
                    header=None,
                    dtype=str,
                    keep_default_na=False,
                    na_filter=False,
                )
            except pd.errors.EmptyDataError:
                return [], iter(())
        return _split_header(df)

    def save(self, path: str, columns: Sequence[str], rows: Iterable[Row]) -> None:
        columns = list(columns)
        with _io_errors("Writing", path):
            if not columns:
                with open(path, "w", encoding="utf-8") as f:
                    f.write("")
                return
            pd.DataFrame([], columns=columns).to_csv(path, sep=self.sep, index=False)
            for chunk in _chunks(rows, self.chunk_size):
                pd.DataFrame(chunk, columns=columns, dtype=object).to_csv(
                    path, sep=self.sep, index=False, header=False, mode="a"
                )


class ExcelAdapter:
    """First worksheet of an .xlsx workbook.

    Reading goes through openpyxl directly so that every row the worksheet
    holds comes back, trailing all-blank rows included.
    """

    DEFAULT_SHEET_NAME = "Sheet1"

    def load(self, path: str) -> tuple[list[str], Iterator[Row]]:
        self._ensure_excel_engine()
        import openpyxl
        from openpyxl.utils.exceptions import InvalidFileException

        damaged = (zipfile.BadZipFile, KeyError, InvalidFileException)
        with _io_errors("Reading", path, damaged):
            # a file object skips openpyxl's extension check, so kind="xlsx" works
            with open(path, "rb") as f:
                workbook = openpyxl.load_workbook(f, data_only=True)
                try:
                    records = list(workbook.worksheets[0].values)
                finally:
                    workbook.close()
        # an untouched worksheet still reports a single empty A1
        if not records or records == [(None,)]:
            return [], iter(())
        headers = [_text(value) or "" for value in records[0]]
        rows = ([_text(value) for value in record] for record in records[1:])
        return headers, rows

    def save(self, path: str, columns: Sequence[str], rows: Iterable[Row]) -> None:
        self._ensure_excel_engine()
        df = pd.DataFrame(list(rows), columns=list(columns), dtype=object)
        with _io_errors("Writing", path):
            with pd.ExcelWriter(path, engine="openpyxl") as writer:
                df.to_excel(writer, index=False, sheet_name=self.DEFAULT_SHEET_NAME)

    def _ensure_excel_engine(self):
        try:
            import openpyxl  # noqa: F401
        except ImportError:
            raise UnsupportedFormatError(
                "XLSX support requires openpyxl. Install via: pip install openpyxl"
            ) from None


class ParquetAdapter:
    def load(self, path: str) -> tuple[list[str], Iterator[Row]]:
        self._ensure_parquet_engine()
        import pyarrow

        with _io_errors("Reading", path, (pyarrow.ArrowException,)):
            df = pd.read_parquet(path)
        return [str(name) for name in df.columns], _frame_rows(df)

    def save(self, path: str, columns: Sequence[str], rows: Iterable[Row]) -> None:
        self._ensure_parquet_engine()
        import pyarrow

        df = pd.DataFrame(list(rows), columns=list(columns), dtype=object)
        with _io_errors("Writing", path, (pyarrow.ArrowException,)):
            df.astype("string").to_parquet(path, index=False)

    def _ensure_parquet_engine(self):
        try:
            import pyarrow  # noqa: F401
        except ImportError:
            raise UnsupportedFormatError(
                "Parquet support requires pyarrow. Install via: pip install pyarrow"
            ) from None


ADAPTERS = {
    ".csv": lambda: CsvAdapter(","),
    ".tsv": lambda: CsvAdapter("\t"),
    ".txt": lambda: CsvAdapter("\t"),
    ".xlsx": ExcelAdapter,
    ".parquet": ParquetAdapter,
}


def supported_kinds() -> list[str]:
    return sorted(ADAPTERS)


class FileTypeHandler:
    """Selects the format adapter for a path, by explicit kind or extension."""

    def __init__(self, path, kind: str | None = None):
        self.path = os.fspath(path)
        if kind:
            ext = kind if kind.startswith(".") else "." + kind
        else:
            _, ext = os.path.splitext(self.path)
        self.ext = ext.lower()

        if self.ext not in ADAPTERS:
            raise UnsupportedFormatError(
                f"Unsupported file type {self.ext or '(none)'} "
                f"(use {', '.join(supported_kinds())})"
            )
        self.adapter = ADAPTERS[self.ext]()

    def load(self) -> tuple[list[str], Iterator[Row]]:
        logger.info("loading %s as %s", self.path, self.ext)
        return self.adapter.load(self.path)

    def save(self, columns: Sequence[str], rows: Iterable[Row]) -> None:
        logger.info("saving %s as %s", self.path, self.ext)
        self.adapter.save(self.path, columns, rows)
