import pytest

from cell_store import CellStore
from column_catalog import ColumnCatalog


@pytest.fixture
def catalog():
    store = CellStore()
    yield ColumnCatalog(store)
    store.close()


def test_empty_catalog(catalog):
    assert catalog.column_count() == 0
    assert catalog.columns() == []


def test_append_keeps_order(catalog):
    catalog.insert_columns(None, ["A", "B"])
    catalog.insert_columns(None, ["C"])
    assert catalog.columns() == ["A", "B", "C"]
    assert catalog.column_count() == 3


@pytest.mark.parametrize(
    "position, expected",
    [
        (0, ["X", "Y", "A", "B", "C"]),
        (1, ["A", "X", "Y", "B", "C"]),
        (3, ["A", "B", "C", "X", "Y"]),
        (99, ["A", "B", "C", "X", "Y"]),
        (-4, ["X", "Y", "A", "B", "C"]),
    ],
)
def test_insert_splices_names(catalog, position, expected):
    catalog.insert_columns(None, ["A", "B", "C"])
    catalog.insert_columns(position, ["X", "Y"])
    assert catalog.columns() == expected
    ids = [
        row[0]
        for row in catalog.store.execute("SELECT id FROM columns ORDER BY id").fetchall()
    ]
    assert ids == list(range(5))


def test_insert_moves_cells_with_their_columns(catalog):
    catalog.insert_columns(None, ["A", "B"])
    catalog.store.put_row(0, ["a", "b"])
    first = catalog.insert_columns(1, ["X"])
    assert first == 1
    assert catalog.store.get(0, 0) == "a"
    assert catalog.store.get(0, 1) is None
    assert catalog.store.get(0, 2) == "b"


def test_empty_names_is_a_noop(catalog):
    catalog.insert_columns(None, ["A"])
    catalog.insert_columns(0, [])
    assert catalog.columns() == ["A"]


def test_duplicate_and_missing_names(catalog):
    catalog.insert_columns(None, ["a", "a", None])
    assert catalog.columns() == ["a", "a", ""]
