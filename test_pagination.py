import pytest

from errors import ValidationError
from pagination import Paginator


@pytest.mark.parametrize(
    "total_rows, expected",
    [
        (0, 1),
        (1, 1),
        (999, 1),
        (1000, 2),
        (2000, 3),
        (2500, 3),
    ],
)
def test_page_count(total_rows, expected):
    assert Paginator(total_rows, 1000).page_count == expected


def test_offsets_for_2500_rows():
    pager = Paginator(2500, 1000)
    assert (pager.first_row_offset, pager.last_row_offset) == (0, 999)
    assert pager.go_to_page(2) is True
    assert (pager.first_row_offset, pager.last_row_offset) == (1000, 1999)
    pager.go_to_page(5)
    assert pager.current_page == 3
    assert (pager.first_row_offset, pager.last_row_offset) == (2000, 2499)


def test_exact_multiple_has_an_empty_trailing_page():
    pager = Paginator(2000, 1000)
    pager.go_to_page(pager.page_count)
    assert pager.current_page == 3
    assert pager.first_row_offset == 2000
    assert pager.last_row_offset == 1999


def test_empty_sheet():
    pager = Paginator(0, 1000)
    assert pager.current_page == 1
    assert (pager.first_row_offset, pager.last_row_offset) == (0, -1)


def test_go_to_page_clamps_low():
    pager = Paginator(2500, 1000)
    pager.go_to_page(3)
    pager.go_to_page(-4)
    assert pager.current_page == 1


def test_change_callback_fires_only_on_change():
    calls = []
    pager = Paginator(25, 10, on_change=lambda start, end: calls.append((start, end)))
    assert pager.go_to_page(1) is False
    assert pager.next_page() is True
    assert pager.next_page() is True
    assert pager.next_page() is False
    assert pager.go_to_page(3) is False
    assert pager.previous_page() is True
    assert calls == [(10, 19), (20, 24), (10, 19)]


def test_update_total_rows_reclamps_without_callback():
    calls = []
    pager = Paginator(25, 10, on_change=lambda *a: calls.append(a))
    pager.go_to_page(pager.page_count)
    calls.clear()
    pager.update_total_rows(5)
    assert pager.current_page == 1
    assert calls == []


def test_ensure_row_visible():
    pager = Paginator(25, 10)
    assert pager.page_of_row(0) == 1
    assert pager.page_of_row(19) == 2
    assert pager.ensure_row_visible(21) is True
    assert pager.current_page == 3
    assert pager.ensure_row_visible(25) is False


@pytest.mark.parametrize("page_size", [0, -10])
def test_page_size_must_be_positive(page_size):
    with pytest.raises(ValidationError):
        Paginator(10, page_size)
