import io

import pytest

import config_paths
import main
from errors import UnsupportedFormatError
from spreadsheet import END, Spreadsheet


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_paths, "CONFIG_JSON", str(tmp_path / "missing.json"))


def test_version(capsys):
    assert main.main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == main.__version__


def test_help(capsys):
    assert main.main(["-h"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_print_page():
    with Spreadsheet.new() as sheet:
        sheet.insert_columns(END, ["a", "b"])
        for i in range(5):
            sheet.insert_row(END, [str(i), None])
        out, err = io.StringIO(), io.StringIO()
        main.print_page(sheet, 2, 2, out=out, err=err)
    assert out.getvalue().splitlines() == ["a\tb", "2\t", "3\t"]
    assert err.getvalue().strip() == "page 2/3 rows 2-3 of 5"


def test_main_prints_file(tmp_path, capsys):
    path = tmp_path / "in.csv"
    path.write_text("x,y\n1,2\n")
    assert main.main([str(path)]) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["x\ty", "1\t2"]
    assert "page 1/1 rows 0-0 of 1" in captured.err


def test_main_new_file_is_empty(tmp_path, capsys):
    assert main.main([str(tmp_path / "new.csv")]) == 0
    assert "of 0" in capsys.readouterr().err


def test_main_convert(tmp_path):
    src = tmp_path / "in.csv"
    dst = tmp_path / "out.tsv"
    src.write_text("x,y\n1,2\n")
    assert main.main(["-c", str(src), str(dst)]) == 0
    assert dst.read_text().splitlines() == ["x\ty", "1\t2"]


def test_main_unsupported_kind(tmp_path, capsys):
    assert main.main([str(tmp_path / "data.json")]) == 1
    assert "Error: Unsupported file type" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv",
    [["-p", "two"], ["-p"], ["a.csv", "b.csv"], ["-c", "only.csv"]],
)
def test_main_bad_arguments(argv):
    assert main.main(argv) == 2


def test_open_or_new_rejects_kind_before_creating_a_sheet(tmp_path, monkeypatch):
    created = []
    real_new = Spreadsheet.new.__func__

    def tracking_new(cls):
        sheet = real_new(cls)
        created.append(sheet)
        return sheet

    monkeypatch.setattr(Spreadsheet, "new", classmethod(tracking_new))
    with pytest.raises(UnsupportedFormatError):
        main.open_or_new(str(tmp_path / "data.json"))
    assert created == []


def test_open_or_new_remembers_path_of_missing_file(tmp_path):
    path = str(tmp_path / "new.csv")
    with main.open_or_new(path) as sheet:
        assert sheet.path == path
        assert sheet.row_count == 0
    with main.open_or_new(None) as sheet:
        assert sheet.path is None


def test_main_damaged_xlsx(tmp_path, capsys):
    pytest.importorskip("openpyxl")
    path = tmp_path / "bad.xlsx"
    path.write_bytes(b"PK\x03\x04 not a workbook")
    assert main.main([str(path)]) == 1
    assert "Error: Reading" in capsys.readouterr().err
