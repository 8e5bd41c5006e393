import logging
import os
import sys

import config_paths
from errors import TabulaError
from file_type_handler import FileTypeHandler
from navigation import PageController
from spreadsheet import Spreadsheet

try:
    from _version import __version__
except ImportError:
    __version__ = "0.0.0"


USAGE = (
    "tabula - tabular data viewer\n\n"
    "Usage:\n"
    "  tabula [path] [-p PAGE]\n"
    "  tabula -c SRC DST\n"
    "  tabula -v\n"
    "  tabula -h\n\n"
    "Options:\n"
    "  --log-level LEVEL\n"
)

logger = logging.getLogger(__name__)


def _pop_option(args: list[str], flag: str) -> str | None:
    """Remove ``flag`` and its value from ``args`` and return the value."""
    if flag not in args:
        return None
    idx = args.index(flag)
    if idx + 1 >= len(args):
        raise ValueError(f"{flag} requires a value")
    value = args[idx + 1]
    del args[idx : idx + 2]
    return value


def _setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def open_or_new(path: str | None) -> Spreadsheet:
    if path and os.path.exists(path):
        return Spreadsheet.open(path)
    if path:
        # fail before creating a sheet for a kind we could never save
        FileTypeHandler(path)
    sheet = Spreadsheet.new()
    sheet.path = path or None
    return sheet


def _format_row(values) -> str:
    return "\t".join("" if value is None else value for value in values)


def print_page(sheet: Spreadsheet, page: int, page_size: int, out=None, err=None):
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    controller = PageController(sheet, page_size)
    controller.go_to_page(page)
    out.write(_format_row(controller.columns) + "\n")
    for row in controller.rows:
        out.write(_format_row(row) + "\n")
    err.write(
        f"page {controller.current_page}/{controller.page_count} "
        f"rows {controller.first_row_offset}-{controller.last_row_offset} "
        f"of {sheet.row_count}\n"
    )


def convert(src: str, dst: str):
    with Spreadsheet.open(src) as sheet:
        sheet.save(dst)


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args:
        print(USAGE)
        return 0

    cfg = config_paths.load_config()
    try:
        level = _pop_option(args, "--log-level")
        page = _pop_option(args, "-p")
        convert_src = _pop_option(args, "-c")
        page_number = int(page) if page is not None else 1
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return 2

    _setup_logging(level or cfg["LOG_LEVEL"])

    try:
        if convert_src is not None:
            if len(args) != 1:
                print(USAGE, file=sys.stderr)
                return 2
            convert(convert_src, args[0])
            return 0

        if len(args) > 1:
            print(USAGE, file=sys.stderr)
            return 2
        path = args[0] if args else None
        with open_or_new(path) as sheet:
            print_page(sheet, page_number, cfg["PAGE_SIZE"])
    except TabulaError as exc:
        logger.debug("command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
