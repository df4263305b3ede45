"""Decoding of uploaded spreadsheets into rows of cells."""

import csv
import io
import logging
import zipfile
from pathlib import Path

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from walletrecon.cells import Row, Table
from walletrecon.exceptions import TableDecodeError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv"}
SUPPORTED_EXTENSIONS = WORKBOOK_EXTENSIONS | CSV_EXTENSIONS


def read_table(filename: str, content: bytes) -> Table:
    """Decode an uploaded file into a table.

    Only the first sheet of a workbook is read. Trailing blank cells are
    dropped from every row, so rows may be shorter than the header.

    Args:
        filename: Original file name, used to pick the decoder
        content: Raw file bytes

    Returns:
        List of rows, each a list of cells

    Raises:
        UnsupportedFileTypeError: Extension is not .xlsx, .xlsm or .csv
        TableDecodeError: Content could not be decoded
    """
    extension = Path(filename).suffix.lower()

    if extension in WORKBOOK_EXTENSIONS:
        table = _read_workbook(content)
    elif extension in CSV_EXTENSIONS:
        table = _read_csv(content)
    else:
        raise UnsupportedFileTypeError(filename)

    logger.info(f"Decoded {filename}: {len(table)} rows")
    return table


def _read_workbook(content: bytes) -> Table:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise TableDecodeError(f"Failed to read workbook: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        return [_trim_row(list(values)) for values in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _read_csv(content: bytes) -> Table:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise TableDecodeError(f"CSV is not valid UTF-8: {e}") from e

    try:
        reader = csv.reader(io.StringIO(text, newline=""))
        return [_trim_row([value if value != "" else None for value in row]) for row in reader]
    except csv.Error as e:
        raise TableDecodeError(f"Failed to read CSV: {e}") from e


def _trim_row(row: Row) -> Row:
    """Drop trailing blank cells."""
    end = len(row)
    while end > 0 and (row[end - 1] is None or row[end - 1] == ""):
        end -= 1
    return row[:end]
