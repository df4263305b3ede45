"""Normalization helpers for spreadsheet cells.

Decoded tables hold heterogeneous cells: text, numbers, dates or blanks.
Every rule and the engine go through these helpers instead of coercing
cells ad hoc.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, getcontext

Cell = str | int | float | Decimal | date | datetime | bool | None
Row = list[Cell]
Table = list[Row]

# Leading numeric prefix, as a lenient float parser reads it ("150.5 SAR" -> 150.5)
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# D-M-YYYY with -, / or . separators
_DATE_PATTERN = re.compile(r"(\d{1,2})[-/.](\d{1,2})[-/.](\d{4})")


def cell_text(value: Cell) -> str:
    """Render a cell the way it reads in the sheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.strftime("%d-%m-%Y")
    if isinstance(value, date):
        return value.strftime("%d-%m-%Y")
    return str(value)


def normalized_text(value: Cell) -> str:
    """Lowercased, trimmed text of a cell."""
    return cell_text(value).strip().lower()


def is_blank(value: Cell) -> bool:
    return cell_text(value).strip() == ""


def get_cell(row: Row, index: int) -> Cell:
    """Cell at index, or None when the column is absent or the row is short."""
    if index < 0 or index >= len(row):
        return None
    return row[index]


def to_decimal(text: str) -> Decimal | None:
    """Decimal for numeric text, or None when it falls outside the usable range.

    Exponents beyond the decimal context overflow as soon as the value takes
    part in arithmetic.
    """
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    context = getcontext()
    if value and not context.Emin <= value.adjusted() <= context.Emax:
        return None
    return value


def parse_amount(value: Cell) -> Decimal | None:
    """Parse a money-like cell, ignoring thousands separators.

    Returns None when the cell holds no usable number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return to_decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return Decimal(repr(value))
    if not isinstance(value, str):
        return None

    match = _NUMBER_PREFIX.match(value.replace(",", "").strip())
    if match is None:
        return None
    return to_decimal(match.group())


def parse_cell_date(value: Cell) -> date | None:
    """Extract a calendar date from a date cell or D-M-YYYY text."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _DATE_PATTERN.search(value)
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None
