"""Export of reconciliation results to CSV and Excel."""

import csv
import io
import logging
import re

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from walletrecon.cells import Cell
from walletrecon.config import settings
from walletrecon.models.recon import (
    MatchRecord,
    MatchType,
    ReconciliationResult,
    TransactionRow,
    UniqueRecord,
)

logger = logging.getLogger(__name__)

NO_MATCH_DETAIL = "No matches found"
NO_BANK_MATCH_DETAIL = "No match in bank sheet"

# Excel forbids these in sheet titles and caps them at 31 characters
_SHEET_TITLE_INVALID = re.compile(r"[\[\]:*?/\\]")
_SHEET_TITLE_MAX = 31

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill("solid", fgColor="4472C4")

# Leading characters spreadsheet programs evaluate as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@")
_SIGNED_NUMBER = re.compile(r"[+-]?(?:\d[\d,]*(?:\.\d*)?|\.\d+)")


def _match_details(record: MatchRecord, file1_name: str, file2_name: str) -> str:
    details = []
    if record.found_in_set1 and record.match_type1:
        details.append(f"{file1_name}: {record.match_type1.label}")
    if record.found_in_set2 and record.match_type2:
        details.append(f"{file2_name}: {record.match_type2.label}")
    return "; ".join(details)


def _csv_value(value: Cell) -> Cell:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, str):
        return escape_formula(value)
    return value


def escape_formula(text: str) -> str:
    """Quote text a spreadsheet would run as a formula; signed numbers pass."""
    if text.startswith(FORMULA_PREFIXES) and not _SIGNED_NUMBER.fullmatch(text.strip()):
        return "'" + text
    return text


def to_csv(
    result: ReconciliationResult,
    file1_name: str | None = None,
    file2_name: str | None = None,
) -> str:
    """Render a result as delimited text, one line per record.

    Args:
        result: Reconciliation result
        file1_name: Name used for the first wallet's "Found in" column
        file2_name: Name used for the second wallet's "Found in" column

    Returns:
        CSV document
    """
    file1_name = file1_name or settings.wallet1_label
    file2_name = file2_name or settings.wallet2_label

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(
        [
            "Type",
            "Row Number",
            "Description",
            "Debit",
            "Credit",
            "Balance",
            f"Found in {file1_name}",
            f"Found in {file2_name}",
            "Match Details",
        ]
    )

    for match in result.matches:
        row = match.row
        writer.writerow(
            [
                "Match",
                row.display_row,
                _csv_value(row.description or "N/A"),
                _csv_value(row.debit),
                _csv_value(row.credit),
                _csv_value(row.balance),
                _csv_value(match.found_in_set1),
                _csv_value(match.found_in_set2),
                _csv_value(_match_details(match, file1_name, file2_name)),
            ]
        )

    for unique in result.unique:
        writer.writerow(_unique_csv_row("Unique", unique, NO_MATCH_DETAIL))

    for unique in result.unique_in_comparison_sets:
        record_type = f"Unique in {unique.set_label}"
        writer.writerow(_unique_csv_row(record_type, unique, NO_BANK_MATCH_DETAIL))

    return buffer.getvalue()


def _unique_csv_row(record_type: str, unique: UniqueRecord, detail: str) -> list[Cell]:
    row = unique.row
    return [
        record_type,
        row.display_row,
        _csv_value(row.description or "N/A"),
        _csv_value(row.debit),
        _csv_value(row.credit),
        _csv_value(row.balance),
        "",
        "",
        detail,
    ]


def sheet_title(name: str) -> str:
    """Make a string usable as a worksheet title."""
    name = ILLEGAL_CHARACTERS_RE.sub("", name)
    return _SHEET_TITLE_INVALID.sub("_", name)[:_SHEET_TITLE_MAX]


def to_workbook(
    result: ReconciliationResult,
    file1_name: str | None = None,
    file2_name: str | None = None,
) -> bytes:
    """Render a result as an .xlsx workbook.

    Sheets: Summary, Matches, Unique and one "Unique in <wallet>" sheet per
    wallet that was compared.

    Returns:
        Workbook file content
    """
    file1_name = file1_name or settings.wallet1_label
    file2_name = file2_name or settings.wallet2_label
    stats = result.statistics

    wb = Workbook()

    ws = wb.active
    ws.title = "Summary"
    _write_header(ws, ["Metric", "Value"])
    summary = [
        ("Bank Sheet Rows", stats.source_rows),
        (f"{file1_name} Rows", stats.compare1_rows),
        (f"{file2_name} Rows", stats.compare2_rows),
        ("Total Matches", stats.matching_rows),
        ("Exact Matches", stats.exact_matches),
        (f"{MatchType.TP2P.label} (TP2P)", stats.tp2p_matches),
        (MatchType.SELL_RATE.label, stats.sell_rate_matches),
        ("Unique Descriptions", stats.unique_rows),
        (f"Unique in {file1_name}", stats.unique_in_compare1),
        (f"Unique in {file2_name}", stats.unique_in_compare2),
        ("Match Rate (%)", stats.match_rate),
    ]
    for metric in summary:
        _append_row(ws, list(metric))

    ws = wb.create_sheet("Matches")
    _write_header(
        ws,
        [
            "Row Number",
            "Description",
            "Debit",
            "Credit",
            "Balance",
            "Match Type",
            f"Found in {file1_name}",
            f"Found in {file2_name}",
            f"{file1_name} Rows",
            f"{file2_name} Rows",
        ],
    )
    for match in result.matches:
        _append_row(
            ws,
            _row_cells(match.row)
            + [
                match.overall_match_type.label,
                match.match_type1.label if match.match_type1 else "Not found",
                match.match_type2.label if match.match_type2 else "Not found",
                ", ".join(str(r.display_row) for r in match.matching_rows1),
                ", ".join(str(r.display_row) for r in match.matching_rows2),
            ],
        )

    ws = wb.create_sheet("Unique")
    _write_unique_sheet(ws, result.unique)

    for number, label in ((1, file1_name), (2, file2_name)):
        if not stats.files_compared.get(f"wallet{number}"):
            continue
        records = [u for u in result.unique_in_comparison_sets if u.set_number == number]
        ws = wb.create_sheet(sheet_title(f"Unique in {label}"))
        _write_unique_sheet(ws, records)

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.info(f"Exported workbook with {len(wb.sheetnames)} sheets")
    return buffer.getvalue()


def _append_row(ws: Worksheet, values: list[Cell]) -> None:
    """Append a row, keeping every string as literal text."""
    ws.append([_sheet_value(v) for v in values])
    for cell in ws[ws.max_row]:
        if cell.data_type == "f":
            cell.data_type = "s"


def _sheet_value(value: Cell) -> Cell:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _write_header(ws: Worksheet, headers: list[str]) -> None:
    _append_row(ws, headers)
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL


def _row_cells(row: TransactionRow) -> list[Cell]:
    return [row.display_row, row.raw_description, row.debit, row.credit, row.balance]


def _write_unique_sheet(ws: Worksheet, records: list[UniqueRecord]) -> None:
    _write_header(ws, ["Row Number", "Description", "Debit", "Credit", "Balance"])
    for unique in records:
        _append_row(ws, _row_cells(unique.row))
