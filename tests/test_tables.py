"""Tests for spreadsheet decoding."""

import io
from datetime import datetime

import pytest
from openpyxl import Workbook

from walletrecon.exceptions import TableDecodeError, UnsupportedFileTypeError
from walletrecon.services.tables import read_table


def workbook_bytes(*sheets):
    """Build an .xlsx file with one sheet per list of rows."""
    wb = Workbook()
    wb.remove(wb.active)
    for index, rows in enumerate(sheets):
        ws = wb.create_sheet(f"Sheet{index + 1}")
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestReadCsv:
    """Tests for CSV decoding."""

    def test_rows_and_blanks(self):
        """Test empty cells become blanks and trailing blanks are dropped."""
        content = b"Date,Description,Debit,Credit\n01-03-2024,Rent,900,\n,,,\n"

        table = read_table("bank.csv", content)

        assert table == [
            ["Date", "Description", "Debit", "Credit"],
            ["01-03-2024", "Rent", "900"],
            [],
        ]

    def test_byte_order_mark(self):
        """Test a UTF-8 BOM does not leak into the first header."""
        table = read_table("BANK.CSV", "\ufeffDescription,Credit\nRent,5\n".encode())

        assert table[0] == ["Description", "Credit"]

    def test_quoted_thousands(self):
        """Test quoted values keep their separators."""
        table = read_table("bank.csv", b'Description,Credit\nRent,"1,500.00"\n')

        assert table[1] == ["Rent", "1,500.00"]

    def test_invalid_encoding(self):
        """Test non UTF-8 content is rejected."""
        with pytest.raises(TableDecodeError):
            read_table("bank.csv", b"Description\n\xff\xfe\xfa\n")


class TestReadWorkbook:
    """Tests for workbook decoding."""

    def test_first_sheet_only(self):
        """Test only the first sheet is read, with native cell types."""
        content = workbook_bytes(
            [
                ["Date", "Description", "Debit", "Credit"],
                [datetime(2024, 3, 1), "Rent", 900, None],
            ],
            [["Description"], ["Other sheet"]],
        )

        table = read_table("bank.xlsx", content)

        assert table[0] == ["Date", "Description", "Debit", "Credit"]
        assert table[1] == [datetime(2024, 3, 1), "Rent", 900]
        assert len(table) == 2

    def test_corrupt_workbook(self):
        """Test garbage bytes are rejected."""
        with pytest.raises(TableDecodeError):
            read_table("bank.xlsx", b"not a zip file")

    def test_unsupported_extension(self):
        """Test legacy and unknown formats are rejected."""
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            read_table("bank.xls", b"")

        assert "bank.xls" in str(exc_info.value)
