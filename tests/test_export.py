"""Tests for CSV and workbook exports."""

import csv
import io

import pytest
from openpyxl import load_workbook

from walletrecon.services.export import escape_formula, sheet_title, to_csv, to_workbook

HEADER = ["Date", "Description", "Debit", "Credit"]


def parse_csv(text):
    return list(csv.reader(io.StringIO(text)))


class TestCsvExport:
    """Tests for to_csv."""

    def test_header_uses_file_names(self, engine, bank_table, wallet_table):
        """Test "Found in" columns carry the wallet file names."""
        result = engine.reconcile(bank_table, wallet_table)

        rows = parse_csv(to_csv(result, "wallet-a.xlsx", "wallet-b.xlsx"))

        assert rows[0] == [
            "Type",
            "Row Number",
            "Description",
            "Debit",
            "Credit",
            "Balance",
            "Found in wallet-a.xlsx",
            "Found in wallet-b.xlsx",
            "Match Details",
        ]

    def test_one_line_per_record(self, engine, bank_table, wallet_table):
        """Test matches, bank uniques and wallet uniques are all exported."""
        result = engine.reconcile(bank_table, wallet_table)

        rows = parse_csv(to_csv(result))
        types = [row[0] for row in rows[1:]]

        assert types == ["Match", "Match", "Match", "Unique", "Unique in Wallet 1"]

    def test_match_row(self, engine, bank_table, wallet_table):
        """Test match row values and details."""
        result = engine.reconcile(bank_table, wallet_table)

        rows = parse_csv(to_csv(result))
        salary, tp2p = rows[1], rows[2]

        assert salary == [
            "Match",
            "4",
            "Salary March",
            "",
            "5,000.00",
            "5,000.00",
            "true",
            "false",
            "Wallet 1: Exact",
        ]
        assert tp2p[8] == "Wallet 1: Canceled and Credited"

    def test_unique_rows(self, engine, bank_table, wallet_table):
        """Test unique rows carry balance and no-match details."""
        result = engine.reconcile(bank_table, wallet_table)

        rows = parse_csv(to_csv(result))
        bank_unique, wallet_unique = rows[4], rows[5]

        assert bank_unique == [
            "Unique",
            "7",
            "Coffee shop",
            "12.50",
            "",
            "5,737.50",
            "",
            "",
            "No matches found",
        ]
        assert wallet_unique[2] == "Wallet fee"
        assert wallet_unique[5] == "6247"
        assert wallet_unique[8] == "No match in bank sheet"

    def test_formula_text_is_quoted(self, engine):
        """Test cells a spreadsheet would evaluate are written as quoted text."""
        formula = '=HYPERLINK("http://x","a")'
        source = [
            HEADER,
            ["", formula, "-250.00", ""],
            ["", "@SUM(A1)", "+10", ""],
        ]
        result = engine.reconcile(source, [HEADER, ["", "Rent", "", ""]])

        rows = parse_csv(to_csv(result))

        assert rows[1][2] == "'" + formula
        assert rows[1][3] == "-250.00"
        assert rows[2][2] == "'@SUM(A1)"
        assert rows[2][3] == "+10"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("=1+1", "'=1+1"),
            ("+cmd", "'+cmd"),
            ("-2+3", "'-2+3"),
            ("@SUM(A1)", "'@SUM(A1)"),
            ("-1,250.50", "-1,250.50"),
            ("+.5", "+.5"),
            ("Rent", "Rent"),
        ],
    )
    def test_escape_formula(self, text, expected):
        assert escape_formula(text) == expected


class TestWorkbookExport:
    """Tests for to_workbook."""

    def test_sheets(self, engine, bank_table, wallet_table):
        """Test sheet layout for a single wallet comparison."""
        result = engine.reconcile(bank_table, wallet_table)

        wb = load_workbook(io.BytesIO(to_workbook(result)))

        assert wb.sheetnames == ["Summary", "Matches", "Unique", "Unique in Wallet 1"]

    def test_match_type_labels(self, engine, bank_table, wallet_table):
        """Test human readable match types."""
        result = engine.reconcile(bank_table, wallet_table)

        wb = load_workbook(io.BytesIO(to_workbook(result)))
        labels = [row[5] for row in wb["Matches"].iter_rows(min_row=2, values_only=True)]

        assert labels == ["Exact", "Canceled and Credited", "Currency Exchange"]

    def test_summary(self, engine, bank_table, wallet_table):
        """Test summary statistics."""
        result = engine.reconcile(bank_table, wallet_table)

        wb = load_workbook(io.BytesIO(to_workbook(result)))
        summary = dict(wb["Summary"].iter_rows(min_row=2, values_only=True))

        assert summary["Total Matches"] == 3
        assert summary["Match Rate (%)"] == 60

    def test_sheet_title_sanitized(self):
        """Test file names are made safe for sheet titles."""
        title = sheet_title("Unique in wallet[march]/2024-final-version.xlsx")

        assert len(title) == 31
        assert "[" not in title and "/" not in title

    def test_formula_text_stays_text(self, engine):
        """Test a description starting with "=" is stored as a string, not a formula."""
        formula = '=HYPERLINK("http://x","a")'
        source = [HEADER, ["", formula, "10", ""]]
        result = engine.reconcile(source, [HEADER, ["", "Rent", "", ""]])

        wb = load_workbook(io.BytesIO(to_workbook(result)))
        cell = wb["Unique"]["B2"]

        assert cell.data_type == "s"
        assert cell.value == formula

    def test_control_characters_removed(self, engine):
        """Test characters worksheets cannot hold are dropped instead of failing."""
        source = [HEADER, ["", "Coffee\x0bshop", "12.50", ""]]
        result = engine.reconcile(source, [HEADER, ["", "Rent", "", ""]])

        wb = load_workbook(io.BytesIO(to_workbook(result)))

        assert wb["Unique"]["B2"].value == "Coffeeshop"
        assert sheet_title("Unique in wallet\x07.csv") == "Unique in wallet.csv"
