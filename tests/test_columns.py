"""Tests for header discovery."""

from walletrecon.models.recon import ColumnMap
from walletrecon.services.columns import ColumnLocator


def padded(header, header_row):
    """Table with filler rows above the header."""
    return [["Statement", f"line {i}"] for i in range(header_row)] + [header, ["x", "y"]]


class TestColumnLocator:
    """Tests for ColumnLocator."""

    def test_header_in_first_row(self):
        """Test description, debit and credit columns are found."""
        locator = ColumnLocator()
        result = locator.locate([["Date", "Description", "Debit", "Credit", "Balance"]])

        assert result == ColumnMap(
            header_row=0, description_column=1, credit_column=3, debit_column=2
        )

    def test_case_and_whitespace_insensitive(self):
        """Test header text is normalized before comparing."""
        locator = ColumnLocator()
        result = locator.locate([["  DESCRIPTION  ", "Amount Credit"]])

        assert result is not None
        assert result.description_column == 0
        assert result.credit_column == 1
        assert result.debit_column == -1

    def test_description_must_match_exactly(self):
        """Test partial header text is not a description column."""
        locator = ColumnLocator()

        assert locator.locate([["Transaction Description", "Credit"]]) is None

    def test_short_aliases(self):
        """Test DR and CR headers."""
        locator = ColumnLocator()
        result = locator.locate([["Date", "Description", "DR", "CR"]])

        assert result.debit_column == 2
        assert result.credit_column == 3

    def test_first_credit_header_wins(self):
        """Test the leftmost matching credit header is used."""
        locator = ColumnLocator()
        result = locator.locate([["Description", "Credit Card", "Credit"]])

        assert result.credit_column == 1

    def test_fx_rate_column(self):
        """Test fxrate header lookup."""
        locator = ColumnLocator()
        result = locator.locate([["Date", "Description", "Credit", "FxRate"]])

        assert result.fx_rate_column == 3

    def test_header_row_after_title_block(self):
        """Test header found below preamble rows."""
        locator = ColumnLocator()
        result = locator.locate([["Bank statement"], [], None, ["Date", "Description"]])

        assert result.header_row == 3
        assert result.description_column == 1

    def test_scan_window_boundary(self):
        """Test row 9 is inside the scan window and row 10 is not."""
        locator = ColumnLocator()

        assert locator.locate(padded(["Description"], 9)).header_row == 9
        assert locator.locate(padded(["Description"], 10)) is None

    def test_custom_scan_window(self):
        """Test scan window is configurable."""
        locator = ColumnLocator(scan_rows=20)

        assert locator.locate(padded(["Description"], 15)).header_row == 15

    def test_first_row_wins(self):
        """Test search stops at the first description header."""
        locator = ColumnLocator()
        result = locator.locate(
            [["Description", "Debit"], ["Date", "Description", "Credit"]]
        )

        assert result.header_row == 0
        assert result.credit_column == -1

    def test_empty_table(self):
        """Test empty input."""
        assert ColumnLocator().locate([]) is None
