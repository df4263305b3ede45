"""Header discovery for bank and wallet sheets."""

import logging

from walletrecon.cells import Row, Table, normalized_text
from walletrecon.config import settings
from walletrecon.models.recon import ColumnMap

logger = logging.getLogger(__name__)


class ColumnLocator:
    """Finds the description, credit, debit and FX rate columns of a table.

    The header row is the first row (within the scan window) holding a cell
    that reads exactly "description". Sibling columns are then looked up in
    that same row by substring or short alias.
    """

    DESCRIPTION_HEADER = "description"
    CREDIT_ALIASES = ("credit", "cr", "amount credit")
    DEBIT_ALIASES = ("debit", "dr", "amount debit")
    FX_RATE_HEADER = "fxrate"

    def __init__(self, scan_rows: int | None = None):
        """Initialize locator.

        Args:
            scan_rows: How many leading rows may hold the header
        """
        self.scan_rows = scan_rows if scan_rows is not None else settings.header_scan_rows

    def locate(self, table: Table) -> ColumnMap | None:
        """Locate the header row and its columns.

        Returns:
            ColumnMap, or None when no "description" header is in range
        """
        for row_index in range(min(self.scan_rows, len(table))):
            row = table[row_index] or []
            for col_index, cell in enumerate(row):
                if normalized_text(cell) == self.DESCRIPTION_HEADER:
                    column_map = ColumnMap(
                        header_row=row_index,
                        description_column=col_index,
                        credit_column=self.find_credit_column(row),
                        debit_column=self.find_debit_column(row),
                        fx_rate_column=self.find_fx_rate_column(row),
                    )
                    logger.debug(f"Located columns: {column_map}")
                    return column_map

        return None

    def find_credit_column(self, row: Row) -> int:
        return self._find_amount_column(row, self.CREDIT_ALIASES)

    def find_debit_column(self, row: Row) -> int:
        return self._find_amount_column(row, self.DEBIT_ALIASES)

    def find_fx_rate_column(self, row: Row) -> int:
        for index, cell in enumerate(row):
            if self.FX_RATE_HEADER in normalized_text(cell):
                return index
        return -1

    def _find_amount_column(self, row: Row, aliases: tuple[str, str, str]) -> int:
        """First cell containing the word, equal to the short code, or containing the long form."""
        word, short_code, long_form = aliases
        for index, cell in enumerate(row):
            text = normalized_text(cell)
            if not text:
                continue
            if word in text or text == short_code or long_form in text:
                return index
        return -1
