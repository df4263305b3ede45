"""Currency exchange (sell rate) matching."""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation, Overflow, localcontext

from walletrecon.cells import parse_amount, parse_cell_date, to_decimal
from walletrecon.config import settings
from walletrecon.models.recon import TransactionRow

logger = logging.getLogger(__name__)


class SellRateMatcher:
    """Matches a bank FX entry against the wallet transfer it funded.

    The bank description carries the applied sell rate ("SELL RATE 47.250")
    while the wallet shows a TRANSFER line. Descriptions share nothing, so
    the link is made on numbers:
    - Credit amounts within AMOUNT tolerance
    - Wallet FX rate (fxrate column, else "RATE n" in the description)
      within RATE tolerance of the sell rate
    - Same calendar date, when both rows carry one
    """

    # Bank exports misspell "SELL"; first pattern that hits wins
    SELL_RATE_PATTERNS = [
        re.compile(r"SELL\s*RATE\s*[:=]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"SALL\s*RATE\s*[:=]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"SAEL\s*RATE\s*[:=]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"SEL\s*RATE\s*[:=]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
        re.compile(r"SAL\s*RATE\s*[:=]?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
    ]

    # Upper-case keyword only
    DESCRIPTION_RATE_PATTERN = re.compile(r"RATE\D*?(\d+(?:\.\d+)?)")

    TRANSFER_KEYWORD = "TRANSFER"

    # Dates are looked for in the leading cells only
    DATE_SCAN_CELLS = 3

    def __init__(
        self,
        amount_tolerance: Decimal | None = None,
        rate_tolerance: Decimal | None = None,
    ):
        """Initialize sell rate matcher.

        Args:
            amount_tolerance: Max credit difference (exclusive)
            rate_tolerance: Max rate difference (exclusive)
        """
        self.amount_tolerance = (
            amount_tolerance if amount_tolerance is not None else settings.amount_tolerance
        )
        self.rate_tolerance = (
            rate_tolerance if rate_tolerance is not None else settings.rate_tolerance
        )

    def match(self, source: TransactionRow, candidate: TransactionRow) -> bool:
        """Check whether a bank sell-rate row corresponds to a wallet transfer."""
        sell_rate = self.extract_sell_rate(source.description)
        if sell_rate is None:
            return False

        if self.TRANSFER_KEYWORD not in candidate.description.upper():
            return False

        if not self._amounts_match(source, candidate):
            return False

        if not self._rates_match(sell_rate, candidate):
            return False

        if not self._dates_match(source, candidate):
            return False

        logger.debug(
            f"Sell rate match: bank row {source.display_row} -> wallet row {candidate.display_row}"
        )
        return True

    def extract_sell_rate(self, description: str) -> Decimal | None:
        """Sell rate embedded in a bank description, if any."""
        for pattern in self.SELL_RATE_PATTERNS:
            found = pattern.search(description)
            if found:
                return to_decimal(found.group(1))
        return None

    def extract_compare_rate(self, row: TransactionRow) -> Decimal | None:
        """FX rate of a wallet row: fxrate column first, then the description."""
        if row.column_map.fx_rate_column >= 0:
            rate = parse_amount(row.fx_rate)
            if rate is not None:
                return rate

        found = self.DESCRIPTION_RATE_PATTERN.search(row.description)
        if found:
            return to_decimal(found.group(1))
        return None

    def extract_date(self, row: TransactionRow) -> date | None:
        """First date found among the leading cells."""
        for cell in row.cells[: self.DATE_SCAN_CELLS]:
            parsed = parse_cell_date(cell)
            if parsed is not None:
                return parsed
        return None

    def _amounts_match(self, source: TransactionRow, candidate: TransactionRow) -> bool:
        source_amount = parse_amount(source.credit)
        compare_amount = parse_amount(candidate.credit)
        if source_amount is None or compare_amount is None:
            return False
        return _within(source_amount, compare_amount, self.amount_tolerance)

    def _rates_match(self, sell_rate: Decimal, candidate: TransactionRow) -> bool:
        compare_rate = self.extract_compare_rate(candidate)
        if compare_rate is None:
            return False
        return _within(sell_rate, compare_rate, self.rate_tolerance)

    def _dates_match(self, source: TransactionRow, candidate: TransactionRow) -> bool:
        """Same day, month and year; passes when either side has no date."""
        source_date = self.extract_date(source)
        compare_date = self.extract_date(candidate)
        if source_date is None or compare_date is None:
            return True
        return source_date == compare_date


def _within(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    """Strictly closer than tolerance; a difference too large to represent never is."""
    with localcontext() as ctx:
        ctx.traps[Overflow] = False
        ctx.traps[InvalidOperation] = False
        return abs(a - b) < tolerance
