"""TP2P cancellation matching."""

import logging

from walletrecon.cells import parse_amount
from walletrecon.models.recon import TransactionRow

logger = logging.getLogger(__name__)

TP2P_SUFFIX = "TP2P"


def tp2p_base_code(description: str) -> str | None:
    """Reference code in front of a TP2P suffix, or None without the suffix.

    "INV1234 TP2P" -> "INV1234"
    """
    text = description.strip()
    if not text.upper().endswith(TP2P_SUFFIX):
        return None
    return text[: -len(TP2P_SUFFIX)].strip()


class TP2PMatcher:
    """Matches canceled transfers against their refund.

    A bank entry suffixed with TP2P is a transfer that was canceled and
    credited back to the wallet balance. The wallet shows it as a plain
    credit line carrying the bare reference code. A match means "this debit
    was reversed", not "these are the same record".
    """

    def match(self, source: TransactionRow, candidate: TransactionRow) -> bool:
        """Check candidate description and credit against the source's base code."""
        base_code = tp2p_base_code(source.description)
        if base_code is None:
            return False

        if candidate.description.strip() != base_code:
            return False

        return self.is_credit_entry(candidate)

    def is_credit_entry(self, row: TransactionRow) -> bool:
        """Credit column holds a positive number."""
        credit = parse_amount(row.credit)
        if credit is None:
            logger.debug(f"Row {row.display_row}: no usable credit value {row.credit!r}")
            return False
        return credit > 0
