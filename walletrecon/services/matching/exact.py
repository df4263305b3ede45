"""Exact description matching."""

from walletrecon.cells import Cell, normalized_text
from walletrecon.models.recon import TransactionRow


def descriptions_equal(first: Cell, second: Cell) -> bool:
    """Case and surrounding-whitespace insensitive equality."""
    return normalized_text(first) == normalized_text(second)


class ExactMatcher:
    """Matches rows whose descriptions read the same.

    Always evaluated first, so a pair that also fits another rule is
    reported as exact.
    """

    def match(self, source: TransactionRow, candidate: TransactionRow) -> bool:
        return descriptions_equal(source.raw_description, candidate.raw_description)
