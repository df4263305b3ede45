"""Ordered evaluation of the description match rules."""

from walletrecon.models.recon import MatchType, TransactionRow

from .exact import ExactMatcher
from .sell_rate import SellRateMatcher
from .tp2p import TP2PMatcher


class DescriptionMatcher:
    """Runs Exact -> TP2P -> Sell-Rate on a (bank row, wallet row) pair.

    The first rule that succeeds decides the match type; later rules are
    not evaluated for that pair.
    """

    def __init__(
        self,
        exact_matcher: ExactMatcher | None = None,
        tp2p_matcher: TP2PMatcher | None = None,
        sell_rate_matcher: SellRateMatcher | None = None,
    ):
        self.exact_matcher = exact_matcher or ExactMatcher()
        self.tp2p_matcher = tp2p_matcher or TP2PMatcher()
        self.sell_rate_matcher = sell_rate_matcher or SellRateMatcher()

    @property
    def rules(self) -> list[tuple[MatchType, ExactMatcher | TP2PMatcher | SellRateMatcher]]:
        return [
            (MatchType.EXACT, self.exact_matcher),
            (MatchType.TP2P, self.tp2p_matcher),
            (MatchType.SELL_RATE, self.sell_rate_matcher),
        ]

    def evaluate(self, source: TransactionRow, candidate: TransactionRow) -> MatchType | None:
        """Match type of the first rule linking the pair, or None."""
        for match_type, rule in self.rules:
            if rule.match(source, candidate):
                return match_type
        return None
