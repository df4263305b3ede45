"""Description matching rules."""

from walletrecon.models.recon import MatchType

from .chain import DescriptionMatcher
from .exact import ExactMatcher, descriptions_equal
from .sell_rate import SellRateMatcher
from .tp2p import TP2PMatcher, tp2p_base_code

__all__ = [
    "DescriptionMatcher",
    "ExactMatcher",
    "TP2PMatcher",
    "SellRateMatcher",
    "MatchType",
    "descriptions_equal",
    "tp2p_base_code",
]
