"""Reconciliation data models."""

from .recon import (
    ColumnMap,
    MatchRecord,
    MatchType,
    ReconciliationResult,
    ReconciliationStatistics,
    TransactionRow,
    UniqueRecord,
)

__all__ = [
    "ColumnMap",
    "TransactionRow",
    "MatchType",
    "MatchRecord",
    "UniqueRecord",
    "ReconciliationStatistics",
    "ReconciliationResult",
]
