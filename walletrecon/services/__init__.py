"""Services for reconciliation."""

from .columns import ColumnLocator
from .export import to_csv, to_workbook
from .reconcile import ReconciliationEngine
from .session import ReconciliationSession, SessionStore, session_store
from .tables import read_table

__all__ = [
    "ColumnLocator",
    "ReconciliationEngine",
    "ReconciliationSession",
    "SessionStore",
    "session_store",
    "read_table",
    "to_csv",
    "to_workbook",
]
