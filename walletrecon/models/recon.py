"""Data models for reconciliation runs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from walletrecon.cells import Cell, Row, cell_text, get_cell


class MatchType(str, Enum):
    """Rule that linked a bank row to a wallet row."""

    EXACT = "exact"
    TP2P = "tp2p"
    SELL_RATE = "sell_rate"

    @property
    def label(self) -> str:
        """Human-readable label used in exports."""
        return MATCH_TYPE_LABELS[self]

    @property
    def precedence(self) -> int:
        return MATCH_TYPE_PRECEDENCE[self]


MATCH_TYPE_LABELS = {
    MatchType.EXACT: "Exact",
    MatchType.TP2P: "Canceled and Credited",
    MatchType.SELL_RATE: "Currency Exchange",
}

# Most specific rule ranks highest
MATCH_TYPE_PRECEDENCE = {
    MatchType.EXACT: 0,
    MatchType.TP2P: 1,
    MatchType.SELL_RATE: 2,
}


def json_cell(value: Cell) -> Any:
    """Make a cell JSON friendly."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass(frozen=True)
class ColumnMap:
    """Where the interesting columns of a table live.

    All indexes are 0-based; -1 means the column was not found.
    """

    header_row: int
    description_column: int
    credit_column: int = -1
    debit_column: int = -1
    fx_rate_column: int = -1

    def to_dict(self) -> dict:
        return {
            "header_row": self.header_row,
            "description_column": self.description_column,
            "credit_column": self.credit_column,
            "debit_column": self.debit_column,
            "fx_rate_column": self.fx_rate_column,
        }


@dataclass(frozen=True)
class TransactionRow:
    """A data row of a table, viewed through its column map."""

    position: int  # 0-based index within the rows after the header
    cells: Row
    column_map: ColumnMap

    @property
    def display_row(self) -> int:
        """1-based row number as shown in the spreadsheet."""
        return self.position + self.column_map.header_row + 2

    @property
    def raw_description(self) -> Cell:
        return get_cell(self.cells, self.column_map.description_column)

    @property
    def description(self) -> str:
        return cell_text(self.raw_description)

    @property
    def debit(self) -> Cell:
        value = get_cell(self.cells, self.column_map.debit_column)
        return "" if value is None else value

    @property
    def credit(self) -> Cell:
        value = get_cell(self.cells, self.column_map.credit_column)
        return "" if value is None else value

    @property
    def fx_rate(self) -> Cell:
        return get_cell(self.cells, self.column_map.fx_rate_column)

    @property
    def balance(self) -> Cell:
        """Last cell of the row (running balance in bank exports)."""
        if not self.cells or self.cells[-1] is None:
            return ""
        return self.cells[-1]

    def to_dict(self) -> dict:
        return {
            "row_index": self.display_row,
            "description": json_cell(self.raw_description),
            "debit": json_cell(self.debit),
            "credit": json_cell(self.credit),
            "balance": json_cell(self.balance),
            "data": [json_cell(c) for c in self.cells],
        }


@dataclass
class MatchRecord:
    """A bank row with at least one wallet match."""

    row: TransactionRow
    found_in_set1: bool = False
    found_in_set2: bool = False
    match_type1: MatchType | None = None
    match_type2: MatchType | None = None
    matching_rows1: list[TransactionRow] = field(default_factory=list)
    matching_rows2: list[TransactionRow] = field(default_factory=list)

    @property
    def overall_match_type(self) -> MatchType:
        """Most specific match type across both wallets."""
        types = [t for t in (self.match_type1, self.match_type2) if t is not None]
        return max(types, key=lambda t: t.precedence)

    def to_dict(self) -> dict:
        data = self.row.to_dict()
        data.update(
            {
                "found_in_file1": self.found_in_set1,
                "found_in_file2": self.found_in_set2,
                "match_type1": self.match_type1.value if self.match_type1 else None,
                "match_type2": self.match_type2.value if self.match_type2 else None,
                "match_type": self.overall_match_type.value,
                "matching_rows": {
                    "file1": [r.to_dict() for r in self.matching_rows1],
                    "file2": [r.to_dict() for r in self.matching_rows2],
                },
            }
        )
        return data


@dataclass
class UniqueRecord:
    """A row with no counterpart on the other side."""

    row: TransactionRow
    set_label: str
    set_number: int = 0  # 0 for the bank sheet, 1 or 2 for a wallet

    def to_dict(self) -> dict:
        data = self.row.to_dict()
        data["source"] = self.set_label
        data["set_number"] = self.set_number
        return data


@dataclass
class ReconciliationStatistics:
    """Aggregate counts for a run."""

    source_rows: int = 0
    compare1_rows: int = 0
    compare2_rows: int = 0
    matching_rows: int = 0
    unique_rows: int = 0
    exact_matches: int = 0
    tp2p_matches: int = 0
    sell_rate_matches: int = 0
    unique_in_compare1: int = 0
    unique_in_compare2: int = 0
    description_column_found: dict[str, bool] = field(
        default_factory=lambda: {"source": False, "compare1": False, "compare2": False}
    )
    files_compared: dict[str, bool] = field(
        default_factory=lambda: {"wallet1": False, "wallet2": False}
    )

    @property
    def match_rate(self) -> int:
        """Matched share of bank rows as a whole percentage."""
        if self.source_rows == 0:
            return 0
        # Half rounds up
        return int(Decimal(self.matching_rows * 100) / Decimal(self.source_rows) + Decimal("0.5"))

    def to_dict(self) -> dict:
        return {
            "source_rows": self.source_rows,
            "compare1_rows": self.compare1_rows,
            "compare2_rows": self.compare2_rows,
            "matching_rows": self.matching_rows,
            "unique_rows": self.unique_rows,
            "exact_matches": self.exact_matches,
            "tp2p_matches": self.tp2p_matches,
            "sell_rate_matches": self.sell_rate_matches,
            "unique_in_compare1": self.unique_in_compare1,
            "unique_in_compare2": self.unique_in_compare2,
            "match_rate": self.match_rate,
            "description_column_found": dict(self.description_column_found),
            "files_compared": dict(self.files_compared),
        }


@dataclass
class ReconciliationResult:
    """Everything a run produces."""

    statistics: ReconciliationStatistics
    matches: list[MatchRecord] = field(default_factory=list)
    unique: list[UniqueRecord] = field(default_factory=list)
    unique_in_comparison_sets: list[UniqueRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "statistics": self.statistics.to_dict(),
            "matches": [m.to_dict() for m in self.matches],
            "unique": [u.to_dict() for u in self.unique],
            "unique_in_comparison_sets": [u.to_dict() for u in self.unique_in_comparison_sets],
        }
