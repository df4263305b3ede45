"""JSON encoding of tables and results for session storage."""

from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from walletrecon.cells import Cell, Row, Table
from walletrecon.models.recon import (
    ColumnMap,
    MatchRecord,
    MatchType,
    ReconciliationResult,
    ReconciliationStatistics,
    TransactionRow,
    UniqueRecord,
)


def encode_cell(value: Cell) -> Any:
    """Tag the cell types JSON has no literal for."""
    # datetime is a date subclass
    if isinstance(value, datetime):
        return {"datetime": value.isoformat()}
    if isinstance(value, date):
        return {"date": value.isoformat()}
    if isinstance(value, Decimal):
        return {"decimal": str(value)}
    return value


def decode_cell(value: Any) -> Cell:
    if not isinstance(value, dict):
        return value
    if "datetime" in value:
        return datetime.fromisoformat(value["datetime"])
    if "date" in value:
        return date.fromisoformat(value["date"])
    if "decimal" in value:
        return Decimal(value["decimal"])
    raise ValueError(f"Unknown cell encoding: {value}")


def encode_table(table: Table) -> list[list[Any]]:
    return [[encode_cell(cell) for cell in row] for row in table]


def decode_table(data: list[list[Any]]) -> Table:
    return [_decode_cells(row) for row in data]


def _decode_cells(cells: list[Any]) -> Row:
    return [decode_cell(cell) for cell in cells]


def _encode_row(row: TransactionRow) -> dict:
    return {
        "position": row.position,
        "cells": [encode_cell(cell) for cell in row.cells],
        "column_map": asdict(row.column_map),
    }


def _decode_row(data: dict) -> TransactionRow:
    return TransactionRow(
        position=data["position"],
        cells=_decode_cells(data["cells"]),
        column_map=ColumnMap(**data["column_map"]),
    )


def _match_type(value: str | None) -> MatchType | None:
    return MatchType(value) if value is not None else None


def encode_result(result: ReconciliationResult) -> dict:
    """Full result, including the cells and column maps behind every row.

    Unlike ReconciliationResult.to_dict, this keeps enough to rebuild the
    result for exports.
    """
    return {
        "statistics": asdict(result.statistics),
        "matches": [
            {
                "row": _encode_row(match.row),
                "found_in_set1": match.found_in_set1,
                "found_in_set2": match.found_in_set2,
                "match_type1": match.match_type1.value if match.match_type1 else None,
                "match_type2": match.match_type2.value if match.match_type2 else None,
                "matching_rows1": [_encode_row(r) for r in match.matching_rows1],
                "matching_rows2": [_encode_row(r) for r in match.matching_rows2],
            }
            for match in result.matches
        ],
        "unique": [_encode_unique(u) for u in result.unique],
        "unique_in_comparison_sets": [_encode_unique(u) for u in result.unique_in_comparison_sets],
    }


def _encode_unique(record: UniqueRecord) -> dict:
    return {
        "row": _encode_row(record.row),
        "set_label": record.set_label,
        "set_number": record.set_number,
    }


def _decode_unique(data: dict) -> UniqueRecord:
    return UniqueRecord(
        row=_decode_row(data["row"]),
        set_label=data["set_label"],
        set_number=data["set_number"],
    )


def decode_result(data: dict) -> ReconciliationResult:
    matches = [
        MatchRecord(
            row=_decode_row(item["row"]),
            found_in_set1=item["found_in_set1"],
            found_in_set2=item["found_in_set2"],
            match_type1=_match_type(item["match_type1"]),
            match_type2=_match_type(item["match_type2"]),
            matching_rows1=[_decode_row(r) for r in item["matching_rows1"]],
            matching_rows2=[_decode_row(r) for r in item["matching_rows2"]],
        )
        for item in data["matches"]
    ]
    return ReconciliationResult(
        statistics=ReconciliationStatistics(**data["statistics"]),
        matches=matches,
        unique=[_decode_unique(u) for u in data["unique"]],
        unique_in_comparison_sets=[_decode_unique(u) for u in data["unique_in_comparison_sets"]],
    )
