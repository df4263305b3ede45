"""Reconciliation engine - bank sheet against wallet sheets."""

import logging
from dataclasses import dataclass, field

from walletrecon.cells import Row, Table, is_blank
from walletrecon.config import settings
from walletrecon.exceptions import MissingDescriptionColumnError
from walletrecon.models.recon import (
    ColumnMap,
    MatchRecord,
    MatchType,
    ReconciliationResult,
    ReconciliationStatistics,
    TransactionRow,
    UniqueRecord,
)
from walletrecon.services.columns import ColumnLocator
from walletrecon.services.matching import DescriptionMatcher, descriptions_equal, tp2p_base_code

logger = logging.getLogger(__name__)


@dataclass
class ComparisonSet:
    """A wallet table prepared for matching."""

    number: int  # 1 or 2
    label: str
    supplied: bool
    column_map: ColumnMap | None = None
    rows: list[TransactionRow] = field(default_factory=list)

    @property
    def located(self) -> bool:
        return self.column_map is not None

    @property
    def active(self) -> bool:
        """Supplied and usable; a set without a description column counts as absent."""
        return self.supplied and self.located


@dataclass
class SetScan:
    """Outcome of scanning one wallet for one bank row."""

    match_type: MatchType | None = None
    matching_rows: list[TransactionRow] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.matching_rows)


class ReconciliationEngine:
    """Reconciles a bank sheet against one or two wallet sheets.

    Flow:
    1. Locate description/credit/debit columns in every table
    2. Forward pass: every bank row against every row of each wallet
    3. Reverse pass: every wallet row against every bank row
    4. Aggregate statistics

    The engine holds no state between runs; inputs fully determine the result.
    """

    def __init__(
        self,
        locator: ColumnLocator | None = None,
        matcher: DescriptionMatcher | None = None,
        match_type_policy: str | None = None,
        source_label: str | None = None,
        wallet1_label: str | None = None,
        wallet2_label: str | None = None,
    ):
        """Initialize engine.

        Args:
            locator: Column locator (defaults to configured scan window)
            matcher: Rule chain used by the forward pass
            match_type_policy: "last" or "precedence" for the per-wallet match type
            source_label: Display name of the bank sheet
            wallet1_label: Display name of the first wallet
            wallet2_label: Display name of the second wallet
        """
        self.locator = locator or ColumnLocator()
        self.matcher = matcher or DescriptionMatcher()
        self.match_type_policy = match_type_policy or settings.match_type_policy
        self.source_label = source_label or settings.source_label
        self.wallet1_label = wallet1_label or settings.wallet1_label
        self.wallet2_label = wallet2_label or settings.wallet2_label

    def reconcile(
        self,
        source: Table,
        compare1: Table | None = None,
        compare2: Table | None = None,
    ) -> ReconciliationResult:
        """Run a full reconciliation.

        Args:
            source: Bank sheet rows
            compare1: First wallet rows, if supplied
            compare2: Second wallet rows, if supplied

        Returns:
            ReconciliationResult with matches, uniques and statistics

        Raises:
            MissingDescriptionColumnError: Bank sheet has no description column
        """
        source_map = self.locator.locate(source)
        if source_map is None:
            raise MissingDescriptionColumnError(self.source_label)

        comparisons = [
            self._prepare_set(1, self.wallet1_label, compare1),
            self._prepare_set(2, self.wallet2_label, compare2),
        ]

        stats = ReconciliationStatistics()
        stats.description_column_found = {
            "source": True,
            "compare1": comparisons[0].located,
            "compare2": comparisons[1].located,
        }
        stats.files_compared = {
            "wallet1": comparisons[0].supplied,
            "wallet2": comparisons[1].supplied,
        }

        source_rows = self._data_rows(source, source_map)
        stats.source_rows = len(source_rows)
        stats.compare1_rows = len(comparisons[0].rows)
        stats.compare2_rows = len(comparisons[1].rows)

        active = [c for c in comparisons if c.active]
        result = ReconciliationResult(statistics=stats)

        self._forward_pass(source_rows, active, result)
        self._reverse_pass(source_rows, active, result)

        logger.info(
            f"Reconciled {stats.source_rows} bank rows against "
            f"{stats.compare1_rows}+{stats.compare2_rows} wallet rows: "
            f"{stats.matching_rows} matched, {stats.unique_rows} unique, "
            f"{stats.unique_in_compare1}/{stats.unique_in_compare2} unique in wallets"
        )
        return result

    def _prepare_set(self, number: int, label: str, table: Table | None) -> ComparisonSet:
        """Locate columns in a wallet table; a missing header degrades to absent."""
        if table is None:
            return ComparisonSet(number=number, label=label, supplied=False)

        column_map = self.locator.locate(table)
        if column_map is None:
            logger.warning(f"Description column not found in {label}; skipping it")
            return ComparisonSet(number=number, label=label, supplied=True)

        return ComparisonSet(
            number=number,
            label=label,
            supplied=True,
            column_map=column_map,
            rows=self._data_rows(table, column_map),
        )

    def _data_rows(self, table: Table, column_map: ColumnMap) -> list[TransactionRow]:
        """Rows strictly after the header row."""
        data: list[Row] = table[column_map.header_row + 1 :]
        return [
            TransactionRow(position=position, cells=list(cells or []), column_map=column_map)
            for position, cells in enumerate(data)
        ]

    # Forward pass

    def _forward_pass(
        self,
        source_rows: list[TransactionRow],
        comparisons: list[ComparisonSet],
        result: ReconciliationResult,
    ) -> None:
        """Classify every bank row as matched or unique."""
        stats = result.statistics

        for row in source_rows:
            if is_blank(row.raw_description):
                continue

            scans = {c.number: self._scan_set(row, c) for c in comparisons}
            scan1 = scans.get(1, SetScan())
            scan2 = scans.get(2, SetScan())

            if not (scan1.found or scan2.found):
                result.unique.append(UniqueRecord(row=row, set_label=self.source_label))
                stats.unique_rows += 1
                continue

            record = MatchRecord(
                row=row,
                found_in_set1=scan1.found,
                found_in_set2=scan2.found,
                match_type1=scan1.match_type,
                match_type2=scan2.match_type,
                matching_rows1=scan1.matching_rows,
                matching_rows2=scan2.matching_rows,
            )
            result.matches.append(record)
            stats.matching_rows += 1

            overall = record.overall_match_type
            if overall == MatchType.SELL_RATE:
                stats.sell_rate_matches += 1
            elif overall == MatchType.TP2P:
                stats.tp2p_matches += 1
            else:
                stats.exact_matches += 1

    def _scan_set(self, row: TransactionRow, comparison: ComparisonSet) -> SetScan:
        """Collect every wallet row matching a bank row."""
        scan = SetScan()

        for candidate in comparison.rows:
            if is_blank(candidate.raw_description):
                continue

            match_type = self.matcher.evaluate(row, candidate)
            if match_type is None:
                continue

            scan.matching_rows.append(candidate)
            scan.match_type = self._resolve_match_type(scan.match_type, match_type)

        return scan

    def _resolve_match_type(self, current: MatchType | None, new: MatchType) -> MatchType:
        """Per-wallet match type under the configured policy."""
        if self.match_type_policy == "precedence" and current is not None:
            return max(current, new, key=lambda t: t.precedence)
        # "last": later matches overwrite earlier ones
        return new

    # Reverse pass

    def _reverse_pass(
        self,
        source_rows: list[TransactionRow],
        comparisons: list[ComparisonSet],
        result: ReconciliationResult,
    ) -> None:
        """Find wallet rows without any bank counterpart."""
        stats = result.statistics

        for comparison in comparisons:
            unique_count = 0
            for candidate in comparison.rows:
                if is_blank(candidate.raw_description):
                    continue
                if self._has_bank_match(candidate, source_rows):
                    continue

                result.unique_in_comparison_sets.append(
                    UniqueRecord(
                        row=candidate, set_label=comparison.label, set_number=comparison.number
                    )
                )
                unique_count += 1

            if comparison.number == 1:
                stats.unique_in_compare1 = unique_count
            else:
                stats.unique_in_compare2 = unique_count

    def _has_bank_match(
        self, wallet_row: TransactionRow, source_rows: list[TransactionRow]
    ) -> bool:
        """Exact text, bank-side TP2P base code, or sell rate correlation.

        Only a TP2P suffix on the bank row is considered; wallet rows do not
        carry the suffix.
        """
        wallet_text = wallet_row.description.strip()

        for bank_row in source_rows:
            if is_blank(bank_row.raw_description):
                continue

            if descriptions_equal(bank_row.raw_description, wallet_row.raw_description):
                return True

            base_code = tp2p_base_code(bank_row.description)
            if base_code is not None and base_code == wallet_text:
                return True

            if self.matcher.sell_rate_matcher.match(bank_row, wallet_row):
                return True

        return False
