import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

from ..errors import StateError, TrackerError, WeekExtensionError
from ..programs.config import ProgramConfig
from ..sheets.a1 import sum_formula
from ..sheets.models import RowRange, Table, blank_rows, coerce_date
from ..sheets.store import TableStore


logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total"


@dataclass(frozen=True)
class WeekBlock:
    """Rows of one week, including its totals row"""

    rows: RowRange
    week: date


class WeekExtender:
    """Adds the next week's block of program rows to a tracker table"""

    def __init__(self, store: TableStore, week_column: str = "Week", program_column: str = "Program") -> None:
        self.store = store
        self.week_column = week_column
        self.program_column = program_column

    def find_last_block(self, table: Table) -> WeekBlock:
        """Locate the trailing run of rows sharing the last row's week date"""
        if table.row_count < 2:
            raise StateError(f"{table.name} has no week rows to extend")

        week_index = table.column_index(self.week_column)
        last_week = coerce_date(table.row(table.row_count)[week_index])
        if last_week is None:
            raise StateError("Invalid or missing date in the last week's row.")

        start_row = table.row_count
        while start_row > 2 and coerce_date(table.row(start_row - 1)[week_index]) == last_week:
            start_row -= 1

        return WeekBlock(rows=RowRange(start_row, table.row_count - start_row + 1), week=last_week)

    def build_week_rows(self, table: Table, block: WeekBlock, config: ProgramConfig) -> list[list[Any]]:
        """Build the new block's rows: one per program, then the totals row"""
        week_index = table.column_index(self.week_column)
        program_index = table.column_index(self.program_column)
        carry_indexes = [table.column_index(column) for column in config.carry_forward_columns]

        prior_rows = {
            table.row(row_number)[program_index]: table.row(row_number)
            for row_number in range(block.rows.start_row, block.rows.end_row + 1)
        }

        new_week = block.week + timedelta(days=7)
        new_rows = blank_rows(len(config.programs) + 1, table.column_count)
        for program, row in zip(config.programs, new_rows):
            row[program_index] = program
            prior = prior_rows.get(program)
            if prior is not None:
                for column in carry_indexes:
                    row[column] = prior[column]

        new_rows[-1][program_index] = TOTAL_LABEL
        for row in new_rows:
            row[week_index] = new_week
        return new_rows

    def write_totals(self, table: Table, new_range: RowRange, config: ProgramConfig) -> None:
        """Write =SUM formulas over the new program rows into the totals row"""
        if new_range.num_rows < 2:
            logger.info(f"No program rows in the new block of {table.name}; skipping totals formulas")
            return

        for column_name in config.total_columns:
            column = table.column_index(column_name) + 1
            formula = sum_formula(column, new_range.start_row, new_range.end_row - 1)
            self.store.write_formula(table.name, new_range.end_row, column, formula)

    def extend_week(self, table_name: str, config: ProgramConfig) -> RowRange:
        """Add a new week block after the last one, rolling back on any failure.

        Precondition failures (no well-formed last week, unknown columns) are
        raised as-is before the table is touched. Anything failing after that
        restores the table and raises WeekExtensionError.

        Returns the rows of the new block.
        """
        table = self.store.get_all_rows(table_name)
        block = self.find_last_block(table)
        new_rows = self.build_week_rows(table, block, config)
        logger.info(
            f"Extending {table_name}: last week {block.week} at rows "
            f"{block.rows.start_row}-{block.rows.end_row}"
        )

        backup = self._snapshot(table)
        new_range: Optional[RowRange] = None
        try:
            new_range = self.store.insert_rows_after(table_name, block.rows.end_row, len(new_rows))
            # Clear anything the host filled into the inserted rows
            self.store.write_range(table_name, new_range.start_row, 1, blank_rows(len(new_rows), table.column_count))
            self.store.write_range(table_name, new_range.start_row, 1, new_rows)
            self.write_totals(table, new_range, config)
        except Exception as err:
            logger.warning(f"Error occurred when adding new week to {table_name}! Undoing...")
            self._rollback(table_name, backup, new_range)
            if isinstance(err, TrackerError):
                raise WeekExtensionError(f"Could not add new week to {table_name}: {err}") from err
            raise WeekExtensionError(f"Unexpected error adding new week to {table_name}: {err!r}") from err

        logger.info(
            f"Added week {block.week + timedelta(days=7)} to {table_name} "
            f"at rows {new_range.start_row}-{new_range.end_row}"
        )
        return new_range

    def _snapshot(self, table: Table) -> list[list[Any]]:
        """Table values with formula cells replaced by their formulas"""
        formulas = self.store.read_formulas(table.name)
        snapshot = [list(row) for row in table.values]
        for row_index, formula_row in enumerate(formulas[: len(snapshot)]):
            for column_index, formula in enumerate(formula_row[: len(snapshot[row_index])]):
                if formula:
                    snapshot[row_index][column_index] = formula
        return snapshot

    def _rollback(self, table_name: str, backup: list[list[Any]], new_range: Optional[RowRange]) -> None:
        if new_range is not None:
            self.store.delete_rows(table_name, new_range.start_row, new_range.num_rows)

        current_rows = self.store.get_all_rows(table_name).row_count
        if current_rows > len(backup):
            self.store.delete_rows(table_name, len(backup) + 1, current_rows - len(backup))

        if backup:
            self.store.write_range(table_name, 1, 1, backup)
        logger.warning(f"Restored {table_name} to its previous {len(backup)} rows")
