import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..errors import StateError
from ..programs.config import ProgramConfig
from ..sheets.models import EMPTY, Table, coerce_date, is_number
from ..sheets.store import TableStore


logger = logging.getLogger(__name__)

NOT_FOUND = "Not found in data!"
NOT_AVAILABLE = "N/A"


@dataclass
class ProgramTally:
    """Census readings of one program within a month"""

    capacity: Any
    census_total: float = 0
    readings: int = 0


class MonthlyAverager:
    """Computes monthly census / capacity percentages into the stats table.

    Stats layout: the target month is a date in B1, rows 1-2 are reserved,
    and from row 3 down column B lists programs and column C their result.
    """

    def __init__(
        self,
        store: TableStore,
        summary_table_name: str = "Stats",
        week_column: str = "Week",
        program_column: str = "Program",
        census_column: str = "Census",
        capacity_column: str = "Full",
    ) -> None:
        self.store = store
        self.summary_table_name = summary_table_name
        self.week_column = week_column
        self.program_column = program_column
        self.census_column = census_column
        self.capacity_column = capacity_column

        self.month_cell = (1, 2)
        self.first_program_row = 3
        self.name_column = 2

    def read_target_month(self) -> date:
        """Get the date in the stats month cell"""
        row, column = self.month_cell
        value = self.store.read_range(self.summary_table_name, row, column, 1, 1)[0][0]
        target = coerce_date(value)
        if target is None:
            raise StateError(f"No valid month selected in {self.summary_table_name} (found {value!r})")
        return target

    def tally_programs(self, table: Table, target_month: date) -> dict[str, ProgramTally]:
        """Group the target month's rows by program"""
        week_index = table.column_index(self.week_column)
        program_index = table.column_index(self.program_column)
        census_index = table.column_index(self.census_column)
        capacity_index = table.column_index(self.capacity_column)

        tallies: dict[str, ProgramTally] = {}
        for row in table.data_rows():
            week = coerce_date(row[week_index])
            if week is None or (week.year, week.month) != (target_month.year, target_month.month):
                continue

            program = row[program_index]
            if program not in tallies:
                tallies[program] = ProgramTally(capacity=row[capacity_index])

            census = row[census_index]
            if is_number(census):
                tallies[program].census_total += census
                tallies[program].readings += 1

        return tallies

    @staticmethod
    def format_average(tally: Optional[ProgramTally]) -> str:
        if tally is None:
            return NOT_FOUND
        if tally.readings == 0 or not is_number(tally.capacity) or tally.capacity == 0:
            return NOT_AVAILABLE

        percentage = ((tally.census_total / tally.readings) / tally.capacity) * 100
        return f"{percentage:.2f}%"

    def summary_program_count(self) -> int:
        return max(self.store.get_all_rows(self.summary_table_name).row_count - (self.first_program_row - 1), 0)

    def reset_programs(self, config: ProgramConfig) -> None:
        """Rewrite the stats program rows to match the configured programs"""
        existing = self.summary_program_count()
        rows = [[program, EMPTY] for program in config.programs]
        rows += [[EMPTY, EMPTY] for _ in range(existing - len(rows))]
        logger.info(f"Resetting {self.summary_table_name} programs ({existing} rows -> {len(config.programs)})")
        self.store.write_range(self.summary_table_name, self.first_program_row, self.name_column, rows)

    def recompute_averages(self, config: ProgramConfig, target_month: Optional[date] = None) -> list[list[Any]]:
        """Update the stats table with each program's average for the month.

        Everything is computed before anything is written back.
        """
        target_month = target_month or self.read_target_month()
        data_table = self.store.get_all_rows(config.data_table_name)
        tallies = self.tally_programs(data_table, target_month)

        if self.summary_program_count() != len(config.programs):
            self.reset_programs(config)

        if not config.programs:
            logger.info("No programs configured; nothing to average")
            return []

        summary_rows = self.store.read_range(
            self.summary_table_name, self.first_program_row, self.name_column, len(config.programs), 2
        )
        for row in summary_rows:
            row[1] = self.format_average(tallies.get(row[0]))

        self.store.write_range(self.summary_table_name, self.first_program_row, self.name_column, summary_rows)
        logger.info(
            f"Averages for {target_month:%B %Y} written to {self.summary_table_name} "
            f"({len(summary_rows)} programs)"
        )
        return summary_rows
