"""Checks that a freshly added week block is well formed.

Each check raises ValidationError on failure. ``run_week_checks`` runs them
all against the last two blocks of a table and reports how many passed.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional

from ..errors import StateError, ValidationError
from ..programs.config import ProgramConfig
from ..sheets.a1 import sum_formula
from ..sheets.models import EMPTY, RowRange, Table, coerce_date
from ..sheets.store import TableStore
from .extender import TOTAL_LABEL, WeekExtender


logger = logging.getLogger(__name__)


@dataclass
class WeekContext:
    """Everything a check needs: table values, formulas and both blocks"""

    table: Table
    formulas: list[list[str]]
    config: ProgramConfig
    new_rows: RowRange
    prior_rows: RowRange
    week_column: str = "Week"
    program_column: str = "Program"


@dataclass
class CheckReport:
    passed: int = 0
    total: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.passed == self.total


def check_programs(context: WeekContext) -> None:
    """Every configured program and the totals row appear exactly once in the new week"""
    expected = set(context.config.programs) | {TOTAL_LABEL}
    program_index = context.table.column_index(context.program_column)

    for row_number in range(context.new_rows.start_row, context.new_rows.end_row + 1):
        program = context.table.row(row_number)[program_index]
        if program not in expected:
            raise ValidationError(f'Encountered the unexpected program "{program}" in the new week!')
        expected.remove(program)

    if expected:
        raise ValidationError(f"These expected programs weren't found in the new week: {sorted(expected)}")


def check_week_updated(context: WeekContext) -> None:
    """Prior rows keep their week and new rows are exactly one week later"""
    week_index = context.table.column_index(context.week_column)
    prior_week = coerce_date(context.table.row(context.prior_rows.start_row)[week_index])
    if prior_week is None:
        raise ValidationError(f"Invalid date in prior week's data at row {context.prior_rows.start_row}")

    for row_number in range(context.prior_rows.start_row, context.prior_rows.end_row + 1):
        week = coerce_date(context.table.row(row_number)[week_index])
        if week != prior_week:
            raise ValidationError(f"Mismatched date at row {row_number}. Expected {prior_week} but found {week}")

    expected_week = prior_week + timedelta(days=7)
    for row_number in range(context.new_rows.start_row, context.new_rows.end_row + 1):
        week = coerce_date(context.table.row(row_number)[week_index])
        if week != expected_week:
            raise ValidationError(f"Mismatched date at row {row_number}. Expected {expected_week} but found {week}")


def check_empty_totals(context: WeekContext) -> None:
    """The totals row holds nothing for columns that are not carried forward"""
    skipped = {context.week_column, context.program_column, *context.config.carry_forward_columns}
    totals_row = context.table.row(context.new_rows.end_row)

    for column_name in context.table.header:
        if column_name in skipped or column_name == EMPTY:
            continue
        value = totals_row[context.table.column_index(column_name)]
        if value not in (0, EMPTY, None):
            raise ValidationError(
                f'Unexpected data {value!r} tallied in the "Totals" row (row {context.new_rows.end_row}) '
                f'in the "{column_name}" column'
            )


def check_row_and_column_count(context: WeekContext) -> None:
    expected_rows = len(context.config.programs) + 1
    if context.new_rows.num_rows != expected_rows:
        raise ValidationError(
            f"Invalid number of rows detected. Expected {expected_rows} rows "
            f"but counted {context.new_rows.num_rows} rows."
        )

    # Configured columns plus the Program column
    expected_columns = len(context.config.column_names) + 1
    if context.table.column_count != expected_columns:
        raise ValidationError(
            f"Invalid number of cols detected. Expected {expected_columns} cols "
            f"but counted {context.table.column_count} cols."
        )

    for row_number in range(context.new_rows.start_row, context.new_rows.end_row + 1):
        actual_columns = len(context.table.row(row_number))
        if actual_columns != expected_columns:
            raise ValidationError(
                f"Invalid number of cols detected. Expected {expected_columns} cols "
                f"but counted {actual_columns} cols."
            )


def check_sum_formulas(context: WeekContext) -> None:
    """Totals formulas cover exactly the new program rows"""
    end_row = context.new_rows.end_row
    expected = {
        sum_formula(context.table.column_index(column) + 1, context.new_rows.start_row, end_row - 1)
        for column in context.config.total_columns
    }
    if not context.config.programs:
        expected = set()

    formula_row = context.formulas[end_row - 1] if end_row <= len(context.formulas) else []
    found = [formula for formula in formula_row if formula]
    for formula in found:
        if formula not in expected:
            raise ValidationError(f"Unexpected formula {formula} encountered in new row!")
        expected.remove(formula)

    if expected:
        raise ValidationError(f"New row is missing formulas: {sorted(expected)}")


WEEK_CHECKS: tuple[Callable[[WeekContext], None], ...] = (
    check_programs,
    check_week_updated,
    check_empty_totals,
    check_row_and_column_count,
    check_sum_formulas,
)


def context_for_last_weeks(
    store: TableStore, table_name: str, config: ProgramConfig, extender: Optional[WeekExtender] = None
) -> WeekContext:
    """Build a check context from the last two week blocks of a table"""
    extender = extender or WeekExtender(store)
    table = store.get_all_rows(table_name)
    new_block = extender.find_last_block(table)

    prior_table = Table(name=table.name, values=table.values[: new_block.rows.start_row - 1])
    try:
        prior_block = extender.find_last_block(prior_table)
    except StateError as e:
        raise ValidationError(f"No prior week before row {new_block.rows.start_row}: {e}") from e

    return WeekContext(
        table=table,
        formulas=store.read_formulas(table_name),
        config=config,
        new_rows=new_block.rows,
        prior_rows=prior_block.rows,
        week_column=extender.week_column,
        program_column=extender.program_column,
    )


def run_week_checks(context: WeekContext) -> CheckReport:
    report = CheckReport()
    for check in WEEK_CHECKS:
        report.total += 1
        try:
            check(context)
            report.passed += 1
        except ValidationError as e:
            logger.error(f"{check.__name__}: {check.__doc__ or 'No description.'}\nCHECK FAILED: {e}")
            report.failures[check.__name__] = str(e)

    logger.info(f"Week checks passed {report.passed}/{report.total}")
    return report
