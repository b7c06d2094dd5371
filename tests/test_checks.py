from dataclasses import replace

import pytest

from weekly_tracker.errors import ValidationError
from weekly_tracker.sheets.memory import InMemoryTableStore
from weekly_tracker.weeks.checks import (
    check_empty_totals,
    check_programs,
    check_row_and_column_count,
    check_sum_formulas,
    check_week_updated,
    context_for_last_weeks,
    run_week_checks,
)
from weekly_tracker.weeks.extender import WeekExtender

from .sheet_data import DATA_SHEET, tracker_rows


@pytest.fixture
def extended(store, config):
    WeekExtender(store).extend_week(DATA_SHEET, config)
    return store


def test_all_checks_pass_after_extension(extended, config):
    report = run_week_checks(context_for_last_weeks(extended, DATA_SHEET, config))
    assert report.ok
    assert (report.passed, report.total) == (5, 5)
    assert report.failures == {}


def test_context_locates_both_blocks(extended, config):
    context = context_for_last_weeks(extended, DATA_SHEET, config)
    assert (context.new_rows.start_row, context.new_rows.end_row) == (10, 13)
    assert (context.prior_rows.start_row, context.prior_rows.end_row) == (6, 9)


def test_unexpected_program(extended, config):
    extended.write_range(DATA_SHEET, 11, 1, [["Delta"]])
    with pytest.raises(ValidationError, match='unexpected program "Delta"'):
        check_programs(context_for_last_weeks(extended, DATA_SHEET, config))


def test_duplicate_program(extended, config):
    extended.write_range(DATA_SHEET, 11, 1, [["Alpha"]])
    with pytest.raises(ValidationError, match='unexpected program "Alpha"'):
        check_programs(context_for_last_weeks(extended, DATA_SHEET, config))


def test_missing_program(extended, config):
    config = replace(config, programs=("Alpha", "Beta", "Gamma", "Delta"))
    with pytest.raises(ValidationError, match=r"weren't found in the new week: \['Delta'\]"):
        check_programs(context_for_last_weeks(extended, DATA_SHEET, config))


def test_wrong_week(extended, config):
    context = context_for_last_weeks(extended, DATA_SHEET, config)
    context.table.values[10][1] = context.table.values[5][1]
    with pytest.raises(ValidationError, match="Mismatched date at row 11"):
        check_week_updated(context)


def test_tallied_totals(extended, config):
    extended.write_range(DATA_SHEET, 10, 5, [[12]])
    report = run_week_checks(context_for_last_weeks(extended, DATA_SHEET, config))

    assert report.passed == 4
    assert "check_empty_totals" in report.failures
    with pytest.raises(ValidationError, match='"Census" column'):
        check_empty_totals(context_for_last_weeks(extended, DATA_SHEET, config))


def test_wrong_row_count(extended, config):
    context = context_for_last_weeks(extended, DATA_SHEET, replace(config, programs=("Alpha",)))
    with pytest.raises(ValidationError, match="Expected 2 rows but counted 4 rows"):
        check_row_and_column_count(context)


def test_formula_pointing_at_wrong_rows(extended, config):
    extended.write_formula(DATA_SHEET, 13, 5, "=SUM(E9:E12)")
    with pytest.raises(ValidationError, match=r"Unexpected formula =SUM\(E9:E12\)"):
        check_sum_formulas(context_for_last_weeks(extended, DATA_SHEET, config))


def test_missing_formula(extended, config):
    extended.write_range(DATA_SHEET, 13, 7, [[""]])
    with pytest.raises(ValidationError, match="missing formulas"):
        check_sum_formulas(context_for_last_weeks(extended, DATA_SHEET, config))


def test_single_block_has_no_prior_week(config):
    single = InMemoryTableStore({DATA_SHEET: tracker_rows()[:1] + tracker_rows()[5:]})
    with pytest.raises(ValidationError, match="No prior week"):
        context_for_last_weeks(single, DATA_SHEET, config)


@pytest.mark.parametrize(
    "column_names",
    [
        ("Week", "Full", "Cap"),
        ("Week", "Full", "Cap", "Census", "Admits", "Discharges", "Referrals"),
    ],
)
def test_sheet_width_must_match_configured_columns(extended, config, column_names):
    context = context_for_last_weeks(extended, DATA_SHEET, replace(config, column_names=column_names))
    with pytest.raises(ValidationError, match=f"Expected {len(column_names) + 1} cols but counted 7 cols"):
        check_row_and_column_count(context)


def test_configured_columns_match_sheet_width(extended, config):
    check_row_and_column_count(context_for_last_weeks(extended, DATA_SHEET, config))
