from datetime import date

import pytest

from weekly_tracker.access.guard import ButtonCooldown
from weekly_tracker.tracker import WeeklyTracker

from .sheet_data import DATA_SHEET


class Notifications:
    def __init__(self):
        self.messages = []

    def __call__(self, message, title):
        self.messages.append((title, message))


@pytest.fixture
def notifications():
    return Notifications()


@pytest.fixture
def tracker(store, notifications):
    return WeeklyTracker(store, owner_email="owner@example.org", editors=["editor@example.org"], notify=notifications)


def test_new_week_extends_the_configured_sheet(tracker, store, notifications):
    assert tracker.new_week()
    assert store.get_all_rows(DATA_SHEET).row(13)[:2] == ["Total", date(2025, 7, 27)]
    assert notifications.messages == []


def test_new_week_reports_errors(tracker, store, notifications):
    store.write_range(DATA_SHEET, 9, 2, [[""]])

    assert not tracker.new_week()
    assert notifications.messages == [("Error!", "Invalid or missing date in the last week's row.")]
    assert store.get_all_rows(DATA_SHEET).row_count == 9


def test_new_week_reports_missing_configuration(store, notifications):
    store.delete_table("_sheetconfig")
    assert not WeeklyTracker(store, notify=notifications).new_week()
    assert "_sheetconfig" in notifications.messages[0][1]


def test_button_is_rate_limited(store, notifications):
    now = [1_000.0]
    tracker = WeeklyTracker(store, cooldown=ButtonCooldown(5, clock=lambda: now[0]), notify=notifications)

    assert tracker.new_week_from_button("owner@example.org")
    assert not tracker.new_week_from_button("owner@example.org")
    assert notifications.messages == [("Error!", "Please wait 5s before clicking again.")]
    assert store.get_all_rows(DATA_SHEET).row_count == 13


def test_edit_on_stats_recomputes_averages(tracker, store, notifications):
    assert tracker.on_edit("Stats", "editor@example.org")

    stats = store.get_all_rows("Stats")
    assert [row[1:3] for row in stats.values[2:]] == [
        ["Alpha", "88.54%"],
        ["Beta", "95.00%"],
        ["Gamma", "84.00%"],
    ]
    assert notifications.messages == [("Success!", "Averages updated.")]


def test_edit_on_other_sheets_is_ignored(tracker, store):
    before = store.get_all_rows("Stats").values
    assert not tracker.on_edit(DATA_SHEET, "owner@example.org")
    assert store.get_all_rows("Stats").values == before


def test_edit_by_unauthorized_user_is_ignored(tracker, store, notifications):
    before = store.get_all_rows("Stats").values
    assert not tracker.on_edit("Stats", "someone@example.org")
    assert store.get_all_rows("Stats").values == before
    assert notifications.messages == []


def test_calculate_averages_reports_errors(tracker, store, notifications):
    store.write_range("Stats", 1, 2, [[""]])
    assert not tracker.calculate_averages()
    assert notifications.messages[0][0] == "Error!"


def test_self_test_runs_on_a_copy(tracker, store):
    before = store.get_all_rows(DATA_SHEET).values

    report = tracker.self_test()

    assert report.ok
    assert report.total == 5
    assert store.get_all_rows(DATA_SHEET).values == before
    assert WeeklyTracker.TEST_SHEET_NAME not in store.get_table_names()


def test_self_test_replaces_a_stale_copy(tracker, store):
    store.copy_table(DATA_SHEET, WeeklyTracker.TEST_SHEET_NAME)
    assert tracker.self_test().ok
    assert WeeklyTracker.TEST_SHEET_NAME not in store.get_table_names()


def test_self_test_reports_a_malformed_sheet(tracker, store, notifications):
    store.write_range(DATA_SHEET, 9, 2, [[""]])
    before = store.get_all_rows(DATA_SHEET).values

    assert tracker.self_test() is None
    assert notifications.messages == [("Error!", "Invalid or missing date in the last week's row.")]
    assert store.get_all_rows(DATA_SHEET).values == before
    assert WeeklyTracker.TEST_SHEET_NAME not in store.get_table_names()


def test_self_test_reports_missing_configuration(store, notifications):
    store.delete_table("_sheetconfig")
    assert WeeklyTracker(store, notify=notifications).self_test() is None
    assert "_sheetconfig" in notifications.messages[0][1]
