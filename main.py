import argparse
import logging

from weekly_tracker.access.guard import ButtonCooldown
from weekly_tracker.logging_config import setup_logging
from weekly_tracker.settings import load_config
from weekly_tracker.sheets.client import GoogleSheetsClient
from weekly_tracker.stats.averages import MonthlyAverager
from weekly_tracker.tracker import WeeklyTracker


JOBS = ("new-week", "averages", "self-test")


# ruff: noqa: D103
def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Weekly tracker jobs")
    parser.add_argument("job", choices=JOBS)
    args = parser.parse_args(argv)

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info(f"Starting weekly tracker job: {args.job}")

    config = load_config()
    sheets_client = GoogleSheetsClient(
        spreadsheet_id=config["SPREADSHEET_ID"],
        credentials_path=config["GOOGLE_CREDENTIALS"],
    )

    tracker = WeeklyTracker(
        store=sheets_client,
        averager=MonthlyAverager(sheets_client, summary_table_name=config["STATS_SHEET_NAME"]),
        owner_email=config["OWNER_EMAIL"],
        editors=config["EDITOR_EMAILS"],
        cooldown=ButtonCooldown(config["COOLDOWN_SECONDS"]),
    )

    if args.job == "new-week":
        return 0 if tracker.new_week() else 1
    if args.job == "averages":
        return 0 if tracker.calculate_averages() else 1

    report = tracker.self_test()
    if report is None:
        return 1
    logger.info(f"Self test passed {report.passed}/{report.total} checks")
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
