import logging
from typing import Callable, Iterable, Optional

from .access.guard import ButtonCooldown, check_user_access
from .errors import TrackerError
from .programs.config import ProgramConfigProvider
from .sheets.store import TableStore
from .stats.averages import MonthlyAverager
from .weeks.checks import CheckReport, context_for_last_weeks, run_week_checks
from .weeks.extender import WeekExtender


logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def log_notifier(message: str, title: str) -> None:
    """Default notifier: user-facing messages go to the log"""
    logger.info(f"[{title}] {message}")


class WeeklyTracker:
    """Entry points for the scheduled, edit and button triggers"""

    TEST_SHEET_NAME = "TESTING COPY"

    def __init__(
        self,
        store: TableStore,
        config_provider: Optional[ProgramConfigProvider] = None,
        extender: Optional[WeekExtender] = None,
        averager: Optional[MonthlyAverager] = None,
        owner_email: Optional[str] = None,
        editors: Iterable[str] = (),
        cooldown: Optional[ButtonCooldown] = None,
        notify: Notifier = log_notifier,
    ) -> None:
        self.store = store
        self.config_provider = config_provider or ProgramConfigProvider(store)
        self.extender = extender or WeekExtender(store)
        self.averager = averager or MonthlyAverager(store)
        self.owner_email = owner_email
        self.editors = list(editors)
        self.cooldown = cooldown
        self.notify = notify

    def new_week(self) -> bool:
        """Add the next week to the active data sheet"""
        try:
            config = self.config_provider.load()
            self.extender.extend_week(config.data_table_name, config)
        except TrackerError as e:
            logger.error(f"Error occurred when adding new week!\n{e}")
            self.notify(str(e), "Error!")
            return False
        return True

    def new_week_from_button(self, user_email: str) -> bool:
        """Button handler: same as new_week, but rate limited per user"""
        if self.cooldown is not None and not self.cooldown.try_acquire(user_email):
            self.notify(
                f"Please wait {self.cooldown.remaining(user_email)}s before clicking again.", "Error!"
            )
            return False
        return self.new_week()

    def calculate_averages(self) -> bool:
        """Recompute the monthly averages in the stats sheet"""
        try:
            config = self.config_provider.load()
            self.averager.recompute_averages(config)
        except TrackerError as e:
            logger.error(f"Error calculating averages: {e}")
            self.notify(str(e), "Error!")
            return False

        self.notify("Averages updated.", "Success!")
        return True

    def on_edit(self, edited_sheet: str, user_email: Optional[str]) -> bool:
        """Edit handler: recompute averages when a permitted user edits the stats sheet"""
        if edited_sheet != self.averager.summary_table_name:
            return False
        if not check_user_access(user_email, self.owner_email, self.editors):
            logger.info(f"Ignoring stats edit by {user_email}: insufficient permissions")
            return False
        return self.calculate_averages()

    def self_test(self) -> Optional[CheckReport]:
        """Extend a throwaway copy of the data sheet and verify the new week.

        Returns None when the copy cannot be extended at all.
        """
        copied = False
        try:
            config = self.config_provider.load()
            if self.TEST_SHEET_NAME in self.store.get_table_names():
                self.store.delete_table(self.TEST_SHEET_NAME)
            self.store.copy_table(config.data_table_name, self.TEST_SHEET_NAME)
            copied = True

            self.extender.extend_week(self.TEST_SHEET_NAME, config)
            context = context_for_last_weeks(self.store, self.TEST_SHEET_NAME, config, self.extender)
            report = run_week_checks(context)
        except TrackerError as e:
            logger.error(f"Self test could not run: {e}")
            self.notify(str(e), "Error!")
            return None
        finally:
            if copied:
                self.store.delete_table(self.TEST_SHEET_NAME)

        if not report.ok:
            self.notify(f"Week checks passed {report.passed}/{report.total}.", "Error!")
        return report
