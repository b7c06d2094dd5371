"""Weekly Tracker - weekly row automation for program tracking sheets.

This package adds new week blocks to a program tracking table and computes
monthly census averages into a summary table, on top of Google Sheets.
"""

__version__ = "0.1.0"

from .sheets.client import GoogleSheetsClient
from .sheets.memory import InMemoryTableStore
from .stats.averages import MonthlyAverager
from .tracker import WeeklyTracker
from .weeks.extender import WeekExtender


__all__ = [
    "GoogleSheetsClient",
    "InMemoryTableStore",
    "MonthlyAverager",
    "WeekExtender",
    "WeeklyTracker",
]
