# weekly_tracker/sheets/models.py
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from ..errors import ColumnNotFoundError


EMPTY = ""
# Day zero of spreadsheet date serial numbers
SERIAL_EPOCH = date(1899, 12, 30)


@dataclass(frozen=True)
class RowRange:
    """A run of whole rows, addressed by 1-based sheet row numbers"""

    start_row: int
    num_rows: int

    @property
    def end_row(self) -> int:
        return self.start_row + self.num_rows - 1


@dataclass
class Table:
    """Values of a sheet. Row 0 is the header, rows >= 1 are data."""

    name: str
    values: list[list[Any]] = field(default_factory=list)

    @property
    def header(self) -> list[str]:
        return list(self.values[0]) if self.values else []

    @property
    def row_count(self) -> int:
        """Number of rows including the header"""
        return len(self.values)

    @property
    def column_count(self) -> int:
        return len(self.values[0]) if self.values else 0

    def column_index(self, column_name: str) -> int:
        """Return the 0-based index of a header column"""
        try:
            return self.header.index(column_name)
        except ValueError:
            raise ColumnNotFoundError(f'Column "{column_name}" not found in "{self.name}"') from None

    def row(self, row_number: int) -> list[Any]:
        """Return the row at a 1-based sheet row number"""
        return self.values[row_number - 1]

    def data_rows(self) -> list[list[Any]]:
        return self.values[1:]


def is_number(value: Any) -> bool:
    """True for real numeric cell values (booleans and NaN excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def coerce_date(value: Any) -> date | None:
    """Interpret a cell as a calendar date.

    Accepts date and datetime objects and spreadsheet serial numbers. Text,
    blanks and anything else return None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_number(value) and value > 0:
        return SERIAL_EPOCH + timedelta(days=int(value))
    return None


def blank_rows(num_rows: int, num_columns: int) -> list[list[Any]]:
    return [[EMPTY] * num_columns for _ in range(num_rows)]
