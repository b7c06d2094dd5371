import logging
from dataclasses import dataclass
from typing import Any

from ..errors import ConfigurationError, TableNotFoundError
from ..sheets.models import EMPTY
from ..sheets.store import TableStore


logger = logging.getLogger(__name__)

PROGRAM_LIST_SHEET = "_programlist"
SHEET_CONFIG_SHEET = "_sheetconfig"

PROGRAM_LIST_HEADER = "Program List"
TOTALS_FLAG_LABEL = "1Calculate Totals?"
COPY_FLAG_LABEL = "2Copy into next week?"
PSEUDO_ENTRIES = (PROGRAM_LIST_HEADER, TOTALS_FLAG_LABEL, COPY_FLAG_LABEL)


@dataclass(frozen=True)
class ProgramConfig:
    """Snapshot of the tracker configuration for a single engine run"""

    programs: tuple[str, ...]
    carry_forward_columns: tuple[str, ...]
    total_columns: tuple[str, ...]
    data_table_name: str
    column_names: tuple[str, ...]


def _is_checked(flag: Any) -> bool:
    if isinstance(flag, str):
        return flag.strip().upper() not in ("", "FALSE", "0")
    return bool(flag)


class ProgramConfigProvider:
    """Reads the program configuration out of the _programlist and _sheetconfig sheets.

    Layout of _programlist: row 1 is "Program List" followed by the data
    column names. Column A lists the programs in tracker order. The rows
    labelled "1Calculate Totals?" and "2Copy into next week?" hold checkboxes
    under the columns to total and to carry forward.
    """

    def __init__(
        self,
        store: TableStore,
        program_list_sheet: str = PROGRAM_LIST_SHEET,
        sheet_config_sheet: str = SHEET_CONFIG_SHEET,
    ) -> None:
        self.store = store
        self.program_list_sheet = program_list_sheet
        self.sheet_config_sheet = sheet_config_sheet

    def _read_rows(self, sheet_name: str) -> list[list[Any]]:
        try:
            return self.store.get_all_rows(sheet_name).values
        except TableNotFoundError as e:
            raise ConfigurationError(f'Configuration sheet "{sheet_name}" is missing') from e

    def load(self) -> ProgramConfig:
        """Read a fresh configuration. Never cached between runs."""
        rows = self._read_rows(self.program_list_sheet)
        if not rows:
            raise ConfigurationError(f'Configuration sheet "{self.program_list_sheet}" is empty')

        header = rows[0]
        column_names = tuple(name for name in header[1:] if name not in (EMPTY, PROGRAM_LIST_HEADER))
        programs = tuple(
            row[0] for row in rows if row and row[0] != EMPTY and row[0] not in PSEUDO_ENTRIES
        )

        config = ProgramConfig(
            programs=programs,
            carry_forward_columns=self._flagged_columns(rows, COPY_FLAG_LABEL),
            total_columns=self._flagged_columns(rows, TOTALS_FLAG_LABEL),
            data_table_name=self.get_data_table_name(),
            column_names=column_names,
        )
        logger.debug(f"Loaded configuration: {config}")
        return config

    def _flagged_columns(self, rows: list[list[Any]], label: str) -> tuple[str, ...]:
        header = rows[0]
        flag_row = next((row for row in rows if row and row[0] == label), None)
        if flag_row is None:
            logger.warning(f'No "{label}" row in {self.program_list_sheet}; assuming no columns')
            return ()

        return tuple(
            name
            for name, flag in zip(header[1:], flag_row[1:])
            if name != EMPTY and _is_checked(flag)
        )

    def get_data_table_name(self) -> str:
        """The active data sheet, e.g. "FY26 Tracker", read from cell A2"""
        rows = self._read_rows(self.sheet_config_sheet)
        if len(rows) < 2 or not rows[1] or rows[1][0] == EMPTY:
            raise ConfigurationError(f"No data sheet name in {self.sheet_config_sheet}!A2")
        return str(rows[1][0])
