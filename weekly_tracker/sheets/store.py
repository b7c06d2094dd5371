from typing import Any, List, Protocol

from .models import RowRange, Table


class TableStore(Protocol):
    """Interface the engines use to read and write sheet tables.

    Rows and columns are 1-based, as in A1 notation. Written strings starting
    with "=" are entered as formulas.
    """

    def get_table_names(self) -> List[str]:
        """Return the names of all tables in the workbook"""
        ...

    def get_all_rows(self, table_name: str) -> Table:
        """Return every row up to the last row with content"""
        ...

    def read_formulas(self, table_name: str) -> List[List[str]]:
        """Return the formula text of every cell ("" where there is none)"""
        ...

    def insert_rows_after(self, table_name: str, after_row: int, count: int) -> RowRange:
        ...

    def delete_rows(self, table_name: str, start_row: int, count: int) -> None:
        ...

    def read_range(
        self, table_name: str, start_row: int, start_column: int, num_rows: int, num_columns: int
    ) -> List[List[Any]]:
        ...

    def write_range(self, table_name: str, start_row: int, start_column: int, values: List[List[Any]]) -> None:
        ...

    def write_formula(self, table_name: str, row: int, column: int, formula: str) -> None:
        ...

    def copy_table(self, table_name: str, new_name: str) -> None:
        ...

    def delete_table(self, table_name: str) -> None:
        ...
