import copy
import logging
import re
from typing import Any, Dict, List, Optional

from ..errors import SheetError, TableNotFoundError
from .a1 import column_index
from .models import EMPTY, RowRange, Table, is_number


logger = logging.getLogger(__name__)

SUM_PATTERN = re.compile(r"^=SUM\(([A-Z]+)(\d+):([A-Z]+)(\d+)\)$")


class InMemoryTableStore:
    """TableStore kept in process memory.

    Cells hold plain values; strings starting with "=" are formulas. Only the
    blank formula and single-column =SUM ranges are understood, which is all
    the engines ever write.

    With ``autofill`` enabled, inserted rows start out as copies of the row
    above them, the way a spreadsheet host extrapolates neighbouring rows.
    """

    def __init__(self, tables: Optional[Dict[str, List[List[Any]]]] = None, autofill: bool = False):
        self.autofill = autofill
        self._tables: Dict[str, List[List[Any]]] = {}
        for name, rows in (tables or {}).items():
            self.add_table(name, rows)

    def add_table(self, table_name: str, rows: List[List[Any]]) -> None:
        width = max((len(row) for row in rows), default=0)
        self._tables[table_name] = [list(row) + [EMPTY] * (width - len(row)) for row in rows]

    def _grid(self, table_name: str) -> List[List[Any]]:
        try:
            return self._tables[table_name]
        except KeyError:
            raise TableNotFoundError(f'Sheet "{table_name}" not found') from None

    def _width(self, table_name: str) -> int:
        grid = self._grid(table_name)
        return len(grid[0]) if grid else 0

    def _last_content_row(self, table_name: str) -> int:
        grid = self._grid(table_name)
        for index in range(len(grid) - 1, -1, -1):
            if any(cell != EMPTY for cell in grid[index]):
                return index + 1
        return 0

    def _ensure_size(self, table_name: str, num_rows: int, num_columns: int) -> None:
        grid = self._grid(table_name)
        width = max(self._width(table_name), num_columns)
        for row in grid:
            row.extend([EMPTY] * (width - len(row)))
        while len(grid) < num_rows:
            grid.append([EMPTY] * width)

    def _evaluate(self, grid: List[List[Any]], cell: Any) -> Any:
        if not (isinstance(cell, str) and cell.startswith("=")):
            return cell
        match = SUM_PATTERN.match(cell)
        if not match:
            raise SheetError(f"Unsupported formula: {cell}")
        column = column_index(match.group(1)) - 1
        first, last = sorted((int(match.group(2)), int(match.group(4))))
        total = 0
        for row in grid[first - 1 : last]:
            value = self._evaluate(grid, row[column]) if column < len(row) else EMPTY
            if is_number(value):
                total += value
        return total

    def get_table_names(self) -> List[str]:
        return list(self._tables)

    def physical_row_count(self, table_name: str) -> int:
        """Rows in the grid, including blank rows past the last content row"""
        return len(self._grid(table_name))

    def get_all_rows(self, table_name: str) -> Table:
        grid = self._grid(table_name)
        last_row = self._last_content_row(table_name)
        values = [[self._evaluate(grid, cell) for cell in row] for row in grid[:last_row]]
        return Table(name=table_name, values=values)

    def read_formulas(self, table_name: str) -> List[List[str]]:
        grid = self._grid(table_name)
        last_row = self._last_content_row(table_name)
        return [
            [cell if isinstance(cell, str) and cell.startswith("=") else "" for cell in row]
            for row in grid[:last_row]
        ]

    def insert_rows_after(self, table_name: str, after_row: int, count: int) -> RowRange:
        grid = self._grid(table_name)
        if after_row < 0 or after_row > len(grid):
            raise SheetError(f"Cannot insert after row {after_row} of {table_name}")

        width = self._width(table_name)
        template = grid[after_row - 1] if self.autofill and after_row > 0 else None
        new_rows = [list(template) if template else [EMPTY] * width for _ in range(count)]
        grid[after_row:after_row] = new_rows
        logger.debug(f"Inserted {count} rows after row {after_row} in {table_name}")
        return RowRange(start_row=after_row + 1, num_rows=count)

    def delete_rows(self, table_name: str, start_row: int, count: int) -> None:
        grid = self._grid(table_name)
        if start_row < 1 or start_row + count - 1 > len(grid):
            raise SheetError(f"Cannot delete rows {start_row}-{start_row + count - 1} of {table_name}")
        del grid[start_row - 1 : start_row - 1 + count]

    def read_range(
        self, table_name: str, start_row: int, start_column: int, num_rows: int, num_columns: int
    ) -> List[List[Any]]:
        grid = self._grid(table_name)
        values = []
        for row_number in range(start_row, start_row + num_rows):
            row = grid[row_number - 1] if row_number <= len(grid) else []
            cells = row[start_column - 1 : start_column - 1 + num_columns]
            cells = list(cells) + [EMPTY] * (num_columns - len(cells))
            values.append([self._evaluate(grid, cell) for cell in cells])
        return values

    def write_range(self, table_name: str, start_row: int, start_column: int, values: List[List[Any]]) -> None:
        if not values:
            return
        num_columns = max(len(row) for row in values)
        self._ensure_size(table_name, start_row + len(values) - 1, start_column + num_columns - 1)
        grid = self._grid(table_name)
        for offset, row in enumerate(values):
            for column_offset, value in enumerate(row):
                if isinstance(value, str) and value.startswith("=") and value != "=":
                    if not SUM_PATTERN.match(value):
                        raise SheetError(f"Unsupported formula: {value}")
                grid[start_row - 1 + offset][start_column - 1 + column_offset] = value

    def write_formula(self, table_name: str, row: int, column: int, formula: str) -> None:
        self.write_range(table_name, row, column, [[formula]])

    def copy_table(self, table_name: str, new_name: str) -> None:
        if new_name in self._tables:
            raise SheetError(f'Sheet "{new_name}" already exists')
        self._tables[new_name] = copy.deepcopy(self._grid(table_name))

    def delete_table(self, table_name: str) -> None:
        self._grid(table_name)
        del self._tables[table_name]
