import logging
from datetime import date, datetime
from typing import Any, Dict, List

from google.api_core import retry
from google.oauth2 import service_account
from googleapiclient.discovery import build

from ..errors import SheetError, TableNotFoundError
from .a1 import quote_sheet_name, range_ref
from .models import EMPTY, RowRange, Table


logger = logging.getLogger(__name__)


class GoogleSheetsClient:
    """Handles all Google Sheets operations"""

    SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

    def __init__(
        self,
        spreadsheet_id: str,
        credentials_path: str,
        service=None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.credentials_path = credentials_path
        self.service = service or self._build_sheets_service()

    def _build_sheets_service(self):
        """Create and return an authorized Sheets API service object"""
        try:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_path, scopes=self.SCOPES
            )
            return build("sheets", "v4", credentials=creds)
        except Exception as e:
            logger.error(f"Failed to build sheets service: {e}")
            raise SheetError(f"Could not initialize sheets service: {str(e)}")

    @retry.Retry()
    def _get_sheet_properties(self) -> List[Dict[str, Any]]:
        """Get the properties of every sheet in the spreadsheet"""
        try:
            result = (
                self.service.spreadsheets()
                .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties")
                .execute()
            )
            return [sheet["properties"] for sheet in result.get("sheets", [])]
        except Exception as e:
            logger.error(f"Error reading sheet properties: {e}")
            raise SheetError(f"Failed to read sheet properties: {str(e)}")

    def _get_sheet_id(self, sheet_name: str) -> int:
        for properties in self._get_sheet_properties():
            if properties.get("title") == sheet_name:
                return properties["sheetId"]
        raise TableNotFoundError(f'Sheet "{sheet_name}" not found')

    @retry.Retry()
    def _batch_update(self, requests: List[Dict[str, Any]], description: str) -> None:
        try:
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id, body={"requests": requests}
            ).execute()
        except Exception as e:
            logger.error(f"Error during {description}: {e}")
            raise SheetError(f"Failed to {description}: {str(e)}")

    @retry.Retry()
    def _get_values(self, range_name: str, render_option: str) -> List[List[Any]]:
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self.spreadsheet_id,
                    range=range_name,
                    valueRenderOption=render_option,
                    dateTimeRenderOption="SERIAL_NUMBER",
                )
                .execute()
            )
            return result.get("values", [])
        except Exception as e:
            logger.error(f"Error reading range {range_name}: {e}")
            raise SheetError(f"Failed to read range {range_name}: {str(e)}")

    @staticmethod
    def _pad_rows(rows: List[List[Any]], width: int) -> List[List[Any]]:
        """Pad ragged API rows to the given width"""
        return [list(row) + [EMPTY] * (width - len(row)) for row in rows]

    @staticmethod
    def _serialize_cell(value: Any) -> Any:
        """Convert a cell value into something USER_ENTERED accepts"""
        if value is None:
            return EMPTY
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.isoformat()
        return value

    def get_table_names(self) -> List[str]:
        return [properties["title"] for properties in self._get_sheet_properties()]

    def get_all_rows(self, table_name: str) -> Table:
        """Get every row of the sheet, with unformatted values"""
        rows = self._get_values(quote_sheet_name(table_name), "UNFORMATTED_VALUE")
        width = max((len(row) for row in rows), default=0)
        return Table(name=table_name, values=self._pad_rows(rows, width))

    def read_formulas(self, table_name: str) -> List[List[str]]:
        rows = self._get_values(quote_sheet_name(table_name), "FORMULA")
        width = max((len(row) for row in rows), default=0)
        return [
            [cell if isinstance(cell, str) and cell.startswith("=") else "" for cell in row]
            for row in self._pad_rows(rows, width)
        ]

    def insert_rows_after(self, table_name: str, after_row: int, count: int) -> RowRange:
        """Insert blank rows below after_row, inheriting its formatting"""
        sheet_id = self._get_sheet_id(table_name)
        self._batch_update(
            [
                {
                    "insertDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": after_row,
                            "endIndex": after_row + count,
                        },
                        "inheritFromBefore": after_row > 0,
                    }
                }
            ],
            f"insert {count} rows into {table_name}",
        )
        logger.info(f"Inserted {count} rows after row {after_row} in {table_name}")
        return RowRange(start_row=after_row + 1, num_rows=count)

    def delete_rows(self, table_name: str, start_row: int, count: int) -> None:
        sheet_id = self._get_sheet_id(table_name)
        self._batch_update(
            [
                {
                    "deleteDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": start_row - 1,
                            "endIndex": start_row - 1 + count,
                        }
                    }
                }
            ],
            f"delete {count} rows from {table_name}",
        )
        logger.info(f"Deleted rows {start_row}-{start_row + count - 1} from {table_name}")

    def read_range(
        self, table_name: str, start_row: int, start_column: int, num_rows: int, num_columns: int
    ) -> List[List[Any]]:
        range_name = range_ref(table_name, start_row, start_column, num_rows, num_columns)
        rows = self._get_values(range_name, "UNFORMATTED_VALUE")
        rows = rows + [[] for _ in range(num_rows - len(rows))]
        return self._pad_rows(rows, num_columns)

    @retry.Retry()
    def write_range(self, table_name: str, start_row: int, start_column: int, values: List[List[Any]]) -> None:
        """Write a block of values; strings starting with "=" become formulas"""
        if not values:
            return
        num_columns = max(len(row) for row in values)
        range_name = range_ref(table_name, start_row, start_column, len(values), num_columns)
        body = {"values": [[self._serialize_cell(cell) for cell in row] for row in values]}
        try:
            self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                body=body,
            ).execute()
        except Exception as e:
            logger.error(f"Error writing range {range_name}: {e}")
            raise SheetError(f"Failed to write range {range_name}: {str(e)}")

    def write_formula(self, table_name: str, row: int, column: int, formula: str) -> None:
        self.write_range(table_name, row, column, [[formula]])

    def copy_table(self, table_name: str, new_name: str) -> None:
        sheet_id = self._get_sheet_id(table_name)
        self._batch_update(
            [{"duplicateSheet": {"sourceSheetId": sheet_id, "newSheetName": new_name}}],
            f"copy {table_name} to {new_name}",
        )

    def delete_table(self, table_name: str) -> None:
        sheet_id = self._get_sheet_id(table_name)
        self._batch_update([{"deleteSheet": {"sheetId": sheet_id}}], f"delete sheet {table_name}")
