"""A1 notation helpers.

Column letters use bijective base-26: A=1 ... Z=26, AA=27, AZ=52, BA=53.
"""

import string


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its letter"""
    if index < 1:
        raise ValueError(f"Column index must be >= 1, got {index}")

    letters = []
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters.append(string.ascii_uppercase[remainder])
    return "".join(reversed(letters))


def column_index(letter: str) -> int:
    """Convert a column letter to its 1-based index"""
    if not letter or not letter.isalpha() or not letter.isascii():
        raise ValueError(f"Invalid column letter: {letter!r}")

    index = 0
    for char in letter.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def cell_ref(row: int, column: int) -> str:
    """A1 reference for a 1-based row and column"""
    return f"{column_letter(column)}{row}"


def range_ref(sheet_name: str, start_row: int, start_column: int, num_rows: int, num_columns: int) -> str:
    """Quoted A1 range covering the given block of cells"""
    start = cell_ref(start_row, start_column)
    end = cell_ref(start_row + num_rows - 1, start_column + num_columns - 1)
    return f"{quote_sheet_name(sheet_name)}!{start}:{end}"


def quote_sheet_name(sheet_name: str) -> str:
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'"


def sum_formula(column: int, start_row: int, end_row: int) -> str:
    """Build the totals formula, e.g. =SUM(C10:C14)"""
    letter = column_letter(column)
    return f"=SUM({letter}{start_row}:{letter}{end_row})"
