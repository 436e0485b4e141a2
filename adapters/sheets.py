"""
Sheets adapter: Google Sheets API wrapper.

Values are read and written in A1 notation directly. Structural requests
(filters, formatting) need a GridRange, so A1 ranges are parsed here and the
sheet title is resolved to its numeric sheetId with one spreadsheets.get.
"""

import re
from typing import Any, Literal

from googleapiclient.discovery import Resource

from adapters.services import execute
from models import CellValue, GridRange, ToolError


# Metadata only: no grid data, no charts
SPREADSHEET_METADATA_FIELDS = (
    "spreadsheetId,"
    "spreadsheetUrl,"
    "properties(title,locale,timeZone),"
    "sheets(properties(sheetId,title,index,sheetType,gridProperties(rowCount,columnCount)))"
)

ValueInputOption = Literal["RAW", "USER_ENTERED"]

# Columns run to XFD, so a cell reference has at most three letters
_CELL = re.compile(r"^([A-Za-z]{0,3})(\d*)$")


# ---------------------------------------------------------------------------
# A1 notation
# ---------------------------------------------------------------------------


def column_to_index(letters: str) -> int:
    """'A' → 0, 'Z' → 25, 'AA' → 26."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def split_sheet_name(a1_range: str) -> tuple[str | None, str]:
    """
    "'My Sheet'!A1:B2" → ("My Sheet", "A1:B2"); "A1:B2" → (None, "A1:B2").

    A bare sheet name ("Sheet1") has no cell part and returns ("Sheet1", "").
    """
    if "!" in a1_range:
        sheet, cells = a1_range.rsplit("!", 1)
        if sheet.startswith("'") and sheet.endswith("'") and len(sheet) >= 2:
            sheet = sheet[1:-1].replace("''", "'")
        return sheet, cells
    if _CELL.match(a1_range.split(":")[0]) is None:
        return a1_range.strip("'"), ""
    return None, a1_range


def _parse_cell(ref: str) -> tuple[int | None, int | None]:
    """'B3' → (row 2, col 1); 'B' → (None, 1); '3' → (2, None)."""
    match = _CELL.match(ref.strip())
    if match is None or not ref.strip():
        raise ToolError(f"Invalid cell reference: {ref!r}")
    letters, digits = match.groups()
    col = column_to_index(letters) if letters else None
    row = int(digits) - 1 if digits else None
    if row is not None and row < 0:
        raise ToolError(f"Invalid cell reference: {ref!r} (rows start at 1)")
    return row, col


def parse_a1_range(a1_range: str) -> tuple[str | None, GridRange]:
    """
    Parse A1 notation into (sheet title, GridRange with sheet_id unset).

    Bounds are 0-based with exclusive ends, as the Sheets API expects.
    Open-ended forms (A:C, 2:5, A2:C) leave the open bound as None.
    """
    sheet, cells = split_sheet_name(a1_range.strip())
    grid = GridRange(sheet_id=-1, sheet_title=sheet or "")
    if not cells:
        return sheet, grid

    start_ref, _, end_ref = cells.partition(":")
    start_row, start_col = _parse_cell(start_ref)
    end_row, end_col = _parse_cell(end_ref) if end_ref else (start_row, start_col)

    grid.start_row = start_row
    grid.start_column = start_col
    grid.end_row = end_row + 1 if end_row is not None else None
    grid.end_column = end_col + 1 if end_col is not None else None
    return sheet, grid


# ---------------------------------------------------------------------------
# API calls
# ---------------------------------------------------------------------------


async def fetch_metadata(service: Resource, spreadsheet_id: str) -> dict[str, Any]:
    return await execute(
        service.spreadsheets().get(
            spreadsheetId=spreadsheet_id,
            fields=SPREADSHEET_METADATA_FIELDS,
        )
    )


def find_sheet(metadata: dict[str, Any], title: str | None) -> dict[str, Any]:
    """Sheet properties by title; the first sheet when title is None."""
    sheets = [s.get("properties", {}) for s in metadata.get("sheets", [])]
    if not sheets:
        raise ToolError("Spreadsheet has no sheets")
    if title is None:
        return sheets[0]
    for props in sheets:
        if props.get("title") == title:
            return props
    names = ", ".join(p.get("title", "?") for p in sheets)
    raise ToolError(f'Sheet "{title}" not found. Available sheets: {names}')


async def resolve_grid_range(
    service: Resource,
    spreadsheet_id: str,
    a1_range: str,
) -> GridRange:
    """A1 range → GridRange with the real sheetId (one spreadsheets.get)."""
    sheet_title, grid = parse_a1_range(a1_range)
    metadata = await fetch_metadata(service, spreadsheet_id)
    props = find_sheet(metadata, sheet_title)
    grid.sheet_id = props.get("sheetId", 0)
    grid.sheet_title = props.get("title", "")
    return grid


async def get_values(
    service: Resource,
    spreadsheet_id: str,
    a1_range: str,
    value_render_option: str = "FORMATTED_VALUE",
) -> dict[str, Any]:
    return await execute(
        service.spreadsheets().values().get(
            spreadsheetId=spreadsheet_id,
            range=a1_range,
            valueRenderOption=value_render_option,
        )
    )


async def update_values(
    service: Resource,
    spreadsheet_id: str,
    a1_range: str,
    values: list[list[CellValue]],
    value_input_option: ValueInputOption = "USER_ENTERED",
) -> dict[str, Any]:
    """
    Write values to a range.

    USER_ENTERED parses formulae and dates; RAW stores strings literally.
    """
    return await execute(
        service.spreadsheets().values().update(
            spreadsheetId=spreadsheet_id,
            range=a1_range,
            valueInputOption=value_input_option,
            body={"values": values},
        )
    )


async def append_values(
    service: Resource,
    spreadsheet_id: str,
    a1_range: str,
    values: list[list[CellValue]],
    value_input_option: ValueInputOption = "USER_ENTERED",
) -> dict[str, Any]:
    return await execute(
        service.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=a1_range,
            valueInputOption=value_input_option,
            insertDataOption="INSERT_ROWS",
            body={"values": values},
        )
    )


async def clear_values(service: Resource, spreadsheet_id: str, a1_range: str) -> dict[str, Any]:
    return await execute(
        service.spreadsheets().values().clear(
            spreadsheetId=spreadsheet_id,
            range=a1_range,
            body={},
        )
    )


async def batch_update(
    service: Resource,
    spreadsheet_id: str,
    requests: list[dict[str, Any]],
) -> dict[str, Any]:
    return await execute(
        service.spreadsheets().batchUpdate(
            spreadsheetId=spreadsheet_id,
            body={"requests": requests},
        )
    )


async def add_sheet(service: Resource, spreadsheet_id: str, title: str) -> dict[str, Any]:
    """Add a sheet tab. Returns the new sheet's properties."""
    response = await batch_update(
        service, spreadsheet_id, [{"addSheet": {"properties": {"title": title}}}]
    )
    return response["replies"][0]["addSheet"]["properties"]
