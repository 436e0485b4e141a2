"""
Sheets Extractor: Pure functions for rendering spreadsheet values and metadata.

No API calls, no MCP awareness.
"""

from typing import Any

from models import CellValue


def row_to_csv(row: list[CellValue]) -> str:
    """
    Convert a row of cells to CSV format with proper escaping.

    Escapes cells containing commas, quotes, or newlines.
    """
    csv_cells: list[str] = []
    for cell in row:
        cell_str = str(cell) if cell is not None else ""
        if "," in cell_str or '"' in cell_str or "\n" in cell_str:
            escaped = cell_str.replace('"', '""')
            csv_cells.append(f'"{escaped}"')
        else:
            csv_cells.append(cell_str)
    return ",".join(csv_cells)


def extract_range_content(value_range: dict[str, Any]) -> str:
    """
    A values.get response as CSV with a range header.

        **Range:** Sheet1!A1:C3 (3 rows)

        Name,Value,Date
        Revenue,1000000,2024-01-01
    """
    a1 = value_range.get("range", "")
    values = value_range.get("values", [])
    if not values:
        return f"**Range:** {a1}\n\n(empty)"
    rows = "\n".join(row_to_csv(row) for row in values)
    return f"**Range:** {a1} ({len(values)} rows)\n\n{rows}"


def extract_spreadsheet_info(metadata: dict[str, Any]) -> str:
    """spreadsheets.get metadata as a short markdown summary."""
    props = metadata.get("properties", {})
    lines = [
        f"**Spreadsheet:** {props.get('title', 'Untitled')}",
        f"**ID:** {metadata.get('spreadsheetId', '')}",
    ]
    if metadata.get("spreadsheetUrl"):
        lines.append(f"**URL:** {metadata['spreadsheetUrl']}")
    if props.get("locale"):
        lines.append(f"**Locale:** {props['locale']}")
    if props.get("timeZone"):
        lines.append(f"**Time zone:** {props['timeZone']}")

    sheets = metadata.get("sheets", [])
    lines.extend(["", f"**Sheets ({len(sheets)}):**"])
    for sheet in sheets:
        sp = sheet.get("properties", {})
        grid = sp.get("gridProperties", {})
        size = ""
        if grid:
            size = f" {grid.get('rowCount', 0)} rows × {grid.get('columnCount', 0)} columns"
        kind = "" if sp.get("sheetType", "GRID") == "GRID" else f" [{sp['sheetType']}]"
        lines.append(f"- **{sp.get('title', '')}** (ID: {sp.get('sheetId', '')}){size}{kind}")
    return "\n".join(lines)
