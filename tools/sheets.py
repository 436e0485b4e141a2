"""
Google Sheets tools: values, sheets, filters, formatting.

Ranges are A1 notation ("Sheet1!A1:C10", "A:C", "'My Sheet'!B2"). A range
without a sheet name refers to the first sheet.
"""

from typing import Any, Literal

from pydantic import Field, StrictBool, StrictInt, model_validator

from adapters import sheets as sheets_api
from adapters.docs import hex_to_rgb
from adapters.drive import GOOGLE_SHEET_MIME, drive_order, escape_query, list_files, move_file
from adapters.services import ServiceName, execute
from extractors.drive import extract_file_list
from extractors.sheets import extract_range_content, extract_spreadsheet_info
from models import CellValue
from registry import HexColor, NonEmptyStr, ToolContext, ToolInput, ToolSet

sheet_tools = ToolSet("Google Sheets")

SHEETS = (ServiceName.SHEETS,)


class SpreadsheetInput(ToolInput):
    spreadsheet_id: NonEmptyStr = Field(description="The spreadsheet ID (from its URL).")


class RangeInput(SpreadsheetInput):
    range: NonEmptyStr = Field(description='A1 notation, e.g. "Sheet1!A1:C10".')


class ValuesInput(RangeInput):
    values: list[list[CellValue]] = Field(
        min_length=1, description="Rows of cell values. Formulas start with =."
    )
    value_input_option: Literal["RAW", "USER_ENTERED"] = Field(
        default="USER_ENTERED",
        description="USER_ENTERED parses formulas, numbers and dates; RAW stores text as-is.",
    )


# =============================================================================
# VALUES
# =============================================================================


class ReadSpreadsheetInput(RangeInput):
    value_render_option: Literal["FORMATTED_VALUE", "UNFORMATTED_VALUE", "FORMULA"] = Field(
        default="FORMATTED_VALUE", description="FORMULA shows formulas instead of results."
    )


@sheet_tools.tool(
    "read_spreadsheet",
    ReadSpreadsheetInput,
    services=SHEETS,
    failure="Failed to read range {range} from spreadsheet {spreadsheet_id}",
)
async def read_spreadsheet(params: ReadSpreadsheetInput, ctx: ToolContext) -> str:
    """Read cell values from a range of a Google Sheet, rendered as CSV."""
    value_range = await sheets_api.get_values(
        ctx.sheets, params.spreadsheet_id, params.range, params.value_render_option
    )
    return extract_range_content(value_range)


@sheet_tools.tool(
    "write_spreadsheet",
    ValuesInput,
    services=SHEETS,
    failure="Failed to write range {range} in spreadsheet {spreadsheet_id}",
)
async def write_spreadsheet(params: ValuesInput, ctx: ToolContext) -> str:
    """Write values to a range, overwriting what is there."""
    result = await sheets_api.update_values(
        ctx.sheets, params.spreadsheet_id, params.range, params.values, params.value_input_option
    )
    return (
        f"Updated {result.get('updatedCells', 0)} cells in range "
        f"{result.get('updatedRange', params.range)}."
    )


@sheet_tools.tool(
    "append_spreadsheet_rows",
    ValuesInput,
    services=SHEETS,
    failure="Failed to append rows to {range} in spreadsheet {spreadsheet_id}",
)
async def append_spreadsheet_rows(params: ValuesInput, ctx: ToolContext) -> str:
    """Append rows after the last row of data in a range."""
    result = await sheets_api.append_values(
        ctx.sheets, params.spreadsheet_id, params.range, params.values, params.value_input_option
    )
    updates = result.get("updates", {})
    return (
        f"Appended {updates.get('updatedRows', len(params.values))} row(s) "
        f"to {updates.get('updatedRange', params.range)}."
    )


@sheet_tools.tool(
    "clear_spreadsheet_range",
    RangeInput,
    services=SHEETS,
    failure="Failed to clear range {range} in spreadsheet {spreadsheet_id}",
)
async def clear_spreadsheet_range(params: RangeInput, ctx: ToolContext) -> str:
    """Clear the values in a range. Formatting is kept."""
    result = await sheets_api.clear_values(ctx.sheets, params.spreadsheet_id, params.range)
    return f"Cleared range {result.get('clearedRange', params.range)}."


# =============================================================================
# SPREADSHEETS AND SHEETS
# =============================================================================


@sheet_tools.tool(
    "get_spreadsheet_info",
    SpreadsheetInput,
    services=SHEETS,
    failure="Failed to get info for spreadsheet {spreadsheet_id}",
)
async def get_spreadsheet_info(params: SpreadsheetInput, ctx: ToolContext) -> str:
    """Get a spreadsheet's title, locale and its sheets with their IDs and sizes."""
    metadata = await sheets_api.fetch_metadata(ctx.sheets, params.spreadsheet_id)
    return extract_spreadsheet_info(metadata)


class AddSpreadsheetSheetInput(SpreadsheetInput):
    sheet_title: NonEmptyStr = Field(description="Name of the new sheet tab.")


@sheet_tools.tool(
    "add_spreadsheet_sheet",
    AddSpreadsheetSheetInput,
    services=SHEETS,
    failure='Failed to add sheet "{sheet_title}" to spreadsheet {spreadsheet_id}',
)
async def add_spreadsheet_sheet(params: AddSpreadsheetSheetInput, ctx: ToolContext) -> str:
    """Add a new sheet tab to a spreadsheet."""
    props = await sheets_api.add_sheet(ctx.sheets, params.spreadsheet_id, params.sheet_title)
    return f'Added sheet "{props.get("title", params.sheet_title)}" (sheet ID: {props.get("sheetId")}).'


class CreateSpreadsheetInput(ToolInput):
    title: NonEmptyStr = Field(description="Title of the new spreadsheet.")
    parent_folder_id: str | None = Field(default=None, description="Folder to create it in.")
    initial_data: list[list[CellValue]] | None = Field(
        default=None, description="Rows written to the first sheet starting at A1."
    )


@sheet_tools.tool(
    "create_spreadsheet",
    CreateSpreadsheetInput,
    services=(ServiceName.SHEETS, ServiceName.DRIVE),
    failure='Failed to create spreadsheet "{title}"',
)
async def create_spreadsheet(params: CreateSpreadsheetInput, ctx: ToolContext) -> str:
    """Create a new Google Sheet, optionally in a folder and with initial data."""
    created = await execute(
        ctx.sheets.spreadsheets().create(
            body={"properties": {"title": params.title}},
            fields="spreadsheetId,spreadsheetUrl,sheets(properties(title))",
        )
    )
    spreadsheet_id = created["spreadsheetId"]

    if params.parent_folder_id:
        await move_file(ctx.drive, spreadsheet_id, params.parent_folder_id)

    if params.initial_data:
        first_sheet = created.get("sheets", [{}])[0].get("properties", {}).get("title", "Sheet1")
        await sheets_api.update_values(
            ctx.sheets, spreadsheet_id, f"'{first_sheet}'!A1", params.initial_data
        )

    lines = [
        f'Created spreadsheet "{params.title}"',
        f"**ID:** {spreadsheet_id}",
        f"**URL:** {created.get('spreadsheetUrl', '')}",
    ]
    if params.initial_data:
        lines.append(f"Wrote {len(params.initial_data)} row(s) of initial data.")
    return "\n".join(lines)


class ListGoogleSheetsInput(ToolInput):
    max_results: StrictInt = Field(default=20, ge=1, le=100)
    query: str | None = Field(default=None, description="Only sheets whose name contains this text.")
    order_by: Literal["name", "modifiedTime", "createdTime"] = Field(default="modifiedTime")


@sheet_tools.tool(
    "list_google_sheets",
    ListGoogleSheetsInput,
    services=(ServiceName.DRIVE,),
    failure="Failed to list Google Sheets",
)
async def list_google_sheets(params: ListGoogleSheetsInput, ctx: ToolContext) -> str:
    """List Google Sheets in Drive, optionally filtered by name."""
    query = f"mimeType='{GOOGLE_SHEET_MIME}'"
    if params.query:
        query += f" and name contains '{escape_query(params.query)}'"
    files = await list_files(ctx.drive, query, params.max_results, drive_order(params.order_by))
    return extract_file_list("Google Sheets", files, "No Google Sheets found.")


# =============================================================================
# FILTERS AND FORMATTING
# =============================================================================


@sheet_tools.tool(
    "set_basic_filter",
    RangeInput,
    services=SHEETS,
    failure="Failed to set filter on {range} in spreadsheet {spreadsheet_id}",
)
async def set_basic_filter(params: RangeInput, ctx: ToolContext) -> str:
    """Turn on the basic filter (filter buttons on the header row) for a range."""
    grid = await sheets_api.resolve_grid_range(ctx.sheets, params.spreadsheet_id, params.range)
    await sheets_api.batch_update(
        ctx.sheets,
        params.spreadsheet_id,
        [{"setBasicFilter": {"filter": {"range": grid.to_api()}}}],
    )
    return f'Basic filter set on {params.range} (sheet "{grid.sheet_title}").'


class ClearBasicFilterInput(SpreadsheetInput):
    sheet_name: NonEmptyStr = Field(description="The sheet whose filter to remove.")


@sheet_tools.tool(
    "clear_basic_filter",
    ClearBasicFilterInput,
    services=SHEETS,
    failure='Failed to clear filter on sheet "{sheet_name}" in spreadsheet {spreadsheet_id}',
)
async def clear_basic_filter(params: ClearBasicFilterInput, ctx: ToolContext) -> str:
    """Remove the basic filter from a sheet."""
    metadata = await sheets_api.fetch_metadata(ctx.sheets, params.spreadsheet_id)
    props = sheets_api.find_sheet(metadata, params.sheet_name)
    await sheets_api.batch_update(
        ctx.sheets,
        params.spreadsheet_id,
        [{"clearBasicFilter": {"sheetId": props.get("sheetId", 0)}}],
    )
    return f'Basic filter cleared from sheet "{params.sheet_name}".'


class NumberFormat(ToolInput):
    type: Literal[
        "TEXT", "NUMBER", "PERCENT", "CURRENCY", "DATE", "TIME", "DATE_TIME", "SCIENTIFIC"
    ]
    pattern: str | None = Field(default=None, description='e.g. "#,##0.00" or "yyyy-mm-dd".')


FORMAT_FIELDS = (
    "bold", "italic", "font_size", "foreground_color",
    "background_color", "horizontal_alignment", "number_format",
)


class FormatSpreadsheetCellsInput(RangeInput):
    bold: StrictBool | None = None
    italic: StrictBool | None = None
    font_size: StrictInt | None = Field(default=None, ge=1, le=400)
    foreground_color: HexColor | None = Field(default=None, description="Text color.")
    background_color: HexColor | None = Field(default=None, description="Fill color.")
    horizontal_alignment: Literal["LEFT", "CENTER", "RIGHT"] | None = None
    number_format: NumberFormat | None = None

    @model_validator(mode="after")
    def require_format(self) -> "FormatSpreadsheetCellsInput":
        if all(getattr(self, name) is None for name in FORMAT_FIELDS):
            raise ValueError("At least one formatting option must be provided")
        return self


def build_cell_format(params: FormatSpreadsheetCellsInput) -> tuple[dict[str, Any], list[str]]:
    """userEnteredFormat plus its update mask."""
    cell_format: dict[str, Any] = {}
    fields: list[str] = []

    text_format: dict[str, Any] = {}
    if params.bold is not None:
        text_format["bold"] = params.bold
    if params.italic is not None:
        text_format["italic"] = params.italic
    if params.font_size is not None:
        text_format["fontSize"] = params.font_size
    if params.foreground_color is not None:
        text_format["foregroundColor"] = hex_to_rgb(params.foreground_color)
    if text_format:
        cell_format["textFormat"] = text_format
        fields.extend(f"userEnteredFormat.textFormat.{key}" for key in text_format)

    if params.background_color is not None:
        cell_format["backgroundColor"] = hex_to_rgb(params.background_color)
        fields.append("userEnteredFormat.backgroundColor")
    if params.horizontal_alignment is not None:
        cell_format["horizontalAlignment"] = params.horizontal_alignment
        fields.append("userEnteredFormat.horizontalAlignment")
    if params.number_format is not None:
        cell_format["numberFormat"] = params.number_format.model_dump(exclude_none=True)
        fields.append("userEnteredFormat.numberFormat")

    return cell_format, fields


@sheet_tools.tool(
    "format_spreadsheet_cells",
    FormatSpreadsheetCellsInput,
    services=SHEETS,
    failure="Failed to format range {range} in spreadsheet {spreadsheet_id}",
)
async def format_spreadsheet_cells(params: FormatSpreadsheetCellsInput, ctx: ToolContext) -> str:
    """Apply formatting (bold, italic, size, colors, alignment, number format) to a range."""
    grid = await sheets_api.resolve_grid_range(ctx.sheets, params.spreadsheet_id, params.range)
    cell_format, fields = build_cell_format(params)
    await sheets_api.batch_update(
        ctx.sheets,
        params.spreadsheet_id,
        [{
            "repeatCell": {
                "range": grid.to_api(),
                "cell": {"userEnteredFormat": cell_format},
                "fields": ",".join(fields),
            }
        }],
    )
    return f"Formatted range {params.range} ({len(fields)} format setting(s))."
