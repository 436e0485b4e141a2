"""Tests for the Google Sheets tools through the dispatcher."""

from unittest.mock import MagicMock

import pytest

from dispatch import Dispatcher
from models import ErrorKind, ToolFailure, ToolSuccess
from tests.helpers import execute_calls, mock_api_chain


METADATA = {
    "spreadsheetId": "ss1",
    "spreadsheetUrl": "https://docs.google.com/spreadsheets/d/ss1",
    "properties": {"title": "Budget", "locale": "en_GB", "timeZone": "Europe/London"},
    "sheets": [
        {"properties": {"sheetId": 0, "title": "Sheet1", "gridProperties": {"rowCount": 1000, "columnCount": 26}}},
        {"properties": {"sheetId": 42, "title": "Totals", "gridProperties": {"rowCount": 10, "columnCount": 5}}},
    ],
}


def batch_requests(sheets_service: MagicMock) -> list[dict]:
    return sheets_service.spreadsheets.return_value.batchUpdate.call_args.kwargs["body"]["requests"]


class TestValues:

    @pytest.mark.asyncio
    async def test_read_renders_csv(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.values.get.execute", {
            "range": "Sheet1!A1:B2",
            "values": [["Name", "Amount"], ["Rent, office", 1200]],
        })

        result = await dispatcher.dispatch(
            "read_spreadsheet", {"spreadsheetId": "ss1", "range": "Sheet1!A1:B2"}
        )

        assert isinstance(result, ToolSuccess)
        assert "**Range:** Sheet1!A1:B2 (2 rows)" in result.text
        assert '"Rent, office",1200' in result.text

    @pytest.mark.asyncio
    async def test_read_empty_range(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.values.get.execute", {"range": "Sheet1!Z1"})

        result = await dispatcher.dispatch("read_spreadsheet", {"spreadsheetId": "ss1", "range": "Z1"})

        assert isinstance(result, ToolSuccess)
        assert "(empty)" in result.text

    @pytest.mark.asyncio
    async def test_write(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        execute = mock_api_chain(sheets_service, "spreadsheets.values.update.execute", {
            "updatedCells": 4, "updatedRange": "Sheet1!A1:B2",
        })
        values = [["a", 1], ["b", "=SUM(B1:B1)"]]

        result = await dispatcher.dispatch(
            "write_spreadsheet", {"spreadsheetId": "ss1", "range": "A1:B2", "values": values}
        )

        assert isinstance(result, ToolSuccess)
        assert "Updated 4 cells" in result.text
        assert execute.call_count == 1
        kwargs = sheets_service.spreadsheets.return_value.values.return_value.update.call_args.kwargs
        assert kwargs["valueInputOption"] == "USER_ENTERED"
        assert kwargs["body"] == {"values": values}

    @pytest.mark.asyncio
    async def test_write_requires_values(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        result = await dispatcher.dispatch(
            "write_spreadsheet", {"spreadsheetId": "ss1", "range": "A1", "values": []}
        )

        assert isinstance(result, ToolFailure)
        assert result.kind is ErrorKind.INVALID_INPUT
        assert execute_calls(sheets_service) == 0

    @pytest.mark.asyncio
    async def test_write_rejects_bad_input_option(self, dispatcher: Dispatcher) -> None:
        result = await dispatcher.dispatch("write_spreadsheet", {
            "spreadsheetId": "ss1", "range": "A1", "values": [["x"]], "valueInputOption": "PARSED",
        })

        assert isinstance(result, ToolFailure)
        assert "valueInputOption" in result.message

    @pytest.mark.asyncio
    async def test_append_inserts_rows(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.values.append.execute", {
            "updates": {"updatedRows": 2, "updatedRange": "Sheet1!A5:B6"},
        })

        result = await dispatcher.dispatch("append_spreadsheet_rows", {
            "spreadsheetId": "ss1", "range": "Sheet1!A:B", "values": [["x", 1], ["y", 2]],
        })

        assert isinstance(result, ToolSuccess)
        assert "Appended 2 row(s) to Sheet1!A5:B6" in result.text
        kwargs = sheets_service.spreadsheets.return_value.values.return_value.append.call_args.kwargs
        assert kwargs["insertDataOption"] == "INSERT_ROWS"

    @pytest.mark.asyncio
    async def test_clear(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.values.clear.execute", {"clearedRange": "Sheet1!A1:C3"})

        result = await dispatcher.dispatch(
            "clear_spreadsheet_range", {"spreadsheetId": "ss1", "range": "A1:C3"}
        )

        assert isinstance(result, ToolSuccess)
        assert result.text == "Cleared range Sheet1!A1:C3."


class TestSpreadsheets:

    @pytest.mark.asyncio
    async def test_info(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.get.execute", METADATA)

        result = await dispatcher.dispatch("get_spreadsheet_info", {"spreadsheetId": "ss1"})

        assert isinstance(result, ToolSuccess)
        assert "**Spreadsheet:** Budget" in result.text
        assert "**Sheets (2):**" in result.text
        assert "**Totals** (ID: 42) 10 rows × 5 columns" in result.text

    @pytest.mark.asyncio
    async def test_add_sheet(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.batchUpdate.execute", {
            "replies": [{"addSheet": {"properties": {"sheetId": 99, "title": "Q3"}}}],
        })

        result = await dispatcher.dispatch(
            "add_spreadsheet_sheet", {"spreadsheetId": "ss1", "sheetTitle": "Q3"}
        )

        assert isinstance(result, ToolSuccess)
        assert result.text == 'Added sheet "Q3" (sheet ID: 99).'
        assert batch_requests(sheets_service) == [{"addSheet": {"properties": {"title": "Q3"}}}]

    @pytest.mark.asyncio
    async def test_create_plain(
        self, dispatcher: Dispatcher, sheets_service: MagicMock, drive_service: MagicMock
    ) -> None:
        create = mock_api_chain(sheets_service, "spreadsheets.create.execute", {
            "spreadsheetId": "new1", "spreadsheetUrl": "https://sheet/new1",
            "sheets": [{"properties": {"title": "Sheet1"}}],
        })

        result = await dispatcher.dispatch("create_spreadsheet", {"title": "Plan"})

        assert isinstance(result, ToolSuccess)
        assert "**ID:** new1" in result.text
        assert create.call_count == 1
        assert execute_calls(drive_service) == 0

    @pytest.mark.asyncio
    async def test_create_in_folder_with_data(
        self, dispatcher: Dispatcher, sheets_service: MagicMock, drive_service: MagicMock
    ) -> None:
        mock_api_chain(sheets_service, "spreadsheets.create.execute", {
            "spreadsheetId": "new1", "sheets": [{"properties": {"title": "Data"}}],
        })
        mock_api_chain(sheets_service, "spreadsheets.values.update.execute", {"updatedCells": 2})
        mock_api_chain(drive_service, "files.get.execute", {"id": "new1", "parents": ["root-id"]})
        mock_api_chain(drive_service, "files.update.execute", {"id": "new1", "parents": ["folder-9"]})

        result = await dispatcher.dispatch("create_spreadsheet", {
            "title": "Plan", "parentFolderId": "folder-9", "initialData": [["a", "b"]],
        })

        assert isinstance(result, ToolSuccess)
        assert "Wrote 1 row(s)" in result.text
        update = drive_service.files.return_value.update.call_args.kwargs
        assert update["addParents"] == "folder-9"
        assert update["removeParents"] == "root-id"
        values_kwargs = sheets_service.spreadsheets.return_value.values.return_value.update.call_args.kwargs
        assert values_kwargs["range"] == "'Data'!A1"

    @pytest.mark.asyncio
    async def test_list_google_sheets(self, dispatcher: Dispatcher, drive_service: MagicMock) -> None:
        mock_api_chain(drive_service, "files.list.execute", {"files": [
            {"id": "s1", "name": "Budget", "mimeType": "application/vnd.google-apps.spreadsheet"},
        ]})

        result = await dispatcher.dispatch("list_google_sheets", {"query": "Bud'get", "orderBy": "name"})

        assert isinstance(result, ToolSuccess)
        assert "Budget" in result.text
        kwargs = drive_service.files.return_value.list.call_args.kwargs
        assert "name contains 'Bud\\'get'" in kwargs["q"]
        assert kwargs["orderBy"] == "name"

    @pytest.mark.asyncio
    async def test_list_google_sheets_empty(self, dispatcher: Dispatcher, drive_service: MagicMock) -> None:
        mock_api_chain(drive_service, "files.list.execute", {"files": []})

        result = await dispatcher.dispatch("list_google_sheets", {})

        assert isinstance(result, ToolSuccess)
        assert result.text == "No Google Sheets found."


class TestFiltersAndFormatting:

    @pytest.mark.asyncio
    async def test_set_basic_filter(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.get.execute", METADATA)
        batch = mock_api_chain(sheets_service, "spreadsheets.batchUpdate.execute", {})

        result = await dispatcher.dispatch(
            "set_basic_filter", {"spreadsheetId": "ss1", "range": "Totals!A1:E10"}
        )

        assert isinstance(result, ToolSuccess)
        assert batch.call_count == 1
        assert batch_requests(sheets_service) == [{
            "setBasicFilter": {"filter": {"range": {
                "sheetId": 42,
                "startRowIndex": 0, "endRowIndex": 10,
                "startColumnIndex": 0, "endColumnIndex": 5,
            }}}
        }]

    @pytest.mark.asyncio
    async def test_set_basic_filter_unknown_sheet(
        self, dispatcher: Dispatcher, sheets_service: MagicMock
    ) -> None:
        mock_api_chain(sheets_service, "spreadsheets.get.execute", METADATA)

        result = await dispatcher.dispatch(
            "set_basic_filter", {"spreadsheetId": "ss1", "range": "Nope!A1:B2"}
        )

        assert isinstance(result, ToolFailure)
        assert 'Sheet "Nope" not found' in result.message
        assert sheets_service.spreadsheets.return_value.batchUpdate.call_count == 0

    @pytest.mark.asyncio
    async def test_clear_basic_filter(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.get.execute", METADATA)
        mock_api_chain(sheets_service, "spreadsheets.batchUpdate.execute", {})

        result = await dispatcher.dispatch(
            "clear_basic_filter", {"spreadsheetId": "ss1", "sheetName": "Totals"}
        )

        assert isinstance(result, ToolSuccess)
        assert batch_requests(sheets_service) == [{"clearBasicFilter": {"sheetId": 42}}]

    @pytest.mark.asyncio
    async def test_format_cells(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        mock_api_chain(sheets_service, "spreadsheets.get.execute", METADATA)
        mock_api_chain(sheets_service, "spreadsheets.batchUpdate.execute", {})

        result = await dispatcher.dispatch("format_spreadsheet_cells", {
            "spreadsheetId": "ss1", "range": "A1:C1",
            "bold": True, "backgroundColor": "#000",
            "numberFormat": {"type": "CURRENCY", "pattern": "£#,##0.00"},
        })

        assert isinstance(result, ToolSuccess)
        repeat = batch_requests(sheets_service)[0]["repeatCell"]
        assert repeat["range"]["sheetId"] == 0
        assert repeat["cell"]["userEnteredFormat"] == {
            "textFormat": {"bold": True},
            "backgroundColor": {"red": 0.0, "green": 0.0, "blue": 0.0},
            "numberFormat": {"type": "CURRENCY", "pattern": "£#,##0.00"},
        }
        assert repeat["fields"] == (
            "userEnteredFormat.textFormat.bold,"
            "userEnteredFormat.backgroundColor,"
            "userEnteredFormat.numberFormat"
        )

    @pytest.mark.asyncio
    async def test_format_needs_an_option(self, dispatcher: Dispatcher, sheets_service: MagicMock) -> None:
        result = await dispatcher.dispatch(
            "format_spreadsheet_cells", {"spreadsheetId": "ss1", "range": "A1"}
        )

        assert isinstance(result, ToolFailure)
        assert "At least one formatting option" in result.message
        assert execute_calls(sheets_service) == 0
