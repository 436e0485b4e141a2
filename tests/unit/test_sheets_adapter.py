"""
Tests for the sheets adapter: A1 parsing and sheet resolution.

Pure helpers are tested directly; API calls use a mocked service.
"""

import pytest
from unittest.mock import MagicMock

from adapters.sheets import (
    column_to_index,
    find_sheet,
    parse_a1_range,
    resolve_grid_range,
    split_sheet_name,
)
from models import ToolError
from tests.helpers import mock_api_chain


METADATA = {
    "spreadsheetId": "ss1",
    "sheets": [
        {"properties": {"sheetId": 0, "title": "Sheet1"}},
        {"properties": {"sheetId": 777, "title": "Q1 Budget"}},
    ],
}


# ============================================================================
# PURE HELPERS
# ============================================================================

class TestColumnToIndex:

    def test_single_letters(self) -> None:
        assert column_to_index("A") == 0
        assert column_to_index("Z") == 25

    def test_double_letters(self) -> None:
        assert column_to_index("AA") == 26
        assert column_to_index("AZ") == 51

    def test_lowercase(self) -> None:
        assert column_to_index("c") == 2


class TestSplitSheetName:

    def test_plain(self) -> None:
        assert split_sheet_name("Sheet1!A1:B2") == ("Sheet1", "A1:B2")

    def test_quoted_with_space(self) -> None:
        assert split_sheet_name("'Q1 Budget'!A1") == ("Q1 Budget", "A1")

    def test_escaped_quote(self) -> None:
        assert split_sheet_name("'Bob''s'!A1") == ("Bob's", "A1")

    def test_no_sheet(self) -> None:
        assert split_sheet_name("A1:B2") == (None, "A1:B2")

    def test_bare_sheet_name(self) -> None:
        assert split_sheet_name("Sheet1") == ("Sheet1", "")


class TestParseA1Range:

    def test_bounded_range(self) -> None:
        sheet, grid = parse_a1_range("Sheet1!B2:D10")
        assert sheet == "Sheet1"
        assert (grid.start_row, grid.end_row) == (1, 10)
        assert (grid.start_column, grid.end_column) == (1, 4)

    def test_single_cell(self) -> None:
        _, grid = parse_a1_range("C3")
        assert (grid.start_row, grid.end_row, grid.start_column, grid.end_column) == (2, 3, 2, 3)

    def test_whole_columns(self) -> None:
        _, grid = parse_a1_range("A:C")
        assert grid.start_row is None and grid.end_row is None
        assert (grid.start_column, grid.end_column) == (0, 3)

    def test_whole_rows(self) -> None:
        _, grid = parse_a1_range("2:5")
        assert (grid.start_row, grid.end_row) == (1, 5)
        assert grid.start_column is None and grid.end_column is None

    def test_whole_sheet(self) -> None:
        sheet, grid = parse_a1_range("'Q1 Budget'")
        assert sheet == "Q1 Budget"
        assert grid.to_api() == {"sheetId": -1}

    def test_row_zero_rejected(self) -> None:
        with pytest.raises(ToolError, match="rows start at 1"):
            parse_a1_range("A0")

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ToolError):
            parse_a1_range("Sheet1!A1:ZZZZ9")

    def test_to_api_omits_open_bounds(self) -> None:
        _, grid = parse_a1_range("A:B")
        grid.sheet_id = 5
        assert grid.to_api() == {"sheetId": 5, "startColumnIndex": 0, "endColumnIndex": 2}


class TestFindSheet:

    def test_first_sheet_by_default(self) -> None:
        assert find_sheet(METADATA, None)["sheetId"] == 0

    def test_by_title(self) -> None:
        assert find_sheet(METADATA, "Q1 Budget")["sheetId"] == 777

    def test_missing_lists_available(self) -> None:
        with pytest.raises(ToolError, match="Available sheets: Sheet1, Q1 Budget"):
            find_sheet(METADATA, "Q2")

    def test_no_sheets(self) -> None:
        with pytest.raises(ToolError):
            find_sheet({"sheets": []}, None)


# ============================================================================
# API CALLS (mocked service)
# ============================================================================

class TestResolveGridRange:

    @pytest.mark.asyncio
    async def test_resolves_sheet_id(self) -> None:
        service = MagicMock()
        mock_api_chain(service, "spreadsheets.get.execute", METADATA)

        grid = await resolve_grid_range(service, "ss1", "'Q1 Budget'!A1:B2")

        assert grid.sheet_id == 777
        assert grid.sheet_title == "Q1 Budget"
        assert grid.to_api() == {
            "sheetId": 777,
            "startRowIndex": 0, "endRowIndex": 2,
            "startColumnIndex": 0, "endColumnIndex": 2,
        }

    @pytest.mark.asyncio
    async def test_unqualified_range_uses_first_sheet(self) -> None:
        service = MagicMock()
        mock_api_chain(service, "spreadsheets.get.execute", METADATA)

        grid = await resolve_grid_range(service, "ss1", "A1:A5")

        assert grid.sheet_id == 0
