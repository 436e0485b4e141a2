"""
Shared test helpers for scrivener.

Centralizes mock wiring patterns and API-shaped response builders that
repeat across test files.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import MagicMock, seal


def mock_api_chain(
    mock_service: MagicMock,
    chain: str,
    response: Any = None,
    *,
    side_effect: Any = None,
) -> MagicMock:
    """Set up a mock Google API response for a chained call.

    Navigates the MagicMock attribute chain and sets return_value (or side_effect)
    on the final method. Returns the final mock method for adding assertions.

    Args:
        mock_service: The mocked service object
        chain: Dot-separated chain. Each part except the last is treated as
               a callable method (traversed via .return_value).
               Examples: "projects.create.execute", "files.list.execute",
                         "spreadsheets.values.get.execute"
        response: The return value for the final method
        side_effect: Alternative to response: sets side_effect instead

    Returns:
        The final mock method (for call-count assertions)

    Examples:
        execute = mock_api_chain(service, "projects.create.execute", {"scriptId": "abc"})
        # ... dispatch the tool ...
        assert execute.call_count == 1
    """
    parts = chain.split(".")
    obj = mock_service
    for part in parts[:-1]:
        obj = getattr(obj, part).return_value
    final = getattr(obj, parts[-1])
    if side_effect is not None:
        final.side_effect = side_effect
    elif response is not None:
        final.return_value = response
    return final


def seal_service(mock_service: MagicMock) -> None:
    """Seal a mock service after all mock_api_chain() calls.

    Prevents MagicMock from silently creating new attributes when
    production code renames an API method: an unexpected call raises
    AttributeError instead of returning a fresh MagicMock.

    Must be called AFTER all mock_api_chain() calls for this service.
    """
    seal(mock_service)


def execute_calls(mock_service: MagicMock) -> int:
    """Total .execute() calls made anywhere under a mock service."""
    return sum(1 for call in mock_service.mock_calls if call[0].endswith(".execute"))


class StubCredentialProvider:
    """
    Stands in for the OAuth provider.

    `outcomes` is consumed one per acquire(): an exception is raised, anything
    else is returned as the session. When exhausted, a fresh MagicMock session
    is returned.
    """

    def __init__(self, *outcomes: Any, delay: float = 0.0) -> None:
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls = 0

    async def acquire(self) -> Any:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if self.outcomes else MagicMock(name="session")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


# ============================================================================
# Docs API body builders
# ============================================================================

def text_run(content: str, start: int, **style: Any) -> dict[str, Any]:
    """A paragraph element covering [start, start + len(content))."""
    return {
        "startIndex": start,
        "endIndex": start + len(content),
        "textRun": {"content": content, "textStyle": style},
    }


def paragraph(
    content: str,
    start: int,
    style: str = "NORMAL_TEXT",
    bullet: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """A body element holding one paragraph with a single text run."""
    para: dict[str, Any] = {
        "elements": [text_run(content, start)],
        "paragraphStyle": {"namedStyleType": style},
    }
    if bullet is not None:
        para["bullet"] = bullet
    return {"startIndex": start, "endIndex": start + len(content), "paragraph": para}


def table(start: int, rows: list[list[str]]) -> dict[str, Any]:
    """
    A table body element. Each cell holds one paragraph.

    Index layout mirrors the Docs API closely enough for cell lookups:
    table start, +1 per row, +1 per cell, then the cell text.
    """
    index = start + 1
    table_rows = []
    for row in rows:
        index += 1
        cells = []
        for text in row:
            index += 1
            cell_para = paragraph(text + "\n", index)
            cells.append({
                "startIndex": index - 1,
                "endIndex": cell_para["endIndex"],
                "content": [cell_para],
            })
            index = cell_para["endIndex"]
        table_rows.append({"tableCells": cells})
    return {
        "startIndex": start,
        "endIndex": index + 1,
        "table": {
            "rows": len(rows),
            "columns": len(rows[0]) if rows else 0,
            "tableRows": table_rows,
        },
    }
