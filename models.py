"""
Type definitions for scrivener.

Dataclasses defining the contracts between layers:
- Adapters produce these structures from API responses
- Extractors consume these structures and return text
- The dispatcher returns ToolSuccess / ToolFailure to every caller

These types make the adapter→extractor→dispatcher contract explicit and IDE-checkable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ============================================================================
# ERROR TYPES
# ============================================================================

class ErrorKind(Enum):
    """Categories of errors for consistent handling."""
    INVALID_INPUT = "invalid_input"      # Arguments failed the tool's schema
    UNKNOWN_TOOL = "unknown_tool"        # No such operation registered
    AUTH_FAILED = "auth_failed"          # Session could not be acquired
    AUTH_EXPIRED = "auth_expired"        # Token revoked or refresh failed
    NOT_FOUND = "not_found"              # Resource doesn't exist
    PERMISSION_DENIED = "permission_denied"  # No access to resource
    RATE_LIMITED = "rate_limited"        # Hit API quota
    NETWORK_ERROR = "network_error"      # Connection failed or 5xx
    UNKNOWN = "unknown"                  # Unexpected error


class ScrivenerError(Exception):
    """
    Structured error for consistent handling across layers.

    Subclasses mark where in the pipeline a failure happened. The dispatcher
    turns execution failures into ToolFailure; initialization and configuration
    failures propagate to the caller.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        kind: ErrorKind | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for MCP/CLI response."""
        return {
            "error": True,
            "kind": self.kind.value,
            "message": self.message,
            **self.details,
        }


class InitializationError(ScrivenerError):
    """Credential session could not be acquired. Fatal to the current attempt."""
    kind = ErrorKind.AUTH_FAILED


class ClientNotInitializedError(ScrivenerError):
    """A service handle is absent after initialization completed."""
    kind = ErrorKind.AUTH_FAILED


class UnknownToolError(ScrivenerError):
    """Dispatch requested for a name that was never registered."""
    kind = ErrorKind.UNKNOWN_TOOL


class ToolError(ScrivenerError):
    """
    Raised by a leaf operation when its own invariant fails.

    The message is shown to the caller as-is.
    """


# ============================================================================
# DISPATCH RESULTS
# ============================================================================

@dataclass(frozen=True)
class ToolSuccess:
    """Textual payload of a successful tool invocation."""
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": False, "text": self.text}


@dataclass(frozen=True)
class ToolFailure:
    """
    The normalized error. Only shape a failed invocation ever returns.

    `message` is user-facing; `kind` is for logs and callers that branch on it.
    """
    kind: ErrorKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": True, "kind": self.kind.value, "message": self.message}


ToolResult = ToolSuccess | ToolFailure


# ============================================================================
# SHEETS TYPES
# ============================================================================

# Cell values from Sheets API are strings, numbers, booleans, or None
CellValue = str | int | float | bool | None


@dataclass
class GridRange:
    """A1 range resolved against a spreadsheet's sheet ids (0-based, end exclusive)."""
    sheet_id: int
    sheet_title: str
    start_row: int | None = None
    end_row: int | None = None
    start_column: int | None = None
    end_column: int | None = None

    def to_api(self) -> dict[str, int]:
        """Render as a Sheets API GridRange, omitting open bounds."""
        grid: dict[str, int] = {"sheetId": self.sheet_id}
        for key, value in (
            ("startRowIndex", self.start_row),
            ("endRowIndex", self.end_row),
            ("startColumnIndex", self.start_column),
            ("endColumnIndex", self.end_column),
        ):
            if value is not None:
                grid[key] = value
        return grid


# ============================================================================
# DOCS TYPES
# ============================================================================

@dataclass
class DocTab:
    """A single tab within a Google Doc."""
    title: str
    tab_id: str
    index: int
    body: dict[str, Any]  # The 'body' field from documentTab
    lists: dict[str, Any] = field(default_factory=dict)  # List definitions
    inline_objects: dict[str, Any] = field(default_factory=dict)  # Images, drawings, charts
    child_count: int = 0


@dataclass
class DocData:
    """
    Assembled document data for the docs extractor.

    Both legacy single-tab and modern multi-tab docs are normalized
    to a list of DocTab for consistent extractor interface.
    """
    title: str
    document_id: str
    tabs: list[DocTab]

    # Warnings during extraction (unknown elements, truncation, etc.)
    warnings: list[str] = field(default_factory=list)


@dataclass
class TextMatch:
    """A run of document text located by find_text_range()."""
    start_index: int
    end_index: int
    text: str


@dataclass
class DocElement:
    """A structural element located by find_elements()."""
    element_type: str  # paragraph, list, table, image
    start_index: int
    end_index: int
    summary: str


# ============================================================================
# DRIVE TYPES
# ============================================================================

@dataclass
class DriveFile:
    """File metadata as rendered in listings."""
    id: str
    name: str
    mime_type: str = ""
    modified_time: str | None = None
    created_time: str | None = None
    web_link: str | None = None
    owners: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "DriveFile":
        return cls(
            id=item.get("id", ""),
            name=item.get("name", "Untitled"),
            mime_type=item.get("mimeType", ""),
            modified_time=item.get("modifiedTime"),
            created_time=item.get("createdTime"),
            web_link=item.get("webViewLink"),
            owners=[
                o.get("displayName") or o.get("emailAddress", "")
                for o in item.get("owners", [])
            ],
        )


@dataclass
class CommentReply:
    """A reply to a comment."""
    id: str
    content: str
    author_name: str
    created_time: str | None = None
    action: str | None = None  # "resolve" / "reopen" for status replies


@dataclass
class CommentData:
    """A single comment with its replies."""
    id: str
    content: str
    author_name: str
    author_email: str | None = None
    created_time: str | None = None
    modified_time: str | None = None
    resolved: bool = False
    quoted_text: str = ""
    replies: list[CommentReply] = field(default_factory=list)

    @classmethod
    def from_api(cls, comment: dict[str, Any]) -> "CommentData":
        author = comment.get("author", {})
        return cls(
            id=comment.get("id", ""),
            content=comment.get("content", ""),
            author_name=author.get("displayName") or "Unknown",
            author_email=author.get("emailAddress"),
            created_time=comment.get("createdTime"),
            modified_time=comment.get("modifiedTime"),
            resolved=comment.get("resolved", False),
            quoted_text=comment.get("quotedFileContent", {}).get("value", ""),
            replies=[
                CommentReply(
                    id=reply.get("id", ""),
                    content=reply.get("content", ""),
                    author_name=reply.get("author", {}).get("displayName") or "Unknown",
                    created_time=reply.get("createdTime"),
                    action=reply.get("action"),
                )
                for reply in comment.get("replies", [])
            ],
        )


# ============================================================================
# APPS SCRIPT TYPES
# ============================================================================

@dataclass
class ScriptFile:
    """One file of an Apps Script project."""
    name: str
    type: str  # SERVER_JS, JSON (HTML is returned by the API but never written here)
    source: str
