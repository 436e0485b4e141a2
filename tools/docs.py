"""
Google Docs tools: reading, inserting, deleting, styling.

Writes are documents.batchUpdate calls built by adapters.docs. Tools that
need to know where something is (append, format_matching_text,
edit_table_cell, fix_list_formatting) fetch the document first, so they make
two remote calls; everything else makes one.

Index arguments are Docs API indices: 1 is the start of the body, end
indices are exclusive. find_element reports them.
"""

import json
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, StrictBool, StrictFloat, StrictInt, model_validator

from adapters import docs as docs_api
from adapters.drive import get_file, make_public_readable, upload_file
from adapters.services import ServiceName
from extractors.docs import extract_markdown, extract_plain_text, render_tab_list, truncate
from models import DocData, ErrorKind, ToolError
from registry import HexColor, NonEmptyStr, ToolContext, ToolInput, ToolSet

docs_tools = ToolSet("Google Docs")

DOCS = (ServiceName.DOCS,)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}


class DocumentInput(ToolInput):
    document_id: NonEmptyStr = Field(description="The document ID (from its URL).")


class RangeInput(DocumentInput):
    start_index: StrictInt = Field(ge=1, description="Start of the range (inclusive).")
    end_index: StrictInt = Field(ge=2, description="End of the range (exclusive).")

    @model_validator(mode="after")
    def check_range(self) -> "RangeInput":
        if self.end_index <= self.start_index:
            raise ValueError("endIndex must be greater than startIndex")
        return self


def _set_fields(model: ToolInput, names: tuple[str, ...]) -> dict[str, Any]:
    return {name: getattr(model, name) for name in names if getattr(model, name) is not None}


# =============================================================================
# READING
# =============================================================================


class ReadGoogleDocInput(DocumentInput):
    format: Literal["text", "markdown", "json"] = Field(
        default="text", description="text (plain), markdown, or json (raw API structure)."
    )
    max_length: StrictInt | None = Field(
        default=None, ge=1, description="Truncate the output to this many characters."
    )
    tab_id: str | None = Field(
        default=None, description="Read only this tab (see list_document_tabs)."
    )


@docs_tools.tool(
    "read_google_doc",
    ReadGoogleDocInput,
    services=DOCS,
    failure="Failed to read document {document_id}",
)
async def read_google_doc(params: ReadGoogleDocInput, ctx: ToolContext) -> str:
    """
    Read the content of a Google Doc as plain text, markdown, or raw JSON.

    Multi-tab documents return every tab unless tabId is given.
    """
    raw = await docs_api.fetch_raw_document(ctx.docs, params.document_id)
    if params.format == "json":
        return truncate(json.dumps(raw, indent=2, ensure_ascii=False), params.max_length)

    data = docs_api.parse_document(raw, params.document_id)
    if params.tab_id is not None:
        data = DocData(
            title=data.title,
            document_id=data.document_id,
            tabs=[docs_api.select_tab(data, params.tab_id)],
        )

    if params.format == "markdown":
        content = extract_markdown(data, params.max_length)
    else:
        content = extract_plain_text(data, params.max_length)

    for warning in data.warnings:
        ctx.log.warning(warning)
    return content or "(document is empty)"


class ListDocumentTabsInput(DocumentInput):
    include_content: StrictBool = Field(
        default=False, description="Also show each tab's size and a short preview."
    )


@docs_tools.tool(
    "list_document_tabs",
    ListDocumentTabsInput,
    services=DOCS,
    failure="Failed to list tabs of document {document_id}",
)
async def list_document_tabs(params: ListDocumentTabsInput, ctx: ToolContext) -> str:
    """List the tabs of a Google Doc with their IDs, including nested tabs."""
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    return render_tab_list(data, params.include_content)


# =============================================================================
# TEXT
# =============================================================================


class AppendToGoogleDocInput(DocumentInput):
    text_to_append: str = Field(min_length=1, description="Text to add at the end of the document.")
    add_newline_if_needed: StrictBool = Field(
        default=True, description="Start the text on a new line when the document is not empty."
    )


@docs_tools.tool(
    "append_to_google_doc",
    AppendToGoogleDocInput,
    services=DOCS,
    failure="Failed to append to document {document_id}",
)
async def append_to_google_doc(params: AppendToGoogleDocInput, ctx: ToolContext) -> str:
    """Append text to the end of a Google Doc."""
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    end = docs_api.body_end_index(data.tabs[0])

    # The body always ends with a newline that can't be written after
    insert_at = max(1, end - 1)
    text = params.text_to_append
    if params.add_newline_if_needed and insert_at > 1 and not text.startswith("\n"):
        text = "\n" + text

    await docs_api.batch_update(
        ctx.docs, params.document_id, [docs_api.insert_text_request(insert_at, text)]
    )
    return f"Appended {len(params.text_to_append)} characters to document {params.document_id}."


class InsertTextInput(DocumentInput):
    text_to_insert: str = Field(min_length=1, description="Text to insert.")
    index: StrictInt = Field(ge=1, description="Index to insert at (1 = start of the document).")


@docs_tools.tool(
    "insert_text",
    InsertTextInput,
    services=DOCS,
    failure="Failed to insert text at index {index} in document {document_id}",
)
async def insert_text(params: InsertTextInput, ctx: ToolContext) -> str:
    """Insert text at a specific index in a Google Doc."""
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.insert_text_request(params.index, params.text_to_insert)],
    )
    return f"Inserted {len(params.text_to_insert)} characters at index {params.index}."


@docs_tools.tool(
    "delete_range",
    RangeInput,
    services=DOCS,
    failure="Failed to delete range {start_index}-{end_index} in document {document_id}",
)
async def delete_range(params: RangeInput, ctx: ToolContext) -> str:
    """Delete the content between startIndex (inclusive) and endIndex (exclusive)."""
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.delete_range_request(params.start_index, params.end_index)],
    )
    return f"Deleted content from index {params.start_index} to {params.end_index}."


# =============================================================================
# STYLING
# =============================================================================

TEXT_STYLE_FIELDS = (
    "bold", "italic", "underline", "strikethrough", "font_size",
    "font_family", "foreground_color", "background_color", "link_url",
)


class TextStyleArgs(ToolInput):
    bold: StrictBool | None = None
    italic: StrictBool | None = None
    underline: StrictBool | None = None
    strikethrough: StrictBool | None = None
    font_size: StrictFloat | None = Field(default=None, gt=0, le=400, description="Points.")
    font_family: str | None = Field(default=None, min_length=1, description='e.g. "Arial".')
    foreground_color: HexColor | None = Field(default=None, description='Text color, e.g. "#FF0000".')
    background_color: HexColor | None = Field(default=None, description="Highlight color.")
    link_url: str | None = Field(
        default=None, pattern=r"^https?://", description="Turn the text into a link."
    )

    @model_validator(mode="after")
    def require_style(self) -> "TextStyleArgs":
        if not _set_fields(self, TEXT_STYLE_FIELDS):
            raise ValueError("At least one text style option must be provided")
        return self

    def style_fields(self) -> dict[str, Any]:
        return _set_fields(self, TEXT_STYLE_FIELDS)


class ApplyTextStyleInput(TextStyleArgs, RangeInput):
    pass


def _style_summary(fields: dict[str, Any]) -> str:
    return ", ".join(f"{name}={value}" for name, value in fields.items())


@docs_tools.tool(
    "apply_text_style",
    ApplyTextStyleInput,
    services=DOCS,
    failure="Failed to apply text style to range {start_index}-{end_index} in document {document_id}",
)
async def apply_text_style(params: ApplyTextStyleInput, ctx: ToolContext) -> str:
    """
    Apply character formatting (bold, italic, size, font, colors, link) to a range.

    Only the options you pass are changed.
    """
    fields = params.style_fields()
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.text_style_request(params.start_index, params.end_index, **fields)],
    )
    return (
        f"Applied text style ({_style_summary(fields)}) "
        f"to range {params.start_index}-{params.end_index}."
    )


PARAGRAPH_STYLE_FIELDS = (
    "alignment", "named_style_type", "indent_start", "indent_end",
    "space_above", "space_below", "keep_with_next",
)


class ApplyParagraphStyleInput(RangeInput):
    alignment: Literal["START", "CENTER", "END", "JUSTIFIED"] | None = None
    named_style_type: Literal[
        "NORMAL_TEXT", "TITLE", "SUBTITLE",
        "HEADING_1", "HEADING_2", "HEADING_3", "HEADING_4", "HEADING_5", "HEADING_6",
    ] | None = None
    indent_start: StrictFloat | None = Field(default=None, ge=0, description="Points.")
    indent_end: StrictFloat | None = Field(default=None, ge=0, description="Points.")
    space_above: StrictFloat | None = Field(default=None, ge=0, description="Points.")
    space_below: StrictFloat | None = Field(default=None, ge=0, description="Points.")
    keep_with_next: StrictBool | None = None

    @model_validator(mode="after")
    def require_style(self) -> "ApplyParagraphStyleInput":
        if not _set_fields(self, PARAGRAPH_STYLE_FIELDS):
            raise ValueError("At least one paragraph style option must be provided")
        return self


@docs_tools.tool(
    "apply_paragraph_style",
    ApplyParagraphStyleInput,
    services=DOCS,
    failure="Failed to apply paragraph style to range {start_index}-{end_index} in document {document_id}",
)
async def apply_paragraph_style(params: ApplyParagraphStyleInput, ctx: ToolContext) -> str:
    """
    Apply paragraph formatting (alignment, heading style, indents, spacing).

    Affects every paragraph the range touches.
    """
    fields = _set_fields(params, PARAGRAPH_STYLE_FIELDS)
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.paragraph_style_request(params.start_index, params.end_index, **fields)],
    )
    return (
        f"Applied paragraph style ({_style_summary(fields)}) "
        f"to range {params.start_index}-{params.end_index}."
    )


class FormatMatchingTextInput(TextStyleArgs, DocumentInput):
    text_to_find: str = Field(min_length=1, description="Exact text to format (case-sensitive).")
    match_instance: StrictInt = Field(
        default=1, ge=1, description="Which occurrence to format (1 = first)."
    )


@docs_tools.tool(
    "format_matching_text",
    FormatMatchingTextInput,
    services=DOCS,
    failure='Failed to format "{text_to_find}" in document {document_id}',
)
async def format_matching_text(params: FormatMatchingTextInput, ctx: ToolContext) -> str:
    """Find a specific occurrence of some text and apply character formatting to it."""
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    match = docs_api.find_text_range(data.tabs[0], params.text_to_find, params.match_instance)
    if match is None:
        raise ToolError(
            f'Could not find instance {params.match_instance} of "{params.text_to_find}" '
            f"in document {params.document_id}",
            kind=ErrorKind.NOT_FOUND,
        )

    fields = params.style_fields()
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.text_style_request(match.start_index, match.end_index, **fields)],
    )
    return (
        f'Formatted instance {params.match_instance} of "{params.text_to_find}" '
        f"(range {match.start_index}-{match.end_index}) with {_style_summary(fields)}."
    )


# =============================================================================
# STRUCTURE
# =============================================================================


class InsertTableInput(DocumentInput):
    rows: StrictInt = Field(ge=1, le=100)
    columns: StrictInt = Field(ge=1, le=20)
    index: StrictInt = Field(ge=1, description="Index to insert the table at.")


@docs_tools.tool(
    "insert_table",
    InsertTableInput,
    services=DOCS,
    failure="Failed to insert a {rows}x{columns} table in document {document_id}",
)
async def insert_table(params: InsertTableInput, ctx: ToolContext) -> str:
    """Insert an empty table at an index."""
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [{
            "insertTable": {
                "rows": params.rows,
                "columns": params.columns,
                "location": {"index": params.index},
            }
        }],
    )
    return f"Inserted a {params.rows}x{params.columns} table at index {params.index}."


class EditTableCellInput(DocumentInput):
    table_start_index: StrictInt = Field(
        ge=1, description="Start index of the table (from find_element elementType=table)."
    )
    row_index: StrictInt = Field(ge=0, description="0-based row.")
    column_index: StrictInt = Field(ge=0, description="0-based column.")
    text_content: str = Field(description="New cell text. Empty string clears the cell.")


@docs_tools.tool(
    "edit_table_cell",
    EditTableCellInput,
    services=DOCS,
    failure="Failed to edit cell ({row_index}, {column_index}) in document {document_id}",
)
async def edit_table_cell(params: EditTableCellInput, ctx: ToolContext) -> str:
    """Replace the text of one table cell."""
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    start, end = docs_api.find_table_cell(
        data.tabs[0], params.table_start_index, params.row_index, params.column_index
    )

    requests: list[dict[str, Any]] = []
    if end - 1 > start:
        requests.append(docs_api.delete_range_request(start, end - 1))
    if params.text_content:
        requests.append(docs_api.insert_text_request(start, params.text_content))
    if not requests:
        return f"Cell ({params.row_index}, {params.column_index}) is already empty."

    await docs_api.batch_update(ctx.docs, params.document_id, requests)
    return f"Updated cell ({params.row_index}, {params.column_index})."


class InsertPageBreakInput(DocumentInput):
    index: StrictInt = Field(ge=1)


@docs_tools.tool(
    "insert_page_break",
    InsertPageBreakInput,
    services=DOCS,
    failure="Failed to insert a page break in document {document_id}",
)
async def insert_page_break(params: InsertPageBreakInput, ctx: ToolContext) -> str:
    """Insert a page break at an index."""
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [{"insertPageBreak": {"location": {"index": params.index}}}],
    )
    return f"Inserted page break at index {params.index}."


# =============================================================================
# IMAGES
# =============================================================================


class ImageSizeArgs(ToolInput):
    index: StrictInt = Field(ge=1, description="Index to insert the image at.")
    width: StrictFloat | None = Field(default=None, gt=0, description="Points.")
    height: StrictFloat | None = Field(default=None, gt=0, description="Points.")


class InsertImageFromUrlInput(ImageSizeArgs, DocumentInput):
    image_url: str = Field(pattern=r"^https?://\S+$", description="Publicly reachable image URL.")


@docs_tools.tool(
    "insert_image_from_url",
    InsertImageFromUrlInput,
    services=DOCS,
    failure="Failed to insert image {image_url} in document {document_id}",
)
async def insert_image_from_url(params: InsertImageFromUrlInput, ctx: ToolContext) -> str:
    """Insert an inline image from a public URL (PNG, JPEG or GIF, under 50 MB)."""
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.inline_image_request(params.index, params.image_url, params.width, params.height)],
    )
    return f"Inserted image at index {params.index}."


class InsertLocalImageInput(ImageSizeArgs, DocumentInput):
    local_image_path: NonEmptyStr = Field(description="Absolute path of the image file.")
    upload_to_same_folder: StrictBool = Field(
        default=True, description="Upload into the document's folder instead of My Drive root."
    )


@docs_tools.tool(
    "insert_local_image",
    InsertLocalImageInput,
    services=(ServiceName.DOCS, ServiceName.DRIVE),
    failure="Failed to insert local image {local_image_path} in document {document_id}",
)
async def insert_local_image(params: InsertLocalImageInput, ctx: ToolContext) -> str:
    """
    Upload a local image to Drive and insert it into a Google Doc.

    The uploaded file is shared as anyone-with-link reader, which the Docs
    API requires to fetch it.
    """
    path = Path(params.local_image_path).expanduser()
    if not path.is_file():
        raise ToolError(f"Image file not found: {path}", kind=ErrorKind.INVALID_INPUT)
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise ToolError(
            f"Unsupported image type {path.suffix or '(none)'}: "
            f"expected one of {', '.join(sorted(IMAGE_EXTENSIONS))}",
            kind=ErrorKind.INVALID_INPUT,
        )

    parent_id = None
    if params.upload_to_same_folder:
        parents = (await get_file(ctx.drive, params.document_id, fields="parents")).get("parents", [])
        parent_id = parents[0] if parents else None

    uploaded = await upload_file(ctx.drive, path, parent_id)
    await make_public_readable(ctx.drive, uploaded["id"])
    ctx.log.info(f"Uploaded {path.name} as {uploaded['id']}")

    uri = uploaded.get("webContentLink") or f"https://drive.google.com/uc?export=download&id={uploaded['id']}"
    await docs_api.batch_update(
        ctx.docs,
        params.document_id,
        [docs_api.inline_image_request(params.index, uri, params.width, params.height)],
    )
    return (
        f"Uploaded {path.name} to Drive (ID: {uploaded['id']}) "
        f"and inserted it at index {params.index}."
    )


# =============================================================================
# LISTS AND SEARCH
# =============================================================================

_BULLET_MARKER = re.compile(r"^([-*•]) +")
_NUMBER_MARKER = re.compile(r"^(\d+[.)]) +")


class FixListFormattingInput(DocumentInput):
    start_index: StrictInt | None = Field(default=None, ge=1, description="Only fix lists after this index.")
    end_index: StrictInt | None = Field(default=None, ge=2, description="Only fix lists before this index.")


def _plain_list_paragraphs(
    content: list[dict[str, Any]],
    start: int | None,
    end: int | None,
) -> list[tuple[str, int, int, int]]:
    """(kind, para_start, para_end, marker_length) for each text-marker paragraph."""
    found = []
    for element in content:
        paragraph = element.get("paragraph")
        if paragraph is None or "bullet" in paragraph:
            continue
        para_start, para_end = element.get("startIndex", 0), element.get("endIndex", 0)
        if (start is not None and para_start < start) or (end is not None and para_end > end):
            continue
        text = docs_api.paragraph_text(paragraph)
        if bullet := _BULLET_MARKER.match(text):
            found.append(("bullet", para_start, para_end, bullet.end()))
        elif number := _NUMBER_MARKER.match(text):
            found.append(("numbered", para_start, para_end, number.end()))
    return found


@docs_tools.tool(
    "fix_list_formatting",
    FixListFormattingInput,
    services=DOCS,
    failure="Failed to fix list formatting in document {document_id}",
)
async def fix_list_formatting(params: FixListFormattingInput, ctx: ToolContext) -> str:
    """
    Turn plain-text lists ("- item", "* item", "1. item") into real Docs lists.

    Consecutive marked paragraphs of the same kind become one list; the typed
    markers are removed.
    """
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    items = _plain_list_paragraphs(
        data.tabs[0].body.get("content", []), params.start_index, params.end_index
    )
    if not items:
        return "No plain-text list markers found."

    # Group adjacent paragraphs of the same kind
    groups: list[list[tuple[str, int, int, int]]] = []
    for item in items:
        if groups and groups[-1][-1][0] == item[0] and groups[-1][-1][2] == item[1]:
            groups[-1].append(item)
        else:
            groups.append([item])

    # Last group first: edits never shift indices still to be used
    requests: list[dict[str, Any]] = []
    for group in reversed(groups):
        preset = (
            "BULLET_DISC_CIRCLE_SQUARE" if group[0][0] == "bullet" else "NUMBERED_DECIMAL_ALPHA_ROMAN"
        )
        requests.append({
            "createParagraphBullets": {
                "range": {"startIndex": group[0][1], "endIndex": group[-1][2] - 1},
                "bulletPreset": preset,
            }
        })
        for _, para_start, _, marker_length in reversed(group):
            requests.append(docs_api.delete_range_request(para_start, para_start + marker_length))

    await docs_api.batch_update(ctx.docs, params.document_id, requests)
    return f"Converted {len(items)} paragraph(s) into {len(groups)} list(s)."


class FindElementInput(DocumentInput):
    element_type: Literal["table", "paragraph", "list", "image"] = Field(default="paragraph")
    text_query: str | None = Field(
        default=None, min_length=1, description="Only elements containing this text (case-insensitive)."
    )


@docs_tools.tool(
    "find_element",
    FindElementInput,
    services=DOCS,
    failure="Failed to search document {document_id}",
)
async def find_element(params: FindElementInput, ctx: ToolContext) -> str:
    """
    Find tables, paragraphs, list items or images and report their index ranges.

    Use the reported indices with the editing tools.
    """
    data = await docs_api.fetch_document(ctx.docs, params.document_id)
    elements = docs_api.find_elements(data.tabs[0], params.element_type, params.text_query)
    if not elements:
        query = f' matching "{params.text_query}"' if params.text_query else ""
        return f"No {params.element_type} elements found{query}."

    lines = [f"**Found {len(elements)} {params.element_type} element(s):**", ""]
    for i, element in enumerate(elements, start=1):
        lines.append(f"{i}. [{element.start_index}-{element.end_index}] {element.summary}")
    return "\n".join(lines)
