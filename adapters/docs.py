"""
Docs adapter: Google Docs API wrapper.

Fetches document content and normalizes legacy/modern formats to DocData.
Also locates things inside a fetched tab (text runs, structural elements,
table cells) and builds the batchUpdate requests the docs tools send.

Index arithmetic follows the Docs API: indices are UTF-16 offsets into the
tab body, start inclusive, end exclusive. Index 1 is the first writable
position.
"""

from typing import Any

from googleapiclient.discovery import Resource

from adapters.services import execute
from models import DocData, DocElement, DocTab, TextMatch, ToolError


# Fields to request: only what we need for extraction
# includeTabsContent gives us all tabs + body content in one call
# NOTE: Cannot mix tabs() with legacy document-level fields (body, revisionId)
DOCUMENT_FIELDS = (
    "documentId,"
    "title,"
    "tabs(tabProperties,documentTab,childTabs)"
)

ELEMENT_TYPES = ("table", "paragraph", "list", "image")


def _build_tab(tab_data: dict[str, Any], index: int) -> DocTab:
    """Build DocTab from a tabs[] entry."""
    props = tab_data.get("tabProperties", {})
    doc_tab = tab_data.get("documentTab", {})

    return DocTab(
        title=props.get("title", f"Tab {index + 1}"),
        tab_id=props.get("tabId", f"tab_{index}"),
        index=props.get("index", index),
        body=doc_tab.get("body", {}),
        lists=doc_tab.get("lists", {}),
        inline_objects=doc_tab.get("inlineObjects", {}),
        child_count=len(tab_data.get("childTabs", [])),
    )


def _build_legacy_tab(doc: dict[str, Any]) -> DocTab:
    """Build DocTab from legacy single-tab document format."""
    return DocTab(
        title=doc.get("title", "Untitled"),
        tab_id="main",
        index=0,
        body=doc.get("body", {}),
        lists=doc.get("lists", {}),
        inline_objects=doc.get("inlineObjects", {}),
    )


def _flatten_tabs(tabs_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Depth-first: parent tab, then its children."""
    flat: list[dict[str, Any]] = []
    for tab in tabs_data:
        flat.append(tab)
        flat.extend(_flatten_tabs(tab.get("childTabs", [])))
    return flat


async def fetch_raw_document(service: Resource, document_id: str) -> dict[str, Any]:
    """The documents.get response, untouched (used by format=json)."""
    return await execute(
        service.documents().get(
            documentId=document_id,
            includeTabsContent=True,
            fields=DOCUMENT_FIELDS,
        )
    )


async def fetch_document(service: Resource, document_id: str) -> DocData:
    """
    Fetch complete document data.

    Handles both legacy (single-tab) and modern (multi-tab) document formats,
    normalizing both to DocData with a list of tabs. Nested tabs are flattened
    in reading order.
    """
    doc = await fetch_raw_document(service, document_id)
    return parse_document(doc, document_id)


def parse_document(doc: dict[str, Any], document_id: str) -> DocData:
    tabs_data = _flatten_tabs(doc.get("tabs", []))
    if tabs_data:
        tabs = [_build_tab(tab, i) for i, tab in enumerate(tabs_data)]
    else:
        tabs = [_build_legacy_tab(doc)]

    return DocData(
        title=doc.get("title", "Untitled"),
        document_id=doc.get("documentId", document_id),
        tabs=tabs,
    )


def select_tab(data: DocData, tab_id: str | None) -> DocTab:
    """The tab with `tab_id`, or the first tab when no id is given."""
    if tab_id is None:
        return data.tabs[0]
    for tab in data.tabs:
        if tab.tab_id == tab_id:
            return tab
    available = ", ".join(f"{t.tab_id} ({t.title})" for t in data.tabs)
    raise ToolError(f'Tab "{tab_id}" not found in document. Available tabs: {available}')


async def batch_update(
    service: Resource,
    document_id: str,
    requests: list[dict[str, Any]],
) -> dict[str, Any]:
    """Send one documents.batchUpdate. Requests apply in order, atomically."""
    return await execute(
        service.documents().batchUpdate(
            documentId=document_id,
            body={"requests": requests},
        )
    )


# =============================================================================
# LOCATING CONTENT
# =============================================================================


def body_end_index(tab: DocTab) -> int:
    """Index of the final newline of the body (the last insertable position is before it)."""
    content = tab.body.get("content", [])
    if not content:
        return 1
    return content[-1].get("endIndex", 1)


def _walk_paragraphs(elements: list[dict[str, Any]]):
    """Yield every paragraph element, descending into tables."""
    for element in elements:
        if "paragraph" in element:
            yield element
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                for cell in row.get("tableCells", []):
                    yield from _walk_paragraphs(cell.get("content", []))


def paragraph_text(paragraph: dict[str, Any]) -> str:
    return "".join(
        elem.get("textRun", {}).get("content", "")
        for elem in paragraph.get("elements", [])
    )


def find_text_range(tab: DocTab, text: str, instance: int = 1) -> TextMatch | None:
    """
    Locate the `instance`-th occurrence (1-based) of `text` in the tab body.

    Text runs are stitched together with their document indices, so a match
    may span several runs (e.g. a phrase that is half bold).
    """
    chars: list[str] = []
    positions: list[int] = []
    for element in _walk_paragraphs(tab.body.get("content", [])):
        for run in element["paragraph"].get("elements", []):
            content = run.get("textRun", {}).get("content")
            if not content:
                continue
            start = run.get("startIndex", 0)
            for offset, char in enumerate(content):
                chars.append(char)
                positions.append(start + offset)

    full_text = "".join(chars)
    found = -1
    search_from = 0
    for _ in range(instance):
        found = full_text.find(text, search_from)
        if found == -1:
            return None
        search_from = found + 1

    return TextMatch(
        start_index=positions[found],
        end_index=positions[found + len(text) - 1] + 1,
        text=text,
    )


def _summarize(text: str, limit: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 1] + "…"


def find_elements(
    tab: DocTab,
    element_type: str,
    text_query: str | None = None,
) -> list[DocElement]:
    """
    Structural elements of one type, in document order.

    `text_query` filters case-insensitively on the element's text; for images
    it matches the title or description.
    """
    if element_type not in ELEMENT_TYPES:
        raise ValueError(f"element_type must be one of {ELEMENT_TYPES}, got {element_type!r}")

    query = text_query.lower() if text_query else None
    found: list[DocElement] = []

    for element in tab.body.get("content", []):
        start = element.get("startIndex", 0)
        end = element.get("endIndex", start)

        if "table" in element and element_type == "table":
            table = element["table"]
            text = " ".join(paragraph_text(p["paragraph"]) for p in _walk_paragraphs([element]))
            if query and query not in text.lower():
                continue
            rows = table.get("rows", len(table.get("tableRows", [])))
            columns = table.get("columns", 0)
            found.append(DocElement("table", start, end, f"{rows}x{columns} table: {_summarize(text)}"))

        elif "paragraph" in element:
            paragraph = element["paragraph"]

            if element_type == "image":
                for run in paragraph.get("elements", []):
                    obj_id = run.get("inlineObjectElement", {}).get("inlineObjectId")
                    if not obj_id:
                        continue
                    embedded = (
                        tab.inline_objects.get(obj_id, {})
                        .get("inlineObjectProperties", {})
                        .get("embeddedObject", {})
                    )
                    label = embedded.get("title") or embedded.get("description") or obj_id
                    if query and query not in label.lower():
                        continue
                    run_start = run.get("startIndex", start)
                    found.append(DocElement("image", run_start, run.get("endIndex", run_start + 1), label))
                continue

            is_list = "bullet" in paragraph
            if (element_type == "list") != is_list:
                continue
            text = paragraph_text(paragraph)
            if query and query not in text.lower():
                continue
            found.append(DocElement(element_type, start, end, _summarize(text)))

    return found


def find_table_cell(
    tab: DocTab,
    table_start_index: int,
    row_index: int,
    column_index: int,
) -> tuple[int, int]:
    """
    Content range of one table cell: (start, end) with end exclusive.

    The range includes the cell's trailing newline, which can't be deleted;
    callers replacing the text delete [start, end - 1).
    """
    table_element = next(
        (
            e for e in tab.body.get("content", [])
            if "table" in e and e.get("startIndex") == table_start_index
        ),
        None,
    )
    if table_element is None:
        raise ToolError(
            f"No table starts at index {table_start_index}. "
            "Use find_element with elementType=table to locate tables."
        )

    rows = table_element["table"].get("tableRows", [])
    if not 0 <= row_index < len(rows):
        raise ToolError(f"Row {row_index} out of range (table has {len(rows)} rows)")
    cells = rows[row_index].get("tableCells", [])
    if not 0 <= column_index < len(cells):
        raise ToolError(f"Column {column_index} out of range (row has {len(cells)} cells)")

    content = cells[column_index].get("content", [])
    if not content:
        raise ToolError(f"Cell ({row_index}, {column_index}) has no content range")
    return content[0]["startIndex"], content[-1]["endIndex"]


# =============================================================================
# REQUEST BUILDERS
# =============================================================================


def hex_to_rgb(hex_color: str) -> dict[str, float]:
    """'#FF8000' or 'f80' → Docs/Sheets RgbColor (0..1 floats)."""
    value = hex_color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    red, green, blue = (int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def _color(hex_color: str) -> dict[str, Any]:
    return {"color": {"rgbColor": hex_to_rgb(hex_color)}}


def build_text_style(
    *,
    bold: bool | None = None,
    italic: bool | None = None,
    underline: bool | None = None,
    strikethrough: bool | None = None,
    font_size: float | None = None,
    font_family: str | None = None,
    foreground_color: str | None = None,
    background_color: str | None = None,
    link_url: str | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """TextStyle plus the update mask naming exactly the fields that were set."""
    style: dict[str, Any] = {}
    for key, value in (
        ("bold", bold),
        ("italic", italic),
        ("underline", underline),
        ("strikethrough", strikethrough),
    ):
        if value is not None:
            style[key] = value
    if font_size is not None:
        style["fontSize"] = {"magnitude": font_size, "unit": "PT"}
    if font_family is not None:
        style["weightedFontFamily"] = {"fontFamily": font_family}
    if foreground_color is not None:
        style["foregroundColor"] = _color(foreground_color)
    if background_color is not None:
        style["backgroundColor"] = _color(background_color)
    if link_url is not None:
        style["link"] = {"url": link_url}
    return style, list(style)


def text_style_request(start: int, end: int, **style_fields: Any) -> dict[str, Any]:
    style, fields = build_text_style(**style_fields)
    if not fields:
        raise ToolError("No text style options were provided.")
    return {
        "updateTextStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "textStyle": style,
            "fields": ",".join(fields),
        }
    }


def _points(value: float) -> dict[str, Any]:
    return {"magnitude": value, "unit": "PT"}


def build_paragraph_style(
    *,
    alignment: str | None = None,
    named_style_type: str | None = None,
    indent_start: float | None = None,
    indent_end: float | None = None,
    space_above: float | None = None,
    space_below: float | None = None,
    keep_with_next: bool | None = None,
) -> tuple[dict[str, Any], list[str]]:
    style: dict[str, Any] = {}
    if alignment is not None:
        style["alignment"] = alignment
    if named_style_type is not None:
        style["namedStyleType"] = named_style_type
    if indent_start is not None:
        style["indentStart"] = _points(indent_start)
    if indent_end is not None:
        style["indentEnd"] = _points(indent_end)
    if space_above is not None:
        style["spaceAbove"] = _points(space_above)
    if space_below is not None:
        style["spaceBelow"] = _points(space_below)
    if keep_with_next is not None:
        style["keepWithNext"] = keep_with_next
    return style, list(style)


def paragraph_style_request(start: int, end: int, **style_fields: Any) -> dict[str, Any]:
    style, fields = build_paragraph_style(**style_fields)
    if not fields:
        raise ToolError("No paragraph style options were provided.")
    return {
        "updateParagraphStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "paragraphStyle": style,
            "fields": ",".join(fields),
        }
    }


def insert_text_request(index: int, text: str) -> dict[str, Any]:
    return {"insertText": {"location": {"index": index}, "text": text}}


def delete_range_request(start: int, end: int) -> dict[str, Any]:
    return {"deleteContentRange": {"range": {"startIndex": start, "endIndex": end}}}


def inline_image_request(
    index: int,
    uri: str,
    width: float | None = None,
    height: float | None = None,
) -> dict[str, Any]:
    request: dict[str, Any] = {"location": {"index": index}, "uri": uri}
    if width is not None and height is not None:
        request["objectSize"] = {"width": _points(width), "height": _points(height)}
    elif width is not None:
        request["objectSize"] = {"width": _points(width)}
    elif height is not None:
        request["objectSize"] = {"height": _points(height)}
    return {"insertInlineImage": request}
