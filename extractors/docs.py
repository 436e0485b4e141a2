"""
Docs Extractor: Pure functions for rendering Google Docs as text or markdown.

Receives DocData, returns a string. No API calls, no MCP awareness.
"""

from typing import Any

from models import DocData, DocTab


TAB_SEPARATOR = "\n\n" + "=" * 60 + "\n"

HEADING_PREFIX = {
    "TITLE": "# ",
    "HEADING_1": "# ",
    "HEADING_2": "## ",
    "HEADING_3": "### ",
    "HEADING_4": "#### ",
    "HEADING_5": "##### ",
    "HEADING_6": "###### ",
}

ORDERED_GLYPHS = {"DECIMAL", "ZERO_DECIMAL", "ALPHA", "UPPER_ALPHA", "ROMAN", "UPPER_ROMAN"}


def truncate(text: str, max_length: int | None, warnings: list[str] | None = None) -> str:
    """Cut at max_length with a visible marker."""
    if not max_length or len(text) <= max_length:
        return text
    if warnings is not None:
        warnings.append(f"Content truncated at {max_length:,} characters")
    return (
        text[:max_length]
        + f"\n\n[... TRUNCATED at {max_length:,} chars (document is {len(text):,} chars) ...]"
    )


# =============================================================================
# PLAIN TEXT
# =============================================================================


def tab_plain_text(tab: DocTab) -> str:
    """Every text run in reading order, tables flattened cell by cell."""
    return _plain_text(tab.body.get("content", []))


def _plain_text(elements: list[dict[str, Any]]) -> str:
    parts: list[str] = []
    for element in elements:
        if "paragraph" in element:
            for run in element["paragraph"].get("elements", []):
                parts.append(run.get("textRun", {}).get("content", ""))
        elif "table" in element:
            for row in element["table"].get("tableRows", []):
                cells = [
                    _plain_text(cell.get("content", [])).strip()
                    for cell in row.get("tableCells", [])
                ]
                parts.append("\t".join(cells) + "\n")
        elif "tableOfContents" in element:
            parts.append(_plain_text(element["tableOfContents"].get("content", [])))
    return "".join(parts)


def extract_plain_text(data: DocData, max_length: int | None = None) -> str:
    """Plain text of all tabs; multi-tab docs get a title line per tab."""
    data.warnings = []
    if len(data.tabs) == 1:
        text = tab_plain_text(data.tabs[0])
    else:
        text = TAB_SEPARATOR.join(
            f"{tab.title}\n\n{tab_plain_text(tab)}" for tab in data.tabs
        )
    return truncate(text.strip(), max_length, data.warnings)


# =============================================================================
# MARKDOWN
# =============================================================================


def extract_markdown(data: DocData, max_length: int | None = None) -> str:
    """
    Convert document data to markdown with tab headers.

    Populates data.warnings with extraction issues encountered.

    Returns:
        Markdown text like:
            # Tab Title

            Content here...

            ============================================================
            # Second Tab

            More content...
    """
    data.warnings = []
    unknown: set[str] = set()
    rendered: list[str] = []

    for tab in data.tabs:
        tab_text = _markdown_elements(tab.body.get("content", []), tab, {}, unknown)
        if not tab_text.lstrip().startswith("# "):
            tab_text = f"# {tab.title}\n\n{tab_text}"
        rendered.append(tab_text)

    if unknown:
        data.warnings.append(f"Unknown element types ignored: {', '.join(sorted(unknown))}")

    return truncate(TAB_SEPARATOR.join(rendered).strip(), max_length, data.warnings)


def _format_markdown_link(text: str, url: str) -> str:
    text = text.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
    url = url.replace("(", "%28").replace(")", "%29")
    return f"[{text}]({url})"


def _list_prefix(tab: DocTab, bullet: dict[str, Any], counters: dict[tuple[str, int], int]) -> str:
    list_id = bullet.get("listId", "")
    level = bullet.get("nestingLevel", 0)

    # Deeper levels restart whenever a shallower item appears
    for key in [k for k in counters if k[0] == list_id and k[1] > level]:
        del counters[key]
    counters[(list_id, level)] = counters.get((list_id, level), 0) + 1

    levels = tab.lists.get(list_id, {}).get("listProperties", {}).get("nestingLevels", [])
    glyph = levels[level].get("glyphType", "BULLET") if level < len(levels) else "BULLET"
    marker = f"{counters[(list_id, level)]}." if glyph in ORDERED_GLYPHS else "-"
    return "  " * level + marker + " "


def _styled(content: str, style: dict[str, Any]) -> str:
    """Bold/italic/strikethrough markers, kept inside surrounding whitespace."""
    inner = content.strip()
    if not inner:
        return content
    if style.get("italic"):
        inner = f"*{inner}*"
    if style.get("bold"):
        inner = f"**{inner}**"
    if style.get("strikethrough"):
        inner = f"~~{inner}~~"
    if inner == content.strip():
        return content
    leading = content[: len(content) - len(content.lstrip())]
    trailing = content[len(content.rstrip()):]
    return leading + inner + trailing


def _inline_object(tab: DocTab, obj_id: str) -> str:
    embedded = (
        tab.inline_objects.get(obj_id, {})
        .get("inlineObjectProperties", {})
        .get("embeddedObject", {})
    )
    alt = embedded.get("title") or embedded.get("description") or "image"
    uri = embedded.get("imageProperties", {}).get("contentUri", "")
    return f"![{alt}]({uri})" if uri else f"![{alt}]"


def _markdown_paragraph(
    paragraph: dict[str, Any],
    tab: DocTab,
    counters: dict[tuple[str, int], int],
    unknown: set[str],
) -> str:
    prefix = HEADING_PREFIX.get(
        paragraph.get("paragraphStyle", {}).get("namedStyleType", "NORMAL_TEXT"), ""
    )
    if "bullet" in paragraph:
        prefix += _list_prefix(tab, paragraph["bullet"], counters)

    parts: list[str] = [prefix]
    for elem in paragraph.get("elements", []):
        if "textRun" in elem:
            run = elem["textRun"]
            style = run.get("textStyle", {})
            content = _styled(run.get("content", ""), style)
            url = style.get("link", {}).get("url")
            if url and content.strip():
                stripped = content.rstrip("\n")
                content = _format_markdown_link(stripped, url) + content[len(stripped):]
            parts.append(content)
        elif "inlineObjectElement" in elem:
            parts.append(_inline_object(tab, elem["inlineObjectElement"].get("inlineObjectId", "")))
        elif "horizontalRule" in elem:
            parts.append("\n---\n")
        elif "pageBreak" in elem:
            parts.append("\n<!-- page break -->\n")
        else:
            elem_type = next((k for k in elem if k not in ("startIndex", "endIndex")), None)
            if elem_type:
                unknown.add(elem_type)
    return "".join(parts)


def _markdown_table(table: dict[str, Any], tab: DocTab, unknown: set[str]) -> str:
    lines: list[str] = []
    for row_idx, row in enumerate(table.get("tableRows", [])):
        cells = [
            _markdown_elements(cell.get("content", []), tab, {}, unknown)
            .strip()
            .replace("\n", " ")
            .replace("|", "\\|")
            for cell in row.get("tableCells", [])
        ]
        lines.append("| " + " | ".join(cells) + " |")
        if row_idx == 0:
            lines.append("|" + "|".join(["---"] * len(cells)) + "|")
    return "\n".join(lines) + "\n\n" if lines else ""


def _markdown_elements(
    elements: list[dict[str, Any]],
    tab: DocTab,
    counters: dict[tuple[str, int], int],
    unknown: set[str],
) -> str:
    parts: list[str] = []
    for element in elements:
        if "paragraph" in element:
            parts.append(_markdown_paragraph(element["paragraph"], tab, counters, unknown))
        elif "table" in element:
            parts.append(_markdown_table(element["table"], tab, unknown))
        elif "tableOfContents" in element:
            parts.append(
                _markdown_elements(element["tableOfContents"].get("content", []), tab, counters, unknown)
            )
        elif "sectionBreak" in element:
            # Every body opens with one; only later breaks are meaningful
            if parts:
                parts.append("\n---\n")
        else:
            elem_type = next((k for k in element if k not in ("startIndex", "endIndex")), None)
            if elem_type:
                unknown.add(elem_type)
    return "".join(parts)


# =============================================================================
# TABS
# =============================================================================


def render_tab_list(data: DocData, include_content: bool = False) -> str:
    """
    Tab overview for list_document_tabs.

    With include_content, each entry also shows the tab's character count and
    a short preview.
    """
    lines = [f'**Document "{data.title}" has {len(data.tabs)} tab(s):**', ""]
    for tab in data.tabs:
        entry = f"{tab.index + 1}. **{tab.title}** (ID: `{tab.tab_id}`)"
        if tab.child_count:
            entry += f" [{tab.child_count} child tab(s)]"
        lines.append(entry)
        if include_content:
            text = tab_plain_text(tab).strip()
            preview = " ".join(text.split())[:200]
            lines.append(f"   {len(text):,} characters")
            if preview:
                lines.append(f"   > {preview}{'…' if len(text) > 200 else ''}")
    return "\n".join(lines)
