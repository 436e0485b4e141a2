"""Unit tests for docs extractor."""

from inline_snapshot import snapshot

from extractors.docs import (
    TAB_SEPARATOR,
    extract_markdown,
    extract_plain_text,
    render_tab_list,
    truncate,
)
from models import DocData, DocTab
from tests.helpers import paragraph, table, text_run


def make_data(*tabs: DocTab, title: str = "Doc") -> DocData:
    return DocData(title=title, document_id="d1", tabs=list(tabs))


def simple_tab(title: str, text: str, tab_id: str = "t.0", index: int = 0, **kwargs) -> DocTab:
    return DocTab(
        title=title,
        tab_id=tab_id,
        index=index,
        body={"content": [paragraph(text, 1)]},
        **kwargs,
    )


def rich_tab() -> DocTab:
    styled = {
        "startIndex": 6,
        "endIndex": 40,
        "paragraph": {"elements": [
            text_run("This is ", 6),
            text_run("bold", 14, bold=True),
            text_run(" text, see ", 18),
            text_run("docs", 29, link={"url": "https://example.com/a(b)"}),
            text_run(".\n", 33),
        ]},
    }
    return DocTab(
        title="Main",
        tab_id="t.0",
        index=0,
        body={"content": [
            {"startIndex": 0, "endIndex": 1, "sectionBreak": {}},
            paragraph("Plan\n", 1, style="HEADING_1"),
            styled,
            paragraph("First\n", 40, bullet={"listId": "l1", "nestingLevel": 0}),
            paragraph("Sub\n", 46, bullet={"listId": "l1", "nestingLevel": 1}),
            paragraph("Second\n", 50, bullet={"listId": "l1", "nestingLevel": 0}),
            table(57, [["Item", "Cost"], ["Pens", "$5"]]),
            paragraph("End\n", 80),
        ]},
        lists={"l1": {"listProperties": {"nestingLevels": [
            {"glyphType": "DECIMAL"},
            {"glyphType": "GLYPH_TYPE_UNSPECIFIED"},
        ]}}},
    )


class TestExtractMarkdown:
    """Tests for markdown rendering."""

    def test_full_document(self) -> None:
        """Headings, inline styles, links, nested lists and tables."""
        data = make_data(rich_tab())
        assert extract_markdown(data) == snapshot("""\
# Plan
This is **bold** text, see [docs](https://example.com/a%28b%29).
1. First
  - Sub
2. Second
| Item | Cost |
|---|---|
| Pens | $5 |

End\
""")
        assert data.warnings == []

    def test_tab_title_added_when_no_heading(self) -> None:
        result = extract_markdown(make_data(simple_tab("Notes", "alpha\n")))
        assert result == "# Notes\n\nalpha"

    def test_multiple_tabs_separated(self) -> None:
        data = make_data(
            simple_tab("A", "alpha\n"),
            simple_tab("B", "beta\n", tab_id="t.1", index=1),
        )

        result = extract_markdown(data)

        assert result.startswith("# A\n\nalpha")
        assert "=" * 60 + "\n# B\n\nbeta" in result

    def test_unknown_elements_warned(self) -> None:
        tab = simple_tab("A", "alpha\n")
        tab.body["content"].append({"startIndex": 7, "endIndex": 9, "equation": {}})
        data = make_data(tab)

        extract_markdown(data)

        assert data.warnings == ["Unknown element types ignored: equation"]

    def test_inline_image(self) -> None:
        tab = DocTab(
            title="Pics",
            tab_id="t.0",
            index=0,
            body={"content": [{"startIndex": 1, "endIndex": 3, "paragraph": {"elements": [
                {"startIndex": 1, "endIndex": 2, "inlineObjectElement": {"inlineObjectId": "kix.1"}},
                text_run("\n", 2),
            ]}}]},
            inline_objects={"kix.1": {"inlineObjectProperties": {"embeddedObject": {
                "title": "Logo",
                "imageProperties": {"contentUri": "https://img/logo"},
            }}}},
        )

        assert "![Logo](https://img/logo)" in extract_markdown(make_data(tab))

    def test_truncation_warns(self) -> None:
        data = make_data(simple_tab("Long", "word " * 100 + "\n"))

        result = extract_markdown(data, max_length=50)

        assert "[... TRUNCATED at 50 chars" in result
        assert data.warnings == ["Content truncated at 50 characters"]


class TestExtractPlainText:

    def test_tables_flattened(self) -> None:
        tab = DocTab(
            title="T", tab_id="t.0", index=0,
            body={"content": [paragraph("Intro\n", 1), table(7, [["a", "b"]])]},
        )
        assert extract_plain_text(make_data(tab)) == "Intro\na\tb"

    def test_multiple_tabs_titled(self) -> None:
        data = make_data(
            simple_tab("A", "alpha\n"),
            simple_tab("B", "beta\n", tab_id="t.1", index=1),
        )
        assert extract_plain_text(data) == "A\n\nalpha\n" + TAB_SEPARATOR + "B\n\nbeta"


class TestTruncate:

    def test_short_text_untouched(self) -> None:
        assert truncate("abc", 10) == "abc"

    def test_no_limit(self) -> None:
        assert truncate("abc", None) == "abc"

    def test_marker(self) -> None:
        warnings: list[str] = []
        assert truncate("abcdef", 3, warnings) == (
            "abc\n\n[... TRUNCATED at 3 chars (document is 6 chars) ...]"
        )
        assert warnings == ["Content truncated at 3 characters"]


class TestRenderTabList:

    def test_lists_tabs(self) -> None:
        data = make_data(
            simple_tab("Intro", "alpha\n", tab_id="t.1", child_count=1),
            simple_tab("Detail", "beta\n", tab_id="t.2", index=1),
            title="Handbook",
        )
        assert render_tab_list(data) == snapshot("""\
**Document "Handbook" has 2 tab(s):**

1. **Intro** (ID: `t.1`) [1 child tab(s)]
2. **Detail** (ID: `t.2`)\
""")

    def test_with_content_preview(self) -> None:
        data = make_data(simple_tab("Intro", "alpha\n"))

        result = render_tab_list(data, include_content=True)

        assert "   5 characters" in result
        assert "   > alpha" in result
