"""
Tests for comments extractor.

Tests pure extraction functions with no API calls.
"""

from inline_snapshot import snapshot

from extractors.comments import extract_comments_content, format_comment
from models import CommentData, CommentReply


def make_comment(**overrides) -> CommentData:
    fields = dict(
        id="c1",
        content="Should we raise the budget?",
        author_name="Alice Smith",
        author_email="alice@example.com",
        created_time="2026-01-15T10:30:00.000Z",
        quoted_text="Revenue target: $2.5M",
        replies=[
            CommentReply(id="r1", content="Yes.", author_name="Bob", created_time="2026-01-16T09:00:00Z"),
            CommentReply(id="r2", content="", author_name="Alice Smith", action="resolve"),
        ],
        resolved=True,
    )
    fields.update(overrides)
    return CommentData(**fields)


class TestFormatComment:

    def test_full_comment(self) -> None:
        assert format_comment(make_comment()) == snapshot("""\
### [Alice Smith <alice@example.com>] • 2026-01-15
**ID:** c1
*[RESOLVED]*

> Revenue target: $2.5M

Should we raise the budget?

**Replies:**
- **[Bob]** (2026-01-16): Yes.
- **[Alice Smith]**: *(resolved)*
""")

    def test_minimal_comment(self) -> None:
        comment = CommentData(id="c2", content="Typo here", author_name="Unknown")
        assert format_comment(comment) == "### [Unknown]\n**ID:** c2\n\nTypo here\n"

    def test_empty_replies_skipped(self) -> None:
        comment = make_comment(replies=[CommentReply(id="r", content="", author_name="X")])
        assert "**Replies:**" not in format_comment(comment)


class TestExtractCommentsContent:

    def test_no_comments(self) -> None:
        assert extract_comments_content("d1", []) == (
            "## Comments on d1 (0 total)\n\n*No comments found.*"
        )

    def test_comments_separated_by_rules(self) -> None:
        result = extract_comments_content(
            "d1", [make_comment(), make_comment(id="c2", resolved=False, replies=[])]
        )

        assert result.startswith("## Comments on d1 (2 total)\n\n### [Alice Smith")
        assert result.count("\n---\n") == 1
        assert result.index("**ID:** c1") < result.index("**ID:** c2")


class TestCommentDataFromApi:

    def test_missing_author_defaults(self) -> None:
        comment = CommentData.from_api({"id": "c1", "content": "hi"})
        assert comment.author_name == "Unknown"
        assert comment.quoted_text == ""
        assert comment.replies == []

    def test_replies_parsed(self) -> None:
        comment = CommentData.from_api({
            "id": "c1",
            "content": "hi",
            "replies": [{"id": "r1", "content": "", "action": "reopen", "author": {}}],
        })
        assert comment.replies[0].action == "reopen"
        assert comment.replies[0].author_name == "Unknown"
