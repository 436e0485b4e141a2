"""
Comments Extractor: Pure functions for converting comments to markdown.

No API calls, no MCP awareness.
"""

from models import CommentData


def _format_date(iso_date: str | None) -> str:
    """2026-01-15T10:30:00.000Z → 2026-01-15."""
    return iso_date[:10] if iso_date else ""


def _format_author(name: str, email: str | None) -> str:
    if email:
        return f"{name} <{email}>"
    return name


def format_comment(comment: CommentData) -> str:
    """
    A single comment with its replies:

        ### [Alice Smith <alice@example.com>] • 2026-01-15
        **ID:** AAAA1234
        > Quoted text from document

        This is the comment content.

        **Replies:**
        - **[Bob Jones]** (2026-01-16): I agree with this.
    """
    parts: list[str] = []

    author = _format_author(comment.author_name, comment.author_email)
    date = _format_date(comment.created_time)
    parts.append(f"### [{author}] • {date}\n" if date else f"### [{author}]\n")
    parts.append(f"**ID:** {comment.id}\n")

    if comment.resolved:
        parts.append("*[RESOLVED]*\n")
    if comment.quoted_text:
        parts.append(f"\n> {comment.quoted_text}\n")
    if comment.content:
        parts.append(f"\n{comment.content}\n")

    replies = [r for r in comment.replies if r.content or r.action]
    if replies:
        parts.append("\n**Replies:**\n")
        for reply in replies:
            text = reply.content or f"*({reply.action}d)*"
            reply_date = _format_date(reply.created_time)
            when = f" ({reply_date})" if reply_date else ""
            parts.append(f"- **[{reply.author_name}]**{when}: {text}\n")

    return "".join(parts)


def extract_comments_content(document_id: str, comments: list[CommentData]) -> str:
    """All comments on a file, separated by rules."""
    header = f"## Comments on {document_id} ({len(comments)} total)\n\n"
    if not comments:
        return header + "*No comments found.*"
    return (header + "\n---\n\n".join(format_comment(c) for c in comments)).strip()
