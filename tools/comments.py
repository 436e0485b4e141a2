"""
Google Docs comment tools.

Comments belong to the Drive file, so these go through the Drive v3
comments/replies endpoints rather than the Docs API.
"""

from pydantic import Field, StrictBool

from adapters import drive as drive_api
from adapters.services import ServiceName
from extractors.comments import extract_comments_content, format_comment
from registry import NonEmptyStr, ToolContext, ToolInput, ToolSet

comment_tools = ToolSet("Google Docs Comments")

DRIVE = (ServiceName.DRIVE,)


class ListCommentsInput(ToolInput):
    document_id: NonEmptyStr = Field(description="The document ID.")
    include_resolved: StrictBool = Field(default=True, description="Include resolved comments.")


@comment_tools.tool(
    "list_comments",
    ListCommentsInput,
    services=DRIVE,
    failure="Failed to list comments on document {document_id}",
)
async def list_comments(params: ListCommentsInput, ctx: ToolContext) -> str:
    """List the comments on a Google Doc with their replies and IDs."""
    comments = await drive_api.list_comments(
        ctx.drive, params.document_id, include_resolved=params.include_resolved
    )
    return extract_comments_content(params.document_id, comments)


class CommentInput(ToolInput):
    document_id: NonEmptyStr = Field(description="The document ID.")
    comment_id: NonEmptyStr = Field(description="The comment ID (from list_comments).")


@comment_tools.tool(
    "get_comment",
    CommentInput,
    services=DRIVE,
    failure="Failed to get comment {comment_id} on document {document_id}",
)
async def get_comment(params: CommentInput, ctx: ToolContext) -> str:
    """Get one comment and its replies."""
    comment = await drive_api.get_comment(ctx.drive, params.document_id, params.comment_id)
    return format_comment(comment).strip()


class AddCommentInput(ToolInput):
    document_id: NonEmptyStr = Field(description="The document ID.")
    content: NonEmptyStr = Field(description="The comment text.")
    quoted_text: str | None = Field(
        default=None, description="Document text the comment refers to (shown as a quote)."
    )


@comment_tools.tool(
    "add_comment",
    AddCommentInput,
    services=DRIVE,
    failure="Failed to add comment to document {document_id}",
)
async def add_comment(params: AddCommentInput, ctx: ToolContext) -> str:
    """
    Add a comment to a Google Doc.

    The comment is attached to the document as a whole; quotedText records
    which passage it is about.
    """
    comment = await drive_api.create_comment(
        ctx.drive, params.document_id, params.content, params.quoted_text
    )
    return f"Comment added (ID: {comment.id})."


class ReplyToCommentInput(CommentInput):
    content: NonEmptyStr = Field(description="The reply text.")


@comment_tools.tool(
    "reply_to_comment",
    ReplyToCommentInput,
    services=DRIVE,
    failure="Failed to reply to comment {comment_id} on document {document_id}",
)
async def reply_to_comment(params: ReplyToCommentInput, ctx: ToolContext) -> str:
    """Reply to an existing comment."""
    reply = await drive_api.create_reply(
        ctx.drive, params.document_id, params.comment_id, content=params.content
    )
    return f"Reply added to comment {params.comment_id} (reply ID: {reply.get('id', '')})."


@comment_tools.tool(
    "resolve_comment",
    CommentInput,
    services=DRIVE,
    failure="Failed to resolve comment {comment_id} on document {document_id}",
)
async def resolve_comment(params: CommentInput, ctx: ToolContext) -> str:
    """Mark a comment as resolved."""
    await drive_api.create_reply(
        ctx.drive, params.document_id, params.comment_id, action="resolve"
    )
    return f"Comment {params.comment_id} marked as resolved."


@comment_tools.tool(
    "delete_comment",
    CommentInput,
    services=DRIVE,
    failure="Failed to delete comment {comment_id} on document {document_id}",
)
async def delete_comment(params: CommentInput, ctx: ToolContext) -> str:
    """Delete a comment and all of its replies."""
    await drive_api.delete_comment(ctx.drive, params.document_id, params.comment_id)
    return f"Comment {params.comment_id} deleted."
