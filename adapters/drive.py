"""
Drive adapter: Google Drive API wrapper.

File listing and search, folder and file management, uploads, and the
comments endpoints (Docs comments live on the Drive file, not the document).

Every call passes supportsAllDrives so shared-drive files behave like
My Drive files.
"""

import mimetypes
import re
from pathlib import Path
from typing import Any

from googleapiclient.discovery import Resource
from googleapiclient.http import MediaFileUpload

from adapters.services import execute
from models import CommentData, DriveFile, ErrorKind, ToolError


# Common MIME types for reference
GOOGLE_DOC_MIME = "application/vnd.google-apps.document"
GOOGLE_SHEET_MIME = "application/vnd.google-apps.spreadsheet"
GOOGLE_FOLDER_MIME = "application/vnd.google-apps.folder"
GOOGLE_SCRIPT_MIME = "application/vnd.google-apps.script"

# Fields for listings: what the extractors render
FILE_LIST_FIELDS = (
    "nextPageToken,"
    "files(id,name,mimeType,modifiedTime,createdTime,webViewLink,owners(displayName,emailAddress))"
)

# Fields for a single file
FILE_METADATA_FIELDS = (
    "id,"
    "name,"
    "mimeType,"
    "createdTime,"
    "modifiedTime,"
    "size,"
    "owners(displayName,emailAddress),"
    "lastModifyingUser(displayName,emailAddress),"
    "webViewLink,"
    "parents,"
    "shared,"
    "description"
)

COMMENT_FIELDS = (
    "id,content,"
    "author(displayName,emailAddress),"
    "createdTime,modifiedTime,"
    "resolved,quotedFileContent,"
    "replies(id,content,action,author(displayName),createdTime)"
)

_DRIVE_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def validate_drive_id(drive_id: str, param_name: str = "folderId") -> str:
    """Reject ids outside the Drive id alphabet before they reach a query string."""
    if drive_id != "root" and not _DRIVE_ID_RE.match(drive_id):
        raise ToolError(
            f"Invalid {param_name}: must contain only alphanumeric characters, "
            "hyphens, and underscores",
            kind=ErrorKind.INVALID_INPUT,
        )
    return drive_id


def escape_query(value: str) -> str:
    """Escape a literal for a Drive `q` string ('...' quoted)."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def drive_order(order_by: str) -> str:
    """Names sort ascending, timestamps newest first."""
    return "name" if order_by == "name" else f"{order_by} desc"


# =============================================================================
# FILES
# =============================================================================


async def list_files(
    service: Resource,
    query: str,
    page_size: int,
    order_by: str | None = "modifiedTime desc",
    fields: str = FILE_LIST_FIELDS,
) -> list[DriveFile]:
    """One page of files.list. Trashed files are always excluded."""
    kwargs: dict[str, Any] = dict(
        q=f"({query}) and trashed = false" if query else "trashed = false",
        pageSize=page_size,
        fields=fields,
        supportsAllDrives=True,
        includeItemsFromAllDrives=True,
    )
    if order_by:
        kwargs["orderBy"] = order_by
    response = await execute(service.files().list(**kwargs))
    return [DriveFile.from_api(item) for item in response.get("files", [])]


async def get_file(
    service: Resource,
    file_id: str,
    fields: str = FILE_METADATA_FIELDS,
) -> dict[str, Any]:
    return await execute(
        service.files().get(fileId=file_id, fields=fields, supportsAllDrives=True)
    )


async def create_file(
    service: Resource,
    name: str,
    mime_type: str,
    parent_id: str | None = None,
) -> dict[str, Any]:
    """Create an empty Drive item (folder, Doc, Sheet)."""
    body: dict[str, Any] = {"name": name, "mimeType": mime_type}
    if parent_id:
        body["parents"] = [parent_id]
    return await execute(
        service.files().create(
            body=body,
            fields="id,name,mimeType,webViewLink,parents",
            supportsAllDrives=True,
        )
    )


async def move_file(
    service: Resource,
    file_id: str,
    new_parent_id: str,
    remove_from_all_parents: bool = True,
) -> dict[str, Any]:
    """
    Move a file by rewriting its parents.

    Two calls: files.get for the current parents, then files.update.
    """
    current = await get_file(service, file_id, fields="id,name,parents")
    kwargs: dict[str, Any] = dict(
        fileId=file_id,
        addParents=new_parent_id,
        fields="id,name,parents",
        supportsAllDrives=True,
    )
    old_parents = current.get("parents", [])
    if remove_from_all_parents and old_parents:
        kwargs["removeParents"] = ",".join(old_parents)
    return await execute(service.files().update(**kwargs))


async def copy_file(
    service: Resource,
    file_id: str,
    name: str | None = None,
    parent_id: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if name:
        body["name"] = name
    if parent_id:
        body["parents"] = [parent_id]
    return await execute(
        service.files().copy(
            fileId=file_id,
            body=body,
            fields="id,name,mimeType,webViewLink",
            supportsAllDrives=True,
        )
    )


async def rename_file(service: Resource, file_id: str, name: str) -> dict[str, Any]:
    return await execute(
        service.files().update(
            fileId=file_id,
            body={"name": name},
            fields="id,name,webViewLink",
            supportsAllDrives=True,
        )
    )


async def trash_file(service: Resource, file_id: str) -> dict[str, Any]:
    return await execute(
        service.files().update(
            fileId=file_id,
            body={"trashed": True},
            fields="id,name",
            supportsAllDrives=True,
        )
    )


async def delete_file(service: Resource, file_id: str) -> None:
    """Permanent delete. Bypasses trash."""
    await execute(service.files().delete(fileId=file_id, supportsAllDrives=True))


async def upload_file(
    service: Resource,
    path: Path,
    parent_id: str | None = None,
) -> dict[str, Any]:
    """Upload a local file as-is (no conversion to a Google format)."""
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    body: dict[str, Any] = {"name": path.name}
    if parent_id:
        body["parents"] = [parent_id]
    media = MediaFileUpload(str(path), mimetype=mime_type, resumable=False)
    return await execute(
        service.files().create(
            body=body,
            media_body=media,
            fields="id,name,webContentLink,webViewLink",
            supportsAllDrives=True,
        )
    )


async def make_public_readable(service: Resource, file_id: str) -> None:
    """Anyone-with-link reader permission (the Docs image fetcher needs it)."""
    await execute(
        service.permissions().create(
            fileId=file_id,
            body={"type": "anyone", "role": "reader"},
            supportsAllDrives=True,
        )
    )


# =============================================================================
# COMMENTS
# =============================================================================


async def list_comments(
    service: Resource,
    file_id: str,
    include_resolved: bool = True,
    max_results: int = 100,
) -> list[CommentData]:
    """All comments on a file, following pagination up to max_results."""
    comments: list[CommentData] = []
    page_token: str | None = None

    while True:
        response = await execute(
            service.comments().list(
                fileId=file_id,
                fields=f"nextPageToken,comments({COMMENT_FIELDS})",
                includeDeleted=False,
                pageSize=min(max_results - len(comments), 100),  # API max is 100
                pageToken=page_token,
            )
        )
        comments.extend(CommentData.from_api(c) for c in response.get("comments", []))

        page_token = response.get("nextPageToken")
        if not page_token or len(comments) >= max_results:
            break

    if not include_resolved:
        comments = [c for c in comments if not c.resolved]
    return comments


async def get_comment(service: Resource, file_id: str, comment_id: str) -> CommentData:
    response = await execute(
        service.comments().get(fileId=file_id, commentId=comment_id, fields=COMMENT_FIELDS)
    )
    return CommentData.from_api(response)


async def create_comment(
    service: Resource,
    file_id: str,
    content: str,
    quoted_text: str | None = None,
) -> CommentData:
    """
    Add a file-level comment.

    quotedFileContent records the text being discussed; the Drive API cannot
    anchor a new comment to a Docs text range.
    """
    body: dict[str, Any] = {"content": content}
    if quoted_text:
        body["quotedFileContent"] = {"mimeType": "text/plain", "value": quoted_text}
    response = await execute(
        service.comments().create(fileId=file_id, body=body, fields=COMMENT_FIELDS)
    )
    return CommentData.from_api(response)


async def create_reply(
    service: Resource,
    file_id: str,
    comment_id: str,
    content: str | None = None,
    action: str | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if content:
        body["content"] = content
    if action:
        body["action"] = action
    return await execute(
        service.replies().create(
            fileId=file_id,
            commentId=comment_id,
            body=body,
            fields="id,content,action,createdTime",
        )
    )


async def delete_comment(service: Resource, file_id: str, comment_id: str) -> None:
    await execute(service.comments().delete(fileId=file_id, commentId=comment_id))
