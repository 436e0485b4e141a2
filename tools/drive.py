"""
Google Drive tools: finding documents, folders, and moving files around.
"""

from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import Field, StrictBool, StrictInt, model_validator

from adapters import drive as drive_api
from adapters.docs import batch_update, insert_text_request
from adapters.drive import (
    GOOGLE_DOC_MIME,
    GOOGLE_FOLDER_MIME,
    drive_order,
    escape_query,
    validate_drive_id,
)
from adapters.services import ServiceName
from extractors.drive import extract_file_info, extract_file_list, extract_folder_content
from models import ErrorKind, ToolError
from registry import NonEmptyStr, ToolContext, ToolInput, ToolSet

drive_tools = ToolSet("Google Drive")

DRIVE = (ServiceName.DRIVE,)

OrderBy = Literal["name", "modifiedTime", "createdTime"]


# =============================================================================
# FINDING DOCUMENTS
# =============================================================================


class ListGoogleDocsInput(ToolInput):
    max_results: StrictInt = Field(default=20, ge=1, le=100)
    query: str | None = Field(default=None, description="Only documents whose name contains this text.")
    order_by: OrderBy = Field(default="modifiedTime")


@drive_tools.tool(
    "list_google_docs",
    ListGoogleDocsInput,
    services=DRIVE,
    failure="Failed to list Google Docs",
)
async def list_google_docs(params: ListGoogleDocsInput, ctx: ToolContext) -> str:
    """List Google Docs in Drive, optionally filtered by name."""
    query = f"mimeType='{GOOGLE_DOC_MIME}'"
    if params.query:
        query += f" and name contains '{escape_query(params.query)}'"
    files = await drive_api.list_files(ctx.drive, query, params.max_results, drive_order(params.order_by))
    return extract_file_list("Google Docs", files, "No Google Docs found.")


class SearchGoogleDocsInput(ToolInput):
    search_query: NonEmptyStr = Field(description="Text to search for.")
    search_in: Literal["name", "content", "both"] = Field(default="both")
    max_results: StrictInt = Field(default=10, ge=1, le=50)


@drive_tools.tool(
    "search_google_docs",
    SearchGoogleDocsInput,
    services=DRIVE,
    failure='Failed to search Google Docs for "{search_query}"',
)
async def search_google_docs(params: SearchGoogleDocsInput, ctx: ToolContext) -> str:
    """Search Google Docs by name, by content, or both."""
    term = escape_query(params.search_query)
    clauses = {
        "name": f"name contains '{term}'",
        "content": f"fullText contains '{term}'",
        "both": f"(name contains '{term}' or fullText contains '{term}')",
    }
    query = f"mimeType='{GOOGLE_DOC_MIME}' and {clauses[params.search_in]}"
    # fullText results come back in relevance order; don't override it
    files = await drive_api.list_files(ctx.drive, query, params.max_results, order_by=None)
    return extract_file_list(
        f'Search results for "{params.search_query}"',
        files,
        f'No Google Docs found matching "{params.search_query}".',
    )


class GetRecentGoogleDocsInput(ToolInput):
    max_results: StrictInt = Field(default=10, ge=1, le=50)
    days_back: StrictInt = Field(default=30, ge=1, le=365)


@drive_tools.tool(
    "get_recent_google_docs",
    GetRecentGoogleDocsInput,
    services=DRIVE,
    failure="Failed to get recent Google Docs",
)
async def get_recent_google_docs(params: GetRecentGoogleDocsInput, ctx: ToolContext) -> str:
    """List Google Docs modified in the last N days, newest first."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=params.days_back)
    query = (
        f"mimeType='{GOOGLE_DOC_MIME}' "
        f"and modifiedTime > '{cutoff.strftime('%Y-%m-%dT%H:%M:%S')}'"
    )
    files = await drive_api.list_files(ctx.drive, query, params.max_results, "modifiedTime desc")
    return extract_file_list(
        f"Google Docs modified in the last {params.days_back} days",
        files,
        f"No Google Docs modified in the last {params.days_back} days.",
    )


class GetDocumentInfoInput(ToolInput):
    document_id: NonEmptyStr


@drive_tools.tool(
    "get_document_info",
    GetDocumentInfoInput,
    services=DRIVE,
    failure="Failed to get info for document {document_id}",
)
async def get_document_info(params: GetDocumentInfoInput, ctx: ToolContext) -> str:
    """Get a document's metadata: owner, dates, sharing, parent folders, link."""
    metadata = await drive_api.get_file(ctx.drive, params.document_id)
    return extract_file_info(metadata)


# =============================================================================
# FOLDERS
# =============================================================================


class CreateFolderInput(ToolInput):
    name: NonEmptyStr
    parent_folder_id: str | None = Field(default=None, description="Defaults to My Drive root.")


@drive_tools.tool(
    "create_folder",
    CreateFolderInput,
    services=DRIVE,
    failure='Failed to create folder "{name}"',
)
async def create_folder(params: CreateFolderInput, ctx: ToolContext) -> str:
    """Create a folder in Google Drive."""
    folder = await drive_api.create_file(
        ctx.drive, params.name, GOOGLE_FOLDER_MIME, params.parent_folder_id
    )
    return (
        f'Created folder "{folder.get("name", params.name)}"\n'
        f"**ID:** {folder['id']}\n"
        f"**Link:** {folder.get('webViewLink', '')}"
    )


class ListFolderContentsInput(ToolInput):
    folder_id: NonEmptyStr = Field(default="root", description='Folder ID, or "root" for My Drive.')
    include_subfolders: StrictBool = True
    include_files: StrictBool = True
    max_results: StrictInt = Field(default=50, ge=1, le=100)

    @model_validator(mode="after")
    def require_something(self) -> "ListFolderContentsInput":
        if not (self.include_subfolders or self.include_files):
            raise ValueError("includeSubfolders and includeFiles cannot both be false")
        return self


@drive_tools.tool(
    "list_folder_contents",
    ListFolderContentsInput,
    services=DRIVE,
    failure="Failed to list contents of folder {folder_id}",
)
async def list_folder_contents(params: ListFolderContentsInput, ctx: ToolContext) -> str:
    """List the files and subfolders directly inside a folder (not recursive)."""
    folder_id = validate_drive_id(params.folder_id)
    query = f"'{folder_id}' in parents"
    if not params.include_files:
        query += f" and mimeType = '{GOOGLE_FOLDER_MIME}'"
    elif not params.include_subfolders:
        query += f" and mimeType != '{GOOGLE_FOLDER_MIME}'"

    items = await drive_api.list_files(ctx.drive, query, params.max_results, "folder,name")
    if not items:
        return f"Folder `{folder_id}` is empty."
    return extract_folder_content(folder_id, items)


class GetFolderInfoInput(ToolInput):
    folder_id: NonEmptyStr


@drive_tools.tool(
    "get_folder_info",
    GetFolderInfoInput,
    services=DRIVE,
    failure="Failed to get info for folder {folder_id}",
)
async def get_folder_info(params: GetFolderInfoInput, ctx: ToolContext) -> str:
    """Get a folder's metadata."""
    metadata = await drive_api.get_file(ctx.drive, params.folder_id)
    if metadata.get("mimeType") != GOOGLE_FOLDER_MIME:
        raise ToolError(
            f"{params.folder_id} is not a folder (type: {metadata.get('mimeType', 'unknown')})",
            kind=ErrorKind.INVALID_INPUT,
        )
    return extract_file_info(metadata, heading="Folder")


# =============================================================================
# FILE OPERATIONS
# =============================================================================


class MoveFileInput(ToolInput):
    file_id: NonEmptyStr
    new_parent_id: NonEmptyStr = Field(description="Destination folder ID.")
    remove_from_all_parents: StrictBool = Field(
        default=True, description="False keeps the file in its current folders as well."
    )


@drive_tools.tool(
    "move_file",
    MoveFileInput,
    services=DRIVE,
    failure="Failed to move file {file_id} to folder {new_parent_id}",
)
async def move_file(params: MoveFileInput, ctx: ToolContext) -> str:
    """Move a file or folder to another folder."""
    updated = await drive_api.move_file(
        ctx.drive, params.file_id, params.new_parent_id, params.remove_from_all_parents
    )
    return f'Moved "{updated.get("name", params.file_id)}" to folder {params.new_parent_id}.'


class CopyFileInput(ToolInput):
    file_id: NonEmptyStr
    new_name: str | None = Field(default=None, description='Defaults to "Copy of <name>".')
    parent_folder_id: str | None = None


@drive_tools.tool(
    "copy_file",
    CopyFileInput,
    services=DRIVE,
    failure="Failed to copy file {file_id}",
)
async def copy_file(params: CopyFileInput, ctx: ToolContext) -> str:
    """Make a copy of a file."""
    copied = await drive_api.copy_file(
        ctx.drive, params.file_id, params.new_name, params.parent_folder_id
    )
    return (
        f'Copied to "{copied.get("name", "")}"\n'
        f"**ID:** {copied['id']}\n"
        f"**Link:** {copied.get('webViewLink', '')}"
    )


class RenameFileInput(ToolInput):
    file_id: NonEmptyStr
    new_name: NonEmptyStr


@drive_tools.tool(
    "rename_file",
    RenameFileInput,
    services=DRIVE,
    failure='Failed to rename file {file_id} to "{new_name}"',
)
async def rename_file(params: RenameFileInput, ctx: ToolContext) -> str:
    """Rename a file or folder."""
    updated = await drive_api.rename_file(ctx.drive, params.file_id, params.new_name)
    return f'Renamed file {params.file_id} to "{updated.get("name", params.new_name)}".'


class DeleteFileInput(ToolInput):
    file_id: NonEmptyStr
    skip_trash: StrictBool = Field(default=False, description="Delete permanently instead of trashing.")


@drive_tools.tool(
    "delete_file",
    DeleteFileInput,
    services=DRIVE,
    failure="Failed to delete file {file_id}",
)
async def delete_file(params: DeleteFileInput, ctx: ToolContext) -> str:
    """Move a file to the trash, or delete it permanently with skipTrash."""
    if params.skip_trash:
        await drive_api.delete_file(ctx.drive, params.file_id)
        return f"Permanently deleted file {params.file_id}."
    trashed = await drive_api.trash_file(ctx.drive, params.file_id)
    return f'Moved "{trashed.get("name", params.file_id)}" to the trash.'


# =============================================================================
# CREATING DOCUMENTS
# =============================================================================


class CreateDocumentInput(ToolInput):
    title: NonEmptyStr
    parent_folder_id: str | None = None
    initial_content: str | None = Field(default=None, description="Text to start the document with.")


@drive_tools.tool(
    "create_document",
    CreateDocumentInput,
    services=(ServiceName.DRIVE, ServiceName.DOCS),
    failure='Failed to create document "{title}"',
)
async def create_document(params: CreateDocumentInput, ctx: ToolContext) -> str:
    """Create a new Google Doc, optionally in a folder and with initial text."""
    doc = await drive_api.create_file(ctx.drive, params.title, GOOGLE_DOC_MIME, params.parent_folder_id)
    if params.initial_content:
        await batch_update(ctx.docs, doc["id"], [insert_text_request(1, params.initial_content)])
    return (
        f'Created document "{doc.get("name", params.title)}"\n'
        f"**ID:** {doc['id']}\n"
        f"**Link:** {doc.get('webViewLink', '')}"
    )


class CreateFromTemplateInput(ToolInput):
    template_id: NonEmptyStr
    new_title: NonEmptyStr
    parent_folder_id: str | None = None
    replacements: dict[str, str] | None = Field(
        default=None,
        description='Literal text replacements, e.g. {"{{name}}": "Ada"}. Case-sensitive.',
    )


@drive_tools.tool(
    "create_from_template",
    CreateFromTemplateInput,
    services=(ServiceName.DRIVE, ServiceName.DOCS),
    failure="Failed to create a document from template {template_id}",
)
async def create_from_template(params: CreateFromTemplateInput, ctx: ToolContext) -> str:
    """Copy a template document and fill in placeholder text."""
    copied = await drive_api.copy_file(
        ctx.drive, params.template_id, params.new_title, params.parent_folder_id
    )
    lines = [
        f'Created "{copied.get("name", params.new_title)}" from template {params.template_id}',
        f"**ID:** {copied['id']}",
        f"**Link:** {copied.get('webViewLink', '')}",
    ]

    if params.replacements:
        requests = [
            {"replaceAllText": {"containsText": {"text": key, "matchCase": True}, "replaceText": value}}
            for key, value in params.replacements.items()
        ]
        result = await batch_update(ctx.docs, copied["id"], requests)
        changed = sum(
            reply.get("replaceAllText", {}).get("occurrencesChanged", 0)
            for reply in result.get("replies", [])
        )
        lines.append(f"Replaced {changed} placeholder occurrence(s).")

    return "\n".join(lines)
