"""
Drive extractor: pure functions, no I/O.

Renders file listings and file metadata as markdown. Subfolders before files,
IDs in backticks so they can be copied straight into the next tool call.
"""

from typing import Any

from models import DriveFile

FOLDER_MIME = "application/vnd.google-apps.folder"


def _format_date(iso_date: str | None) -> str:
    if not iso_date:
        return "unknown"
    return iso_date[:16].replace("T", " ")


def format_file_entry(number: int, file: DriveFile) -> str:
    lines = [f"{number}. **{file.name}**", f"   ID: `{file.id}`"]
    if file.modified_time:
        lines.append(f"   Modified: {_format_date(file.modified_time)}")
    if file.owners:
        lines.append(f"   Owner: {', '.join(file.owners)}")
    if file.web_link:
        lines.append(f"   Link: {file.web_link}")
    return "\n".join(lines)


def extract_file_list(title: str, files: list[DriveFile], empty: str) -> str:
    """
    Numbered listing:

        **Google Docs (2 found)**

        1. **Budget 2026**
           ID: `1abc...`
           Modified: 2026-01-15 10:30
    """
    if not files:
        return empty
    entries = "\n\n".join(format_file_entry(i, f) for i, f in enumerate(files, start=1))
    return f"**{title} ({len(files)} found)**\n\n{entries}"


def extract_folder_content(folder_id: str, items: list[DriveFile]) -> str:
    """Folder listing: subfolders first, then files."""
    subfolders = [f for f in items if f.mime_type == FOLDER_MIME]
    files = [f for f in items if f.mime_type != FOLDER_MIME]

    lines = [f"**Contents of folder `{folder_id}`** ({len(items)} items)", ""]

    lines.append("## Subfolders")
    lines.append("")
    if subfolders:
        for sf in subfolders:
            lines.append(f"- {sf.name}/  →  `{sf.id}`")
    else:
        lines.append("**(none)**")
    lines.append("")

    lines.append("## Files")
    lines.append("")
    if files:
        for f in files:
            kind = f.mime_type.rsplit(".", 1)[-1] if f.mime_type else "file"
            lines.append(f"- {f.name} ({kind})  →  `{f.id}`")
    else:
        lines.append("**(none)**")

    return "\n".join(lines).rstrip()


def extract_file_info(metadata: dict[str, Any], heading: str = "Document") -> str:
    """files.get metadata as a markdown block."""
    lines = [
        f"**{heading}:** {metadata.get('name', 'Untitled')}",
        f"**ID:** {metadata.get('id', '')}",
        f"**Type:** {metadata.get('mimeType', 'unknown')}",
        f"**Created:** {_format_date(metadata.get('createdTime'))}",
        f"**Modified:** {_format_date(metadata.get('modifiedTime'))}",
    ]
    owners = [
        o.get("displayName") or o.get("emailAddress", "")
        for o in metadata.get("owners", [])
    ]
    if owners:
        lines.append(f"**Owner:** {', '.join(owners)}")
    modifier = metadata.get("lastModifyingUser", {})
    if modifier:
        lines.append(f"**Last modified by:** {modifier.get('displayName') or modifier.get('emailAddress', '')}")
    if "shared" in metadata:
        lines.append(f"**Shared:** {'yes' if metadata['shared'] else 'no'}")
    if metadata.get("parents"):
        lines.append(f"**Parent folder(s):** {', '.join(metadata['parents'])}")
    if metadata.get("webViewLink"):
        lines.append(f"**Link:** {metadata['webViewLink']}")
    if metadata.get("description"):
        lines.append(f"**Description:** {metadata['description']}")
    return "\n".join(lines)
