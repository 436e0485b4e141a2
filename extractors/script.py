"""
Apps Script extractor: renders project content and project listings.
"""

from typing import Any

from models import DriveFile, ScriptFile

NO_PROJECTS = "No projects found."

FENCE_LANGUAGE = {"SERVER_JS": "javascript", "JSON": "json", "HTML": "html"}


def parse_script_files(content: dict[str, Any]) -> list[ScriptFile]:
    return [
        ScriptFile(name=f.get("name", ""), type=f.get("type", ""), source=f.get("source", ""))
        for f in content.get("files", [])
    ]


def extract_script_content(script_id: str, files: list[ScriptFile]) -> str:
    """
    Every file with its type and fenced source:

        ### Code (SERVER_JS)
        ```javascript
        function onOpen() {}
        ```
    """
    if not files:
        return f"**Script ID:** {script_id}\n\nThis project has no files."

    blocks = [f"**Script ID:** {script_id}", f"**Files ({len(files)}):**"]
    for f in files:
        language = FENCE_LANGUAGE.get(f.type, "json")
        blocks.append(f"### {f.name} ({f.type})\n```{language}\n{f.source}\n```")
    return "\n\n".join(blocks)


def extract_project_list(projects: list[DriveFile]) -> str:
    if not projects:
        return NO_PROJECTS

    entries = []
    for i, project in enumerate(projects, start=1):
        entries.append(
            f"{i}. **{project.name}**\n"
            f"   ID: {project.id}\n"
            f"   Modified: {project.modified_time or 'unknown'}"
        )
    return f"**Apps Script Projects ({len(projects)} found)**\n\n" + "\n\n".join(entries)
