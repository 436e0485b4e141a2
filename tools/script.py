"""
Apps Script tools: container-bound projects and their source files.

The Apps Script API has no "list projects" endpoint; standalone projects are
Drive files of type application/vnd.google-apps.script, so listing goes
through Drive.
"""

from typing import Literal

from pydantic import Field, StrictInt

from adapters.drive import GOOGLE_SCRIPT_MIME, list_files
from adapters.services import ServiceName, execute
from extractors.script import extract_project_list, extract_script_content, parse_script_files
from registry import NonEmptyStr, ToolContext, ToolInput, ToolSet

script_tools = ToolSet("Apps Script")

SCRIPT = (ServiceName.SCRIPT,)


class CreateScriptProjectInput(ToolInput):
    title: NonEmptyStr = Field(description="Name of the new Apps Script project.")
    parent_id: NonEmptyStr = Field(
        description="ID of the Doc, Sheet, Form or Slides file the script is bound to."
    )


@script_tools.tool(
    "create_script_project",
    CreateScriptProjectInput,
    services=SCRIPT,
    failure='Failed to create Apps Script project "{title}" bound to {parent_id}',
)
async def create_script_project(params: CreateScriptProjectInput, ctx: ToolContext) -> str:
    """
    Create a new Apps Script project bound to a Google Doc, Sheet, Form or Slides file.

    Returns the new Script ID. Add code to it with update_script_content.
    """
    ctx.log.info(f'Creating script project "{params.title}" for {params.parent_id}')
    project = await execute(
        ctx.script.projects().create(
            body={"title": params.title, "parentId": params.parent_id}
        )
    )
    script_id = project.get("scriptId", "")
    return (
        "Apps Script project created successfully!\n\n"
        f"**Script ID:** {script_id}\n"
        f"**Title:** {project.get('title', params.title)}\n"
        f"**Bound to:** {project.get('parentId', params.parent_id)}\n\n"
        "Use this Script ID with update_script_content to add your code."
    )


class ScriptFileInput(ToolInput):
    name: NonEmptyStr = Field(description='File name without extension, e.g. "Code" or "appsscript".')
    type: Literal["SERVER_JS", "JSON"] = Field(
        description="SERVER_JS for .gs code, JSON for the appsscript manifest."
    )
    source: str = Field(description="Full source text of the file.")


class UpdateScriptContentInput(ToolInput):
    script_id: NonEmptyStr = Field(description="The Script ID of the project to overwrite.")
    files: list[ScriptFileInput] = Field(
        min_length=1,
        description="The complete file set. Files not listed are removed from the project.",
    )


@script_tools.tool(
    "update_script_content",
    UpdateScriptContentInput,
    services=SCRIPT,
    failure="Failed to update content of Apps Script project {script_id}",
)
async def update_script_content(params: UpdateScriptContentInput, ctx: ToolContext) -> str:
    """
    Replace ALL files of an Apps Script project.

    This overwrites the entire project: include every file you want to keep,
    including the appsscript manifest (type JSON).
    """
    files = [f.model_dump() for f in params.files]
    ctx.log.info(f"Writing {len(files)} file(s) to script {params.script_id}")
    await execute(
        ctx.script.projects().updateContent(
            scriptId=params.script_id,
            body={"files": files},
        )
    )
    listing = "\n".join(f"- {f.name} ({f.type})" for f in params.files)
    return (
        f"Script content updated successfully!\n\n"
        f"**Script ID:** {params.script_id}\n"
        f"**Files updated:**\n{listing}"
    )


class GetScriptContentInput(ToolInput):
    script_id: NonEmptyStr = Field(description="The Script ID of the project.")


@script_tools.tool(
    "get_script_content",
    GetScriptContentInput,
    services=SCRIPT,
    failure="Failed to get content of Apps Script project {script_id}",
)
async def get_script_content(params: GetScriptContentInput, ctx: ToolContext) -> str:
    """Get every file of an Apps Script project with its type and source code."""
    content = await execute(ctx.script.projects().getContent(scriptId=params.script_id))
    return extract_script_content(params.script_id, parse_script_files(content))


class ListScriptProjectsInput(ToolInput):
    page_size: StrictInt = Field(
        default=10, ge=1, le=50, description="Maximum number of projects to return (1-50)."
    )


@script_tools.tool(
    "list_script_projects",
    ListScriptProjectsInput,
    services=(ServiceName.DRIVE,),
    failure="Failed to list Apps Script projects",
)
async def list_script_projects(params: ListScriptProjectsInput, ctx: ToolContext) -> str:
    """
    List standalone Apps Script projects in Google Drive, most recently modified first.

    Container-bound scripts live inside their parent file and are not listed.
    """
    projects = await list_files(
        ctx.drive,
        query=f"mimeType='{GOOGLE_SCRIPT_MIME}'",
        page_size=params.page_size,
        order_by="modifiedTime desc",
        fields="files(id,name,createdTime,modifiedTime)",
    )
    return extract_project_list(projects)
