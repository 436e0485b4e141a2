"""
Tools: the catalog of operations exposed to agents.

Each module owns one ToolSet (a category). build_registry() registers them
all; server.py and cli.py never import individual tools.

    Google Docs           15
    Google Docs Comments   6
    Google Sheets         11
    Google Drive          13
    Apps Script            4
"""

from registry import ToolRegistry, ToolSet

from .comments import comment_tools
from .docs import docs_tools
from .drive import drive_tools
from .script import script_tools
from .sheets import sheet_tools

# Listing order for tools/list, the CLI and the docs resources
TOOLSETS: tuple[ToolSet, ...] = (
    docs_tools,
    comment_tools,
    sheet_tools,
    drive_tools,
    script_tools,
)

TOOL_CATEGORIES: dict[str, list[str]] = {
    toolset.category: [definition.name for definition in toolset]
    for toolset in TOOLSETS
}


def build_registry() -> ToolRegistry:
    """A fresh registry holding the full catalog."""
    registry = ToolRegistry()
    for toolset in TOOLSETS:
        registry.register_all(toolset)
    return registry


__all__ = ["TOOLSETS", "TOOL_CATEGORIES", "build_registry"]
