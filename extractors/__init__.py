"""
Extractors: Pure functions for rendering API data as text.

No MCP awareness, no Google API calls. Just transform input → output.
Easily testable with fixtures.
"""

from .comments import extract_comments_content, format_comment
from .docs import extract_markdown, extract_plain_text, render_tab_list
from .drive import extract_file_info, extract_file_list, extract_folder_content
from .script import extract_project_list, extract_script_content, parse_script_files
from .sheets import extract_range_content, extract_spreadsheet_info

__all__ = [
    "extract_comments_content",
    "format_comment",
    "extract_markdown",
    "extract_plain_text",
    "render_tab_list",
    "extract_file_info",
    "extract_file_list",
    "extract_folder_content",
    "extract_project_list",
    "extract_script_content",
    "parse_script_files",
    "extract_range_content",
    "extract_spreadsheet_info",
]
