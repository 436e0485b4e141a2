"""
OAuth Configuration - Single Source of Truth

All OAuth and runtime parameters defined here. Do not duplicate elsewhere.
Each value can be overridden with a SCRIVENER_* environment variable.
"""

import os
from pathlib import Path

# Package root (where this file lives)
_PACKAGE_ROOT = Path(__file__).parent


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


# OAuth scopes for scrivener
SCOPES = [
    # Docs: read + edit document bodies
    'https://www.googleapis.com/auth/documents',

    # Sheets: read + write values, filters, formatting
    'https://www.googleapis.com/auth/spreadsheets',

    # Drive: file management, comments, uploads for inline images
    'https://www.googleapis.com/auth/drive',

    # Apps Script: create projects, read/write project content
    'https://www.googleapis.com/auth/script.projects',
]

# OAuth server port (localhost callback receiver)
OAUTH_PORT = int(os.environ.get("SCRIVENER_OAUTH_PORT", 3000))

# OAuth client secrets (downloaded from GCP Console as a Desktop app client)
CREDENTIALS_FILE = Path(
    os.environ.get("SCRIVENER_CREDENTIALS_FILE", _PACKAGE_ROOT / 'credentials.json')
)

# Local token storage (user's OAuth tokens, not shared)
# Absolute path so it works regardless of cwd when MCP runs
TOKEN_FILE = Path(os.environ.get("SCRIVENER_TOKEN_FILE", _PACKAGE_ROOT / 'token.json'))

# Upper bound on the whole authorization step, browser round-trip included
AUTH_TIMEOUT_SECONDS = int(os.environ.get("SCRIVENER_AUTH_TIMEOUT", 300))

# Default timeout for all Google API calls (seconds)
# Prevents indefinite hangs when APIs are slow or connections stall
API_TIMEOUT = int(os.environ.get("SCRIVENER_API_TIMEOUT", 60))

# Whether the server may open a browser when no stored token exists.
# Off for headless hosts: run `python -m auth --manual` once instead.
INTERACTIVE_AUTH = _env_flag("SCRIVENER_INTERACTIVE_AUTH", True)

LOG_LEVEL = os.environ.get("SCRIVENER_LOG_LEVEL", "INFO")
