#!/usr/bin/env python3
"""
CLI interface for scrivener.

Usage:
    scrivener tools
    scrivener describe list_script_projects
    scrivener call list_script_projects --args '{"pageSize": 5}'
    scrivener check

Same registry and dispatcher as the MCP server, so agents without MCP
support get identical validation, behavior and error messages.
"""

import argparse
import asyncio
import json
import sys

from logging_config import configure_logging
from models import ScrivenerError, ToolFailure
from oauth_config import CREDENTIALS_FILE, INTERACTIVE_AUTH, LOG_LEVEL, SCOPES, TOKEN_FILE
from resources.tools import URI_PREFIX, ToolResourceRegistry
from tools import build_registry


def cmd_tools(args: argparse.Namespace) -> None:
    """List the catalog, grouped by category."""
    registry = build_registry()
    for category, names in registry.categories().items():
        print(f"{category} ({len(names)})")
        for name in names:
            definition = registry.get(name)
            summary = definition.summary if definition else ""
            print(f"  {name:<28} {summary}")
        print()


def cmd_describe(args: argparse.Namespace) -> None:
    """Print a tool's documentation page."""
    docs = ToolResourceRegistry(build_registry())
    try:
        resource = docs.get_resource(f"{URI_PREFIX}{args.tool}")
    except KeyError:
        print(f"Unknown tool: {args.tool}", file=sys.stderr)
        sys.exit(1)
    print(resource["text"])


def cmd_call(args: argparse.Namespace) -> None:
    """Invoke one tool through the dispatcher."""
    # Imported here: building the session stack is only needed for calls
    from server import create_dispatcher

    try:
        arguments = json.loads(args.args) if args.args else {}
    except json.JSONDecodeError as e:
        print(json.dumps({"error": True, "kind": "invalid_input",
                          "message": f"--args is not valid JSON: {e}"}, indent=2))
        sys.exit(1)

    dispatcher = create_dispatcher()
    try:
        result = asyncio.run(dispatcher.dispatch(args.tool, arguments))
    except ScrivenerError as e:
        print(json.dumps(e.to_dict(), indent=2))
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif isinstance(result, ToolFailure):
        print(result.message, file=sys.stderr)
    else:
        print(result.text)

    if isinstance(result, ToolFailure):
        sys.exit(1)


def cmd_check(args: argparse.Namespace) -> None:
    """Report what the server would find at startup."""
    status = {
        "credentials_file": {"path": str(CREDENTIALS_FILE), "exists": CREDENTIALS_FILE.exists()},
        "token_file": {"path": str(TOKEN_FILE), "exists": TOKEN_FILE.exists()},
        "interactive_auth": INTERACTIVE_AUTH,
        "scopes": SCOPES,
        "tools": len(build_registry()),
    }
    print(json.dumps(status, indent=2))
    if not TOKEN_FILE.exists() and not CREDENTIALS_FILE.exists():
        sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Google Docs, Sheets, Drive and Apps Script tools from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    scrivener tools
    scrivener describe read_google_doc
    scrivener call read_google_doc --args '{"documentId": "1abc...", "format": "markdown"}'
    scrivener call list_script_projects --args '{"pageSize": 5}' --json
    scrivener check
""",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # tools
    tools_p = subparsers.add_parser("tools", help="List available tools")
    tools_p.set_defaults(func=cmd_tools)

    # describe
    describe_p = subparsers.add_parser("describe", help="Show a tool's documentation")
    describe_p.add_argument("tool", help="Tool name")
    describe_p.set_defaults(func=cmd_describe)

    # call
    call_p = subparsers.add_parser("call", help="Invoke a tool")
    call_p.add_argument("tool", help="Tool name")
    call_p.add_argument(
        "--args",
        help="Tool arguments as a JSON object (camelCase keys)",
    )
    call_p.add_argument(
        "--json",
        action="store_true",
        help="Print the full result object instead of the text payload",
    )
    call_p.set_defaults(func=cmd_call)

    # check
    check_p = subparsers.add_parser("check", help="Check credentials and configuration")
    check_p.set_defaults(func=cmd_check)

    args = parser.parse_args()
    configure_logging(LOG_LEVEL)
    args.func(args)


if __name__ == "__main__":
    main()
