#!/usr/bin/env python3
"""
scrivener MCP Server

Google Docs, Sheets, Drive and Apps Script as MCP tools.

Every tool call goes through one Dispatcher:
- lookup by name (unknown names are an integration error)
- input validated against the tool's pydantic model before any API call
- Google services resolved lazily from one shared session
- failures normalized to a single message string

Documentation is provided via MCP Resources (scrivener://tools/<name>),
generated from the same definitions the dispatcher validates against.

Architecture:
- extractors/: Pure functions (no MCP, no API calls)
- adapters/: Thin Google API wrappers + session manager
- tools/: Tool definitions (schemas + executors)
- registry.py / dispatch.py: the invocation boundary
- server.py: Thin MCP wrapper (this file)
"""

import asyncio
import os
import signal
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from adapters.credentials import OAuthCredentialProvider
from adapters.services import SessionManager
from dispatch import Dispatcher
from logging_config import ToolLogger, configure_logging, logger
from models import InitializationError, ToolError, ToolFailure
from oauth_config import LOG_LEVEL
from resources.tools import ToolResourceRegistry
from tools import build_registry

SERVER_NAME = "scrivener"


def build_server(dispatcher: Dispatcher) -> Server:
    """Wire MCP handlers to a dispatcher. Nothing here touches Google APIs directly."""
    # Low-level Server rather than FastMCP: FastMCP validates arguments itself,
    # and here the dispatcher must own validation (see call_tool below)
    server: Server = Server(SERVER_NAME)
    docs = ToolResourceRegistry(dispatcher.registry)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.input_schema(),
            )
            for definition in dispatcher.registry.list_tools()
        ]

    # Validation belongs to the dispatcher so failures carry its message format
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        log = ToolLogger(name)
        try:
            result = await dispatcher.dispatch(name, arguments, log=log)
        except InitializationError as e:
            log.error(f"Session unavailable: {e.message}")
            raise

        if isinstance(result, ToolFailure):
            # Raising makes the MCP layer return isError with just this text
            raise ToolError(result.message, kind=result.kind)
        return [types.TextContent(type="text", text=result.text)]

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=AnyUrl(entry["uri"]),
                name=entry["name"],
                description=entry["description"],
                mimeType="text/markdown",
            )
            for entry in docs.list_resources()
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            resource = docs.get_resource(str(uri))
        except KeyError:
            name = str(uri).rsplit("/", 1)[-1]
            return [ReadResourceContents(
                content=f"# {name}()\n\nTool not found.", mime_type="text/markdown"
            )]
        return [ReadResourceContents(content=resource["text"], mime_type=resource["mimeType"])]

    return server


def create_dispatcher() -> Dispatcher:
    """Top-level composition: one session manager per process, owned here."""
    sessions = SessionManager(OAuthCredentialProvider())
    return Dispatcher(build_registry(), sessions)


async def run() -> None:
    dispatcher = create_dispatcher()
    server = build_server(dispatcher)
    logger.info(f"Serving {len(dispatcher.registry)} tools over stdio")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def _shutdown_handler(signum: int, frame: object) -> None:
    """Handle termination signals by exiting immediately.

    os._exit() is required because sys.exit() raises SystemExit,
    which asyncio's event loop catches and ignores. The server
    would survive SIGTERM until stdin closes.
    """
    os._exit(0)


def main() -> None:
    configure_logging(LOG_LEVEL)
    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)
    asyncio.run(run())


if __name__ == "__main__":
    main()
