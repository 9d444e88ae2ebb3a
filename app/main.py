"""
MCP STDIO server for the Finance Server

Exposes every catalog operation as an MCP tool (user.*, category.*,
entry.*, balance.category.*) over stdin/stdout, so MCP clients such as
n8n's MCP Client node can connect with a command transport and discover
the tools automatically.

Run:
    DB_PATH=./mcp-finance-db.json python app/main.py

Logs go to stderr; stdout carries nothing but MCP messages.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import mcp.types as types
import structlog
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from finance_server import __version__
from finance_server.config import get_settings
from finance_server.orchestrator import OperationDispatcher, create_app_components


SERVER_NAME = "mcp-finance-server"

logger = structlog.get_logger("finance_server.app")


class ToolCallError(Exception):
    """Carries a taxonomy failure back to the client as an MCP tool error."""
    
    def __init__(self, error: dict):
        super().__init__(json.dumps(error, ensure_ascii=False))
        self.error = error


def configure_logging() -> None:
    """Route stdlib logging (and so structlog) to stderr at the configured level."""
    settings = get_settings()
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if settings.debug_mode else settings.log_level,
        format="%(message)s",
    )


def list_finance_tools(dispatcher: OperationDispatcher) -> list[types.Tool]:
    """One MCP tool per catalog operation, with its input JSON schema."""
    return [
        types.Tool(
            name=op["name"],
            description=op["description"],
            inputSchema=op["inputSchema"],
        )
        for op in dispatcher.describe()
    ]


async def call_finance_tool(
    dispatcher: OperationDispatcher,
    name: str,
    arguments: Optional[dict],
) -> list[types.TextContent]:
    """
    Run one operation for an MCP tool call.
    
    Success returns the result as JSON text. A failure raises
    ToolCallError, which the SDK reports as a tool result with
    isError set and the {kind, message} JSON as its text.
    """
    response = await dispatcher.handle(name, arguments)
    if "error" in response:
        raise ToolCallError(response["error"])
    return [
        types.TextContent(
            type="text",
            text=json.dumps(response["result"], ensure_ascii=False),
        )
    ]


def build_server(dispatcher: OperationDispatcher) -> Server:
    """Wire the dispatcher into an MCP server."""
    server = Server(SERVER_NAME, version=__version__)
    
    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_finance_tools(dispatcher)
    
    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        return await call_finance_tool(dispatcher, name, arguments)
    
    return server


async def serve() -> None:
    """Serve MCP over stdio until the client disconnects."""
    dispatcher = create_app_components()
    settings = get_settings()
    
    # Create the store up front so a bad path fails at startup
    await dispatcher.storage.ensure_store()
    
    server = build_server(dispatcher)
    logger.info("server_started", transport="stdio", db_path=str(settings.resolved_db_path))
    
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
    
    logger.info("server_stopped")


def main():
    """Main application entry point."""
    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("fatal_error")
        sys.exit(1)


if __name__ == "__main__":
    main()
