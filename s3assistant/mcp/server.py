"""
S3 Assistant MCP Server

Exposes the storage, file-system and bridge tools over MCP (stdio).

Tools:
- create_bucket / delete_bucket / list_buckets
- put_object / get_object / delete_object
- read_file / list_directory / write_text_to_file
- scrape_website_to_file
- export_table_to_storage

Every tool result is returned as one TextContent holding the pretty-printed
JSON result. stdout carries JSON-RPC, so logs go to stderr.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..config import setup_logging
from ..tools.executor import ToolExecutor
from ..tools.registry import ToolRegistry

logger = logging.getLogger("s3-assistant-mcp")

SERVER_NAME = "mcp-s3-assistant"


def list_mcp_tools(registry: ToolRegistry) -> List[Tool]:
    """Registry tools as MCP Tool objects"""
    tools = []
    for name in registry.list_all_tools():
        definition = registry.get_tool(name).to_mcp_tool()
        tools.append(Tool(**definition))
    return tools


async def handle_call_tool(
    executor: ToolExecutor,
    name: str,
    arguments: Optional[Dict[str, Any]]
) -> List[TextContent]:
    """Run one tool call and wrap its result (or failure) as text content"""
    try:
        result = await executor.execute_tool(name, arguments or {})
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    except Exception as e:
        logger.error(f"Tool {name} failed: {e}")
        return [TextContent(type="text", text=f"Error executing {name}: {e}")]


def create_server(registry: Optional[ToolRegistry] = None) -> Server:
    """Create the MCP server instance bound to a tool registry"""
    registry = registry or ToolRegistry.default()
    executor = ToolExecutor(registry)
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        return list_mcp_tools(registry)

    @app.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        return await handle_call_tool(executor, name, arguments)

    return app


async def main():
    """Run the MCP server."""
    logger.info("Starting S3 assistant MCP server...")
    app = create_server()
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run():
    """Console entry point: stdio MCP server with stderr logging"""
    setup_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
