"""
MCP (Model Context Protocol) Module
Stdio client for MCP servers and the model-facing tool descriptions.
The S3 assistant server itself lives in s3assistant.mcp.server.
"""

from .client import MCPClient, result_text
from .tool_descriptions import TOOL_DESCRIPTIONS, TOOL_SCHEMAS

__all__ = [
    "MCPClient",
    "result_text",
    "TOOL_DESCRIPTIONS",
    "TOOL_SCHEMAS",
]
