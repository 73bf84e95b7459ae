"""
Tool Executor - Executes tool calls at runtime

Routes a tool call to the handler registered in the ToolRegistry:
1. Coroutine handlers (export bridge) are awaited directly
2. Blocking handlers (S3, file system, HTTP) run in a worker thread so the
   event loop of the MCP server / HTTP API stays responsive
"""

import asyncio
import inspect
from typing import Dict, Any
import logging

from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Executes tool calls by routing to registered handlers"""

    def __init__(self, tool_registry: ToolRegistry):
        self.registry = tool_registry
        self.logger = logging.getLogger(self.__class__.__name__)

    async def execute_tool(
        self,
        tool_name: str,
        arguments: Dict[str, Any]
    ) -> Any:
        """
        Execute a single tool call.

        Args:
            tool_name: Registered tool name
            arguments: camelCase arguments produced by the LLM (copied, never modified)

        Returns:
            Result dict from the tool

        Raises:
            ValueError: if the tool is not registered
        """
        tool = self.registry.get_tool(tool_name)
        if tool is None:
            raise ValueError(f"Unknown tool: {tool_name}")

        arguments = dict(arguments or {})
        self.logger.info(f"Executing tool: {tool_name} ({tool.category})")
        self.logger.debug(f"  Argument keys: {sorted(arguments)}")

        try:
            if inspect.iscoroutinefunction(tool.handler):
                result = await tool.handler(arguments)
            else:
                result = await asyncio.to_thread(tool.handler, arguments)
        except Exception as e:
            self.logger.error(f"  ✗ Tool {tool_name} raised {e.__class__.__name__}: {e}")
            raise

        if isinstance(result, dict) and result.get("success") is False:
            self.logger.warning(f"  Tool {tool_name} reported failure: {result.get('message')}")
        else:
            self.logger.info(f"  ✓ Tool {tool_name} completed")
        return result
