"""
Tool Registry - Central management for all tools

Architecture:
1. StorageTools / FileTools / ScrapeTools / ExportTools implement the tools
2. ToolRegistry binds each tool name to its handler, description and schema
3. The MCP server lists the registry as MCP tools; the chat bridge reads them
   back over MCP and hands them to the LLM for function calling
4. ToolExecutor routes tool calls to the registered handlers
"""

from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass
import logging

from ..mcp.tool_descriptions import get_tool_description, get_tool_schema
from .export_tools import ExportTools
from .file_tools import FileTools
from .parameter_mapper import ParameterMapper
from .scrape_tools import ScrapeTools
from .storage_tools import StorageTools

logger = logging.getLogger(__name__)


@dataclass
class ToolDefinition:
    """
    Tool definition

    handler receives the camelCase argument dict and returns a JSON-friendly
    result dict; it may be a plain function or a coroutine function.
    """
    name: str
    description: str
    parameters: Dict[str, Any]
    handler: Callable[[Dict[str, Any]], Any]
    category: str = "storage"  # "storage" | "filesystem" | "bridge"

    def to_mcp_tool(self) -> Dict[str, Any]:
        """Convert to MCP tools/list format"""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters
        }


class ToolRegistry:
    """Central registry for all tools"""

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def default(
        cls,
        storage_tools: Optional[StorageTools] = None,
        mapper: Optional[ParameterMapper] = None,
        export_tools: Optional[ExportTools] = None,
        scrape_tools: Optional[ScrapeTools] = None
    ) -> "ToolRegistry":
        """
        Registry with every S3 assistant tool.

        All tools share one StorageTools (and therefore one ParameterMapper),
        so a mapping added through extend() is seen by every tool.
        """
        storage = storage_tools or StorageTools(mapper=mapper)
        files = FileTools(storage_tools=storage)
        scrape = scrape_tools or ScrapeTools(storage_tools=storage)
        export = export_tools or ExportTools(storage_tools=storage)

        handlers = [
            ("create_bucket", storage.create_bucket, "storage"),
            ("delete_bucket", storage.delete_bucket, "storage"),
            ("list_buckets", storage.list_buckets, "storage"),
            ("put_object", storage.put_object, "storage"),
            ("get_object", storage.get_object, "storage"),
            ("delete_object", storage.delete_object, "storage"),
            ("read_file", files.read_file, "filesystem"),
            ("list_directory", files.list_directory, "filesystem"),
            ("write_text_to_file", files.write_text_to_file, "filesystem"),
            ("scrape_website_to_file", scrape.scrape_website_to_file, "bridge"),
            ("export_table_to_storage", export.export_table_to_storage, "bridge"),
        ]

        registry = cls()
        for name, handler, category in handlers:
            registry.register_tool(ToolDefinition(
                name=name,
                description=get_tool_description(name),
                parameters=get_tool_schema(name),
                handler=handler,
                category=category,
            ))

        registry.logger.info(f"✅ Registered {len(handlers)} tools")
        return registry

    def register_tool(self, tool: ToolDefinition):
        """Register a tool definition (replaces a tool with the same name)"""
        if tool.name in self._tools:
            self.logger.info(f"Tool '{tool.name}' replaced")
        self._tools[tool.name] = tool
        self.logger.debug(f"Registered tool: {tool.name} (category: {tool.category})")

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Get a single tool by name"""
        return self._tools.get(name)

    def list_all_tools(self) -> List[str]:
        """List all registered tool names"""
        return sorted(self._tools.keys())
