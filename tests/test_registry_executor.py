import asyncio

import pytest

from s3assistant.mcp.tool_descriptions import TOOL_DESCRIPTIONS, TOOL_SCHEMAS
from s3assistant.tools.executor import ToolExecutor
from s3assistant.tools.export_tools import ExportTools
from s3assistant.tools.registry import ToolDefinition, ToolRegistry

ALL_TOOLS = [
    "create_bucket", "delete_bucket", "delete_object", "export_table_to_storage",
    "get_object", "list_buckets", "list_directory", "put_object", "read_file",
    "scrape_website_to_file", "write_text_to_file",
]


@pytest.fixture
def registry(storage_tools, settings) -> ToolRegistry:
    export = ExportTools(storage_tools=storage_tools, settings=settings, client_factory=lambda *a, **kw: None)
    return ToolRegistry.default(storage_tools=storage_tools, export_tools=export)


def test_default_registry_has_every_tool(registry):
    assert registry.list_all_tools() == ALL_TOOLS
    assert sorted(TOOL_DESCRIPTIONS) == ALL_TOOLS
    assert sorted(TOOL_SCHEMAS) == ALL_TOOLS


def test_categories(registry):
    assert [n for n in ALL_TOOLS if registry.get_tool(n).category == "filesystem"] == [
        "list_directory", "read_file", "write_text_to_file"
    ]
    assert {n for n in ALL_TOOLS if registry.get_tool(n).category == "bridge"} == {
        "scrape_website_to_file", "export_table_to_storage"
    }


def test_required_parameters_are_declared(registry):
    for name in registry.list_all_tools():
        schema = registry.get_tool(name).parameters
        assert schema["type"] == "object"
        for required in schema.get("required", []):
            assert required in schema["properties"], f"{name}: {required}"


def test_mcp_format(registry):
    tool = registry.get_tool("get_object")
    mcp_tool = tool.to_mcp_tool()
    assert mcp_tool["name"] == "get_object"
    assert mcp_tool["inputSchema"] is tool.parameters
    assert mcp_tool["inputSchema"]["required"] == ["bucketName", "fileName"]


def test_registry_tools_share_one_mapper(registry, fake_s3):
    storage = registry.get_tool("create_bucket").handler.__self__
    assert registry.get_tool("write_text_to_file").handler.__self__.storage_tools is storage
    assert registry.get_tool("export_table_to_storage").handler.__self__.storage_tools is storage

    storage.mapper.extend("owner", "ExpectedBucketOwner")
    storage.delete_bucket({"bucketName": "b", "owner": "1"})
    assert fake_s3.calls_to("delete_bucket") == [{"Bucket": "b", "ExpectedBucketOwner": "1"}]


def test_executor_runs_sync_handler(registry, fake_s3):
    executor = ToolExecutor(registry)
    result = asyncio.run(executor.execute_tool("create_bucket", {"bucketName": "logs"}))
    assert result["success"] is True
    assert fake_s3.calls_to("create_bucket") == [{"Bucket": "logs"}]


def test_executor_awaits_async_handler():
    async def handler(args):
        return {"echo": args}

    registry = ToolRegistry()
    registry.register_tool(ToolDefinition(name="echo", description="", parameters={}, handler=handler))

    result = asyncio.run(ToolExecutor(registry).execute_tool("echo", {"a": 1}))
    assert result == {"echo": {"a": 1}}


def test_executor_unknown_tool(registry):
    with pytest.raises(ValueError, match="Unknown tool: nope"):
        asyncio.run(ToolExecutor(registry).execute_tool("nope", {}))


def test_executor_reraises_handler_errors():
    def handler(args):
        raise KeyError("boom")

    registry = ToolRegistry()
    registry.register_tool(ToolDefinition(name="bad", description="", parameters={}, handler=handler))

    with pytest.raises(KeyError):
        asyncio.run(ToolExecutor(registry).execute_tool("bad", {}))
