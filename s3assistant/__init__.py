"""
S3 Assistant - conversational object-storage management over MCP

Architecture:
- ParameterMapper translates LLM-extracted camelCase parameters into S3 API
  request parameters (tools/parameter_mapper.py)
- Storage, file-system and bridge tools wrap S3, the local disk, web pages and
  a MySQL MCP server (tools/)
- An MCP server exposes the tools over stdio (mcp/server.py)
- A FastAPI app streams chat completions that call those tools (api/app.py)

Usage:
    from s3assistant import ParameterMapper

    mapper = ParameterMapper()
    mapper.map({"bucketName": "logs", "fileName": "a.txt"})
    # {"Bucket": "logs", "Key": "a.txt"}
"""

# Loads .env as a side effect
from .config import Settings, get_settings
from .tools.parameter_mapper import ConversionKind, MappingConfig, ParameterMapper

__version__ = "1.0.0"
__all__ = [
    "ConversionKind",
    "MappingConfig",
    "ParameterMapper",
    "Settings",
    "get_settings",
]
