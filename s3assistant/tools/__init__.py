"""
Tools package - S3 assistant tools and their runtime

This package provides:
- ParameterMapper: camelCase LLM parameters -> S3 API request parameters
- StorageTools / FileTools / ScrapeTools / ExportTools: tool implementations
- ToolRegistry: tool name -> handler, description and JSON schema
- ToolExecutor: routes tool calls to the registered handlers
"""

from .parameter_mapper import ConversionKind, MappingConfig, ParameterMapper
from .storage_tools import StorageTools
from .file_tools import FileTools
from .scrape_tools import ScrapeTools
from .export_tools import ExportTools
from .registry import ToolRegistry, ToolDefinition
from .executor import ToolExecutor

__all__ = [
    'ConversionKind',
    'MappingConfig',
    'ParameterMapper',
    'StorageTools',
    'FileTools',
    'ScrapeTools',
    'ExportTools',
    'ToolRegistry',
    'ToolDefinition',
    'ToolExecutor',
]
