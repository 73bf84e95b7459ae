"""
Clients for external services (object storage, LLM)
"""

from .llm_client import ChatBridge
from .s3_client import StorageClient, create_s3_client, get_s3_client

__all__ = [
    "ChatBridge",
    "StorageClient",
    "create_s3_client",
    "get_s3_client",
]
