"""
HTTP API for the S3 assistant
"""

from .app import create_app

__all__ = ["create_app"]
