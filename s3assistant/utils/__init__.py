"""
S3 Assistant Utilities
"""

from .file_system import FileSystemUtils, determine_file_type, get_content_type

__all__ = [
    'FileSystemUtils',
    'determine_file_type',
    'get_content_type',
]
