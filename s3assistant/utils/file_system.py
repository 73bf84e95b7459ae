"""
File System Utilities

Local file reading (text or base64), directory listing and content-type
sniffing used by the file tools and by put_object's file/directory modes.
"""

import base64
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


BINARY_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".tar", ".gz", ".7z",
    ".mp3", ".wav", ".mp4", ".avi", ".mov",
    ".exe", ".bin", ".dll", ".so",
}

CONTENT_TYPES = {
    # Text
    ".txt": "text/plain",
    ".csv": "text/csv",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".md": "text/markdown",
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    # Documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    # Archives
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    # Audio/Video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
}

# ============================================================================
# Downloaded object classification (get_object)
# ============================================================================

TEXT_CONTENT_TYPE_PREFIXES = (
    "text/",
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-yaml",
    "application/yaml",
    "application/sql",
    "application/x-sh",
)

TEXT_EXTENSIONS = {
    ".txt", ".csv", ".tsv", ".json", ".xml", ".html", ".htm", ".css",
    ".js", ".ts", ".jsx", ".tsx", ".vue", ".svelte",
    ".md", ".markdown", ".rst", ".yaml", ".yml", ".toml",
    ".log", ".sql", ".sh", ".bash", ".zsh", ".fish",
    ".py", ".java", ".c", ".cpp", ".h", ".hpp", ".go", ".rs",
    ".rb", ".php", ".pl", ".r", ".m", ".swift", ".kt", ".scala",
    ".env", ".config", ".conf", ".cfg", ".ini", ".properties",
    ".gitignore", ".dockerfile", ".editorconfig", ".htaccess",
    ".bat", ".cmd", ".ps1", ".awk", ".sed", ".vim",
}

IMAGE_CONTENT_TYPES = {
    "image/jpeg", "image/jpg", "image/png", "image/gif",
    "image/webp", "image/svg+xml", "image/bmp",
}

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp"}

DOCUMENT_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}

DOCUMENT_EXTENSIONS = {
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".odt", ".ods", ".odp", ".rtf",
}


def get_content_type(ext: str) -> str:
    """MIME type for a file extension (with leading dot)"""
    return CONTENT_TYPES.get((ext or "").lower(), "application/octet-stream")


def determine_file_type(content_type: str, extension: str) -> str:
    """
    Classify a downloaded object.

    Returns:
        "text", "image", "document" or "binary"
    """
    ctype = (content_type or "").lower()
    ext = (extension or "").lower()

    if ctype.startswith(TEXT_CONTENT_TYPE_PREFIXES) or ext in TEXT_EXTENSIONS:
        return "text"
    if ctype in IMAGE_CONTENT_TYPES or ext in IMAGE_EXTENSIONS:
        return "image"
    if ctype in DOCUMENT_CONTENT_TYPES or ext in DOCUMENT_EXTENSIONS:
        return "document"
    return "binary"


def _mtime_iso(stat_result: os.stat_result) -> str:
    return datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc).isoformat()


class FileSystemUtils:
    """Local file system access for the assistant tools"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def read_file(self, file_path: str) -> Dict[str, Any]:
        """
        Read file content with automatic type detection.

        Binary files (by extension) are returned base64-encoded, everything
        else as UTF-8 text.

        Returns:
            Dict with success flag, content and metadata
        """
        try:
            if not os.path.exists(file_path):
                raise FileNotFoundError(f"No such file: '{file_path}'")
            if not os.path.isfile(file_path):
                raise IsADirectoryError(f"Path \"{file_path}\" is not a file")

            stats = os.stat(file_path)
            ext = os.path.splitext(file_path)[1].lower()
            is_binary = ext in BINARY_EXTENSIONS

            if is_binary:
                with open(file_path, "rb") as f:
                    content = base64.b64encode(f.read()).decode("ascii")
            else:
                with open(file_path, "r", encoding="utf-8") as f:
                    content = f.read()

            content_type = get_content_type(ext)
            if not is_binary and content_type == "application/octet-stream":
                content_type = "text/plain"

            return {
                "success": True,
                "file_name": os.path.basename(file_path),
                "file_path": file_path,
                "content": content,
                "content_type": content_type,
                "file_size": stats.st_size,
                "is_binary": is_binary,
                "extension": ext,
                "last_modified": _mtime_iso(stats),
                "encoding": "base64" if is_binary else "utf8",
            }
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Failed to read {file_path}: {e}")
            return {"success": False, "error": str(e), "file_path": file_path}

    def list_directory(
        self,
        dir_path: str,
        show_hidden: bool = False,
        files_only: bool = False,
        dirs_only: bool = False,
        recursive: bool = False,
        max_depth: int = 3
    ) -> Dict[str, Any]:
        """
        List directory contents with file details.

        Directories are sorted before files, then by name. With recursive=True
        each directory entry carries its own "contents" down to max_depth.
        """
        try:
            if not os.path.isdir(dir_path):
                raise NotADirectoryError(f"Path \"{dir_path}\" is not a directory")

            contents: List[Dict[str, Any]] = []

            for name in os.listdir(dir_path):
                if not show_hidden and name.startswith("."):
                    continue

                item_path = os.path.join(dir_path, name)
                stats = os.stat(item_path)
                is_dir = os.path.isdir(item_path)
                is_file = os.path.isfile(item_path)

                if files_only and not is_file:
                    continue
                if dirs_only and not is_dir:
                    continue

                item = {
                    "name": name,
                    "path": item_path,
                    "is_directory": is_dir,
                    "is_file": is_file,
                    "size": stats.st_size,
                    "last_modified": _mtime_iso(stats),
                    "extension": os.path.splitext(name)[1] if is_file else None,
                }

                if recursive and is_dir and max_depth > 0:
                    sub = self.list_directory(
                        item_path,
                        show_hidden=show_hidden,
                        files_only=files_only,
                        dirs_only=dirs_only,
                        recursive=True,
                        max_depth=max_depth - 1,
                    )
                    if sub["success"]:
                        item["contents"] = sub["contents"]

                contents.append(item)

            contents.sort(key=lambda i: (not i["is_directory"], i["name"]))

            return {
                "success": True,
                "path": dir_path,
                "total_items": len(contents),
                "directories": sum(1 for i in contents if i["is_directory"]),
                "files": sum(1 for i in contents if i["is_file"]),
                "contents": contents,
            }
        except OSError as e:
            self.logger.warning(f"Failed to list {dir_path}: {e}")
            return {"success": False, "error": str(e), "path": dir_path}

    def get_all_files(self, dir_path: str, extensions: Optional[List[str]] = None) -> List[str]:
        """All file paths under dir_path (recursive), optionally filtered by extension"""
        result = self.list_directory(dir_path, show_hidden=True, recursive=True)
        if not result["success"]:
            return []

        wanted = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in (extensions or [])}
        files: List[str] = []

        def _collect(items: List[Dict[str, Any]]):
            for item in items:
                if item["is_file"] and (not wanted or (item["extension"] or "").lower() in wanted):
                    files.append(item["path"])
                if item.get("contents"):
                    _collect(item["contents"])

        _collect(result["contents"])
        return files
