"""
File Tools - local file browsing and text-to-storage uploads
"""

import logging
import os
from typing import Any, Dict, Optional

from ..utils.file_system import FileSystemUtils
from .storage_tools import StorageTools

logger = logging.getLogger(__name__)

# Content preview limit for read_file results
MAX_CONTENT_PREVIEW = 500

TEXT_CONTENT_TYPES = {
    ".txt": "text/plain",
    ".json": "application/json",
    ".xml": "application/xml",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".md": "text/markdown",
    ".csv": "text/csv",
}

# S3 options forwarded from write/scrape tools to put_object
PASSTHROUGH_S3_KEYS = ("acl", "serverSideEncryption", "storageClass", "metadata")


def remove_local_file(path: str):
    """Best-effort cleanup of a temporary local file"""
    try:
        os.remove(path)
    except OSError as e:
        logger.warning(f"Could not delete local file {path}: {e}")


class FileTools:
    """Tools operating on the local file system"""

    def __init__(
        self,
        storage_tools: Optional[StorageTools] = None,
        file_system: Optional[FileSystemUtils] = None
    ):
        self.storage_tools = storage_tools or StorageTools()
        self.fs = file_system or self.storage_tools.fs
        self.logger = logging.getLogger(self.__class__.__name__)

    def read_file(self, params: Dict[str, Any]) -> Dict[str, Any]:
        file_path = params.get("filePath")
        if not file_path:
            return {
                "success": False,
                "message": "Error: filePath is required. Please provide a file path.",
                "received_params": params,
            }

        self.logger.info(f"Reading file: {file_path}")
        result = self.fs.read_file(file_path)
        if not result["success"]:
            return {
                "success": False,
                "message": f"❌ Error reading file: {result['error']}",
                "file_path": file_path,
            }

        content = result["content"]
        preview = content
        if len(content) > MAX_CONTENT_PREVIEW:
            preview = content[:MAX_CONTENT_PREVIEW] + "...[truncated]"

        return {
            "success": True,
            "message": f"✅ File \"{result['file_name']}\" read successfully!",
            "file_info": {
                key: result[key]
                for key in (
                    "file_name", "file_path", "content_type", "file_size",
                    "is_binary", "extension", "last_modified", "encoding",
                )
            },
            "content": content,
            "content_preview": preview,
        }

    def list_directory(self, params: Dict[str, Any]) -> Dict[str, Any]:
        directory = params.get("directoryPath")
        if not directory:
            return {
                "success": False,
                "message": "Error: directoryPath is required. Please provide a directory path.",
                "received_params": params,
            }

        options = {
            "show_hidden": bool(params.get("showHidden", False)),
            "files_only": bool(params.get("filesOnly", False)),
            "dirs_only": bool(params.get("dirsOnly", False)),
            "recursive": bool(params.get("recursive", False)),
            "max_depth": int(params.get("maxDepth") or 3),
        }

        self.logger.info(f"Listing directory: {directory} {options}")
        result = self.fs.list_directory(directory, **options)
        if not result["success"]:
            return {
                "success": False,
                "message": f"❌ Error listing directory: {result['error']}",
                "directory_path": directory,
            }

        return {
            "success": True,
            "message": f"✅ Directory \"{result['path']}\" listed successfully!",
            "directory_info": {
                "path": result["path"],
                "total_items": result["total_items"],
                "directories": result["directories"],
                "files": result["files"],
            },
            "contents": result["contents"],
            "options": options,
        }

    def write_text_to_file(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Write text to a local file, then upload it to storage.

        The local file is removed after upload unless keepLocalFile is set.
        """
        if params.get("textContent") is None:
            return {"success": False, "message": "Error: textContent is required.", "received_params": params}
        if not params.get("localFilePath"):
            return {
                "success": False,
                "message": "Error: localFilePath is required to save text content.",
                "received_params": params,
            }
        if not params.get("bucketName"):
            return {"success": False, "message": "Error: bucketName is required.", "received_params": params}

        local_path = params["localFilePath"]
        text = str(params["textContent"])
        encoding = params.get("encoding") or "utf-8"
        append_mode = bool(params.get("appendMode", False))
        keep_local = bool(params.get("keepLocalFile", False))

        try:
            parent = os.path.dirname(local_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(local_path, "a" if append_mode else "w", encoding=encoding) as f:
                f.write(text)
            file_size = os.path.getsize(local_path)
        except (OSError, LookupError) as e:
            return {
                "success": False,
                "message": f"❌ Failed to write to local file: {e}",
                "local_file_path": local_path,
            }

        s3_key = params.get("s3Key") or os.path.basename(local_path)
        ext = os.path.splitext(local_path)[1].lower()
        content_type = params.get("contentType") or TEXT_CONTENT_TYPES.get(ext, "text/plain")

        upload_params = {
            "bucketName": params["bucketName"],
            "filePath": local_path,
            "s3Key": s3_key,
            "contentType": content_type,
        }
        upload_params.update({k: params[k] for k in PASSTHROUGH_S3_KEYS if params.get(k) is not None})

        self.logger.info(f"Uploading {local_path} to {params['bucketName']}/{s3_key}")
        upload_result = self.storage_tools.put_object(upload_params)

        if not upload_result["success"]:
            return {
                "success": False,
                "message": f"❌ Failed to upload to storage: {upload_result['message']}",
                "upload_result": upload_result,
            }

        if not keep_local:
            remove_local_file(local_path)

        return {
            "success": True,
            "message": "✅ Successfully wrote text to file and uploaded to storage!",
            "file_info": {
                "local_file_path": local_path,
                "file_size": file_size,
                "encoding": encoding,
                "append_mode": append_mode,
                "keep_local_file": keep_local,
                "content_length": len(text),
            },
            "upload_info": {
                "bucket_name": params["bucketName"],
                "s3_key": s3_key,
                "content_type": content_type,
                "upload_mode": upload_result.get("upload_mode"),
            },
            "aws_response": upload_result.get("aws_response"),
        }
