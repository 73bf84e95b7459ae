"""
Storage Tools - bucket and object operations exposed to the LLM

Every tool follows the same flow:
1. Validate the business parameters the tool cannot work without
2. ParameterMapper converts the AI parameters into S3 API parameters
3. StorageClient invokes the S3 operation
4. The response (or the S3 error) is returned as a JSON-friendly result dict

Tools never raise for S3 or parameter conversion errors; failures are
reported with success=False.
"""

import base64
import logging
import os
from typing import Any, Dict, List, Optional

from ..clients.s3_client import StorageClient, describe_client_error
from ..utils.file_system import FileSystemUtils, determine_file_type
from .parameter_mapper import ParameterMapper

logger = logging.getLogger(__name__)

# Readable preview limit for downloaded text objects
MAX_TEXT_PREVIEW = 50000

# put_object control keys: they select the upload mode and never reach S3
UPLOAD_CONTROL_KEYS = (
    "filePath",
    "s3Key",
    "directoryPath",
    "preserveStructure",
    "s3Prefix",
    "fileExtensions",
    "maxFiles",
    "excludeHidden",
)

DELETE_ERROR_HINTS = {
    "NoSuchBucket": "The bucket does not exist",
    "AccessDenied": "Access denied - insufficient permissions",
    "InvalidArgument": "Invalid argument provided",
    "MethodNotAllowed": "Delete operation not allowed",
}


def _missing(params: Dict[str, Any], *names: str) -> List[str]:
    return [name for name in names if not params.get(name)]


def _validation_error(message: str, params: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": False, "message": f"Error: {message}", "received_params": params}


def _response_metadata(response: Dict[str, Any]) -> Dict[str, Any]:
    return response.get("ResponseMetadata", {})


class StorageTools:
    """
    S3 bucket/object tools.

    Owns its ParameterMapper and StorageClient; the registry composes one
    instance and routes tool calls to its methods.
    """

    def __init__(
        self,
        storage: Optional[StorageClient] = None,
        mapper: Optional[ParameterMapper] = None,
        file_system: Optional[FileSystemUtils] = None
    ):
        self.storage = storage or StorageClient()
        self.mapper = mapper or ParameterMapper()
        self.fs = file_system or FileSystemUtils()
        self.logger = logging.getLogger(self.__class__.__name__)

    def _error_result(
        self,
        exc: Exception,
        params: Dict[str, Any],
        command_params: Optional[Dict[str, Any]],
        prefix: str = "S3 Error",
        **extra: Any
    ) -> Dict[str, Any]:
        code, message, status = describe_client_error(exc)
        self.logger.error(f"{prefix}: {code} - {message}")
        details = {
            "error_code": code,
            "error_message": message,
            "status_code": status,
            "ai_extracted_params": params,
            "aws_command_params": command_params,
        }
        details.update(extra)
        return {
            "success": False,
            "message": f"❌ {prefix}: {message}",
            "error_details": details,
        }

    # ========================================================================
    # Buckets
    # ========================================================================

    def create_bucket(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if _missing(params, "bucketName"):
            return _validation_error("bucketName is required. Please provide a bucket name.", params)

        command_params = None
        try:
            command_params = self.mapper.map(params)
            response = self.storage.create_bucket(command_params)
        except Exception as e:
            return self._error_result(e, params, command_params)

        return {
            "success": True,
            "message": f"✅ Bucket \"{params['bucketName']}\" created successfully!",
            "ai_extracted_params": params,
            "aws_command_params": command_params,
            "aws_response": {
                "location": response.get("Location"),
                "metadata": _response_metadata(response),
            },
        }

    def delete_bucket(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if _missing(params, "bucketName"):
            return _validation_error("bucketName is required. Please provide a bucket name.", params)

        command_params = None
        try:
            command_params = self.mapper.map(params)
            response = self.storage.delete_bucket(command_params)
        except Exception as e:
            return self._error_result(e, params, command_params)

        return {
            "success": True,
            "message": f"✅ Bucket \"{params['bucketName']}\" deleted successfully!",
            "ai_extracted_params": params,
            "aws_command_params": command_params,
            "aws_response": {"metadata": _response_metadata(response)},
        }

    def list_buckets(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = params or {}
        command_params = None
        try:
            command_params = self.mapper.map(params)
            response = self.storage.list_buckets(command_params)
        except Exception as e:
            return self._error_result(e, params, command_params)

        buckets = [
            {
                "name": b.get("Name"),
                "creation_date": b.get("CreationDate"),
                "region": b.get("BucketRegion"),
            }
            for b in response.get("Buckets", [])
        ]
        return {
            "success": True,
            "buckets": buckets,
            "owner": response.get("Owner"),
            "continuation_token": response.get("ContinuationToken"),
            "total_buckets": len(buckets),
            "ai_extracted_params": params,
            "aws_command_params": command_params,
        }

    # ========================================================================
    # Objects - upload
    # ========================================================================

    def put_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Universal upload.

        Modes (first match wins):
        1. fileContent + fileName - upload the given content
        2. filePath - upload one local file
        3. directoryPath - upload a directory tree
        """
        if _missing(params, "bucketName"):
            return _validation_error("bucketName is required.", params)

        if params.get("fileContent") is not None and params.get("fileName"):
            return self._upload_direct_content(params)
        if params.get("filePath"):
            return self._upload_single_file(params)
        if params.get("directoryPath"):
            return self._upload_directory(params)

        return _validation_error(
            "Provide either fileContent+fileName, filePath, or directoryPath.", params
        )

    def _upload_direct_content(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info("Direct content upload mode")
        s3_params = {k: v for k, v in params.items() if k not in UPLOAD_CONTROL_KEYS}
        try:
            command_params = self.mapper.map(s3_params)
            response = self.storage.put_object(command_params)
        except Exception as e:
            return self._error_result(e, params, None, prefix="Direct upload error", upload_mode="direct_content")

        return {
            "success": True,
            "message": (
                f"✅ File \"{params['fileName']}\" uploaded to bucket "
                f"\"{params['bucketName']}\" successfully!"
            ),
            "upload_mode": "direct_content",
            "upload_info": {
                "bucket_name": params["bucketName"],
                "file_name": params["fileName"],
                "content_size": len(params["fileContent"]),
            },
            "aws_response": {
                "etag": response.get("ETag"),
                "version_id": response.get("VersionId"),
                "metadata": _response_metadata(response),
            },
        }

    def _upload_single_file(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info("Single file upload mode")
        file_path = params["filePath"]

        file_result = self.fs.read_file(file_path)
        if not file_result["success"]:
            return {
                "success": False,
                "message": f"❌ Error reading file: {file_result['error']}",
                "upload_mode": "single_file",
                "file_path": file_path,
            }

        s3_key = params.get("s3Key") or params.get("fileName") or os.path.basename(file_path)

        upload_params = {
            k: v for k, v in params.items()
            if k not in UPLOAD_CONTROL_KEYS and k != "fileContent"
        }
        upload_params["fileName"] = s3_key
        upload_params["contentType"] = params.get("contentType") or file_result["content_type"]

        try:
            command_params = self.mapper.map(upload_params)
            if file_result["is_binary"]:
                command_params["Body"] = base64.b64decode(file_result["content"])
            else:
                command_params["Body"] = file_result["content"].encode("utf-8")
            response = self.storage.put_object(command_params)
        except Exception as e:
            return self._error_result(e, params, None, prefix="Single file upload error", upload_mode="single_file")

        return {
            "success": True,
            "message": (
                f"✅ File \"{file_result['file_name']}\" uploaded to bucket "
                f"\"{params['bucketName']}\" successfully!"
            ),
            "upload_mode": "single_file",
            "upload_info": {
                "source_path": file_path,
                "bucket_name": params["bucketName"],
                "s3_key": s3_key,
                "file_size": file_result["file_size"],
                "content_type": upload_params["contentType"],
                "is_binary": file_result["is_binary"],
            },
            "aws_response": {
                "etag": response.get("ETag"),
                "version_id": response.get("VersionId"),
                "metadata": _response_metadata(response),
            },
        }

    def _upload_directory(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info("Directory upload mode")
        directory = params["directoryPath"]

        preserve_structure = params.get("preserveStructure") is not False
        s3_prefix = (params.get("s3Prefix") or "").strip("/")
        extensions = params.get("fileExtensions") or []
        max_files = int(params.get("maxFiles") or 100)
        exclude_hidden = params.get("excludeHidden") is not False

        all_files = self.fs.get_all_files(directory, extensions)
        if not all_files:
            return {
                "success": False,
                "message": f"❌ No files found in directory: {directory}",
                "upload_mode": "directory",
            }

        # S3 options shared by every file in the batch
        shared = {
            k: v for k, v in params.items()
            if k not in UPLOAD_CONTROL_KEYS and k not in ("fileName", "fileContent")
        }

        successful: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []
        skipped: List[Dict[str, Any]] = []

        files_to_upload = all_files[:max_files]
        self.logger.info(f"Starting batch upload of {len(files_to_upload)} files...")

        for file_path in files_to_upload:
            file_name = os.path.basename(file_path)

            if exclude_hidden and file_name.startswith("."):
                skipped.append({"file_path": file_path, "reason": "Hidden file excluded"})
                continue

            relative = os.path.relpath(file_path, directory) if preserve_structure else file_name
            s3_key = f"{s3_prefix}/{relative}" if s3_prefix else relative
            s3_key = s3_key.replace("\\", "/")

            result = self._upload_single_file({**shared, "filePath": file_path, "s3Key": s3_key})
            if result["success"]:
                successful.append({
                    "file_path": file_path,
                    "s3_key": s3_key,
                    "file_size": result["upload_info"]["file_size"],
                    "content_type": result["upload_info"]["content_type"],
                })
            else:
                failed.append({"file_path": file_path, "s3_key": s3_key, "error": result["message"]})

        total = len(successful) + len(failed) + len(skipped)
        success_rate = (len(successful) / total * 100) if total else 0.0

        return {
            "success": len(successful) > 0,
            "message": (
                f"📦 Directory upload completed: {len(successful)} successful, "
                f"{len(failed)} failed, {len(skipped)} skipped"
            ),
            "upload_mode": "directory",
            "upload_summary": {
                "directory_path": directory,
                "bucket_name": params["bucketName"],
                "total_files_found": len(all_files),
                "total_files_processed": total,
                "successful_uploads": len(successful),
                "failed_uploads": len(failed),
                "skipped_files": len(skipped),
                "success_rate": f"{success_rate:.1f}%",
            },
            "results": {"successful": successful, "failed": failed, "skipped": skipped},
        }

    # ========================================================================
    # Objects - download / delete
    # ========================================================================

    def get_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if _missing(params, "bucketName", "fileName"):
            return _validation_error("bucketName and fileName are required.", params)

        command_params = None
        try:
            command_params = self.mapper.map(params)
            response = self.storage.get_object(command_params)
            body = response["Body"].read()
        except Exception as e:
            return self._error_result(e, params, command_params)

        file_name = params["fileName"]
        content_type = response.get("ContentType") or ""
        extension = os.path.splitext(file_name)[1].lower()
        file_type = determine_file_type(content_type, extension)

        if file_type == "text":
            file_content = body.decode("utf-8", errors="replace")
            encoding = "utf8"
            readable = file_content
            if len(readable) > MAX_TEXT_PREVIEW:
                readable = (
                    readable[:MAX_TEXT_PREVIEW]
                    + f"\n\n...[Content truncated. Total size: {len(file_content)} characters]"
                )
            note = "Text content available. It can be read, summarized and analyzed directly."
            analyzable: Any = True
        else:
            file_content = base64.b64encode(body).decode("ascii")
            encoding = "base64"
            label = {"image": "Image", "document": "Document"}.get(file_type, "Binary")
            readable = f"[{label} data: {file_name} - {len(body)} bytes]"
            if file_type == "image":
                note = "Image content available (base64) for visual analysis."
                analyzable = True
            elif file_type == "document":
                note = (
                    f"Document file ({extension}). Metadata is available; full text "
                    f"extraction needs a document parser."
                )
                analyzable = "limited"
            else:
                note = "Binary file. Specialized tools are required for content analysis."
                analyzable = False

        self.logger.info(f"{file_type} object downloaded: {file_name} ({len(body)} bytes)")

        return {
            "success": True,
            "message": (
                f"✅ File \"{file_name}\" downloaded from bucket "
                f"\"{params['bucketName']}\" successfully!"
            ),
            "file_name": file_name,
            "file_type": file_type,
            "file_content": file_content,
            "encoding": encoding,
            "file_size": len(body),
            "is_analyzable": analyzable,
            "analysis_note": note,
            "readable_content": readable,
            "content_type": response.get("ContentType"),
            "last_modified": response.get("LastModified"),
            "etag": response.get("ETag"),
            "ai_extracted_params": params,
            "aws_command_params": command_params,
            "aws_response": {
                "content_length": response.get("ContentLength"),
                "metadata": response.get("Metadata"),
                "server_side_encryption": response.get("ServerSideEncryption"),
                "version_id": response.get("VersionId"),
            },
        }

    def delete_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if _missing(params, "bucketName", "fileName"):
            return _validation_error("bucketName and fileName are required.", params)

        if params.get("bypassGovernanceRetention"):
            self.logger.warning("Bypassing governance retention - this is a privileged operation")

        command_params = None
        try:
            command_params = self.mapper.map(params)
            response = self.storage.delete_object(command_params)
        except Exception as e:
            code, _, _ = describe_client_error(e)
            hint, suggestion = self._delete_hint(code, params)
            return self._error_result(e, params, command_params, hint=hint, suggestion=suggestion)

        delete_marker = response.get("DeleteMarker")
        version_id = response.get("VersionId")

        if delete_marker:
            status = "Delete marker created (object is in versioned bucket)"
            operation = "versioned_delete"
        elif version_id:
            status = f"Version {version_id} deleted permanently"
            operation = "permanent_version_delete"
        else:
            status = "Delete request completed successfully"
            operation = "simple_delete"

        was_deleted = delete_marker is not None or version_id is not None

        return {
            "success": True,
            "message": (
                f"✅ File \"{params['fileName']}\" deleted from bucket "
                f"\"{params['bucketName']}\" successfully!"
            ),
            "file_name": params["fileName"],
            "bucket_name": params["bucketName"],
            "ai_extracted_params": params,
            "aws_command_params": command_params,
            "deletion_details": {
                "status": status,
                "delete_marker": delete_marker,
                "version_id": version_id,
                "request_charged": response.get("RequestCharged"),
                "operation_type": operation,
                # DeleteObject is idempotent: missing objects also succeed
                "note": (
                    "Object was deleted" if was_deleted
                    else "Delete request completed (object may not have existed)"
                ),
            },
            "aws_response": {"metadata": _response_metadata(response)},
        }

    @staticmethod
    def _delete_hint(code: str, params: Dict[str, Any]):
        hint = DELETE_ERROR_HINTS.get(code, "Check credentials and permissions")
        suggestion = ""

        if code == "NoSuchBucket":
            hint = f"The bucket \"{params.get('bucketName')}\" does not exist"
            suggestion = "Verify bucket name and region configuration"
        elif code == "AccessDenied":
            if params.get("versionId"):
                suggestion = "Deleting specific version requires s3:DeleteObjectVersion permission"
            elif params.get("bypassGovernanceRetention"):
                suggestion = "Bypassing governance requires s3:BypassGovernanceRetention permission"
            else:
                suggestion = "Ensure IAM policy includes s3:DeleteObject permission"
        elif code == "InvalidArgument":
            suggestion = (
                "MFA delete format should be: \"serial-number token-code\""
                if params.get("mfa") else "Check parameter format and values"
            )
        elif code == "MethodNotAllowed":
            suggestion = (
                "Object might be protected by Object Lock or bucket policy "
                "denies delete operations"
            )

        return hint, suggestion
