"""
Standardized Tool Descriptions for the S3 assistant MCP server

Model-facing descriptions and JSON input schemas for every tool.

STANDARD FORMAT:
"[Action description]. USE FOR: [use cases]. PARAMETERS: [extraction guidance]."

Parameter names are camelCase; the ParameterMapper turns them into S3 API
names, so any additional S3 parameter can be passed in camelCase as well.
"""

from typing import Any, Dict

# ============================================================================
# Shared schema fragments
# ============================================================================

_BUCKET = {"type": "string", "description": "Bucket name (ALWAYS REQUIRED - ask the user if missing)"}

_S3_UPLOAD_OPTIONS = {
    "acl": {
        "type": "string",
        "enum": ["private", "public-read", "public-read-write", "authenticated-read"],
        "description": "Canned ACL (default: private)",
    },
    "serverSideEncryption": {"type": "string", "enum": ["AES256", "aws:kms"]},
    "storageClass": {
        "type": "string",
        "enum": ["STANDARD", "REDUCED_REDUNDANCY", "STANDARD_IA", "ONEZONE_IA",
                 "INTELLIGENT_TIERING", "GLACIER", "DEEP_ARCHIVE", "GLACIER_IR"],
    },
    "metadata": {"type": "object", "additionalProperties": {"type": "string"},
                 "description": "User metadata key/value pairs"},
}


# ============================================================================
# TOOL DESCRIPTIONS
# ============================================================================

TOOL_DESCRIPTIONS: Dict[str, str] = {
    "create_bucket": (
        "Create a storage bucket. "
        "USE FOR: new buckets, regional buckets, object-lock buckets. "
        "PARAMETERS: bucketName is required - if the user did not give one, ASK FOR IT. "
        "Use acl 'private' unless public access is requested; set "
        "objectLockEnabledForBucket for compliance/WORM requests."
    ),
    "delete_bucket": (
        "Delete an (empty) storage bucket. "
        "USE FOR: removing buckets. Always confirm with the user before deleting."
    ),
    "list_buckets": (
        "List storage buckets with creation dates. "
        "USE FOR: storage overview, finding buckets by prefix or region, pagination."
    ),
    "put_object": (
        "Universal upload. "
        "USE FOR: (1) uploading given text with fileName + fileContent, "
        "(2) uploading one local file with filePath, "
        "(3) uploading a whole local directory with directoryPath. "
        "PARAMETERS: bucketName is required; s3Key overrides the object key."
    ),
    "get_object": (
        "Download an object and return its content. "
        "USE FOR: reading, summarizing or analyzing stored files. Text comes back as "
        "UTF-8, images/documents/binaries as base64."
    ),
    "delete_object": (
        "Delete an object (or a specific version). "
        "USE FOR: removing files. Always confirm before deleting; "
        "bypassGovernanceRetention is privileged."
    ),
    "read_file": (
        "Read a local file with automatic text/binary detection. "
        "USE FOR: inspecting a local file before uploading it."
    ),
    "list_directory": (
        "List a local directory with sizes and modification times. "
        "USE FOR: browsing local files to choose what to upload."
    ),
    "write_text_to_file": (
        "Write text to a local file and upload it to a bucket. "
        "USE FOR: saving generated notes, reports or data as objects."
    ),
    "scrape_website_to_file": (
        "Fetch a web page, save it locally and upload it to a bucket. "
        "USE FOR: archiving web pages; set extractText to store only the visible text."
    ),
    "export_table_to_storage": (
        "Export a MySQL table to a bucket as JSON, CSV or JSONL. "
        "USE FOR: database backups and data exports. "
        "PARAMETERS: tableName, mysqlDatabase and bucketName are required."
    ),
}


# ============================================================================
# INPUT SCHEMAS
# ============================================================================

TOOL_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "create_bucket": {
        "type": "object",
        "properties": {
            "bucketName": _BUCKET,
            "acl": _S3_UPLOAD_OPTIONS["acl"],
            "locationConstraint": {"type": "string", "description": "Region, e.g. 'eu-west-1'"},
            "objectLockEnabledForBucket": {"type": "boolean"},
            "objectOwnership": {
                "type": "string",
                "enum": ["BucketOwnerPreferred", "ObjectWriter", "BucketOwnerEnforced"],
            },
        },
        "required": ["bucketName"],
    },
    "delete_bucket": {
        "type": "object",
        "properties": {
            "bucketName": _BUCKET,
            "expectedBucketOwner": {"type": "string"},
        },
        "required": ["bucketName"],
    },
    "list_buckets": {
        "type": "object",
        "properties": {
            "maxBuckets": {"type": "integer", "minimum": 1, "maximum": 10000},
            "continuationToken": {"type": "string"},
            "prefix": {"type": "string"},
            "bucketRegion": {"type": "string"},
        },
    },
    "put_object": {
        "type": "object",
        "properties": {
            "bucketName": _BUCKET,
            "fileName": {"type": "string", "description": "Object key (direct content mode)"},
            "fileContent": {"type": "string", "description": "Content to upload (direct content mode)"},
            "filePath": {"type": "string", "description": "Local file to upload"},
            "s3Key": {"type": "string", "description": "Object key for filePath uploads"},
            "directoryPath": {"type": "string", "description": "Local directory to upload"},
            "s3Prefix": {"type": "string", "description": "Key prefix for directory uploads"},
            "preserveStructure": {"type": "boolean", "default": True},
            "fileExtensions": {"type": "array", "items": {"type": "string"}},
            "maxFiles": {"type": "integer", "default": 100},
            "excludeHidden": {"type": "boolean", "default": True},
            "contentType": {"type": "string"},
            "cacheControl": {"type": "string"},
            "expires": {"type": "string", "description": "ISO-8601 date"},
            "tagging": {"type": "string", "description": "URL-encoded tags, e.g. 'k1=v1&k2=v2'"},
            "bucketKeyEnabled": {"type": "boolean"},
            "objectLockMode": {"type": "string", "enum": ["GOVERNANCE", "COMPLIANCE"]},
            "objectLockRetainUntilDate": {"type": "string", "description": "ISO-8601 date"},
            **_S3_UPLOAD_OPTIONS,
        },
        "required": ["bucketName"],
    },
    "get_object": {
        "type": "object",
        "properties": {
            "bucketName": _BUCKET,
            "fileName": {"type": "string", "description": "Object key"},
            "versionId": {"type": "string"},
            "range": {"type": "string", "description": "Byte range, e.g. 'bytes=0-1023'"},
            "ifModifiedSince": {"type": "string", "description": "ISO-8601 date"},
            "ifUnmodifiedSince": {"type": "string", "description": "ISO-8601 date"},
            "ifMatch": {"type": "string"},
            "ifNoneMatch": {"type": "string"},
        },
        "required": ["bucketName", "fileName"],
    },
    "delete_object": {
        "type": "object",
        "properties": {
            "bucketName": _BUCKET,
            "fileName": {"type": "string", "description": "Object key"},
            "versionId": {"type": "string"},
            "mfa": {"type": "string", "description": "'serial-number token-code'"},
            "bypassGovernanceRetention": {"type": "boolean"},
        },
        "required": ["bucketName", "fileName"],
    },
    "read_file": {
        "type": "object",
        "properties": {"filePath": {"type": "string"}},
        "required": ["filePath"],
    },
    "list_directory": {
        "type": "object",
        "properties": {
            "directoryPath": {"type": "string"},
            "showHidden": {"type": "boolean", "default": False},
            "filesOnly": {"type": "boolean", "default": False},
            "dirsOnly": {"type": "boolean", "default": False},
            "recursive": {"type": "boolean", "default": False},
            "maxDepth": {"type": "integer", "default": 3},
        },
        "required": ["directoryPath"],
    },
    "write_text_to_file": {
        "type": "object",
        "properties": {
            "textContent": {"type": "string"},
            "localFilePath": {"type": "string"},
            "bucketName": _BUCKET,
            "s3Key": {"type": "string"},
            "keepLocalFile": {"type": "boolean", "default": False},
            "appendMode": {"type": "boolean", "default": False},
            "encoding": {"type": "string", "default": "utf-8"},
            "contentType": {"type": "string"},
            **_S3_UPLOAD_OPTIONS,
        },
        "required": ["textContent", "localFilePath", "bucketName"],
    },
    "scrape_website_to_file": {
        "type": "object",
        "properties": {
            "url": {"type": "string"},
            "bucketName": _BUCKET,
            "localFilePath": {"type": "string"},
            "s3Key": {"type": "string"},
            "keepLocalFile": {"type": "boolean", "default": False},
            "extractText": {"type": "boolean", "default": False},
            "requestHeaders": {"type": "object", "additionalProperties": {"type": "string"}},
            "contentType": {"type": "string"},
            **_S3_UPLOAD_OPTIONS,
        },
        "required": ["url", "bucketName", "localFilePath"],
    },
    "export_table_to_storage": {
        "type": "object",
        "properties": {
            "tableName": {"type": "string"},
            "mysqlDatabase": {"type": "string"},
            "bucketName": _BUCKET,
            "format": {"type": "string", "enum": ["json", "csv", "jsonl"], "default": "json"},
            "fileName": {"type": "string"},
            "s3Prefix": {"type": "string"},
            "where": {"type": "string", "description": "SQL WHERE clause without the keyword"},
            "orderBy": {"type": "string"},
            "limit": {"type": "integer"},
            "csvDelimiter": {"type": "string", "default": ","},
            "prettyFormat": {"type": "boolean", "default": True},
            "mysqlHost": {"type": "string"},
            "mysqlPort": {"type": "string"},
            "mysqlUser": {"type": "string"},
            "mysqlPassword": {"type": "string"},
            **_S3_UPLOAD_OPTIONS,
        },
        "required": ["tableName", "mysqlDatabase", "bucketName"],
    },
}


def get_tool_description(tool: str) -> str:
    return TOOL_DESCRIPTIONS.get(tool, "")


def get_tool_schema(tool: str) -> Dict[str, Any]:
    return TOOL_SCHEMAS.get(tool, {"type": "object", "properties": {}})
