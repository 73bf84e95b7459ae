"""
Export Tools - relational table export into object storage

Bridges a MySQL MCP server and the storage tools:
1. Spawn the MySQL MCP server and run a read-only SELECT through its
   mysql_query tool
2. Format the rows (json / csv / jsonl)
3. Upload the file with put_object, tagging it with export metadata
"""

import json
import logging
import re
import shlex
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from ..config import Settings, get_settings
from ..mcp.client import MCPClient, result_text
from .file_tools import PASSTHROUGH_S3_KEYS
from .storage_tools import StorageTools

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_$]+$")

EXPORT_CONTENT_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "jsonl": "application/x-jsonlines",
}

QUERY_TIMEOUT = 10.0


class ExportError(Exception):
    """Raised when the MySQL MCP server cannot produce rows"""


def build_select_query(params: Dict[str, Any]) -> str:
    """SELECT for the requested table; database and table must be plain identifiers"""
    database = params["mysqlDatabase"]
    table = params["tableName"]
    for label, value in (("mysqlDatabase", database), ("tableName", table)):
        if not IDENTIFIER_RE.match(str(value)):
            raise ValueError(f"{label} must be a plain identifier, got {value!r}")

    sql = f"SELECT * FROM `{database}`.`{table}`"
    if params.get("where"):
        sql += f" WHERE {params['where']}"
    if params.get("orderBy"):
        sql += f" ORDER BY {params['orderBy']}"
    if params.get("limit"):
        sql += f" LIMIT {int(params['limit'])}"
    return sql


def format_rows(rows: List[Dict[str, Any]], fmt: str, params: Dict[str, Any]) -> str:
    """Serialize rows as json (with export envelope), csv or jsonl"""
    fmt = fmt.lower()

    if fmt == "json":
        payload = {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "record_count": len(rows),
            "table_name": params.get("tableName"),
            "data": rows,
        }
        indent = None if params.get("prettyFormat") is False else 2
        return json.dumps(payload, indent=indent, default=str)

    if fmt == "csv":
        if not rows:
            return ""
        delimiter = params.get("csvDelimiter") or ","
        return pd.DataFrame(rows).to_csv(index=False, sep=delimiter, lineterminator="\n")

    if fmt == "jsonl":
        return "\n".join(json.dumps(row, default=str) for row in rows)

    return json.dumps(rows, indent=2, default=str)


def generate_file_name(table_name: str, fmt: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{table_name}_export_{timestamp}.{fmt}"


class ExportTools:
    """Table export bridge (MySQL MCP -> object storage)"""

    def __init__(
        self,
        storage_tools: Optional[StorageTools] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[..., MCPClient]] = None
    ):
        self.storage_tools = storage_tools or StorageTools()
        self.settings = settings or get_settings()
        self.client_factory = client_factory or MCPClient
        self.logger = logging.getLogger(self.__class__.__name__)

    def _mysql_env(self, params: Dict[str, Any]) -> Dict[str, str]:
        s = self.settings
        return {
            "MYSQL_HOST": str(params.get("mysqlHost") or s.mysql_host),
            "MYSQL_PORT": str(params.get("mysqlPort") or s.mysql_port),
            "MYSQL_USER": str(params.get("mysqlUser") or s.mysql_user),
            "MYSQL_PASS": str(params.get("mysqlPassword") or s.mysql_password or ""),
            "MYSQL_DB": "",  # multi-database mode
            "ALLOW_INSERT_OPERATION": "false",
            "ALLOW_UPDATE_OPERATION": "false",
            "ALLOW_DELETE_OPERATION": "false",
        }

    async def query_rows(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Run the export SELECT on the MySQL MCP server and return its rows"""
        sql = build_select_query(params)
        client = self.client_factory(
            shlex.split(self.settings.mysql_mcp_command),
            cwd=self.settings.mysql_mcp_cwd,
            env=self._mysql_env(params),
            timeout=QUERY_TIMEOUT,
        )

        self.logger.info(f"Querying MySQL MCP: {sql}")
        await client.start()
        try:
            result = await client.call_tool("mysql_query", {"sql": sql})
        finally:
            await client.close()

        text = result_text(result)
        if result.get("isError"):
            raise ExportError(text or "MySQL MCP returned an error")
        if not text:
            raise ExportError("No text content found in MySQL MCP response")

        try:
            rows = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExportError(f"Failed to parse MySQL MCP response: {e}") from e
        if not isinstance(rows, list):
            raise ExportError("Invalid MySQL MCP response format: expected a list of rows")
        return rows

    async def export_table_to_storage(self, params: Dict[str, Any]) -> Dict[str, Any]:
        for name, message in (
            ("tableName", "tableName is required."),
            ("bucketName", "bucketName is required."),
            ("mysqlDatabase", "mysqlDatabase is required. Specify which database to export from."),
        ):
            if not params.get(name):
                return {"success": False, "message": f"Error: {message}", "received_params": params}

        table = params["tableName"]
        fmt = str(params.get("format") or "json").lower()

        try:
            rows = await self.query_rows(params)
        except (ExportError, ValueError, RuntimeError, OSError) as e:
            self.logger.error(f"MySQL MCP query failed: {e}")
            return {
                "success": False,
                "message": f"❌ MySQL MCP query failed: {e}",
                "error_details": {"error_code": e.__class__.__name__, "error_message": str(e)},
            }

        self.logger.info(f"Retrieved {len(rows)} records from {table}")

        content = format_rows(rows, fmt, params)
        file_name = params.get("fileName") or generate_file_name(table, fmt)
        prefix = (params.get("s3Prefix") or "").strip("/")
        key = f"{prefix}/{file_name}" if prefix else file_name

        metadata = {str(k): str(v) for k, v in (params.get("metadata") or {}).items()}
        metadata.update({
            "source": "mysql-mcp-bridge",
            "table-name": str(table),
            "export-format": fmt,
            "record-count": str(len(rows)),
            "export-timestamp": datetime.now(timezone.utc).isoformat(),
        })

        upload_params = {
            "bucketName": params["bucketName"],
            "fileName": key,
            "fileContent": content,
            "contentType": EXPORT_CONTENT_TYPES.get(fmt, "text/plain"),
        }
        upload_params.update({k: params[k] for k in PASSTHROUGH_S3_KEYS if params.get(k) is not None})
        upload_params["metadata"] = metadata

        upload_result = self.storage_tools.put_object(upload_params)
        if not upload_result["success"]:
            return {
                "success": False,
                "message": f"❌ Export failed during storage upload: {upload_result['message']}",
                "export_data": {"record_count": len(rows), "format": fmt, "data_size": len(content)},
                "upload_error": upload_result,
            }

        return {
            "success": True,
            "message": f"✅ Successfully exported {table} to {params['bucketName']}!",
            "export_summary": {
                "source": "MySQL via MCP bridge",
                "table_name": table,
                "record_count": len(rows),
                "format": fmt,
                "file_size": len(content),
                "file_name": key,
                "bucket_name": params["bucketName"],
            },
            "mysql_info": {
                "host": params.get("mysqlHost") or self.settings.mysql_host,
                "database": params["mysqlDatabase"],
                "table": table,
            },
            "upload_info": upload_result.get("upload_info"),
            "aws_response": upload_result.get("aws_response"),
        }
