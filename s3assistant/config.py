"""
Settings - environment-driven configuration

Values come from the process environment (a .env file is loaded on package
import). Settings.from_env() reads them once; get_settings() caches the result.
"""

import logging
import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the S3 assistant"""

    # S3 / object storage
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_endpoint: Optional[str] = None
    s3_verify_ssl: bool = False  # internal endpoints use self-signed certs
    s3_force_path_style: bool = True  # MinIO

    # LLM bridge
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 3001

    # MySQL MCP bridge
    mysql_mcp_command: str = "node dist/index.js"
    mysql_mcp_cwd: Optional[str] = None
    mysql_host: str = "localhost"
    mysql_port: str = "3306"
    mysql_user: str = "root"
    mysql_password: Optional[str] = None

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID") or None,
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY") or None,
            aws_region=os.getenv("AWS_REGION") or "us-east-1",
            s3_endpoint=os.getenv("S3_ENDPOINT") or None,
            s3_verify_ssl=_env_bool("S3_VERIFY_SSL", False),
            s3_force_path_style=_env_bool("S3_FORCE_PATH_STYLE", True),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-4o-mini",
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            api_host=os.getenv("API_HOST") or "0.0.0.0",
            api_port=_env_int("API_PORT", _env_int("EXPRESS_PORT", 3001)),
            mysql_mcp_command=os.getenv("MYSQL_MCP_COMMAND") or "node dist/index.js",
            mysql_mcp_cwd=os.getenv("MYSQL_MCP_CWD") or None,
            mysql_host=os.getenv("MYSQL_HOST") or "localhost",
            mysql_port=os.getenv("MYSQL_PORT") or "3306",
            mysql_user=os.getenv("MYSQL_USER") or "root",
            mysql_password=os.getenv("MYSQL_PASS") or None,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def setup_logging(level: Optional[str] = None):
    """
    Configure root logging for an entry point.

    Always logs to stderr: the MCP server speaks JSON-RPC on stdout.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
