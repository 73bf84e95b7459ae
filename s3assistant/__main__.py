"""
S3 Assistant command line

Usage:
    python -m s3assistant mcp                      # MCP tool server on stdio
    python -m s3assistant api [--host H --port P]  # HTTP chat API
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from .config import get_settings, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="s3assistant", description="S3 storage assistant")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("mcp", help="Run the MCP tool server over stdio")

    api = sub.add_parser("api", help="Run the HTTP chat API")
    api.add_argument("--host", default=None, help="Bind address (default: API_HOST or 0.0.0.0)")
    api.add_argument("--port", type=int, default=None, help="Port (default: API_PORT or 3001)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper() if args.log_level else None)

    if args.command == "mcp":
        from .mcp.server import main as run_mcp_server

        asyncio.run(run_mcp_server())
        return 0

    from .api.app import create_app

    settings = get_settings()
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info(f"✅ S3 assistant API running on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
