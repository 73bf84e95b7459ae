"""
MCP (Model Context Protocol) stdio client

Speaks newline-delimited JSON-RPC 2.0 with a child process. Two servers are
reached this way:
- this package's own tool server (chat bridge, one process per turn)
- an external MySQL MCP server (table export, one process per export)
"""

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
CLIENT_INFO = {"name": "mcp-s3-assistant", "version": "1.0.0"}

# Largest single JSON-RPC line accepted from a server (exports, object bodies)
STREAM_LIMIT = 10 * 1024 * 1024


class MCPClient:
    """
    One MCP server process plus the JSON-RPC session on its stdio.

    Usable as an async context manager; start() and close() can also be
    called explicitly.
    """

    def __init__(
        self,
        server_command: List[str],
        server_args: Optional[List[str]] = None,
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: float = 30.0
    ):
        """
        Args:
            server_command: argv of the server (e.g. ["node", "dist/index.js"])
            server_args: Extra argv appended to server_command
            cwd: Working directory of the server process
            env: Variables layered over the current environment
            timeout: Seconds to wait for each response
        """
        self.argv = list(server_command) + list(server_args or [])
        self.cwd = cwd
        self.env = env
        self.timeout = timeout
        self.process: Optional[asyncio.subprocess.Process] = None
        self.initialized = False
        self._last_id = 0
        self._lock = asyncio.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def label(self) -> str:
        return " ".join(self.argv)

    async def __aenter__(self) -> "MCPClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        """Spawn the server and run the initialize handshake"""
        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                cwd=self.cwd,
                env={**os.environ, **self.env} if self.env else None,
                limit=STREAM_LIMIT,
            )
            self.logger.info(f"MCP server started: {self.label}")

            await self._request("initialize", {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "clientInfo": CLIENT_INFO,
            })
            await self._write({"jsonrpc": "2.0", "method": "notifications/initialized"})
            self.initialized = True
            self.logger.info(f"MCP session ready: {self.label}")
        except Exception as e:
            self.logger.error(f"Failed to start MCP server {self.label}: {e}")
            await self.close()
            raise

    async def _write(self, message: Dict[str, Any]):
        if not self.process or not self.process.stdin:
            raise RuntimeError("MCP server not started")
        self.process.stdin.write((json.dumps(message) + "\n").encode())
        await self.process.stdin.drain()

    async def _read_response(self, request_id: int) -> Dict[str, Any]:
        # Server notifications and stale responses are skipped
        while True:
            line = await self.process.stdout.readline()
            if not line:
                raise RuntimeError("MCP server closed connection")
            text = line.decode().strip()
            if not text:
                continue
            message = json.loads(text)
            if message.get("id") == request_id:
                return message

    async def _request(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Send one request and return its result; JSON-RPC errors raise RuntimeError"""
        async with self._lock:
            self._last_id += 1
            request_id = self._last_id
            await self._write({"jsonrpc": "2.0", "id": request_id, "method": method, "params": params})
            try:
                response = await asyncio.wait_for(self._read_response(request_id), timeout=self.timeout)
            except asyncio.TimeoutError:
                raise RuntimeError(f"MCP request timeout ({self.timeout:.0f}s)")

        if "error" in response:
            error = response["error"]
            raise RuntimeError(f"MCP error: {error.get('message', error)}")
        return response.get("result", {})

    def _require_session(self):
        if not self.initialized:
            raise RuntimeError("MCP client not initialized")

    async def list_tools(self) -> List[Dict[str, Any]]:
        """Tool definitions (name, description, inputSchema) offered by the server"""
        self._require_session()
        tools = (await self._request("tools/list", {})).get("tools", [])
        self.logger.info(f"Listed {len(tools)} tools from {self.label}")
        return tools

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Invoke a tool.

        Returns:
            Raw tools/call result: {"content": [...], "isError": bool}
        """
        self._require_session()
        return await self._request("tools/call", {"name": tool_name, "arguments": arguments})

    async def close(self):
        """Close stdin and wait for the server to exit (killed after 5s)"""
        process, self.process = self.process, None
        self.initialized = False
        if process is None:
            return
        try:
            if process.stdin and not process.stdin.is_closing():
                process.stdin.close()
            await asyncio.wait_for(process.wait(), timeout=5.0)
        except (asyncio.TimeoutError, ProcessLookupError):
            if process.returncode is None:
                process.kill()
                await process.wait()
        self.logger.info(f"MCP server closed: {self.label}")


def result_text(result: Dict[str, Any]) -> str:
    """Concatenate the text items of a tools/call result"""
    return "\n".join(
        item.get("text", "")
        for item in result.get("content", [])
        if isinstance(item, dict) and item.get("type") == "text"
    )
