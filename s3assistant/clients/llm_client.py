"""
LLM Client - chat bridge between the OpenAI API and the S3 assistant MCP server

Architecture:
1. Spawn this package's MCP server (stdio) and list its tools
2. Stream a chat completion with the tools attached
3. Execute requested tool calls through the MCP client and feed the results
   back, for up to max_steps rounds
4. Yield events for the HTTP layer: text / tool_call / tool_result / finish / error
"""

import json
import logging
import sys
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from openai import AsyncOpenAI

from ..config import Settings, get_settings
from ..mcp.client import MCPClient, result_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 5

SYSTEM_PROMPT = """You are an intelligent S3 Storage Assistant. You help users manage their S3 buckets and objects through natural conversation.

Your capabilities:
- List and analyze buckets with details
- Create new buckets with proper configuration
- Delete empty buckets
- Upload, download and delete objects
- Read and list local files for upload, write text to storage
- Scrape web pages into storage
- Export MySQL tables to storage

Communication style:
- Be friendly, conversational, and helpful
- Format responses with clear structure (lists, bullet points)
- When showing bucket lists, include key details like creation dates
- Always confirm actions before performing destructive operations
- Remember previous context and refer to earlier parts of the conversation

When a required parameter such as the bucket name is missing, ask the user for it instead of guessing."""

BUCKET_SUMMARY_PROMPT = (
    "Please analyze my S3 buckets and provide a friendly, conversational summary. "
    "Tell me how many buckets I have in total, identify which one was created most "
    "recently, and list all of them with their names and creation dates."
)


def default_server_command() -> List[str]:
    """Command that starts this package's MCP server with the current interpreter"""
    return [sys.executable, "-m", "s3assistant.mcp.server"]


def mcp_tools_to_openai(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert MCP tools/list entries to OpenAI function calling format"""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool.get("description", ""),
                "parameters": tool.get("inputSchema") or {"type": "object", "properties": {}},
            },
        }
        for tool in tools
    ]


class ChatBridge:
    """
    Streaming chat with MCP tool calling.

    One MCP server process is started per conversation turn and always closed
    when the stream ends.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        mcp_factory: Optional[Callable[[], MCPClient]] = None,
        max_steps: int = DEFAULT_MAX_STEPS
    ):
        """
        Args:
            api_key: OpenAI key (falls back to OPENAI_API_KEY)
            model: Chat model (falls back to OPENAI_MODEL, default gpt-4o-mini)
            client: Preconfigured AsyncOpenAI client
            mcp_factory: Builds an unstarted MCPClient for the tool server
            max_steps: Maximum number of model rounds per turn
        """
        self.settings = settings or get_settings()
        self.model = model or self.settings.openai_model
        self.max_steps = max_steps
        self.client = client or AsyncOpenAI(
            api_key=api_key or self.settings.openai_api_key,
            base_url=self.settings.openai_base_url,
        )
        self.mcp_factory = mcp_factory or (lambda: MCPClient(default_server_command()))
        self.logger = logging.getLogger(self.__class__.__name__)

        self.logger.info(f"ChatBridge initialized: {self.model} (max_steps={max_steps})")

    async def stream(
        self,
        messages: List[Dict[str, Any]],
        system: str = SYSTEM_PROMPT
    ) -> AsyncIterator[Dict[str, Any]]:
        """Run one conversation turn, yielding stream events"""
        mcp = self.mcp_factory()
        try:
            await mcp.start()
            tools = mcp_tools_to_openai(await mcp.list_tools())
            self.logger.info(
                f"Processing conversation with {len(messages)} messages, {len(tools)} tools"
            )

            conversation = [{"role": "system", "content": system}, *messages]

            for step in range(1, self.max_steps + 1):
                text_parts: List[str] = []
                pending: Dict[int, Dict[str, str]] = {}
                finish_reason = None

                stream = await self.client.chat.completions.create(
                    model=self.model,
                    messages=conversation,
                    tools=tools or None,
                    stream=True,
                )
                async for chunk in stream:
                    if not chunk.choices:
                        continue
                    choice = chunk.choices[0]
                    delta = choice.delta
                    if delta.content:
                        text_parts.append(delta.content)
                        yield {"type": "text", "content": delta.content}
                    for tc in delta.tool_calls or []:
                        slot = pending.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
                        if tc.id:
                            slot["id"] = tc.id
                        if tc.function:
                            slot["name"] += tc.function.name or ""
                            slot["arguments"] += tc.function.arguments or ""
                    if choice.finish_reason:
                        finish_reason = choice.finish_reason

                self.logger.info(f"[LLM] {self.model} | step={step} | finish={finish_reason}")

                if not pending:
                    yield {"type": "finish", "finish_reason": finish_reason or "stop", "steps": step}
                    return

                calls = [pending[index] for index in sorted(pending)]
                conversation.append({
                    "role": "assistant",
                    "content": "".join(text_parts) or None,
                    "tool_calls": [
                        {
                            "id": call["id"],
                            "type": "function",
                            "function": {"name": call["name"], "arguments": call["arguments"] or "{}"},
                        }
                        for call in calls
                    ],
                })

                for call in calls:
                    try:
                        args = json.loads(call["arguments"] or "{}")
                    except json.JSONDecodeError as e:
                        args = None
                        output = f"Error: invalid tool arguments for {call['name']}: {e}"

                    yield {
                        "type": "tool_call",
                        "tool_call_id": call["id"],
                        "tool_name": call["name"],
                        "args": args,
                    }
                    if args is not None:
                        output = result_text(await mcp.call_tool(call["name"], args))

                    yield {
                        "type": "tool_result",
                        "tool_call_id": call["id"],
                        "tool_name": call["name"],
                        "result": output,
                    }
                    conversation.append({
                        "role": "tool",
                        "tool_call_id": call["id"],
                        "content": output,
                    })

            self.logger.warning(f"Max steps ({self.max_steps}) reached in tool calling")
            yield {"type": "finish", "finish_reason": "max_steps", "steps": self.max_steps}

        except Exception as e:
            self.logger.error(f"Chat stream error: {e}")
            yield {"type": "error", "error": str(e)}

        finally:
            await mcp.close()

    async def collect(self, messages: List[Dict[str, Any]], system: str = SYSTEM_PROMPT) -> Dict[str, Any]:
        """
        Drain a turn into its full text and the names of the tools called.

        Raises:
            RuntimeError: if the stream reported an error
        """
        text_parts: List[str] = []
        tools_called: List[str] = []
        async for event in self.stream(messages, system=system):
            if event["type"] == "text":
                text_parts.append(event["content"])
            elif event["type"] == "tool_call":
                tools_called.append(event["tool_name"])
            elif event["type"] == "error":
                raise RuntimeError(event["error"])
        return {"text": "".join(text_parts), "tools_called": tools_called}

    async def collect_text(self, messages: List[Dict[str, Any]], system: str = SYSTEM_PROMPT) -> str:
        return (await self.collect(messages, system=system))["text"]
