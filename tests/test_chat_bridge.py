import asyncio
import json
from types import SimpleNamespace

import pytest

from s3assistant.clients.llm_client import ChatBridge, mcp_tools_to_openai


def _chunk(content=None, tool_calls=None, finish_reason=None):
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)])


def _tool_delta(index, id=None, name=None, arguments=None):
    return SimpleNamespace(index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments))


class FakeCompletions:
    """Replays one scripted list of chunks per create() call"""

    def __init__(self, rounds):
        self.rounds = list(rounds)
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        chunks = self.rounds.pop(0)

        async def stream():
            for chunk in chunks:
                yield chunk

        return stream()


class FakeMCP:
    def __init__(self, fail_on_start=False):
        self.fail_on_start = fail_on_start
        self.calls = []
        self.closed = False

    async def start(self):
        if self.fail_on_start:
            raise RuntimeError("MCP server closed connection")

    async def list_tools(self):
        return [{"name": "list_buckets", "description": "List buckets", "inputSchema": {"type": "object"}}]

    async def call_tool(self, name, arguments):
        self.calls.append((name, arguments))
        return {"content": [{"type": "text", "text": json.dumps({"success": True, "total_buckets": 2})}]}

    async def close(self):
        self.closed = True


def _bridge(settings, rounds, mcp=None, max_steps=5):
    completions = FakeCompletions(rounds)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    mcp = mcp or FakeMCP()
    bridge = ChatBridge(settings=settings, client=client, mcp_factory=lambda: mcp, max_steps=max_steps)
    return bridge, completions, mcp


def _events(bridge, messages):
    async def drain():
        return [event async for event in bridge.stream(messages)]

    return asyncio.run(drain())


TOOL_ROUND = [
    _chunk(tool_calls=[_tool_delta(0, id="call_1", name="list_buckets", arguments='{"max')]),
    _chunk(tool_calls=[_tool_delta(0, arguments='Buckets": 5}')]),
    _chunk(finish_reason="tool_calls"),
]
ANSWER_ROUND = [_chunk(content="You have "), _chunk(content="2 buckets."), _chunk(finish_reason="stop")]


def test_mcp_tools_to_openai():
    tools = mcp_tools_to_openai([{"name": "x"}])
    assert tools == [{
        "type": "function",
        "function": {"name": "x", "description": "", "parameters": {"type": "object", "properties": {}}},
    }]


def test_plain_answer_streams_text(settings):
    bridge, completions, mcp = _bridge(settings, [ANSWER_ROUND])

    events = _events(bridge, [{"role": "user", "content": "hi"}])

    assert [e["type"] for e in events] == ["text", "text", "finish"]
    assert events[-1]["finish_reason"] == "stop"
    assert mcp.closed is True
    request = completions.requests[0]
    assert request["model"] == "gpt-4o-mini"
    assert request["stream"] is True
    assert request["messages"][0]["role"] == "system"
    assert request["tools"][0]["function"]["name"] == "list_buckets"


def test_tool_round_trip(settings):
    bridge, completions, mcp = _bridge(settings, [TOOL_ROUND, ANSWER_ROUND])

    events = _events(bridge, [{"role": "user", "content": "how many buckets?"}])

    assert [e["type"] for e in events] == ["tool_call", "tool_result", "text", "text", "finish"]
    assert events[0]["args"] == {"maxBuckets": 5}
    assert mcp.calls == [("list_buckets", {"maxBuckets": 5})]

    second = completions.requests[1]["messages"]
    assert second[-2]["tool_calls"][0]["function"]["arguments"] == '{"maxBuckets": 5}'
    assert second[-1]["role"] == "tool"
    assert second[-1]["tool_call_id"] == "call_1"
    assert json.loads(second[-1]["content"])["total_buckets"] == 2


def test_max_steps_stops_tool_loop(settings):
    bridge, completions, mcp = _bridge(settings, [TOOL_ROUND, TOOL_ROUND], max_steps=2)

    events = _events(bridge, [{"role": "user", "content": "loop"}])

    assert events[-1] == {"type": "finish", "finish_reason": "max_steps", "steps": 2}
    assert len(completions.requests) == 2
    assert mcp.closed is True


def test_invalid_tool_arguments_are_reported_to_model(settings):
    bad_round = [_chunk(tool_calls=[_tool_delta(0, id="call_9", name="list_buckets", arguments="{oops")])]
    bridge, completions, mcp = _bridge(settings, [bad_round, ANSWER_ROUND])

    events = _events(bridge, [{"role": "user", "content": "x"}])

    assert mcp.calls == []
    result = next(e for e in events if e["type"] == "tool_result")
    assert result["result"].startswith("Error: invalid tool arguments")


def test_stream_errors_become_events_and_close_client(settings):
    mcp = FakeMCP(fail_on_start=True)
    bridge, _, _ = _bridge(settings, [], mcp=mcp)

    events = _events(bridge, [{"role": "user", "content": "x"}])

    assert events == [{"type": "error", "error": "MCP server closed connection"}]
    assert mcp.closed is True


def test_collect_gathers_text_and_tools(settings):
    bridge, _, _ = _bridge(settings, [TOOL_ROUND, ANSWER_ROUND])
    result = asyncio.run(bridge.collect([{"role": "user", "content": "x"}]))
    assert result == {"text": "You have 2 buckets.", "tools_called": ["list_buckets"]}


def test_collect_text(settings):
    bridge, _, _ = _bridge(settings, [ANSWER_ROUND])
    assert asyncio.run(bridge.collect_text([{"role": "user", "content": "x"}])) == "You have 2 buckets."


def test_collect_raises_on_error(settings):
    bridge, _, _ = _bridge(settings, [], mcp=FakeMCP(fail_on_start=True))
    with pytest.raises(RuntimeError, match="closed connection"):
        asyncio.run(bridge.collect([{"role": "user", "content": "x"}]))
