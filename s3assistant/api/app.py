"""
HTTP API - chat front door for the S3 assistant

Endpoints:
- GET  /health
- POST /api/chat          streaming chat (Server-Sent Events)
- POST /api/list-buckets  non-streaming bucket summary

Each request builds its own ChatBridge, which spawns the MCP tool server for
the duration of that request.
"""

import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from ..clients.llm_client import BUCKET_SUMMARY_PROMPT, ChatBridge
from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

BridgeFactory = Callable[[Optional[str]], ChatBridge]


class ChatRequest(BaseModel):
    messages: Optional[List[Dict[str, Any]]] = None
    apiKey: Optional[str] = None


class ListBucketsRequest(BaseModel):
    apiKey: Optional[str] = None


def sse_event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


async def sse_stream(bridge: ChatBridge, messages: List[Dict[str, Any]]) -> AsyncIterator[str]:
    async for event in bridge.stream(messages):
        yield sse_event(event)


def create_app(
    settings: Optional[Settings] = None,
    bridge_factory: Optional[BridgeFactory] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Runtime settings (defaults to the environment)
        bridge_factory: Builds a ChatBridge for an API key
    """
    settings = settings or get_settings()
    bridge_factory = bridge_factory or (lambda api_key: ChatBridge(api_key=api_key, settings=settings))

    app = FastAPI(title="S3 Assistant API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def resolve_key(request_key: Optional[str]) -> Optional[str]:
        # Server key takes precedence over a key sent by the browser
        return settings.openai_api_key or request_key

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": "s3-assistant-api",
            "note": "MCP servers are spawned per-request via stdio",
        }

    @app.post("/api/chat")
    async def chat(body: ChatRequest):
        if not body.messages:
            return JSONResponse(status_code=400, content={"error": "Messages array is required"})

        try:
            bridge = bridge_factory(resolve_key(body.apiKey))
        except Exception as e:
            logger.error(f"Error in /api/chat: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})

        logger.info(f"Processing conversation with {len(body.messages)} messages")
        return StreamingResponse(
            sse_stream(bridge, body.messages),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    @app.post("/api/list-buckets")
    async def list_buckets(body: Optional[ListBucketsRequest] = None):
        api_key = body.apiKey if body else None
        try:
            bridge = bridge_factory(resolve_key(api_key))
            result = await bridge.collect([{"role": "user", "content": BUCKET_SUMMARY_PROMPT}])
        except Exception as e:
            logger.error(f"Error in /api/list-buckets: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})

        return {
            "success": True,
            "response": result["text"],
            "tools_called": result["tools_called"],
        }

    return app
