"""Function-as-a-service entry point.

Some hosting platforms can't mount the full MCP Streamable HTTP transport, so
this module answers a reduced JSON-RPC 2.0 subset directly:

- ``initialize``: protocol handshake, returns a fresh ``Mcp-Session-Id`` header
- ``tools/list``: the full tool catalog from the shared registry
- ``tools/call``: runs one tool; any failure becomes JSON-RPC error ``-32000``

Any other method is answered with ``-32601 Method not found``. There is no
session state, notification handling or batching.

The event is the usual API-gateway shape: ``{"httpMethod", "path", "body"}``.
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import configure
from mcp_tools.errors import TransportError
from mcp_tools.plugin import ToolRegistry
from plugins.airflow import build_registry
from server.app import SERVER_VERSION, decode_json_body, tool_definitions
from server.tool_result_processor import content_to_dicts, process_tool_result

logger = logging.getLogger(__name__)

SERVERLESS_SERVER_NAME = "mcp-server-airflow-serverless"
PROTOCOL_VERSION = "2024-11-05"

TOOL_ERROR = -32000
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
}
PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Mcp-Session-Id",
}

_registry: Optional[ToolRegistry] = None


def get_registry() -> ToolRegistry:
    """Build the registry on first use and reuse it for warm invocations.

    Raises:
        ConfigurationError: If the Airflow credentials are not configured
    """
    global _registry
    if _registry is None:
        _registry = build_registry(configure())
    return _registry


def _response(
    status_code: int, payload: Any, headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json", **CORS_HEADERS, **(headers or {})},
        "body": json.dumps(payload),
    }


def _rpc_result(request_id: Any, result: Dict[str, Any], headers: Optional[Dict[str, str]] = None):
    return _response(200, {"jsonrpc": "2.0", "id": request_id, "result": result}, headers)


def _rpc_error(request_id: Any, code: int, message: str):
    return _response(
        200,
        {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}},
    )


async def _call_tool(registry: ToolRegistry, request_id: Any, params: Any):
    if not isinstance(params, dict) or not isinstance(params.get("name"), str):
        return _rpc_error(request_id, INVALID_PARAMS, "Invalid params: 'name' is required")

    arguments = params.get("arguments") or {}
    try:
        text = await registry.invoke(params["name"], arguments)
    except Exception as e:
        # registry.invoke has already logged the failure
        return _rpc_error(request_id, TOOL_ERROR, str(e))

    return _rpc_result(request_id, {"content": content_to_dicts(process_tool_result(text))})


async def handle_event(event: Dict[str, Any], registry: Optional[ToolRegistry] = None):
    """Answer one HTTP event.

    Args:
        event: Gateway event with ``httpMethod``, ``path`` and ``body``
        registry: Tool registry; built from the environment when omitted

    Returns:
        Gateway response dict with ``statusCode``, ``headers`` and ``body``
    """
    if event.get("httpMethod") == "OPTIONS":
        return {"statusCode": 200, "headers": PREFLIGHT_HEADERS, "body": ""}

    if (event.get("path") or "").endswith("/health"):
        return _response(
            200,
            {
                "status": "healthy",
                "service": SERVERLESS_SERVER_NAME,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    raw_body = event.get("body")
    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    try:
        body = decode_json_body(raw_body)
    except TransportError as e:
        return _response(400, {"error": e.message})

    request_id = body.get("id") if isinstance(body, dict) else None
    method = body.get("method") if isinstance(body, dict) else None

    try:
        if method == "initialize":
            return _rpc_result(
                request_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {"listChanged": True}},
                    "serverInfo": {"name": SERVERLESS_SERVER_NAME, "version": SERVER_VERSION},
                },
                headers={"Mcp-Session-Id": str(uuid.uuid4())},
            )

        if registry is None and method in ("tools/list", "tools/call"):
            registry = get_registry()

        if method == "tools/list":
            tools = [
                tool.model_dump(exclude_none=True) for tool in tool_definitions(registry)
            ]
            return _rpc_result(request_id, {"tools": tools})

        if method == "tools/call":
            return await _call_tool(registry, request_id, body.get("params"))

        return _rpc_error(request_id, METHOD_NOT_FOUND, "Method not found")

    except Exception as e:
        logger.exception("Error handling MCP request")
        return _response(500, {"error": "Internal server error", "message": str(e)})


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Synchronous handler for function-as-a-service runtimes."""
    return asyncio.run(handle_event(event))
