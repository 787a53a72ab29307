"""MCP server construction shared by the stdio and HTTP transports."""

import json
import logging
from typing import Any, List, Optional

from mcp.server import Server
from mcp.types import TextContent, Tool

from mcp_tools.errors import TransportError
from mcp_tools.plugin import ToolRegistry
from server.tool_result_processor import process_tool_result

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-server-airflow"
SERVER_VERSION = "1.2.0"


def tool_definitions(registry: ToolRegistry) -> List[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in registry.list_tools()
    ]


def create_mcp_server(registry: ToolRegistry, name: str = SERVER_NAME) -> Server:
    """Create a low-level MCP server that serves every tool in ``registry``.

    Tool failures are re-raised; the SDK reports them to the client as a
    tool result with ``isError`` set.
    """
    server = Server(name, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return tool_definitions(registry)

    @server.call_tool()
    async def call_tool(name: str, arguments: Optional[dict]) -> List[TextContent]:
        result = await registry.invoke(name, arguments or {})
        return process_tool_result(result)

    logger.info(f"MCP server '{name}' created with {len(registry)} tools")
    return server


def decode_json_body(body: Optional[bytes]) -> Any:
    """Decode a JSON request body; an empty body decodes to None.

    Raises:
        TransportError: If the body is not valid JSON
    """
    if not body:
        return None
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise TransportError("Invalid JSON", {"reason": str(e)}) from e
