"""Tool result processing utilities.

This module converts tool execution results into MCP text content.
"""

from typing import Any, List

from mcp.types import TextContent


def process_tool_result(result: Any) -> List[TextContent]:
    """Process a tool execution result into MCP content types.

    Args:
        result: The result from a tool execution. Can be:
            - A string (wrapped in TextContent)
            - List of TextContent objects (returned as-is)
            - Single TextContent object (wrapped in list)
            - Any other type (converted to string and wrapped in TextContent)

    Returns:
        List of TextContent objects
    """
    if isinstance(result, str):
        return [TextContent(type="text", text=result)]
    if isinstance(result, TextContent):
        return [result]
    if isinstance(result, list) and all(isinstance(item, TextContent) for item in result):
        return result
    return [TextContent(type="text", text=str(result))]


def content_to_dicts(contents: List[TextContent]) -> List[dict]:
    """Serialize content items for hand-written JSON-RPC responses."""
    return [item.model_dump(exclude_none=True) for item in contents]
