"""MCP Tools - tool interface, registry and errors shared by the transports."""

from mcp_tools.errors import (
    AirflowMcpError,
    ConfigurationError,
    ToolValidationError,
    ToolNotFoundError,
    UpstreamError,
    TransportError,
)
from mcp_tools.interfaces import ToolInterface
from mcp_tools.plugin import ToolRegistry, register_tool, registered_tool_classes

__version__ = "1.2.0"

__all__ = [
    # Errors
    "AirflowMcpError",
    "ConfigurationError",
    "ToolValidationError",
    "ToolNotFoundError",
    "UpstreamError",
    "TransportError",
    # Interfaces
    "ToolInterface",
    # Registry
    "ToolRegistry",
    "register_tool",
    "registered_tool_classes",
]
