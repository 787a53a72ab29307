"""Exceptions raised by the Airflow MCP tools."""

from typing import Any, Dict, List, Optional


class AirflowMcpError(Exception):
    """Base exception for all Airflow MCP errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AirflowMcpError):
    """Raised when the Airflow connection settings are missing or incomplete."""


class ToolValidationError(AirflowMcpError):
    """Raised when tool arguments do not match the tool's input schema."""

    def __init__(
        self,
        tool_name: str,
        errors: List[Dict[str, Any]],
        details: Optional[Dict[str, Any]] = None,
    ):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ())) or '<root>'}: "
            f"{error.get('msg', 'invalid value')}"
            for error in errors
        )
        super().__init__(f"Invalid arguments for {tool_name}: {problems}", details)
        self.tool_name = tool_name
        self.errors = errors


class ToolNotFoundError(AirflowMcpError):
    """Raised when no tool is registered under the requested name."""

    def __init__(self, tool_name: str, available: Optional[List[str]] = None):
        message = f"Tool '{tool_name}' not found"
        if available:
            message += f". Available tools: {', '.join(available)}"
        super().__init__(message)
        self.tool_name = tool_name
        self.available = available or []


class UpstreamError(AirflowMcpError):
    """Raised when the Airflow REST API answers with a non-2xx response.

    A status code of 0 means the request never produced an HTTP response
    (connection refused, timeout, ...).
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        reason: str = "",
        details: Optional[Dict[str, Any]] = None,
    ):
        message = f"Airflow API error: {status_code}"
        if reason:
            message += f" {reason}"
        message += f": {body}"
        super().__init__(message, details)
        self.status_code = status_code
        self.reason = reason
        self.body = body


class TransportError(AirflowMcpError):
    """Raised when a request envelope cannot be decoded at the transport boundary."""
