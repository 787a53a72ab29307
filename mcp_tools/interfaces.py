"""Interfaces for MCP tools.

This module defines the core interface that tools must implement
to be served by the MCP transports.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Type

from pydantic import BaseModel, ValidationError

from mcp_tools.errors import ToolValidationError


class ToolInterface(ABC):
    """Base interface for all tools.

    Subclasses declare a pydantic ``input_model``; the JSON schema advertised to
    clients is derived from it and incoming arguments are validated against it.
    """

    input_model: Type[BaseModel]

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the tool description."""
        pass

    @property
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        return self.input_model.model_json_schema()

    def parse_arguments(self, arguments: Dict[str, Any]) -> BaseModel:
        """Validate raw arguments against the input model.

        Raises:
            ToolValidationError: If required fields are missing or have the wrong type
        """
        try:
            return self.input_model.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolValidationError(
                self.name, e.errors(include_url=False, include_context=False)
            ) from e

    @abstractmethod
    async def execute_tool(self, arguments: Dict[str, Any]) -> str:
        """Execute the tool with the provided arguments.

        Args:
            arguments: Dictionary of arguments for the tool

        Returns:
            Tool output as display text
        """
        pass
