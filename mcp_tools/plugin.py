import inspect
import logging
import time
from typing import Dict, List, Type, Any, Iterable, Optional

from mcp_tools.errors import ToolNotFoundError
from mcp_tools.interfaces import ToolInterface

logger = logging.getLogger(__name__)

# Tool classes collected by @register_tool, in declaration order
_tool_classes: List[Type[ToolInterface]] = []


def register_tool(tool_class: Type[ToolInterface]) -> Type[ToolInterface]:
    """Decorator to add a tool class to the catalog.

    Registration only records the class. Instances are created by the
    registry builder with their dependencies passed in explicitly.

    Raises:
        TypeError: If the decorated class doesn't implement ToolInterface
    """
    if not inspect.isclass(tool_class):
        raise TypeError(f"Expected a class, got {type(tool_class)}")

    if not issubclass(tool_class, ToolInterface):
        raise TypeError(f"Class {tool_class.__name__} does not implement ToolInterface")

    if inspect.isabstract(tool_class):
        logger.debug(f"Skipping registration of abstract class {tool_class.__name__}")
        return tool_class

    if tool_class not in _tool_classes:
        _tool_classes.append(tool_class)
    return tool_class


def registered_tool_classes() -> List[Type[ToolInterface]]:
    """Get all tool classes added with @register_tool."""
    return list(_tool_classes)


class ToolRegistry:
    """Registry mapping tool names to tool instances.

    The registry is filled once at startup and then frozen; transports only
    read from it.
    """

    def __init__(self, tools: Optional[Iterable[ToolInterface]] = None):
        self._tools: Dict[str, ToolInterface] = {}
        self._frozen = False
        for tool in tools or ():
            self.register(tool)

    def register(self, tool: ToolInterface) -> ToolInterface:
        """Register a tool instance.

        Raises:
            RuntimeError: If the registry has been frozen
            ValueError: If a tool with the same name is already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register tools on a frozen registry")
        if not isinstance(tool, ToolInterface):
            raise TypeError(f"{type(tool).__name__} does not implement ToolInterface")
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        logger.debug(f"Registering tool: {tool.name} ({type(tool).__name__})")
        self._tools[tool.name] = tool
        return tool

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_tool(self, name: str) -> ToolInterface:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name, self.names())
        return tool

    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[ToolInterface]:
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """Look up a tool by name and execute it.

        Errors are logged and re-raised so the transport can turn them into
        its own error result.
        """
        arguments = arguments or {}
        tool = self.get_tool(name)

        logger.info(f"Executing tool '{name}' with arguments: {arguments}")
        start_time = time.time()
        try:
            result = await tool.execute_tool(arguments)
        except Exception:
            duration_ms = (time.time() - start_time) * 1000
            logger.exception(f"Error executing tool {name} after {duration_ms:.2f}ms")
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(f"Tool '{name}' executed successfully in {duration_ms:.2f}ms")
        return result
