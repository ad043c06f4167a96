"""
Tool registry - the ordered set of tools this server advertises and routes to.
"""

from typing import Dict, List, Optional

import structlog
from mcp import types

from voice_call_mcp.tools.base import Tool, ToolDefinition

logger = structlog.get_logger(__name__)


class ToolRegistry:
    """
    Registry of tool instances keyed by name.

    Owned by the server and populated once at startup; read-only afterwards.
    """

    def __init__(self):
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        tool_name = tool.definition.name
        if tool_name in self._tools:
            logger.warning("Tool already registered, overwriting", tool=tool_name)
        self._tools[tool_name] = tool
        logger.debug("Registered tool", tool=tool_name, category=tool.definition.category.value)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def get_definitions(self) -> List[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def to_mcp_tools(self) -> List[types.Tool]:
        """Export all tools in registration order for ``tools/list``."""
        return [definition.to_mcp_tool() for definition in self.get_definitions()]

    def list_tools(self) -> List[str]:
        return list(self._tools.keys())

    def initialize_default_tools(self, services) -> None:
        """Register all built-in tools against the given service handles."""
        from voice_call_mcp.tools.telephony.trigger_call import TriggerCallTool

        self.register(TriggerCallTool(services))
        logger.info("Initialized tools", tools=self.list_tools())
