"""
Base classes for the tool calling system.

This module defines the core abstractions that all tools implement and the
typed results they return to the dispatcher.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from mcp import types

from voice_call_mcp.errors import ValidationError

_JSON_TYPES = {
    "string": str,
    "boolean": bool,
    "integer": int,
    "number": (int, float),
    "array": list,
    "object": dict,
}


class ToolName(str, Enum):
    """Every tool this server can route to."""
    TRIGGER_CALL = "trigger-call"


class ToolCategory(Enum):
    TELEPHONY = "telephony"


@dataclass(frozen=True)
class ToolParameter:
    """Definition of a tool parameter."""
    name: str
    type: str  # "string", "integer", "boolean", "number", "array", "object"
    description: str
    required: bool = False
    enum: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.type,
            "description": self.description
        }
        if self.enum:
            result["enum"] = list(self.enum)
        return result


@dataclass(frozen=True)
class ToolDefinition:
    """
    Protocol-visible tool description.

    Immutable; built once when the tool is registered.
    """
    name: str
    description: str
    category: ToolCategory
    parameters: List[ToolParameter] = field(default_factory=list)

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                p.name: p.to_dict()
                for p in self.parameters
            },
            "required": [p.name for p in self.parameters if p.required]
        }

    def to_mcp_tool(self) -> types.Tool:
        """Convert to the MCP ``tools/list`` format."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


@dataclass(frozen=True)
class ToolFailure:
    """A handled failure; reported to the caller with isError set."""
    message: str

    is_error = True

    def to_payload(self) -> Dict[str, Any]:
        return {"status": "error", "message": self.message}


class Tool(ABC):
    """
    Abstract base class for all tools.

    Subclasses implement:
    - definition property: Returns ToolDefinition with metadata
    - execute method: Performs the action and returns a result object with
      ``is_error`` and ``to_payload()``
    """

    @property
    @abstractmethod
    def definition(self) -> ToolDefinition:
        """Return tool definition with metadata."""

    @abstractmethod
    async def execute(self, parameters: Dict[str, Any], context: 'ToolExecutionContext'):
        """
        Execute the tool with given parameters and context.

        Handled failures are returned, not raised.
        """

    def validate_parameters(self, parameters: Dict[str, Any]) -> None:
        """
        Check required parameters, JSON types and enum values.

        Raises:
            ValidationError: If validation fails with specific error message
        """
        for param in self.definition.parameters:
            if param.name not in parameters or parameters[param.name] is None:
                if param.required:
                    raise ValidationError(f"Missing required parameter: {param.name}")
                continue

            value = parameters[param.name]
            expected = _JSON_TYPES.get(param.type)
            if expected is not None and not isinstance(value, expected):
                raise ValidationError(f"Parameter {param.name} must be of type {param.type}")

            if param.enum and value not in param.enum:
                raise ValidationError(
                    f"Invalid value for {param.name}. "
                    f"Must be one of: {', '.join(param.enum)}"
                )
