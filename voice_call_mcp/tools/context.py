"""
Tool execution context - per-request metadata and config access.
"""

from dataclasses import dataclass, field
from typing import Any, Dict
import time


@dataclass
class ToolExecutionContext:
    """Context handed to a tool for one tool-call request."""

    request_id: str
    tool_name: str
    config: Dict[str, Any] = field(default_factory=dict)
    received_at: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.received_at) * 1000)

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Config key (supports dot notation, e.g., "callback.port")
            default: Default value if key not found
        """
        value = self.config
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
