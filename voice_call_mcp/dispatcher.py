"""
Request dispatcher - routes MCP tool requests to tools.

list-tools returns the registry contents. call-tool looks the tool up by
name and wraps its typed result into a CallToolResult. Unknown names and
missing arguments produce an error envelope; anything unexpected is caught
once here, logged and reported as ``Error: <message>``. No per-request
failure ever propagates to the transport.
"""

import json
import time
from typing import Any, Dict, List, Optional

import structlog
from mcp import types

from voice_call_mcp.errors import MissingArgumentsError, ProtocolError, UnknownToolError
from voice_call_mcp.logging_config import set_correlation_id
from voice_call_mcp.metrics import TOOL_CALL_SECONDS
from voice_call_mcp.tools.context import ToolExecutionContext
from voice_call_mcp.tools.registry import ToolRegistry

logger = structlog.get_logger(__name__)


def text_result(text: str, is_error: bool) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def result_envelope(result) -> types.CallToolResult:
    """Serialize a tool result (success or handled failure) as indented JSON."""
    return text_result(json.dumps(result.to_payload(), indent=2), result.is_error)


class RequestDispatcher:
    def __init__(self, registry: ToolRegistry, config: Optional[Dict[str, Any]] = None):
        self._registry = registry
        self._config = config or {}

    async def list_tools(self) -> List[types.Tool]:
        return self._registry.to_mcp_tools()

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        start = time.monotonic()
        request_id = set_correlation_id()
        log = logger.bind(tool=name, request_id=request_id)
        log.info("Received request for tool")

        outcome = "error"
        try:
            if arguments is None:
                raise MissingArgumentsError()

            tool = self._registry.get(name)
            if tool is None:
                raise UnknownToolError(name)

            context = ToolExecutionContext(request_id=request_id, tool_name=name, config=self._config)
            result = await tool.execute(arguments, context)
            if not result.is_error:
                outcome = "success"
            return result_envelope(result)
        except UnknownToolError as e:
            log.warning("Unknown tool requested")
            return text_result(str(e), True)
        except ProtocolError as e:
            log.warning("Request rejected", error=str(e))
            return text_result(f"Error: {e}", True)
        except Exception as e:
            log.error("Request failed", error=str(e), exc_info=True)
            return text_result(f"Error: {e}", True)
        finally:
            elapsed = time.monotonic() - start
            TOOL_CALL_SECONDS.labels(tool=name if self._registry.get(name) else "unknown", outcome=outcome).observe(elapsed)
            log.info("Request completed", outcome=outcome, elapsed_ms=int(elapsed * 1000))
