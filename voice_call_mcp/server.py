"""
Voice call MCP server entry point.

Wires config, service handles, the tool registry and the dispatcher into a
low-level MCP server and runs it on the selected transport.
"""

import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

import structlog
from mcp import types
from mcp.server.lowlevel import Server

from voice_call_mcp import __version__
from voice_call_mcp.config import AppConfig, load_config, validate_production_config
from voice_call_mcp.dispatcher import RequestDispatcher
from voice_call_mcp.errors import ConfigurationError, TransportSetupError
from voice_call_mcp.logging_config import configure_logging
from voice_call_mcp.services.handles import ServiceHandles
from voice_call_mcp.tools.registry import ToolRegistry
from voice_call_mcp.transports import select_transport

logger = structlog.get_logger(__name__)


@dataclass
class Application:
    config: AppConfig
    services: ServiceHandles
    registry: ToolRegistry
    dispatcher: RequestDispatcher
    server: Server


def build_server(dispatcher: RequestDispatcher, name: str = "voice-call-mcp",
                 version: str = __version__) -> Server:
    server = Server(name, version=version)

    @server.list_tools()
    async def list_tools():
        return await dispatcher.list_tools()

    # Registered directly so the dispatcher sees arguments exactly as sent
    # (None when absent) and no schema validation runs ahead of it.
    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await dispatcher.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(result)

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


def build_application(config: AppConfig, services: Optional[ServiceHandles] = None) -> Application:
    services = services or ServiceHandles(config)
    registry = ToolRegistry()
    registry.initialize_default_tools(services)
    dispatcher = RequestDispatcher(registry, config=config.model_dump())
    server = build_server(dispatcher, name=config.server.name, version=config.server.version)
    return Application(config=config, services=services, registry=registry,
                       dispatcher=dispatcher, server=server)


async def serve(config: AppConfig) -> None:
    app = build_application(config)
    transport = select_transport(config.transport)
    logger.info("Selected transport", transport=transport.name, tools=app.registry.list_tools())
    try:
        await transport.run(app.server)
    finally:
        await app.services.close()


def main() -> None:
    try:
        config = load_config()
    except ConfigurationError as e:
        configure_logging()
        logger.error("Failed to load configuration", error=str(e))
        sys.exit(1)

    configure_logging(log_level=config.logging.level, log_format=config.logging.format)

    errors, warnings = validate_production_config(config)
    if warnings:
        logger.warning("Configuration warnings", warnings=warnings)
    if errors:
        logger.error("Configuration validation failed", errors=errors)
        sys.exit(1)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass
    except TransportSetupError as e:
        logger.error("Fatal error running server", error=str(e))
        sys.exit(1)
    finally:
        logger.info("Voice Call MCP Server has shut down.")


if __name__ == "__main__":
    main()
