"""
Transport bindings for the MCP server.

Exactly one binding is chosen at startup from TransportConfig.mode:

- stdio: one long-lived session over stdin/stdout, for hosts that spawn the
  server as a child process. Any failure is fatal.
- sse: a FastAPI app served by uvicorn. Each GET on the SSE path opens its
  own MCP session bound to the shared server; the session ends when the
  client disconnects. Clients post messages to the companion path.
"""

import socket
from typing import Union

import structlog
import uvicorn
from fastapi import FastAPI, Response
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from voice_call_mcp.config import TransportConfig
from voice_call_mcp.errors import TransportSetupError

logger = structlog.get_logger(__name__)


class StdioTransport:
    name = "stdio"

    async def run(self, server: Server) -> None:
        """
        Serve a single session over stdin/stdout until the host closes it.

        Raises:
            TransportSetupError: On any failure of the stdio session
        """
        logger.info("Initializing Voice Call MCP Server...")
        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("Voice Call MCP Server running on stdio")
                await server.run(read_stream, write_stream, server.create_initialization_options())
        except Exception as e:
            raise TransportSetupError(f"stdio transport failed: {e}") from e


class _SseSessionEndpoint:
    """Raw ASGI endpoint: one MCP session per SSE connection."""

    def __init__(self, sse: SseServerTransport, server: Server):
        self._sse = sse
        self._server = server

    async def __call__(self, scope, receive, send):
        client = scope.get("client")
        logger.info("SSE client connected", client=client)
        try:
            async with self._sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
                await self._server.run(read_stream, write_stream, self._server.create_initialization_options())
        finally:
            logger.info("SSE client disconnected", client=client)


class SseTransport:
    name = "sse"

    def __init__(self, config: TransportConfig):
        self._config = config

    def build_app(self, server: Server) -> FastAPI:
        sse = SseServerTransport(self._config.message_path)
        app = FastAPI(title="voice-call-mcp", docs_url=None, redoc_url=None, openapi_url=None)

        app.add_route(self._config.sse_path, _SseSessionEndpoint(sse, server), methods=["GET"])
        app.mount(self._config.message_path, app=sse.handle_post_message)

        @app.get("/metrics")
        async def metrics() -> Response:
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

        return app

    def bind_socket(self) -> socket.socket:
        """Bind the listening socket up front so a failure is reported here, not inside uvicorn."""
        host, port = self._config.sse_host, self._config.sse_port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    async def run(self, server: Server) -> None:
        """
        Serve until the process is stopped.

        A bind failure is logged; it is raised as TransportSetupError only
        when ``bind_failure_fatal`` is set.
        """
        host, port = self._config.sse_host, self._config.sse_port
        app = self.build_app(server)

        logger.info("Starting SSE server", host=host, port=port)
        try:
            sock = self.bind_socket()
        except OSError as e:
            logger.error("Error starting SSE server", host=host, port=port, error=str(e))
            if self._config.bind_failure_fatal:
                raise TransportSetupError(f"Could not bind SSE listener on {host}:{port}: {e}") from e
            return

        base_url = f"http://{host}:{port}"
        logger.info(
            "MCP SSE Server listening",
            url=base_url,
            sse_endpoint=f"{base_url}{self._config.sse_path}",
            message_endpoint=f"{base_url}{self._config.message_path}",
        )
        uv_config = uvicorn.Config(app, log_config=None, lifespan="off")
        await uvicorn.Server(uv_config).serve(sockets=[sock])


Transport = Union[StdioTransport, SseTransport]


def select_transport(config: TransportConfig) -> Transport:
    if config.mode == "sse":
        return SseTransport(config)
    return StdioTransport()
