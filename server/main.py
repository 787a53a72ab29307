import contextlib
import logging
import sys
from typing import Optional

import click
import uvicorn
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Mount, Route
from starlette.types import Receive, Scope, Send

from config import env_manager, configure
from mcp_tools.errors import ConfigurationError, TransportError
from mcp_tools.plugin import ToolRegistry
from plugins.airflow import build_registry
from server.app import SERVER_NAME, create_mcp_server, decode_json_body
from server.logging_setup import setup_logging

logger = logging.getLogger(__name__)

# Every path other than /health is the MCP endpoint
MCP_PATH = "/"
MCP_METHODS = ("GET", "POST", "DELETE")


async def _read_body(receive: Receive) -> bytes:
    chunks = []
    more_body = True
    while more_body:
        message = await receive()
        if message["type"] != "http.request":
            break
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)


def _replay_body(body: bytes, receive: Receive) -> Receive:
    replayed = False

    async def replay() -> dict:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class McpEndpoint:
    """ASGI app in front of the Streamable HTTP session manager.

    POST bodies are read once and checked for valid JSON, so a malformed
    envelope is answered with 400 before it reaches the MCP layer; the buffered
    body is then replayed to the session manager. Methods the Streamable HTTP
    transport doesn't use are answered with 405.
    """

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] not in MCP_METHODS:
            response = PlainTextResponse("Method Not Allowed", status_code=405)
            await response(scope, receive, send)
            return

        if scope["type"] == "http" and scope["method"] == "POST":
            body = await _read_body(receive)
            try:
                decode_json_body(body)
            except TransportError as e:
                logger.warning(f"Rejecting MCP request: {e.message}")
                response = JSONResponse({"error": e.message}, status_code=400)
                await response(scope, receive, send)
                return

            receive = _replay_body(body, receive)

        await self.session_manager.handle_request(scope, receive, send)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": SERVER_NAME})


def create_app(registry: ToolRegistry) -> Starlette:
    """Build the Starlette app exposing ``/health`` and the MCP endpoint."""
    session_manager = StreamableHTTPSessionManager(app=create_mcp_server(registry))

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        async with session_manager.run():
            logger.info(f"MCP endpoint ready at {MCP_PATH}")
            yield
        logger.info("Shutting down HTTP server...")

    routes = [
        Route("/health", endpoint=health, methods=["GET"]),
        Mount(MCP_PATH, app=McpEndpoint(session_manager)),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id"],
            expose_headers=["Mcp-Session-Id"],
        )
    ]
    return Starlette(routes=routes, middleware=middleware, lifespan=lifespan)


@click.command()
@click.option("--port", default=None, type=int, help="Port to run the server on")
@click.option("--host", default=None, type=str, help="Interface to bind to")
def main(port: Optional[int] = None, host: Optional[str] = None) -> None:
    env = env_manager.load()
    setup_logging(env)

    try:
        config = configure(env)
    except ConfigurationError as e:
        logger.error(f"HTTP server failed to start: {e}")
        sys.exit(1)

    # Determine port from CLI argument, environment variable, or default
    if port is None:
        port = env.get_server_port()
    if host is None:
        host = env.get_server_host()

    app = create_app(build_registry(config))
    logger.info(f"MCP Server for Airflow started on HTTP port {port}")
    logger.info(f"Health check: http://localhost:{port}/health")
    logger.info(f"MCP endpoint: http://localhost:{port}{MCP_PATH}")

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
