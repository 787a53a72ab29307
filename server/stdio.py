"""Stdio entry point: serves the Airflow tools to a local MCP client."""

import asyncio
import logging
import sys

import click
from mcp.server.stdio import stdio_server

from config import env_manager, configure
from mcp_tools.errors import ConfigurationError
from mcp_tools.plugin import ToolRegistry
from plugins.airflow import build_registry
from server.app import create_mcp_server
from server.logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def serve(registry: ToolRegistry) -> None:
    server = create_mcp_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


@click.command()
def main() -> None:
    env = env_manager.load()
    setup_logging(env, "stdio.log")

    try:
        config = configure(env)
    except ConfigurationError as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)

    registry = build_registry(config)
    logger.info(f"MCP Server for Airflow started on stdio ({config.base_url})")
    asyncio.run(serve(registry))


if __name__ == "__main__":
    main()
