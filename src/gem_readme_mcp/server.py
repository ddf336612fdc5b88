"""MCP server exposing RubyGems README, info, and search tools over stdio."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from gem_readme_mcp import __version__
from gem_readme_mcp.cache import MemoryCache
from gem_readme_mcp.config import Settings
from gem_readme_mcp.dispatcher import ToolDispatcher
from gem_readme_mcp.readme.base import ReadmeFetcherPort
from gem_readme_mcp.readme.fetcher import DefaultReadmeFetcher
from gem_readme_mcp.registry.base import RegistryClientPort
from gem_readme_mcp.registry.client import RubyGemsClient

logger = logging.getLogger(__name__)

SERVER_NAME = "gem-readme-mcp"


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations.

    Stateful adapters (HTTP client, cache) are injected here so tests can
    swap them and so the cache lives exactly as long as the server.
    """

    settings: Settings
    http_client: httpx.AsyncClient
    registry: RegistryClientPort
    readme_fetcher: ReadmeFetcherPort
    cache: MemoryCache


@asynccontextmanager
async def app_lifespan(server: Server) -> AsyncIterator[AppContext]:
    """Manage shared adapter lifecycle -- the composition root."""
    settings = Settings.from_env()
    cache = MemoryCache(max_entries=settings.cache_bound)
    # No transport retries: upstream failures surface on the first attempt.
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout, connect=settings.connect_timeout),
        follow_redirects=True,
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        headers={"User-Agent": f"{SERVER_NAME}/{__version__}"},
    ) as http_client:
        try:
            yield AppContext(
                settings=settings,
                http_client=http_client,
                registry=RubyGemsClient(http_client, base_url=settings.registry_url),
                readme_fetcher=DefaultReadmeFetcher(http_client),
                cache=cache,
            )
        finally:
            cache.clear()


server: Server = Server(
    SERVER_NAME,
    version=__version__,
    instructions=(
        "gem-readme-mcp looks up Ruby gems on RubyGems.org.\n\n"
        "- **search_packages_from_gem** -- find gems by keyword. Results are sorted by "
        "downloads and carry a popularity `score` and a metadata `quality_score` (0-1); "
        "pass `quality` / `popularity` to drop weaker matches.\n"
        "- **get_package_info_from_gem** -- version, licenses, links, download counts "
        "and dependencies of one gem.\n"
        "- **get_readme_from_gem** -- README text, usage examples, and install snippets."
    ),
    lifespan=app_lifespan,
)


def _dispatcher() -> ToolDispatcher:
    app = server.request_context.lifespan_context
    if not isinstance(app, AppContext):
        msg = (
            f"Expected AppContext in lifespan_context, got {type(app).__name__}. "
            "Is the server configured with app_lifespan?"
        )
        raise TypeError(msg)
    return ToolDispatcher(app)


async def list_tools() -> list[types.Tool]:
    return ToolDispatcher.list_tools()


async def list_prompts() -> list[types.Prompt]:
    return []


async def list_resources() -> list[types.Resource]:
    return []


async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
    """Run a tool. McpError propagates so the client gets its JSON-RPC code."""
    arguments = request.params.arguments
    content = await _dispatcher().call_tool(
        request.params.name, {} if arguments is None else arguments
    )
    return types.ServerResult(types.CallToolResult(content=content))


server.list_tools()(list_tools)
server.list_prompts()(list_prompts)
server.list_resources()(list_resources)
# Raw handler: McpError must reach the client as a JSON-RPC error, not an isError result.
server.request_handlers[types.CallToolRequest] = handle_call_tool


async def run_stdio() -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    logger.info("Starting %s %s on stdio", SERVER_NAME, __version__)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
