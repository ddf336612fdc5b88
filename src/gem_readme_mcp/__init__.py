"""gem-readme-mcp: RubyGems README, metadata, and search tools for MCP clients."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

_LOCAL_VERSION_FALLBACK = "0.0.0+local"


def _resolve_version() -> str:
    """Resolve package version from installed metadata with deterministic fallback."""
    try:
        return _distribution_version("gem-readme-mcp")
    except PackageNotFoundError:
        return _LOCAL_VERSION_FALLBACK


__version__ = _resolve_version()


def main() -> None:
    """Entry point for `gem-readme-mcp` CLI."""
    import asyncio
    import logging
    import sys

    from gem_readme_mcp.config import Settings
    from gem_readme_mcp.server import run_stdio

    # stdout carries the MCP stream; logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=Settings.from_env().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run_stdio())
