"""Port: RubyGems API client."""

from __future__ import annotations

from typing import Protocol

from gem_readme_mcp.models import GemRecord, GemVersion


class RegistryClientPort(Protocol):
    """Port for querying the RubyGems registry."""

    async def search_gems(self, query: str, limit: int = 20) -> list[GemRecord]:
        """Search the registry for gems matching a free-text query."""
        ...

    async def get_gem(self, name: str) -> GemRecord:
        """Fetch the current release of a gem by name."""
        ...

    async def get_versions(self, name: str) -> list[GemVersion]:
        """Fetch every published version of a gem, newest first."""
        ...
