"""Port: README fetching."""

from __future__ import annotations

from typing import Protocol


class ReadmeFetcherPort(Protocol):
    """Port for fetching README files from repository URLs."""

    async def fetch_readme(
        self,
        repository_url: str,
    ) -> str | None:
        """Fetch README content from a repository URL."""
        ...
