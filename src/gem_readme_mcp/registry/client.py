"""HTTP client for the RubyGems.org JSON API.

API docs: https://guides.rubygems.org/rubygems-org-api/
Base URL: https://rubygems.org
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote as urlquote

import httpx

from gem_readme_mcp.config import DEFAULT_REGISTRY_URL
from gem_readme_mcp.errors import (
    GemNotFoundError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    UpstreamStatusError,
)
from gem_readme_mcp.models import GemDependency, GemRecord, GemVersion

logger = logging.getLogger(__name__)

# The search endpoint pages by 30 and accepts no page-size parameter.
_SEARCH_PAGE_SIZE = 30


@dataclass
class RubyGemsClient:
    """Async client for the RubyGems API. No retries: every failure surfaces."""

    http: httpx.AsyncClient
    base_url: str = DEFAULT_REGISTRY_URL

    async def search_gems(self, query: str, limit: int = 20) -> list[GemRecord]:
        """Search RubyGems for gems matching *query*.

        Walks result pages until ``limit`` records are collected or the
        registry returns a short page.

        Returns:
            At most ``limit`` GemRecord objects in upstream order.
        """
        wanted = max(int(limit), 1)
        records: list[GemRecord] = []
        page = 1
        while len(records) < wanted:
            data = await self._get_json(
                "/api/v1/search.json",
                params={"query": query, "page": page},
                what=f"search for '{query}'",
            )
            if not isinstance(data, list):
                raise MalformedResponseError(
                    f"RubyGems search for '{query}' returned {type(data).__name__}, expected a list"
                )
            records.extend(self._parse_gem(entry) for entry in data if isinstance(entry, dict))
            logger.debug("RubyGems search '%s' page %d returned %d gems", query, page, len(data))
            if len(data) < _SEARCH_PAGE_SIZE:
                break
            page += 1
        return records[:wanted]

    async def get_gem(self, name: str) -> GemRecord:
        """Fetch a gem's current release. Raises GemNotFoundError on 404."""
        data = await self._get_json(
            f"/api/v1/gems/{urlquote(name, safe='')}.json",
            what=f"gem '{name}'",
            not_found=name,
        )
        if not isinstance(data, dict):
            raise MalformedResponseError(f"RubyGems returned an unexpected body for gem '{name}'")
        return self._parse_gem(data)

    async def get_versions(self, name: str) -> list[GemVersion]:
        """Fetch all published versions of a gem. Raises GemNotFoundError on 404."""
        data = await self._get_json(
            f"/api/v1/versions/{urlquote(name, safe='')}.json",
            what=f"versions of '{name}'",
            not_found=name,
        )
        if not isinstance(data, list):
            raise MalformedResponseError(
                f"RubyGems returned an unexpected body for versions of '{name}'"
            )
        return [self._parse_version(entry) for entry in data if isinstance(entry, dict)]

    # ── HTTP helpers ──────────────────────────────────────────

    async def _get_json(
        self,
        path: str,
        *,
        what: str,
        params: dict[str, object] | None = None,
        not_found: str | None = None,
    ) -> object:
        """GET ``path`` and decode JSON, mapping every failure to an error kind.

        Args:
            path: URL path appended to ``base_url``.
            what: Human-readable subject for error messages.
            params: Optional query parameters.
            not_found: Gem name to report when the registry answers 404.
                When None, a 404 is treated like any other bad status.
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self.http.get(url, params=params)
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Failed to reach RubyGems for {what}: {exc}",
                {"url": url},
            ) from exc

        status = response.status_code
        if status == 404 and not_found is not None:
            raise GemNotFoundError(f"Gem '{not_found}' not found on RubyGems", {"gem": not_found})
        if status == 429:
            raise RateLimitError(
                f"RubyGems rate limit exceeded while fetching {what}. Try again later.",
                {"status_code": status},
            )
        if not 200 <= status < 300:
            raise UpstreamStatusError(
                f"RubyGems returned HTTP {status} for {what}",
                {"status_code": status, "url": url},
            )

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"RubyGems returned invalid JSON for {what}") from exc

    # ── Parsing helpers ──────────────────────────────────────────

    @staticmethod
    def _parse_gem(raw: dict) -> GemRecord:
        """Parse a gem JSON object into a GemRecord.

        Tolerant of missing fields -- uses defaults rather than crashing.
        """
        deps = raw.get("dependencies")
        if not isinstance(deps, dict):
            deps = {}

        return GemRecord(
            name=str(raw.get("name") or ""),
            version=str(raw.get("version") or ""),
            info=raw.get("info") if isinstance(raw.get("info"), str) else None,
            authors=str(raw.get("authors") or ""),
            licenses=_parse_licenses(raw.get("licenses")),
            downloads=_as_int(raw.get("downloads")),
            version_downloads=_as_int(raw.get("version_downloads")),
            homepage_uri=_optional_uri(raw.get("homepage_uri")),
            documentation_uri=_optional_uri(raw.get("documentation_uri")),
            source_code_uri=_optional_uri(raw.get("source_code_uri")),
            project_uri=_optional_uri(raw.get("project_uri")),
            gem_uri=_optional_uri(raw.get("gem_uri")),
            bug_tracker_uri=_optional_uri(raw.get("bug_tracker_uri")),
            changelog_uri=_optional_uri(raw.get("changelog_uri")),
            runtime_dependencies=_parse_dependencies(deps.get("runtime")),
            development_dependencies=_parse_dependencies(deps.get("development")),
        )

    @staticmethod
    def _parse_version(raw: dict) -> GemVersion:
        return GemVersion(
            number=str(raw.get("number") or ""),
            created_at=str(raw.get("created_at") or ""),
            downloads_count=_as_int(raw.get("downloads_count")),
            platform=str(raw.get("platform") or "ruby"),
            prerelease=bool(raw.get("prerelease", False)),
            licenses=_parse_licenses(raw.get("licenses")),
        )


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0


def _optional_uri(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_licenses(value: object) -> list[str]:
    """RubyGems sends ``licenses`` as a list, a bare string, or null."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [str(item) for item in value if item]
    return []


def _parse_dependencies(value: object) -> list[GemDependency]:
    if not isinstance(value, list):
        return []
    return [
        GemDependency(
            name=str(dep.get("name") or ""),
            requirements=str(dep.get("requirements") or ""),
        )
        for dep in value
        if isinstance(dep, dict) and dep.get("name")
    ]
