"""Fetch README files from the GitHub/GitLab repository a gem points at."""

from __future__ import annotations

import logging
import re

import httpx

from gem_readme_mcp.models import GemRecord

logger = logging.getLogger(__name__)

# Ruby projects ship markdown most often, but rdoc and bare READMEs are common.
_README_NAMES = ("README.md", "README.rdoc", "README")

_GITHUB_TREE_RE = re.compile(r"https?://github\.com/([^/]+)/([^/]+)/tree/([^/]+)/(.+)")
_GITHUB_REPO_RE = re.compile(r"https?://github\.com/([^/]+)/([^/#?]+)(?:[/#?].*)?$")
_GITLAB_REPO_RE = re.compile(r"https?://gitlab\.com/([^/]+)/([^/#?]+)(?:[/#?].*)?$")


def _strip_repo(repo: str) -> str:
    repo = repo.rstrip("/")
    return repo[:-4] if repo.endswith(".git") else repo


def _github_raw_urls(repo_url: str) -> list[str]:
    """Convert a GitHub URL to raw.githubusercontent.com README candidates.

    Handles:
    - https://github.com/owner/repo
    - https://github.com/owner/repo/tree/main/subdir
    """
    m = _GITHUB_TREE_RE.match(repo_url)
    if m:
        owner, repo, branch, subpath = m.groups()
        base = f"https://raw.githubusercontent.com/{owner}/{repo}/{branch}/{subpath.rstrip('/')}"
        return [f"{base}/{name}" for name in _README_NAMES]

    m = _GITHUB_REPO_RE.match(repo_url)
    if m:
        owner, repo = m.groups()
        base = f"https://raw.githubusercontent.com/{owner}/{_strip_repo(repo)}/HEAD"
        return [f"{base}/{name}" for name in _README_NAMES]

    return []


def _gitlab_raw_urls(repo_url: str) -> list[str]:
    """Convert a GitLab URL to raw README candidates."""
    m = _GITLAB_REPO_RE.match(repo_url)
    if m:
        owner, repo = m.groups()
        base = f"https://gitlab.com/{owner}/{_strip_repo(repo)}/-/raw/HEAD"
        return [f"{base}/{name}" for name in _README_NAMES]
    return []


def readme_candidate_urls(repository_url: str) -> list[str]:
    """Return raw README URLs to try, in order, for a repository URL."""
    if "github.com" in repository_url:
        return _github_raw_urls(repository_url)
    if "gitlab.com" in repository_url:
        return _gitlab_raw_urls(repository_url)
    return []


def resolve_repository_url(gem: GemRecord) -> str | None:
    """Pick the first of source_code_uri / homepage_uri hosted on GitHub or GitLab."""
    for uri in (gem.source_code_uri, gem.homepage_uri):
        if uri and readme_candidate_urls(uri):
            return uri
    return None


class DefaultReadmeFetcher:
    """Adapter for ReadmeFetcherPort -- holds httpx client."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def fetch_readme(self, repository_url: str) -> str | None:
        """Fetch a README from a repository URL."""
        return await fetch_readme(repository_url, self._http)


async def fetch_readme(
    repository_url: str,
    http_client: httpx.AsyncClient,
) -> str | None:
    """Fetch README text from a GitHub or GitLab repository URL.

    Tries README.md, README.rdoc, then README. A README is an optional
    enrichment, so an unreachable host is logged and reported as None.

    Returns the raw text, or None if not found/unreachable.
    """
    for raw_url in readme_candidate_urls(repository_url):
        try:
            resp = await http_client.get(raw_url, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.warning("README fetch failed for %s: %s", raw_url, exc)
            return None
        if resp.status_code == 200 and resp.text.strip():
            return resp.text
    return None
