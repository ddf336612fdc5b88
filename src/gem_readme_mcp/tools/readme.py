"""get_readme_from_gem tool -- README text, usage examples, install snippets."""

from __future__ import annotations

import logging

from gem_readme_mcp.cache import README_TTL, MemoryCache, readme_key
from gem_readme_mcp.errors import VersionNotFoundError
from gem_readme_mcp.models import (
    GemBasicInfo,
    GemRecord,
    GetPackageReadmeParams,
    InstallationInfo,
    PackageReadmeResponse,
)
from gem_readme_mcp.readme.base import ReadmeFetcherPort
from gem_readme_mcp.readme.fetcher import resolve_repository_url
from gem_readme_mcp.readme.parser import extract_usage_examples
from gem_readme_mcp.registry.base import RegistryClientPort
from gem_readme_mcp.tools._helpers import fetch_gem, fetch_versions
from gem_readme_mcp.tools.search import NO_DESCRIPTION
from gem_readme_mcp.validators import validate_gem_name, validate_version

logger = logging.getLogger(__name__)

NO_README = "No README available"


def _installation(name: str, version: str | None) -> InstallationInfo:
    if version is None:
        return InstallationInfo(command=f"gem install {name}", bundler=f"gem '{name}'")
    constraint = f"~> {version}"
    return InstallationInfo(
        command=f"gem install {name} -v {version}",
        bundler=f"gem '{name}', '{constraint}'",
        version_constraint=constraint,
    )


def _basic_info(gem: GemRecord, version: str) -> GemBasicInfo:
    return GemBasicInfo(
        name=gem.name,
        version=version,
        description=gem.info or NO_DESCRIPTION,
        homepage=gem.homepage_uri,
        documentation=gem.documentation_uri,
        source_code=gem.source_code_uri,
        project_uri=gem.project_uri,
        licenses=list(gem.licenses),
        authors=gem.authors,
    )


async def get_package_readme(
    params: GetPackageReadmeParams,
    *,
    registry: RegistryClientPort,
    readme_fetcher: ReadmeFetcherPort,
    cache: MemoryCache,
) -> PackageReadmeResponse:
    """Fetch a gem's README and pull usage examples out of it.

    The README comes from the GitHub/GitLab repository named in the gem's
    source_code_uri or homepage_uri. When none can be fetched, the gem's
    description stands in for it.

    Raises:
        InvalidGemNameError, InvalidVersionError: before any network access.
        GemNotFoundError: the gem does not exist.
        VersionNotFoundError: the requested version was never published.
    """
    name, version = params.package_name, params.version
    validate_gem_name(name)
    validate_version(version)

    logger.info("Fetching README for gem: %s@%s", name, version)

    cache_key = readme_key(name, version, params.include_examples)
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for README: %s@%s", name, version)
        return cached

    gem = await fetch_gem(registry, cache, name)

    if version == "latest":
        resolved_version = gem.version
    else:
        versions = await fetch_versions(registry, cache, name)
        if not any(v.number == version for v in versions):
            raise VersionNotFoundError(
                f"Version '{version}' of gem '{name}' not found",
                {"gem": name, "version": version},
            )
        resolved_version = version

    readme: str | None = None
    repository_url = resolve_repository_url(gem)
    if repository_url:
        readme = await readme_fetcher.fetch_readme(repository_url)
    if readme is None:
        logger.debug("No README found for %s, falling back to description", name)

    readme_content = readme or gem.info or NO_README
    usage_examples = (
        extract_usage_examples(readme) if params.include_examples and readme else []
    )

    response = PackageReadmeResponse(
        package_name=gem.name or name,
        version=resolved_version,
        description=gem.info or NO_DESCRIPTION,
        readme_content=readme_content,
        usage_examples=usage_examples,
        installation=_installation(name, None if version == "latest" else version),
        basic_info=_basic_info(gem, resolved_version),
    )
    cache.set(cache_key, response, README_TTL)

    logger.info("Fetched README for gem: %s@%s", name, resolved_version)
    return response
