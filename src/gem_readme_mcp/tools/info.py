"""get_package_info_from_gem tool -- metadata, downloads and dependencies."""

from __future__ import annotations

import logging

from gem_readme_mcp.cache import PACKAGE_INFO_TTL, MemoryCache, package_info_key
from gem_readme_mcp.models import DownloadStats, GetPackageInfoParams, PackageInfoResponse
from gem_readme_mcp.registry.base import RegistryClientPort
from gem_readme_mcp.tools._helpers import fetch_gem, fetch_versions
from gem_readme_mcp.tools.search import NO_DESCRIPTION
from gem_readme_mcp.validators import validate_gem_name

logger = logging.getLogger(__name__)


async def get_package_info(
    params: GetPackageInfoParams,
    *,
    registry: RegistryClientPort,
    cache: MemoryCache,
) -> PackageInfoResponse:
    """Fetch a gem's metadata. Dependency lists are None unless requested."""
    name = params.package_name
    validate_gem_name(name)

    logger.info("Fetching package info for gem: %s", name)

    cache_key = package_info_key(
        name, params.include_dependencies, params.include_dev_dependencies
    )
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for package info: %s", name)
        return cached

    gem = await fetch_gem(registry, cache, name)
    versions = await fetch_versions(registry, cache, name)

    response = PackageInfoResponse(
        package_name=gem.name or name,
        latest_version=gem.version,
        description=gem.info or NO_DESCRIPTION,
        authors=gem.authors,
        licenses=list(gem.licenses),
        homepage=gem.homepage_uri,
        documentation=gem.documentation_uri,
        source_code=gem.source_code_uri,
        downloads=DownloadStats(total=gem.downloads, latest_version=gem.version_downloads),
        dependencies=list(gem.runtime_dependencies) if params.include_dependencies else None,
        dev_dependencies=(
            list(gem.development_dependencies) if params.include_dev_dependencies else None
        ),
        versions_count=len(versions),
    )
    cache.set(cache_key, response, PACKAGE_INFO_TTL)
    return response
