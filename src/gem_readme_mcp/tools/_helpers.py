"""Registry lookups shared by the README and info tools, cached per gem."""

from __future__ import annotations

from gem_readme_mcp.cache import PACKAGE_INFO_TTL, MemoryCache, gem_info_key, gem_versions_key
from gem_readme_mcp.models import GemRecord, GemVersion
from gem_readme_mcp.registry.base import RegistryClientPort


async def fetch_gem(registry: RegistryClientPort, cache: MemoryCache, name: str) -> GemRecord:
    key = gem_info_key(name)
    cached = cache.get(key)
    if cached is not None:
        return cached
    gem = await registry.get_gem(name)
    cache.set(key, gem, PACKAGE_INFO_TTL)
    return gem


async def fetch_versions(
    registry: RegistryClientPort,
    cache: MemoryCache,
    name: str,
) -> list[GemVersion]:
    key = gem_versions_key(name)
    cached = cache.get(key)
    if cached is not None:
        return cached
    versions = await registry.get_versions(name)
    cache.set(key, versions, PACKAGE_INFO_TTL)
    return versions
