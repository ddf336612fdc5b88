"""search_packages_from_gem tool -- query RubyGems and rank the hits."""

from __future__ import annotations

import logging

from gem_readme_mcp.cache import SEARCH_TTL, MemoryCache, search_results_key
from gem_readme_mcp.models import (
    GemRecord,
    PackageSearchResult,
    SearchPackagesParams,
    SearchPackagesResponse,
)
from gem_readme_mcp.registry.base import RegistryClientPort
from gem_readme_mcp.validators import validate_limit, validate_score, validate_search_query

logger = logging.getLogger(__name__)

# Downloads at which the popularity score saturates to 1.0.
POPULARITY_CEILING = 10_000_000

_QUALITY_BASE = 0.5
_QUALITY_BONUS = 0.1
_MIN_DESCRIPTION_LENGTH = 50

NO_DESCRIPTION = "No description available"


def popularity_score(downloads: int) -> float:
    """Linear download score in [0, 1], saturating at ``POPULARITY_CEILING``."""
    if downloads <= 0:
        return 0.0
    return min(downloads / POPULARITY_CEILING, 1.0)


def quality_score(gem: GemRecord) -> float:
    """Metadata-completeness score in [0.5, 1.0].

    0.5 base, plus 0.1 for each of: documentation URI, source URI,
    homepage URI, at least one license, description over 50 characters.
    A missing description counts the same as an empty one.
    """
    signals = [
        bool(gem.documentation_uri),
        bool(gem.source_code_uri),
        bool(gem.homepage_uri),
        len(gem.licenses) > 0,
        gem.info is not None and len(gem.info) > _MIN_DESCRIPTION_LENGTH,
    ]
    return min(_QUALITY_BASE + _QUALITY_BONUS * sum(signals), 1.0)


def to_search_result(gem: GemRecord) -> PackageSearchResult:
    return PackageSearchResult(
        name=gem.name,
        version=gem.version,
        description=gem.info or NO_DESCRIPTION,
        authors=gem.authors,
        licenses=list(gem.licenses),
        downloads=gem.downloads,
        version_downloads=gem.version_downloads,
        homepage_uri=gem.homepage_uri,
        project_uri=gem.project_uri,
        gem_uri=gem.gem_uri,
        documentation_uri=gem.documentation_uri,
        source_code_uri=gem.source_code_uri,
        score=popularity_score(gem.downloads),
        quality_score=quality_score(gem),
    )


async def search_packages(
    params: SearchPackagesParams,
    *,
    registry: RegistryClientPort,
    cache: MemoryCache,
) -> SearchPackagesResponse:
    """Search RubyGems and return hits ranked by lifetime downloads.

    Filters by the optional ``quality`` and ``popularity`` thresholds (both
    must pass), sorts by downloads descending, truncates to ``limit``, and
    caches the response for 10 minutes keyed on every parameter.

    Raises:
        InvalidQueryError, InvalidLimitError, InvalidScoreError: before any
            cache or network access.
        NetworkError: propagated from the registry client unchanged.
    """
    query, limit = params.query, params.limit
    quality, popularity = params.quality, params.popularity

    validate_search_query(query)
    validate_limit(limit)
    if quality is not None:
        validate_score(quality, "Quality")
    if popularity is not None:
        validate_score(popularity, "Popularity")

    logger.info("Searching gems: '%s' (limit: %d)", query, limit)

    cache_key = search_results_key(query, limit, popularity, quality)
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug("Cache hit for search: '%s'", query)
        return cached

    try:
        gems = await registry.search_gems(query, limit)
    except Exception:
        logger.error("Failed to search gems: '%s'", query)
        raise

    packages = [to_search_result(gem) for gem in gems]

    if quality is not None:
        packages = [pkg for pkg in packages if pkg.quality_score >= quality]
    if popularity is not None:
        packages = [pkg for pkg in packages if pkg.score >= popularity]

    # sorted() is stable: equal download counts keep upstream order.
    packages = sorted(packages, key=lambda pkg: pkg.downloads, reverse=True)[: int(limit)]

    response = SearchPackagesResponse(query=query, total=len(packages), packages=packages)
    cache.set(cache_key, response, SEARCH_TTL)

    logger.info("Searched gems: '%s', found %d results", query, response.total)
    return response
