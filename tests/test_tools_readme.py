"""Tests for the README operation (tools/readme.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from gem_readme_mcp.errors import (
    GemNotFoundError,
    InvalidGemNameError,
    InvalidVersionError,
    VersionNotFoundError,
)
from gem_readme_mcp.models import GemRecord, GemVersion, GetPackageReadmeParams
from gem_readme_mcp.tools.readme import NO_README, get_package_readme

README = """\
# Sidekiq

## Getting Started

```ruby
class HardJob
  include Sidekiq::Job
end
```
"""

SIDEKIQ = GemRecord(
    name="sidekiq",
    version="7.2.1",
    info="Simple, efficient background processing for Ruby.",
    authors="Mike Perham",
    licenses=["LGPL-3.0"],
    downloads=300_000_000,
    version_downloads=1_000_000,
    homepage_uri="https://sidekiq.org",
    source_code_uri="https://github.com/sidekiq/sidekiq",
)


def _make_registry(gem: GemRecord = SIDEKIQ, versions: list[str] | None = None) -> MagicMock:
    registry = MagicMock()
    registry.get_gem = AsyncMock(return_value=gem)
    registry.get_versions = AsyncMock(
        return_value=[GemVersion(number=n) for n in (versions or ["7.2.1", "7.2.0", "6.5.12"])]
    )
    return registry


def _make_fetcher(readme: str | None = README) -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch_readme = AsyncMock(return_value=readme)
    return fetcher


class TestGetPackageReadme:
    async def test_latest_readme_with_examples(self, cache):
        registry, fetcher = _make_registry(), _make_fetcher()

        result = await get_package_readme(
            GetPackageReadmeParams(package_name="sidekiq"),
            registry=registry,
            readme_fetcher=fetcher,
            cache=cache,
        )

        assert result.package_name == "sidekiq"
        assert result.version == "7.2.1"
        assert result.readme_content == README
        assert len(result.usage_examples) == 1
        assert result.usage_examples[0].title == "Getting Started"
        assert result.installation.command == "gem install sidekiq"
        assert result.installation.bundler == "gem 'sidekiq'"
        assert result.basic_info.licenses == ["LGPL-3.0"]
        assert result.exists is True
        fetcher.fetch_readme.assert_awaited_once_with("https://github.com/sidekiq/sidekiq")
        registry.get_versions.assert_not_awaited()

    async def test_specific_version(self, cache):
        registry = _make_registry()

        result = await get_package_readme(
            GetPackageReadmeParams(package_name="sidekiq", version="6.5.12"),
            registry=registry,
            readme_fetcher=_make_fetcher(),
            cache=cache,
        )

        assert result.version == "6.5.12"
        assert result.basic_info.version == "6.5.12"
        assert result.installation.command == "gem install sidekiq -v 6.5.12"
        assert result.installation.bundler == "gem 'sidekiq', '~> 6.5.12'"

    async def test_unpublished_version_raises(self, cache):
        with pytest.raises(VersionNotFoundError, match="9.9.9"):
            await get_package_readme(
                GetPackageReadmeParams(package_name="sidekiq", version="9.9.9"),
                registry=_make_registry(),
                readme_fetcher=_make_fetcher(),
                cache=cache,
            )

    async def test_examples_can_be_disabled(self, cache):
        result = await get_package_readme(
            GetPackageReadmeParams(package_name="sidekiq", include_examples=False),
            registry=_make_registry(),
            readme_fetcher=_make_fetcher(),
            cache=cache,
        )

        assert result.usage_examples == []
        assert result.readme_content == README

    async def test_missing_readme_falls_back_to_description(self, cache):
        result = await get_package_readme(
            GetPackageReadmeParams(package_name="sidekiq"),
            registry=_make_registry(),
            readme_fetcher=_make_fetcher(None),
            cache=cache,
        )

        assert result.readme_content == SIDEKIQ.info
        assert result.usage_examples == []

    async def test_no_repository_and_no_description(self, cache):
        gem = GemRecord(name="bare", version="0.1.0")
        fetcher = _make_fetcher()

        result = await get_package_readme(
            GetPackageReadmeParams(package_name="bare"),
            registry=_make_registry(gem),
            readme_fetcher=fetcher,
            cache=cache,
        )

        assert result.readme_content == NO_README
        fetcher.fetch_readme.assert_not_awaited()

    async def test_gem_not_found_propagates(self, cache):
        registry = MagicMock()
        registry.get_gem = AsyncMock(side_effect=GemNotFoundError("Gem 'nope' not found"))

        with pytest.raises(GemNotFoundError):
            await get_package_readme(
                GetPackageReadmeParams(package_name="nope"),
                registry=registry,
                readme_fetcher=_make_fetcher(),
                cache=cache,
            )

    async def test_invalid_name_fails_before_network(self, cache):
        registry = _make_registry()

        with pytest.raises(InvalidGemNameError):
            await get_package_readme(
                GetPackageReadmeParams(package_name="bad name"),
                registry=registry,
                readme_fetcher=_make_fetcher(),
                cache=cache,
            )

        registry.get_gem.assert_not_awaited()

    async def test_invalid_version_fails_before_network(self, cache):
        registry = _make_registry()

        with pytest.raises(InvalidVersionError):
            await get_package_readme(
                GetPackageReadmeParams(package_name="sidekiq", version="v7"),
                registry=registry,
                readme_fetcher=_make_fetcher(),
                cache=cache,
            )

        registry.get_gem.assert_not_awaited()

    async def test_second_call_served_from_cache(self, cache):
        registry, fetcher = _make_registry(), _make_fetcher()
        params = GetPackageReadmeParams(package_name="sidekiq")

        first = await get_package_readme(
            params, registry=registry, readme_fetcher=fetcher, cache=cache
        )
        second = await get_package_readme(
            params, registry=registry, readme_fetcher=fetcher, cache=cache
        )

        assert second is first
        assert registry.get_gem.await_count == 1
        assert fetcher.fetch_readme.await_count == 1
