"""Domain models for gem-readme-mcp. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass, field

# ─── Tool parameters ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SearchPackagesParams:
    """Validated arguments for the package search tool."""

    query: str
    limit: int = 20
    quality: float | None = None
    popularity: float | None = None


@dataclass(frozen=True, slots=True)
class GetPackageReadmeParams:
    """Validated arguments for the README tool."""

    package_name: str
    version: str = "latest"
    include_examples: bool = True


@dataclass(frozen=True, slots=True)
class GetPackageInfoParams:
    """Validated arguments for the package info tool."""

    package_name: str
    include_dependencies: bool = True
    include_dev_dependencies: bool = False


# ─── Registry Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class GemDependency:
    """A dependency declared by a gem."""

    name: str
    requirements: str = ""


@dataclass(frozen=True, slots=True)
class GemRecord:
    """A gem as returned by the RubyGems API (search or detail endpoint)."""

    name: str
    version: str = ""
    info: str | None = None
    authors: str = ""
    licenses: list[str] = field(default_factory=list)
    downloads: int = 0
    version_downloads: int = 0
    homepage_uri: str | None = None
    documentation_uri: str | None = None
    source_code_uri: str | None = None
    project_uri: str | None = None
    gem_uri: str | None = None
    bug_tracker_uri: str | None = None
    changelog_uri: str | None = None
    runtime_dependencies: list[GemDependency] = field(default_factory=list)
    development_dependencies: list[GemDependency] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class GemVersion:
    """A single published version of a gem."""

    number: str
    created_at: str = ""
    downloads_count: int = 0
    platform: str = "ruby"
    prerelease: bool = False
    licenses: list[str] = field(default_factory=list)


# ─── Search ───────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PackageSearchResult:
    """A search hit with derived popularity (``score``) and ``quality_score``."""

    name: str
    version: str
    description: str
    authors: str
    licenses: list[str]
    downloads: int
    version_downloads: int
    homepage_uri: str | None
    project_uri: str | None
    gem_uri: str | None
    documentation_uri: str | None
    source_code_uri: str | None
    score: float
    quality_score: float


@dataclass(frozen=True, slots=True)
class SearchPackagesResponse:
    query: str
    total: int
    packages: list[PackageSearchResult] = field(default_factory=list)


# ─── README ───────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class UsageExample:
    """A code sample pulled from a README usage section."""

    title: str
    code: str
    language: str = "ruby"
    description: str | None = None


@dataclass(frozen=True, slots=True)
class InstallationInfo:
    command: str
    bundler: str
    version_constraint: str | None = None


@dataclass(frozen=True, slots=True)
class GemBasicInfo:
    name: str
    version: str
    description: str
    homepage: str | None = None
    documentation: str | None = None
    source_code: str | None = None
    project_uri: str | None = None
    licenses: list[str] = field(default_factory=list)
    authors: str = ""


@dataclass(frozen=True, slots=True)
class PackageReadmeResponse:
    package_name: str
    version: str
    description: str
    readme_content: str
    usage_examples: list[UsageExample]
    installation: InstallationInfo
    basic_info: GemBasicInfo
    exists: bool = True


# ─── Package info ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DownloadStats:
    total: int
    latest_version: int


@dataclass(frozen=True, slots=True)
class PackageInfoResponse:
    package_name: str
    latest_version: str
    description: str
    authors: str
    licenses: list[str]
    homepage: str | None
    documentation: str | None
    source_code: str | None
    downloads: DownloadStats
    dependencies: list[GemDependency] | None = None
    dev_dependencies: list[GemDependency] | None = None
    versions_count: int = 0
    exists: bool = True
