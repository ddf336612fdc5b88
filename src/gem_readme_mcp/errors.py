"""Exception hierarchy for gem-readme-mcp.

All exceptions inherit from GemReadmeError (single catch point).
Each class carries a stable ``code`` that the dispatcher translates into an
MCP error code. Messages are written for LLM consumption -- clear,
actionable, no stack traces.
"""

from __future__ import annotations


class GemReadmeError(Exception):
    """Base exception for all gem-readme-mcp errors."""

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


# ─── Validation ──────────────────────────────────────────────


class InvalidQueryError(GemReadmeError):
    """Search query is missing, empty, or not a string."""

    code = "INVALID_SEARCH_QUERY"


class InvalidLimitError(GemReadmeError):
    """Result limit is not a number in [1, 100]."""

    code = "INVALID_LIMIT"


class InvalidScoreError(GemReadmeError):
    """Quality or popularity threshold is not a number in [0, 1]."""

    code = "INVALID_SCORE"


class InvalidGemNameError(GemReadmeError):
    """Gem name is missing or not a valid RubyGems name."""

    code = "INVALID_GEM_NAME"


class InvalidVersionError(GemReadmeError):
    """Version string is neither 'latest' nor a RubyGems version."""

    code = "INVALID_VERSION"


class InvalidParameterError(GemReadmeError):
    """A tool argument violates its declared schema."""

    code = "INVALID_PARAMETER"


# ─── Registry ────────────────────────────────────────────────


class GemNotFoundError(GemReadmeError):
    """The registry has no gem with the requested name."""

    code = "GEM_NOT_FOUND"


class VersionNotFoundError(GemReadmeError):
    """The gem exists but the requested version was never published."""

    code = "VERSION_NOT_FOUND"


class RateLimitError(GemReadmeError):
    """The registry answered HTTP 429."""

    code = "RATE_LIMIT_EXCEEDED"


class NetworkError(GemReadmeError):
    """Error communicating with the RubyGems API."""

    code = "NETWORK_ERROR"


class UpstreamStatusError(NetworkError):
    """The registry answered with a non-success HTTP status."""


class MalformedResponseError(NetworkError):
    """The registry answered with a body that is not the expected JSON."""


# ─── Configuration ───────────────────────────────────────────


class ConfigError(GemReadmeError):
    """An environment setting could not be parsed."""

    code = "CONFIG_ERROR"
