"""Pure argument validators. Each raises a GemReadmeError subclass on failure."""

from __future__ import annotations

import math
import re

from gem_readme_mcp.errors import (
    InvalidGemNameError,
    InvalidLimitError,
    InvalidQueryError,
    InvalidScoreError,
    InvalidVersionError,
)

MIN_LIMIT = 1
MAX_LIMIT = 100
MAX_GEM_NAME_LENGTH = 100

_GEM_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_VERSION_RE = re.compile(r"^[0-9]+(?:\.[0-9A-Za-z]+)*$")


def _is_number(value: object) -> bool:
    # bool is an int subclass; True must not pass as a limit of 1.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_search_query(query: object) -> None:
    if not isinstance(query, str) or not query.strip():
        raise InvalidQueryError("Search query is required and must be a non-empty string")


def validate_limit(limit: object) -> None:
    if not _is_number(limit) or not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise InvalidLimitError(
            f"Limit must be a number between {MIN_LIMIT} and {MAX_LIMIT}, got {limit!r}"
        )


def validate_score(score: object, label: str = "Score") -> None:
    """Validate a 0-1 threshold. ``label`` names the field in the error message."""
    if not _is_number(score) or math.isnan(score) or not 0 <= score <= 1:
        raise InvalidScoreError(f"{label} must be a number between 0 and 1, got {score!r}")


def validate_gem_name(name: object) -> None:
    if not isinstance(name, str) or not name.strip():
        raise InvalidGemNameError("Gem name is required and must be a non-empty string")
    if len(name) > MAX_GEM_NAME_LENGTH:
        raise InvalidGemNameError(
            f"Gem name is too long ({len(name)} characters, max {MAX_GEM_NAME_LENGTH})"
        )
    if not _GEM_NAME_RE.match(name):
        raise InvalidGemNameError(
            f"Invalid gem name '{name}'. Gem names may contain letters, digits, "
            "'.', '_' and '-', and must start with a letter or digit."
        )


def validate_version(version: object) -> None:
    """Accept ``"latest"`` or a RubyGems version such as ``7.1.3`` or ``2.0.0.rc1``."""
    if not isinstance(version, str) or not version:
        raise InvalidVersionError("Version must be a non-empty string")
    if version == "latest":
        return
    if not _VERSION_RE.match(version):
        raise InvalidVersionError(
            f"Invalid version '{version}'. Use 'latest' or a version like '7.1.3'."
        )
