"""Tests for tool dispatch, schema validation, and error translation."""

from __future__ import annotations

import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND

from gem_readme_mcp.cache import MemoryCache
from gem_readme_mcp.dispatcher import (
    SEARCH_TOOL,
    TOOL_SPECS,
    ToolDispatcher,
    map_error_code,
)
from gem_readme_mcp.errors import (
    GemNotFoundError,
    InvalidLimitError,
    InvalidParameterError,
    InvalidScoreError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
)
from gem_readme_mcp.models import GemRecord, GemVersion, SearchPackagesParams
from gem_readme_mcp.server import AppContext

# --- Helpers ---------------------------------------------------------------


def _make_app(gems: list[GemRecord] | None = None) -> MagicMock:
    app = MagicMock(spec=AppContext)
    app.cache = MemoryCache()
    app.registry = MagicMock()
    app.registry.search_gems = AsyncMock(return_value=gems or [])
    app.registry.get_gem = AsyncMock(
        return_value=GemRecord(name="rack", version="3.0.9", downloads=10)
    )
    app.registry.get_versions = AsyncMock(return_value=[GemVersion(number="3.0.9")])
    app.readme_fetcher = MagicMock()
    app.readme_fetcher.fetch_readme = AsyncMock(return_value=None)
    return app


async def _call_error(dispatcher: ToolDispatcher, name: str, arguments: object) -> McpError:
    with pytest.raises(McpError) as exc_info:
        await dispatcher.call_tool(name, arguments)
    return exc_info.value


# ===================================================================
# Discovery
# ===================================================================


class TestListTools:
    def test_lists_three_tools(self):
        names = [tool.name for tool in ToolDispatcher.list_tools()]
        assert names == [
            "get_readme_from_gem",
            "get_package_info_from_gem",
            "search_packages_from_gem",
        ]

    def test_search_schema(self):
        schema = SEARCH_TOOL.input_schema()
        assert schema["required"] == ["query"]
        limit = schema["properties"]["limit"]
        assert limit == {
            "type": "number",
            "description": "Maximum number of results to return (default: 20)",
            "default": 20,
            "minimum": 1,
            "maximum": 100,
        }
        assert schema["properties"]["quality"]["minimum"] == 0
        assert schema["properties"]["popularity"]["maximum"] == 1

    def test_tools_are_read_only(self):
        assert all(t.annotations.readOnlyHint for t in ToolDispatcher.list_tools())


# ===================================================================
# Argument parsing
# ===================================================================


class TestParseArguments:
    def test_defaults_applied(self):
        params = SEARCH_TOOL.parse_arguments({"query": "rails"})
        assert params == SearchPackagesParams(query="rails", limit=20)

    def test_limit_coerced_to_int(self):
        params = SEARCH_TOOL.parse_arguments({"query": "rails", "limit": 5.0})
        assert params.limit == 5
        assert isinstance(params.limit, int)

    def test_unknown_keys_ignored(self):
        params = SEARCH_TOOL.parse_arguments({"query": "rails", "extra": 1})
        assert params.query == "rails"

    def test_null_optional_treated_as_absent(self):
        params = SEARCH_TOOL.parse_arguments({"query": "rails", "quality": None})
        assert params.quality is None

    def test_boolean_is_not_a_number(self):
        with pytest.raises(InvalidLimitError):
            SEARCH_TOOL.parse_arguments({"query": "rails", "limit": True})

    def test_string_is_not_a_number(self):
        with pytest.raises(InvalidScoreError):
            SEARCH_TOOL.parse_arguments({"query": "rails", "popularity": "0.5"})

    def test_boolean_param_rejects_strings(self):
        spec = TOOL_SPECS["get_readme_from_gem"]
        with pytest.raises(InvalidParameterError, match="include_examples must be a boolean"):
            spec.parse_arguments({"package_name": "rack", "include_examples": "yes"})


# ===================================================================
# call_tool -- success
# ===================================================================


class TestCallTool:
    async def test_search_returns_indented_json(self):
        app = _make_app([GemRecord(name="rails", version="7.1.3", downloads=5_000_000)])
        dispatcher = ToolDispatcher(app)

        content = await dispatcher.call_tool("search_packages_from_gem", {"query": "rails"})

        assert len(content) == 1
        assert content[0].type == "text"
        payload = json.loads(content[0].text)
        assert payload["query"] == "rails"
        assert payload["total"] == 1
        assert payload["packages"][0]["name"] == "rails"
        assert payload["packages"][0]["score"] == pytest.approx(0.5)
        assert "\n  " in content[0].text

    async def test_identical_searches_are_byte_identical(self):
        app = _make_app([GemRecord(name="rails", version="7.1.3", downloads=5)])
        dispatcher = ToolDispatcher(app)
        args = {"query": "rails", "limit": 5}

        first = await dispatcher.call_tool("search_packages_from_gem", args)
        second = await dispatcher.call_tool("search_packages_from_gem", args)

        assert first[0].text == second[0].text
        assert app.registry.search_gems.await_count == 1

    async def test_info_tool(self):
        dispatcher = ToolDispatcher(_make_app())

        content = await dispatcher.call_tool(
            "get_package_info_from_gem", {"package_name": "rack"}
        )

        payload = json.loads(content[0].text)
        assert payload["package_name"] == "rack"
        assert payload["dev_dependencies"] is None

    async def test_readme_tool(self):
        dispatcher = ToolDispatcher(_make_app())

        content = await dispatcher.call_tool("get_readme_from_gem", {"package_name": "rack"})

        payload = json.loads(content[0].text)
        assert payload["installation"]["command"] == "gem install rack"
        assert payload["usage_examples"] == []


# ===================================================================
# call_tool -- error translation
# ===================================================================


class TestErrorTranslation:
    async def test_non_object_arguments_rejected(self):
        err = await _call_error(ToolDispatcher(_make_app()), "search_packages_from_gem", ["x"])
        assert err.error.code == INVALID_PARAMS
        assert "must be an object" in err.error.message

    async def test_unknown_tool(self):
        err = await _call_error(ToolDispatcher(_make_app()), "delete_everything", {})
        assert err.error.code == METHOD_NOT_FOUND

    async def test_scenario_empty_query_is_invalid_params(self):
        app = _make_app()
        err = await _call_error(ToolDispatcher(app), "search_packages_from_gem", {"query": ""})
        assert err.error.code == INVALID_PARAMS
        app.registry.search_gems.assert_not_awaited()

    async def test_missing_query_is_invalid_params(self):
        err = await _call_error(ToolDispatcher(_make_app()), "search_packages_from_gem", {})
        assert err.error.code == INVALID_PARAMS

    async def test_scenario_limit_150_is_invalid_params(self):
        app = _make_app()
        err = await _call_error(
            ToolDispatcher(app), "search_packages_from_gem", {"query": "rails", "limit": 150}
        )
        assert err.error.code == INVALID_PARAMS
        app.registry.search_gems.assert_not_awaited()

    async def test_gem_not_found_is_invalid_request(self):
        app = _make_app()
        app.registry.get_gem = AsyncMock(
            side_effect=GemNotFoundError("Gem 'nope' not found on RubyGems", {"gem": "nope"})
        )

        err = await _call_error(
            ToolDispatcher(app), "get_package_info_from_gem", {"package_name": "nope"}
        )

        assert err.error.code == INVALID_REQUEST
        assert err.error.message == "Gem 'nope' not found on RubyGems"
        assert err.error.data == {"gem": "nope"}

    @pytest.mark.parametrize(
        "exc",
        [NetworkError("down"), MalformedResponseError("bad"), RateLimitError("slow down")],
    )
    async def test_upstream_errors_are_internal(self, exc):
        app = _make_app()
        app.registry.search_gems = AsyncMock(side_effect=exc)

        err = await _call_error(ToolDispatcher(app), "search_packages_from_gem", {"query": "x"})

        assert err.error.code == INTERNAL_ERROR

    async def test_unexpected_exception_is_wrapped(self):
        app = _make_app()
        app.registry.search_gems = AsyncMock(side_effect=KeyError("boom"))

        err = await _call_error(ToolDispatcher(app), "search_packages_from_gem", {"query": "x"})

        assert err.error.code == INTERNAL_ERROR
        assert err.error.message.startswith("Internal error:")

    async def test_failures_are_logged_with_tool_and_arguments(self, caplog):
        app = _make_app()
        app.registry.search_gems = AsyncMock(side_effect=NetworkError("down"))

        with caplog.at_level(logging.ERROR, logger="gem_readme_mcp.dispatcher"):
            await _call_error(ToolDispatcher(app), "search_packages_from_gem", {"query": "x"})

        assert "search_packages_from_gem" in caplog.text
        assert "'query': 'x'" in caplog.text


class TestMapErrorCode:
    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            ("GEM_NOT_FOUND", INVALID_REQUEST),
            ("VERSION_NOT_FOUND", INVALID_REQUEST),
            ("INVALID_GEM_NAME", INVALID_PARAMS),
            ("INVALID_VERSION", INVALID_PARAMS),
            ("INVALID_SEARCH_QUERY", INVALID_PARAMS),
            ("INVALID_LIMIT", INVALID_PARAMS),
            ("INVALID_SCORE", INVALID_PARAMS),
            ("INVALID_PARAMETER", INVALID_PARAMS),
            ("RATE_LIMIT_EXCEEDED", INTERNAL_ERROR),
            ("NETWORK_ERROR", INTERNAL_ERROR),
            ("SOMETHING_NEW", INTERNAL_ERROR),
        ],
    )
    def test_mapping(self, code, expected):
        assert map_error_code(code) == expected
