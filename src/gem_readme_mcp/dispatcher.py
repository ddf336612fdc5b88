"""Tool dispatch: declarative schemas, argument validation, error translation.

Raw argument dicts stop here. Each tool's arguments are checked against its
ToolSpec and turned into a typed params dataclass before the operation runs,
and every failure leaves as an McpError with a stable JSON-RPC code.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
    TextContent,
    Tool,
    ToolAnnotations,
)

from gem_readme_mcp.errors import (
    GemReadmeError,
    InvalidGemNameError,
    InvalidLimitError,
    InvalidParameterError,
    InvalidQueryError,
    InvalidScoreError,
    InvalidVersionError,
)
from gem_readme_mcp.models import (
    GetPackageInfoParams,
    GetPackageReadmeParams,
    SearchPackagesParams,
)
from gem_readme_mcp.tools.info import get_package_info
from gem_readme_mcp.tools.readme import get_package_readme
from gem_readme_mcp.tools.search import search_packages

if TYPE_CHECKING:
    from gem_readme_mcp.server import AppContext

logger = logging.getLogger(__name__)

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "boolean": (bool,),
}

_ERROR_CODES: dict[str, int] = {
    "GEM_NOT_FOUND": INVALID_REQUEST,
    "VERSION_NOT_FOUND": INVALID_REQUEST,
    "INVALID_GEM_NAME": INVALID_PARAMS,
    "INVALID_VERSION": INVALID_PARAMS,
    "INVALID_SEARCH_QUERY": INVALID_PARAMS,
    "INVALID_LIMIT": INVALID_PARAMS,
    "INVALID_SCORE": INVALID_PARAMS,
    "INVALID_PARAMETER": INVALID_PARAMS,
    "RATE_LIMIT_EXCEEDED": INTERNAL_ERROR,
    "NETWORK_ERROR": INTERNAL_ERROR,
}


def map_error_code(code: str) -> int:
    """Translate a GemReadmeError code to a JSON-RPC error code."""
    return _ERROR_CODES.get(code, INTERNAL_ERROR)


# ─── Schema declaration ──────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """One tool argument: JSON type, default, bounds, and the error it raises."""

    name: str
    type: str
    description: str
    required: bool = False
    default: object = None
    minimum: float | None = None
    maximum: float | None = None
    error: type[GemReadmeError] = InvalidParameterError
    coerce: Callable[[object], object] | None = None

    def to_schema(self) -> dict[str, object]:
        schema: dict[str, object] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema

    def validate(self, value: object) -> None:
        if value is None or (self.required and value == ""):
            if self.required:
                raise self.error(f"{self.name} is required and must be a {self.type}")
            return
        # bool is an int subclass but never a JSON number.
        if not isinstance(value, _JSON_TYPES[self.type]) or (
            self.type == "number" and isinstance(value, bool)
        ):
            raise self.error(f"{self.name} must be a {self.type}")
        if self.type == "number" and not _within(value, self.minimum, self.maximum):
            raise self.error(
                f"{self.name} must be a number between {self.minimum} and {self.maximum}"
            )


def _within(value: float, minimum: float | None, maximum: float | None) -> bool:
    if minimum is not None and not value >= minimum:
        return False
    return maximum is None or value <= maximum


@dataclass(frozen=True, slots=True)
class ToolSpec:
    name: str
    description: str
    params: tuple[ParamSpec, ...]
    params_type: type

    def input_schema(self) -> dict[str, object]:
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.params},
            "required": [p.name for p in self.params if p.required],
        }

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
            annotations=ToolAnnotations(readOnlyHint=True),
        )

    def parse_arguments(self, arguments: dict[str, object]) -> object:
        """Validate ``arguments`` and build the typed params object.

        Unknown keys are ignored. Absent optionals take the dataclass default.
        """
        values: dict[str, object] = {}
        for param in self.params:
            value = arguments.get(param.name)
            param.validate(value)
            if value is not None:
                values[param.name] = param.coerce(value) if param.coerce else value
        return self.params_type(**values)


README_TOOL = ToolSpec(
    name="get_readme_from_gem",
    description="Get Ruby gem README and usage examples from RubyGems registry",
    params=(
        ParamSpec(
            "package_name",
            "string",
            "The name of the Ruby gem",
            required=True,
            error=InvalidGemNameError,
        ),
        ParamSpec(
            "version",
            "string",
            'The version of the gem (default: "latest")',
            default="latest",
            error=InvalidVersionError,
        ),
        ParamSpec(
            "include_examples",
            "boolean",
            "Whether to include usage examples (default: true)",
            default=True,
        ),
    ),
    params_type=GetPackageReadmeParams,
)

INFO_TOOL = ToolSpec(
    name="get_package_info_from_gem",
    description="Get Ruby gem basic information and dependencies from RubyGems registry",
    params=(
        ParamSpec(
            "package_name",
            "string",
            "The name of the Ruby gem",
            required=True,
            error=InvalidGemNameError,
        ),
        ParamSpec(
            "include_dependencies",
            "boolean",
            "Whether to include runtime dependencies (default: true)",
            default=True,
        ),
        ParamSpec(
            "include_dev_dependencies",
            "boolean",
            "Whether to include development dependencies (default: false)",
            default=False,
        ),
    ),
    params_type=GetPackageInfoParams,
)

SEARCH_TOOL = ToolSpec(
    name="search_packages_from_gem",
    description="Search for Ruby gems in RubyGems registry",
    params=(
        ParamSpec(
            "query",
            "string",
            "The search query",
            required=True,
            error=InvalidQueryError,
        ),
        ParamSpec(
            "limit",
            "number",
            "Maximum number of results to return (default: 20)",
            default=20,
            minimum=1,
            maximum=100,
            error=InvalidLimitError,
            coerce=int,
        ),
        ParamSpec(
            "quality",
            "number",
            "Minimum quality score (0-1)",
            minimum=0,
            maximum=1,
            error=InvalidScoreError,
        ),
        ParamSpec(
            "popularity",
            "number",
            "Minimum popularity score based on downloads (0-1)",
            minimum=0,
            maximum=1,
            error=InvalidScoreError,
        ),
    ),
    params_type=SearchPackagesParams,
)

TOOL_SPECS: dict[str, ToolSpec] = {
    spec.name: spec for spec in (README_TOOL, INFO_TOOL, SEARCH_TOOL)
}


# ─── Dispatch ────────────────────────────────────────────────


class ToolDispatcher:
    """Routes tool calls to operations using the collaborators in AppContext."""

    def __init__(self, app: AppContext) -> None:
        self._app = app
        self._handlers: dict[str, Callable[[object], Awaitable[object]]] = {
            README_TOOL.name: self._get_readme,
            INFO_TOOL.name: self._get_info,
            SEARCH_TOOL.name: self._search,
        }

    @staticmethod
    def list_tools() -> list[Tool]:
        return [spec.to_tool() for spec in TOOL_SPECS.values()]

    async def call_tool(self, name: str, arguments: object) -> list[TextContent]:
        """Run a tool and return its result as indented JSON text.

        Raises:
            McpError: for every failure, with the code from map_error_code
                (or METHOD_NOT_FOUND / INVALID_PARAMS for dispatch errors).
        """
        try:
            if not isinstance(arguments, dict):
                raise McpError(
                    ErrorData(code=INVALID_PARAMS, message="Tool arguments must be an object")
                )
            spec = TOOL_SPECS.get(name)
            if spec is None:
                raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
            params = spec.parse_arguments(arguments)
            result = await self._handlers[name](params)
        except McpError as exc:
            logger.error("Tool execution failed: %s args=%r: %s", name, arguments, exc)
            raise
        except GemReadmeError as exc:
            logger.error(
                "Tool execution failed: %s args=%r: [%s] %s", name, arguments, exc.code, exc
            )
            raise McpError(
                ErrorData(code=map_error_code(exc.code), message=exc.message, data=exc.details)
            ) from exc
        except Exception as exc:
            logger.exception("Tool execution failed: %s args=%r", name, arguments)
            raise McpError(
                ErrorData(code=INTERNAL_ERROR, message=f"Internal error: {exc}")
            ) from exc

        return [TextContent(type="text", text=json.dumps(asdict(result), indent=2))]

    # ── Handlers ─────────────────────────────────────────────

    async def _get_readme(self, params: GetPackageReadmeParams) -> object:
        return await get_package_readme(
            params,
            registry=self._app.registry,
            readme_fetcher=self._app.readme_fetcher,
            cache=self._app.cache,
        )

    async def _get_info(self, params: GetPackageInfoParams) -> object:
        return await get_package_info(params, registry=self._app.registry, cache=self._app.cache)

    async def _search(self, params: SearchPackagesParams) -> object:
        return await search_packages(params, registry=self._app.registry, cache=self._app.cache)
