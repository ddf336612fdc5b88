"""Extract usage examples from README markdown."""

from __future__ import annotations

import re

from gem_readme_mcp.models import UsageExample

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^(```+|~~~+)\s*([\w+-]*)")

_USAGE_HEADING_RE = re.compile(
    r"\b(usage|examples?|getting\s+started|quick\s*start|synopsis|basic|how\s+to\s+use)\b",
    re.IGNORECASE,
)

_LANGUAGE_ALIASES: dict[str, str] = {
    "rb": "ruby",
    "irb": "ruby",
    "sh": "bash",
    "shell": "bash",
    "console": "bash",
    "shell-session": "bash",
    "yml": "yaml",
    "html+erb": "erb",
    "rhtml": "erb",
}

_BASH_HINT_RE = re.compile(r"^\s*(\$\s|gem\s+install|bundle\s|rails\s|rake\s)", re.MULTILINE)
_RUBY_HINT_RE = re.compile(
    r"^\s*(require\b|class\s|module\s|def\s|end\s*$|\w+\.\w+|puts\b)",
    re.MULTILINE,
)
_YAML_HINT_RE = re.compile(r"^[\w-]+:\s*(\S.*)?$", re.MULTILINE)

_MAX_DESCRIPTION_CHARS = 200

DEFAULT_EXAMPLE_LIMIT = 10


def _detect_language(code: str) -> str:
    if "<%" in code:
        return "erb"
    if _BASH_HINT_RE.search(code):
        return "bash"
    if _RUBY_HINT_RE.search(code):
        return "ruby"
    if _YAML_HINT_RE.search(code):
        return "yaml"
    return "text"


def _normalize_language(tag: str, code: str) -> str:
    tag = tag.lower()
    if not tag:
        return _detect_language(code)
    return _LANGUAGE_ALIASES.get(tag, tag)


def extract_usage_examples(
    readme: str,
    limit: int = DEFAULT_EXAMPLE_LIMIT,
) -> list[UsageExample]:
    """Collect fenced code blocks that live under a usage-like heading.

    Each example is titled with its nearest heading and described by the
    prose line just above the fence, if any. Duplicate code is dropped.

    Args:
        readme: Raw markdown text.
        limit: Maximum number of examples to return.

    Returns:
        Examples in document order.
    """
    examples: list[UsageExample] = []
    seen_code: set[str] = set()

    heading = ""
    in_usage_section = False
    usage_level = 0
    last_prose = ""

    fence = ""
    fence_lang = ""
    block: list[str] = []

    for line in readme.splitlines():
        if fence:
            if line.strip().startswith(fence):
                code = "\n".join(block).strip()
                if in_usage_section and code and code not in seen_code:
                    seen_code.add(code)
                    examples.append(
                        UsageExample(
                            title=heading or "Example",
                            code=code,
                            language=_normalize_language(fence_lang, code),
                            description=last_prose or None,
                        )
                    )
                    if len(examples) >= limit:
                        break
                fence = ""
                block = []
                last_prose = ""
            else:
                block.append(line)
            continue

        fence_match = _FENCE_RE.match(line.strip())
        if fence_match:
            fence, fence_lang = fence_match.group(1), fence_match.group(2)
            continue

        heading_match = _HEADING_RE.match(line)
        if heading_match:
            level = len(heading_match.group(1))
            heading = heading_match.group(2).strip()
            last_prose = ""
            is_usage = bool(_USAGE_HEADING_RE.search(heading))
            # Sub-headings stay inside the enclosing usage section.
            if not in_usage_section or level <= usage_level:
                in_usage_section = is_usage
                usage_level = level
            continue

        stripped = line.strip()
        if stripped:
            last_prose = stripped[:_MAX_DESCRIPTION_CHARS]

    return examples
