"""
Frontmatter Parser.

Locates the ``---`` delimited YAML block that must open a markdown file and
parses it into a mapping. Failures are returned as ParseError values, never
raised to the caller.
"""

from __future__ import annotations

import re
from typing import List

import yaml

from ..exceptions import ParseError, ParseErrorKind
from .model import FrontmatterResult, split_lines


DELIMITER = "---"

_BOOL_TAG = "tag:yaml.org,2002:bool"


class FrontmatterLoader(yaml.SafeLoader):
    """
    SafeLoader with YAML 1.2 booleans.

    Only ``true``/``false`` resolve to bool; ``yes``, ``no``, ``on`` and
    ``off`` stay strings.
    """


FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FrontmatterLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n").rstrip() == DELIMITER


def split_frontmatter(lines: List[str]) -> tuple[int, int] | None:
    """
    Find the frontmatter block in ``lines`` (kept line endings).

    Returns:
        ``(0, closing_index)`` when both delimiters are present, None when the
        file does not open with a delimiter.

    Raises:
        ParseError: If the opening delimiter has no closing partner.
    """
    if not lines or not _is_delimiter(lines[0]):
        return None
    for index in range(1, len(lines)):
        if _is_delimiter(lines[index]):
            return 0, index
    raise ParseError(
        ParseErrorKind.UNTERMINATED,
        "opening '---' has no closing delimiter",
        line=1,
    )


def parse_frontmatter(text: str) -> FrontmatterResult:
    """
    Parse the frontmatter block at the start of ``text``.

    Args:
        text: Decoded document content.

    Returns:
        FrontmatterResult with ``fields`` on success or ``error`` on failure.
        On missing or unterminated frontmatter the body starts at line 1.
    """
    lines = split_lines(text, keepends=True)

    try:
        bounds = split_frontmatter(lines)
    except ParseError as e:
        return FrontmatterResult(error=e)

    if bounds is None:
        return FrontmatterResult(error=ParseError(
            ParseErrorKind.MISSING,
            "document does not start with a '---' line",
            line=1,
        ))

    _, close = bounds
    raw = "".join(lines[:close + 1])
    block = "".join(lines[1:close])
    body_start_line = close + 2

    try:
        data = yaml.load(block, Loader=FrontmatterLoader)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None) or getattr(e, "context_mark", None)
        # Block content starts on file line 2.
        line = mark.line + 2 if mark is not None else None
        problem = getattr(e, "problem", None) or str(e)
        return FrontmatterResult(
            error=ParseError(ParseErrorKind.MALFORMED, problem, line=line),
            raw=raw,
            body_start_line=body_start_line,
        )

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return FrontmatterResult(
            error=ParseError(
                ParseErrorKind.MALFORMED,
                f"expected a mapping, got {type(data).__name__}",
                line=2,
            ),
            raw=raw,
            body_start_line=body_start_line,
        )

    return FrontmatterResult(fields=data, raw=raw, body_start_line=body_start_line)
