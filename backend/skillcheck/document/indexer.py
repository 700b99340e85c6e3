"""
Structural Indexer.

Walks the heading stream of a markdown body and builds the Section tree,
recording the pipe-delimited tables each section owns.

Headings are matched in document order with no normalization of their text.
Lines inside fenced code blocks are never headings or table rows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .model import Section, Table, split_lines


HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*$")
TABLE_ROW_PATTERN = re.compile(r"^\|.*\|$")
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|(?:\s*:?-+:?\s*\|)+$")
FENCE_PATTERN = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_CELL_SPLIT = re.compile(r"(?<!\\)\|")
# Closing hashes of an ATX heading: "## Title ##"
_CLOSING_HASHES = re.compile(r"\s+#+$")


@dataclass
class _Node:
    """Mutable section under construction."""

    level: int
    title: str
    heading_line: str
    start_line: int
    lines: List[str] = field(default_factory=list)
    code_mask: List[bool] = field(default_factory=list)
    children: List["_Node"] = field(default_factory=list)


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def match_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return ``(level, title)`` if ``line`` is an ATX heading."""
    match = HEADING_PATTERN.match(_strip_eol(line))
    if not match:
        return None
    title = _CLOSING_HASHES.sub("", match.group(2)).strip()
    if not title:
        return None
    return len(match.group(1)), title


def split_cells(row: str) -> Tuple[str, ...]:
    """Split a ``| a | b |`` row into stripped cells, honouring ``\\|`` escapes."""
    inner = row.strip()[1:-1]
    return tuple(cell.strip() for cell in _CELL_SPLIT.split(inner))


def find_tables(lines: List[str], first_line: int, code_mask: Optional[List[bool]] = None) -> Tuple[Table, ...]:
    """
    Detect tables in a run of lines.

    A table is a maximal run of consecutive ``|...|`` lines whose second line
    is a separator row. Runs without a separator are plain text.

    Args:
        lines: Lines with endings kept.
        first_line: 1-based file line number of ``lines[0]``.
        code_mask: Per-line flags marking lines inside fenced code blocks.
    """
    tables: List[Table] = []
    stripped = [_strip_eol(line).rstrip() for line in lines]
    in_code = code_mask or [False] * len(lines)

    index = 0
    while index < len(stripped):
        if in_code[index] or not TABLE_ROW_PATTERN.match(stripped[index]):
            index += 1
            continue

        end = index
        while (
            end + 1 < len(stripped)
            and not in_code[end + 1]
            and TABLE_ROW_PATTERN.match(stripped[end + 1])
        ):
            end += 1

        if end > index and TABLE_SEPARATOR_PATTERN.match(stripped[index + 1]):
            tables.append(Table(
                header_row=split_cells(stripped[index]),
                data_rows=tuple(split_cells(row) for row in stripped[index + 2:end + 1]),
                start_line=first_line + index,
                end_line=first_line + end,
            ))
        index = end + 1

    return tuple(tables)


def _freeze(node: _Node) -> Section:
    children = tuple(_freeze(child) for child in node.children)
    own_first = node.start_line + (1 if node.heading_line else 0)
    own_last = own_first + len(node.lines) - 1
    end_line = children[-1].end_line if children else own_last
    return Section(
        level=node.level,
        title=node.title,
        heading_line=node.heading_line,
        start_line=node.start_line,
        end_line=end_line,
        body="".join(node.lines),
        subsections=children,
        tables=find_tables(node.lines, own_first, node.code_mask),
    )


def index_sections(body: str, first_line: int = 1) -> Section:
    """
    Build the Section tree for a markdown body.

    Args:
        body: Text after the frontmatter block.
        first_line: 1-based file line number of the first body line.

    Returns:
        The synthetic root Section (level 0). A body without headings yields
        a root with no subsections.
    """
    root = _Node(level=0, title="", heading_line="", start_line=first_line)
    stack: List[_Node] = [root]
    fence: Optional[str] = None

    for offset, line in enumerate(split_lines(body, keepends=True)):
        line_no = first_line + offset
        fence_match = FENCE_PATTERN.match(line)

        if fence is not None:
            stack[-1].lines.append(line)
            stack[-1].code_mask.append(True)
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                fence = None
            continue

        if fence_match:
            fence = fence_match.group(1)
            stack[-1].lines.append(line)
            stack[-1].code_mask.append(True)
            continue

        heading = match_heading(line)
        if heading is None:
            stack[-1].lines.append(line)
            stack[-1].code_mask.append(False)
            continue

        level, title = heading
        while stack[-1].level >= level:
            stack.pop()
        node = _Node(level=level, title=title, heading_line=line, start_line=line_no)
        stack[-1].children.append(node)
        stack.append(node)

    return _freeze(root)
