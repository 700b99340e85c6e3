"""
Document Model.

In-memory representation of a parsed markdown file: frontmatter result,
section tree and the tables each section owns. Everything here is immutable
once built by the indexer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..exceptions import InvalidEncodingError, ParseError


def split_lines(text: str, keepends: bool = False) -> List[str]:
    """
    Split ``text`` on ``\\n`` only.

    Unlike ``str.splitlines``, form feeds, NEL and the Unicode line and
    paragraph separators stay inside their line. A trailing newline does not
    start an extra line. Without ``keepends`` a ``\\r`` before the newline is
    dropped as well.
    """
    lines = text.split("\n")
    tail = lines.pop()
    if keepends:
        result = [line + "\n" for line in lines]
    else:
        result = [line[:-1] if line.endswith("\r") else line for line in lines]
    if tail:
        result.append(tail if keepends or not tail.endswith("\r") else tail[:-1])
    return result


@dataclass(frozen=True)
class Table:
    """A pipe-delimited table: header row, separator row, data rows."""

    header_row: Tuple[str, ...]
    data_rows: Tuple[Tuple[str, ...], ...]
    start_line: int
    end_line: int

    @property
    def row_count(self) -> int:
        """Number of data rows (header and separator excluded)."""
        return len(self.data_rows)


@dataclass(frozen=True)
class Section:
    """
    One heading and everything it owns.

    ``body`` is the text directly under the heading, up to the next heading of
    any level. Deeper headings are owned by ``subsections``; ``text``
    reassembles the full span.

    The root section has level 0, an empty title and an empty heading line.
    """

    level: int
    title: str
    heading_line: str
    start_line: int
    end_line: int
    body: str
    subsections: Tuple["Section", ...] = ()
    tables: Tuple[Table, ...] = ()

    @property
    def text(self) -> str:
        """Heading line, body and all descendants in document order."""
        return self.heading_line + self.body + "".join(s.text for s in self.subsections)

    @property
    def is_root(self) -> bool:
        return self.level == 0

    def walk(self) -> Iterator["Section"]:
        """Yield every descendant section in document order (self excluded)."""
        for child in self.subsections:
            yield child
            yield from child.walk()

    def all_tables(self) -> Iterator[Table]:
        """Yield tables in this section and every nested subsection."""
        yield from self.tables
        for child in self.subsections:
            yield from child.all_tables()

    def children_at_next_level(self) -> Tuple["Section", ...]:
        """Immediate children exactly one level deeper."""
        return tuple(s for s in self.subsections if s.level == self.level + 1)


@dataclass(frozen=True)
class FrontmatterResult:
    """Outcome of frontmatter parsing: a mapping or a ParseError."""

    fields: Optional[Dict[str, Any]] = None
    error: Optional[ParseError] = None
    raw: str = ""
    body_start_line: int = 1

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CodepointOccurrence:
    """A denylisted codepoint at a 1-based line and column."""

    line: int
    column: int
    char: str
    name: str

    @property
    def codepoint(self) -> str:
        return f"U+{ord(self.char):04X}"

    def __str__(self) -> str:
        return f"{self.line}:{self.column} {self.codepoint}"


@dataclass(frozen=True)
class EncodingAudit:
    """Encoding Auditor output: occurrences in order, or a decode error."""

    encoding: str
    occurrences: Tuple[CodepointOccurrence, ...] = ()
    error: Optional[InvalidEncodingError] = None

    @property
    def clean(self) -> bool:
        return self.error is None and not self.occurrences


@dataclass(frozen=True)
class Document:
    """
    A loaded markdown file.

    ``text`` is the full decoded content; ``body`` is the text after the
    frontmatter block (the whole text when there is no valid block).
    """

    text: str
    body: str
    frontmatter: FrontmatterResult
    root: Section
    encoding_audit: EncodingAudit
    raw: bytes = b""
    path: Optional[Path] = None
    base_dir: Optional[Path] = field(default=None)

    @property
    def line_count(self) -> int:
        return len(split_lines(self.text))

    @property
    def sections(self) -> Tuple[Section, ...]:
        """Top-level sections (children of the synthetic root)."""
        return self.root.subsections

    def iter_sections(self) -> Iterator[Section]:
        """Every section in the tree, in document order."""
        return self.root.walk()

    def find_sections(self, title: str, level: Optional[int] = None) -> list[Section]:
        """Sections whose title equals ``title`` exactly, in document order."""
        return [
            s for s in self.iter_sections()
            if s.title == title and (level is None or s.level == level)
        ]

    def resolve_dir(self) -> Optional[Path]:
        """Directory that relative references in this document resolve against."""
        if self.base_dir is not None:
            return self.base_dir
        if self.path is not None:
            return self.path.parent
        return None

    @property
    def display_name(self) -> str:
        return str(self.path) if self.path is not None else "<memory>"
