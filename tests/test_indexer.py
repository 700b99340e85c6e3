"""
Tests for the Structural Indexer.
"""

from backend.skillcheck.document import build_document, find_tables, index_sections, match_heading, split_lines


SAMPLE = """Intro paragraph.

# Guide

Overview text.

## Setup

| Step | Command |
|------|---------|
| 1 | install |
| 2 | run |

### Details

More text.

## Sharp edges

```bash
# not a heading
## also not a heading
```

### Edge one
### Edge two
#### Deep note

## Setup

Repeated title.
"""


class TestHeadingMatching:
    """Tests for heading detection."""

    def test_levels(self):
        """Test levels one through six."""
        for level in range(1, 7):
            assert match_heading("#" * level + " Title\n") == (level, "Title")

    def test_seven_hashes_is_text(self):
        """Test that seven hashes is not a heading."""
        assert match_heading("####### Title") is None

    def test_requires_space(self):
        """Test that '#tag' is not a heading."""
        assert match_heading("#hashtag") is None

    def test_title_is_trimmed(self):
        """Test title whitespace and closing hashes are removed."""
        assert match_heading("##   Sharp edges   ") == (2, "Sharp edges")
        assert match_heading("## Title ##") == (2, "Title")

    def test_no_case_normalization(self):
        """Test that heading text is kept as written."""
        assert match_heading("## Sharp Edges:") == (2, "Sharp Edges:")


class TestSectionTree:
    """Tests for the Section hierarchy."""

    def test_round_trip(self):
        """Test that the tree reconstructs the body exactly."""
        root = index_sections(SAMPLE)
        assert root.text == SAMPLE

    def test_round_trip_without_trailing_newline(self):
        """Test reconstruction when the last line has no newline."""
        body = "# A\ntext\n## B\nend"
        assert index_sections(body).text == body

    def test_hierarchy(self):
        """Test immediate-children ownership."""
        root = index_sections(SAMPLE)
        assert [s.title for s in root.subsections] == ["Guide"]
        guide = root.subsections[0]
        assert [s.title for s in guide.subsections] == ["Setup", "Sharp edges", "Setup"]
        edges = guide.subsections[1]
        assert [s.title for s in edges.subsections] == ["Edge one", "Edge two"]
        assert [s.title for s in edges.subsections[1].subsections] == ["Deep note"]

    def test_preamble_owned_by_root(self):
        """Test text before the first heading."""
        root = index_sections(SAMPLE)
        assert root.level == 0
        assert root.body == "Intro paragraph.\n\n"

    def test_fenced_code_is_not_headings(self):
        """Test that headings inside code fences are plain text."""
        root = index_sections(SAMPLE)
        titles = [s.title for s in root.walk()]
        assert "not a heading" not in titles
        assert "also not a heading" not in titles

    def test_no_headings(self):
        """Test that a body without headings gives an empty tree."""
        root = index_sections("just text\n\nmore text\n")
        assert root.subsections == ()
        assert root.body == "just text\n\nmore text\n"

    def test_empty_body(self):
        """Test an empty body."""
        root = index_sections("")
        assert root.subsections == ()
        assert root.text == ""

    def test_same_text_different_levels(self):
        """Test that equal titles at different levels are distinct."""
        root = index_sections("## Notes\n### Notes\n")
        outer = root.subsections[0]
        assert outer.level == 2
        assert outer.subsections[0].level == 3
        assert outer.subsections[0].title == "Notes"

    def test_skipped_level_is_child(self):
        """Test that a level-4 heading under level 2 is still a child."""
        root = index_sections("## A\n#### Deep\n### B\n")
        a = root.subsections[0]
        assert [s.title for s in a.subsections] == ["Deep", "B"]
        assert [s.title for s in a.children_at_next_level()] == ["B"]

    def test_line_numbers(self):
        """Test start and end lines relative to the file."""
        root = index_sections("# A\ntext\n## B\nmore\n# C\n", first_line=5)
        a, c = root.subsections
        b = a.subsections[0]
        assert (a.start_line, a.end_line) == (5, 8)
        assert (b.start_line, b.end_line) == (7, 8)
        assert (c.start_line, c.end_line) == (9, 9)

    def test_body_excludes_heading_line(self):
        """Test that a section body does not include its heading."""
        root = index_sections("## A\nline one\nline two\n")
        a = root.subsections[0]
        assert a.heading_line == "## A\n"
        assert a.body == "line one\nline two\n"


class TestTables:
    """Tests for table detection."""

    def test_table_rows(self):
        """Test header and data rows."""
        root = index_sections(SAMPLE)
        setup = root.subsections[0].subsections[0]
        assert len(setup.tables) == 1
        table = setup.tables[0]
        assert table.header_row == ("Step", "Command")
        assert table.data_rows == (("1", "install"), ("2", "run"))
        assert table.row_count == 2

    def test_trailing_blank_lines(self):
        """Test that trailing blank lines do not change the count."""
        lines = "| A | B |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |\n\n\n\n".splitlines(keepends=True)
        tables = find_tables(lines, first_line=1)
        assert len(tables) == 1
        assert tables[0].row_count == 2
        assert (tables[0].start_line, tables[0].end_line) == (1, 4)

    def test_pipe_line_without_separator_is_text(self):
        """Test that a one-off pipe line is not a table."""
        lines = "| just text |\nmore\n| a | b |\n| c | d |\n".splitlines(keepends=True)
        assert find_tables(lines, first_line=1) == ()

    def test_header_only_table(self):
        """Test a table with no data rows."""
        lines = "| A |\n|:--|\n".splitlines(keepends=True)
        tables = find_tables(lines, first_line=1)
        assert tables[0].row_count == 0

    def test_aligned_separator(self):
        """Test separator rows with alignment colons."""
        lines = "| A | B |\n| :--- | ---: |\n| 1 | 2 |\n".splitlines(keepends=True)
        assert find_tables(lines, first_line=1)[0].row_count == 1

    def test_two_tables(self):
        """Test two tables separated by text."""
        lines = (
            "| A |\n|---|\n| 1 |\n"
            "\ntext\n\n"
            "| B |\n|---|\n| 2 |\n| 3 |\n"
        ).splitlines(keepends=True)
        tables = find_tables(lines, first_line=1)
        assert [t.row_count for t in tables] == [1, 2]

    def test_escaped_pipe(self):
        """Test that escaped pipes stay inside a cell."""
        lines = "| expr | note |\n|---|---|\n| a \\| b | or |\n".splitlines(keepends=True)
        table = find_tables(lines, first_line=1)[0]
        assert table.data_rows == (("a \\| b", "or"),)

    def test_table_inside_code_fence_ignored(self):
        """Test that tables in fenced code are plain text."""
        root = index_sections("## A\n```\n| A |\n|---|\n| 1 |\n```\n")
        assert root.subsections[0].tables == ()

    def test_nested_tables(self):
        """Test all_tables walks subsections."""
        root = index_sections("## A\n| X |\n|---|\n| 1 |\n### B\n| Y |\n|---|\n| 2 |\n| 3 |\n")
        a = root.subsections[0]
        assert len(a.tables) == 1
        assert sum(t.row_count for t in a.all_tables()) == 3


class TestLineSplitting:
    """Tests for newline-only line splitting."""

    def test_only_newline_breaks_lines(self):
        """Test that Unicode separators, form feed and NEL stay in their line."""
        assert split_lines("a\u2028b\x0cc\x85d\ne\n") == ["a\u2028b\x0cc\x85d", "e"]

    def test_crlf(self):
        """Test that a carriage return before the newline is dropped."""
        assert split_lines("a\r\nb\r\n") == ["a", "b"]
        assert split_lines("a\r\nb", keepends=True) == ["a\r\n", "b"]

    def test_trailing_newline(self):
        """Test that a final newline does not add a line."""
        assert split_lines("") == []
        assert split_lines("a\n") == ["a"]
        assert split_lines("a\n\n") == ["a", ""]

    def test_keepends_round_trip(self):
        """Test that joined lines reproduce the text."""
        text = "a\u2028b\n\x0c\nlast"
        assert "".join(split_lines(text, keepends=True)) == text

    def test_document_line_count(self):
        """Test that separators in prose do not inflate the line count."""
        document = build_document("---\nname: x\n---\nuse \u2028 and \x0c and \x85 here\n")
        assert document.line_count == 4

    def test_section_line_numbers(self):
        """Test that separators do not shift heading line numbers."""
        root = index_sections("intro \u2028 text\x0c\n## A\nbody \x85\n## B\n")
        a, b = root.subsections
        assert (a.start_line, a.end_line) == (2, 3)
        assert b.start_line == 4
