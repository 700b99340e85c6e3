"""
Tests for the Cross-File Reference Checker.
"""

import pytest

from backend.skillcheck.document import build_document
from backend.skillcheck.exceptions import RuleConfigurationError
from backend.skillcheck.validator import CrossReferenceChecker, check_references
from backend.skillcheck.validator.crossref import resolve_reference


@pytest.fixture
def skill_dir(tmp_path):
    (tmp_path / "memory-patterns.md").write_text("# Patterns\n", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
    return tmp_path


def skill_document(skill_dir, text):
    return build_document(text, path=skill_dir / "SKILL.md")


class TestCrossReferenceChecker:
    """Tests for reference checks."""

    def test_reference_present(self, skill_dir):
        """Test a reference mentioned in text and present on disk."""
        document = skill_document(skill_dir, "See [patterns](./memory-patterns.md).\n")
        [check] = check_references(document, ["./memory-patterns.md"])
        assert check.passed
        assert check.resolved == (skill_dir / "memory-patterns.md").resolve()

    def test_each_half_reported(self, skill_dir):
        """Test that text and disk are checked independently."""
        document = skill_document(skill_dir, "Read ./missing.md first.\n")
        missing, unmentioned = check_references(document, ["./missing.md", "docs/guide.md"])

        assert missing.in_text and not missing.on_disk
        assert "missing on disk" in missing.describe()
        assert unmentioned.on_disk and not unmentioned.in_text
        assert "not mentioned" in unmentioned.describe()

    def test_neither_half(self, skill_dir):
        """Test a reference absent from both."""
        document = skill_document(skill_dir, "Nothing here.\n")
        [check] = check_references(document, ["./ghost.md"])
        assert not check.passed
        assert "not mentioned in document and missing on disk" in check.describe()

    def test_fragment_ignored_on_disk(self, skill_dir):
        """Test that an anchor does not affect resolution."""
        document = skill_document(skill_dir, "See docs/guide.md#install.\n")
        [check] = check_references(document, ["docs/guide.md#install"])
        assert check.passed

    def test_directory_is_not_a_file(self, skill_dir):
        """Test that a reference resolving to a directory is missing on disk."""
        document = skill_document(skill_dir, "See docs/ for more.\n")
        [check] = check_references(document, ["docs/"])
        assert check.in_text
        assert not check.on_disk

    def test_fragment_only_reference(self, skill_dir):
        """Test that a bare fragment resolves to the document itself."""
        doc_path = skill_dir / "SKILL.md"
        doc_path.write_text("# X\nSee #usage.\n", encoding="utf-8")
        document = build_document(doc_path.read_bytes(), path=doc_path)
        [check] = check_references(document, ["#usage"])
        assert check.resolved == doc_path.resolve()
        assert check.passed

    def test_fragment_only_without_document_path(self, skill_dir):
        """Test that a fragment-only reference needs a document path."""
        document = build_document("#usage\n")
        with pytest.raises(RuleConfigurationError):
            CrossReferenceChecker(base_dir=skill_dir).check(document, ["#usage"])

    def test_frontmatter_mention_does_not_count(self, skill_dir):
        """Test that only the body is searched."""
        text = "---\nname: x\nsee: ./memory-patterns.md\n---\n# X\n"
        [check] = check_references(skill_document(skill_dir, text), ["./memory-patterns.md"])
        assert not check.in_text

    def test_results_in_input_order(self, skill_dir):
        """Test ordering."""
        document = skill_document(skill_dir, "./memory-patterns.md docs/guide.md\n")
        refs = ["docs/guide.md", "./memory-patterns.md"]
        assert [c.reference for c in check_references(document, refs)] == refs

    def test_explicit_base_dir(self, skill_dir):
        """Test resolving against a given directory for an in-memory document."""
        document = build_document("./memory-patterns.md\n")
        [check] = CrossReferenceChecker(base_dir=skill_dir).check(document, ["./memory-patterns.md"])
        assert check.passed

    def test_no_directory(self):
        """Test that an in-memory document without a base directory is rejected."""
        document = build_document("./memory-patterns.md\n")
        with pytest.raises(RuleConfigurationError):
            check_references(document, ["./memory-patterns.md"])

    def test_to_dict(self, skill_dir):
        """Test serialization."""
        document = skill_document(skill_dir, "./memory-patterns.md\n")
        [check] = check_references(document, ["./memory-patterns.md"])
        data = check.to_dict()
        assert data["in_text"] is True
        assert data["on_disk"] is True
        assert data["resolved"].endswith("memory-patterns.md")


def test_resolve_reference(tmp_path):
    """Test fragment stripping."""
    assert resolve_reference("a.md#top", tmp_path) == (tmp_path / "a.md").resolve()
