"""
Tests for multi-document runs.
"""

from dataclasses import replace

import pytest

from backend.skillcheck.document import build_document
from backend.skillcheck.exceptions import DocumentNotFoundError
from backend.skillcheck.models import CheckStatus, RuleSet
from backend.skillcheck.validator import check_document, check_documents, check_paths


RULES = RuleSet.model_validate({
    "rules": [
        {"id": "NAME", "kind": "YamlFieldPresent", "field": "name"},
        {"id": "LINES", "kind": "LineCountRange", "min": 5},
    ]
})


def write_skill(directory, name, lines):
    path = directory / name
    body = "\n".join(f"line {i}" for i in range(lines))
    path.write_text(f"---\nname: {name}\n---\n{body}\n", encoding="utf-8")
    return path


class TestCheckPaths:
    """Tests for loading and checking files."""

    def test_order_preserved_with_workers(self, tmp_path):
        """Test that parallel runs report in input order."""
        paths = [write_skill(tmp_path, f"doc{i}.md", i) for i in range(8)]
        run = check_paths(paths, RULES, workers=3)
        assert [doc.path for doc in run.documents] == [str(p) for p in paths]

    def test_parallel_matches_sequential(self, tmp_path):
        """Test that worker count does not change results."""
        paths = [write_skill(tmp_path, f"doc{i}.md", i) for i in range(6)]
        assert check_paths(paths, RULES, workers=4) == check_paths(paths, RULES, workers=1)

    def test_statuses(self, tmp_path):
        """Test per-document results."""
        short = write_skill(tmp_path, "short.md", 0)
        long = write_skill(tmp_path, "long.md", 10)
        run = check_paths([short, long], RULES)

        assert [r.status for r in run.documents[0].results] == [CheckStatus.PASS, CheckStatus.FAIL]
        assert run.documents[1].clean
        assert run.summary_dict() == {"documents": 2, "total_pass": 3, "total_fail": 1, "total_error": 0}

    def test_duration_not_compared(self, tmp_path):
        """Test that run timing is recorded but does not affect equality."""
        paths = [write_skill(tmp_path, "doc.md", 3)]
        run = check_paths(paths, RULES)
        assert run.duration_ms >= 0
        assert run == replace(run, duration_ms=run.duration_ms + 1000)

    def test_missing_path(self, tmp_path):
        """Test that a missing input aborts the run."""
        present = write_skill(tmp_path, "doc.md", 3)
        with pytest.raises(DocumentNotFoundError):
            check_paths([present, tmp_path / "absent.md"], RULES)


class TestCheckDocument:
    """Tests for in-memory documents."""

    def test_frontmatter_error_recorded(self):
        """Test that parse errors surface on the report."""
        report = check_document(build_document("# no frontmatter\n"), RULES)
        assert report.path == "<memory>"
        assert report.frontmatter_error.startswith("missing frontmatter")
        assert report.total_error == 1
        assert report.total_fail == 1
        assert report.encoding_error is None

    def test_encoding_error_recorded(self):
        """Test that decode errors surface on the report."""
        report = check_document(build_document(b"---\nname: x\n---\n\xff\n"), RULES)
        assert report.encoding_error is not None

    def test_check_documents_empty(self):
        """Test a run with no documents."""
        run = check_documents([], RULES)
        assert run.documents == ()
        assert run.results == []
