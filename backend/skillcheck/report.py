"""
Conformance Report Generator.

Renders CheckResults for people (grouped by status, errors first) and for
machines (stable JSON, results sorted by rule id), and derives the process
exit status.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .models import CheckResult, CheckStatus
from .validator.engine import summarize
from .validator.runner import DocumentReport, RunReport


REPORT_VERSION = "conformance-report/1.0"

EXIT_OK = 0  # every rule passed
EXIT_NONCONFORMING = 1  # at least one fail or error
EXIT_INPUT_ERROR = 2  # missing input, unreadable rule set

STATUS_LABELS = {
    CheckStatus.ERROR: "ERROR",
    CheckStatus.FAIL: "FAIL",
    CheckStatus.PASS: "PASS",
}

# Errors first: a broken rule configuration matters more than a failing document.
STATUS_ORDER = (CheckStatus.ERROR, CheckStatus.FAIL, CheckStatus.PASS)


class ReportFormat(str, Enum):
    """Output formats."""
    HUMAN = "human"
    MACHINE = "machine"
    MARKDOWN = "markdown"


def exit_code(results: Sequence[CheckResult]) -> int:
    """0 iff every result passed, else 1."""
    return EXIT_OK if all(r.status == CheckStatus.PASS for r in results) else EXIT_NONCONFORMING


def natural_key(rule_id: str) -> tuple:
    """Sort key that orders ``AC1.2`` before ``AC1.10``."""
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in re.split(r"(\d+)", rule_id)
        if part
    )


def sorted_results(results: Sequence[CheckResult]) -> List[CheckResult]:
    return sorted(results, key=lambda r: (natural_key(r.rule_id), r.rule_id))


def _summary_dict(results: Sequence[CheckResult]) -> Dict[str, int]:
    total_pass, total_fail, total_error = summarize(results)
    return {"total_pass": total_pass, "total_fail": total_fail, "total_error": total_error}


def _summary_line(results: Sequence[CheckResult]) -> str:
    total_pass, total_fail, total_error = summarize(results)
    status = "PASSED" if exit_code(results) == EXIT_OK else "FAILED"
    return f"{status}: {total_pass} passed, {total_fail} failed, {total_error} error(s)"


def _human_lines(results: Sequence[CheckResult], indent: str = "") -> List[str]:
    lines = []
    for status in STATUS_ORDER:
        group = [r for r in results if r.status == status]
        if not group:
            continue
        lines.append(f"{indent}{STATUS_LABELS[status]} ({len(group)})")
        for result in group:
            lines.append(f"{indent}  [{STATUS_LABELS[status]}] {result.rule_id}: {result.message}")
    lines.append(f"{indent}{_summary_line(results)}")
    return lines


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def render(results: Sequence[CheckResult], format: ReportFormat = ReportFormat.HUMAN) -> str:
    """
    Render results for a single document.

    Args:
        results: CheckResults in rule input order.
        format: Output format.

    Returns:
        Rendered report text.
    """
    format = ReportFormat(format)
    if format == ReportFormat.MACHINE:
        return _dumps({
            "report_version": REPORT_VERSION,
            "summary": _summary_dict(results),
            "exit_code": exit_code(results),
            "results": [r.to_dict() for r in sorted_results(results)],
        })
    if format == ReportFormat.MARKDOWN:
        return "\n".join(_markdown_table(results))
    return "\n".join(_human_lines(results))


def _markdown_cell(value: Any) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def _markdown_table(results: Sequence[CheckResult]) -> List[str]:
    lines = [
        "| Rule | Status | Observed | Message |",
        "|------|--------|----------|---------|",
    ]
    for status in STATUS_ORDER:
        for r in results:
            if r.status != status:
                continue
            lines.append(
                f"| {_markdown_cell(r.rule_id)} | {STATUS_LABELS[r.status]} "
                f"| {_markdown_cell(r.observed)} | {_markdown_cell(r.message)} |"
            )
    return lines


@dataclass
class ConformanceReport:
    """Report for a whole run, one entry per document in input order."""

    run: RunReport

    @property
    def results(self) -> List[CheckResult]:
        return self.run.results

    @property
    def exit_code(self) -> int:
        return exit_code(self.results)

    def _document_dict(self, doc: DocumentReport) -> Dict[str, Any]:
        return {
            "path": doc.path,
            "summary": doc.summary_dict(),
            "frontmatter_error": doc.frontmatter_error,
            "encoding_error": doc.encoding_error,
            "results": [r.to_dict() for r in sorted_results(doc.results)],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "report_version": REPORT_VERSION,
            "summary": self.run.summary_dict(),
            "exit_code": self.exit_code,
            "documents": [self._document_dict(doc) for doc in self.run.documents],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string with sorted keys."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True, ensure_ascii=False, default=str)

    def to_human(self) -> str:
        """Plain-text report, errors grouped above failures above passes."""
        lines: List[str] = []
        for doc in self.run.documents:
            lines.append(doc.path)
            if doc.frontmatter_error:
                lines.append(f"  note: {doc.frontmatter_error}")
            if doc.encoding_error:
                lines.append(f"  note: {doc.encoding_error}")
            lines.extend(_human_lines(doc.results, indent="  "))
            lines.append("")

        if len(self.run.documents) > 1:
            summary = self.run.summary_dict()
            lines.append(
                f"Total: {summary['documents']} documents, {summary['total_pass']} passed, "
                f"{summary['total_fail']} failed, {summary['total_error']} error(s)"
            )
        return "\n".join(lines).rstrip("\n")

    def to_markdown(self) -> str:
        """Markdown report with a results table per document."""
        summary = self.run.summary_dict()
        status = "PASSED" if self.exit_code == EXIT_OK else "FAILED"
        lines = [
            "# Conformance Report",
            "",
            f"**Status:** {status}",
            f"**Documents:** {summary['documents']}",
            f"**Passed:** {summary['total_pass']}",
            f"**Failed:** {summary['total_fail']}",
            f"**Errors:** {summary['total_error']}",
            "",
        ]
        for doc in self.run.documents:
            lines.append(f"## {doc.path}")
            lines.append("")
            if doc.frontmatter_error:
                lines.append(f"- **Frontmatter:** {doc.frontmatter_error}")
            if doc.encoding_error:
                lines.append(f"- **Encoding:** {doc.encoding_error}")
            if doc.frontmatter_error or doc.encoding_error:
                lines.append("")
            lines.extend(_markdown_table(doc.results))
            lines.append("")
        return "\n".join(lines)

    def render(self, format: ReportFormat = ReportFormat.HUMAN) -> str:
        format = ReportFormat(format)
        if format == ReportFormat.MACHINE:
            return self.to_json()
        if format == ReportFormat.MARKDOWN:
            return self.to_markdown()
        return self.to_human()

    def save(self, output_path: Path, format: ReportFormat = ReportFormat.HUMAN) -> None:
        """
        Save report to file.

        Args:
            output_path: Path to save the report.
            format: Output format.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(format) + "\n", encoding="utf-8")

