"""
Rule Engine.

Evaluates declarative rules against an indexed Document, producing one
CheckResult per rule in input order.

Status semantics:
- pass: the document meets the rule
- fail: the rule evaluated cleanly and the document does not meet it
- error: the rule depends on something that is absent or ambiguous (a
  section, a file, parsed frontmatter), so the rule configuration may be wrong
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config import CheckerSettings
from ..document import Document, Section, scan_text, split_lines
from ..exceptions import DuplicateRuleError, RuleConfigurationError
from ..models import (
    CheckResult,
    CheckStatus,
    CodepointsAbsent,
    CrossReferencePresent,
    FileExistsAndSized,
    LineCountRange,
    RegexAbsent,
    RegexPresent,
    SectionCountAtLeast,
    SectionPresent,
    SubsectionCountUnderHeading,
    SubstringAbsent,
    SubstringPresent,
    TableRowCountAtLeast,
    YamlFieldEquals,
    YamlFieldPresent,
    YamlFieldStartsWith,
    duplicate_ids,
)
from .crossref import CrossReferenceChecker


logger = logging.getLogger(__name__)

# Locations listed in a message before truncating.
MAX_LISTED = 5

_MISSING = object()


def _range_text(minimum: int, maximum: Optional[int]) -> str:
    if maximum is None:
        return f">= {minimum}"
    return f"{minimum}-{maximum}"


def _in_range(value: int, minimum: int, maximum: Optional[int]) -> bool:
    return minimum <= value and (maximum is None or value <= maximum)


def _listed(items: Sequence[str]) -> str:
    shown = ", ".join(items[:MAX_LISTED])
    if len(items) > MAX_LISTED:
        shown += f", ... ({len(items) - MAX_LISTED} more)"
    return shown


def lookup_field(fields: Dict[str, Any], path: str) -> Any:
    """Follow a dotted path through nested mappings; ``_MISSING`` if absent."""
    current: Any = fields
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


def _values_equal(actual: Any, expected: Any) -> bool:
    # True == 1 in Python; a boolean only equals a boolean.
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _match_locations(text: str, pattern: str) -> List[str]:
    locations = []
    for match in re.finditer(pattern, text, re.MULTILINE):
        line = text.count("\n", 0, match.start()) + 1
        column = match.start() - (text.rfind("\n", 0, match.start()) + 1) + 1
        locations.append(f"{line}:{column}")
    return locations


class RuleEngine:
    """
    Interprets rules against documents.

    The engine holds no per-document state; one instance may evaluate many
    documents, including from several threads.
    """

    def __init__(
        self,
        settings: Optional[CheckerSettings] = None,
        base_dir: Optional[Path] = None,
    ):
        """
        Initialize the engine.

        Args:
            settings: Run settings (denylist, encoding for referenced files).
            base_dir: Directory for file-based rules; defaults to each
                document's own directory.
        """
        self.settings = settings or CheckerSettings()
        self.base_dir = base_dir
        self.crossref = CrossReferenceChecker(base_dir)
        self._evaluators: Dict[str, Callable[[Document, Any], CheckResult]] = {
            "LineCountRange": self._line_count_range,
            "SectionCountAtLeast": self._section_count,
            "SubsectionCountUnderHeading": self._subsection_count,
            "TableRowCountAtLeast": self._table_row_count,
            "SubstringPresent": self._substring_present,
            "SubstringAbsent": self._substring_absent,
            "RegexPresent": self._regex_present,
            "RegexAbsent": self._regex_absent,
            "SectionPresent": self._section_present,
            "YamlFieldPresent": self._yaml_field_present,
            "YamlFieldEquals": self._yaml_field_equals,
            "YamlFieldStartsWith": self._yaml_field_starts_with,
            "FileExistsAndSized": self._file_exists_and_sized,
            "CrossReferencePresent": self._cross_reference,
            "CodepointsAbsent": self._codepoints_absent,
        }

    def evaluate(self, document: Document, rules: Sequence[Any]) -> List[CheckResult]:
        """
        Evaluate ``rules`` against ``document``.

        Args:
            document: Indexed document.
            rules: Rule models, evaluated in order.

        Returns:
            One CheckResult per rule, in input order.

        Raises:
            DuplicateRuleError: If two rules share an id.
        """
        duplicates = duplicate_ids(list(rules))
        if duplicates:
            raise DuplicateRuleError(duplicates)
        return [self.evaluate_rule(document, rule) for rule in rules]

    def evaluate_rule(self, document: Document, rule: Any) -> CheckResult:
        """Evaluate a single rule; configuration problems become ``error`` results."""
        evaluator = self._evaluators.get(rule.kind)
        if evaluator is None:
            result = CheckResult(
                rule_id=rule.id,
                kind=rule.kind,
                status=CheckStatus.ERROR,
                observed=None,
                message=f"Unsupported rule kind: {rule.kind}",
            )
        else:
            try:
                result = evaluator(document, rule)
            except RuleConfigurationError as e:
                result = CheckResult(
                    rule_id=rule.id,
                    kind=rule.kind,
                    status=CheckStatus.ERROR,
                    observed=None,
                    message=str(e),
                )
        logger.debug("%s %s: %s", document.display_name, rule.id, result.status.value)
        return result

    @staticmethod
    def _result(rule: Any, passed: bool, observed: Any, message: str) -> CheckResult:
        return CheckResult(
            rule_id=rule.id,
            kind=rule.kind,
            status=CheckStatus.PASS if passed else CheckStatus.FAIL,
            observed=observed,
            message=message,
        )

    # -- structure -----------------------------------------------------------

    def _line_count_range(self, document: Document, rule: LineCountRange) -> CheckResult:
        observed = document.line_count
        return self._result(
            rule,
            _in_range(observed, rule.min, rule.max),
            observed,
            f"{observed} lines (expected {_range_text(rule.min, rule.max)})",
        )

    def _section_count(self, document: Document, rule: SectionCountAtLeast) -> CheckResult:
        excluded = set(rule.exclude)
        counted = [
            s for s in document.iter_sections()
            if s.level == rule.level
            and s.title not in excluded
            and (rule.pattern is None or re.search(rule.pattern, s.title))
        ]
        observed = len(counted)
        return self._result(
            rule,
            observed >= rule.min,
            observed,
            f"{observed} level-{rule.level} sections (expected >= {rule.min})",
        )

    @staticmethod
    def locate_section(document: Document, title: str, level: Optional[int] = None) -> Section:
        """
        Find the one section titled ``title``.

        Raises:
            RuleConfigurationError: If no section or more than one matches.
        """
        matches = document.find_sections(title, level)
        where = f" at level {level}" if level is not None else ""
        if not matches:
            raise RuleConfigurationError(f"No section titled '{title}'{where}")
        if len(matches) > 1:
            lines = ", ".join(str(s.start_line) for s in matches)
            raise RuleConfigurationError(
                f"Ambiguous section title '{title}'{where}: {len(matches)} matches (lines {lines})"
            )
        return matches[0]

    def _subsection_count(self, document: Document, rule: SubsectionCountUnderHeading) -> CheckResult:
        section = self.locate_section(document, rule.parent, rule.level)
        observed = len(section.children_at_next_level())
        return self._result(
            rule,
            observed >= rule.min,
            observed,
            f"'{rule.parent}' has {observed} subsections (expected >= {rule.min})",
        )

    def _table_row_count(self, document: Document, rule: TableRowCountAtLeast) -> CheckResult:
        section = self.locate_section(document, rule.parent, rule.level)
        tables = list(section.all_tables())
        observed = sum(t.row_count for t in tables)
        return self._result(
            rule,
            observed >= rule.min,
            observed,
            f"'{rule.parent}' has {observed} table rows in {len(tables)} table(s) (expected >= {rule.min})",
        )

    def _section_present(self, document: Document, rule: SectionPresent) -> CheckResult:
        matches = document.find_sections(rule.title, rule.level)
        observed = len(matches)
        if observed:
            message = f"section '{rule.title}' found at line {matches[0].start_line}"
        else:
            message = f"section '{rule.title}' not found"
        return self._result(rule, observed > 0, observed, message)

    # -- text ----------------------------------------------------------------

    def _substring_present(self, document: Document, rule: SubstringPresent) -> CheckResult:
        observed = document.text.count(rule.text)
        return self._result(rule, observed >= 1, observed, f"{observed} occurrence(s) of {rule.text!r}")

    def _substring_absent(self, document: Document, rule: SubstringAbsent) -> CheckResult:
        observed = document.text.count(rule.text)
        return self._result(rule, observed == 0, observed, f"{observed} occurrence(s) of {rule.text!r}")

    def _regex_present(self, document: Document, rule: RegexPresent) -> CheckResult:
        locations = _match_locations(document.text, rule.pattern)
        message = f"{len(locations)} match(es) for /{rule.pattern}/"
        return self._result(rule, bool(locations), len(locations), message)

    def _regex_absent(self, document: Document, rule: RegexAbsent) -> CheckResult:
        locations = _match_locations(document.text, rule.pattern)
        message = f"{len(locations)} match(es) for /{rule.pattern}/"
        if locations:
            message += f" at {_listed(locations)}"
        return self._result(rule, not locations, len(locations), message)

    def _codepoints_absent(self, document: Document, rule: CodepointsAbsent) -> CheckResult:
        audit = document.encoding_audit
        if audit.error is not None:
            raise RuleConfigurationError(f"Cannot audit codepoints: {audit.error}")
        if rule.codepoints is None:
            occurrences = list(audit.occurrences)
        else:
            occurrences = scan_text(document.text, rule.codepoints)

        observed = [str(o) for o in occurrences]
        if not occurrences:
            return self._result(rule, True, observed, "no denylisted codepoints")
        described = [f"{o} {o.name}" for o in occurrences]
        return self._result(
            rule, False, observed,
            f"{len(occurrences)} denylisted codepoint(s): {_listed(described)}",
        )

    # -- frontmatter ---------------------------------------------------------

    @staticmethod
    def _frontmatter_fields(document: Document) -> Dict[str, Any]:
        frontmatter = document.frontmatter
        if frontmatter.error is not None:
            raise RuleConfigurationError(f"Frontmatter unavailable: {frontmatter.error}")
        return frontmatter.fields or {}

    def _yaml_field_present(self, document: Document, rule: YamlFieldPresent) -> CheckResult:
        value = lookup_field(self._frontmatter_fields(document), rule.field)
        present = value is not _MISSING and value is not None
        message = f"field '{rule.field}' {'present' if present else 'missing'}"
        return self._result(rule, present, present, message)

    def _yaml_field_equals(self, document: Document, rule: YamlFieldEquals) -> CheckResult:
        value = lookup_field(self._frontmatter_fields(document), rule.field)
        if value is _MISSING:
            return self._result(rule, False, None, f"field '{rule.field}' missing")
        return self._result(
            rule,
            _values_equal(value, rule.expected),
            value,
            f"field '{rule.field}' is {value!r} (expected {rule.expected!r})",
        )

    def _yaml_field_starts_with(self, document: Document, rule: YamlFieldStartsWith) -> CheckResult:
        value = lookup_field(self._frontmatter_fields(document), rule.field)
        if value is _MISSING:
            return self._result(rule, False, None, f"field '{rule.field}' missing")
        if not isinstance(value, str):
            return self._result(
                rule, False, value,
                f"field '{rule.field}' is {type(value).__name__}, not a string",
            )
        return self._result(
            rule,
            value.startswith(rule.expected),
            value,
            f"field '{rule.field}' is {value!r} (expected prefix {rule.expected!r})",
        )

    # -- filesystem ----------------------------------------------------------

    def _resolve_dir(self, document: Document) -> Path:
        base_dir = self.base_dir or document.resolve_dir()
        if base_dir is None:
            raise RuleConfigurationError(
                "Cannot resolve relative paths: document has no path and no base directory was given"
            )
        return base_dir

    def _file_exists_and_sized(self, document: Document, rule: FileExistsAndSized) -> CheckResult:
        path = self._resolve_dir(document) / rule.path
        if not path.is_file():
            raise RuleConfigurationError(f"File not found: {path}")
        try:
            text = path.read_bytes().decode(self.settings.encoding, errors="replace")
        except OSError as e:
            raise RuleConfigurationError(f"Cannot read {path}: {e}") from e

        observed = len(split_lines(text))
        return self._result(
            rule,
            _in_range(observed, rule.min, rule.max),
            observed,
            f"{rule.path}: {observed} lines (expected {_range_text(rule.min, rule.max)})",
        )

    def _cross_reference(self, document: Document, rule: CrossReferencePresent) -> CheckResult:
        checks = self.crossref.check(document, rule.paths)
        failed = [c for c in checks if not c.passed]
        observed = [c.reference for c in failed]
        if not failed:
            return self._result(rule, True, observed, f"all {len(checks)} reference(s) present")
        return self._result(rule, False, observed, "; ".join(c.describe() for c in failed))


def evaluate(document: Document, rules: Sequence[Any], settings: Optional[CheckerSettings] = None) -> List[CheckResult]:
    """Convenience function: evaluate ``rules`` with a fresh engine."""
    return RuleEngine(settings).evaluate(document, rules)


def summarize(results: Sequence[CheckResult]) -> Tuple[int, int, int]:
    """Return ``(total_pass, total_fail, total_error)``."""
    counts = {status: 0 for status in CheckStatus}
    for result in results:
        counts[result.status] += 1
    return counts[CheckStatus.PASS], counts[CheckStatus.FAIL], counts[CheckStatus.ERROR]
