"""
Skill-Check: structural conformance checking for markdown skill files.

Parses a markdown document into frontmatter, sections and tables, then
evaluates declarative rules (line counts, section and table counts, required
and forbidden text, frontmatter fields, cross-file references) against it.
"""

__version__ = "1.0.0"

from .models import (
    CheckResult,
    CheckStatus,
    Rule,
    RuleSet,
    RULE_KINDS,
)
from .config import CheckerSettings
from .document import Document, Section, Table, build_document, load_document
from .ruleset import load_rule_set, rule_set_from_yaml
from .validator import RuleEngine, check_paths
from .report import ConformanceReport, ReportFormat, exit_code, render

__all__ = [
    "__version__",
    "CheckResult",
    "CheckStatus",
    "Rule",
    "RuleSet",
    "RULE_KINDS",
    "CheckerSettings",
    "Document",
    "Section",
    "Table",
    "build_document",
    "load_document",
    "load_rule_set",
    "rule_set_from_yaml",
    "RuleEngine",
    "check_paths",
    "ConformanceReport",
    "ReportFormat",
    "exit_code",
    "render",
]
