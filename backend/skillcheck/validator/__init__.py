"""
Skill-Check Rule Evaluation.

- Rule Engine: one CheckResult per rule, in input order
- Cross-File Reference Checker: literal mention plus on-disk existence
- Runner: multi-document runs with order-preserving parallel workers
"""

from .crossref import CrossReferenceChecker, ReferenceCheck, check_references
from .engine import RuleEngine, evaluate, summarize
from .runner import DocumentReport, RunReport, check_document, check_documents, check_paths

__all__ = [
    # Cross-file references
    "CrossReferenceChecker",
    "ReferenceCheck",
    "check_references",
    # Engine
    "RuleEngine",
    "evaluate",
    "summarize",
    # Runner
    "DocumentReport",
    "RunReport",
    "check_document",
    "check_documents",
    "check_paths",
]
