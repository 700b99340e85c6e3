"""
Multi-document runs.

Documents are independent: each is evaluated by a worker that returns
``(index, report)``; reports are put back in input order before rendering.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..document import Document, load_document
from ..exceptions import DuplicateRuleError
from ..models import CheckResult, CheckStatus, RuleSet, duplicate_ids
from .engine import RuleEngine, summarize


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentReport:
    """All results for one document."""

    path: str
    results: Tuple[CheckResult, ...]
    frontmatter_error: Optional[str] = None
    encoding_error: Optional[str] = None

    @property
    def total_pass(self) -> int:
        return summarize(self.results)[0]

    @property
    def total_fail(self) -> int:
        return summarize(self.results)[1]

    @property
    def total_error(self) -> int:
        return summarize(self.results)[2]

    @property
    def clean(self) -> bool:
        return all(r.status == CheckStatus.PASS for r in self.results)

    def summary_dict(self) -> Dict[str, int]:
        return {
            "total_pass": self.total_pass,
            "total_fail": self.total_fail,
            "total_error": self.total_error,
        }


@dataclass(frozen=True)
class RunReport:
    """Reports for every document in a run, in input order."""

    documents: Tuple[DocumentReport, ...] = field(default_factory=tuple)
    # Wall-clock evaluation time; not part of report equality.
    duration_ms: int = field(default=0, compare=False)

    @property
    def results(self) -> List[CheckResult]:
        return [r for doc in self.documents for r in doc.results]

    def summary_dict(self) -> Dict[str, int]:
        total_pass, total_fail, total_error = summarize(self.results)
        return {
            "documents": len(self.documents),
            "total_pass": total_pass,
            "total_fail": total_fail,
            "total_error": total_error,
        }


def check_document(document: Document, rule_set: RuleSet, engine: Optional[RuleEngine] = None) -> DocumentReport:
    """Evaluate a rule set against one loaded document."""
    engine = engine or RuleEngine(rule_set.settings)
    results = engine.evaluate(document, rule_set.rules)
    frontmatter_error = document.frontmatter.error
    encoding_error = document.encoding_audit.error
    return DocumentReport(
        path=document.display_name,
        results=tuple(results),
        frontmatter_error=str(frontmatter_error) if frontmatter_error else None,
        encoding_error=str(encoding_error) if encoding_error else None,
    )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _work(index: int, document: Document, rule_set: RuleSet, engine: RuleEngine) -> Tuple[int, DocumentReport]:
    return index, check_document(document, rule_set, engine)


def check_paths(
    paths: Sequence[Path],
    rule_set: RuleSet,
    workers: Optional[int] = None,
) -> RunReport:
    """
    Load and check every path.

    All documents are loaded up front, so a missing input aborts the run before
    any rule is evaluated.

    Args:
        paths: Markdown files, in the order reports should appear.
        rule_set: Rules and settings.
        workers: Worker threads; defaults to ``rule_set.settings.workers``.

    Raises:
        DocumentNotFoundError: If any path cannot be read.
        DuplicateRuleError: If the rule set has duplicate ids.
    """
    duplicates = duplicate_ids(list(rule_set.rules))
    if duplicates:
        raise DuplicateRuleError(duplicates)

    settings = rule_set.settings
    documents = [
        load_document(Path(p), denylist=settings.denylist, encoding=settings.encoding)
        for p in paths
    ]
    return check_documents(documents, rule_set, workers)


def check_documents(
    documents: Sequence[Document],
    rule_set: RuleSet,
    workers: Optional[int] = None,
) -> RunReport:
    """Evaluate already-loaded documents, in parallel when ``workers`` > 1."""
    engine = RuleEngine(rule_set.settings)
    workers = workers or rule_set.settings.workers
    started = time.perf_counter()

    if workers <= 1 or len(documents) <= 1:
        reports = [check_document(doc, rule_set, engine) for doc in documents]
        return RunReport(documents=tuple(reports), duration_ms=_elapsed_ms(started))

    logger.debug("Checking %d documents with %d workers", len(documents), workers)
    indexed: List[Tuple[int, DocumentReport]] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_work, index, doc, rule_set, engine)
            for index, doc in enumerate(documents)
        ]
        for future in as_completed(futures):
            indexed.append(future.result())

    indexed.sort(key=lambda pair: pair[0])
    return RunReport(
        documents=tuple(report for _, report in indexed),
        duration_ms=_elapsed_ms(started),
    )

