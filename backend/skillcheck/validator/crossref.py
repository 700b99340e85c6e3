"""
Cross-File Reference Checker.

Confirms that expected relative paths appear literally in a document body and
exist on disk next to the document. Link syntax is not parsed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..document import Document
from ..exceptions import RuleConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceCheck:
    """Outcome for one expected reference."""

    reference: str
    in_text: bool
    on_disk: bool
    resolved: Path

    @property
    def passed(self) -> bool:
        return self.in_text and self.on_disk

    def describe(self) -> str:
        """Say which half failed, if any."""
        if self.passed:
            return f"'{self.reference}' referenced and present at {self.resolved}"
        if not self.in_text and not self.on_disk:
            return f"'{self.reference}' not mentioned in document and missing on disk ({self.resolved})"
        if not self.in_text:
            return f"'{self.reference}' exists on disk but is not mentioned in document"
        return f"'{self.reference}' is mentioned in document but missing on disk ({self.resolved})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "in_text": self.in_text,
            "on_disk": self.on_disk,
            "resolved": str(self.resolved),
        }


def resolve_reference(reference: str, base_dir: Path, document_path: Optional[Path] = None) -> Path:
    """
    Resolve a relative reference against ``base_dir``, dropping any ``#fragment``.

    A fragment-only reference (``#usage``) points at the document itself.

    Raises:
        RuleConfigurationError: If the reference is fragment-only and the
            document has no path.
    """
    target = reference.split("#", 1)[0]
    if not target:
        if document_path is None:
            raise RuleConfigurationError(f"cannot resolve '{reference}': document has no path")
        return Path(document_path).resolve()
    return (base_dir / target).resolve()


class CrossReferenceChecker:
    """
    Checks literal path references from a document to sibling files.

    Both halves must hold for a reference to pass:
    - the reference text occurs verbatim in the document body
    - a file exists at the resolved path
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Args:
            base_dir: Directory to resolve against; defaults to the document's
                own directory.
        """
        self.base_dir = base_dir

    def check(self, document: Document, references: Iterable[str]) -> List[ReferenceCheck]:
        """
        Check each expected reference, in input order.

        Raises:
            RuleConfigurationError: If no directory is known to resolve
                references against.
        """
        base_dir = self.base_dir or document.resolve_dir()
        if base_dir is None:
            raise RuleConfigurationError(
                "cannot resolve references: document has no path and no base directory was given"
            )

        checks = []
        for reference in references:
            resolved = resolve_reference(reference, base_dir, document.path)
            check = ReferenceCheck(
                reference=reference,
                in_text=reference in document.body,
                on_disk=resolved.is_file(),
                resolved=resolved,
            )
            logger.debug("%s: %s", document.display_name, check.describe())
            checks.append(check)
        return checks


def check_references(document: Document, references: Iterable[str]) -> List[ReferenceCheck]:
    """Convenience wrapper resolving against the document's directory."""
    return CrossReferenceChecker().check(document, references)
