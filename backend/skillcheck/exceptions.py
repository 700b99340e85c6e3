"""
Error taxonomy for the conformance checker.

- InputError: fatal, aborts the run (exit code 2).
- ParseError: per-document frontmatter failure, stored as a value.
- RuleConfigurationError: per-rule, surfaces as an ``error`` CheckResult.
- InvalidEncodingError: per-document, recorded on the encoding audit.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SkillCheckError(Exception):
    """Base class for all checker errors."""


class InputError(SkillCheckError):
    """A run-level input could not be used (missing file, bad rule set)."""


class DocumentNotFoundError(InputError):
    """A target document does not exist or cannot be read."""


class RuleSetError(InputError):
    """The rule-set file is missing, unparseable or invalid."""


class DuplicateRuleError(RuleSetError):
    """Two rules in one run share an id."""

    def __init__(self, rule_ids: list[str]):
        self.rule_ids = rule_ids
        super().__init__(f"Duplicate rule id(s): {', '.join(rule_ids)}")


class ParseErrorKind(str, Enum):
    """Frontmatter failure classes."""
    MISSING = "missing"
    UNTERMINATED = "unterminated"
    MALFORMED = "malformed"


class ParseError(SkillCheckError):
    """Frontmatter could not be located or parsed."""

    def __init__(self, kind: ParseErrorKind, message: str, line: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        loc = f" (line {self.line})" if self.line is not None else ""
        return f"{self.kind.value} frontmatter: {self.message}{loc}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.kind, self.message, self.line) == (other.kind, other.message, other.line)

    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.line))


class RuleConfigurationError(SkillCheckError):
    """A rule references a section, file or field source that cannot be resolved."""


class InvalidEncodingError(SkillCheckError):
    """Raw bytes could not be decoded with the declared or detected encoding."""

    def __init__(self, encoding: str, position: int, reason: str):
        self.encoding = encoding
        self.position = position
        self.reason = reason
        super().__init__(f"Cannot decode as {encoding} at byte {position}: {reason}")
