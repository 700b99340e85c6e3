"""
Rule and result models.

Rules are pure data: one Pydantic model per rule kind, combined into a
discriminated union on ``kind``. The Rule Engine interprets them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import CheckerSettings, parse_codepoint


class CheckStatus(str, Enum):
    """Outcome of evaluating one rule."""
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True)
class CheckResult:
    """Result of evaluating one rule against one document."""

    rule_id: str
    kind: str
    status: CheckStatus
    observed: Any
    message: str

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "rule_id": self.rule_id,
            "kind": self.kind,
            "status": self.status.value,
            "observed": self.observed,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"[{self.status.value.upper()}] {self.rule_id}: {self.message}"


def _compile(pattern: str) -> str:
    try:
        re.compile(pattern)
    except re.error as e:
        raise ValueError(f"invalid regular expression {pattern!r}: {e}") from None
    return pattern


class RuleBase(BaseModel):
    """Fields shared by every rule kind."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    description: Optional[str] = None


class LineCountRange(RuleBase):
    """Total file line count (frontmatter included) within [min, max]."""

    kind: Literal["LineCountRange"]
    min: int = Field(default=0, ge=0)
    max: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "LineCountRange":
        if self.max is not None and self.max < self.min:
            raise ValueError("max must be >= min")
        return self


class SectionCountAtLeast(RuleBase):
    """At least ``min`` sections at ``level`` (default ``##``)."""

    kind: Literal["SectionCountAtLeast"]
    min: int = Field(ge=0)
    level: int = Field(default=2, ge=1, le=6)
    pattern: Optional[str] = None
    exclude: List[str] = Field(default_factory=list)

    @field_validator("pattern")
    @classmethod
    def _valid_pattern(cls, value: Optional[str]) -> Optional[str]:
        return _compile(value) if value is not None else value


class SubsectionCountUnderHeading(RuleBase):
    """At least ``min`` immediate children under the section titled ``parent``."""

    kind: Literal["SubsectionCountUnderHeading"]
    parent: str = Field(min_length=1)
    min: int = Field(ge=0)
    level: Optional[int] = Field(default=None, ge=1, le=6)


class TableRowCountAtLeast(RuleBase):
    """At least ``min`` table data rows anywhere under the section titled ``parent``."""

    kind: Literal["TableRowCountAtLeast"]
    parent: str = Field(min_length=1)
    min: int = Field(ge=0)
    level: Optional[int] = Field(default=None, ge=1, le=6)


class SubstringPresent(RuleBase):
    kind: Literal["SubstringPresent"]
    text: str = Field(min_length=1)


class SubstringAbsent(RuleBase):
    kind: Literal["SubstringAbsent"]
    text: str = Field(min_length=1)


class RegexPresent(RuleBase):
    kind: Literal["RegexPresent"]
    pattern: str = Field(min_length=1)

    @field_validator("pattern")
    @classmethod
    def _valid_pattern(cls, value: str) -> str:
        return _compile(value)


class RegexAbsent(RuleBase):
    kind: Literal["RegexAbsent"]
    pattern: str = Field(min_length=1)

    @field_validator("pattern")
    @classmethod
    def _valid_pattern(cls, value: str) -> str:
        return _compile(value)


class SectionPresent(RuleBase):
    kind: Literal["SectionPresent"]
    title: str = Field(min_length=1)
    level: Optional[int] = Field(default=None, ge=1, le=6)


class YamlFieldPresent(RuleBase):
    kind: Literal["YamlFieldPresent"]
    field: str = Field(min_length=1)


class YamlFieldEquals(RuleBase):
    kind: Literal["YamlFieldEquals"]
    field: str = Field(min_length=1)
    expected: Union[bool, int, float, str, None]


class YamlFieldStartsWith(RuleBase):
    kind: Literal["YamlFieldStartsWith"]
    field: str = Field(min_length=1)
    expected: str


class FileExistsAndSized(RuleBase):
    """A file relative to the document exists with a line count in [min, max]."""

    kind: Literal["FileExistsAndSized"]
    path: str = Field(min_length=1)
    min: int = Field(default=0, ge=0)
    max: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "FileExistsAndSized":
        if self.max is not None and self.max < self.min:
            raise ValueError("max must be >= min")
        return self


class CrossReferencePresent(RuleBase):
    """Each path appears literally in the body and exists next to the document."""

    kind: Literal["CrossReferencePresent"]
    paths: List[str] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _single_path(cls, data: Any) -> Any:
        if isinstance(data, dict) and "path" in data:
            data = dict(data)
            path = data.pop("path")
            data.setdefault("paths", [])
            data["paths"] = [path] + list(data["paths"])
        return data


class CodepointsAbsent(RuleBase):
    """No occurrences of the given codepoints (default: the settings denylist)."""

    kind: Literal["CodepointsAbsent"]
    codepoints: Optional[List[str]] = None

    @field_validator("codepoints", mode="before")
    @classmethod
    def _normalize(cls, value):
        if value is None:
            return None
        if isinstance(value, str):
            value = [value]
        return [parse_codepoint(str(item)) for item in value]


RULE_MODELS = (
    LineCountRange,
    SectionCountAtLeast,
    SubsectionCountUnderHeading,
    TableRowCountAtLeast,
    SubstringPresent,
    SubstringAbsent,
    RegexPresent,
    RegexAbsent,
    SectionPresent,
    YamlFieldPresent,
    YamlFieldEquals,
    YamlFieldStartsWith,
    FileExistsAndSized,
    CrossReferencePresent,
    CodepointsAbsent,
)

Rule = Annotated[Union[RULE_MODELS], Field(discriminator="kind")]

RULE_KINDS = tuple(get_args(model.model_fields["kind"].annotation)[0] for model in RULE_MODELS)


def duplicate_ids(rules: List[Any]) -> List[str]:
    """Rule ids that occur more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: List[str] = []
    for rule in rules:
        if rule.id in seen and rule.id not in duplicates:
            duplicates.append(rule.id)
        seen.add(rule.id)
    return duplicates


class RuleSet(BaseModel):
    """Ordered rules plus run settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    settings: CheckerSettings = Field(default_factory=CheckerSettings)
    rules: List[Rule] = Field(default_factory=list)

    @field_validator("settings", mode="before")
    @classmethod
    def _default_settings(cls, value):
        return CheckerSettings() if value is None else value

    @model_validator(mode="after")
    def _unique_ids(self) -> "RuleSet":
        duplicates = duplicate_ids(self.rules)
        if duplicates:
            raise ValueError(f"duplicate rule id(s): {', '.join(duplicates)}")
        return self
