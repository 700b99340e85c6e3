"""
Rule-set loading.

A rule-set file is YAML::

    settings:
      denylist: ["U+2192", "U+2014"]
    rules:
      - id: AC1.1
        kind: LineCountRange
        min: 1200
      - id: AC1.3
        kind: SubsectionCountUnderHeading
        parent: Sharp edges
        min: 8
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import RuleSetError
from .models import RuleSet


logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg', '')}" if loc else item.get("msg", ""))
    return "; ".join(parts)


def rule_set_from_dict(data: Any, source: str = "<rules>") -> RuleSet:
    """
    Validate parsed rule-set data.

    Raises:
        RuleSetError: If the data is not a valid rule set.
    """
    if not isinstance(data, dict):
        raise RuleSetError(f"{source}: expected a mapping with a 'rules' list")
    if "rules" not in data:
        raise RuleSetError(f"{source}: missing 'rules' list")

    try:
        return RuleSet.model_validate(data)
    except ValidationError as e:
        raise RuleSetError(f"{source}: {_format_validation_error(e)}") from e


def rule_set_from_yaml(content: str, source: str = "<rules>") -> RuleSet:
    """Parse and validate rule-set YAML text."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RuleSetError(f"{source}: YAML parse error: {e}") from e
    return rule_set_from_dict(data, source)


def load_rule_set(path: Path) -> RuleSet:
    """
    Load a rule-set file.

    Raises:
        RuleSetError: If the file is missing, unreadable or invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise RuleSetError(f"Rule-set file not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RuleSetError(f"Cannot read rule-set file {path}: {e}") from e

    rule_set = rule_set_from_yaml(content, str(path))
    logger.debug("Loaded %d rules from %s", len(rule_set.rules), path)
    return rule_set

