"""
Built-in rule sets.

The ``skill`` preset covers the checks every SKILL.md needs regardless of its
content: frontmatter with ``name`` and ``description``, and no denylisted
codepoints.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .exceptions import RuleSetError
from .ruleset import rule_set_from_dict
from .models import RuleSet


PRESETS: Dict[str, List[Dict[str, Any]]] = {
    "skill": [
        {
            "id": "FM_NAME",
            "kind": "YamlFieldPresent",
            "field": "name",
            "description": "Frontmatter declares the skill name",
        },
        {
            "id": "FM_DESCRIPTION",
            "kind": "YamlFieldPresent",
            "field": "description",
            "description": "Frontmatter declares when to use the skill",
        },
        {
            "id": "ENC_CODEPOINTS",
            "kind": "CodepointsAbsent",
            "description": "No smart quotes, em dashes or arrows",
        },
    ],
}


def preset_names() -> List[str]:
    return sorted(PRESETS)


def load_preset(name: str) -> RuleSet:
    """
    Build a preset rule set by name.

    Raises:
        RuleSetError: If no preset has that name.
    """
    if name not in PRESETS:
        raise RuleSetError(f"Unknown preset '{name}' (available: {', '.join(preset_names())})")
    return rule_set_from_dict({"rules": PRESETS[name]}, source=f"preset:{name}")
