"""
Checker settings.

Settings come from the ``settings`` block of a rule-set file and may be
overridden from the command line.
"""

from __future__ import annotations

import codecs
import re
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Default denylist: arrows, smart quotes and em dashes.
DEFAULT_DENYLIST = (
    "\u2192",  # RIGHTWARDS ARROW
    "\u201c",  # LEFT DOUBLE QUOTATION MARK
    "\u201d",  # RIGHT DOUBLE QUOTATION MARK
    "\u2018",  # LEFT SINGLE QUOTATION MARK
    "\u2019",  # RIGHT SINGLE QUOTATION MARK
    "\u2014",  # EM DASH
)

DEFAULT_ENCODING = "utf-8"

_CODEPOINT_NOTATION = re.compile(r"^(?:U\+|\\u|0x)([0-9A-Fa-f]{4,6})$")


def parse_codepoint(value: str) -> str:
    """
    Normalize a codepoint given as a literal character or ``U+XXXX`` notation.

    Args:
        value: One character, or ``U+2192`` / ``\\u2192`` / ``0x2192``.

    Returns:
        The single character.

    Raises:
        ValueError: If the value is neither form.
    """
    if len(value) == 1:
        return value
    match = _CODEPOINT_NOTATION.match(value.strip())
    if not match:
        raise ValueError(f"Not a codepoint: {value!r} (use a single character or U+XXXX)")
    number = int(match.group(1), 16)
    if number > 0x10FFFF:
        raise ValueError(f"Codepoint out of range: {value!r}")
    return chr(number)


class CheckerSettings(BaseModel):
    """Run-wide settings for document loading and auditing."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    denylist: List[str] = Field(default_factory=lambda: list(DEFAULT_DENYLIST))
    encoding: str = DEFAULT_ENCODING
    workers: int = Field(default=1, ge=1)

    @field_validator("denylist", mode="before")
    @classmethod
    def _normalize_denylist(cls, value):
        if value is None:
            return list(DEFAULT_DENYLIST)
        if isinstance(value, str):
            value = [value]
        return [parse_codepoint(str(item)) for item in value]

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"Unknown encoding: {value}") from None
        # Codecs such as rot13 resolve but are not text encodings.
        try:
            b"".decode(value)
        except LookupError:
            raise ValueError(f"Not a text encoding: {value}") from None
        return value

    def with_overrides(self, **overrides) -> "CheckerSettings":
        """Return a copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return CheckerSettings(**data)
