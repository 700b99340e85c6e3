"""
Encoding Auditor.

Decodes raw bytes and reports every occurrence of a denylisted codepoint with
its 1-based line and column. Reporting only: whether an occurrence fails a
document is decided by a rule.
"""

from __future__ import annotations

import codecs
import unicodedata
from typing import Iterable, List, Tuple

from ..config import DEFAULT_DENYLIST, DEFAULT_ENCODING
from ..exceptions import InvalidEncodingError
from .model import CodepointOccurrence, EncodingAudit, split_lines


_BOMS: Tuple[Tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def detect_encoding(raw: bytes, declared: str = DEFAULT_ENCODING) -> str:
    """Return the BOM-detected encoding of ``raw``, else ``declared``."""
    for bom, name in _BOMS:
        if raw.startswith(bom):
            return name
    return declared


def decode(raw: bytes, declared: str = DEFAULT_ENCODING) -> str:
    """
    Strictly decode ``raw``.

    Raises:
        InvalidEncodingError: If the bytes are not valid in the chosen encoding.
    """
    encoding = detect_encoding(raw, declared)
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(encoding, e.start, e.reason) from e


def _char_name(char: str) -> str:
    return unicodedata.name(char, f"U+{ord(char):04X}")


def scan_text(text: str, denylist: Iterable[str] = DEFAULT_DENYLIST) -> List[CodepointOccurrence]:
    """Find denylisted codepoints in decoded text, in document order."""
    denied = frozenset(denylist)
    occurrences: List[CodepointOccurrence] = []
    if not denied:
        return occurrences

    for line_no, line in enumerate(split_lines(text), start=1):
        if denied.isdisjoint(line):
            continue
        for column, char in enumerate(line, start=1):
            if char in denied:
                occurrences.append(CodepointOccurrence(
                    line=line_no,
                    column=column,
                    char=char,
                    name=_char_name(char),
                ))
    return occurrences


def audit_bytes(
    raw: bytes,
    denylist: Iterable[str] = DEFAULT_DENYLIST,
    encoding: str = DEFAULT_ENCODING,
) -> EncodingAudit:
    """
    Decode ``raw`` and scan it for denylisted codepoints.

    Args:
        raw: File content.
        denylist: Characters to report.
        encoding: Declared encoding; a byte-order mark takes precedence.

    Returns:
        EncodingAudit with occurrences, or with ``error`` set when decoding
        fails.
    """
    chosen = detect_encoding(raw, encoding)
    try:
        text = decode(raw, encoding)
    except InvalidEncodingError as e:
        return EncodingAudit(encoding=chosen, error=e)
    return EncodingAudit(encoding=chosen, occurrences=tuple(scan_text(text, denylist)))
