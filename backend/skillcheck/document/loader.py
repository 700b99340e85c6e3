"""
Document loading.

Runs the Frontmatter Parser, Structural Indexer and Encoding Auditor over one
file and assembles the immutable Document.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..config import DEFAULT_DENYLIST, DEFAULT_ENCODING
from ..exceptions import DocumentNotFoundError
from .encoding import audit_bytes, detect_encoding
from .frontmatter import parse_frontmatter
from .indexer import index_sections
from .model import Document


logger = logging.getLogger(__name__)


def build_document(
    raw: bytes | str,
    path: Optional[Path] = None,
    base_dir: Optional[Path] = None,
    denylist: Iterable[str] = DEFAULT_DENYLIST,
    encoding: str = DEFAULT_ENCODING,
) -> Document:
    """
    Build a Document from content already in memory.

    Args:
        raw: File bytes, or text (encoded with ``encoding`` before auditing).
        path: Source path, used for reporting and reference resolution.
        base_dir: Directory for relative references; defaults to ``path``'s parent.
        denylist: Codepoints the encoding audit reports.
        encoding: Declared encoding.

    Returns:
        The indexed Document. Undecodable bytes are decoded with replacement
        characters; the failure is recorded on ``encoding_audit``.
    """
    if isinstance(raw, str):
        raw = raw.encode(encoding)

    audit = audit_bytes(raw, denylist=denylist, encoding=encoding)
    if audit.error is not None:
        logger.warning("%s: %s", path or "<memory>", audit.error)
    text = raw.decode(detect_encoding(raw, encoding), errors="replace")

    frontmatter = parse_frontmatter(text)
    if frontmatter.error is not None:
        logger.debug("%s: %s", path or "<memory>", frontmatter.error)

    body = text[len(frontmatter.raw):]
    root = index_sections(body, first_line=frontmatter.body_start_line)

    return Document(
        text=text,
        body=body,
        frontmatter=frontmatter,
        root=root,
        encoding_audit=audit,
        raw=raw,
        path=path,
        base_dir=base_dir,
    )


def load_document(
    path: Path,
    denylist: Iterable[str] = DEFAULT_DENYLIST,
    encoding: str = DEFAULT_ENCODING,
) -> Document:
    """
    Read and index a markdown file.

    Raises:
        DocumentNotFoundError: If the file is missing or unreadable.
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentNotFoundError(f"File not found: {path}")
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentNotFoundError(f"Cannot read {path}: {e}") from e

    logger.debug("Loaded %s (%d bytes)", path, len(raw))
    return build_document(raw, path=path, denylist=denylist, encoding=encoding)
