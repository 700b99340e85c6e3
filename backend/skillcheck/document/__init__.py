"""
Document parsing for the conformance checker.

- Frontmatter Parser: the ``---`` delimited YAML block
- Structural Indexer: heading tree and tables
- Encoding Auditor: denylisted codepoints
"""

from .model import (
    CodepointOccurrence,
    Document,
    EncodingAudit,
    FrontmatterResult,
    Section,
    Table,
    split_lines,
)
from .frontmatter import FrontmatterLoader, parse_frontmatter
from .indexer import find_tables, index_sections, match_heading
from .encoding import audit_bytes, decode, detect_encoding, scan_text
from .loader import build_document, load_document

__all__ = [
    # Model
    "CodepointOccurrence",
    "Document",
    "EncodingAudit",
    "FrontmatterResult",
    "Section",
    "Table",
    "split_lines",
    # Frontmatter
    "FrontmatterLoader",
    "parse_frontmatter",
    # Indexer
    "find_tables",
    "index_sections",
    "match_heading",
    # Encoding
    "audit_bytes",
    "decode",
    "detect_encoding",
    "scan_text",
    # Loading
    "build_document",
    "load_document",
]
