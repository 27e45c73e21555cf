# ComplyDocs Parsing Layer
# Format extraction and section detection for uploaded documents

from parsing.document_parser import (
    DocumentParser,
    DocumentSection,
    ParsedDocument,
    extract_metadata,
    extract_sections,
)

__all__ = [
    "DocumentParser",
    "DocumentSection",
    "ParsedDocument",
    "extract_metadata",
    "extract_sections",
]
