"""
ComplyDocs Exceptions

Every error raised by the matching engine derives from ComplyDocsError and
carries an http_status hint for the web layer.
"""

from typing import Optional


class ComplyDocsError(Exception):
    """Base class for engine errors."""
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFileType(ComplyDocsError):
    """The MIME type is not one the parser understands."""
    http_status = 415

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type}")
        self.mime_type = mime_type


class ParseFailure(ComplyDocsError):
    """The format library could not read a DOCX, XLSX or text upload."""
    http_status = 422

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to parse {filename}: {reason}")
        self.filename = filename
        self.reason = reason


class CircularReferenceError(ComplyDocsError):
    """Setting the parent would create a cycle in the document hierarchy."""
    http_status = 400

    def __init__(self, document_id: str, parent_id: str):
        super().__init__(
            f"Setting {parent_id} as parent of {document_id} would create a circular reference"
        )
        self.document_id = document_id
        self.parent_id = parent_id


class DuplicateMergeConflict(ComplyDocsError):
    """A merge request is inconsistent and was rejected before any write."""
    http_status = 409


class DocumentNotFound(ComplyDocsError):
    http_status = 404

    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class InvalidReference(ComplyDocsError):
    http_status = 400


class MatchEngineError(ComplyDocsError):
    """Unexpected failure while scoring a single requirement."""
    http_status = 500

    def __init__(self, requirement_id: Optional[str], cause: Exception):
        super().__init__(f"Matching failed for requirement {requirement_id}: {cause}")
        self.requirement_id = requirement_id
        self.cause = cause
