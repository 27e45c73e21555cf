"""
Document import: parse an upload, store it, propose clause mappings.

A parse failure does not block the upload. The document is created with
placeholder content and metadata.parse_error set so a user can review or
replace it.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from core.config import ClassificationConfig
from core.exceptions import ParseFailure
from parsing.document_parser import DocumentParser, ParsedDocument, extract_metadata

from .interfaces import AuditSink, DocumentStore
from .models import (
    ClauseMappingRecord,
    DocumentMetadata,
    DocumentRecord,
    DocumentType,
    StandardType,
)
from .section_classifier import SectionClassifier, SectionClauseMapping

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    document: DocumentRecord
    parsed: Optional[ParsedDocument]
    proposed_mappings: Dict[str, List[SectionClauseMapping]] = field(default_factory=dict)
    persisted_mappings: List[ClauseMappingRecord] = field(default_factory=list)


class DocumentImporter:
    """
    Usage:
        importer = DocumentImporter(store, parser, classifier, audit_sink)
        result = importer.import_document(org_id, data, mime_type, "Quality Policy v2.docx")
    """

    def __init__(
        self,
        store: DocumentStore,
        parser: DocumentParser,
        classifier: SectionClassifier,
        audit_sink: AuditSink,
        config: Optional[ClassificationConfig] = None,
    ):
        self.store = store
        self.parser = parser
        self.classifier = classifier
        self.audit_sink = audit_sink
        self.config = config or ClassificationConfig()

    def import_document(
        self,
        organization_id: str,
        content: bytes,
        mime_type: str,
        filename: str,
        owner_id: Optional[str] = None,
        title: Optional[str] = None,
        document_type: DocumentType = DocumentType.DOCUMENT,
        standard: Optional[StandardType] = None,
        auto_classify: Optional[bool] = None,
    ) -> ImportResult:
        """
        Parse and store one upload.

        Raises:
            UnsupportedFileType: The MIME type is not supported; nothing is stored
        """
        standard = standard or StandardType(self.config.default_standard)
        if auto_classify is None:
            auto_classify = self.config.auto_classify

        parsed: Optional[ParsedDocument] = None
        try:
            parsed = self.parser.parse_document(content, mime_type, filename)
            metadata = parsed.metadata
            control = extract_metadata(parsed)
            for name in ("document_type", "version", "effective_date", "review_date", "owner", "approver"):
                if getattr(control, name) is not None:
                    setattr(metadata, name, getattr(control, name))
            text = parsed.content
        except ParseFailure as e:
            logger.warning(f"Importing {filename} without content: {e.message}")
            metadata = DocumentMetadata(file_type=mime_type, parse_error=True)
            text = f"[Document: {filename}]\n\nThis document could not be parsed automatically. {e.reason}"

        now = datetime.now(timezone.utc)
        record = self.store.create(DocumentRecord(
            id=str(uuid.uuid4()),
            title=title or metadata.title or Path(filename).stem,
            organization_id=organization_id,
            content=text,
            document_type=document_type,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            metadata=metadata,
        ))

        result = ImportResult(document=record, parsed=parsed)

        if parsed is not None and not metadata.parse_error:
            result.proposed_mappings = self.classifier.classify_sections(parsed, standard)
            if auto_classify:
                result.persisted_mappings = self.classifier.persist_mappings(
                    record.id,
                    result.proposed_mappings,
                    min_confidence=self.config.auto_classify_min_confidence,
                )
                result.document = self.store.find_by_id(record.id) or record

        self.audit_sink.record(
            action="IMPORT_DOCUMENT",
            entity_type="ARTEFACT",
            entity_id=record.id,
            user_id=owner_id,
            details={
                "filename": filename,
                "mimeType": mime_type,
                "parseError": metadata.parse_error,
                "sections": len(parsed.sections) if parsed else 0,
                "clauseMappings": len(result.persisted_mappings),
            },
        )

        logger.info(
            f"Imported '{record.title}' with {len(result.persisted_mappings)} clause mappings",
            extra={"organization_id": organization_id, "document_id": record.id},
        )
        return result
