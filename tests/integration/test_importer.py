"""
ComplyDocs Integration Tests: Document Import
=============================================

Tests:
- Text import with automatic clause classification
- Placeholder documents for unparseable uploads
- Unsupported file types store nothing
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import ClassificationConfig, ParsingConfig
from core.exceptions import UnsupportedFileType
from matching.importer import DocumentImporter
from matching.models import DocumentType, StandardType
from matching.section_classifier import SectionClassifier
from parsing.document_parser import DocumentParser


POLICY_TEXT = """QUALITY POLICY
Version: 2.1
5.2 Policy
Top management shall establish, implement and maintain a quality policy.
Xyzzy
Qwv zzk xyx."""


@pytest.fixture
def importer(store, clause_repository, audit_log):
    return DocumentImporter(
        store,
        DocumentParser(ParsingConfig()),
        SectionClassifier(clause_repository, store=store),
        audit_log,
        config=ClassificationConfig(),
    )


@pytest.mark.integration
class TestImportDocument:
    """Tests for DocumentImporter.import_document"""

    def test_text_import_with_classification(self, importer, store, organization, user):
        result = importer.import_document(
            organization.id,
            POLICY_TEXT.encode("utf-8"),
            "text/plain",
            "quality-policy.txt",
            owner_id=user.id,
            document_type=DocumentType.POLICY,
            auto_classify=True,
        )

        doc = store.find_by_id(result.document.id)
        assert doc.title == "quality-policy"
        assert doc.document_type == DocumentType.POLICY
        assert doc.metadata.version == "2.1"
        assert "5.2" in doc.clause_numbers()
        assert "5.2 Policy" in result.proposed_mappings
        assert "Xyzzy" not in result.proposed_mappings
        assert sorted(m.clause_number for m in result.persisted_mappings) == sorted(doc.clause_numbers())

    def test_classification_is_only_proposed_by_default(self, importer, store, organization):
        result = importer.import_document(
            organization.id, POLICY_TEXT.encode("utf-8"), "text/plain", "policy.txt", title="Quality Policy"
        )

        assert result.document.title == "Quality Policy"
        assert result.proposed_mappings
        assert result.persisted_mappings == []
        assert store.find_by_id(result.document.id).clause_mappings == []

    def test_import_against_27001_catalog(self, importer, organization):
        text = "Access Control\nRules to control access to information are established."
        result = importer.import_document(
            organization.id,
            text.encode("utf-8"),
            "text/plain",
            "access.txt",
            standard=StandardType.ISO_27001_2022,
            auto_classify=True,
        )

        assert "A.5.15" in [m.clause_number for m in result.persisted_mappings]
        assert all(m.standard == StandardType.ISO_27001_2022 for m in result.persisted_mappings)

    def test_unparseable_upload_gets_placeholder(self, importer, store, organization):
        result = importer.import_document(organization.id, b"\xff\xfe\xfa", "text/plain", "broken.txt")

        doc = store.find_by_id(result.document.id)
        assert doc.metadata.parse_error is True
        assert doc.content.startswith("[Document: broken.txt]")
        assert doc.clause_mappings == []
        assert result.parsed is None

    def test_unsupported_type_stores_nothing(self, importer, store, audit_log, organization):
        with pytest.raises(UnsupportedFileType):
            importer.import_document(organization.id, b"\x89PNG", "image/png", "logo.png")

        assert store.find_all_by_organization(organization.id) == []
        assert audit_log.list_by_action("IMPORT_DOCUMENT") == []

    def test_import_is_audited(self, importer, audit_log, organization, user):
        result = importer.import_document(
            organization.id, POLICY_TEXT.encode("utf-8"), "text/plain", "policy.txt", owner_id=user.id
        )

        [entry] = audit_log.list_by_action("IMPORT_DOCUMENT")
        assert entry.entity_id == result.document.id
        assert entry.user_id == user.id
        assert entry.details["filename"] == "policy.txt"
        assert entry.details["parseError"] is False
