# ComplyDocs Matching Engine
# Requirement matching, missing-document reports, duplicate detection and clause classification

from matching.models import (
    ClauseMappingRecord,
    DocumentMetadata,
    DocumentRecord,
    DocumentStatus,
    DocumentType,
    DuplicateDetectionResult,
    DuplicateGroup,
    ISOClauseRecord,
    MatchResult,
    MatchType,
    MergeResult,
    MissingRequirement,
    RecommendedAction,
    ReferenceEdge,
    ReferenceType,
    StandardRequirement,
    StandardType,
)
from matching.interfaces import AuditSink, ClauseCatalog, DocumentStore, RequirementCatalog
from matching.document_matcher import DocumentMatcher
from matching.relationship_matcher import RelationshipDocumentMatcher
from matching.missing_documents import MissingDocumentFinder
from matching.duplicate_detector import DuplicateDetector
from matching.section_classifier import SectionClassifier, SectionClauseMapping
from matching.relationships import DocumentRelationshipService
from matching.iso_catalog import StaticCatalog

__all__ = [
    # Records
    "ClauseMappingRecord",
    "DocumentMetadata",
    "DocumentRecord",
    "DocumentStatus",
    "DocumentType",
    "DuplicateDetectionResult",
    "DuplicateGroup",
    "ISOClauseRecord",
    "MatchResult",
    "MatchType",
    "MergeResult",
    "MissingRequirement",
    "RecommendedAction",
    "ReferenceEdge",
    "ReferenceType",
    "StandardRequirement",
    "StandardType",
    # Collaborators
    "AuditSink",
    "ClauseCatalog",
    "DocumentStore",
    "RequirementCatalog",
    # Services
    "DocumentMatcher",
    "RelationshipDocumentMatcher",
    "MissingDocumentFinder",
    "DuplicateDetector",
    "SectionClassifier",
    "SectionClauseMapping",
    "DocumentRelationshipService",
    "StaticCatalog",
]
