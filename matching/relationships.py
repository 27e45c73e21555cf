"""
Document hierarchy and cross-references.

Parent links form a forest: set_parent walks the ancestors of the proposed
parent before writing and refuses any link that would close a cycle.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from core.exceptions import CircularReferenceError, DocumentNotFound, InvalidReference

from .interfaces import AuditSink, DocumentStore
from .models import DocumentRecord, DocumentType, ReferenceType
from .relationship_matcher import OrganizationContext
from .text_utils import normalize_document_name, significant_words

logger = logging.getLogger(__name__)


@dataclass
class RelationshipSuggestion:
    """A relationship the discovery heuristics propose"""
    document_id: str
    document_title: str
    document_type: DocumentType
    reference_type: ReferenceType
    confidence: float
    reasoning: str


def analyze_relationship(source: DocumentRecord, other: DocumentRecord) -> Optional[RelationshipSuggestion]:
    """Type-pair rules first, then shared title words"""

    def suggest(reference_type: ReferenceType, confidence: float, reasoning: str) -> RelationshipSuggestion:
        return RelationshipSuggestion(
            other.id, other.title, other.document_type, reference_type, confidence, reasoning
        )

    title1 = normalize_document_name(source.title)
    title2 = normalize_document_name(other.title)

    if source.document_type == DocumentType.MANUAL and other.document_type == DocumentType.POLICY:
        if "manual" in title1 and ("policy" in title2 or "objective" in title2):
            return suggest(ReferenceType.IMPLEMENTS, 0.8, "Manual likely implements policy")

    if source.document_type == DocumentType.PROCEDURE and other.document_type == DocumentType.POLICY:
        return suggest(ReferenceType.IMPLEMENTS, 0.7, "Procedure implements policy")

    if source.document_type == DocumentType.LOG and other.document_type == DocumentType.PLAN:
        return suggest(ReferenceType.SUPPORTS, 0.6, "Log supports plan execution")

    long_words = significant_words(title2, min_length=4)
    common = [word for word in significant_words(title1, min_length=4) if word in long_words]
    if common and title1 and title2:
        overlap = len(common) / min(len(title1.split(" ")), len(title2.split(" ")))
        if overlap > 0.3:
            return suggest(
                ReferenceType.CROSS_REFERENCE,
                overlap * 0.8,
                f"Common keywords: {', '.join(common)}",
            )

    return None


class DocumentRelationshipService:
    """
    Parent/child hierarchy and typed references between documents.

    Usage:
        service = DocumentRelationshipService(store, audit_sink)
        service.set_parent(policy.id, manual.id, org_id, user_id)
    """

    def __init__(
        self,
        store: DocumentStore,
        audit_sink: AuditSink,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ):
        self.store = store
        self.audit_sink = audit_sink
        self.config = config

    def _require(self, document_id: str, organization_id: str) -> DocumentRecord:
        doc = self.store.find_by_id(document_id)
        if doc is None or doc.organization_id != organization_id:
            raise DocumentNotFound(document_id)
        return doc

    def would_create_cycle(self, document_id: str, parent_id: str) -> bool:
        """True when document_id is parent_id or one of its ancestors"""
        visited = set()
        current: Optional[str] = parent_id
        while current is not None:
            if current == document_id:
                return True
            if current in visited:
                # Existing cycle that does not involve document_id
                logger.warning(f"Parent chain of {parent_id} already loops at {current}")
                return False
            visited.add(current)
            current = self.store.get_parent_id(current)
        return False

    def set_parent(
        self,
        document_id: str,
        parent_id: Optional[str],
        organization_id: str,
        user_id: Optional[str],
    ) -> DocumentRecord:
        """
        Make parent_id the parent of document_id, or clear it with None.

        Raises:
            DocumentNotFound: Either document is not in the organization
            CircularReferenceError: The link would create a cycle; nothing is written
        """
        doc = self._require(document_id, organization_id)
        parent = None
        if parent_id is not None:
            parent = self._require(parent_id, organization_id)
            if self.would_create_cycle(document_id, parent_id):
                raise CircularReferenceError(document_id, parent_id)

        with self.store.transaction() as tx:
            updated = tx.update(document_id, parent_id=parent_id)
            self.audit_sink.record(
                action="SET_DOCUMENT_PARENT",
                entity_type="ARTEFACT",
                entity_id=document_id,
                user_id=user_id,
                details={
                    "document": doc.title,
                    "parent": parent.title if parent else None,
                    "previousParentId": doc.parent_id,
                    "organizationId": organization_id,
                },
            )

        logger.info(
            f"Parent of '{doc.title}' set to {parent.title if parent else 'none'}",
            extra={"document_id": document_id, "organization_id": organization_id},
        )
        return updated

    def create_reference(
        self,
        referencing_id: str,
        referenced_id: str,
        reference_type: ReferenceType,
        organization_id: str,
        user_id: Optional[str],
        description: Optional[str] = None,
    ) -> None:
        """Add a typed edge between two documents of the same organization"""
        if referencing_id == referenced_id:
            raise InvalidReference("A document cannot reference itself")
        referencing = self._require(referencing_id, organization_id)
        referenced = self._require(referenced_id, organization_id)

        with self.store.transaction() as tx:
            tx.add_reference(referencing_id, referenced_id, reference_type, description, created_by=user_id)
            self.audit_sink.record(
                action="CREATE_DOCUMENT_REFERENCE",
                entity_type="DOCUMENT_REFERENCE",
                entity_id=f"{referencing_id}:{referenced_id}",
                user_id=user_id,
                details={
                    "referencingDocument": referencing.title,
                    "referencedDocument": referenced.title,
                    "referenceType": reference_type.value,
                    "organizationId": organization_id,
                },
            )

    def get_relationships(self, document_id: str) -> Dict[str, Any]:
        """Parent, children, outgoing references and incoming references of a document"""
        doc = self.store.find_by_id(document_id)
        if doc is None:
            raise DocumentNotFound(document_id)

        context = OrganizationContext.build(self.store.find_all_by_organization(doc.organization_id))
        doc = context.by_id.get(document_id, doc)
        references = {edge.target_id: edge for edge in doc.references}

        return {
            "document": doc,
            "parent": context.parent_of(doc),
            "children": context.children_of(doc),
            "references": [
                (target, references[target.id].reference_type) for target in context.references_of(doc)
            ],
            "referenced_by": context.referencing(doc),
        }

    def discover_relationships(self, document_id: str, organization_id: str) -> List[RelationshipSuggestion]:
        """Heuristic relationship suggestions, best first"""
        target = self._require(document_id, organization_id)

        suggestions = []
        for other in self.store.find_all_by_organization(organization_id):
            if other.id == document_id:
                continue
            suggestion = analyze_relationship(target, other)
            if suggestion is not None and suggestion.confidence > self.config.discovery_threshold:
                suggestions.append(suggestion)

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions[:self.config.discovery_limit]
