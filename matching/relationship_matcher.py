"""
Relationship-aware requirement fulfillment.

When no document of an organization matches a requirement directly, the
requirement may still be covered indirectly: by a manual that consolidates
it, by a document the catalog declares as an acceptable substitute, through
the parent/child hierarchy, or through cross-references. Each of these is a
pass over the whole organization; passes run in order of decreasing trust
and the first hit ends the search.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG

from .document_matcher import DocumentMatcher
from .interfaces import DocumentStore
from .models import (
    DocumentRecord,
    DocumentType,
    MatchedDocument,
    MatchResult,
    MatchType,
    StandardRequirement,
)
from .text_utils import normalize_document_name, normalize_title, word_overlap

logger = logging.getLogger(__name__)


@dataclass
class OrganizationContext:
    """Documents of one organization indexed for relationship traversal"""
    documents: List[DocumentRecord]
    by_id: Dict[str, DocumentRecord] = field(default_factory=dict)
    children: Dict[str, List[DocumentRecord]] = field(default_factory=dict)
    referenced_by: Dict[str, List[DocumentRecord]] = field(default_factory=dict)

    @classmethod
    def build(cls, documents: List[DocumentRecord]) -> "OrganizationContext":
        context = cls(documents=list(documents))
        for doc in context.documents:
            context.by_id[doc.id] = doc
        for doc in context.documents:
            if doc.parent_id:
                context.children.setdefault(doc.parent_id, []).append(doc)
            for edge in doc.references:
                context.referenced_by.setdefault(edge.target_id, []).append(doc)
        return context

    def parent_of(self, doc: DocumentRecord) -> Optional[DocumentRecord]:
        return self.by_id.get(doc.parent_id) if doc.parent_id else None

    def children_of(self, doc: DocumentRecord) -> List[DocumentRecord]:
        return self.children.get(doc.id, [])

    def references_of(self, doc: DocumentRecord) -> List[DocumentRecord]:
        return [self.by_id[edge.target_id] for edge in doc.references if edge.target_id in self.by_id]

    def referencing(self, doc: DocumentRecord) -> List[DocumentRecord]:
        return self.referenced_by.get(doc.id, [])


def relationship_title_matches(
    doc_title: str,
    standard_title: str,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> bool:
    """
    Looser title comparison used for declared substitutes and same-type fulfillment.

    Exact or containment after normalization, or more than half of the
    significant words in common.
    """
    normalized_doc = normalize_document_name(doc_title.replace("&", " "))
    normalized_standard = normalize_document_name(standard_title.replace("&", " "))
    if not normalized_doc or not normalized_standard:
        return False

    if normalized_doc == normalized_standard:
        return True
    if normalized_standard in normalized_doc or normalized_doc in normalized_standard:
        return True

    _, overlap = word_overlap(normalized_doc, normalized_standard)
    return overlap > config.relationship_word_overlap


def document_can_fulfill_standard(
    doc: DocumentRecord,
    requirement: StandardRequirement,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> bool:
    """
    Whether a document can stand in for a requirement by its type.

    A manual covers a requirement when enough of the requirement keywords
    appear in its title; a policy or procedure covers a requirement of the
    same type when the titles match.
    """
    if doc.document_type == DocumentType.MANUAL:
        if not requirement.keywords:
            return False
        title = normalize_title(doc.title)
        hits = sum(1 for keyword in requirement.keywords if keyword.lower() in title)
        return hits / len(requirement.keywords) > config.manual_keyword_ratio

    if doc.document_type in (DocumentType.POLICY, DocumentType.PROCEDURE) and \
            requirement.document_type == doc.document_type:
        return relationship_title_matches(doc.title, requirement.title, config)

    return False


class FulfillmentPass(ABC):
    """One organization-wide pass of the relationship matcher"""

    name = "pass"

    def __init__(self, matcher: DocumentMatcher, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        self.matcher = matcher
        self.config = config

    @abstractmethod
    def attempt_match(self, requirement: StandardRequirement, context: OrganizationContext) -> Optional[MatchResult]:
        ...

    def _matched(
        self,
        doc: DocumentRecord,
        confidence: float,
        match_type: MatchType,
        relationship_type: Optional[str] = None,
        via: Optional[MatchType] = None,
    ) -> MatchResult:
        return MatchResult(
            is_match=True,
            confidence=confidence,
            match_type=match_type,
            matched_by=MatchedDocument(doc.id, doc.title, relationship_type),
            via=via,
        )


class DirectPass(FulfillmentPass):
    """Any document matching on its own, above the direct threshold"""

    name = "direct"

    def attempt_match(self, requirement, context):
        for doc in context.documents:
            result = self.matcher.match_document(doc, requirement)
            if result.is_match and result.confidence > self.config.direct_match_threshold:
                return self._matched(doc, result.confidence, MatchType.DIRECT, via=result.match_type)
        return None


class DeclaredFulfillmentPass(FulfillmentPass):
    """Documents that fulfill by type, then the catalog's declared substitutes"""

    name = "fulfills"

    def attempt_match(self, requirement, context):
        for doc in context.documents:
            if document_can_fulfill_standard(doc, requirement, self.config):
                return self._matched(doc, self.config.fulfills_confidence, MatchType.FULFILLS, "fulfills")

        for doc in context.documents:
            for substitute in requirement.can_be_fulfilled_by:
                if relationship_title_matches(doc.title, substitute, self.config):
                    return self._matched(
                        doc,
                        self.config.can_be_fulfilled_by_confidence,
                        MatchType.CAN_BE_FULFILLED_BY,
                        "canBeFulfilledBy",
                    )
        return None


class HierarchyPass(FulfillmentPass):
    """A manual parent or any child of an organization document"""

    name = "hierarchy"

    def attempt_match(self, requirement, context):
        for doc in context.documents:
            parent = context.parent_of(doc)
            if parent is not None and parent.document_type == DocumentType.MANUAL:
                result = self.matcher.match_document(parent, requirement)
                if result.is_match:
                    return self._matched(
                        parent,
                        result.confidence * self.config.parent_discount,
                        MatchType.PARENT,
                        "parent",
                        via=result.match_type,
                    )

            for child in context.children_of(doc):
                result = self.matcher.match_document(child, requirement)
                if result.is_match:
                    return self._matched(
                        child,
                        result.confidence * self.config.child_discount,
                        MatchType.PARENT,
                        "child",
                        via=result.match_type,
                    )
        return None


class ReferencePass(FulfillmentPass):
    """Documents on either end of a reference edge"""

    name = "reference"

    def attempt_match(self, requirement, context):
        for doc in context.documents:
            for referenced in context.references_of(doc):
                result = self.matcher.match_document(referenced, requirement)
                if result.is_match:
                    return self._matched(
                        referenced,
                        result.confidence * self.config.reference_discount,
                        MatchType.REFERENCE,
                        "references",
                        via=result.match_type,
                    )

            for referencing in context.referencing(doc):
                result = self.matcher.match_document(referencing, requirement)
                if result.is_match:
                    return self._matched(
                        referencing,
                        result.confidence * self.config.reference_discount,
                        MatchType.REFERENCE,
                        "referencedBy",
                        via=result.match_type,
                    )
        return None


class RelationshipDocumentMatcher:
    """
    Requirement fulfillment across an organization, relationship aware.

    Usage:
        matcher = RelationshipDocumentMatcher(store)
        result = matcher.check_requirement_fulfillment(requirement, org_id)
    """

    def __init__(
        self,
        store: DocumentStore,
        matcher: Optional[DocumentMatcher] = None,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ):
        self.store = store
        self.config = config
        self.matcher = matcher or DocumentMatcher(config=config)
        self.passes: List[FulfillmentPass] = [
            DirectPass(self.matcher, config),
            DeclaredFulfillmentPass(self.matcher, config),
            HierarchyPass(self.matcher, config),
            ReferencePass(self.matcher, config),
        ]

    def match_document(self, doc: DocumentRecord, requirement: StandardRequirement) -> MatchResult:
        return self.matcher.match_document(doc, requirement)

    def check_requirement_fulfillment(self, requirement: StandardRequirement, organization_id: str) -> MatchResult:
        """Load the organization's documents and check one requirement"""
        documents = self.store.find_all_by_organization(organization_id)
        return self.check_requirement_fulfillment_for_documents(requirement, documents)

    def check_requirement_fulfillment_for_documents(
        self,
        requirement: StandardRequirement,
        documents: List[DocumentRecord],
    ) -> MatchResult:
        """Check one requirement against documents already loaded by the caller"""
        context = OrganizationContext.build(documents)
        return self.check_with_context(requirement, context)

    def check_with_context(self, requirement: StandardRequirement, context: OrganizationContext) -> MatchResult:
        for fulfillment_pass in self.passes:
            result = fulfillment_pass.attempt_match(requirement, context)
            if result is not None and result.is_match:
                logger.debug(
                    f"{requirement.title} satisfied via {fulfillment_pass.name} pass "
                    f"by {result.matched_by.document_title if result.matched_by else '?'}"
                )
                return result

        return MatchResult.no_match()
