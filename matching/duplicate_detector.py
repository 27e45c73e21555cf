"""
Duplicate Detector

Finds documents of an organization that are copies or versions of each
other, recommends how to resolve each group, and performs the resolution
(merge, delete) against the document store.

Grouping is a single greedy pass: a document joins the group of the first
earlier document it is similar to and is then excluded from further
comparison. This is single-link clustering, not transitive closure, and
which documents end up together depends on the sort order.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from core.exceptions import ComplyDocsError, DocumentNotFound, DuplicateMergeConflict

from .interfaces import AuditSink, DocumentStore
from .models import (
    DocumentRecord,
    DocumentStatus,
    DuplicateDetectionResult,
    DuplicateGroup,
    DuplicateMember,
    MergeResult,
    RecommendedAction,
)
from .similarity import similarity
from .text_utils import (
    extract_version_info,
    normalize_document_name,
    strip_versioning,
    version_as_float,
)

logger = logging.getLogger(__name__)


class OrganizationLocks:
    """One re-entrant lock per organization, created on first use"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def get(self, organization_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(organization_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[organization_id] = lock
            return lock


# Shared by every detector in the process so merges of one organization never interleave
merge_locks = OrganizationLocks()


def document_similarity(
    doc1: DocumentRecord,
    doc2: DocumentRecord,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> Tuple[bool, float]:
    """
    Compare two documents for duplication.

    Returns:
        (is_duplicate, confidence). Rules in order: equal normalized names
        (1.0), clause-set Jaccard above threshold, equal version-stripped
        bases, then edit similarity of the bases.
    """
    name1 = normalize_document_name(doc1.title)
    name2 = normalize_document_name(doc2.title)
    if name1 == name2:
        return True, 1.0

    clauses1 = doc1.clause_ids()
    clauses2 = doc2.clause_ids()
    if clauses1 and clauses2:
        jaccard = len(clauses1 & clauses2) / len(clauses1 | clauses2)
        if jaccard > config.clause_jaccard_threshold:
            return True, jaccard

    base1 = strip_versioning(doc1.title)
    base2 = strip_versioning(doc2.title)
    if base1 == base2:
        return True, config.version_base_confidence

    score = similarity(base1, base2)
    return score > config.title_edit_threshold, score


def _latest_sort_key(member: DuplicateMember):
    updated = member.updated_at.timestamp() if member.updated_at else 0.0
    return (
        member.status == DocumentStatus.APPROVED,
        version_as_float(member.version_info),
        member.current_version,
        updated,
    )


def mark_latest_version(group: DuplicateGroup) -> None:
    """Flag exactly one member as latest: approved first, then version number, revision, recency"""
    if not group.documents:
        return
    # max() keeps the first of equal keys, so ties resolve to sort order
    latest = max(group.documents, key=_latest_sort_key)
    for member in group.documents:
        member.is_latest_version = member.id == latest.id


def recommend_action(group: DuplicateGroup) -> RecommendedAction:
    statuses = {member.status for member in group.documents}
    if len(statuses) == 1:
        return RecommendedAction.KEEP_LATEST

    owners = {member.owner_id for member in group.documents}
    if len(owners) > 1:
        return RecommendedAction.MANUAL_REVIEW

    if DocumentStatus.APPROVED in statuses and DocumentStatus.DRAFT in statuses:
        return RecommendedAction.MERGE_CONTENT

    return RecommendedAction.KEEP_LATEST


class DuplicateDetector:
    """
    Duplicate detection and resolution for one document store.

    Usage:
        detector = DuplicateDetector(store, audit_sink)
        result = detector.detect_duplicates(org_id)
        detector.merge_duplicates([a.id, b.id], keep_document_id=b.id, user_id=user.id)
    """

    def __init__(
        self,
        store: DocumentStore,
        audit_sink: AuditSink,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
        locks: Optional[OrganizationLocks] = None,
    ):
        self.store = store
        self.audit_sink = audit_sink
        self.config = config
        self.locks = locks or merge_locks

    # =========================================================================
    # Detection
    # =========================================================================

    def detect_duplicates(self, organization_id: str) -> DuplicateDetectionResult:
        """
        Group an organization's documents into likely duplicates.

        Returns:
            DuplicateDetectionResult with groups ordered by size then
            confidence, both descending. Only groups of two or more are kept.
        """
        documents = self.store.find_all_by_organization(organization_id)
        groups: List[DuplicateGroup] = []
        processed = set()

        for i, doc1 in enumerate(documents):
            if doc1.id in processed:
                continue

            group = DuplicateGroup(base_document=normalize_document_name(doc1.title))
            group.documents.append(DuplicateMember.from_record(doc1, extract_version_info(doc1.title)))
            processed.add(doc1.id)

            for doc2 in documents[i + 1:]:
                if doc2.id in processed:
                    continue
                is_duplicate, confidence = document_similarity(doc1, doc2, self.config)
                if is_duplicate and confidence > self.config.duplicate_group_threshold:
                    group.documents.append(DuplicateMember.from_record(doc2, extract_version_info(doc2.title)))
                    processed.add(doc2.id)
                    group.confidence = min(group.confidence, confidence)

            if len(group.documents) > 1:
                mark_latest_version(group)
                group.recommended_action = recommend_action(group)
                groups.append(group)

        groups.sort(key=lambda g: (-len(g.documents), -g.confidence))

        duplicates_found = sum(len(g.documents) for g in groups)
        logger.info(
            f"Found {len(groups)} duplicate groups ({duplicates_found} documents) "
            f"among {len(documents)} documents",
            extra={"organization_id": organization_id},
        )

        return DuplicateDetectionResult(
            organization_id=organization_id,
            duplicate_groups=groups,
            total_documents=len(documents),
            duplicates_found=duplicates_found,
            analysis_date=datetime.now(timezone.utc),
        )

    def get_duplicate_group(self, organization_id: str, base_document: str) -> Optional[DuplicateGroup]:
        """Re-run detection and return the group with the given base name"""
        result = self.detect_duplicates(organization_id)
        for group in result.duplicate_groups:
            if group.base_document == base_document:
                return group
        return None

    # =========================================================================
    # Resolution
    # =========================================================================

    def _validate_merge(self, document_ids: List[str], keep_document_id: str) -> List[DocumentRecord]:
        unique_ids = list(dict.fromkeys(document_ids))
        if len(unique_ids) < 2:
            raise DuplicateMergeConflict("At least 2 document IDs are required")
        if keep_document_id not in unique_ids:
            raise DuplicateMergeConflict(f"Document to keep {keep_document_id} is not among the merged documents")

        documents = self.store.find_by_ids(unique_ids)
        found = {doc.id for doc in documents}
        absent = [doc_id for doc_id in unique_ids if doc_id not in found]
        if absent:
            raise DuplicateMergeConflict(f"Documents not found: {', '.join(absent)}")

        organizations = {doc.organization_id for doc in documents}
        if len(organizations) != 1:
            raise DuplicateMergeConflict("Documents belong to different organizations")

        return documents

    def merge_duplicates(self, document_ids: List[str], keep_document_id: str, user_id: str) -> MergeResult:
        """
        Merge duplicates into one keeper document.

        Clause mappings the keeper lacks are copied from the losers, comments,
        reviews and tasks move to the keeper, and the losers are deleted. All
        of it happens in one transaction; any failure leaves the store as it
        was.

        Raises:
            DuplicateMergeConflict: Inconsistent request, nothing was changed
        """
        documents = self._validate_merge(document_ids, keep_document_id)
        organization_id = documents[0].organization_id

        with self.locks.get(organization_id):
            # Re-read under the lock; a concurrent merge may have removed a loser
            documents = self._validate_merge(document_ids, keep_document_id)
            keeper = next(doc for doc in documents if doc.id == keep_document_id)
            losers = [doc for doc in documents if doc.id != keep_document_id]
            loser_ids = [doc.id for doc in losers]

            with self.store.transaction() as tx:
                existing = keeper.clause_ids()
                copied = 0
                for loser in losers:
                    for mapping in loser.clause_mappings:
                        if mapping.clause_id in existing:
                            continue
                        tx.add_clause_mapping(keeper.id, mapping)
                        existing.add(mapping.clause_id)
                        copied += 1

                moved = tx.reassign_related(loser_ids, keeper.id)

                for loser_id in loser_ids:
                    tx.delete(loser_id)

                self.audit_sink.record(
                    action="MERGE_DUPLICATES",
                    entity_type="ARTEFACT",
                    entity_id=keeper.id,
                    user_id=user_id,
                    details={
                        "keptDocument": keeper.title,
                        "mergedDocuments": [{"id": doc.id, "title": doc.title} for doc in losers],
                        "totalMerged": len(losers),
                        "clauseMappingsCopied": copied,
                        "reassigned": moved,
                    },
                )

            merged = self.store.find_by_id(keeper.id)

        logger.info(
            f"Merged {len(losers)} documents into '{keeper.title}'",
            extra={"organization_id": organization_id, "document_id": keeper.id, "user_id": user_id},
        )
        return MergeResult(success=True, merged_document=merged, merged_ids=loser_ids)

    def delete_duplicate(self, document_id: str, organization_id: str, user_id: str) -> DocumentRecord:
        """Delete one document of the organization and audit it"""
        with self.locks.get(organization_id):
            doc = self.store.find_by_id(document_id)
            if doc is None or doc.organization_id != organization_id:
                raise DocumentNotFound(document_id)

            with self.store.transaction() as tx:
                tx.delete(document_id)
                self.audit_sink.record(
                    action="DELETE_DUPLICATE",
                    entity_type="ARTEFACT",
                    entity_id=document_id,
                    user_id=user_id,
                    details={"documentTitle": doc.title, "organizationId": organization_id},
                )

        logger.info(f"Deleted duplicate '{doc.title}'", extra={"document_id": document_id})
        return doc

    def bulk_resolve(
        self,
        organization_id: str,
        resolutions: List[Dict[str, Any]],
        user_id: str,
    ) -> Dict[str, Any]:
        """
        Apply several resolutions; each succeeds or fails on its own.

        Args:
            resolutions: Dicts with "action" ("merge", "delete" or
                "keep_all"), "document_ids" and, for merges,
                "keep_document_id"

        Returns:
            {"results": [...], "summary": {"total", "successful", "failed"}}
        """
        results: List[Dict[str, Any]] = []

        for resolution in resolutions:
            action = resolution.get("action")
            document_ids = resolution.get("document_ids") or []
            try:
                if action == "merge":
                    self._check_organization(document_ids, organization_id)
                    merge = self.merge_duplicates(document_ids, resolution.get("keep_document_id"), user_id)
                    results.append({"action": "merge", "success": True, "merged_ids": merge.merged_ids})
                elif action == "delete":
                    for document_id in document_ids:
                        self.delete_duplicate(document_id, organization_id, user_id)
                    results.append({"action": "delete", "success": True, "deleted_count": len(document_ids)})
                elif action == "keep_all":
                    results.append({"action": "keep_all", "success": True, "kept_count": len(document_ids)})
                else:
                    results.append({"action": action, "success": False, "error": f"Unknown action: {action}"})
            except ComplyDocsError as e:
                logger.warning(f"Resolution {action} failed: {e.message}")
                results.append({"action": action, "success": False, "error": e.message})

        successful = sum(1 for r in results if r["success"])
        summary = {"total": len(results), "successful": successful, "failed": len(results) - successful}

        self.audit_sink.record(
            action="BULK_RESOLVE_DUPLICATES",
            entity_type="DUPLICATE_RESOLUTION",
            entity_id="BULK",
            user_id=user_id,
            details={
                "organizationId": organization_id,
                "totalResolutions": len(resolutions),
                "successCount": summary["successful"],
                "failureCount": summary["failed"],
            },
        )

        return {"results": results, "summary": summary}

    def _check_organization(self, document_ids: List[str], organization_id: str) -> None:
        for doc in self.store.find_by_ids(document_ids):
            if doc.organization_id != organization_id:
                raise DuplicateMergeConflict(f"Document {doc.id} is not in organization {organization_id}")
