"""
ComplyDocs Integration Tests: Duplicate Detection and Resolution
================================================================

Tests:
- Grouping of versioned copies and idempotent detection
- Merge: mappings copied, collaboration rows moved, losers deleted
- Merge atomicity under a simulated mid-transaction failure
- Merge validation and bulk resolution isolation
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.exceptions import DocumentNotFound, DuplicateMergeConflict
from database.repositories import OrganizationRepository
from matching.duplicate_detector import DuplicateDetector, OrganizationLocks
from matching.models import DocumentStatus, RecommendedAction


@pytest.fixture
def detector(store, audit_log):
    return DuplicateDetector(store, audit_log, locks=OrganizationLocks())


def group_snapshot(result):
    return [
        (group.base_document, [(m.id, m.is_latest_version) for m in group.documents])
        for group in result.duplicate_groups
    ]


@pytest.mark.integration
class TestDetectDuplicates:
    """Tests for DuplicateDetector.detect_duplicates"""

    def test_versioned_copies_form_one_group(self, detector, make_document, organization):
        v1 = make_document("Information Security Policy v1.docx")
        v2 = make_document("Information_Security_Policy_V2.docx")
        make_document("Asset Inventory")

        result = detector.detect_duplicates(organization.id)

        assert result.total_documents == 3
        assert result.duplicates_found == 2
        [group] = result.duplicate_groups
        assert {m.id for m in group.documents} == {v1.id, v2.id}
        assert group.confidence == 0.9
        assert group.latest.id == v2.id
        assert group.recommended_action == RecommendedAction.KEEP_LATEST

    def test_detection_is_idempotent(self, detector, make_document, organization):
        make_document("Risk Register v1")
        make_document("Risk Register v2")
        make_document("Risk-Register", status=DocumentStatus.APPROVED)
        make_document("Quality Policy")
        make_document("Quality_Policy.docx")

        first = detector.detect_duplicates(organization.id)
        second = detector.detect_duplicates(organization.id)

        assert group_snapshot(first) == group_snapshot(second)
        assert [len(g.documents) for g in first.duplicate_groups] == [3, 2]

    def test_get_duplicate_group(self, detector, make_document, organization):
        make_document("Risk Register")
        make_document("risk_register")

        group = detector.get_duplicate_group(organization.id, "risk register")
        assert group is not None
        assert detector.get_duplicate_group(organization.id, "nothing") is None

    def test_organizations_are_isolated(self, detector, make_document, session, organization):
        other = OrganizationRepository(session).create("Other Ltd")
        make_document("Risk Register")
        make_document("Risk Register", organization_id=other.id)

        assert detector.detect_duplicates(organization.id).duplicate_groups == []


@pytest.mark.integration
class TestMergeDuplicates:
    """Tests for DuplicateDetector.merge_duplicates"""

    def test_merge_moves_everything_to_keeper(self, detector, store, audit_log, make_document, user):
        keeper = make_document("Quality Policy v2", clause_numbers=["5.2"])
        loser = make_document("Quality Policy v1", clause_numbers=["5.2", "5.2.1"])
        store.add_comment(loser.id, "Check wording.", user.id)
        store.add_task(loser.id, "Review with QA")

        result = detector.merge_duplicates([keeper.id, loser.id], keeper.id, user.id)

        assert result.success
        assert result.merged_ids == [loser.id]
        assert sorted(result.merged_document.clause_numbers()) == ["5.2", "5.2.1"]
        assert store.find_by_id(loser.id) is None
        assert [c.content for c in store.list_comments(keeper.id)] == ["Check wording."]

        [entry] = audit_log.list_by_action("MERGE_DUPLICATES")
        assert entry.entity_id == keeper.id
        assert entry.details["totalMerged"] == 1
        assert entry.details["reassigned"] == {"comments": 1, "reviews": 0, "tasks": 1}

    def test_failed_merge_changes_nothing(self, detector, store, audit_log, make_document, monkeypatch):
        keeper = make_document("Quality Policy v2", clause_numbers=["5.2"])
        loser = make_document("Quality Policy v1", clause_numbers=["5.2", "5.2.1"])
        store.add_comment(loser.id, "Check wording.")

        def failing_delete(document_id):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(store, "delete", failing_delete)
        with pytest.raises(RuntimeError):
            detector.merge_duplicates([keeper.id, loser.id], keeper.id, "user-1")
        monkeypatch.undo()

        assert store.find_by_id(loser.id) is not None
        assert store.find_by_id(keeper.id).clause_numbers() == ["5.2"]
        assert [c.document_id for c in store.list_comments(loser.id)] == [loser.id]
        assert store.list_comments(keeper.id) == []
        assert audit_log.list_by_action("MERGE_DUPLICATES") == []

    def test_merge_needs_two_documents(self, detector, make_document):
        doc = make_document("Quality Policy")
        with pytest.raises(DuplicateMergeConflict):
            detector.merge_duplicates([doc.id, doc.id], doc.id, "user-1")

    def test_keeper_must_be_in_the_list(self, detector, make_document):
        a = make_document("Quality Policy")
        b = make_document("Quality Policy")
        c = make_document("Quality Policy")
        with pytest.raises(DuplicateMergeConflict):
            detector.merge_duplicates([a.id, b.id], c.id, "user-1")
        assert detector.store.find_by_id(a.id) is not None

    def test_unknown_documents_are_rejected(self, detector, make_document):
        doc = make_document("Quality Policy")
        with pytest.raises(DuplicateMergeConflict):
            detector.merge_duplicates([doc.id, "missing"], doc.id, "user-1")

    def test_cross_organization_merge_is_rejected(self, detector, make_document, session):
        other = OrganizationRepository(session).create("Other Ltd")
        a = make_document("Quality Policy")
        b = make_document("Quality Policy", organization_id=other.id)
        with pytest.raises(DuplicateMergeConflict):
            detector.merge_duplicates([a.id, b.id], a.id, "user-1")


@pytest.mark.integration
class TestResolution:
    """Tests for delete and bulk resolution"""

    def test_delete_duplicate(self, detector, store, audit_log, make_document, organization):
        doc = make_document("Quality Policy copy")
        deleted = detector.delete_duplicate(doc.id, organization.id, "user-1")

        assert deleted.id == doc.id
        assert store.find_by_id(doc.id) is None
        assert len(audit_log.list_for_entity("ARTEFACT", doc.id)) == 1

    def test_delete_from_other_organization(self, detector, make_document):
        doc = make_document("Quality Policy")
        with pytest.raises(DocumentNotFound):
            detector.delete_duplicate(doc.id, "other-org", "user-1")

    def test_bulk_resolve_isolates_failures(self, detector, store, audit_log, make_document, organization):
        keeper = make_document("Risk Register v2")
        loser = make_document("Risk Register v1")
        stray = make_document("Risk Register old")

        outcome = detector.bulk_resolve(
            organization.id,
            [
                {"action": "merge", "document_ids": [keeper.id, loser.id], "keep_document_id": keeper.id},
                {"action": "merge", "document_ids": [stray.id, "missing"], "keep_document_id": stray.id},
                {"action": "archive", "document_ids": [stray.id]},
                {"action": "keep_all", "document_ids": [keeper.id, stray.id]},
            ],
            user_id="user-1",
        )

        assert outcome["summary"] == {"total": 4, "successful": 2, "failed": 2}
        assert [r["success"] for r in outcome["results"]] == [True, False, False, True]
        assert store.find_by_id(loser.id) is None
        assert store.find_by_id(stray.id) is not None

        [entry] = audit_log.list_by_action("BULK_RESOLVE_DUPLICATES")
        assert entry.details["failureCount"] == 2
