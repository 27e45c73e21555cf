"""
ComplyDocs Integration Tests: Missing Documents and Coverage
============================================================

Runs the relationship-aware matcher against documents stored in SQLite
and the seeded requirement catalog.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from matching.missing_documents import MissingDocumentFinder
from matching.models import DocumentType, StandardType
from matching.relationship_matcher import RelationshipDocumentMatcher


class FlakyMatcher(RelationshipDocumentMatcher):
    """Fails while scoring one requirement"""

    def __init__(self, store, failing_title):
        super().__init__(store)
        self.failing_title = failing_title

    def check_with_context(self, requirement, context):
        if requirement.title == self.failing_title:
            raise RuntimeError("scoring blew up")
        return super().check_with_context(requirement, context)


@pytest.fixture
def finder(store, requirement_repository):
    return MissingDocumentFinder(store, requirement_repository)


@pytest.fixture
def quality_documents(make_document):
    return [
        make_document("Quality Policy", document_type=DocumentType.POLICY, clause_numbers=["5.2"]),
        make_document(
            "Quality Objectives",
            document_type=DocumentType.PLAN,
            clause_numbers=["6.2", "6.2.1", "6.2.2"],
        ),
    ]


def titles(missing):
    return [m.title for m in missing]


@pytest.mark.integration
class TestFindMissingDocuments:
    """Tests for MissingDocumentFinder.find_missing_documents"""

    def test_held_documents_are_not_missing(self, finder, organization, quality_documents):
        missing = titles(finder.find_missing_documents(organization.id, StandardType.ISO_9001_2015))

        assert "Quality Policy" not in missing
        assert "Quality Objectives" not in missing
        assert "Internal Audit Reports" in missing
        assert "Customer Journey Map" in missing

    def test_single_clause_tag_does_not_fulfill(self, finder, make_document, organization):
        # One of three clauses scores 0.4 and the clause match takes precedence over the title
        make_document("Quality Objectives", document_type=DocumentType.PLAN, clause_numbers=["6.2"])
        missing = titles(finder.find_missing_documents(organization.id, StandardType.ISO_9001_2015))

        assert "Quality Objectives" in missing

    def test_empty_organization_misses_everything(self, finder, organization, requirement_repository):
        missing = finder.find_missing_documents(organization.id, StandardType.ISO_27001_2022)
        catalog = requirement_repository.list_requirements(StandardType.ISO_27001_2022)

        assert [m.requirement_id for m in missing] == [r.id for r in catalog]
        assert not any(m.evaluation_error for m in missing)

    def test_both_standards_when_unspecified(self, finder, organization):
        standards = {m.standard for m in finder.find_missing_documents(organization.id)}
        assert standards == set(StandardType)

    def test_manual_covers_declared_requirements(self, finder, make_document, organization):
        make_document("Quality Manual", document_type=DocumentType.MANUAL)
        missing = titles(finder.find_missing_documents(organization.id, StandardType.ISO_9001_2015))

        assert "Quality Policy" not in missing
        assert "Quality Objectives" not in missing

    def test_scoring_failure_is_isolated(self, store, requirement_repository, organization, quality_documents):
        finder = MissingDocumentFinder(
            store, requirement_repository, matcher=FlakyMatcher(store, "Quality Policy")
        )
        missing = finder.find_missing_documents(organization.id, StandardType.ISO_9001_2015)
        by_title = {m.title: m for m in missing}

        assert by_title["Quality Policy"].evaluation_error is True
        assert "Quality Objectives" not in by_title
        assert by_title["Internal Audit Reports"].evaluation_error is False


@pytest.mark.integration
class TestCoverageReport:
    """Tests for MissingDocumentFinder.coverage_report"""

    def test_report_lists_every_requirement(self, finder, organization, quality_documents, requirement_repository):
        report = finder.coverage_report(organization.id, StandardType.ISO_9001_2015)
        catalog = requirement_repository.list_requirements(StandardType.ISO_9001_2015)

        assert [entry.requirement.id for entry in report] == [r.id for r in catalog]

        by_title = {entry.requirement.title: entry for entry in report}
        assert by_title["Quality Policy"].fulfilled
        assert by_title["Quality Policy"].result.matched_by.document_title == "Quality Policy"
        assert not by_title["Customer Journey Map"].fulfilled

    def test_report_agrees_with_missing_list(self, finder, organization, quality_documents):
        report = finder.coverage_report(organization.id, StandardType.ISO_9001_2015)
        missing = finder.find_missing_documents(organization.id, StandardType.ISO_9001_2015)

        assert [e.requirement.title for e in report if not e.fulfilled] == titles(missing)
