"""
ComplyDocs Unit Tests: Section Classification and Catalog
=========================================================

Tests:
- Direct clause-number mapping
- Fuzzy clause search bounds
- Static ISO catalog structure
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from matching.iso_catalog import build_clause_records, build_requirements
from matching.models import DocumentMetadata, DocumentType, StandardType
from matching.section_classifier import SectionClassifier, fuzzy_clause_score
from parsing.document_parser import ParsedDocument, extract_sections


def parsed_from(text: str) -> ParsedDocument:
    return ParsedDocument(content=text, metadata=DocumentMetadata(), sections=extract_sections(text))


@pytest.fixture
def classifier(static_catalog):
    return SectionClassifier(static_catalog)


@pytest.mark.unit
class TestSectionClassifier:
    """Tests for SectionClassifier.classify_sections"""

    def test_clause_number_prefix_maps_directly(self, classifier):
        parsed = parsed_from("5.2 Policy\nTop management shall establish a quality policy.")
        mappings = classifier.classify_sections(parsed, StandardType.ISO_9001_2015)

        assert list(mappings) == ["5.2 Policy"]
        [mapping] = mappings["5.2 Policy"]
        assert mapping.clause_number == "5.2"
        assert mapping.confidence == 0.95
        assert mapping.clause_id == "ISO_9001_2015:5.2"
        assert mapping.matched_content.endswith("...")

    def test_unknown_clause_number_falls_back_to_fuzzy_search(self, classifier):
        parsed = parsed_from("99.1 Document Control\nDocumented information is controlled and retained.")
        mappings = classifier.classify_sections(parsed, StandardType.ISO_9001_2015)

        found = mappings["99.1 Document Control"]
        assert found
        assert found[0].clause_number == "7.5"
        assert all(not m.clause_number.startswith("99") for m in found)
        assert len(found) <= 3

    def test_fuzzy_title_match(self, classifier):
        parsed = parsed_from("Document Control\nDocumented information is controlled and retained.")
        mappings = classifier.classify_sections(parsed, StandardType.ISO_9001_2015)

        found = mappings["Document Control"]
        assert found[0].clause_number == "7.5"
        assert found[0].confidence == pytest.approx(1.0)
        assert len(found) <= 3
        assert all(m.confidence >= 0.6 for m in found)
        assert [m.confidence for m in found] == sorted((m.confidence for m in found), reverse=True)

    def test_unrelated_section_is_unmapped(self, classifier):
        parsed = parsed_from("Xyzzy\nQwv zzk xyx.")
        assert classifier.classify_sections(parsed, StandardType.ISO_9001_2015) == {}

    def test_persist_requires_store(self, classifier):
        with pytest.raises(ValueError):
            classifier.persist_mappings("doc-1", {})

    def test_fuzzy_score_is_bounded(self, static_catalog):
        for clause in static_catalog.list_clauses(StandardType.ISO_27001_2022):
            score = fuzzy_clause_score(clause, "information security policy and access control")
            assert 0.0 <= score <= 1.0


@pytest.mark.unit
class TestIsoCatalog:
    """Tests for the built-in clause and requirement tables"""

    @pytest.mark.parametrize("standard", list(StandardType))
    def test_parents_precede_children(self, standard):
        seen = set()
        for record in build_clause_records(standard):
            if record.parent_number is not None:
                assert record.parent_number in seen
            seen.add(record.clause_number)

    @pytest.mark.parametrize("standard", list(StandardType))
    def test_clause_numbers_unique(self, standard):
        numbers = [record.clause_number for record in build_clause_records(standard)]
        assert len(numbers) == len(set(numbers))

    def test_annex_a_controls_only_in_27001(self, static_catalog):
        assert static_catalog.get_clause(StandardType.ISO_27001_2022, "A.5.15") is not None
        assert static_catalog.get_clause(StandardType.ISO_9001_2015, "A.5.15") is None

    def test_requirement_ids_follow_catalog_order(self):
        requirements = build_requirements(StandardType.ISO_9001_2015)
        assert requirements[0].id == "9001-01"
        assert requirements[0].title == "Quality Policy"
        assert requirements[0].document_type == DocumentType.POLICY

    def test_isms_manual_declares_what_it_fulfills(self, requirement_by_title):
        manual = requirement_by_title("Quality & ISMS Manual")
        assert "Information Security Policy" in manual.fulfills
        assert manual.category == "Optional"
