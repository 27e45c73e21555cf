"""
ComplyDocs Unit Tests: Direct Matching
======================================

Tests:
- Clause, title and keyword scoring
- Strategy cascade order in DocumentMatcher
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from matching.document_matcher import DocumentMatcher
from matching.models import MatchType, StandardType
from matching.strategies import (
    ClauseMatchStrategy,
    KeywordMatchStrategy,
    TitleMatchStrategy,
    match_by_clause,
    match_by_keywords,
    match_by_title,
)
from tests.conftest import build_document, build_requirement


QUALITY_OBJECTIVES_CLAUSES = ["6.2", "6.2.1", "6.2.2"]


@pytest.fixture
def quality_objectives():
    return build_requirement(
        "Quality Objectives",
        clause_numbers=QUALITY_OBJECTIVES_CLAUSES,
        keywords=["quality", "objectives", "goals", "targets", "measurable", "improvement"],
    )


@pytest.mark.unit
class TestClauseScoring:
    """Tests for match_by_clause"""

    def test_exact_intersection(self):
        result = match_by_clause(["6.2"], QUALITY_OBJECTIVES_CLAUSES)
        assert result.is_match
        assert result.match_type == MatchType.CLAUSE
        assert result.confidence == pytest.approx(0.4)

    def test_exact_confidence_is_capped(self):
        result = match_by_clause(QUALITY_OBJECTIVES_CLAUSES, QUALITY_OBJECTIVES_CLAUSES)
        assert result.confidence == 1.0

    def test_partial_match_below_threshold(self):
        # Only "6.2" is related to "6.2.9"
        result = match_by_clause(["6.2.9"], QUALITY_OBJECTIVES_CLAUSES)
        assert not result.is_match
        assert result.confidence == pytest.approx(0.8 / 3)

    def test_partial_match_above_threshold(self):
        result = match_by_clause(["6.2.1.4"], ["6.2", "6.2.1"])
        assert result.is_match
        assert result.confidence == pytest.approx(0.8)

    def test_string_prefix_counts_as_partial(self):
        result = match_by_clause(["6.10"], ["6.1"])
        assert result.is_match
        assert result.match_type == MatchType.CLAUSE
        assert result.confidence == pytest.approx(0.8)

        reverse = match_by_clause(["6.1"], ["6.10"])
        assert reverse.confidence == pytest.approx(0.8)

    def test_partial_never_beats_exact(self):
        requirement_clauses = ["8.4", "8.4.1"]
        exact = match_by_clause(["8.4"], requirement_clauses)
        partial = match_by_clause(["8.4.9"], requirement_clauses)
        assert partial.confidence <= exact.confidence

    def test_no_clauses(self):
        result = match_by_clause([], QUALITY_OBJECTIVES_CLAUSES)
        assert not result.is_match
        assert result.match_type == MatchType.NONE


@pytest.mark.unit
class TestTitleScoring:
    """Tests for match_by_title"""

    def test_exact_after_normalization(self):
        result = match_by_title("Quality_Objectives_v2_FINAL.xlsx", "Quality Objectives")
        assert result.is_match
        assert result.confidence == 1.0

    def test_containment(self):
        result = match_by_title("risk-register-2024.xlsx", "Risk Register")
        assert result.is_match
        assert result.match_type == MatchType.TITLE
        assert result.confidence >= 0.6

    def test_abbreviation(self):
        result = match_by_title("SoA.xlsx", "Statement of Applicability")
        assert result.is_match
        assert result.confidence == 0.9

    def test_unrelated(self):
        assert not match_by_title("random_file.txt", "Quality Objectives").is_match


@pytest.mark.unit
class TestKeywordScoring:
    """Tests for match_by_keywords"""

    def test_ratio_above_threshold(self):
        result = match_by_keywords("Risk Log 2023.xlsx", ["risk", "log", "opportunities", "register", "assessment"])
        assert result.is_match
        assert result.match_type == MatchType.KEYWORD
        assert result.confidence == pytest.approx(0.4 * 0.8)

    def test_ratio_below_threshold(self):
        result = match_by_keywords("Risk overview", ["risk", "log", "opportunities", "register", "assessment"])
        assert not result.is_match

    def test_no_keywords(self):
        assert not match_by_keywords("Risk Log", []).is_match


@pytest.mark.unit
class TestDocumentMatcher:
    """Tests for the clause -> title -> keyword cascade"""

    def test_clause_mapping_scores_by_clause(self, quality_objectives):
        doc = build_document("Quality_objectives.xlsx", clause_numbers=["6.2"])
        result = DocumentMatcher().match_document(doc, quality_objectives)

        assert result.is_match
        assert result.match_type == MatchType.CLAUSE
        assert result.confidence == pytest.approx(0.4)

    def test_clause_takes_precedence_over_better_title(self, quality_objectives):
        # The title alone would score 1.0
        doc = build_document("Quality Objectives", clause_numbers=["6.2"])
        result = DocumentMatcher().match_document(doc, quality_objectives)
        assert result.match_type == MatchType.CLAUSE

    def test_title_match_without_clauses(self):
        requirement = build_requirement(
            "Risk Register",
            keywords=["risk", "register", "log", "tracking", "repository"],
            standard=StandardType.ISO_27001_2022,
        )
        doc = build_document("risk-register-2024.xlsx")
        result = DocumentMatcher().match_document(doc, requirement)

        assert result.is_match
        assert result.match_type == MatchType.TITLE
        assert result.confidence >= 0.6

    def test_unrelated_document(self, quality_objectives):
        result = DocumentMatcher().match_document(build_document("random_file.txt"), quality_objectives)
        assert not result.is_match
        assert result.confidence == 0.0
        assert result.match_type == MatchType.NONE

    def test_clauses_of_other_standard_are_ignored(self, quality_objectives):
        doc = build_document("Supplier list", clause_numbers=["6.2"], standard=StandardType.ISO_27001_2022)
        assert ClauseMatchStrategy().attempt_match(doc, quality_objectives) is None

    def test_strategy_order_is_configurable(self, quality_objectives):
        doc = build_document("Quality Objectives", clause_numbers=["6.2"])
        matcher = DocumentMatcher(strategies=[TitleMatchStrategy(), ClauseMatchStrategy(), KeywordMatchStrategy()])
        assert matcher.match_document(doc, quality_objectives).match_type == MatchType.TITLE
