"""
Direct matching strategies: clause numbers, titles, keywords.

Each strategy answers one question about a (document, requirement) pair and
returns a positive MatchResult or None. The DocumentMatcher runs them in a
fixed priority order.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG

from .models import DocumentRecord, MatchResult, MatchType, StandardRequirement
from .similarity import abbreviation_match, similarity
from .text_utils import normalize_document_name, normalize_title


def clause_prefix_related(a: str, b: str) -> bool:
    """True when either clause number is a string prefix of the other ("6.1" / "6.10", "6.2" / "6.2.1")"""
    return a.startswith(b) or b.startswith(a)


def match_by_clause(
    doc_clause_numbers: Iterable[str],
    requirement_clause_numbers: Sequence[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> MatchResult:
    """
    Match a document's clause tags against a requirement's clause numbers.

    Exact intersection wins with a boosted confidence; otherwise sub-clause
    relations count at a discount and must clear a threshold.
    """
    doc_clauses = set(doc_clause_numbers)
    if not requirement_clause_numbers or not doc_clauses:
        return MatchResult.no_match()

    total = len(requirement_clause_numbers)

    exact = [clause for clause in requirement_clause_numbers if clause in doc_clauses]
    if exact:
        confidence = min((len(exact) / total) * config.clause_exact_boost, 1.0)
        return MatchResult(is_match=True, confidence=confidence, match_type=MatchType.CLAUSE)

    partial = [
        clause for clause in requirement_clause_numbers
        if any(clause_prefix_related(clause, doc_clause) for doc_clause in doc_clauses)
    ]
    if partial:
        confidence = (len(partial) / total) * config.clause_partial_factor
        return MatchResult(
            is_match=confidence > config.clause_partial_threshold,
            confidence=confidence,
            match_type=MatchType.CLAUSE,
        )

    return MatchResult.no_match()


def match_by_title(
    doc_title: str,
    requirement_title: str,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> MatchResult:
    """Fuzzy title match: abbreviation, exact, containment, then edit distance"""
    normalized_doc = normalize_title(doc_title)
    normalized_req = normalize_title(requirement_title)

    abbreviation = abbreviation_match(normalized_doc, normalized_req, config)
    if abbreviation.is_match:
        return MatchResult(is_match=True, confidence=abbreviation.confidence, match_type=MatchType.TITLE)

    if normalized_doc == normalized_req:
        return MatchResult(is_match=True, confidence=1.0, match_type=MatchType.TITLE)

    if not normalized_doc or not normalized_req:
        return MatchResult.no_match()

    if normalized_req in normalized_doc or normalized_doc in normalized_req:
        shorter = min(len(normalized_doc), len(normalized_req))
        longer = max(len(normalized_doc), len(normalized_req))
        confidence = shorter / longer
        return MatchResult(
            is_match=confidence > config.containment_threshold,
            confidence=confidence,
            match_type=MatchType.TITLE,
        )

    score = similarity(normalized_doc, normalized_req)
    return MatchResult(
        is_match=score > config.title_similarity_threshold,
        confidence=score,
        match_type=MatchType.TITLE,
    )


def match_by_keywords(
    doc_title: str,
    keywords: Sequence[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> MatchResult:
    """Share of requirement keywords found in the normalized title"""
    if not keywords:
        return MatchResult.no_match()

    normalized = normalize_title(doc_title)
    matched = [
        keyword for keyword in keywords
        if normalize_document_name(keyword) and normalize_document_name(keyword) in normalized
    ]
    if not matched:
        return MatchResult.no_match()

    ratio = len(matched) / len(keywords)
    return MatchResult(
        is_match=ratio > config.keyword_ratio_threshold,
        confidence=ratio * config.keyword_confidence_factor,
        match_type=MatchType.KEYWORD,
    )


class MatchStrategy(ABC):
    """One rule of the direct-match cascade"""

    name = "strategy"

    def __init__(self, config: MatchingConfig = DEFAULT_MATCHING_CONFIG):
        self.config = config

    @abstractmethod
    def attempt_match(self, doc: DocumentRecord, requirement: StandardRequirement) -> Optional[MatchResult]:
        """Positive MatchResult, or None to let the next strategy try"""


class ClauseMatchStrategy(MatchStrategy):
    """Explicit clause tags; only applies when both sides carry clauses of the same standard"""

    name = "clause"

    def attempt_match(self, doc, requirement):
        doc_clauses = doc.clause_numbers(requirement.standard)
        if not doc_clauses or not requirement.clause_numbers:
            return None
        result = match_by_clause(doc_clauses, requirement.clause_numbers, self.config)
        return result if result.is_match else None


class TitleMatchStrategy(MatchStrategy):
    name = "title"

    def attempt_match(self, doc, requirement):
        result = match_by_title(doc.title, requirement.title, self.config)
        return result if result.is_match else None


class KeywordMatchStrategy(MatchStrategy):
    name = "keyword"

    def attempt_match(self, doc, requirement):
        result = match_by_keywords(doc.title, requirement.keywords, self.config)
        return result if result.is_match else None


def default_strategies(config: MatchingConfig = DEFAULT_MATCHING_CONFIG) -> List[MatchStrategy]:
    """Clause, then title, then keyword"""
    return [
        ClauseMatchStrategy(config),
        TitleMatchStrategy(config),
        KeywordMatchStrategy(config),
    ]
