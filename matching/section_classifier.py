"""
Section-to-clause classification.

Maps the sections of a parsed document onto clauses of a standard. A
section whose title starts with a known clause number ("5.2 Policy") maps
to that clause directly; any other section is fuzzy-searched against clause
titles and clause keyword sets.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from rapidfuzz import fuzz

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG

from .interfaces import ClauseCatalog, DocumentStore
from .models import ClauseMappingRecord, ISOClauseRecord, StandardType

if TYPE_CHECKING:
    from parsing.document_parser import DocumentSection, ParsedDocument

logger = logging.getLogger(__name__)

CLAUSE_NUMBER_PREFIX = re.compile(r"^\s*(\d+\.?\d*\.?\d*)")

# Keyword partial ratio counted as a hit
KEYWORD_HIT_RATIO = 90


@dataclass
class SectionClauseMapping:
    """Proposed link between a document section and a clause"""
    clause_number: str
    clause_title: str
    confidence: float
    keywords: List[str] = field(default_factory=list)
    matched_content: str = ""
    standard: Optional[StandardType] = None
    clause_id: Optional[str] = None


def _keyword_score(keywords: Sequence[str], text: str) -> float:
    if not keywords:
        return 0.0
    ratios = [fuzz.partial_ratio(keyword.lower(), text) for keyword in keywords]
    hits = sum(1 for ratio in ratios if ratio >= KEYWORD_HIT_RATIO)
    return (max(ratios) / 100.0) * (0.7 + 0.3 * hits / len(keywords))


def fuzzy_clause_score(clause: ISOClauseRecord, text: str) -> float:
    """Best of title and keyword-set similarity, in [0, 1]"""
    if not text:
        return 0.0
    title_score = fuzz.partial_ratio(clause.title.lower(), text) / 100.0
    return max(title_score, _keyword_score(clause.keywords, text))


class SectionClassifier:
    """
    Usage:
        classifier = SectionClassifier(catalog, store)
        mappings = classifier.classify_sections(parsed, StandardType.ISO_9001_2015)
        classifier.persist_mappings(document_id, mappings, min_confidence=0.6)
    """

    def __init__(
        self,
        clause_catalog: ClauseCatalog,
        store: Optional[DocumentStore] = None,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ):
        self.clause_catalog = clause_catalog
        self.store = store
        self.config = config

    def _mapping(self, clause: ISOClauseRecord, confidence: float, section: "DocumentSection") -> SectionClauseMapping:
        return SectionClauseMapping(
            clause_number=clause.clause_number,
            clause_title=clause.title,
            confidence=confidence,
            keywords=list(clause.keywords),
            matched_content=section.content[:200] + "...",
            standard=clause.standard,
            clause_id=clause.id,
        )

    def _direct_match(self, section: "DocumentSection", standard: StandardType) -> Optional[ISOClauseRecord]:
        match = CLAUSE_NUMBER_PREFIX.match(section.title)
        if not match:
            return None
        return self.clause_catalog.get_clause(standard, match.group(1).rstrip("."))

    def _fuzzy_matches(
        self,
        section: "DocumentSection",
        clauses: List[ISOClauseRecord],
    ) -> List[SectionClauseMapping]:
        text = f"{section.title} {section.content}".lower()
        floor = 1.0 - self.config.fuzzy_distance_threshold

        scored = []
        for clause in clauses:
            confidence = fuzzy_clause_score(clause, text)
            if confidence >= floor and confidence > self.config.fuzzy_min_confidence:
                scored.append((confidence, clause))

        # Stable sort keeps catalog order among equal scores
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [self._mapping(clause, confidence, section) for confidence, clause in scored[:self.config.fuzzy_top_k]]

    def classify_sections(
        self,
        parsed: "ParsedDocument",
        standard: StandardType,
    ) -> Dict[str, List[SectionClauseMapping]]:
        """
        Propose clause mappings for every section of a parsed document.

        Args:
            parsed: Parser output
            standard: Standard whose clauses are candidates

        Returns:
            Section title -> proposed mappings. Sections without any
            mapping are absent; sections sharing a title share a list.
        """
        clauses = self.clause_catalog.list_clauses(standard)
        mappings: Dict[str, List[SectionClauseMapping]] = {}

        for section in parsed.sections:
            direct = self._direct_match(section, standard)
            if direct is not None:
                found = [self._mapping(direct, self.config.section_clause_confidence, section)]
            else:
                found = self._fuzzy_matches(section, clauses)

            if found:
                mappings.setdefault(section.title, []).extend(found)

        logger.debug(f"Classified {len(parsed.sections)} sections into {len(mappings)} mapped sections")
        return mappings

    def persist_mappings(
        self,
        document_id: str,
        mappings: Dict[str, List[SectionClauseMapping]],
        min_confidence: float = 0.0,
    ) -> List[ClauseMappingRecord]:
        """
        Write confirmed mappings as clause mappings of a document.

        One mapping per clause is kept, at its highest confidence; the store
        keeps the higher of that and any existing confidence.
        """
        if self.store is None:
            raise ValueError("SectionClassifier needs a document store to persist mappings")

        best: Dict[str, SectionClauseMapping] = {}
        for section_mappings in mappings.values():
            for mapping in section_mappings:
                if mapping.confidence < min_confidence or mapping.clause_id is None:
                    continue
                current = best.get(mapping.clause_id)
                if current is None or mapping.confidence > current.confidence:
                    best[mapping.clause_id] = mapping

        records = [
            ClauseMappingRecord(
                clause_id=mapping.clause_id,
                clause_number=mapping.clause_number,
                standard=mapping.standard,
                confidence=mapping.confidence,
                keywords=list(mapping.keywords),
            )
            for mapping in best.values()
        ]
        for record in records:
            self.store.add_clause_mapping(document_id, record)

        logger.info(f"Persisted {len(records)} clause mappings", extra={"document_id": document_id})
        return records
