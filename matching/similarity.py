"""
String similarity and abbreviation lookup for document titles.
"""

import re
from dataclasses import dataclass
from typing import Dict, List

from rapidfuzz.distance import Levenshtein

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG


# Full document names and the short forms people use for them.
DOCUMENT_ABBREVIATIONS: Dict[str, List[str]] = {
    "statement of applicability": ["soa", "statement applicability", "applicability statement"],
    "quality objectives": ["qo", "qual objectives", "quality obj"],
    "quality policy": ["qp", "qual policy"],
    "business continuity plan": ["bcp", "bus continuity", "continuity plan"],
    "risk assessment": ["ra", "risk assess"],
    "risk register": ["rr", "risk reg"],
    "training records": ["tr", "training rec"],
    "internal audit": ["ia", "int audit"],
    "management review": ["mr", "mgmt review", "management rev"],
    "information security policy": ["isp", "infosec policy", "info sec policy", "infosec"],
    "isms": ["information security management system"],
    "qms": ["quality management system"],
    "management review minutes": ["mr minutes", "mgmt review minutes", "mr", "management minutes"],
    "internal audit plan": ["ia plan", "audit plan", "ia schedule", "audit schedule"],
    "nonconformity": ["nc", "non conformity"],
    "corrective action": ["ca", "corrective actions"],
}


@dataclass
class AbbreviationMatch:
    is_match: bool
    confidence: float = 0.0
    full_form: str = ""
    abbreviation: str = ""


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute"""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Edit-distance similarity in [0, 1].

    (max_len - distance) / max_len; two empty strings are identical.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def _contains_phrase(text: str, phrase: str) -> bool:
    # Whole-word containment, so "ra" does not fire inside "random"
    return re.search(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)", text) is not None


def abbreviation_match(
    document_title: str,
    requirement_title: str,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> AbbreviationMatch:
    """
    Check whether one normalized title abbreviates the other.

    Args:
        document_title: Normalized title of the organization's document
        requirement_title: Normalized title of the required document

    Returns:
        AbbreviationMatch with the forward confidence when the requirement
        holds a full form and the document one of its abbreviations, or the
        reverse confidence when a single document word is an abbreviation
        whose full form the requirement holds
    """
    for full_form, abbreviations in DOCUMENT_ABBREVIATIONS.items():
        if not _contains_phrase(requirement_title, full_form):
            continue
        for abbreviation in abbreviations:
            if _contains_phrase(document_title, abbreviation):
                return AbbreviationMatch(True, config.abbreviation_confidence, full_form, abbreviation)

    for word in document_title.split(" "):
        for full_form, abbreviations in DOCUMENT_ABBREVIATIONS.items():
            if word in abbreviations and _contains_phrase(requirement_title, full_form):
                return AbbreviationMatch(True, config.reverse_abbreviation_confidence, full_form, word)

    return AbbreviationMatch(False)
