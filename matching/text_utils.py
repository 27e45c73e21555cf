"""
Text utilities for ComplyDocs document matching.

Title normalization strips the noise people put in filenames (separators,
dates, version and revision tokens, workflow qualifiers) so that
"Quality_Objectives_v2_FINAL.xlsx" and "Quality Objectives" compare equal.
"""

from typing import List, Pattern, Tuple
import re

from .models import VersionInfo


FILE_EXTENSION_PATTERN = re.compile(
    r"\.(?:docx?|xlsx?|xlsm|pdf|txt|csv|pptx?|md|rtf|odt|ods)$"
)

_MONTHS = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*"

# Applied before separators are replaced, so "-" and "/" still delimit dates
DATE_PATTERNS: List[Pattern] = [
    re.compile(r"(?<!\d)\d{1,2}[\-/ ]" + _MONTHS + r"[\-/ ]\d{2,4}(?!\d)"),
    re.compile(r"(?<!\d)\d{4}[\-/]\d{1,2}[\-/]\d{1,2}(?!\d)"),
    re.compile(r"(?<!\d)\d{1,2}[\-/]\d{1,2}[\-/]\d{2,4}(?!\d)"),
]

VERSION_PATTERNS: List[Pattern] = [
    re.compile(r"(?<![a-z])v\d+(?:\.\d+)?(?![\d])"),
    re.compile(r"(?<![a-z])version\s*\d+(?:\.\d+)?(?!\d)"),
]

REVISION_PATTERNS: List[Pattern] = [
    re.compile(r"(?<![a-z])rev(?:ision)?\s*\d+(?!\d)"),
]

SEPARATOR_PATTERN = re.compile(r"[_\-.]")

QUALIFIER_PATTERN = re.compile(r"\b(?:draft|final|approved|pending)\b")

YEAR_PATTERN = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")

WHITESPACE_PATTERN = re.compile(r"\s+")

# Control characters other than \t, \n and \r, plus byte-order marks
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufeff\ufffe]")

VERSION_NUMBER_PATTERN = re.compile(r"(?<![a-z])v(?:ersion)?\s*(\d+(?:\.\d+)?)", re.IGNORECASE)

VERSION_DATE_PATTERNS: List[Pattern] = [
    re.compile(r"(\d{1,2}[\-/]\w{3}[\-/]\d{2,4})"),
    re.compile(r"(\d{4}[\-/]\d{1,2}[\-/]\d{1,2})"),
    re.compile(r"(\d{1,2}[\-/]\d{1,2}[\-/]\d{2,4})"),
]


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _normalize_once(text: str) -> str:
    result = text.lower().strip()
    result = FILE_EXTENSION_PATTERN.sub("", result)

    for pattern in DATE_PATTERNS:
        result = pattern.sub(" ", result)
    for pattern in VERSION_PATTERNS:
        result = pattern.sub(" ", result)
    for pattern in REVISION_PATTERNS:
        result = pattern.sub(" ", result)

    result = SEPARATOR_PATTERN.sub(" ", result)
    result = QUALIFIER_PATTERN.sub(" ", result)
    return _collapse(result)


def normalize_title(text: str) -> str:
    """
    Normalize a document title or filename for comparison.

    Rules are re-applied until the output stops changing, which makes the
    function idempotent even when removing one token exposes another
    (e.g. "version final 2" -> "version 2" -> "").

    Args:
        text: Raw title or filename

    Returns:
        Lowercase title without separators, dates, versions, revisions,
        workflow qualifiers or a trailing file extension
    """
    if not text:
        return ""

    current = text
    while True:
        normalized = _normalize_once(current)
        if normalized == current:
            return normalized
        current = normalized


def normalize_document_name(title: str) -> str:
    """Lowercase, separators to spaces, collapsed whitespace. Keeps versions and dates."""
    if not title:
        return ""
    return _collapse(SEPARATOR_PATTERN.sub(" ", title.lower()))


def strip_versioning(title: str) -> str:
    """Base name of a document: normalized title with standalone years removed too"""
    base = normalize_title(title)
    return _collapse(YEAR_PATTERN.sub(" ", base))


def extract_version_info(title: str) -> VersionInfo:
    """Pull the version number and date out of a raw title"""
    info = VersionInfo()
    if not title:
        return info

    version_match = VERSION_NUMBER_PATTERN.search(title)
    if version_match:
        info.version_number = version_match.group(1)

    for pattern in VERSION_DATE_PATTERNS:
        date_match = pattern.search(title)
        if date_match:
            info.version_date = date_match.group(1)
            break

    return info


def version_as_float(info: VersionInfo) -> float:
    try:
        return float(info.version_number) if info.version_number else 0.0
    except ValueError:
        return 0.0


def clean_content(content: str) -> str:
    """Remove NUL bytes, control characters and BOMs that the database rejects"""
    if not content:
        return ""
    return CONTROL_CHAR_PATTERN.sub("", content).strip()


def significant_words(text: str, min_length: int = 3) -> List[str]:
    """Words longer than min_length - 1 characters, in order"""
    return [word for word in text.split(" ") if len(word) >= min_length]


def word_overlap(text_a: str, text_b: str, min_length: int = 3) -> Tuple[List[str], float]:
    """
    Common significant words and their share of the shorter word list.

    Returns:
        (common_words, overlap) where overlap is 0.0 when either side has
        no significant words
    """
    words_a = significant_words(text_a, min_length)
    words_b = significant_words(text_b, min_length)
    if not words_a or not words_b:
        return [], 0.0
    common = [word for word in words_a if word in words_b]
    return common, len(common) / min(len(words_a), len(words_b))
