"""
ComplyDocs Configuration
Environment-based configuration for the document matching engine
"""

import os
from typing import Optional, Dict
from dataclasses import dataclass, field
from enum import Enum


class Environment(str, Enum):
    """Deployment environment"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass(frozen=True)
class MatchingConfig:
    """
    Confidence constants and thresholds for every matcher.

    Ranking and missing-document reports depend on these exact values,
    so they live here rather than inline in the matchers.
    """
    # Clause matching
    clause_exact_boost: float = 1.2
    clause_partial_factor: float = 0.8
    clause_partial_threshold: float = 0.3

    # Title matching
    abbreviation_confidence: float = 0.9
    reverse_abbreviation_confidence: float = 0.85
    containment_threshold: float = 0.6
    title_similarity_threshold: float = 0.5

    # Keyword matching
    keyword_confidence_factor: float = 0.8
    keyword_ratio_threshold: float = 0.3

    # Relationship passes
    direct_match_threshold: float = 0.5
    manual_keyword_ratio: float = 0.3
    fulfills_confidence: float = 0.9
    can_be_fulfilled_by_confidence: float = 0.85
    parent_discount: float = 0.8
    child_discount: float = 0.9
    reference_discount: float = 0.7
    relationship_word_overlap: float = 0.5

    # Missing-document finder
    missing_threshold: float = 0.5

    # Duplicate detection
    duplicate_group_threshold: float = 0.7
    clause_jaccard_threshold: float = 0.8
    version_base_confidence: float = 0.9
    title_edit_threshold: float = 0.8

    # Section classification
    section_clause_confidence: float = 0.95
    fuzzy_distance_threshold: float = 0.4
    fuzzy_min_confidence: float = 0.5
    fuzzy_top_k: int = 3

    # Relationship discovery
    discovery_threshold: float = 0.5
    discovery_limit: int = 10


DEFAULT_MATCHING_CONFIG = MatchingConfig()


SUPPORTED_MIME_TYPES: Dict[str, str] = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/msword": "docx",
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xlsx",
    "text/plain": "text",
}


@dataclass
class DatabaseConfig:
    """Configuration for the document store"""
    url: str = "sqlite:///./complydocs.db"
    echo: bool = False

    def __post_init__(self):
        """Load from environment variables"""
        self.url = os.getenv("DATABASE_URL", self.url)
        # Heroku/Render style URLs
        if self.url.startswith("postgres://"):
            self.url = self.url.replace("postgres://", "postgresql://", 1)
        self.echo = os.getenv("DB_ECHO", str(self.echo)).lower() == "true"


@dataclass
class ParsingConfig:
    """Configuration for document parsing"""
    parse_timeout_seconds: float = 60.0
    supported_mime_types: Dict[str, str] = field(default_factory=lambda: dict(SUPPORTED_MIME_TYPES))
    pdf_placeholder: str = (
        "[PDF Document: {filename}]\n\n"
        "This PDF could not be parsed automatically. Please review the original document."
    )

    def __post_init__(self):
        """Load from environment variables"""
        self.parse_timeout_seconds = float(
            os.getenv("PARSE_TIMEOUT_SECONDS", self.parse_timeout_seconds)
        )


@dataclass
class ClassificationConfig:
    """Configuration for import-time clause classification"""
    auto_classify: bool = False
    auto_classify_min_confidence: float = 0.6
    default_standard: str = "ISO_9001_2015"

    def __post_init__(self):
        """Load from environment variables"""
        self.auto_classify = os.getenv("AUTO_CLASSIFY", str(self.auto_classify)).lower() == "true"
        self.auto_classify_min_confidence = float(
            os.getenv("AUTO_CLASSIFY_MIN_CONFIDENCE", self.auto_classify_min_confidence)
        )
        self.default_standard = os.getenv("DEFAULT_STANDARD", self.default_standard)


@dataclass
class AppConfig:
    """Master configuration for ComplyDocs"""
    environment: Environment = Environment.DEVELOPMENT

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    matching: MatchingConfig = DEFAULT_MATCHING_CONFIG

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self):
        """Load environment from env var"""
        env_str = os.getenv("COMPLYDOCS_ENV", "development")
        try:
            self.environment = Environment(env_str.lower())
        except ValueError:
            self.environment = Environment.DEVELOPMENT

        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()
        self.log_format = os.getenv("LOG_FORMAT", self.log_format)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables"""
        return cls(
            database=DatabaseConfig(),
            parsing=ParsingConfig(),
            classification=ClassificationConfig(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        if self.environment == Environment.PRODUCTION and self.database.url.startswith("sqlite"):
            issues.append("DATABASE_URL points at SQLite in production")
        if self.parsing.parse_timeout_seconds <= 0:
            issues.append("PARSE_TIMEOUT_SECONDS must be positive")
        if not 0.0 <= self.classification.auto_classify_min_confidence <= 1.0:
            issues.append("AUTO_CLASSIFY_MIN_CONFIDENCE must be between 0 and 1")

        from matching.models import StandardType
        known = [standard.value for standard in StandardType]
        if self.classification.default_standard not in known:
            issues.append(
                f"Unknown DEFAULT_STANDARD: {self.classification.default_standard} "
                f"(expected one of {', '.join(known)})"
            )
        if self.log_format not in ("text", "json"):
            issues.append(f"Unknown LOG_FORMAT: {self.log_format}")

        return issues
