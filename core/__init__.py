"""ComplyDocs Core - configuration, exceptions and logging"""

from .config import (
    AppConfig,
    ClassificationConfig,
    DatabaseConfig,
    DEFAULT_MATCHING_CONFIG,
    Environment,
    MatchingConfig,
    ParsingConfig,
)
from .exceptions import (
    CircularReferenceError,
    ComplyDocsError,
    DocumentNotFound,
    DuplicateMergeConflict,
    InvalidReference,
    MatchEngineError,
    ParseFailure,
    UnsupportedFileType,
)
from .logging_config import setup_logging

__all__ = [
    "AppConfig",
    "ClassificationConfig",
    "DatabaseConfig",
    "DEFAULT_MATCHING_CONFIG",
    "Environment",
    "MatchingConfig",
    "ParsingConfig",
    "CircularReferenceError",
    "ComplyDocsError",
    "DocumentNotFound",
    "DuplicateMergeConflict",
    "InvalidReference",
    "MatchEngineError",
    "ParseFailure",
    "UnsupportedFileType",
    "setup_logging",
]
