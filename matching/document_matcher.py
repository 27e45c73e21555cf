"""
Document Matcher

Decides whether an existing document satisfies a required document of a
standard. Strategies run in a fixed order (clause, title, keyword) and the
first positive result wins: explicit clause tags are a stronger signal than
fuzzy text, so a clause match is never overridden by a title match.
"""

import logging
from typing import List, Optional

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG

from .models import DocumentRecord, MatchResult, StandardRequirement
from .strategies import MatchStrategy, default_strategies

logger = logging.getLogger(__name__)


class DocumentMatcher:
    """
    Ordered cascade of direct match strategies.

    Usage:
        matcher = DocumentMatcher()
        result = matcher.match_document(doc, requirement)
    """

    def __init__(
        self,
        strategies: Optional[List[MatchStrategy]] = None,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ):
        self.config = config
        self.strategies = strategies if strategies is not None else default_strategies(config)

    def match_document(self, doc: DocumentRecord, requirement: StandardRequirement) -> MatchResult:
        """
        Match one document against one requirement.

        Args:
            doc: Organization document with its clause mappings
            requirement: Catalog entry for a required document

        Returns:
            First positive strategy result, or a no-match result with
            confidence 0 and match type "none"
        """
        for strategy in self.strategies:
            result = strategy.attempt_match(doc, requirement)
            if result is not None and result.is_match:
                logger.debug(
                    f"'{doc.title}' matches '{requirement.title}' by {strategy.name} "
                    f"({result.confidence:.2f})"
                )
                return result

        return MatchResult.no_match()
