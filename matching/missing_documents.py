"""
Missing-document finder.

Full scan of the requirement catalog against an organization's documents:
every requirement that no document satisfies (directly or through a
relationship) with confidence above the threshold is reported missing.
"""

import logging
from typing import List, Optional

from core.config import MatchingConfig, DEFAULT_MATCHING_CONFIG
from core.exceptions import MatchEngineError

from .interfaces import DocumentStore, RequirementCatalog
from .models import (
    CoverageEntry,
    DocumentRecord,
    MatchResult,
    MissingRequirement,
    StandardRequirement,
    StandardType,
)
from .relationship_matcher import OrganizationContext, RelationshipDocumentMatcher

logger = logging.getLogger(__name__)


class MissingDocumentFinder:
    """
    Reports required documents an organization does not hold.

    Usage:
        finder = MissingDocumentFinder(store, catalog)
        missing = finder.find_missing_documents(org_id, StandardType.ISO_9001_2015)
    """

    def __init__(
        self,
        store: DocumentStore,
        catalog: RequirementCatalog,
        matcher: Optional[RelationshipDocumentMatcher] = None,
        config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    ):
        self.store = store
        self.catalog = catalog
        self.config = config
        self.matcher = matcher or RelationshipDocumentMatcher(store, config=config)

    def _requirements(self, standard: Optional[StandardType]) -> List[StandardRequirement]:
        if standard is not None:
            return self.catalog.list_requirements(standard)
        requirements: List[StandardRequirement] = []
        for each in StandardType:
            requirements.extend(self.catalog.list_requirements(each))
        return requirements

    def _evaluate(self, requirement: StandardRequirement, context: OrganizationContext) -> MatchResult:
        try:
            return self.matcher.check_with_context(requirement, context)
        except Exception as e:
            raise MatchEngineError(requirement.id, e) from e

    def _is_fulfilled(self, result: MatchResult) -> bool:
        return result.is_match and result.confidence > self.config.missing_threshold

    def find_missing_documents(
        self,
        organization_id: str,
        standard: Optional[StandardType] = None,
    ) -> List[MissingRequirement]:
        """
        List catalog requirements the organization has no document for.

        Args:
            organization_id: Organization to scan
            standard: Restrict to one standard; both when omitted

        Returns:
            Missing requirements in catalog order. A requirement whose
            evaluation failed is reported with evaluation_error set.
        """
        documents = self.store.find_all_by_organization(organization_id)
        context = OrganizationContext.build(documents)

        missing: List[MissingRequirement] = []
        for requirement in self._requirements(standard):
            try:
                result = self._evaluate(requirement, context)
            except MatchEngineError as e:
                logger.error(
                    f"Scoring failed for requirement {requirement.title}: {e.message}",
                    exc_info=True,
                    extra={"organization_id": organization_id, "requirement_id": requirement.id},
                )
                missing.append(MissingRequirement.from_requirement(requirement, evaluation_error=True))
                continue

            if self._is_fulfilled(result):
                logger.info(
                    f"{requirement.title} fulfilled by {result.matched_by.document_title} "
                    f"({result.match_type.value}, {result.confidence:.2f})",
                    extra={"organization_id": organization_id, "requirement_id": requirement.id},
                )
            else:
                missing.append(MissingRequirement.from_requirement(requirement))

        logger.info(
            f"Organization {organization_id}: {len(missing)} missing of "
            f"{len(documents)} documents scanned"
        )
        return missing

    def coverage_report(
        self,
        organization_id: str,
        standard: Optional[StandardType] = None,
        documents: Optional[List[DocumentRecord]] = None,
    ) -> List[CoverageEntry]:
        """Fulfillment status and fulfilling document for every requirement"""
        if documents is None:
            documents = self.store.find_all_by_organization(organization_id)
        context = OrganizationContext.build(documents)

        report: List[CoverageEntry] = []
        for requirement in self._requirements(standard):
            try:
                result = self._evaluate(requirement, context)
            except MatchEngineError as e:
                logger.error(f"Scoring failed for requirement {requirement.title}: {e.message}", exc_info=True)
                result = MatchResult.no_match()
            report.append(CoverageEntry(requirement, self._is_fulfilled(result), result))
        return report
