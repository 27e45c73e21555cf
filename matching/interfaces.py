"""
Collaborator interfaces consumed by the matching engine.

The engine receives implementations of these explicitly; the SQLAlchemy
repositories in database.repositories are the production implementations.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .models import (
    ClauseMappingRecord,
    DocumentRecord,
    ISOClauseRecord,
    ReferenceType,
    StandardRequirement,
    StandardType,
)


class DocumentStore(ABC):
    """Read/write access to organization documents"""

    @abstractmethod
    def find_by_id(self, document_id: str) -> Optional[DocumentRecord]:
        ...

    @abstractmethod
    def find_by_ids(self, document_ids: List[str]) -> List[DocumentRecord]:
        ...

    @abstractmethod
    def find_all_by_organization(self, organization_id: str) -> List[DocumentRecord]:
        """All documents of an organization ordered by title, version desc, updated desc"""

    @abstractmethod
    def create(self, record: DocumentRecord) -> DocumentRecord:
        ...

    @abstractmethod
    def update(self, document_id: str, **fields: Any) -> DocumentRecord:
        """Partial update of scalar fields"""

    @abstractmethod
    def delete(self, document_id: str) -> None:
        ...

    @abstractmethod
    def add_clause_mapping(self, document_id: str, mapping: ClauseMappingRecord) -> None:
        """Create or raise the confidence of the (document, clause) mapping"""

    @abstractmethod
    def add_reference(
        self,
        referencing_id: str,
        referenced_id: str,
        reference_type: ReferenceType,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    def reassign_related(self, from_ids: List[str], to_id: str) -> Dict[str, int]:
        """Move comments, reviews and tasks; returns counts per kind"""

    @abstractmethod
    def get_parent_id(self, document_id: str) -> Optional[str]:
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["DocumentStore"]:
        """Atomic unit of work; an exception inside rolls back every write"""


class RequirementCatalog(ABC):
    """Read-only catalog of documents each standard requires"""

    @abstractmethod
    def list_requirements(self, standard: Optional[StandardType] = None) -> List[StandardRequirement]:
        ...


class ClauseCatalog(ABC):
    """Read-only catalog of numbered ISO clauses"""

    @abstractmethod
    def list_clauses(self, standard: StandardType) -> List[ISOClauseRecord]:
        ...

    @abstractmethod
    def get_clause(self, standard: StandardType, clause_number: str) -> Optional[ISOClauseRecord]:
        ...


class AuditSink(ABC):
    """Append-only audit trail"""

    @abstractmethod
    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        user_id: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...
