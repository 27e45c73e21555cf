"""
ComplyDocs Database Repositories
Data access layer; implements the matching engine's store and catalog interfaces
"""

from contextlib import contextmanager
from typing import Optional, List, Dict, Any, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, joinedload

from core.exceptions import DocumentNotFound, InvalidReference
from database.models import (
    Organization,
    User,
    Document,
    DocumentReference,
    ISOClause,
    ClauseMapping,
    StandardDocument,
    Comment,
    Review,
    Task,
    AuditLog,
)
from matching.interfaces import AuditSink, ClauseCatalog, DocumentStore, RequirementCatalog
from matching.models import (
    ClauseMappingRecord,
    DocumentMetadata,
    DocumentRecord,
    DocumentType,
    ISOClauseRecord,
    ReferenceEdge,
    ReferenceType,
    StandardRequirement,
    StandardType,
)


# ============================================
# Organization & User Repositories
# ============================================

class OrganizationRepository:
    """Repository for organization operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, name: str, organization_id: Optional[str] = None) -> Organization:
        organization = Organization(name=name)
        if organization_id:
            organization.id = organization_id
        self.session.add(organization)
        self.session.flush()
        return organization

    def get_by_id(self, organization_id: str) -> Optional[Organization]:
        return self.session.get(Organization, organization_id)

    def get_by_name(self, name: str) -> Optional[Organization]:
        return self.session.scalars(
            select(Organization).where(Organization.name == name)
        ).first()


class UserRepository:
    """Repository for user operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        organization_id: Optional[str],
        email: str,
        name: Optional[str] = None,
        role: str = "member",
    ) -> User:
        user = User(organization_id=organization_id, email=email, name=name, role=role)
        self.session.add(user)
        self.session.flush()
        return user

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.scalars(select(User).where(User.email == email)).first()


# ============================================
# Document Repository
# ============================================

# Columns update() may write, by record field name
_UPDATABLE_FIELDS = {
    "title", "content", "document_type", "status", "current_version",
    "owner_id", "parent_id", "file_url",
}


class DocumentRepository(DocumentStore):
    """
    Document persistence for the matching engine.

    Rows leave the repository as DocumentRecord values; callers never hold
    ORM objects.
    """

    def __init__(self, session: Session):
        self.session = session

    def _select(self):
        return (
            select(Document)
            .options(
                selectinload(Document.clause_mappings).joinedload(ClauseMapping.clause),
                selectinload(Document.references),
                joinedload(Document.owner),
            )
            .execution_options(populate_existing=True)
        )

    def _get(self, document_id: str) -> Document:
        doc = self.session.get(Document, document_id)
        if doc is None:
            raise DocumentNotFound(document_id)
        return doc

    @staticmethod
    def to_record(doc: Document) -> DocumentRecord:
        """Convert an ORM row into the engine's record type."""
        return DocumentRecord(
            id=doc.id,
            title=doc.title,
            organization_id=doc.organization_id,
            content=doc.content or "",
            document_type=doc.document_type,
            clause_mappings=[
                ClauseMappingRecord(
                    clause_id=mapping.clause_id,
                    clause_number=mapping.clause.clause_number,
                    standard=mapping.clause.standard,
                    confidence=mapping.confidence,
                    keywords=list(mapping.keywords or []),
                )
                for mapping in doc.clause_mappings
            ],
            parent_id=doc.parent_id,
            references=[
                ReferenceEdge(
                    target_id=ref.referenced_document_id,
                    reference_type=ref.reference_type,
                    description=ref.description,
                )
                for ref in doc.references
            ],
            status=doc.status,
            current_version=doc.current_version,
            owner_id=doc.owner_id,
            owner_name=doc.owner.name if doc.owner else None,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            metadata=DocumentMetadata.from_dict(doc.metadata_),
        )

    def find_by_id(self, document_id: str) -> Optional[DocumentRecord]:
        doc = self.session.scalars(self._select().where(Document.id == document_id)).unique().one_or_none()
        return self.to_record(doc) if doc else None

    def find_by_ids(self, document_ids: List[str]) -> List[DocumentRecord]:
        if not document_ids:
            return []
        docs = self.session.scalars(self._select().where(Document.id.in_(document_ids))).unique().all()
        by_id = {doc.id: doc for doc in docs}
        return [self.to_record(by_id[i]) for i in dict.fromkeys(document_ids) if i in by_id]

    def find_all_by_organization(self, organization_id: str) -> List[DocumentRecord]:
        docs = self.session.scalars(
            self._select()
            .where(Document.organization_id == organization_id)
            .order_by(
                Document.title,
                Document.current_version.desc(),
                Document.updated_at.desc(),
                Document.id,
            )
        ).unique().all()
        return [self.to_record(doc) for doc in docs]

    def create(self, record: DocumentRecord) -> DocumentRecord:
        doc = Document(
            id=record.id,
            organization_id=record.organization_id,
            title=record.title,
            content=record.content,
            document_type=record.document_type,
            status=record.status,
            current_version=record.current_version,
            owner_id=record.owner_id,
            parent_id=record.parent_id,
            metadata_=record.metadata.to_dict(),
        )
        if record.created_at:
            doc.created_at = record.created_at
        if record.updated_at:
            doc.updated_at = record.updated_at
        self.session.add(doc)
        self.session.flush()

        for mapping in record.clause_mappings:
            self.add_clause_mapping(doc.id, mapping)
        for edge in record.references:
            self.add_reference(doc.id, edge.target_id, edge.reference_type, edge.description)

        return self.find_by_id(doc.id)

    def update(self, document_id: str, **fields: Any) -> DocumentRecord:
        doc = self._get(document_id)
        for name, value in fields.items():
            if name == "metadata":
                doc.metadata_ = value.to_dict() if isinstance(value, DocumentMetadata) else dict(value or {})
            elif name in _UPDATABLE_FIELDS:
                setattr(doc, name, value)
            else:
                raise ValueError(f"Unknown document field: {name}")
        self.session.flush()
        return self.find_by_id(document_id)

    def delete(self, document_id: str) -> None:
        doc = self._get(document_id)
        self.session.delete(doc)
        self.session.flush()

    def add_clause_mapping(self, document_id: str, mapping: ClauseMappingRecord) -> None:
        doc = self._get(document_id)
        clause = self.session.get(ISOClause, mapping.clause_id)
        if clause is None:
            raise InvalidReference(f"Unknown clause: {mapping.clause_id}")

        existing = self.session.scalars(
            select(ClauseMapping).where(
                ClauseMapping.document_id == document_id,
                ClauseMapping.clause_id == mapping.clause_id,
            )
        ).first()
        if existing is not None:
            existing.confidence = max(existing.confidence, mapping.confidence)
        else:
            doc.clause_mappings.append(ClauseMapping(
                clause=clause,
                confidence=mapping.confidence,
                keywords=list(mapping.keywords),
            ))
        self.session.flush()

    def add_reference(
        self,
        referencing_id: str,
        referenced_id: str,
        reference_type: ReferenceType,
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> None:
        referencing = self._get(referencing_id)
        self._get(referenced_id)

        existing = self.session.scalars(
            select(DocumentReference).where(
                DocumentReference.referencing_document_id == referencing_id,
                DocumentReference.referenced_document_id == referenced_id,
                DocumentReference.reference_type == reference_type,
            )
        ).first()
        if existing is not None:
            if description:
                existing.description = description
        else:
            referencing.references.append(DocumentReference(
                referenced_document_id=referenced_id,
                reference_type=reference_type,
                description=description,
                created_by=created_by,
            ))
        self.session.flush()

    def reassign_related(self, from_ids: List[str], to_id: str) -> Dict[str, int]:
        keeper = self._get(to_id)
        counts = {}
        for name, model in (("comments", Comment), ("reviews", Review), ("tasks", Task)):
            rows = self.session.scalars(select(model).where(model.document_id.in_(from_ids))).all()
            for row in rows:
                # back_populates moves the row between the two collections
                row.document = keeper
            counts[name] = len(rows)
        self.session.flush()
        return counts

    def get_parent_id(self, document_id: str) -> Optional[str]:
        return self.session.scalar(select(Document.parent_id).where(Document.id == document_id))

    @contextmanager
    def transaction(self) -> Iterator["DocumentRepository"]:
        with self.session.begin_nested():
            yield self

    # Collaboration rows; not part of the engine interface

    def add_comment(self, document_id: str, content: str, user_id: Optional[str] = None) -> Comment:
        comment = Comment(document_id=document_id, content=content, user_id=user_id)
        self.session.add(comment)
        self.session.flush()
        return comment

    def add_review(self, document_id: str, reviewer_id: Optional[str] = None, status: str = "PENDING") -> Review:
        review = Review(document_id=document_id, reviewer_id=reviewer_id, status=status)
        self.session.add(review)
        self.session.flush()
        return review

    def add_task(self, document_id: str, title: str, assignee_id: Optional[str] = None) -> Task:
        task = Task(document_id=document_id, title=title, assignee_id=assignee_id)
        self.session.add(task)
        self.session.flush()
        return task

    def list_comments(self, document_id: str) -> List[Comment]:
        return list(self.session.scalars(
            select(Comment).where(Comment.document_id == document_id).order_by(Comment.created_at)
        ).all())


# ============================================
# Catalog Repositories
# ============================================

class ClauseRepository(ClauseCatalog):
    """ISO clauses stored by database.seed."""

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _to_record(clause: ISOClause, numbers: Dict[str, str]) -> ISOClauseRecord:
        return ISOClauseRecord(
            standard=clause.standard,
            clause_number=clause.clause_number,
            title=clause.title,
            parent_number=numbers.get(clause.parent_id) if clause.parent_id else None,
            keywords=tuple(clause.keywords or ()),
            id=clause.id,
        )

    def _rows(self, standard: StandardType) -> List[ISOClause]:
        return list(self.session.scalars(
            select(ISOClause)
            .where(ISOClause.standard == standard)
            .order_by(ISOClause.position, ISOClause.clause_number)
        ).all())

    def list_clauses(self, standard: StandardType) -> List[ISOClauseRecord]:
        rows = self._rows(standard)
        numbers = {row.id: row.clause_number for row in rows}
        return [self._to_record(row, numbers) for row in rows]

    def get_clause(self, standard: StandardType, clause_number: str) -> Optional[ISOClauseRecord]:
        clause = self.session.scalars(
            select(ISOClause).where(
                ISOClause.standard == standard,
                ISOClause.clause_number == clause_number,
            )
        ).first()
        if clause is None:
            return None
        numbers = {clause.parent.id: clause.parent.clause_number} if clause.parent else {}
        return self._to_record(clause, numbers)


class RequirementRepository(RequirementCatalog):
    """Required-document catalog stored by database.seed."""

    def __init__(self, session: Session):
        self.session = session

    @staticmethod
    def _to_record(row: StandardDocument) -> StandardRequirement:
        return StandardRequirement(
            id=row.id,
            title=row.title,
            standard=row.standard,
            category=row.category,
            description=row.description,
            clause_ref=row.clause_ref,
            importance=row.importance,
            keywords=tuple(row.keywords or ()),
            clause_numbers=tuple(row.clause_numbers or ()),
            document_type=row.document_type or DocumentType.DOCUMENT,
            can_be_fulfilled_by=tuple(row.can_be_fulfilled_by or ()),
            fulfills=tuple(row.fulfills or ()),
        )

    def list_requirements(self, standard: Optional[StandardType] = None) -> List[StandardRequirement]:
        standards = [standard] if standard is not None else list(StandardType)
        requirements = []
        for current in standards:
            rows = self.session.scalars(
                select(StandardDocument)
                .where(StandardDocument.standard == current)
                .order_by(StandardDocument.position)
            ).all()
            requirements.extend(self._to_record(row) for row in rows)
        return requirements


# ============================================
# Audit Log Repository
# ============================================

class AuditLogRepository(AuditSink):
    """Append-only audit trail."""

    def __init__(self, session: Session):
        self.session = session

    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        user_id: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.session.add(AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            details=details or {},
        ))
        self.session.flush()

    def list_for_entity(self, entity_type: str, entity_id: str) -> List[AuditLog]:
        return list(self.session.scalars(
            select(AuditLog)
            .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id)
            .order_by(AuditLog.created_at)
        ).all())

    def list_by_action(self, action: str) -> List[AuditLog]:
        return list(self.session.scalars(
            select(AuditLog).where(AuditLog.action == action).order_by(AuditLog.created_at)
        ).all())
