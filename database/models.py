"""
ComplyDocs Database Models
SQLAlchemy models for organizations, controlled documents and the ISO catalog
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import (
    String,
    Text,
    Integer,
    Float,
    DateTime,
    ForeignKey,
    JSON,
    Index,
    UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import DeclarativeBase, relationship, Mapped, mapped_column

from matching.models import DocumentStatus, DocumentType, ReferenceType, StandardType


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ============================================
# Organizations & Users
# ============================================

class Organization(Base):
    """Tenant owning documents."""
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # Relationships
    users: Mapped[List["User"]] = relationship("User", back_populates="organization", cascade="all, delete-orphan")
    documents: Mapped[List["Document"]] = relationship(
        "Document", back_populates="organization", cascade="all, delete-orphan"
    )


class User(Base):
    """User within an organization."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    organization_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=True
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(50), default="member")  # admin, manager, member, viewer
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # Relationships
    organization: Mapped[Optional["Organization"]] = relationship("Organization", back_populates="users")

    __table_args__ = (
        Index("idx_users_organization", "organization_id"),
    )


# ============================================
# Documents
# ============================================

class Document(Base):
    """Controlled document (policy, procedure, record, ...) of an organization."""
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="")
    document_type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, native_enum=False, length=20), default=DocumentType.DOCUMENT
    )
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus, native_enum=False, length=20), default=DocumentStatus.DRAFT
    )
    current_version: Mapped[int] = mapped_column(Integer, default=1)
    owner_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="SET NULL"),
        nullable=True
    )
    file_url: Mapped[Optional[str]] = mapped_column(String(1000))
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    # Relationships
    organization: Mapped["Organization"] = relationship("Organization", back_populates="documents")
    owner: Mapped[Optional["User"]] = relationship("User")
    parent: Mapped[Optional["Document"]] = relationship(
        "Document", remote_side="Document.id", back_populates="children"
    )
    children: Mapped[List["Document"]] = relationship("Document", back_populates="parent")
    clause_mappings: Mapped[List["ClauseMapping"]] = relationship(
        "ClauseMapping", back_populates="document", cascade="all, delete-orphan"
    )
    references: Mapped[List["DocumentReference"]] = relationship(
        "DocumentReference",
        foreign_keys="DocumentReference.referencing_document_id",
        back_populates="referencing_document",
        cascade="all, delete-orphan",
    )
    referenced_by: Mapped[List["DocumentReference"]] = relationship(
        "DocumentReference",
        foreign_keys="DocumentReference.referenced_document_id",
        back_populates="referenced_document",
        cascade="all, delete-orphan",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="document", cascade="all, delete-orphan"
    )
    reviews: Mapped[List["Review"]] = relationship(
        "Review", back_populates="document", cascade="all, delete-orphan"
    )
    tasks: Mapped[List["Task"]] = relationship(
        "Task", back_populates="document", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_documents_organization", "organization_id"),
        Index("idx_documents_parent", "parent_id"),
    )


class DocumentReference(Base):
    """Typed edge from one document to another."""
    __tablename__ = "document_references"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    referencing_document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    referenced_document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    reference_type: Mapped[ReferenceType] = mapped_column(
        SAEnum(ReferenceType, native_enum=False, length=20), default=ReferenceType.CROSS_REFERENCE
    )
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_by: Mapped[Optional[str]] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # Relationships
    referencing_document: Mapped["Document"] = relationship(
        "Document", foreign_keys=[referencing_document_id], back_populates="references"
    )
    referenced_document: Mapped["Document"] = relationship(
        "Document", foreign_keys=[referenced_document_id], back_populates="referenced_by"
    )

    __table_args__ = (
        UniqueConstraint(
            "referencing_document_id", "referenced_document_id", "reference_type",
            name="uq_document_reference",
        ),
    )


# ============================================
# ISO Catalog
# ============================================

class ISOClause(Base):
    """Numbered clause or Annex A control of a standard."""
    __tablename__ = "iso_clauses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    standard: Mapped[StandardType] = mapped_column(SAEnum(StandardType, native_enum=False, length=20))
    clause_number: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("iso_clauses.id", ondelete="SET NULL"),
        nullable=True
    )
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    position: Mapped[int] = mapped_column(Integer, default=0)  # catalog order

    # Relationships
    parent: Mapped[Optional["ISOClause"]] = relationship("ISOClause", remote_side="ISOClause.id")

    __table_args__ = (
        UniqueConstraint("standard", "clause_number", name="uq_iso_clause_number"),
    )


class ClauseMapping(Base):
    """Link from a document to a clause it addresses."""
    __tablename__ = "clause_mappings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    clause_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("iso_clauses.id", ondelete="CASCADE"),
        nullable=False
    )
    confidence: Mapped[float] = mapped_column(Float, default=1.0)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    # Relationships
    document: Mapped["Document"] = relationship("Document", back_populates="clause_mappings")
    clause: Mapped["ISOClause"] = relationship("ISOClause", lazy="joined")

    __table_args__ = (
        UniqueConstraint("document_id", "clause_id", name="uq_clause_mapping"),
    )


class StandardDocument(Base):
    """Catalog entry: a document a standard expects an organization to hold."""
    __tablename__ = "standard_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    standard: Mapped[StandardType] = mapped_column(SAEnum(StandardType, native_enum=False, length=20))
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="Required")  # Required, Optional
    description: Mapped[Optional[str]] = mapped_column(Text)
    clause_ref: Mapped[Optional[str]] = mapped_column(String(100))
    importance: Mapped[Optional[str]] = mapped_column(Text)
    keywords: Mapped[list] = mapped_column(JSON, default=list)
    clause_numbers: Mapped[list] = mapped_column(JSON, default=list)
    document_type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, native_enum=False, length=20), default=DocumentType.DOCUMENT
    )
    can_be_fulfilled_by: Mapped[list] = mapped_column(JSON, default=list)
    fulfills: Mapped[list] = mapped_column(JSON, default=list)
    position: Mapped[int] = mapped_column(Integer, default=0)  # catalog order

    __table_args__ = (
        UniqueConstraint("standard", "title", name="uq_standard_document_title"),
    )


# ============================================
# Collaboration
# ============================================

class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    document: Mapped["Document"] = relationship("Document", back_populates="comments")


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    reviewer_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    status: Mapped[str] = mapped_column(String(50), default="PENDING")  # PENDING, APPROVED, CHANGES_REQUESTED
    comments: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    document: Mapped["Document"] = relationship("Document", back_populates="reviews")


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    document_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(50), default="OPEN")  # OPEN, IN_PROGRESS, DONE
    assignee_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    document: Mapped["Document"] = relationship("Document", back_populates="tasks")


# ============================================
# Audit Log
# ============================================

class AuditLog(Base):
    """Append-only record of mutating actions."""
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(36))
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        Index("idx_audit_entity", "entity_type", "entity_id"),
        Index("idx_audit_created", "created_at"),
    )
