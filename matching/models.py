"""
ComplyDocs Matching Engine - Data Models

Plain records consumed and produced by the matchers. Repositories convert
ORM rows into these so the engine never touches the database session.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple


class StandardType(str, Enum):
    """Supported management-system standards"""
    ISO_9001_2015 = "ISO_9001_2015"
    ISO_27001_2022 = "ISO_27001_2022"


class DocumentType(str, Enum):
    """Kind of controlled document"""
    POLICY = "POLICY"
    PROCEDURE = "PROCEDURE"
    MANUAL = "MANUAL"
    PLAN = "PLAN"
    RECORD = "RECORD"
    LOG = "LOG"
    REPORT = "REPORT"
    FORM = "FORM"
    DOCUMENT = "DOCUMENT"


class DocumentStatus(str, Enum):
    """Document lifecycle status"""
    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    ARCHIVED = "ARCHIVED"


class ReferenceType(str, Enum):
    """Typed edge between two documents"""
    IMPLEMENTS = "IMPLEMENTS"
    SUPPORTS = "SUPPORTS"
    CROSS_REFERENCE = "CROSS_REFERENCE"


class MatchType(str, Enum):
    """How a requirement was (or was not) satisfied"""
    CLAUSE = "clause"
    TITLE = "title"
    KEYWORD = "keyword"
    DIRECT = "direct"
    FULFILLS = "fulfills"
    CAN_BE_FULFILLED_BY = "can_be_fulfilled_by"
    PARENT = "parent"
    REFERENCE = "reference"
    NONE = "none"


class RecommendedAction(str, Enum):
    """Suggested resolution for a duplicate group"""
    KEEP_LATEST = "keep_latest"
    MERGE_CONTENT = "merge_content"
    MANUAL_REVIEW = "manual_review"


@dataclass
class ClauseMappingRecord:
    """A document's link to one ISO clause"""
    clause_id: str
    clause_number: str
    standard: StandardType
    confidence: float = 1.0
    keywords: List[str] = field(default_factory=list)


@dataclass
class ReferenceEdge:
    """Outgoing reference from one document to another"""
    target_id: str
    reference_type: ReferenceType = ReferenceType.CROSS_REFERENCE
    description: Optional[str] = None


@dataclass
class DocumentMetadata:
    """
    Typed document metadata.

    Known keys get explicit optional fields; anything else a parser or a
    client supplies is kept in `extra` so it round-trips untouched.
    """
    file_type: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    created_date: Optional[datetime] = None
    modified_date: Optional[datetime] = None
    parse_error: bool = False
    document_type: Optional[str] = None
    version: Optional[str] = None
    effective_date: Optional[datetime] = None
    review_date: Optional[datetime] = None
    owner: Optional[str] = None
    approver: Optional[str] = None
    sheets: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    _DATE_FIELDS = ("created_date", "modified_date", "effective_date", "review_date")
    _TEXT_FIELDS = ("file_type", "title", "author", "document_type", "version", "owner", "approver")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in self._TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        for name in self._DATE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value.isoformat()
        if self.parse_error:
            data["parse_error"] = True
        if self.sheets:
            data["sheets"] = list(self.sheets)
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DocumentMetadata":
        if not data:
            return cls()
        data = dict(data)
        kwargs: Dict[str, Any] = {}
        for name in cls._TEXT_FIELDS:
            if name in data:
                kwargs[name] = data.pop(name)
        for name in cls._DATE_FIELDS:
            if name in data:
                raw = data.pop(name)
                kwargs[name] = datetime.fromisoformat(raw) if isinstance(raw, str) else raw
        kwargs["parse_error"] = bool(data.pop("parse_error", False))
        kwargs["sheets"] = list(data.pop("sheets", []))
        kwargs["extra"] = data
        return cls(**kwargs)


@dataclass
class DocumentRecord:
    """An organization document as seen by the matchers"""
    id: str
    title: str
    organization_id: Optional[str] = None
    content: str = ""
    document_type: DocumentType = DocumentType.DOCUMENT
    clause_mappings: List[ClauseMappingRecord] = field(default_factory=list)
    parent_id: Optional[str] = None
    references: List[ReferenceEdge] = field(default_factory=list)
    status: DocumentStatus = DocumentStatus.DRAFT
    current_version: int = 1
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    def clause_numbers(self, standard: Optional[StandardType] = None) -> List[str]:
        """Clause numbers this document is mapped to, optionally for one standard"""
        return [
            m.clause_number for m in self.clause_mappings
            if standard is None or m.standard == standard
        ]

    def clause_ids(self) -> set:
        return {m.clause_id for m in self.clause_mappings}


@dataclass(frozen=True)
class StandardRequirement:
    """A document an ISO standard expects an organization to hold"""
    id: str
    title: str
    standard: StandardType
    category: str = "Required"
    description: Optional[str] = None
    clause_ref: Optional[str] = None
    importance: Optional[str] = None
    keywords: Tuple[str, ...] = ()
    clause_numbers: Tuple[str, ...] = ()
    document_type: Optional[DocumentType] = None
    can_be_fulfilled_by: Tuple[str, ...] = ()
    fulfills: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ISOClauseRecord:
    """A numbered clause of a standard"""
    standard: StandardType
    clause_number: str
    title: str
    parent_number: Optional[str] = None
    keywords: Tuple[str, ...] = ()
    id: Optional[str] = None


@dataclass
class MatchedDocument:
    """Which document satisfied a requirement, and through what relation"""
    document_id: str
    document_title: str
    relationship_type: Optional[str] = None


@dataclass
class MatchResult:
    """Outcome of matching one requirement"""
    is_match: bool
    confidence: float
    match_type: MatchType
    matched_by: Optional[MatchedDocument] = None
    via: Optional[MatchType] = None

    @classmethod
    def no_match(cls, match_type: MatchType = MatchType.NONE) -> "MatchResult":
        return cls(is_match=False, confidence=0.0, match_type=match_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_match": self.is_match,
            "confidence": round(self.confidence, 4),
            "match_type": self.match_type.value,
            "matched_by": (
                {
                    "document_id": self.matched_by.document_id,
                    "document_title": self.matched_by.document_title,
                    "relationship_type": self.matched_by.relationship_type,
                }
                if self.matched_by else None
            ),
            "via": self.via.value if self.via else None,
        }


@dataclass
class MissingRequirement:
    """A catalog requirement no organization document satisfies"""
    requirement_id: str
    title: str
    standard: StandardType
    category: str
    description: Optional[str] = None
    clause_ref: Optional[str] = None
    importance: Optional[str] = None
    document_type: Optional[DocumentType] = None
    can_be_fulfilled_by: Tuple[str, ...] = ()
    evaluation_error: bool = False

    @classmethod
    def from_requirement(cls, requirement: StandardRequirement, evaluation_error: bool = False) -> "MissingRequirement":
        return cls(
            requirement_id=requirement.id,
            title=requirement.title,
            standard=requirement.standard,
            category=requirement.category,
            description=requirement.description,
            clause_ref=requirement.clause_ref,
            importance=requirement.importance,
            document_type=requirement.document_type,
            can_be_fulfilled_by=requirement.can_be_fulfilled_by,
            evaluation_error=evaluation_error,
        )


@dataclass
class CoverageEntry:
    """One row of the coverage report"""
    requirement: StandardRequirement
    fulfilled: bool
    result: MatchResult


@dataclass
class VersionInfo:
    version_number: Optional[str] = None
    version_date: Optional[str] = None


@dataclass
class DuplicateMember:
    """A document inside a duplicate group"""
    id: str
    title: str
    current_version: int
    status: DocumentStatus
    owner_id: Optional[str]
    owner_name: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    version_info: VersionInfo
    is_latest_version: bool = False

    @classmethod
    def from_record(cls, doc: DocumentRecord, version_info: VersionInfo) -> "DuplicateMember":
        return cls(
            id=doc.id,
            title=doc.title,
            current_version=doc.current_version,
            status=doc.status,
            owner_id=doc.owner_id,
            owner_name=doc.owner_name,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            version_info=version_info,
        )


@dataclass
class DuplicateGroup:
    """Documents that look like copies or versions of each other"""
    base_document: str
    documents: List[DuplicateMember] = field(default_factory=list)
    confidence: float = 1.0
    recommended_action: RecommendedAction = RecommendedAction.KEEP_LATEST

    @property
    def latest(self) -> Optional[DuplicateMember]:
        for member in self.documents:
            if member.is_latest_version:
                return member
        return None


@dataclass
class DuplicateDetectionResult:
    organization_id: str
    duplicate_groups: List[DuplicateGroup]
    total_documents: int
    duplicates_found: int
    analysis_date: datetime


@dataclass
class MergeResult:
    success: bool
    merged_document: Optional[DocumentRecord]
    merged_ids: List[str] = field(default_factory=list)
