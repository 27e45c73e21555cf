"""
ComplyDocs Test Configuration
=============================

Fixtures:
- In-memory SQLite engine and session with the ISO catalog seeded
- Organization, user and document factories backed by DocumentRepository
- Plain DocumentRecord / StandardRequirement builders for engine unit tests
"""

import pytest
import sys
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.connection import create_db_engine, create_session_factory, init_db
from database.repositories import (
    AuditLogRepository,
    ClauseRepository,
    DocumentRepository,
    OrganizationRepository,
    RequirementRepository,
    UserRepository,
)
from database.seed import seed_catalog
from matching.iso_catalog import StaticCatalog
from matching.models import (
    ClauseMappingRecord,
    DocumentRecord,
    DocumentStatus,
    DocumentType,
    ReferenceEdge,
    StandardRequirement,
    StandardType,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (database-backed)")
    config.addinivalue_line("markers", "slow: Slow tests (>5s)")


# =============================================================================
# Record Builders (no database)
# =============================================================================

def build_document(
    title: str,
    document_type: DocumentType = DocumentType.DOCUMENT,
    clause_numbers: Sequence[str] = (),
    standard: StandardType = StandardType.ISO_9001_2015,
    parent_id: Optional[str] = None,
    references: Sequence[str] = (),
    status: DocumentStatus = DocumentStatus.DRAFT,
    owner_id: Optional[str] = None,
    doc_id: Optional[str] = None,
) -> DocumentRecord:
    """DocumentRecord with clause mappings named by number"""
    return DocumentRecord(
        id=doc_id or str(uuid.uuid4()),
        title=title,
        organization_id="org-1",
        document_type=document_type,
        clause_mappings=[
            ClauseMappingRecord(clause_id=f"{standard.value}:{n}", clause_number=n, standard=standard)
            for n in clause_numbers
        ],
        parent_id=parent_id,
        references=[ReferenceEdge(target_id=target) for target in references],
        status=status,
        owner_id=owner_id,
    )


def build_requirement(title: str, **fields) -> StandardRequirement:
    fields.setdefault("standard", StandardType.ISO_9001_2015)
    fields.setdefault("id", f"req-{title.lower().replace(' ', '-')}")
    for name in ("keywords", "clause_numbers", "can_be_fulfilled_by", "fulfills"):
        if name in fields:
            fields[name] = tuple(fields[name])
    return StandardRequirement(title=title, **fields)


@pytest.fixture
def static_catalog():
    return StaticCatalog()


@pytest.fixture
def requirement_by_title(static_catalog):
    """Look up a catalog requirement: requirement_by_title("Risk Register", StandardType.ISO_27001_2022)"""

    def lookup(title: str, standard: StandardType = StandardType.ISO_9001_2015) -> StandardRequirement:
        for requirement in static_catalog.list_requirements(standard):
            if requirement.title == title:
                return requirement
        raise KeyError(title)

    return lookup


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", echo=False)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = create_session_factory(engine)()
    seed_catalog(session)
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(session):
    return DocumentRepository(session)


@pytest.fixture
def audit_log(session):
    return AuditLogRepository(session)


@pytest.fixture
def clause_repository(session):
    return ClauseRepository(session)


@pytest.fixture
def requirement_repository(session):
    return RequirementRepository(session)


@pytest.fixture
def organization(session):
    return OrganizationRepository(session).create("Acme Ltd")


@pytest.fixture
def user(session, organization):
    return UserRepository(session).create(organization.id, "jane@acme.test", name="Jane Doe", role="manager")


@pytest.fixture
def make_document(store, organization):
    """
    Persist a document for the test organization.

    Each call is stamped one minute after the previous one so ordering by
    update time is deterministic.
    """
    clock = {"now": datetime(2024, 1, 1, tzinfo=timezone.utc)}

    def create(
        title: str,
        document_type: DocumentType = DocumentType.DOCUMENT,
        clause_numbers: Sequence[str] = (),
        standard: StandardType = StandardType.ISO_9001_2015,
        status: DocumentStatus = DocumentStatus.DRAFT,
        current_version: int = 1,
        owner_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        content: str = "",
    ) -> DocumentRecord:
        clock["now"] += timedelta(minutes=1)
        record = build_document(
            title,
            document_type=document_type,
            clause_numbers=clause_numbers,
            standard=standard,
            parent_id=parent_id,
            status=status,
            owner_id=owner_id,
        )
        record.organization_id = organization_id or organization.id
        record.current_version = current_version
        record.content = content
        record.created_at = clock["now"]
        record.updated_at = clock["now"]
        return store.create(record)

    return create
