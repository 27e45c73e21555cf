# ComplyDocs Database Layer
# SQLAlchemy persistence for documents, the ISO catalog and the audit trail

from database.connection import (
    create_db_engine,
    create_session_factory,
    get_db_context,
    health_check,
    init_db,
)
from database.models import (
    Base,
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
from database.repositories import (
    AuditLogRepository,
    ClauseRepository,
    DocumentRepository,
    OrganizationRepository,
    RequirementRepository,
    UserRepository,
)
from database.seed import seed_catalog

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "get_db_context",
    "health_check",
    "init_db",
    "Base",
    "Organization",
    "User",
    "Document",
    "DocumentReference",
    "ISOClause",
    "ClauseMapping",
    "StandardDocument",
    "Comment",
    "Review",
    "Task",
    "AuditLog",
    "AuditLogRepository",
    "ClauseRepository",
    "DocumentRepository",
    "OrganizationRepository",
    "RequirementRepository",
    "UserRepository",
    "seed_catalog",
]
