"""
Catalog seeding: ISO clauses and the required-document lists.

Rows get deterministic ids, so running the seed again only inserts what is
missing.
"""

import logging
from typing import Dict

from sqlalchemy.orm import Session

from database.models import ISOClause, StandardDocument
from matching.iso_catalog import build_clause_records, build_requirements
from matching.models import StandardType

logger = logging.getLogger(__name__)


def seed_clauses(session: Session, standard: StandardType) -> int:
    inserted = 0
    ids_by_number = {}
    for position, record in enumerate(build_clause_records(standard)):
        ids_by_number[record.clause_number] = record.id
        if session.get(ISOClause, record.id) is not None:
            continue
        session.add(ISOClause(
            id=record.id,
            standard=standard,
            clause_number=record.clause_number,
            title=record.title,
            parent_id=ids_by_number.get(record.parent_number) if record.parent_number else None,
            keywords=list(record.keywords),
            position=position,
        ))
        inserted += 1
        # Parents must exist before their children reference them
        session.flush()
    return inserted


def seed_requirements(session: Session, standard: StandardType) -> int:
    inserted = 0
    for position, requirement in enumerate(build_requirements(standard)):
        if session.get(StandardDocument, requirement.id) is not None:
            continue
        session.add(StandardDocument(
            id=requirement.id,
            standard=standard,
            title=requirement.title,
            category=requirement.category,
            description=requirement.description,
            clause_ref=requirement.clause_ref,
            importance=requirement.importance,
            keywords=list(requirement.keywords),
            clause_numbers=list(requirement.clause_numbers),
            document_type=requirement.document_type,
            can_be_fulfilled_by=list(requirement.can_be_fulfilled_by),
            fulfills=list(requirement.fulfills),
            position=position,
        ))
        inserted += 1
    session.flush()
    return inserted


def seed_catalog(session: Session) -> Dict[str, int]:
    """Insert the clause and requirement catalogs of every standard."""
    counts = {"clauses": 0, "requirements": 0}
    for standard in StandardType:
        counts["clauses"] += seed_clauses(session, standard)
        counts["requirements"] += seed_requirements(session, standard)

    logger.info(f"Seeded {counts['clauses']} clauses and {counts['requirements']} requirements")
    return counts
