#!/usr/bin/env python3
"""
ComplyDocs CLI - Command Line Interface
=======================================

Commands:
  complydocs init-db                         Create tables and seed the ISO catalog
  complydocs seed                            Add missing ISO catalog rows to an existing database
  complydocs import <org> <file>             Import a document and propose clause mappings
  complydocs classify <file>                 Show proposed clause mappings without storing
  complydocs missing <org>                   List required documents the organization lacks
  complydocs duplicates <org>                Show duplicate groups
  complydocs merge <keep_id> <id> [<id>...]  Merge duplicates into one document
  complydocs set-parent <doc> <parent>       Link a document to its parent
  complydocs relationships <doc>             Show parent, children and references
"""

import sys
import argparse
import mimetypes
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich import box

from core.config import AppConfig
from core.exceptions import ComplyDocsError
from core.logging_config import setup_logging
from database.connection import create_db_engine, create_session_factory, get_db_context, init_db
from database.repositories import (
    AuditLogRepository,
    ClauseRepository,
    DocumentRepository,
    OrganizationRepository,
    RequirementRepository,
)
from database.seed import seed_catalog
from matching.duplicate_detector import DuplicateDetector
from matching.importer import DocumentImporter
from matching.missing_documents import MissingDocumentFinder
from matching.models import DocumentType, StandardType
from matching.relationships import DocumentRelationshipService
from matching.section_classifier import SectionClassifier
from parsing.document_parser import DocumentParser

console = Console()

EXTENSION_MIME_TYPES = {
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/plain",
}


def guess_mime_type(path: Path) -> str:
    """MIME type from the file extension"""
    mime_type = EXTENSION_MIME_TYPES.get(path.suffix.lower())
    if mime_type is None:
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return mime_type


def open_session(config: AppConfig):
    engine = create_db_engine(config.database.url, config.database.echo)
    return get_db_context(create_session_factory(engine))


def _standard(value):
    return StandardType(value) if value else None


def cmd_init_db(args, config: AppConfig):
    """Create tables and seed the catalog"""
    engine = create_db_engine(config.database.url, config.database.echo)
    init_db(engine)
    with get_db_context(create_session_factory(engine)) as session:
        counts = seed_catalog(session)
        if args.organization:
            orgs = OrganizationRepository(session)
            org = orgs.get_by_name(args.organization) or orgs.create(args.organization)
            console.print(f"Organization: {org.name} ({org.id})", style="cyan")

    console.print(
        f"✓ Database ready: {counts['clauses']} clauses, {counts['requirements']} requirements added",
        style="green",
    )


def cmd_seed(args, config: AppConfig):
    """Insert catalog rows missing from an existing database"""
    with open_session(config) as session:
        counts = seed_catalog(session)

    console.print(
        f"✓ Seeded {counts['clauses']} clauses and {counts['requirements']} requirements",
        style="green",
    )


def cmd_import(args, config: AppConfig):
    """Import a document into an organization"""
    path = Path(args.file)
    mime_type = args.mime_type or guess_mime_type(path)

    with open_session(config) as session:
        store = DocumentRepository(session)
        importer = DocumentImporter(
            store,
            DocumentParser(config.parsing),
            SectionClassifier(ClauseRepository(session), store, config.matching),
            AuditLogRepository(session),
            config.classification,
        )
        result = importer.import_document(
            args.organization_id,
            path.read_bytes(),
            mime_type,
            path.name,
            title=args.title,
            document_type=DocumentType(args.type),
            standard=_standard(args.standard),
            auto_classify=args.auto_classify,
        )

    doc = result.document
    style = "yellow" if doc.metadata.parse_error else "green"
    console.print(f"✓ Imported: {doc.title} ({doc.id})", style=style)
    if doc.metadata.parse_error:
        console.print("  Content could not be extracted; placeholder stored", style="yellow")
    console.print(f"  Sections: {len(result.parsed.sections) if result.parsed else 0}")
    console.print(f"  Clause mappings: {len(result.persisted_mappings)}")


def cmd_classify(args, config: AppConfig):
    """Show proposed clause mappings for a file"""
    path = Path(args.file)
    parsed = DocumentParser(config.parsing).parse_document(
        path.read_bytes(), args.mime_type or guess_mime_type(path), path.name
    )

    with open_session(config) as session:
        classifier = SectionClassifier(ClauseRepository(session), config=config.matching)
        mappings = classifier.classify_sections(
            parsed, _standard(args.standard) or StandardType(config.classification.default_standard)
        )

    table = Table(title=f"Clause mappings: {path.name}", box=box.ROUNDED)
    table.add_column("Section", style="cyan")
    table.add_column("Clause", style="white")
    table.add_column("Title", style="white")
    table.add_column("Confidence", style="yellow")
    for section_title, section_mappings in mappings.items():
        for mapping in section_mappings:
            table.add_row(
                section_title[:50],
                mapping.clause_number,
                mapping.clause_title[:40],
                f"{mapping.confidence:.2f}",
            )
    console.print(table)


def cmd_missing(args, config: AppConfig):
    """List missing required documents"""
    with open_session(config) as session:
        finder = MissingDocumentFinder(
            DocumentRepository(session), RequirementRepository(session), config=config.matching
        )
        missing = finder.find_missing_documents(args.organization_id, _standard(args.standard))

    if not missing:
        console.print("✓ All required documents are present", style="green")
        return

    table = Table(title="Missing documents", box=box.ROUNDED)
    table.add_column("Standard", style="cyan")
    table.add_column("Document", style="white")
    table.add_column("Category", style="yellow")
    table.add_column("Clause", style="white")
    for item in missing:
        title = item.title + (" (evaluation failed)" if item.evaluation_error else "")
        table.add_row(item.standard.value, title, item.category, item.clause_ref or "")
    console.print(table)


def cmd_duplicates(args, config: AppConfig):
    """Show duplicate groups"""
    with open_session(config) as session:
        detector = DuplicateDetector(DocumentRepository(session), AuditLogRepository(session), config.matching)
        result = detector.detect_duplicates(args.organization_id)

    if not result.duplicate_groups:
        console.print(f"No duplicates among {result.total_documents} documents", style="green")
        return

    for group in result.duplicate_groups:
        table = Table(
            title=f"{group.base_document} ({group.confidence:.2f}, {group.recommended_action.value})",
            box=box.ROUNDED,
        )
        table.add_column("ID", style="cyan")
        table.add_column("Title", style="white")
        table.add_column("Version", style="white")
        table.add_column("Status", style="white")
        table.add_column("Latest", style="green")
        for member in group.documents:
            table.add_row(
                member.id,
                member.title[:50],
                str(member.current_version),
                member.status.value,
                "✓" if member.is_latest_version else "",
            )
        console.print(table)


def cmd_merge(args, config: AppConfig):
    """Merge duplicates into the kept document"""
    document_ids = [args.keep_id] + [i for i in args.document_ids if i != args.keep_id]
    with open_session(config) as session:
        detector = DuplicateDetector(DocumentRepository(session), AuditLogRepository(session), config.matching)
        result = detector.merge_duplicates(document_ids, args.keep_id, args.user)

    console.print(f"✓ Merged {len(result.merged_ids)} documents into {result.merged_document.title}", style="green")


def cmd_set_parent(args, config: AppConfig):
    """Set or clear a document's parent"""
    with open_session(config) as session:
        store = DocumentRepository(session)
        service = DocumentRelationshipService(store, AuditLogRepository(session), config.matching)
        doc = store.find_by_id(args.document_id)
        if doc is None:
            console.print(f"Error: Document '{args.document_id}' not found", style="red")
            sys.exit(1)
        parent_id = None if args.parent_id == "none" else args.parent_id
        service.set_parent(args.document_id, parent_id, doc.organization_id, args.user)

    console.print("✓ Parent updated", style="green")


def cmd_relationships(args, config: AppConfig):
    """Show a document's relationships"""
    with open_session(config) as session:
        store = DocumentRepository(session)
        service = DocumentRelationshipService(store, AuditLogRepository(session), config.matching)
        relationships = service.get_relationships(args.document_id)

    doc = relationships["document"]
    table = Table(title=doc.title, box=box.ROUNDED)
    table.add_column("Relation", style="cyan")
    table.add_column("Document", style="white")
    if relationships["parent"]:
        table.add_row("parent", relationships["parent"].title)
    for child in relationships["children"]:
        table.add_row("child", child.title)
    for target, reference_type in relationships["references"]:
        table.add_row(reference_type.value.lower(), target.title)
    for source in relationships["referenced_by"]:
        table.add_row("referenced by", source.title)
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ComplyDocs - ISO 9001 / ISO 27001 document compliance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  complydocs init-db --organization "Acme Ltd"
  complydocs import <org_id> ./quality-policy.docx --type POLICY
  complydocs missing <org_id> --standard ISO_9001_2015
  complydocs duplicates <org_id>
  complydocs merge <keep_id> <duplicate_id> --user <user_id>
        """
    )
    standards = [s.value for s in StandardType]

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create tables and seed the ISO catalog")
    init_parser.add_argument("--organization", help="Create an organization with this name")

    # seed command
    subparsers.add_parser("seed", help="Add missing ISO catalog rows")

    # import command
    import_parser = subparsers.add_parser("import", help="Import a document")
    import_parser.add_argument("organization_id", help="Organization ID")
    import_parser.add_argument("file", help="Path to the document")
    import_parser.add_argument("--title", help="Document title (default: file metadata or name)")
    import_parser.add_argument("--type", default="DOCUMENT", choices=[t.value for t in DocumentType])
    import_parser.add_argument("--standard", choices=standards)
    import_parser.add_argument("--mime-type", help="Override the MIME type")
    import_parser.add_argument(
        "--auto-classify",
        action="store_true",
        default=None,
        help="Store proposed clause mappings (default: AUTO_CLASSIFY)",
    )

    # classify command
    classify_parser = subparsers.add_parser("classify", help="Propose clause mappings for a file")
    classify_parser.add_argument("file", help="Path to the document")
    classify_parser.add_argument("--standard", choices=standards)
    classify_parser.add_argument("--mime-type", help="Override the MIME type")

    # missing command
    missing_parser = subparsers.add_parser("missing", help="List missing required documents")
    missing_parser.add_argument("organization_id", help="Organization ID")
    missing_parser.add_argument("--standard", choices=standards)

    # duplicates command
    duplicates_parser = subparsers.add_parser("duplicates", help="Show duplicate groups")
    duplicates_parser.add_argument("organization_id", help="Organization ID")

    # merge command
    merge_parser = subparsers.add_parser("merge", help="Merge duplicate documents")
    merge_parser.add_argument("keep_id", help="Document to keep")
    merge_parser.add_argument("document_ids", nargs="+", help="Documents merged into it")
    merge_parser.add_argument("--user", help="Acting user ID")

    # set-parent command
    parent_parser = subparsers.add_parser("set-parent", help="Set a document's parent ('none' clears it)")
    parent_parser.add_argument("document_id", help="Document ID")
    parent_parser.add_argument("parent_id", help="Parent document ID or 'none'")
    parent_parser.add_argument("--user", help="Acting user ID")

    # relationships command
    relationships_parser = subparsers.add_parser("relationships", help="Show document relationships")
    relationships_parser.add_argument("document_id", help="Document ID")

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = AppConfig.from_env()
    issues = config.validate()
    if issues:
        for issue in issues:
            console.print(f"Configuration error: {issue}", style="red")
        sys.exit(1)
    setup_logging(config.log_level, config.log_format)

    # Route to command handler
    commands = {
        "init-db": cmd_init_db,
        "seed": cmd_seed,
        "import": cmd_import,
        "classify": cmd_classify,
        "missing": cmd_missing,
        "duplicates": cmd_duplicates,
        "merge": cmd_merge,
        "set-parent": cmd_set_parent,
        "relationships": cmd_relationships,
    }

    try:
        commands[args.command](args, config)
    except ComplyDocsError as e:
        console.print(f"Error: {e.message}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    main()
