"""
ComplyDocs Integration Tests: Command Line Interface
====================================================

Runs cli.main against a SQLite file database configured through the
environment, the same way the installed command runs.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from cli import main
from database.connection import create_db_engine, create_session_factory, get_db_context
from database.repositories import DocumentRepository, OrganizationRepository

POLICY_TEXT = "5.2 Policy\nTop management shall establish a quality policy.\n"

CONFIG_VARIABLES = (
    "AUTO_CLASSIFY",
    "AUTO_CLASSIFY_MIN_CONFIDENCE",
    "COMPLYDOCS_ENV",
    "DEFAULT_STANDARD",
    "LOG_FORMAT",
    "PARSE_TIMEOUT_SECONDS",
)


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'complydocs.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    for name in CONFIG_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    main(["init-db", "--organization", "Acme"])
    return url


@pytest.fixture
def read_session(database_url):
    engine = create_db_engine(database_url)
    factory = create_session_factory(engine)

    def open_session():
        return get_db_context(factory)

    yield open_session
    engine.dispose()


@pytest.fixture
def organization_id(read_session):
    with read_session() as session:
        return OrganizationRepository(session).get_by_name("Acme").id


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "policy.txt"
    path.write_text(POLICY_TEXT, encoding="utf-8")
    return path


def imported_documents(read_session, organization_id):
    with read_session() as session:
        return DocumentRepository(session).find_all_by_organization(organization_id)


@pytest.mark.integration
class TestImportCommand:
    """Tests for `complydocs import`"""

    def test_import_only_proposes_mappings_by_default(self, read_session, organization_id, policy_file):
        main(["import", organization_id, str(policy_file)])

        [doc] = imported_documents(read_session, organization_id)
        assert doc.title == "policy"
        assert doc.clause_numbers() == []

    def test_auto_classify_flag_stores_mappings(self, read_session, organization_id, policy_file):
        main(["import", organization_id, str(policy_file), "--auto-classify"])

        [doc] = imported_documents(read_session, organization_id)
        assert doc.clause_numbers() == ["5.2"]

    def test_auto_classify_environment_stores_mappings(
        self, read_session, organization_id, policy_file, monkeypatch
    ):
        monkeypatch.setenv("AUTO_CLASSIFY", "true")
        main(["import", organization_id, str(policy_file)])

        [doc] = imported_documents(read_session, organization_id)
        assert doc.clause_numbers() == ["5.2"]


@pytest.mark.integration
class TestSetupCommands:
    """Tests for seeding and configuration checks"""

    def test_seed_on_seeded_database_adds_nothing(self, database_url, capsys):
        capsys.readouterr()
        main(["seed"])
        assert "Seeded 0 clauses and 0 requirements" in capsys.readouterr().out

    def test_unknown_default_standard_stops_the_command(self, organization_id, monkeypatch, capsys):
        monkeypatch.setenv("DEFAULT_STANDARD", "ISO_14001_2015")

        with pytest.raises(SystemExit) as exc_info:
            main(["missing", organization_id])

        assert exc_info.value.code == 1
        assert "DEFAULT_STANDARD" in capsys.readouterr().out
