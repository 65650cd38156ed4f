import pytest
from sqlalchemy import create_engine, text

from app.core.exceptions import MigrationError
from app.discovery.legacy_schema import LegacySchemaChecker


@pytest.fixture
def legacy_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE personal_details (id INTEGER PRIMARY KEY, client_id INTEGER)"))
        conn.execute(text("CREATE TABLE documents (id INTEGER PRIMARY KEY, student_id INTEGER)"))
        conn.execute(text("CREATE TABLE education (id INTEGER PRIMARY KEY, student_id INTEGER, client_id INTEGER)"))
        conn.execute(text("CREATE TABLE hobbies (id INTEGER PRIMARY KEY, student_id INTEGER)"))
    yield engine
    engine.dispose()


def test_clean_schema(db_engine):
    checker = LegacySchemaChecker(db_engine)

    detection = checker.detect()
    assert detection["has_legacy_schema"] is False
    assert "personal_details" in detection["tables_with_client_id"]

    report = checker.perform_startup_check()
    assert report["priority_check"]["issues"] == []
    assert report["recommendations"] == []


def test_detects_legacy_and_mixed_tables(legacy_engine):
    detection = LegacySchemaChecker(legacy_engine).detect()

    assert detection["has_legacy_schema"] is True
    assert detection["tables_with_student_id"] == ["documents", "hobbies"]
    assert detection["mixed_schema_tables"] == ["education"]
    assert detection["tables_with_client_id"] == ["personal_details"]


def test_priority_check_reports_issues(legacy_engine):
    priority = LegacySchemaChecker(legacy_engine).verify_client_id_priority()

    assert priority["personal_details_uses_client_id"] is True
    assert priority["documents_uses_client_id"] is False
    assert priority["all_new_tables_use_client_id"] is False
    assert priority["issues"] == [
        "documents table does not use client_id column",
        "Table 'hobbies' uses student_id instead of client_id",
    ]


def test_startup_check_recommendations(legacy_engine):
    report = LegacySchemaChecker(legacy_engine).perform_startup_check()
    assert "Run migration script to convert student_id to client_id" in report["recommendations"]
    assert "Ensure all new tables use client_id schema" in report["recommendations"]
    assert report["timestamp"]


def test_inspection_failure_raises_migration_error(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'nope.db'}")
    with pytest.raises(MigrationError) as exc_info:
        LegacySchemaChecker(engine).detect()
    assert exc_info.value.status_code == 500
