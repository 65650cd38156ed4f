import os
import tempfile

# Point the app at a throwaway SQLite file before anything imports app.core.database
_TEST_DIR = tempfile.mkdtemp(prefix="form_master_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"

from collections import Counter

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from app.core.database import engine as app_engine
from app.discovery.field_normalizer import display_name
from app.models import Base
from app.schemas.table import ColumnDefinition, ForeignKeyInfo, TableSchema


# ---------- In-memory schema provider ----------

def make_table(table_name, *columns):
    """columns: (name, type, nullable, primary_key, fk) with fk as 'table.column' or None."""
    definitions = []
    for name, type_, nullable, primary_key, fk in columns:
        foreign_key = None
        if fk:
            ref_table, ref_column = fk.split(".")
            foreign_key = ForeignKeyInfo(referenced_table=ref_table, referenced_column=ref_column)
        definitions.append(ColumnDefinition(
            name=name, type=type_, nullable=nullable, primary_key=primary_key, foreign_key=foreign_key,
        ))
    return TableSchema(
        table_name=table_name,
        display_name=display_name(table_name),
        columns=definitions,
        is_required=table_name == "personal_details",
    )


class FakeSchemaProvider:
    def __init__(self, tables=None):
        self.tables = {t.table_name: t for t in (tables or [])}
        self.failing = set()
        self.list_fails = False
        self.calls = Counter()

    async def list_tables(self):
        self.calls["list_tables"] += 1
        if self.list_fails:
            raise RuntimeError("catalog unavailable")
        return list(self.tables)

    async def get_table_schema(self, table_name):
        self.calls["get_table_schema"] += 1
        self.calls[f"schema:{table_name}"] += 1
        if table_name in self.failing:
            raise RuntimeError(f"cannot read {table_name}")
        return self.tables.get(table_name)

    async def table_exists(self, table_name):
        self.calls["table_exists"] += 1
        return table_name in self.tables


@pytest.fixture
def sample_tables():
    return [
        make_table(
            "personal_details",
            ("id", "INTEGER", False, True, None),
            ("client_id", "INTEGER", False, False, None),
            ("first_name", "VARCHAR(100)", False, False, None),
            ("last_name", "VARCHAR(100)", True, False, None),
            ("email", "VARCHAR(255)", True, False, None),
            ("gender", "TEXT", True, False, None),
            ("date_of_birth", "DATE", True, False, None),
            ("created_at", "TIMESTAMP", True, False, None),
        ),
        make_table(
            "documents",
            ("document_id", "INTEGER", False, True, None),
            ("client_id", "INTEGER", False, False, "personal_details.client_id"),
            ("passport_photo", "TEXT", True, False, None),
            ("created_at", "TEXT", True, False, None),
        ),
        make_table(
            "education_details",
            ("id", "INTEGER", False, True, None),
            ("client_id", "INTEGER", False, False, "personal_details.client_id"),
            ("school_name", "VARCHAR(200)", True, False, None),
            ("degree", "TEXT", True, False, None),
            ("graduation_year", "INTEGER", True, False, None),
        ),
    ]


@pytest.fixture
def fake_provider(sample_tables):
    return FakeSchemaProvider(sample_tables)


# ---------- SQLite-backed fixtures ----------

PROFILE_DDL = [
    """CREATE TABLE personal_details (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id INTEGER NOT NULL UNIQUE,
        first_name VARCHAR(100) NOT NULL,
        last_name VARCHAR(100),
        email VARCHAR(255),
        gender TEXT,
        date_of_birth DATE,
        created_at TIMESTAMP
    )""",
    """CREATE TABLE documents (
        document_id INTEGER PRIMARY KEY,
        client_id INTEGER REFERENCES personal_details(client_id),
        passport_photo TEXT,
        created_at TEXT
    )""",
    """CREATE TABLE education_details (
        id INTEGER PRIMARY KEY,
        client_id INTEGER REFERENCES personal_details(client_id),
        school_name VARCHAR(200),
        degree TEXT,
        graduation_year INTEGER
    )""",
    "CREATE TABLE audit_log_backup (id INTEGER PRIMARY KEY, note TEXT)",
    "CREATE TABLE scratch_temp (id INTEGER PRIMARY KEY, note TEXT)",
]

PROFILE_SEED = [
    """INSERT INTO personal_details (client_id, first_name, last_name, email, gender, date_of_birth)
       VALUES (1, 'Asha', 'Rao', 'asha@example.com', 'Female', '1990-05-01')""",
    """INSERT INTO personal_details (client_id, first_name)
       VALUES (2, 'Vikram')""",
    "INSERT INTO documents (document_id, client_id, passport_photo) VALUES (10, 1, 'photo_1.png')",
    """INSERT INTO education_details (client_id, school_name, degree, graduation_year)
       VALUES (1, 'City School', 'BSc', 2012)""",
]

PROFILE_TABLES = ["personal_details", "documents", "education_details", "audit_log_backup", "scratch_temp"]


@pytest.fixture
def db_engine():
    """The app engine with profile tables created and seeded; everything is dropped afterwards."""
    Base.metadata.create_all(bind=app_engine)
    with app_engine.begin() as conn:
        for ddl in PROFILE_DDL:
            conn.execute(text(ddl))
        for statement in PROFILE_SEED:
            conn.execute(text(statement))

    yield app_engine

    with app_engine.begin() as conn:
        for table_name in reversed(PROFILE_TABLES):
            conn.execute(text(f"DROP TABLE IF EXISTS {table_name}"))
        conn.execute(text("DELETE FROM form_templates"))


@pytest.fixture
def client(db_engine):
    from app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def sample_cards():
    return [
        {
            "id": "card-personal",
            "title": "Personal",
            "order": 0,
            "cardType": "normal",
            "fields": [
                {
                    "id": "f1", "tableName": "personal_details", "columnName": "first_name",
                    "displayName": "First Name", "fieldType": "TEXT", "order": 0, "isRequired": True,
                },
                {
                    "id": "f2", "tableName": "personal_details", "columnName": "email",
                    "displayName": "Email", "fieldType": "TEXT", "order": 1, "isRequired": True,
                },
            ],
        },
        {
            "id": "card-docs",
            "title": "Documents",
            "order": 1,
            "cardType": "document",
            "fields": [
                {
                    "id": "f3", "tableName": "documents", "columnName": "passport_photo",
                    "displayName": "Passport Photo", "fieldType": "TEXT", "order": 0,
                },
                {
                    "id": "f4", "tableName": "documents", "columnName": "document_type",
                    "displayName": "Document Type", "fieldType": "TEXT", "order": 1,
                },
            ],
        },
    ]
