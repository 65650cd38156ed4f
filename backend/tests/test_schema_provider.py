import pytest

from app.discovery.schema_provider import (
    SqlAlchemySchemaProvider,
    is_discoverable_table,
    order_profile_tables,
)


@pytest.fixture
def provider(db_engine):
    return SqlAlchemySchemaProvider(db_engine)


def test_discoverable_table_names():
    assert is_discoverable_table("personal_details")
    assert not is_discoverable_table("form_templates")
    assert not is_discoverable_table("sqlite_sequence")
    assert not is_discoverable_table("clients_backup")
    assert not is_discoverable_table("import_temp")


def test_profile_table_order():
    tables = ["documents", "work_history", "education_details", "personal_details"]
    assert order_profile_tables(tables) == ["personal_details", "education_details", "work_history", "documents"]
    assert order_profile_tables(["skills"]) == ["skills"]


@pytest.mark.asyncio
async def test_list_tables_hides_internal_and_scratch_tables(provider):
    tables = await provider.list_tables()
    assert tables == ["documents", "education_details", "personal_details"]


@pytest.mark.asyncio
async def test_table_schema(provider):
    schema = await provider.get_table_schema("personal_details")

    assert schema.display_name == "Personal Details"
    assert schema.is_required is True
    assert [c.name for c in schema.columns][:3] == ["id", "client_id", "first_name"]
    assert schema.get_column("id").primary_key is True
    assert schema.get_column("first_name").nullable is False
    assert schema.get_column("first_name").type == "VARCHAR(100)"
    assert schema.get_column("last_name").nullable is True


@pytest.mark.asyncio
async def test_foreign_keys_are_reported(provider):
    schema = await provider.get_table_schema("documents")
    fk = schema.get_column("client_id").foreign_key
    assert fk.referenced_table == "personal_details"
    assert fk.referenced_column == "client_id"
    assert schema.is_required is False


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   ", "missing_table"])
async def test_unknown_or_blank_table(provider, name):
    assert await provider.get_table_schema(name) is None


@pytest.mark.asyncio
async def test_table_exists(provider):
    assert await provider.table_exists("documents") is True
    assert await provider.table_exists("missing_table") is False
    assert await provider.table_exists("") is False


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["form_templates", "audit_log_backup", "scratch_temp"])
async def test_hidden_tables_are_not_exposed(provider, name):
    assert await provider.get_table_schema(name) is None
    assert await provider.table_exists(name) is False


@pytest.mark.asyncio
async def test_profile_tables(provider):
    assert await provider.profile_tables() == ["personal_details", "education_details", "documents"]
