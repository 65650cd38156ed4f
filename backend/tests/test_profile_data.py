from datetime import date, datetime

import pytest

from app.core.exceptions import InputValidationError, ValueValidationError
from app.services.profile_data import ProfileData, schema_from_tables


@pytest.fixture
def schema(sample_tables):
    return schema_from_tables(sample_tables)


def test_schema_from_tables(schema):
    assert schema["personal_details"] == {
        "first_name": "text",
        "last_name": "text",
        "email": "text",
        "gender": "text",
        "date_of_birth": "date",
    }
    assert schema["education_details"]["graduation_year"] == "numeric"
    assert "client_id" not in schema["documents"]
    assert "document_id" in schema["documents"]


def test_set_and_get_by_category_and_field(schema):
    profile = ProfileData(schema)
    profile.set("personal_details", "first_name", "Asha")
    profile.set("education_details", "graduation_year", 2012)

    assert profile.get("personal_details", "first_name") == "Asha"
    assert profile.get("education_details", "graduation_year") == "2012"
    assert ("personal_details", "first_name") in profile
    assert len(profile) == 2


def test_same_field_name_in_two_categories_is_not_ambiguous():
    profile = ProfileData({"home": {"city": "text"}, "work": {"city": "text"}})
    profile.set("home", "city", "Pune")
    profile.set("work", "city", "Mumbai")
    assert profile.to_flat() == {"home.city": "Pune", "work.city": "Mumbai"}


def test_undeclared_field_is_rejected(schema):
    profile = ProfileData(schema)
    with pytest.raises(InputValidationError):
        profile.set("personal_details", "nickname", "Ash")
    with pytest.raises(InputValidationError):
        profile.set("unknown_table", "first_name", "Asha")


def test_type_is_checked_against_declaration(schema):
    profile = ProfileData(schema)
    with pytest.raises(ValueValidationError) as exc_info:
        profile.set("personal_details", "date_of_birth", "not a date")
    assert exc_info.value.field == "date_of_birth"
    assert exc_info.value.expected_type == "date"


def test_dates_are_rendered_as_iso(schema):
    profile = ProfileData(schema)
    profile.set("personal_details", "date_of_birth", date(1990, 5, 1))
    assert profile.get("personal_details", "date_of_birth") == "1990-05-01"

    profile = ProfileData({"audit": {"seen_at": "date"}})
    profile.set("audit", "seen_at", datetime(2024, 1, 2, 3, 4, 5))
    assert profile.get("audit", "seen_at") == "2024-01-02T03:04:05"


def test_none_is_stored_without_validation(schema):
    profile = ProfileData(schema)
    profile.set("personal_details", "date_of_birth", None)
    assert ("personal_details", "date_of_birth") in profile
    assert profile.get("personal_details", "date_of_birth") is None


def test_from_rows_skips_bookkeeping_and_undeclared_columns(schema):
    rows = {
        "personal_details": {
            "id": 1, "client_id": 7, "first_name": "Asha", "email": "asha@example.com",
            "legacy_column": "x", "created_at": "2024-01-01",
        },
    }
    profile = ProfileData.from_rows(schema, rows)
    assert profile.to_flat() == {
        "personal_details.first_name": "Asha",
        "personal_details.email": "asha@example.com",
    }


def test_from_rows_strict_and_lenient(schema):
    rows = {"education_details": {"graduation_year": "twenty twelve"}}

    with pytest.raises(ValueValidationError):
        ProfileData.from_rows(schema, rows)

    lenient = ProfileData.from_rows(schema, rows, strict=False)
    assert lenient.get("education_details", "graduation_year") == "twenty twelve"
