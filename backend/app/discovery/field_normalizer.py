# backend/app/discovery/field_normalizer.py
"""
Pure mapping from a live column definition to an AvailableField.

Everything here is a module-level function without state so the catalog,
the compatibility checker and the tests can share the exact same rules.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from app.schemas.field import (
    AvailableField,
    DataType,
    FieldConstraints,
    FieldMetadata,
    ForeignKeyReference,
)
from app.schemas.table import ColumnDefinition, TableSchema

# ---------- Name sets ----------

SYSTEM_FIELDS = frozenset({
    "id", "client_id", "created_at", "updated_at", "version",
    "document_id", "form_template_id", "assigned_at", "assigned_by",
})

FORM_BUILDER_EXCLUDED_FIELDS = frozenset({
    "client_id", "created_at", "updated_at", "version",
    "document_id", "form_template_id", "assigned_at", "assigned_by",
    "id",
})

CATEGORY_SYSTEM_NAMES = frozenset({"id", "client_id", "created_at", "updated_at", "version"})
CATEGORY_PERSONAL_NAMES = frozenset({
    "first_name", "last_name", "middle_name", "full_name",
    "date_of_birth", "gender", "blood_group",
})
CATEGORY_CONTACT_NAMES = frozenset({
    "email", "phone", "mobile", "address", "city", "state",
    "country", "pincode", "postal_code",
})
CATEGORY_IDENTITY_NAMES = frozenset({
    "aadhar_number", "pan_number", "passport_number", "driving_license",
})
EDUCATIONAL_KEYWORDS = ("education", "school", "college", "degree")
TABLE_CATEGORY_OVERRIDES = {
    "personal_details": "Personal",
    "documents": "System",
}
REQUIRED_TABLES = frozenset({"personal_details"})

# ---------- Enums & patterns ----------

GENDER_VALUES = ["Male", "Female", "Other"]
BLOOD_GROUP_VALUES = ["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]
STATUS_VALUES = ["pending", "verified", "rejected", "active", "inactive"]

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PHONE_PATTERN = r"^[+]?[0-9]{10,15}$"
AADHAR_PATTERN = r"^[0-9]{12}$"
PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]{1}$"

_MAX_LENGTH_RE = re.compile(r"\((\d+)\)")


def classify_data_type(native_type: str) -> DataType:
    """Map a native column type onto the form builder's data types; first match wins."""
    t = (native_type or "").lower()
    if "int" in t:
        return "INTEGER"
    if "real" in t or "float" in t or "double" in t:
        return "REAL"
    if "numeric" in t or "decimal" in t:
        return "NUMERIC"
    if "bool" in t:
        return "BOOLEAN"
    if "date" in t or "time" in t:
        return "DATE"
    return "TEXT"


def display_name(column_name: str) -> str:
    """'date_of_birth' -> 'Date Of Birth'."""
    return " ".join(part[:1].upper() + part[1:] for part in column_name.split("_"))


def is_system_field(column_name: str) -> bool:
    name = column_name.lower()
    return name in SYSTEM_FIELDS or name.endswith("_id")


def is_excluded_from_form_builder(column_name: str) -> bool:
    """True for columns the catalog never offers to the form builder."""
    name = column_name.lower()
    if name in FORM_BUILDER_EXCLUDED_FIELDS:
        return True
    return name.endswith("_id") and name != "client_id"


def is_eligible_for_form_builder(column_name: str) -> bool:
    return not is_excluded_from_form_builder(column_name)


def categorize(column_name: str, native_type: str, table_name: str) -> str:
    name = column_name.lower()

    if name in CATEGORY_SYSTEM_NAMES or name.endswith("_id"):
        return "System"
    if name in CATEGORY_PERSONAL_NAMES:
        return "Personal"
    if name in CATEGORY_CONTACT_NAMES:
        return "Contact"
    if name in CATEGORY_IDENTITY_NAMES:
        return "Identity"
    if any(keyword in name for keyword in EDUCATIONAL_KEYWORDS):
        return "Educational"

    return TABLE_CATEGORY_OVERRIDES.get(table_name, "Other")


def extract_max_length(native_type: str) -> Optional[int]:
    match = _MAX_LENGTH_RE.search(native_type or "")
    return int(match.group(1)) if match else None


def extract_enum_values(column_name: str) -> Optional[List[str]]:
    name = column_name.lower()
    if name == "gender":
        return list(GENDER_VALUES)
    if name == "blood_group":
        return list(BLOOD_GROUP_VALUES)
    if "status" in name:
        return list(STATUS_VALUES)
    return None


def extract_pattern(column_name: str) -> Optional[str]:
    name = column_name.lower()
    if "email" in name:
        return EMAIL_PATTERN
    if "phone" in name or "mobile" in name:
        return PHONE_PATTERN
    if name == "aadhar_number":
        return AADHAR_PATTERN
    if name == "pan_number":
        return PAN_PATTERN
    return None


def describe(column_name: str, native_type: str) -> str:
    return f"{display_name(column_name)} ({classify_data_type(native_type)})"


def is_required_table(table_name: str) -> bool:
    return table_name in REQUIRED_TABLES


def column_to_field(column: ColumnDefinition, table_schema: TableSchema) -> AvailableField:
    """Build the full AvailableField for one column of `table_schema`."""
    fk = column.foreign_key
    return AvailableField(
        id=f"{table_schema.table_name}.{column.name}",
        table_name=table_schema.table_name,
        column_name=column.name,
        display_name=display_name(column.name),
        data_type=classify_data_type(column.type),
        is_nullable=column.nullable,
        default_value=None,
        constraints=FieldConstraints(
            max_length=extract_max_length(column.type),
            enum_values=extract_enum_values(column.name),
            pattern=extract_pattern(column.name),
            is_required=not column.nullable,
            is_primary_key=column.primary_key,
            is_foreign_key=fk is not None,
            foreign_key_reference=(
                ForeignKeyReference(table=fk.referenced_table, column=fk.referenced_column)
                if fk else None
            ),
        ),
        metadata=FieldMetadata(
            description=describe(column.name, column.type),
            category=categorize(column.name, column.type, table_schema.table_name),
            is_system_field=is_system_field(column.name),
            last_modified=datetime.now(timezone.utc).isoformat(),
            table_display_name=table_schema.display_name,
        ),
    )
