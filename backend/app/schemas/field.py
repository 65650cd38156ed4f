# backend/app/schemas/field.py
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel

DataType = Literal["TEXT", "INTEGER", "DATE", "BOOLEAN", "REAL", "NUMERIC"]


class ForeignKeyReference(CamelModel):
    table: str
    column: str


class FieldConstraints(CamelModel):
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    enum_values: Optional[List[str]] = None
    pattern: Optional[str] = None
    is_required: bool
    is_primary_key: bool
    is_foreign_key: bool
    foreign_key_reference: Optional[ForeignKeyReference] = None


class FieldMetadata(CamelModel):
    description: Optional[str] = None
    category: str
    is_system_field: bool
    last_modified: str  # ISO-8601
    table_display_name: str


class AvailableField(CamelModel):
    """A column of a live table, normalized for the form builder."""
    id: str  # "<table>.<column>"
    table_name: str
    column_name: str
    display_name: str
    data_type: DataType
    is_nullable: bool
    default_value: Any = None
    constraints: FieldConstraints
    metadata: FieldMetadata


class CompatibilityResult(CamelModel):
    is_compatible: bool = True
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


# ---------- Responses ----------

class FieldListResponse(CamelModel):
    fields: List[AvailableField]
    count: int


class TableFieldsResponse(CamelModel):
    table_name: str
    fields: List[AvailableField]
    count: int


class GroupedFieldsSummary(CamelModel):
    total_groups: int
    total_fields: int
    counts: Dict[str, int]


class GroupedFieldsResponse(CamelModel):
    groups: Dict[str, List[AvailableField]]
    summary: GroupedFieldsSummary


class FieldSearchResponse(CamelModel):
    query: str
    table_filter: Optional[str] = None
    fields: List[AvailableField]
    count: int
