# backend/app/schemas/table.py
from typing import List, Optional

from app.schemas.base import CamelModel


class ForeignKeyInfo(CamelModel):
    referenced_table: str
    referenced_column: str


class ColumnDefinition(CamelModel):
    """One column as reported by the schema provider."""
    name: str
    type: str  # native type string, e.g. "VARCHAR(255)"
    nullable: bool = True
    primary_key: bool = False
    foreign_key: Optional[ForeignKeyInfo] = None


class TableSchema(CamelModel):
    table_name: str
    display_name: str
    columns: List[ColumnDefinition]
    is_required: bool = False

    def get_column(self, name: str) -> Optional[ColumnDefinition]:
        return next((c for c in self.columns if c.name == name), None)


class TableListResponse(CamelModel):
    tables: List[str]
    count: int


class TableExistsResponse(CamelModel):
    table_name: str
    exists: bool
