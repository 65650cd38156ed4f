# backend/app/services/profile_data.py
"""
Client profile values addressed explicitly by (category, field).

A category is usually a profile table (personal_details, documents, ...) and
a field one of its columns. The declared ProfileSchema says which keys exist
and what type each value must have; nothing is inferred from value shapes.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from app.core.exceptions import InputValidationError, ValueValidationError
from app.discovery.field_normalizer import classify_data_type
from app.schemas.table import TableSchema
from app.services.validation import ValidationService, validation_service

# category -> field -> "text" | "numeric" | "date" | "boolean"
ProfileSchema = Dict[str, Dict[str, str]]

IGNORED_ROW_COLUMNS = frozenset({"id", "client_id", "created_at", "updated_at"})

_EXPECTED_BY_DATA_TYPE = {
    "INTEGER": "numeric",
    "REAL": "numeric",
    "NUMERIC": "numeric",
    "DATE": "date",
    "BOOLEAN": "boolean",
    "TEXT": "text",
}

logger = logging.getLogger("uvicorn")


def schema_from_tables(table_schemas: Iterable[TableSchema]) -> ProfileSchema:
    """Declare every non-bookkeeping column of the given tables."""
    return {
        t.table_name: {
            c.name: _EXPECTED_BY_DATA_TYPE[classify_data_type(c.type)]
            for c in t.columns
            if c.name not in IGNORED_ROW_COLUMNS
        }
        for t in table_schemas
    }


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return value


class ProfileData:
    def __init__(self, schema: ProfileSchema, validator: Optional[ValidationService] = None):
        self.schema = schema
        self.validator = validator or validation_service
        self._values: Dict[Tuple[str, str], Any] = {}

    def _expected_type(self, category: str, field: str) -> str:
        fields = self.schema.get(category)
        if fields is None or field not in fields:
            raise InputValidationError(
                f"Unknown profile field '{category}.{field}'",
                details={"category": category, "field": field},
            )
        return fields[field]

    def set(self, category: str, field: str, value: Any) -> None:
        """Store a value after checking it against the declared type."""
        expected = self._expected_type(category, field)
        value = _plain(value)
        if value is None:
            self._values[(category, field)] = None
            return

        if expected == "numeric":
            result = self.validator.validate_numeric(value, field)
        elif expected == "date":
            result = self.validator.validate_date(value, field)
        elif expected == "boolean":
            result = self.validator.validate_boolean(value, field)
        else:
            self._values[(category, field)] = str(value)
            return

        self._values[(category, field)] = self.validator.ensure(result, field, expected, value)

    def get(self, category: str, field: str, default: Any = None) -> Any:
        return self._values.get((category, field), default)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def to_flat(self) -> Dict[str, Any]:
        """Render as the 'category.field' map used by the compatibility checks."""
        return {f"{category}.{field}": value for (category, field), value in self._values.items()}

    @classmethod
    def from_rows(
        cls,
        schema: ProfileSchema,
        rows_by_table: Mapping[str, Mapping[str, Any]],
        validator: Optional[ValidationService] = None,
        strict: bool = True,
    ) -> "ProfileData":
        """
        Build a profile from one row per table; undeclared columns are skipped.

        With strict=False a stored value that fails its declared type is kept
        as text and logged instead of raising.
        """
        profile = cls(schema, validator)
        for table_name, row in rows_by_table.items():
            declared = schema.get(table_name, {})
            for column, value in row.items():
                if column in IGNORED_ROW_COLUMNS or column not in declared:
                    continue
                try:
                    profile.set(table_name, column, value)
                except ValueValidationError as e:
                    if strict:
                        raise
                    logger.warning(f"⚠️ Keeping stored value of {table_name}.{column} as text: {e.message}")
                    profile._values[(table_name, column)] = str(value)
        return profile
