# backend/app/discovery/__init__.py
from .field_cache import FieldCache, ALL_FIELDS_KEY
from .field_catalog import FieldCatalogService
from .compatibility import CompatibilityChecker
from .schema_provider import TableSchemaProvider, SqlAlchemySchemaProvider
from .legacy_schema import LegacySchemaChecker

__all__ = [
    "FieldCache",
    "ALL_FIELDS_KEY",
    "FieldCatalogService",
    "CompatibilityChecker",
    "TableSchemaProvider",
    "SqlAlchemySchemaProvider",
    "LegacySchemaChecker",
]
