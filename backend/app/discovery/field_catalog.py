# backend/app/discovery/field_catalog.py
import locale
import logging
import time
from typing import Dict, List, Optional

from app.core.exceptions import (
    AppException,
    FieldDiscoveryError,
    FieldNotFoundError,
    InputValidationError,
)
from app.discovery import field_normalizer as normalizer
from app.discovery.field_cache import ALL_FIELDS_KEY, FieldCache
from app.discovery.schema_provider import TableSchemaProvider
from app.schemas.field import AvailableField, FieldMetadata
from settings import FieldDiscoveryConfig

logger = logging.getLogger("uvicorn")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _display_sort_key(field: AvailableField) -> str:
    return locale.strxfrm(field.display_name.casefold())


class FieldCatalogService:
    """User-facing operations over every field the live schema offers the form builder."""

    def __init__(self, schema_provider: TableSchemaProvider, cache: Optional[FieldCache] = None):
        self.provider = schema_provider
        self.cache = cache if cache is not None else FieldCache()

    async def list_all_fields(self) -> List[AvailableField]:
        cached = self.cache.get(ALL_FIELDS_KEY)
        if cached is not None:
            logger.info(f"✅ Retrieved {len(cached)} fields from cache")
            return cached

        start = time.perf_counter()
        try:
            table_names = await self.provider.list_tables()
        except Exception as e:
            logger.error(f"❌ Error discovering tables: {e}")
            raise FieldDiscoveryError("discover available fields", e) from e

        all_fields: List[AvailableField] = []
        for table_name in table_names:
            try:
                all_fields.extend(await self.list_fields_for_table(table_name))
            except Exception as e:
                logger.warning(f"⚠️ Error getting fields for table {table_name}: {e}")

        self.cache.set_all(all_fields)
        logger.info(
            f"🔍 Discovered {len(all_fields)} fields from {len(table_names)} tables in {_elapsed_ms(start):.1f}ms"
        )
        return all_fields

    async def list_fields_for_table(self, table_name: str) -> List[AvailableField]:
        if not table_name or not isinstance(table_name, str) or not table_name.strip():
            raise InputValidationError("Table name is required", details={"tableName": table_name})

        cached = self.cache.get(table_name)
        if cached is not None:
            logger.info(f"✅ Retrieved {len(cached)} fields for {table_name} from cache")
            return cached

        start = time.perf_counter()
        try:
            table_schema = await self.provider.get_table_schema(table_name)
        except Exception as e:
            logger.error(f"❌ Error getting fields for table {table_name}: {e}")
            raise FieldDiscoveryError(f"get fields for table '{table_name}'", e) from e

        if table_schema is None:
            logger.warning(f"⚠️ Table '{table_name}' not found or inaccessible")
            return []

        fields: List[AvailableField] = []
        for column in table_schema.columns:
            if normalizer.is_excluded_from_form_builder(column.name):
                logger.debug(f"Skipping system field: {column.name}")
                continue
            try:
                fields.append(normalizer.column_to_field(column, table_schema))
            except Exception as e:
                logger.warning(f"⚠️ Error converting column {column.name} in table {table_name}: {e}")

        self.cache.set(table_name, fields)
        logger.info(f"🔍 Retrieved {len(fields)} fields for table '{table_name}' in {_elapsed_ms(start):.1f}ms")
        return fields

    async def field_metadata(self, table_name: str, column_name: str) -> FieldMetadata:
        """Strict lookup: a missing table or column is an error, not an empty result."""
        if not table_name or not column_name:
            raise InputValidationError(
                "Table name and column name are required",
                details={"tableName": table_name, "columnName": column_name},
            )

        try:
            table_schema = await self.provider.get_table_schema(table_name)
        except Exception as e:
            logger.error(f"❌ Error getting field metadata for {table_name}.{column_name}: {e}")
            raise FieldDiscoveryError(f"get field metadata for '{table_name}.{column_name}'", e) from e

        if table_schema is None:
            raise FieldNotFoundError(f"Table '{table_name}' not found", table_name)

        column = table_schema.get_column(column_name)
        if column is None:
            raise FieldNotFoundError(
                f"Column '{column_name}' not found in table '{table_name}'", table_name, column_name
            )

        return normalizer.column_to_field(column, table_schema).metadata

    async def group_by_table(self) -> Dict[str, List[AvailableField]]:
        start = time.perf_counter()
        try:
            table_names = await self.provider.list_tables()
        except Exception as e:
            logger.error(f"❌ Error getting fields grouped by table: {e}")
            raise FieldDiscoveryError("get fields grouped by table", e) from e

        grouped: Dict[str, List[AvailableField]] = {}
        for table_name in table_names:
            try:
                grouped[table_name] = await self.list_fields_for_table(table_name)
            except Exception as e:
                logger.warning(f"⚠️ Error getting fields for table {table_name}: {e}")
                grouped[table_name] = []

        total = sum(len(fields) for fields in grouped.values())
        logger.info(f"🔍 Retrieved {total} fields from {len(table_names)} tables in {_elapsed_ms(start):.1f}ms")
        return grouped

    async def group_by_category(self) -> Dict[str, List[AvailableField]]:
        start = time.perf_counter()
        try:
            all_fields = await self.list_all_fields()
        except AppException:
            raise
        except Exception as e:
            raise FieldDiscoveryError("get fields by category", e) from e

        buckets: Dict[str, List[AvailableField]] = {}
        for field in all_fields:
            buckets.setdefault(field.metadata.category, []).append(field)

        ordered: Dict[str, List[AvailableField]] = {}
        for category in FieldDiscoveryConfig.CATEGORY_ORDER:
            if category in buckets:
                ordered[category] = sorted(buckets[category], key=_display_sort_key)
        # Extra categories keep first-seen order
        for category, fields in buckets.items():
            if category not in ordered:
                ordered[category] = sorted(fields, key=_display_sort_key)

        logger.info(
            f"🔍 Grouped {len(all_fields)} fields into {len(ordered)} categories in {_elapsed_ms(start):.1f}ms"
        )
        return ordered

    async def search(self, query: str, table_filter: Optional[str] = None) -> List[AvailableField]:
        if not query or not query.strip():
            return []

        needle = query.strip().lower()
        if table_filter and table_filter.strip():
            candidates = await self.list_fields_for_table(table_filter)
        else:
            candidates = await self.list_all_fields()

        def matches(field: AvailableField) -> bool:
            haystacks = (
                field.column_name,
                field.display_name,
                field.table_name,
                field.metadata.category,
                field.metadata.description or "",
            )
            return any(needle in h.lower() for h in haystacks)

        results = [f for f in candidates if matches(f)]
        logger.info(f"🔍 Search '{query}' matched {len(results)} fields")
        return results

    def clear_cache(self) -> None:
        self.cache.invalidate()
