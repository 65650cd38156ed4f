# backend/app/discovery/schema_provider.py
"""
Table schema provider: the discovery layer's only view of the live database.

The catalog and the compatibility checker depend on the `TableSchemaProvider`
protocol. `SqlAlchemySchemaProvider` implements it over `sqlalchemy.inspect`;
inspection is blocking, so every call is pushed to Starlette's threadpool.
"""

import logging
import time
from typing import List, Optional, Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.discovery.field_normalizer import display_name, is_required_table
from app.schemas.table import ColumnDefinition, ForeignKeyInfo, TableSchema
from settings import DatabaseConfig

logger = logging.getLogger("uvicorn")


class TableSchemaProvider(Protocol):
    async def list_tables(self) -> List[str]: ...

    async def get_table_schema(self, table_name: str) -> Optional[TableSchema]: ...

    async def table_exists(self, table_name: str) -> bool: ...


def is_discoverable_table(table_name: str) -> bool:
    """Hide engine bookkeeping, scratch copies and the app's own tables."""
    if table_name in DatabaseConfig.INTERNAL_TABLES:
        return False
    if table_name.startswith(DatabaseConfig.SKIPPED_TABLE_PREFIXES):
        return False
    return not table_name.endswith(DatabaseConfig.SKIPPED_TABLE_SUFFIXES)


def order_profile_tables(tables: List[str]) -> List[str]:
    """personal_details first, documents last, the rest alphabetically."""
    middle = sorted(t for t in tables if t not in ("personal_details", "documents"))
    ordered = ["personal_details"] if "personal_details" in tables else []
    ordered.extend(middle)
    if "documents" in tables:
        ordered.append("documents")
    return ordered


class SqlAlchemySchemaProvider:
    """Schema provider backed by SQLAlchemy's runtime inspector."""

    def __init__(self, engine: Engine):
        self.engine = engine

    # ---------- Sync helpers (run in threadpool) ----------

    def _list_tables_sync(self) -> List[str]:
        names = inspect(self.engine).get_table_names()
        return sorted(n for n in names if is_discoverable_table(n))

    def _table_exists_sync(self, table_name: str) -> bool:
        return inspect(self.engine).has_table(table_name)

    def _get_table_schema_sync(self, table_name: str) -> Optional[TableSchema]:
        inspector = inspect(self.engine)
        if not inspector.has_table(table_name):
            return None

        columns_raw = inspector.get_columns(table_name)
        if not columns_raw:
            logger.warning(f"⚠️ No columns found for table '{table_name}'")
            return None

        pk_constraint = inspector.get_pk_constraint(table_name) or {}
        pk_columns = set(pk_constraint.get("constrained_columns") or [])

        foreign_keys = {}
        for fk in inspector.get_foreign_keys(table_name):
            referred_table = fk.get("referred_table")
            if not referred_table:
                continue
            for source_col, target_col in zip(fk.get("constrained_columns") or [],
                                              fk.get("referred_columns") or []):
                foreign_keys[source_col] = ForeignKeyInfo(
                    referenced_table=referred_table,
                    referenced_column=target_col,
                )

        columns = [
            ColumnDefinition(
                name=col["name"],
                type=str(col["type"]),
                nullable=bool(col.get("nullable", True)),
                primary_key=col["name"] in pk_columns,
                foreign_key=foreign_keys.get(col["name"]),
            )
            for col in columns_raw
        ]

        return TableSchema(
            table_name=table_name,
            display_name=display_name(table_name),
            columns=columns,
            is_required=is_required_table(table_name),
        )

    def _profile_tables_sync(self) -> List[str]:
        inspector = inspect(self.engine)
        profile_tables = []
        for table_name in self._list_tables_sync():
            try:
                if any(c["name"] == "client_id" for c in inspector.get_columns(table_name)):
                    profile_tables.append(table_name)
            except Exception as e:
                logger.warning(f"⚠️ Could not check client_id column for table '{table_name}': {e}")
        return order_profile_tables(profile_tables)

    # ---------- Async contract ----------

    async def list_tables(self) -> List[str]:
        start = time.perf_counter()
        tables = await run_in_threadpool(self._list_tables_sync)
        logger.info(f"🔍 Found {len(tables)} available tables in {(time.perf_counter() - start) * 1000:.1f}ms")
        return tables

    async def table_exists(self, table_name: str) -> bool:
        if not table_name or not isinstance(table_name, str):
            logger.warning(f"⚠️ Invalid table name provided: {table_name!r}")
            return False
        if not is_discoverable_table(table_name):
            return False
        return await run_in_threadpool(self._table_exists_sync, table_name)

    async def get_table_schema(self, table_name: str) -> Optional[TableSchema]:
        if not table_name or not isinstance(table_name, str) or not table_name.strip():
            logger.warning(f"⚠️ Invalid table name provided: {table_name!r}")
            return None
        if not is_discoverable_table(table_name):
            logger.warning(f"⚠️ Table '{table_name}' is not available for discovery")
            return None
        schema = await run_in_threadpool(self._get_table_schema_sync, table_name)
        if schema is None:
            logger.warning(f"⚠️ Table '{table_name}' does not exist")
        return schema

    async def profile_tables(self) -> List[str]:
        """Tables with a client_id column, in display order."""
        tables = await run_in_threadpool(self._profile_tables_sync)
        logger.info(f"🔍 Found {len(tables)} profile-related tables: {tables}")
        return tables
