# backend/app/discovery/legacy_schema.py
"""Startup detection of tables still keyed by the legacy student_id column."""

import logging
from datetime import datetime, timezone

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.core.exceptions import MigrationError

logger = logging.getLogger("uvicorn")

LEGACY_COLUMN = "student_id"
CURRENT_COLUMN = "client_id"


class LegacySchemaChecker:
    """Detects student_id vs client_id schemas and logs migration instructions."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def _column_names(self, inspector, table_name: str) -> set:
        return {c["name"] for c in inspector.get_columns(table_name)}

    def detect(self) -> dict:
        result = {
            "has_legacy_schema": False,
            "tables_with_student_id": [],
            "tables_with_client_id": [],
            "mixed_schema_tables": [],
        }
        try:
            inspector = inspect(self.engine)
            for table_name in sorted(inspector.get_table_names()):
                if table_name.startswith("sqlite_"):
                    continue
                columns = self._column_names(inspector, table_name)
                has_legacy = LEGACY_COLUMN in columns
                has_current = CURRENT_COLUMN in columns

                if has_legacy and has_current:
                    result["mixed_schema_tables"].append(table_name)
                    result["has_legacy_schema"] = True
                elif has_legacy:
                    result["tables_with_student_id"].append(table_name)
                    result["has_legacy_schema"] = True
                elif has_current:
                    result["tables_with_client_id"].append(table_name)
            return result
        except Exception as e:
            logger.error(f"❌ Error detecting legacy schema: {e}")
            raise MigrationError("schema detection", f"Failed to detect legacy schema: {e}") from e

    def verify_client_id_priority(self) -> dict:
        result = {
            "personal_details_uses_client_id": False,
            "documents_uses_client_id": False,
            "all_new_tables_use_client_id": True,
            "issues": [],
        }
        try:
            inspector = inspect(self.engine)
            table_names = set(inspector.get_table_names())

            if "personal_details" in table_names:
                uses = CURRENT_COLUMN in self._column_names(inspector, "personal_details")
                result["personal_details_uses_client_id"] = uses
                if not uses:
                    result["issues"].append("personal_details table does not use client_id column")
            else:
                result["issues"].append("personal_details table does not exist")

            if "documents" in table_names:
                uses = CURRENT_COLUMN in self._column_names(inspector, "documents")
                result["documents_uses_client_id"] = uses
                if not uses:
                    result["issues"].append("documents table does not use client_id column")

            for table_name in sorted(table_names - {"personal_details", "documents"}):
                if table_name.startswith("sqlite_"):
                    continue
                columns = self._column_names(inspector, table_name)
                if LEGACY_COLUMN in columns and CURRENT_COLUMN not in columns:
                    result["all_new_tables_use_client_id"] = False
                    result["issues"].append(f"Table '{table_name}' uses student_id instead of client_id")

            if result["issues"]:
                logger.warning("⚠️ Some tables are not using client_id schema:")
                for issue in result["issues"]:
                    logger.warning(f"  • {issue}")
            else:
                logger.info("✅ All tables are using client_id schema")
            return result
        except Exception as e:
            logger.error(f"❌ Error verifying client_id priority: {e}")
            raise MigrationError(
                "client_id priority verification", f"Failed to verify client_id priority: {e}"
            ) from e

    def log_migration_warnings(self, detection: dict) -> None:
        if not detection["has_legacy_schema"]:
            logger.info("✅ No legacy student_id schema detected")
            return

        logger.warning("⚠️ LEGACY SCHEMA DETECTED - MIGRATION REQUIRED")
        if detection["tables_with_student_id"]:
            logger.warning("Tables using legacy student_id column:")
            for table in detection["tables_with_student_id"]:
                logger.warning(f"  • {table}")
        if detection["mixed_schema_tables"]:
            logger.warning("Tables with BOTH student_id and client_id columns (incomplete migration):")
            for table in detection["mixed_schema_tables"]:
                logger.warning(f"  • {table}")
        if detection["tables_with_client_id"]:
            logger.warning("Tables already using client_id:")
            for table in detection["tables_with_client_id"]:
                logger.warning(f"  • {table}")

        logger.warning("📋 To migrate your database:")
        logger.warning("   1. Back up the database before proceeding.")
        logger.warning("   2. Rename student_id to client_id in every listed table.")
        logger.warning("   3. Restart the server and check that no legacy tables are reported.")
        logger.warning("💡 New operations use client_id; legacy tables keep working until migrated.")

    def perform_startup_check(self) -> dict:
        detection = self.detect()
        priority = self.verify_client_id_priority()
        self.log_migration_warnings(detection)

        recommendations = []
        if detection["has_legacy_schema"]:
            recommendations += [
                "Run migration script to convert student_id to client_id",
                "Backup database before migration",
            ]
        if priority["issues"]:
            recommendations += [
                "Ensure all new tables use client_id schema",
                "Update table creation logic to use client_id",
            ]

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "detection": detection,
            "priority_check": priority,
            "recommendations": recommendations,
        }
