import logging
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.core.database import engine as default_engine
from app.core.exceptions import MigrationError
from app.models import Base
from app.discovery import (
    CompatibilityChecker,
    FieldCache,
    FieldCatalogService,
    LegacySchemaChecker,
    SqlAlchemySchemaProvider,
)
from app.services import PerformanceMonitor
from settings import FieldDiscoveryConfig, PerformanceConfig

logger = logging.getLogger("uvicorn")


class ApplicationInitializer:
    """Creates the app's own tables, checks the profile schema and builds the services."""

    def __init__(self, engine: Engine = default_engine):
        self.engine = engine

    def initialize_database(self) -> dict:
        logger.info("🔍 Checking database initialization status...")
        try:
            logger.info("🛠️ Creating database schema...")
            Base.metadata.create_all(bind=self.engine)
            tables = inspect(self.engine).get_table_names()
            logger.info(f"✅ Database schema ready ({len(tables)} tables)")
            return {"database_ready": True, "table_count": len(tables)}
        except Exception as e:
            logger.error(f"❌ Database initialization failed: {e}")
            return {"database_ready": False, "table_count": 0, "error": str(e)}

    def check_legacy_schema(self) -> dict:
        """Run the student_id / client_id check; failures are reported, never fatal."""
        logger.info("🔍 Running backward compatibility check...")
        try:
            report = LegacySchemaChecker(self.engine).perform_startup_check()
            return {"legacy_check_completed": True, **report}
        except MigrationError as e:
            logger.error(f"❌ {e.message}")
            return {"legacy_check_completed": False, "error": e.message}

    def build_services(self, state) -> dict:
        """Attach the discovery services and the performance monitor to `state`."""
        provider = SqlAlchemySchemaProvider(self.engine)
        state.schema_provider = provider
        state.field_catalog = FieldCatalogService(provider, FieldCache(ttl_ms=FieldDiscoveryConfig.CACHE_TTL_MS))
        state.compatibility_checker = CompatibilityChecker(provider)
        state.performance_monitor = PerformanceMonitor(
            max_stored_metrics=PerformanceConfig.MAX_STORED_METRICS,
            slow_threshold_ms=PerformanceConfig.SLOW_OPERATION_MS,
        )
        logger.info("✅ Field discovery and monitoring services ready")
        return {"services_ready": True}

    def get_initialization_summary(self, state) -> dict:
        catalog = getattr(state, "field_catalog", None)
        monitor = getattr(state, "performance_monitor", None)
        legacy = getattr(state, "legacy_schema_report", {}) or {}
        return {
            "database": {"url_dialect": self.engine.dialect.name},
            "cache": catalog.cache.info() if catalog else {},
            "metrics_stored": len(monitor) if monitor else 0,
            "legacy_schema": {
                "checked": legacy.get("legacy_check_completed", False),
                "has_legacy_schema": legacy.get("detection", {}).get("has_legacy_schema", False),
                "recommendations": legacy.get("recommendations", []),
            },
        }
