# backend/app/api/deps.py
from fastapi import Request

from app.discovery import CompatibilityChecker, FieldCatalogService, SqlAlchemySchemaProvider
from app.services import PerformanceMonitor


# ---------- Services built at startup (see app.initialization) ----------

def get_schema_provider(request: Request) -> SqlAlchemySchemaProvider:
    return request.app.state.schema_provider

def get_field_catalog(request: Request) -> FieldCatalogService:
    return request.app.state.field_catalog

def get_compatibility_checker(request: Request) -> CompatibilityChecker:
    return request.app.state.compatibility_checker

def get_performance_monitor(request: Request) -> PerformanceMonitor:
    return request.app.state.performance_monitor
